"""Configuration for the IoT WebSocket signer."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .options import ConnectionOptions

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


@dataclass
class SignerConfig:
    """Environment-driven settings for the CLI and for ConnectionOptions."""

    # AWS IoT configuration
    endpoint: str = ""
    aws_region: Optional[str] = None
    profile_name: Optional[str] = None
    ca_file: Optional[str] = None

    # MQTT configuration
    client_id: str = ""
    keepalive: int = 60

    # OpenTelemetry configuration
    otel_endpoint: str = ""
    otel_console_export: bool = False

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "SignerConfig":
        """Load configuration from environment variables."""
        return cls(
            endpoint=os.getenv("AWS_IOT_ENDPOINT", ""),
            aws_region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or None,
            profile_name=os.getenv("AWS_PROFILE") or None,
            ca_file=os.getenv("AWS_IOT_CA_FILE") or None,
            client_id=os.getenv("AWS_IOT_CLIENT_ID", ""),
            keepalive=_int_env("AWS_IOT_KEEPALIVE", cls.keepalive),
            otel_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""),
            otel_console_export=os.getenv("OTEL_CONSOLE_EXPORT", "").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )

    def to_connection_options(self) -> ConnectionOptions:
        return ConnectionOptions(
            endpoint=self.endpoint,
            region=self.aws_region,
            profile_name=self.profile_name,
            ca_file=self.ca_file,
            client_id=self.client_id,
            keepalive=self.keepalive,
        )
