"""Exceptions raised while preparing an AWS IoT WebSocket connection."""

from typing import Optional


class IotWebSocketError(Exception):
    """Base exception for the signer and its collaborators.

    Attributes:
        stage: Name of the stage that failed ("credentials", "endpoint",
            "trust" or "options")
        message: Human readable description
    """

    stage = "unknown"

    def __init__(self, message: str, stage: Optional[str] = None):
        self.message = message
        if stage is not None:
            self.stage = stage
        super().__init__(f"[{self.stage}] {message}")


class CredentialUnavailable(IotWebSocketError):
    """The credential source could not supply an access key and secret."""

    stage = "credentials"


class EndpointUnresolved(IotWebSocketError):
    """The broker hostname could not be discovered."""

    stage = "endpoint"


class TrustConfigurationError(IotWebSocketError):
    """The TLS trust store could not be built."""

    stage = "trust"


class ConfigurationError(IotWebSocketError):
    """Connection options are missing or contradict each other."""

    stage = "options"
