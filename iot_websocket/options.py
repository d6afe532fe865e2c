"""
Connection options for AWS IoT Core MQTT clients.

Turns a plain ConnectionOptions record into resolved broker settings and,
optionally, a configured paho MQTT client. Two modes exist:

- WebSocket (default): ``wss://{endpoint}/mqtt?<SigV4 query>`` on port 443,
  authenticated by IAM credentials.
- Client certificate: ``mqtts://{endpoint}:{port}`` (default 8883),
  authenticated by mutual TLS.

Usage:
    from iot_websocket.options import ConnectionOptions, resolve_connection, create_mqtt_client

    options = ConnectionOptions(region="us-east-1")       # endpoint discovered
    settings = resolve_connection(options)
    client = create_mqtt_client(settings, client_id="sensor-1")
    client.connect(settings.host, settings.port, keepalive=options.keepalive)
"""

import datetime
import logging
import ssl
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit

import boto3
import paho.mqtt.client as mqtt
from botocore.exceptions import BotoCoreError

from .auth import AWSCredentials, IotWebSocketSigner, SessionCredentialProvider, StaticCredentialProvider
from .auth.credentials import resolve_region
from .endpoint import DiscoveredEndpoint, StaticEndpoint
from .errors import ConfigurationError, CredentialUnavailable
from .tracing import traced
from .trust import create_ssl_context

logger = logging.getLogger(__name__)

WEBSOCKET_PORT = 443
MQTTS_PORT = 8883


@dataclass
class ConnectionOptions:
    """Configuration for an AWS IoT MQTT connection.

    Unset fields are resolved from the ambient AWS configuration: credentials
    and region from the boto3 provider chain, endpoint via DescribeEndpoint.
    """
    endpoint: str = ""
    region: Optional[str] = None
    profile_name: Optional[str] = None
    credentials: Optional[AWSCredentials] = None
    ca_file: Optional[str] = None
    client_cert_file: Optional[str] = None
    client_key_file: Optional[str] = None
    # Only valid with a client certificate; 0 means the mode's default port
    port: int = 0
    client_id: str = ""
    keepalive: int = 60
    clean_session: bool = True

    @property
    def uses_client_certificate(self) -> bool:
        return bool(self.client_cert_file)

    def validate(self) -> None:
        """
        Check that the options do not contradict each other.

        Raises:
            ConfigurationError: If the combination cannot be used
        """
        if self.port and not self.uses_client_certificate:
            raise ConfigurationError("port can only be specified when using client certificates for MQTT")
        if self.port < 0 or self.port > 65535:
            raise ConfigurationError(f"Invalid port {self.port}")
        if self.client_cert_file and not self.client_key_file:
            raise ConfigurationError("client_cert_file requires client_key_file")
        if self.client_key_file and not self.client_cert_file:
            raise ConfigurationError("client_key_file requires client_cert_file")
        if self.keepalive <= 0:
            raise ConfigurationError(f"keepalive must be positive, got {self.keepalive}")


@dataclass
class MqttConnectionSettings:
    """Resolved broker address and transport settings."""
    broker_url: str = field(repr=False)
    host: str
    port: int
    transport: str
    path: str = field(default="/mqtt", repr=False)
    ssl_context: Optional[ssl.SSLContext] = None


@traced("options.resolve_connection")
def resolve_connection(
    options: ConnectionOptions,
    now: Optional[datetime.datetime] = None,
    session: Optional[boto3.Session] = None,
) -> MqttConnectionSettings:
    """
    Resolve options into concrete broker settings.

    Region, endpoint and (in WebSocket mode) credentials are each resolved
    once, in that order. botocore failures are wrapped in the package errors.

    Args:
        options: Connection options
        now: Instant to presign at (defaults to the current time)
        session: Optional boto3 session for ambient lookups

    Returns:
        MqttConnectionSettings for the chosen mode

    Raises:
        ConfigurationError: If options are inconsistent or no region is set
        CredentialUnavailable: If credentials cannot be obtained
        EndpointUnresolved: If endpoint discovery fails
        TrustConfigurationError: If the TLS context cannot be built
    """
    options.validate()

    needs_session = (
        options.profile_name
        or not options.endpoint
        or (not options.uses_client_certificate and not (options.region and options.credentials))
    )
    if session is None and needs_session:
        try:
            session = boto3.Session(profile_name=options.profile_name) if options.profile_name else boto3.Session()
        except BotoCoreError as e:
            logger.error("Could not create AWS session for profile %s: %s", options.profile_name, e)
            raise CredentialUnavailable(f"Failed to load AWS profile: {e}") from e

    if options.endpoint:
        endpoint_strategy = StaticEndpoint(options.endpoint)
        region = options.region
    else:
        region = resolve_region(options.region, session)
        endpoint_strategy = DiscoveredEndpoint(region, session=session)
    host = endpoint_strategy()

    if options.uses_client_certificate:
        ssl_context = create_ssl_context(
            ca_file=options.ca_file,
            certfile=options.client_cert_file,
            keyfile=options.client_key_file,
        )
        port = options.port or MQTTS_PORT
        logger.info("Using client certificate connection to %s:%d", host, port)
        return MqttConnectionSettings(
            broker_url=f"mqtts://{host}:{port}",
            host=host,
            port=port,
            transport="tcp",
            ssl_context=ssl_context,
        )

    region = resolve_region(region, session)
    ssl_context = create_ssl_context(ca_file=options.ca_file)

    if options.credentials is not None:
        credential_provider = StaticCredentialProvider(options.credentials)
    else:
        credential_provider = SessionCredentialProvider(session=session)

    signer = IotWebSocketSigner(region=region, credentials=credential_provider)
    url = signer.presign_url(host, now=now)

    parts = urlsplit(url)
    logger.info("Using WebSocket connection to %s:%d", host, WEBSOCKET_PORT)
    return MqttConnectionSettings(
        broker_url=url,
        host=host,
        port=WEBSOCKET_PORT,
        transport="websockets",
        path=f"{parts.path}?{parts.query}",
        ssl_context=ssl_context,
    )


def create_mqtt_client(
    settings: MqttConnectionSettings,
    client_id: str = "",
    clean_session: bool = True,
) -> mqtt.Client:
    """
    Create a paho MQTT client configured for the resolved settings.

    The client is not connected; call ``client.connect(settings.host,
    settings.port, keepalive)`` right away, since a presigned URL is only
    accepted within five minutes of its timestamp.

    Args:
        settings: Output of resolve_connection
        client_id: MQTT client identifier
        clean_session: MQTT clean-session flag

    Returns:
        Configured paho Client
    """
    client = mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        clean_session=clean_session,
        protocol=mqtt.MQTTv311,
        transport=settings.transport,
    )
    if settings.ssl_context is not None:
        client.tls_set_context(settings.ssl_context)
    if settings.transport == "websockets":
        client.ws_set_options(path=settings.path)
    return client
