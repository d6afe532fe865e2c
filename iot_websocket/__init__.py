"""AWS IoT Core MQTT-over-WebSocket presigned URLs and connection setup."""

from .auth import (
    AWSCredentials,
    IotWebSocketSigner,
    SessionCredentialProvider,
    StaticCredentialProvider,
    get_aws_credentials,
    presign_url,
)
from .endpoint import DiscoveredEndpoint, StaticEndpoint, describe_endpoint
from .errors import (
    ConfigurationError,
    CredentialUnavailable,
    EndpointUnresolved,
    IotWebSocketError,
    TrustConfigurationError,
)
from .options import ConnectionOptions, MqttConnectionSettings, create_mqtt_client, resolve_connection
from .trust import AMAZON_ROOT_CA_1, create_ssl_context

__all__ = [
    # Signing
    "AWSCredentials",
    "IotWebSocketSigner",
    "presign_url",
    # Credential and endpoint strategies
    "SessionCredentialProvider",
    "StaticCredentialProvider",
    "get_aws_credentials",
    "DiscoveredEndpoint",
    "StaticEndpoint",
    "describe_endpoint",
    # Connection setup
    "ConnectionOptions",
    "MqttConnectionSettings",
    "create_mqtt_client",
    "resolve_connection",
    "AMAZON_ROOT_CA_1",
    "create_ssl_context",
    # Errors
    "IotWebSocketError",
    "CredentialUnavailable",
    "EndpointUnresolved",
    "TrustConfigurationError",
    "ConfigurationError",
]
