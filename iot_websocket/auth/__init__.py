"""
Authentication utilities for AWS IoT WebSocket connections.

This module provides SigV4 presigning for the MQTT-over-WebSocket handshake
and the credential strategies that feed it.
"""

from .credentials import (
    SessionCredentialProvider,
    StaticCredentialProvider,
    get_aws_credentials,
    resolve_region,
)
from .sigv4 import (
    ALGORITHM,
    EMPTY_STRING_HASH,
    SERVICE_NAME,
    AWSCredentials,
    IotWebSocketSigner,
    SignatureParts,
    build_canonical_request,
    derive_signing_key,
    encode_query,
    percent_encode,
    presign_url,
)

__all__ = [
    "ALGORITHM",
    "EMPTY_STRING_HASH",
    "SERVICE_NAME",
    "AWSCredentials",
    "IotWebSocketSigner",
    "SignatureParts",
    "SessionCredentialProvider",
    "StaticCredentialProvider",
    "build_canonical_request",
    "derive_signing_key",
    "encode_query",
    "get_aws_credentials",
    "percent_encode",
    "presign_url",
    "resolve_region",
]
