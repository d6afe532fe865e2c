"""
TLS trust configuration for AWS IoT Core brokers.

ATS endpoints present certificates chaining to Amazon Root CA 1, which is
bundled here so a connection works on hosts with an incomplete system store.
"""

import logging
import ssl
from typing import Optional

from .errors import TrustConfigurationError

logger = logging.getLogger(__name__)

# https://www.amazontrust.com/repository/AmazonRootCA1.pem
AMAZON_ROOT_CA_1 = """-----BEGIN CERTIFICATE-----
MIIDQTCCAimgAwIBAgITBmyfz5m/jAo54vB4ikPmljZbyjANBgkqhkiG9w0BAQsF
ADA5MQswCQYDVQQGEwJVUzEPMA0GA1UEChMGQW1hem9uMRkwFwYDVQQDExBBbWF6
b24gUm9vdCBDQSAxMB4XDTE1MDUyNjAwMDAwMFoXDTM4MDExNzAwMDAwMFowOTEL
MAkGA1UEBhMCVVMxDzANBgNVBAoTBkFtYXpvbjEZMBcGA1UEAxMQQW1hem9uIFJv
b3QgQ0EgMTCCASIwDQYJKoZIhvcNAQEBBQADggEPADCCAQoCggEBALJ4gHHKeNXj
ca9HgFB0fW7Y14h29Jlo91ghYPl0hAEvrAIthtOgQ3pOsqTQNroBvo3bSMgHFzZM
9O6II8c+6zf1tRn4SWiw3te5djgdYZ6k/oI2peVKVuRF4fn9tBb6dNqcmzU5L/qw
IFAGbHrQgLKm+a/sRxmPUDgH3KKHOVj4utWp+UhnMJbulHheb4mjUcAwhmahRWa6
VOujw5H5SNz/0egwLX0tdHA114gk957EWW67c4cX8jJGKLhD+rcdqsq08p8kDi1L
93FcXmn/6pUCyziKrlA4b9v7LWIbxcceVOF34GfID5yHI9Y/QCB/IIDEgEw+OyQm
jgSubJrIqg0CAwEAAaNCMEAwDwYDVR0TAQH/BAUwAwEB/zAOBgNVHQ8BAf8EBAMC
AYYwHQYDVR0OBBYEFIQYzIU07LwMlJQuCFmcx7IQTgoIMA0GCSqGSIb3DQEBCwUA
A4IBAQCY8jdaQZChGsV2USggNiMOruYou6r4lK5IpDB/G/wkjUu0yKGX9rbxenDI
U5PMCCjjmCXPI6T53iHTfIUJrU6adTrCC2qJeHZERxhlbI1Bjjt/msv0tadQ1wUs
N+gDS63pYaACbvXy8MWy7Vu33PqUXHeeE6V/Uq2V8viTO96LXFvKWlJbYK8U90vv
o/ufQJVtMVT8QtPHRh8jrdkPSHCa2XV4cdFyQzR1bldZwgJcJmApzyMZFo6IQ6XU
5MsI+yMRQ+hDKXJioaldXgjUkK642M4UwtBV8ob2xJNDd2ZhwLnoQdeXeGADbkpy
rqXRfboQnoZsG4q5WTP468SQvvG5
-----END CERTIFICATE-----
"""


def create_ssl_context(
    ca_data: Optional[str] = None,
    ca_file: Optional[str] = None,
    certfile: Optional[str] = None,
    keyfile: Optional[str] = None,
) -> ssl.SSLContext:
    """
    Build a client TLS context for the broker.

    Args:
        ca_data: PEM trust anchors (defaults to Amazon Root CA 1 when no ca_file)
        ca_file: Path to a PEM bundle used instead of the bundled root
        certfile: Client certificate for mutual TLS
        keyfile: Private key matching certfile

    Returns:
        SSLContext with hostname checking and certificate verification on

    Raises:
        TrustConfigurationError: If a certificate or key cannot be loaded
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

    try:
        if ca_file:
            context.load_verify_locations(cafile=ca_file)
        else:
            context.load_verify_locations(cadata=ca_data or AMAZON_ROOT_CA_1)
    except (ssl.SSLError, OSError, ValueError) as e:
        raise TrustConfigurationError(f"Failed to add root CA certificate to trust store: {e}") from e

    if certfile:
        try:
            context.load_cert_chain(certfile=certfile, keyfile=keyfile)
        except (ssl.SSLError, OSError) as e:
            raise TrustConfigurationError(f"Failed to load client certificate {certfile}: {e}") from e

    logger.debug("Created TLS context (ca_file=%s, client_cert=%s)", ca_file, bool(certfile))
    return context
