"""
Pytest configuration and fixtures for the IoT WebSocket signer tests.

Usage:
    def test_something(known_signer):
        url = known_signer.presign_url(KNOWN_HOST)
        assert url.startswith("wss://")
"""

from unittest.mock import MagicMock

import pytest

from iot_websocket.auth import AWSCredentials, IotWebSocketSigner
from tests.mocks import (
    KNOWN_ACCESS_KEY,
    KNOWN_INSTANT,
    KNOWN_REGION,
    KNOWN_SECRET_KEY,
    make_boto_session,
)


@pytest.fixture
def known_credentials() -> AWSCredentials:
    """Credentials of the known-vector scenario."""
    return AWSCredentials(access_key=KNOWN_ACCESS_KEY, secret_key=KNOWN_SECRET_KEY)


@pytest.fixture
def session_credentials() -> AWSCredentials:
    """Temporary credentials with a session token containing reserved characters."""
    return AWSCredentials(
        access_key="ASIAEXAMPLE",
        secret_key=KNOWN_SECRET_KEY,
        session_token="FwoGZXIvYXdzEBYaDK+abc/def==",
    )


@pytest.fixture
def known_signer(known_credentials) -> IotWebSocketSigner:
    """Signer pinned to the known region and instant."""
    return IotWebSocketSigner(
        region=KNOWN_REGION,
        credentials=known_credentials,
        clock=lambda: KNOWN_INSTANT,
    )


@pytest.fixture
def boto_session() -> MagicMock:
    """Mock boto3 session with static credentials, a region and an IoT endpoint."""
    return make_boto_session()
