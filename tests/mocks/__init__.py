"""
Test mocks for the IoT WebSocket signer test suite.

This module provides stand-ins for AWS collaborators and the fixed signing
scenario used for the golden-value tests, enabling local testing without
AWS credentials or network access.

Available Mocks:
- make_boto_session: MagicMock standing in for boto3.Session
- KNOWN_*: inputs and pinned output of the known-vector scenario

Usage:
    from tests.mocks import make_boto_session, KNOWN_HOST

    session = make_boto_session(token="session-token")
    client = session.client("iot")
"""

from .aws import (
    KNOWN_ACCESS_KEY,
    KNOWN_HOST,
    KNOWN_INSTANT,
    KNOWN_REGION,
    KNOWN_SECRET_KEY,
    KNOWN_SIGNATURE,
    make_boto_session,
)

__all__ = [
    "KNOWN_ACCESS_KEY",
    "KNOWN_HOST",
    "KNOWN_INSTANT",
    "KNOWN_REGION",
    "KNOWN_SECRET_KEY",
    "KNOWN_SIGNATURE",
    "make_boto_session",
]
