"""
Credential strategies for the WebSocket signer.

A provider is any zero-argument callable returning AWSCredentials. Two are
provided: a fixed value, and the ambient boto3 provider chain (environment,
shared config/profile, container or instance role).
"""

import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import ConfigurationError, CredentialUnavailable
from .sigv4 import AWSCredentials

logger = logging.getLogger(__name__)


class StaticCredentialProvider:
    """Returns the same explicitly supplied credentials on every call."""

    def __init__(self, credentials: AWSCredentials):
        self.credentials = credentials

    def __call__(self) -> AWSCredentials:
        return self.credentials


class SessionCredentialProvider:
    """
    Reads credentials from a boto3 session on every call.

    boto3 refreshes temporary credentials itself; freezing them per call
    gives a consistent access key, secret and token triple.

    Attributes:
        session: The boto3 session credentials are read from
    """

    def __init__(
        self,
        profile_name: Optional[str] = None,
        session: Optional[boto3.Session] = None,
    ):
        """
        Initialize the provider.

        Args:
            profile_name: Optional AWS profile name to use
            session: Existing boto3 session (takes precedence over profile_name)
        """
        if session is None:
            session = boto3.Session(profile_name=profile_name) if profile_name else boto3.Session()
        self.session = session

    def __call__(self) -> AWSCredentials:
        try:
            credentials = self.session.get_credentials()
            if credentials is None:
                raise CredentialUnavailable("No AWS credentials found")
            frozen_credentials = credentials.get_frozen_credentials()
        except (BotoCoreError, ClientError) as e:
            logger.warning("AWS credential lookup failed: %s", e)
            raise CredentialUnavailable(f"Failed to get AWS credentials: {e}") from e

        return AWSCredentials(
            access_key=frozen_credentials.access_key,
            secret_key=frozen_credentials.secret_key,
            session_token=frozen_credentials.token,
        )


def get_aws_credentials(profile_name: Optional[str] = None) -> AWSCredentials:
    """
    Get AWS credentials from the environment or profile.

    Args:
        profile_name: Optional AWS profile name to use

    Returns:
        AWSCredentials object with access key, secret key, and optional session token

    Raises:
        CredentialUnavailable: If credentials cannot be obtained
    """
    try:
        provider = SessionCredentialProvider(profile_name=profile_name)
    except BotoCoreError as e:
        # e.g. ProfileNotFound
        raise CredentialUnavailable(f"Failed to get AWS credentials: {e}") from e
    return provider()


def resolve_region(region: Optional[str] = None, session: Optional[boto3.Session] = None) -> str:
    """
    Pick the signing region: the explicit value, else the session's default.

    Raises:
        ConfigurationError: If no region is configured anywhere
    """
    if region:
        return region
    session = session or boto3.Session()
    if session.region_name:
        return session.region_name
    raise ConfigurationError("No AWS region configured; set AWS_REGION or pass a region")
