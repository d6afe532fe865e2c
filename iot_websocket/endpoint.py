"""
Broker endpoint resolution.

Every AWS account has its own IoT data-plane hostname. It can be supplied
directly or looked up with the IoT ``DescribeEndpoint`` API.

Usage:
    from iot_websocket.endpoint import describe_endpoint

    host = describe_endpoint(region="us-east-1")
    # "a1b2c3d4e5f6g7-ats.iot.us-east-1.amazonaws.com"
"""

import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import EndpointUnresolved
from .tracing import traced

logger = logging.getLogger(__name__)

# ATS-signed data endpoint; the legacy "iot:Data" type uses a Symantec chain
# that the bundled Amazon root does not cover.
DEFAULT_ENDPOINT_TYPE = "iot:Data-ATS"


@traced("endpoint.describe")
def describe_endpoint(
    region: str,
    session: Optional[boto3.Session] = None,
    endpoint_type: str = DEFAULT_ENDPOINT_TYPE,
) -> str:
    """
    Discover the account's IoT data-plane hostname.

    Args:
        region: AWS region
        session: Optional boto3 session (defaults to a new ambient session)
        endpoint_type: IoT endpoint type

    Returns:
        Broker hostname without scheme or port

    Raises:
        EndpointUnresolved: If the lookup fails or returns no address
    """
    session = session or boto3.Session()
    try:
        client = session.client("iot", region_name=region)
        response = client.describe_endpoint(endpointType=endpoint_type)
    except (BotoCoreError, ClientError) as e:
        logger.error("DescribeEndpoint failed in %s: %s", region, e)
        raise EndpointUnresolved(f"Could not get endpoint: {e}") from e

    address = response.get("endpointAddress")
    if not address:
        raise EndpointUnresolved(f"DescribeEndpoint returned no address for {endpoint_type}")

    logger.info("Discovered IoT endpoint %s", address)
    return address


class StaticEndpoint:
    """An explicitly configured broker hostname."""

    def __init__(self, host: str):
        self.host = host

    def __call__(self) -> str:
        if not self.host:
            raise EndpointUnresolved("Empty endpoint host")
        return self.host


class DiscoveredEndpoint:
    """Looks the broker hostname up through DescribeEndpoint when called."""

    def __init__(
        self,
        region: str,
        session: Optional[boto3.Session] = None,
        endpoint_type: str = DEFAULT_ENDPOINT_TYPE,
    ):
        self.region = region
        self.session = session
        self.endpoint_type = endpoint_type

    def __call__(self) -> str:
        return describe_endpoint(self.region, session=self.session, endpoint_type=self.endpoint_type)
