"""Tests for broker endpoint resolution."""

from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from iot_websocket.endpoint import DiscoveredEndpoint, StaticEndpoint, describe_endpoint
from iot_websocket.errors import EndpointUnresolved
from tests.mocks import make_boto_session


class TestDescribeEndpoint:
    """Tests for describe_endpoint."""

    def test_returns_address(self, boto_session):
        host = describe_endpoint("us-east-1", session=boto_session)

        assert host == "abc123-ats.iot.us-east-1.amazonaws.com"
        boto_session.client.assert_called_once_with("iot", region_name="us-east-1")
        boto_session.client.return_value.describe_endpoint.assert_called_once_with(endpointType="iot:Data-ATS")

    def test_default_session(self, boto_session):
        with patch("iot_websocket.endpoint.boto3.Session", return_value=boto_session):
            assert describe_endpoint("us-east-1") == "abc123-ats.iot.us-east-1.amazonaws.com"

    def test_client_error_is_wrapped(self, boto_session):
        error = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "not allowed"}},
            "DescribeEndpoint",
        )
        boto_session.client.return_value.describe_endpoint.side_effect = error

        with pytest.raises(EndpointUnresolved) as exc_info:
            describe_endpoint("us-east-1", session=boto_session)

        assert exc_info.value.stage == "endpoint"
        assert exc_info.value.__cause__ is error

    def test_empty_address(self):
        session = make_boto_session(endpoint_address="")

        with pytest.raises(EndpointUnresolved, match="no address"):
            describe_endpoint("us-east-1", session=session)


class TestEndpointStrategies:
    """Tests for StaticEndpoint and DiscoveredEndpoint."""

    def test_static(self):
        assert StaticEndpoint("example.iot.amazonaws.com")() == "example.iot.amazonaws.com"

    def test_static_empty(self):
        with pytest.raises(EndpointUnresolved):
            StaticEndpoint("")()

    def test_discovered(self, boto_session):
        strategy = DiscoveredEndpoint("us-east-1", session=boto_session)

        assert strategy() == "abc123-ats.iot.us-east-1.amazonaws.com"
