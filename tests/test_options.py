"""Tests for connection option resolution and MQTT client setup."""

import dataclasses
import ssl
from unittest.mock import MagicMock, patch

import paho.mqtt.client as mqtt
import pytest
from botocore.exceptions import ProfileNotFound

from iot_websocket.errors import ConfigurationError, CredentialUnavailable, EndpointUnresolved
from iot_websocket.options import (
    ConnectionOptions,
    MqttConnectionSettings,
    create_mqtt_client,
    resolve_connection,
)
from tests.mocks import KNOWN_HOST, KNOWN_INSTANT, KNOWN_REGION, KNOWN_SIGNATURE, make_boto_session


class TestConnectionOptionsValidate:
    """Tests for ConnectionOptions.validate."""

    def test_defaults_are_valid(self):
        ConnectionOptions().validate()

    def test_port_requires_client_certificate(self):
        with pytest.raises(ConfigurationError, match="port can only be specified"):
            ConnectionOptions(port=8884).validate()

    def test_port_with_client_certificate(self):
        ConnectionOptions(port=8884, client_cert_file="cert.pem", client_key_file="key.pem").validate()

    def test_cert_requires_key(self):
        with pytest.raises(ConfigurationError, match="client_key_file"):
            ConnectionOptions(client_cert_file="cert.pem").validate()

    def test_key_requires_cert(self):
        with pytest.raises(ConfigurationError, match="client_cert_file"):
            ConnectionOptions(client_key_file="key.pem").validate()

    def test_invalid_keepalive(self):
        with pytest.raises(ConfigurationError, match="keepalive"):
            ConnectionOptions(keepalive=0).validate()

    def test_fields_override_independently(self):
        base = ConnectionOptions(endpoint="a.example.com", region="us-east-1")

        changed = dataclasses.replace(base, region="eu-west-1")

        assert changed.endpoint == "a.example.com"
        assert changed.region == "eu-west-1"
        assert base.region == "us-east-1"


class TestResolveWebSocket:
    """Tests for resolve_connection in WebSocket mode."""

    def test_explicit_everything(self, known_credentials):
        options = ConnectionOptions(endpoint=KNOWN_HOST, region=KNOWN_REGION, credentials=known_credentials)

        with patch("iot_websocket.options.boto3.Session") as mock_session_class:
            settings = resolve_connection(options, now=KNOWN_INSTANT)

        mock_session_class.assert_not_called()
        assert settings.transport == "websockets"
        assert settings.host == KNOWN_HOST
        assert settings.port == 443
        assert settings.broker_url.startswith(f"wss://{KNOWN_HOST}/mqtt?X-Amz-Algorithm=AWS4-HMAC-SHA256&")
        assert settings.broker_url.endswith(f"&X-Amz-Signature={KNOWN_SIGNATURE}")
        assert settings.path == settings.broker_url[len(f"wss://{KNOWN_HOST}"):]
        assert isinstance(settings.ssl_context, ssl.SSLContext)

    def test_ambient_credentials_and_discovered_endpoint(self):
        session = make_boto_session(token="tok/en")

        settings = resolve_connection(ConnectionOptions(), now=KNOWN_INSTANT, session=session)

        session.client.assert_called_once_with("iot", region_name=KNOWN_REGION)
        assert settings.host == "abc123-ats.iot.us-east-1.amazonaws.com"
        assert settings.broker_url.endswith("&X-Amz-Security-Token=tok%2Fen")

    def test_profile_session(self):
        session = make_boto_session()

        with patch("iot_websocket.options.boto3.Session", return_value=session) as mock_session_class:
            resolve_connection(ConnectionOptions(profile_name="dev"), now=KNOWN_INSTANT)

        mock_session_class.assert_called_once_with(profile_name="dev")

    def test_unknown_profile(self, known_credentials):
        """Test that a missing profile surfaces as CredentialUnavailable."""
        options = ConnectionOptions(
            endpoint=KNOWN_HOST,
            region=KNOWN_REGION,
            profile_name="nope",
            credentials=known_credentials,
        )

        with patch(
            "iot_websocket.options.boto3.Session",
            side_effect=ProfileNotFound(profile="nope"),
        ):
            with pytest.raises(CredentialUnavailable, match="nope") as exc_info:
                resolve_connection(options, now=KNOWN_INSTANT)

        assert exc_info.value.stage == "credentials"
        assert isinstance(exc_info.value.__cause__, ProfileNotFound)

    def test_credential_failure_propagates(self):
        session = make_boto_session()
        session.get_credentials.return_value = None

        with pytest.raises(CredentialUnavailable):
            resolve_connection(ConnectionOptions(endpoint=KNOWN_HOST), session=session)

    def test_endpoint_failure_propagates(self):
        session = make_boto_session(endpoint_address="")

        with pytest.raises(EndpointUnresolved):
            resolve_connection(ConnectionOptions(), session=session)

        session.get_credentials.assert_not_called()

    def test_missing_region(self):
        session = make_boto_session(region=None)

        with pytest.raises(ConfigurationError, match="No AWS region"):
            resolve_connection(ConnectionOptions(endpoint=KNOWN_HOST), session=session)

    def test_invalid_options_fail_first(self):
        session = make_boto_session()

        with pytest.raises(ConfigurationError):
            resolve_connection(ConnectionOptions(port=1234), session=session)

        session.client.assert_not_called()
        session.get_credentials.assert_not_called()


class TestResolveClientCertificate:
    """Tests for resolve_connection in client certificate mode."""

    def test_default_port(self):
        options = ConnectionOptions(endpoint=KNOWN_HOST, client_cert_file="cert.pem", client_key_file="key.pem")
        context = MagicMock()

        with patch("iot_websocket.options.create_ssl_context", return_value=context) as mock_create:
            settings = resolve_connection(options)

        mock_create.assert_called_once_with(ca_file=None, certfile="cert.pem", keyfile="key.pem")
        assert settings.broker_url == f"mqtts://{KNOWN_HOST}:8883"
        assert settings.transport == "tcp"
        assert settings.port == 8883
        assert settings.ssl_context is context

    def test_custom_port(self):
        options = ConnectionOptions(
            endpoint=KNOWN_HOST,
            client_cert_file="cert.pem",
            client_key_file="key.pem",
            port=443,
        )

        with patch("iot_websocket.options.create_ssl_context"):
            settings = resolve_connection(options)

        assert settings.broker_url == f"mqtts://{KNOWN_HOST}:443"

    def test_no_credentials_needed(self):
        session = make_boto_session()
        options = ConnectionOptions(client_cert_file="cert.pem", client_key_file="key.pem")

        with patch("iot_websocket.options.create_ssl_context"):
            resolve_connection(options, session=session)

        session.get_credentials.assert_not_called()


class TestCreateMqttClient:
    """Tests for create_mqtt_client."""

    def test_websocket_client(self):
        context = MagicMock()
        settings = MqttConnectionSettings(
            broker_url=f"wss://{KNOWN_HOST}/mqtt?a=1",
            host=KNOWN_HOST,
            port=443,
            transport="websockets",
            path="/mqtt?a=1",
            ssl_context=context,
        )
        mock_client = MagicMock()

        with patch("iot_websocket.options.mqtt.Client", return_value=mock_client) as mock_client_class:
            client = create_mqtt_client(settings, client_id="sensor-1")

        assert client is mock_client
        mock_client_class.assert_called_once_with(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id="sensor-1",
            clean_session=True,
            protocol=mqtt.MQTTv311,
            transport="websockets",
        )
        mock_client.tls_set_context.assert_called_once_with(context)
        mock_client.ws_set_options.assert_called_once_with(path="/mqtt?a=1")

    def test_tcp_client(self):
        settings = MqttConnectionSettings(
            broker_url=f"mqtts://{KNOWN_HOST}:8883",
            host=KNOWN_HOST,
            port=8883,
            transport="tcp",
            ssl_context=MagicMock(),
        )
        mock_client = MagicMock()

        with patch("iot_websocket.options.mqtt.Client", return_value=mock_client):
            create_mqtt_client(settings, client_id="sensor-1", clean_session=False)

        mock_client.ws_set_options.assert_not_called()

    def test_real_client_is_configured(self, known_credentials):
        options = ConnectionOptions(endpoint=KNOWN_HOST, region=KNOWN_REGION, credentials=known_credentials)
        settings = resolve_connection(options, now=KNOWN_INSTANT)

        client = create_mqtt_client(settings, client_id="sensor-1")

        assert isinstance(client, mqtt.Client)
