"""Command line entry point: print a presigned AWS IoT WebSocket URL."""

import argparse
import dataclasses
import logging
import sys
import threading
import uuid
from typing import Optional, Sequence

from .config import SignerConfig
from .errors import IotWebSocketError
from .options import MqttConnectionSettings, create_mqtt_client, resolve_connection
from .tracing import init_tracing

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 10.0


def build_parser(config: SignerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, taking defaults from the environment config."""
    parser = argparse.ArgumentParser(
        prog="iot-ws-url",
        description="Create a SigV4-presigned wss:// URL for AWS IoT Core MQTT",
    )
    parser.add_argument(
        "--endpoint",
        default=config.endpoint,
        help="IoT data endpoint host (default: AWS_IOT_ENDPOINT, else discovered)",
    )
    parser.add_argument(
        "--region",
        default=config.aws_region,
        help="AWS region (default: AWS_REGION or the profile's region)",
    )
    parser.add_argument("--profile", default=config.profile_name, help="AWS profile name")
    parser.add_argument("--ca-file", default=config.ca_file, help="PEM bundle to trust instead of Amazon Root CA 1")
    parser.add_argument(
        "--discover",
        action="store_true",
        help="Ignore --endpoint and look the endpoint up with DescribeEndpoint",
    )
    parser.add_argument("--connect", action="store_true", help="Open one MQTT connection to verify the URL")
    parser.add_argument("--client-id", default=config.client_id, help="MQTT client id used with --connect")
    parser.add_argument("--log-level", default=config.log_level, help="Logging level (default: INFO)")
    return parser


def verify_connection(settings: MqttConnectionSettings, client_id: str, keepalive: int) -> bool:
    """Connect once with paho and report whether the broker accepted us."""
    client = create_mqtt_client(settings, client_id=client_id)
    connected = threading.Event()
    result = {}

    def on_connect(client, userdata, flags, reason_code, properties=None):
        result["reason_code"] = reason_code
        connected.set()

    client.on_connect = on_connect
    client.connect(settings.host, settings.port, keepalive=keepalive)
    client.loop_start()
    try:
        if not connected.wait(CONNECT_TIMEOUT_SECONDS):
            logger.error("Timed out waiting for CONNACK from %s", settings.host)
            return False
        reason_code = result["reason_code"]
        if reason_code.is_failure:
            logger.error("Broker refused connection: %s", reason_code)
            return False
        logger.info("Connected to %s as %s", settings.host, client_id)
        return True
    finally:
        client.disconnect()
        client.loop_stop()


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        config = SignerConfig.from_env()
    except IotWebSocketError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    args = build_parser(config).parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if config.otel_endpoint or config.otel_console_export:
        init_tracing(otlp_endpoint=config.otel_endpoint or None, enable_console_export=config.otel_console_export)

    options = dataclasses.replace(
        config.to_connection_options(),
        endpoint="" if args.discover else (args.endpoint or ""),
        region=args.region,
        profile_name=args.profile,
        ca_file=args.ca_file,
        client_id=args.client_id or f"iot-ws-{uuid.uuid4().hex[:12]}",
    )

    try:
        settings = resolve_connection(options)
    except IotWebSocketError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(settings.broker_url)

    if args.connect:
        try:
            ok = verify_connection(settings, options.client_id, options.keepalive)
        except OSError as e:
            logger.error("Connection to %s failed: %s", settings.host, e)
            ok = False
        return 0 if ok else 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
