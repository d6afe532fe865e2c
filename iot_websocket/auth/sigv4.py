"""
AWS SigV4 presigned URLs for the AWS IoT Core MQTT-over-WebSocket handshake.

The broker accepts a WebSocket upgrade on ``GET /mqtt`` when the query string
carries a SigV4 signature it can recompute byte for byte. Everything here is a
pure function of its inputs: no I/O and no shared state, so a signer can be
used from any number of threads.

Usage:
    from iot_websocket.auth import AWSCredentials, IotWebSocketSigner

    signer = IotWebSocketSigner(
        region="us-east-1",
        credentials=AWSCredentials(access_key="AKID...", secret_key="..."),
    )
    url = signer.presign_url("a1b2c3-ats.iot.us-east-1.amazonaws.com")

    # Or in one call
    url = presign_url(credentials, region="us-east-1", host="...")
"""

import asyncio
import datetime
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Tuple, Union
from urllib.parse import quote

from ..tracing import traced

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE_NAME = "iotdevicegateway"
TERMINATOR = "aws4_request"
SIGNED_HEADERS = "host"
HTTP_METHOD = "GET"
MQTT_PATH = "/mqtt"

# SHA-256 of the empty payload; GET /mqtt never carries a body.
EMPTY_STRING_HASH = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

# RFC 3986 unreserved characters, the only ones SigV4 leaves unescaped.
_UNRESERVED = "-_.~"


@dataclass(frozen=True)
class AWSCredentials:
    """AWS credentials for SigV4 signing."""
    access_key: str
    secret_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)

    @property
    def has_session_token(self) -> bool:
        return bool(self.session_token)


@dataclass(frozen=True)
class SignatureParts:
    """Intermediate values of one presigning run, kept for diagnostics."""
    date_long: str
    scope: str
    canonical_query: str
    canonical_request: str
    string_to_sign: str
    signature: str
    url: str = field(repr=False)


CredentialSource = Union[AWSCredentials, Callable[[], AWSCredentials]]


def percent_encode(value: str) -> str:
    """Percent-encode a query value the way SigV4 canonicalizes it (space is %20)."""
    return quote(value, safe=_UNRESERVED)


def encode_query(params: Iterable[Tuple[str, str]]) -> str:
    """
    Join ordered key/value pairs into a canonical query string.

    Order is preserved exactly as given; the pairs are part of the signed
    content and must not be re-sorted.

    Args:
        params: Ordered (key, value) pairs

    Returns:
        ``key=value`` pairs joined with ``&``, values percent-encoded
    """
    return "&".join(f"{key}={percent_encode(value)}" for key, value in params)


def build_canonical_request(canonical_query: str, host: str) -> str:
    """
    Create the canonical request for the WebSocket upgrade.

    Args:
        canonical_query: Encoded query string from encode_query
        host: Broker hostname (no scheme or port)

    Returns:
        Canonical request string (not yet hashed)
    """
    return "\n".join([
        HTTP_METHOD,
        MQTT_PATH,
        canonical_query,
        f"host:{host}",
        "",
        SIGNED_HEADERS,
        EMPTY_STRING_HASH,
    ])


def hash_hex(text: str) -> str:
    """Create the hex SHA-256 digest of a UTF-8 string."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _sign(key: bytes, msg: str) -> bytes:
    """Create HMAC-SHA256 signature."""
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date_short: str, region: str, service: str) -> bytes:
    """
    Derive the signing key for SigV4.

    Args:
        secret_key: AWS secret access key
        date_short: Date in YYYYMMDD format
        region: AWS region
        service: Signing service name

    Returns:
        32-byte derived signing key
    """
    k_date = _sign(f"AWS4{secret_key}".encode("utf-8"), date_short)
    k_region = _sign(k_date, region)
    k_service = _sign(k_region, service)
    return _sign(k_service, TERMINATOR)


def format_timestamp(now: datetime.datetime) -> str:
    """Format an instant as YYYYMMDDTHHMMSSZ in UTC. Naive values are taken as UTC."""
    if now.tzinfo is not None:
        now = now.astimezone(datetime.timezone.utc)
    return now.strftime("%Y%m%dT%H%M%SZ")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class IotWebSocketSigner:
    """
    SigV4 presigner for ``wss://{host}/mqtt`` URLs.

    Credentials are fetched from the source on every call and never cached
    here; refreshing them is the provider's job.

    Attributes:
        region: AWS region (e.g. "us-east-1")
        service: Signing service name, "iotdevicegateway" for the data plane
    """

    def __init__(
        self,
        region: str,
        credentials: CredentialSource,
        service: str = SERVICE_NAME,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ):
        """
        Initialize the signer.

        Args:
            region: AWS region
            credentials: Fixed credentials or a zero-argument provider
            service: Signing service name
            clock: Returns the current instant; sampled once per call
        """
        self.region = region
        self.service = service
        self._credentials = credentials
        self._clock = clock

    def get_credentials(self) -> AWSCredentials:
        """
        Fetch credentials from the configured source.

        Raises:
            CredentialUnavailable: If the source cannot supply credentials
        """
        if isinstance(self._credentials, AWSCredentials):
            return self._credentials
        return self._credentials()

    def sign(
        self,
        host: str,
        credentials: AWSCredentials,
        now: Optional[datetime.datetime] = None,
    ) -> SignatureParts:
        """
        Run the full presigning procedure and keep every intermediate value.

        Args:
            host: Broker hostname
            credentials: Credentials to sign with
            now: Instant to sign at (defaults to the clock, read once)

        Returns:
            SignatureParts including the final URL
        """
        date_long = format_timestamp(now if now is not None else self._clock())
        date_short = date_long[:8]
        scope = f"{date_short}/{self.region}/{self.service}/{TERMINATOR}"

        canonical_query = encode_query([
            ("X-Amz-Algorithm", ALGORITHM),
            ("X-Amz-Credential", f"{credentials.access_key}/{scope}"),
            ("X-Amz-Date", date_long),
            ("X-Amz-SignedHeaders", SIGNED_HEADERS),
        ])

        canonical_request = build_canonical_request(canonical_query, host)
        string_to_sign = "\n".join([
            ALGORITHM,
            date_long,
            scope,
            hash_hex(canonical_request),
        ])

        signing_key = derive_signing_key(credentials.secret_key, date_short, self.region, self.service)
        signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

        url = f"wss://{host}{MQTT_PATH}?{canonical_query}&X-Amz-Signature={signature}"
        if credentials.has_session_token:
            url += f"&X-Amz-Security-Token={percent_encode(credentials.session_token)}"

        logger.debug(
            "Presigned MQTT WebSocket URL for host=%s region=%s date=%s access_key=%s",
            host, self.region, date_long, credentials.access_key,
        )

        return SignatureParts(
            date_long=date_long,
            scope=scope,
            canonical_query=canonical_query,
            canonical_request=canonical_request,
            string_to_sign=string_to_sign,
            signature=signature,
            url=url,
        )

    @traced("sigv4.presign_url")
    def presign_url(self, host: str, now: Optional[datetime.datetime] = None) -> str:
        """
        Create a presigned ``wss://`` URL for the broker.

        Call this right before connecting: the broker rejects URLs whose
        X-Amz-Date is more than five minutes away from its own clock.

        Args:
            host: Broker hostname (no scheme or port)
            now: Instant to sign at (defaults to the clock)

        Returns:
            The presigned URL

        Raises:
            CredentialUnavailable: If the credential source fails
        """
        credentials = self.get_credentials()
        return self.sign(host, credentials, now=now).url

    @traced("sigv4.presign_url_async")
    async def presign_url_async(
        self,
        host: str,
        now: Optional[datetime.datetime] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Async variant of presign_url.

        The credential lookup may block on the network, so it runs in a
        worker thread under the caller's deadline. Cancellation and
        ``asyncio.TimeoutError`` propagate unchanged.

        Args:
            host: Broker hostname
            now: Instant to sign at (defaults to the clock)
            timeout: Deadline in seconds for the credential lookup
        """
        credentials = await asyncio.wait_for(asyncio.to_thread(self.get_credentials), timeout)
        return self.sign(host, credentials, now=now).url


def presign_url(
    credentials: AWSCredentials,
    region: str,
    host: str,
    now: Optional[datetime.datetime] = None,
) -> str:
    """
    Convenience function to presign a WebSocket URL with explicit credentials.

    Args:
        credentials: AWS credentials
        region: AWS region
        host: Broker hostname
        now: Instant to sign at (defaults to the current UTC time)

    Returns:
        The presigned URL
    """
    return IotWebSocketSigner(region=region, credentials=credentials).presign_url(host, now=now)
