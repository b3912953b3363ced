"""HTTP access to a redundant ring of Chronik endpoints.

Requests start at the preferred endpoint and walk the ring (wrapping around)
until one endpoint answers successfully. That endpoint becomes the preferred
one for later calls; a rejection (HTTP 4xx) does not move it. There is no
background probing and the ring is never reordered.
"""

import logging
import threading
from typing import Optional, Sequence

import httpx

from chronik_client.codec import decode_error
from chronik_client.config import DEFAULT_TIMEOUT
from chronik_client.errors import (
    AllEndpointsFailedError,
    ConfigError,
    ServerError,
    TransportError,
)

logger = logging.getLogger(__name__)

PROTOBUF_CONTENT_TYPE = "application/x-protobuf"


def validate_url(url: str) -> str:
    """Check that a url is an absolute http(s) base address.

    A path prefix is allowed (``https://chronik.be.cash/xec``), a trailing
    slash, query or fragment is not.

    Raises:
        ConfigError: If the url is malformed
    """
    if not isinstance(url, str) or not url:
        raise ConfigError(f"Invalid url: {url!r}")

    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ConfigError(f"Invalid url {url!r}: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise ConfigError(f"Url must use http or https: {url!r}")
    if not parsed.host:
        raise ConfigError(f"Url has no host: {url!r}")
    if url.endswith("/"):
        raise ConfigError(f"Url must not end with a slash: {url!r}")
    if parsed.query or parsed.fragment:
        raise ConfigError(f"Url must not have a query or fragment: {url!r}")

    return url


class FailoverProxy:
    """GET/POST against a ring of endpoints with sticky failover.

    Broadcasts are retried across the ring like reads. A failed attempt (for
    example a timeout) does not prove the endpoint rejected the transaction,
    so a broadcast may reach the network more than once.
    """

    def __init__(
        self,
        urls: Sequence[str],
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        if isinstance(urls, str) or not urls:
            raise ConfigError("Expected a non-empty list of urls")

        self._endpoints = tuple(validate_url(url) for url in urls)
        if len(set(self._endpoints)) != len(self._endpoints):
            raise ConfigError(f"Url listed more than once: {list(self._endpoints)!r}")
        self._working_index = 0
        self._lock = threading.Lock()

        self._headers = {"Accept": PROTOBUF_CONTENT_TYPE}
        if headers:
            self._headers.update(headers)

        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def endpoints(self) -> tuple[str, ...]:
        """The endpoint ring, in configured order."""
        return self._endpoints

    @property
    def working_index(self) -> int:
        """Index of the endpoint the next request starts at."""
        return self._working_index

    def _set_working_index(self, index: int) -> None:
        with self._lock:
            self._working_index = index

    async def close(self):
        """Close HTTP client."""
        await self._client.aclose()

    async def get(self, path: str) -> bytes:
        """GET `path` from the first endpoint that answers."""
        return await self._request("GET", path)

    async def post(self, path: str, body: bytes) -> bytes:
        """POST a protobuf body to `path` on the first endpoint that answers."""
        return await self._request("POST", path, body)

    async def _attempt(
        self,
        method: str,
        url: str,
        body: Optional[bytes],
    ) -> httpx.Response:
        """Send one request, turning transport problems into TransportError."""
        headers = dict(self._headers)
        if body is not None:
            headers["Content-Type"] = PROTOBUF_CONTENT_TYPE

        try:
            response = await self._client.request(method, url, content=body, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError(url, f"timed out ({type(e).__name__})") from e
        except httpx.TransportError as e:
            raise TransportError(url, f"{type(e).__name__}: {e}") from e

        if response.is_success or response.is_client_error:
            return response

        message = decode_error(response.content) or response.reason_phrase
        raise TransportError(
            url,
            f"HTTP {response.status_code}: {message}",
            status_code=response.status_code,
        )

    async def _request(self, method: str, path: str, body: Optional[bytes] = None) -> bytes:
        num_endpoints = len(self._endpoints)
        start = self._working_index
        failures: dict[str, TransportError] = {}

        for offset in range(num_endpoints):
            index = (start + offset) % num_endpoints
            base_url = self._endpoints[index]
            url = f"{base_url}{path}"

            logger.debug("%s %s (endpoint %d/%d)", method, url, index + 1, num_endpoints)

            try:
                response = await self._attempt(method, url, body)
            except TransportError as e:
                logger.warning("Chronik endpoint %s failed for %s: %s", base_url, path, e)
                failures[base_url] = e
                continue

            # A rejection leaves the cursor where it was
            if response.is_client_error:
                message = decode_error(response.content) or response.text
                raise ServerError(response.status_code, message, url=url)

            self._set_working_index(index)
            return response.content

        logger.error("All %d Chronik endpoints failed for %s %s", num_endpoints, method, path)
        raise AllEndpointsFailedError(path, failures)
