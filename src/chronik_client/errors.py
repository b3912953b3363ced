"""Error types raised by the Chronik client.

Only TransportError is absorbed locally (by endpoint failover). Every other
error propagates to the caller unchanged.
"""

from typing import Optional


class ChronikError(Exception):
    """Base class for all Chronik client errors."""


class ConfigError(ChronikError):
    """Malformed or empty endpoint configuration."""


class TransportError(ChronikError):
    """A single attempt against one endpoint failed.

    Raised for connection failures, timeouts and server-side (5xx) status
    codes. The failover proxy catches it and moves on to the next endpoint.
    """

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"{url}: {message}")


class AllEndpointsFailedError(ChronikError):
    """Every endpoint in the ring failed for one logical call."""

    def __init__(self, path: str, failures: dict[str, TransportError]):
        self.path = path
        self.failures = failures
        details = "; ".join(str(err) for err in failures.values())
        super().__init__(
            f"Unable to reach any of {len(failures)} endpoints for {path}: {details}"
        )


class DecodeError(ChronikError):
    """Response bytes violate the wire format."""


class ServerError(ChronikError):
    """The server deliberately rejected the request.

    The message is the one supplied by the server, unchanged.
    """

    def __init__(self, status_code: int, message: str, url: str = ""):
        self.status_code = status_code
        self.message = message
        self.url = url
        super().__init__(f"Chronik error {status_code}: {message}")
