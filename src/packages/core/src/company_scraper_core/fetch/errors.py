"""Fetch error classification."""
import socket
from enum import Enum

import httpx

from company_scraper_core.util.errors import ScraperError

# Resolver messages across libc, macOS and Windows.
DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated with hostname",
    "name resolution",
)


class FetchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    DNS_FAILURE = "dns_failure"
    CONNECTION_RESET = "connection_reset"
    HTTP_STATUS = "http_status"
    UNKNOWN = "unknown"


MESSAGES = {
    FetchErrorKind.TIMEOUT: "Request timeout",
    FetchErrorKind.CONNECTION_REFUSED: "Connection refused",
    FetchErrorKind.DNS_FAILURE: "DNS resolution failed",
    FetchErrorKind.CONNECTION_RESET: "Connection reset by server",
}


class FetchError(ScraperError):
    """A page could not be fetched. ``str()`` is the item's last_error."""

    def __init__(self, kind: FetchErrorKind, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @classmethod
    def of_kind(cls, kind: FetchErrorKind) -> "FetchError":
        return cls(kind, MESSAGES[kind])

    @classmethod
    def http_status(cls, status_code: int) -> "FetchError":
        return cls(FetchErrorKind.HTTP_STATUS, f"HTTP {status_code}", status_code=status_code)


def _exception_chain(exc: BaseException) -> list[BaseException]:
    chain = []
    while exc is not None and exc not in chain:
        chain.append(exc)
        exc = exc.__cause__ or exc.__context__
    return chain


def classify_error(exc: Exception) -> FetchError:
    """Map a transport exception to a FetchError.

    httpx wraps the underlying OSError, so the whole cause chain is checked
    for the socket-level error type before falling back to message text.
    """
    chain = _exception_chain(exc)
    text = " ".join(str(e) for e in chain).lower()

    def has(*types) -> bool:
        return any(isinstance(e, types) for e in chain)

    if has(httpx.TimeoutException, TimeoutError) or "timed out" in text:
        return FetchError.of_kind(FetchErrorKind.TIMEOUT)
    if has(ConnectionRefusedError) or "connection refused" in text:
        return FetchError.of_kind(FetchErrorKind.CONNECTION_REFUSED)
    if has(socket.gaierror) or any(marker in text for marker in DNS_MARKERS):
        return FetchError.of_kind(FetchErrorKind.DNS_FAILURE)
    if has(ConnectionResetError) or "connection reset" in text:
        return FetchError.of_kind(FetchErrorKind.CONNECTION_RESET)
    if isinstance(exc, httpx.HTTPStatusError):
        return FetchError.http_status(exc.response.status_code)
    return FetchError(FetchErrorKind.UNKNOWN, str(exc) or exc.__class__.__name__)
