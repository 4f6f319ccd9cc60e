"""
Exceptions for the crawler module.

Host failover decides what to do with a failure by looking at the HTTP status
it carries: errors with a status below 500 are final, everything else (5xx,
network failures, stream timeouts) is worth trying on the next host.
"""

from typing import Optional

import aiohttp


class CrawlerError(Exception):
    """Base class for crawler exceptions."""

    pass


class UpstreamHTTPError(CrawlerError):
    """
    Exception raised when an upstream host answers with a non-2xx status.
    """

    def __init__(self, status: int, url: str, message: Optional[str] = None):
        self.status = status
        self.url = url
        super().__init__(message or f"HTTP {status} from {url}")


class StreamTimeoutError(CrawlerError):
    """
    Exception raised when a streamed body is not complete within its budget.

    Carries ``code = "timeout"`` so callers can tell "too slow" apart from
    "upstream rejected".
    """

    code = "timeout"

    def __init__(self, url: Optional[str] = None, timeout_ms: Optional[int] = None):
        self.url = url
        self.timeout_ms = timeout_ms
        super().__init__(f"timeout after {timeout_ms}ms reading {url or 'stream'}")


class NoHostsSucceededError(CrawlerError):
    """
    Exception raised when failover ends without any host producing an error.
    """

    pass


def status_of(exc: BaseException) -> Optional[int]:
    """Return the HTTP status carried by an exception, if any."""
    if isinstance(exc, UpstreamHTTPError):
        return exc.status
    if isinstance(exc, aiohttp.ClientResponseError):
        return exc.status
    return None


def is_transient(exc: BaseException) -> bool:
    """True for 5xx responses and failures that never produced a status."""
    status = status_of(exc)
    return status is None or status >= 500
