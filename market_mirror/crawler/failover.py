"""
Host failover for upstream requests.

The marketplace serves the same content from more than one base domain. A
request is attempted against each candidate host in order; transient
failures (5xx, network errors, timeouts) move on to the next host while a
client error (< 500) stops immediately.
"""

import logging
import time
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from .exceptions import NoHostsSucceededError, is_transient, status_of

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HostFailoverFetcher:
    """Runs one request against an ordered list of candidate hosts."""

    def __init__(self, hosts: Sequence[str]):
        """
        Initialize the fetcher.

        Args:
            hosts: Base URLs (scheme and domain) in order of preference.
        """
        self.hosts: List[str] = [host.rstrip("/") for host in hosts]

    def urls_for(self, path: str) -> List[str]:
        """Return the full URL of ``path`` on every candidate host."""
        return [f"{host}{path}" for host in self.hosts]

    async def fetch(
        self,
        path: str,
        request: Callable[[str], Awaitable[T]],
        label: Optional[str] = None,
    ) -> T:
        """
        Execute ``request`` for ``path`` on each host until one succeeds.

        Every host gets the full time budget of ``request``; a slow first
        host does not shorten the attempt on the next one.

        Args:
            path: Path (with query string) appended to each host.
            request: Coroutine function taking the full URL.
            label: Short description used in log lines.

        Returns:
            The first successful result.

        Raises:
            Exception: The last error observed once every host has failed, or
                the first client error.
            NoHostsSucceededError: If no host produced a result or an error.
        """
        label = label or path
        last_error: Optional[Exception] = None

        for url in self.urls_for(path):
            started = time.monotonic()
            try:
                result = await request(url)
                logger.debug(
                    f"{label}: ok url={url} ms={int((time.monotonic() - started) * 1000)}"
                )
                return result
            except Exception as e:
                last_error = e
                status = status_of(e)
                logger.warning(
                    f"{label}: failed url={url} "
                    f"status={status or type(e).__name__} "
                    f"ms={int((time.monotonic() - started) * 1000)}"
                )
                if not is_transient(e):
                    break

        if last_error is not None:
            raise last_error
        raise NoHostsSucceededError(f"No hosts succeeded for {label}")
