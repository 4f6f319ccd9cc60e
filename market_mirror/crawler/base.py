"""
Seller crawler: session management and the seller-facing upstream endpoints.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp

from ..config import CrawlerConfig, get_config
from ..models import FetchResult, LocationFilterResult, UserSummaryResult
from .exceptions import UpstreamHTTPError
from .failover import HostFailoverFetcher
from .stream_reader import BoundedStreamReader, marker_predicate

logger = logging.getLogger(__name__)

# The share form follows the manifesto on every profile page.
MANIFESTO_SEEN = marker_predicate(r"manifesto")
SHARE_TOKEN_SEEN = marker_predicate(r'name="contextRefNum"|name="contextId"|class="shareForm"')


def seller_page_complete(text: str) -> bool:
    """True once the buffered page holds the manifesto and a share token."""
    return MANIFESTO_SEEN(text) and SHARE_TOKEN_SEEN(text)


LOCATION_FILTER_TIMEOUT_MS = 15000


def client_timeout(timeout_ms: int) -> aiohttp.ClientTimeout:
    """Per-request timeout covering connect and each socket read."""
    seconds = timeout_ms / 1000
    return aiohttp.ClientTimeout(total=None, sock_connect=seconds, sock_read=seconds)


def raise_for_status(response: aiohttp.ClientResponse, url: str) -> None:
    """Raise ``UpstreamHTTPError`` for any non-2xx response."""
    if not 200 <= response.status < 300:
        raise UpstreamHTTPError(response.status, url)


async def fetch_json(
    session: aiohttp.ClientSession, url: str, timeout_ms: int
) -> Dict[str, Any]:
    """
    GET ``url`` and decode its JSON body.

    Returns:
        The decoded object, or an empty dict when the body is JSON but not an object.

    Raises:
        UpstreamHTTPError: On a non-2xx status.
    """
    async with session.get(
        url,
        timeout=aiohttp.ClientTimeout(total=timeout_ms / 1000),
        headers={"Accept": "application/json"},
    ) as response:
        raise_for_status(response, url)
        data = await response.json(content_type=None)
    return data if isinstance(data, dict) else {}


def unwrap_message(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return the ``message`` envelope if present, else an empty dict."""
    message = data.get("message") if isinstance(data, dict) else None
    return message if isinstance(message, dict) else {}


class SellerCrawler:
    """Fetches seller pages and seller JSON endpoints with host failover."""

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the crawler.

        Args:
            config: Crawler settings. Defaults to the application config.
            session: Shared HTTP session. When omitted one is created on
                first use and closed by ``cleanup``.
        """
        self.config = config or get_config().crawler
        self.failover = HostFailoverFetcher(self.config.hosts)
        self._session = session
        self._owns_session = session is None

    async def setup(self) -> aiohttp.ClientSession:
        """Create the HTTP session if needed and return it."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.config.user_agent}
            )
            self._owns_session = True
        return self._session

    async def cleanup(self) -> None:
        """Close the HTTP session if this crawler created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "SellerCrawler":
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cleanup()

    @property
    def session(self) -> Optional[aiohttp.ClientSession]:
        return self._session

    async def fetch_seller_page(
        self,
        seller_id: Any,
        timeout_ms: Optional[int] = None,
        max_bytes: Optional[int] = None,
        early_abort: Optional[bool] = None,
        early_abort_min_bytes: Optional[int] = None,
    ) -> FetchResult:
        """
        Fetch a seller profile page, reading at most ``max_bytes``.

        Args:
            seller_id: Upstream seller id.
            timeout_ms: Per-host budget. The body gets this plus a 2s grace.
            max_bytes: Cap on buffered bytes.
            early_abort: Stop once the manifesto and share form have been seen.
            early_abort_min_bytes: Bytes to buffer before looking for it.

        Returns:
            FetchResult for the first host that served the page.
        """
        cfg = self.config
        timeout_ms = timeout_ms or cfg.timeout_ms
        reader = BoundedStreamReader(
            max_bytes=max_bytes or cfg.max_bytes,
            timeout_ms=max(1000, timeout_ms + 2000),
            early_abort=cfg.early_abort if early_abort is None else early_abort,
            early_abort_min_bytes=early_abort_min_bytes or cfg.early_abort_min_bytes,
            predicate=seller_page_complete,
        )
        session = await self.setup()
        path = f"/viewSubject/p/{quote(str(seller_id), safe='')}"

        async def attempt(url: str) -> FetchResult:
            started = time.monotonic()
            async with session.get(url, timeout=client_timeout(timeout_ms)) as response:
                raise_for_status(response, url)
                body = await reader.read(response)
            result = FetchResult(
                html=body.buffer.decode("utf-8", errors="replace"),
                source_url=url,
                byte_count=body.byte_count,
                elapsed_ms=int((time.monotonic() - started) * 1000),
            )
            logger.debug(
                f"Seller page id={seller_id} bytes={result.byte_count} "
                f"kept={len(body.buffer)} aborted={body.aborted} ms={result.elapsed_ms}"
            )
            return result

        return await self.failover.fetch(path, attempt, label=f"seller page {seller_id}")

    async def fetch_user_summary(self, seller_id: Any) -> UserSummaryResult:
        """
        Fetch rating summary and dispute statistics for a seller.

        The payload may or may not be wrapped in a ``message`` envelope.
        """
        session = await self.setup()
        path = f"/core/api/getUserSummary/p/{quote(str(seller_id), safe='')}"

        async def attempt(url: str) -> UserSummaryResult:
            data = await fetch_json(session, url, self.config.timeout_ms)
            body = unwrap_message(data) or data
            seller = body.get("seller") if isinstance(body.get("seller"), dict) else {}
            summary = body.get("summary")
            statistics = body.get("statistics") or seller.get("statistics")
            return UserSummaryResult(
                summary=summary if isinstance(summary, dict) else None,
                statistics=statistics if isinstance(statistics, dict) else None,
                raw=data,
                source_url=url,
            )

        return await self.failover.fetch(path, attempt, label=f"user summary {seller_id}")

    async def set_location_filter(
        self, ships_to: Optional[str], tokens: Optional[Dict[str, str]] = None
    ) -> LocationFilterResult:
        """
        Post the "ships to" location filter for the session.

        Redirects are not followed: a 3xx answer is reported as not ok.
        Never raises.

        Args:
            ships_to: Country code to filter on.
            tokens: Optional ``_sourcePage`` and ``__fp`` form tokens.
        """
        if not ships_to:
            return LocationFilterResult(ok=False, attempted=False)

        tokens = tokens or {}
        fields = [
            ("shipsTo", ships_to),
            ("_sourcePage", tokens.get("_sourcePage")),
            ("__fp", tokens.get("__fp")),
        ]
        writer = aiohttp.MultipartWriter("form-data")
        for name, value in fields:
            if value is None:
                continue
            part = writer.append(str(value))
            part.set_content_disposition("form-data", name=name)

        url = f"{self.failover.hosts[0]}/setLocationFilter" if self.failover.hosts else ""
        try:
            session = await self.setup()
            async with session.post(
                url,
                data=writer,
                allow_redirects=False,
                timeout=aiohttp.ClientTimeout(total=LOCATION_FILTER_TIMEOUT_MS / 1000),
            ) as response:
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Location filter failed: {e}")
            return LocationFilterResult(ok=False, attempted=True, error=str(e) or type(e).__name__)

        ok = 200 <= status < 300
        if not ok:
            logger.warning(f"Location filter not applied: status={status}")
        return LocationFilterResult(ok=ok, attempted=True, status=status)
