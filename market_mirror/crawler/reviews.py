"""
Paged review fetching.

A page request is stateless: callers walk an item's (or a seller's) reviews by
asking for increasing offsets, or use ``collect`` to do the walk.
"""

import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, Sequence
from urllib.parse import quote

import aiohttp

from ..models import ReviewCollection, ReviewPage, ReviewPageMeta
from .base import fetch_json, unwrap_message
from .failover import HostFailoverFetcher
from .retry_handler import RetryHandler, create_linear_retry_handler

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int, int], Awaitable[ReviewPage]]


def _window_value(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return default


def _has_item(review: Any) -> bool:
    item = review.get("item") if isinstance(review, dict) else None
    return isinstance(item, dict) and bool(item.get("refNum") or item.get("id") or item.get("name"))


class ReviewsPaginator:
    """Fetches review pages from the reviews JSON API with host failover."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        hosts: Sequence[str],
        timeout_ms: int = 30000,
        retry_handler: Optional[RetryHandler] = None,
    ):
        self.session = session
        self.failover = HostFailoverFetcher(hosts)
        self.timeout_ms = timeout_ms
        self.retry_handler = retry_handler or create_linear_retry_handler()

    async def fetch_page(self, ref_num: Any, offset: int = 0, page_size: int = 100) -> ReviewPage:
        """Fetch one page of reviews for an item."""
        path = (
            f"/core/api/reviews/item/{quote(str(ref_num), safe='')}"
            f"?first={offset}&n={page_size}&requireMedia=false"
        )
        return await self._fetch(path, offset, page_size, label=f"reviews ref={ref_num}")

    async def fetch_seller_page(
        self, seller_id: Any, offset: int = 0, page_size: int = 100
    ) -> ReviewPage:
        """Fetch one page of the reviews a seller has received."""
        path = (
            f"/core/api/reviews/user/{quote(str(seller_id), safe='')}/received"
            f"?first={offset}&n={page_size}&requireMedia=false"
        )
        return await self._fetch(path, offset, page_size, label=f"seller reviews id={seller_id}")

    async def _fetch(self, path: str, offset: int, page_size: int, label: str) -> ReviewPage:
        async def attempt(url: str) -> ReviewPage:
            started = time.monotonic()
            data = await fetch_json(self.session, url, self.timeout_ms)
            message = unwrap_message(data)
            reviews = message.get("reviews")
            if not isinstance(reviews, list):
                reviews = []
            item = message.get("item")
            page = ReviewPage(
                item=item if isinstance(item, dict) else None,
                reviews=[r for r in reviews if isinstance(r, dict)],
                source_count=len(reviews),
                first_offset=_window_value(message.get("first"), offset),
                page_size=_window_value(message.get("n"), 0) or page_size,
                raw=data,
                source_url=url,
                elapsed_ms=int((time.monotonic() - started) * 1000),
            )
            logger.debug(f"{label} offset={offset} got={len(page.reviews)} ms={page.elapsed_ms}")
            return page

        return await self.failover.fetch(path, attempt, label=label)

    async def collect(
        self,
        fetch: PageFetcher,
        page_size: int = 100,
        max_store: int = 300,
    ) -> ReviewCollection:
        """
        Walk pages from offset 0 until the source is exhausted or ``max_store``
        reviews have been kept.

        Each page goes through the retry handler; a page that still fails
        aborts the walk with its last error.

        Args:
            fetch: Page fetcher taking ``(offset, page_size)``, e.g.
                ``functools.partial(paginator.fetch_seller_page, seller_id)``.
            page_size: Reviews requested per page.
            max_store: Maximum reviews to keep.
        """
        reviews: List[Any] = []
        pages: List[ReviewPageMeta] = []
        source_fetched = 0
        offset = 0

        while len(reviews) < max_store:
            page = await self.retry_handler.execute(fetch, offset, page_size)
            got = max(page.source_count, len(page.reviews))
            source_fetched += got
            pages.append(
                ReviewPageMeta(
                    url=page.source_url,
                    count=got,
                    has_item=any(_has_item(review) for review in page.reviews),
                )
            )
            if not got:
                break
            reviews.extend(page.reviews[: max_store - len(reviews)])
            if got < page_size:
                break
            offset += got

        return ReviewCollection(
            reviews=reviews,
            source_fetched=source_fetched,
            page_size=page_size,
            pages=pages,
        )
