"""
Crawl runs wiring the crawler core together.

``SellerEnrichmentRun`` fetches seller pages with bounded parallelism and
writes enriched seller records; ``IndexBuildRun`` folds stored market data
into the seller list and item image lookup. Both implement ``ItemCrawler`` and
are picked by name from ``CRAWLERS``.
"""

import abc
import functools
import logging
from typing import Any, Dict, List, Optional, Type

from .config import AppConfig, CrawlerConfig, get_config
from .crawler.base import SellerCrawler
from .crawler.concurrency import map_limited
from .crawler.reviews import ReviewsPaginator
from .crawler.retry_handler import create_linear_retry_handler
from .extraction import (extract_manifesto, extract_online_and_joined,
                         extract_seller_image_url, extract_seller_meta_fallback)
from .models import CrawlResult, RunOptions, SellerDetail
from .processing import build_item_image_lookup, build_market_sellers
from .storage import BlobStore

logger = logging.getLogger(__name__)

SELLER_IMAGES_KEY = "sellers/images.json"


def seller_detail_key(seller_id: str) -> str:
    return f"sellers/{seller_id}.json"


class ItemCrawler(abc.ABC):
    """A crawl that can be started with run options and reports a CrawlResult."""

    name: str = ""

    @abc.abstractmethod
    async def run(self, options: RunOptions) -> CrawlResult:
        """Execute the crawl."""
        pass

    @classmethod
    @abc.abstractmethod
    def from_config(cls, config: AppConfig, storage: BlobStore) -> "ItemCrawler":
        """Build the crawler from application configuration."""
        pass

    async def close(self) -> None:
        """Release network resources held by the crawler."""
        pass


class _SellerOutcome:
    def __init__(self, detail: Optional[SellerDetail] = None, error: Optional[str] = None):
        self.detail = detail
        self.error = error


class SellerEnrichmentRun(ItemCrawler):
    """Fetches and stores enriched seller profiles."""

    name = "sellers"

    def __init__(
        self,
        crawler: SellerCrawler,
        storage: BlobStore,
        config: Optional[CrawlerConfig] = None,
        paginator: Optional[ReviewsPaginator] = None,
    ):
        self.crawler = crawler
        self.storage = storage
        self.config = config or crawler.config
        self._paginator = paginator

    @classmethod
    def from_config(cls, config: AppConfig, storage: BlobStore) -> "SellerEnrichmentRun":
        return cls(SellerCrawler(config.crawler), storage, config.crawler)

    async def close(self) -> None:
        await self.crawler.cleanup()

    async def _get_paginator(self) -> ReviewsPaginator:
        if self._paginator is None:
            session = await self.crawler.setup()
            self._paginator = ReviewsPaginator(
                session,
                self.config.hosts,
                timeout_ms=self.config.timeout_ms,
                retry_handler=create_linear_retry_handler(
                    self.config.review_retries, self.config.retry_delay
                ),
            )
        return self._paginator

    async def run(self, options: RunOptions) -> CrawlResult:
        seller_ids: List[str] = list(dict.fromkeys(str(s) for s in options.seller_ids if str(s)))
        result = CrawlResult()
        if not seller_ids:
            return result

        logger.info(
            f"Seller enrichment starting: count={len(seller_ids)} "
            f"concurrency={self.config.concurrency}"
        )
        if self.config.ships_to:
            await self.crawler.set_location_filter(self.config.ships_to)

        async def enrich(seller_id: str) -> _SellerOutcome:
            try:
                return _SellerOutcome(detail=await self.enrich_seller(seller_id, options))
            except Exception as e:
                logger.warning(f"Seller {seller_id} failed: {type(e).__name__}: {e}")
                return _SellerOutcome(error=f"{seller_id}: {e}")

        outcomes = await map_limited(seller_ids, self.config.concurrency, enrich)

        images = await self.storage.get_json(SELLER_IMAGES_KEY, {})
        if not isinstance(images, dict):
            logger.warning(f"Replacing non-object seller image map at {SELLER_IMAGES_KEY}")
            images = {}
        for seller_id, outcome in zip(seller_ids, outcomes):
            result.processed += 1
            if outcome.detail is None:
                result.failed += 1
                result.errors.append(outcome.error or seller_id)
                continue
            await self.storage.put_json(
                seller_detail_key(seller_id),
                outcome.detail.model_dump(mode="json", by_alias=True),
            )
            result.written += 1
            if outcome.detail.image_url:
                images[seller_id] = outcome.detail.image_url
                result.images[seller_id] = outcome.detail.image_url

        await self.storage.put_json(SELLER_IMAGES_KEY, images)
        logger.info(
            f"Seller enrichment finished: processed={result.processed} "
            f"written={result.written} failed={result.failed}"
        )
        return result

    async def enrich_seller(self, seller_id: str, options: RunOptions) -> SellerDetail:
        """
        Fetch one seller's page, summary and reviews into a SellerDetail.

        A failed page fetch is fatal for the seller; summary and review
        failures only leave those fields empty.
        """
        page = await self.crawler.fetch_seller_page(seller_id)
        manifesto = extract_manifesto(page.html)
        meta = extract_online_and_joined(page.html)
        if meta.online_status is None and meta.joined_text is None:
            meta = extract_seller_meta_fallback(page.html)

        detail = SellerDetail(
            id=seller_id,
            source_url=page.source_url,
            manifesto=manifesto.text,
            manifesto_meta={"length": manifesto.length, "lines": manifesto.line_count},
            online=meta.online_status,
            joined=meta.joined_text,
            image_url=extract_seller_image_url(page.html),
        )

        try:
            summary = await self.crawler.fetch_user_summary(seller_id)
            detail.summary = summary.summary
            detail.statistics = summary.statistics
        except Exception as e:
            logger.warning(f"Seller {seller_id} summary unavailable: {e}")

        if options.include_reviews:
            paginator = await self._get_paginator()
            try:
                collection = await paginator.collect(
                    functools.partial(paginator.fetch_seller_page, seller_id),
                    page_size=self.config.review_page_size,
                    max_store=self.config.review_max_store,
                )
                detail.reviews = collection.reviews
            except Exception as e:
                logger.warning(f"Seller {seller_id} reviews unavailable: {e}")

        return detail


class IndexBuildRun(ItemCrawler):
    """Builds a market's seller list and item image lookup from stored data."""

    name = "index"

    def __init__(self, storage: BlobStore, seller_url_base: Optional[str] = None):
        self.storage = storage
        self.seller_url_base = seller_url_base

    @classmethod
    def from_config(cls, config: AppConfig, storage: BlobStore) -> "IndexBuildRun":
        base = f"{config.crawler.hosts[0]}/viewSubject/p/" if config.crawler.hosts else None
        return cls(storage, seller_url_base=base)

    async def run(self, options: RunOptions) -> CrawlResult:
        if not options.market:
            raise ValueError("An index build needs a market")
        return await build_index(self.storage, options.market, self.seller_url_base)


async def build_index(
    storage: BlobStore, market: str, seller_url_base: Optional[str] = None
) -> CrawlResult:
    """
    Fold a market's stored raw items and index into its seller list and
    item image lookup.

    Reads ``{market}/raw-items.json``, ``{market}/index.json`` and the optional
    ``{market}/seller-review-summaries.json``; writes ``{market}/sellers.json``
    and ``{market}/item-images.json``. Missing inputs count as empty.
    """
    market = market.lower()
    raw_items = await storage.get_json(f"{market}/raw-items.json", [])
    index = await storage.get_json(f"{market}/index.json", [])
    summaries = await storage.get_json(f"{market}/seller-review-summaries.json", {})

    kwargs: Dict[str, Any] = {}
    if seller_url_base:
        kwargs["seller_url_base"] = seller_url_base
    sellers = build_market_sellers(raw_items, index, summaries, **kwargs)
    lookup = build_item_image_lookup(index)

    await storage.put_json(
        f"{market}/sellers.json", [s.model_dump(by_alias=True) for s in sellers]
    )
    await storage.put_json(f"{market}/item-images.json", lookup.model_dump(by_alias=True))

    entries = len(index) if isinstance(index, list) else 0
    logger.info(
        f"Index build {market}: entries={entries} "
        f"sellers={len(sellers)} images={len(lookup.by_id)}"
    )
    return CrawlResult(processed=entries, written=2)


CRAWLERS: Dict[str, Type[ItemCrawler]] = {
    SellerEnrichmentRun.name: SellerEnrichmentRun,
    IndexBuildRun.name: IndexBuildRun,
}


def create_crawler(
    kind: Optional[str], storage: BlobStore, config: Optional[AppConfig] = None
) -> ItemCrawler:
    """
    Select and build a crawler by name.

    Raises:
        ValueError: If ``kind`` is not registered.
    """
    config = config or get_config()
    kind = (kind or config.crawler.kind).lower()
    if kind not in CRAWLERS:
        raise ValueError(f"Unknown crawler kind: {kind}")
    return CRAWLERS[kind].from_config(config, storage)
