"""
Market mirror crawler.

This package fetches seller profiles and review pages from an upstream
marketplace and folds stored market data into seller lists and image lookups.
"""

import logging

from .config import get_config
from .crawler import (BoundedStreamReader, ConcurrencyLimiter, HostFailoverFetcher,
                      ReviewsPaginator, SellerCrawler)
from .extraction import extract_manifesto, extract_online_and_joined, extract_seller_image_url
from .models import CrawlResult, RunOptions, SellerAggregate
from .pipeline import CRAWLERS, ItemCrawler, build_index, create_crawler
from .processing import ScoreBoard, build_item_image_lookup, build_market_sellers
from .storage import create_storage

# Set up package logger
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Version
__version__ = "0.1.0"

__all__ = [
    "BoundedStreamReader",
    "CRAWLERS",
    "ConcurrencyLimiter",
    "CrawlResult",
    "HostFailoverFetcher",
    "ItemCrawler",
    "ReviewsPaginator",
    "RunOptions",
    "ScoreBoard",
    "SellerAggregate",
    "SellerCrawler",
    "build_index",
    "build_item_image_lookup",
    "build_market_sellers",
    "create_crawler",
    "create_storage",
    "extract_manifesto",
    "extract_online_and_joined",
    "extract_seller_image_url",
    "get_config",
]
