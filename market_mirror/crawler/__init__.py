"""
Crawler core: bounded fetching of upstream marketplace pages and JSON endpoints.
"""

from .base import SellerCrawler
from .concurrency import ConcurrencyLimiter, map_limited
from .exceptions import (CrawlerError, NoHostsSucceededError, StreamTimeoutError,
                         UpstreamHTTPError)
from .failover import HostFailoverFetcher
from .retry_handler import RetryHandler, RetryStrategy
from .reviews import ReviewsPaginator
from .stream_reader import BoundedStreamReader

__all__ = [
    "BoundedStreamReader",
    "ConcurrencyLimiter",
    "CrawlerError",
    "HostFailoverFetcher",
    "NoHostsSucceededError",
    "RetryHandler",
    "RetryStrategy",
    "ReviewsPaginator",
    "SellerCrawler",
    "StreamTimeoutError",
    "UpstreamHTTPError",
    "map_limited",
]
