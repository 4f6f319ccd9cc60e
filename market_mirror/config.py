"""
Configuration module for the marketplace mirror crawler.
"""

import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

DEFAULT_HOSTS = "https://littlebiggy.net,https://www.littlebiggy.net"


def _split_hosts(value: str) -> List[str]:
    return [host.strip().rstrip("/") for host in value.split(",") if host.strip()]


class CrawlerConfig(BaseModel):
    """Crawler configuration settings."""

    hosts: List[str] = Field(
        default_factory=lambda: _split_hosts(os.getenv("CRAWLER_HOSTS", DEFAULT_HOSTS)),
        description="Candidate base hosts, tried in order",
    )
    user_agent: str = Field(
        default=os.getenv("USER_AGENT", "Mozilla/5.0 (compatible; MarketMirror/1.0)"),
        description="User agent string to use for requests",
    )
    timeout_ms: int = Field(
        default=int(os.getenv("CRAWLER_TIMEOUT_MS", "30000")),
        description="Per-host request budget in milliseconds",
    )
    max_bytes: int = Field(
        default=int(os.getenv("CRAWLER_MAX_BYTES", "2000000")),
        description="Hard cap on buffered bytes for a streamed page",
    )
    early_abort: bool = Field(
        default=os.getenv("CRAWLER_EARLY_ABORT", "true").lower() == "true",
        description="Stop reading a seller page once its profile markup is seen",
    )
    early_abort_min_bytes: int = Field(
        default=int(os.getenv("CRAWLER_EARLY_ABORT_MIN_BYTES", "8192")),
        description="Minimum buffered bytes before the early-abort check runs",
    )
    concurrency: int = Field(
        default=int(os.getenv("SELLER_ENRICH_CONCURRENCY", "4")),
        description="Maximum simultaneous outbound seller fetches",
    )
    review_page_size: int = Field(
        default=int(os.getenv("SELLER_REVIEWS_PAGE_SIZE", "100")),
        description="Reviews requested per page",
    )
    review_max_store: int = Field(
        default=int(os.getenv("SELLER_REVIEWS_MAX_STORE", "300")),
        description="Maximum reviews kept per seller",
    )
    review_retries: int = Field(
        default=int(os.getenv("CRAWLER_RETRY_ATTEMPTS", "3")),
        description="Attempts per review page before giving up",
    )
    retry_delay: float = Field(
        default=float(os.getenv("CRAWLER_RETRY_DELAY", "0.5")),
        description="Base delay between review page attempts in seconds",
    )
    ships_to: Optional[str] = Field(
        default=os.getenv("CRAWLER_SHIPS_TO") or None,
        description="Country code for the upstream location filter",
    )
    kind: str = Field(
        default=os.getenv("CRAWLER_KIND", "sellers"),
        description="Which registered crawler the CLI runs",
    )


class StorageConfig(BaseModel):
    """Storage configuration settings."""

    type: str = Field(
        default=os.getenv("STORAGE_TYPE", "file"),
        description="Storage type (file, memory)",
    )
    path: str = Field(
        default=os.getenv("STORAGE_PATH", "./data/blobs"),
        description="Root directory for file storage",
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the configuration to a dictionary."""
        return {
            "crawler": self.crawler.model_dump(),
            "storage": self.storage.model_dump(),
        }


# Default configuration instance; components accept their own
config = AppConfig()


def get_config() -> AppConfig:
    """Get the default configuration instance."""
    return config
