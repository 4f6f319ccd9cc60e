"""
Pydantic models for crawled marketplace records.

Fields are snake_case in Python and serialize with the camelCase names the
storefront index uses (``model_dump(by_alias=True)``).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FetchResult(BaseModel):
    """One successful seller-page fetch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    html: str = Field(..., description="Decoded page body (possibly truncated)")
    source_url: str = Field(..., alias="sourceUrl", description="URL that served the page")
    byte_count: int = Field(
        ..., alias="byteCount", description="Bytes received, including dropped excess"
    )
    elapsed_ms: int = Field(..., alias="elapsedMs", description="Wall time of the fetch")


class StreamReadResult(BaseModel):
    """Outcome of reading one streamed body under a byte cap."""

    buffer: bytes = Field(b"", description="Buffered bytes, never more than the cap")
    byte_count: int = Field(0, description="Bytes received from the stream")
    elapsed_ms: int = Field(0, description="Milliseconds since the stream opened")
    aborted: Optional[str] = Field(
        None, description="Why the read stopped early (max_bytes, early_abort)"
    )


class UserSummaryResult(BaseModel):
    """Seller rating summary and dispute statistics."""

    model_config = ConfigDict(populate_by_name=True)

    summary: Optional[Dict[str, Any]] = None
    statistics: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = Field(default_factory=dict)
    source_url: str = Field(..., alias="sourceUrl")


class ReviewPage(BaseModel):
    """One page of reviews from a reviews endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    item: Optional[Dict[str, Any]] = None
    reviews: List[Dict[str, Any]] = Field(default_factory=list)
    source_count: int = Field(
        0, alias="sourceCount", description="Elements upstream returned, including malformed ones"
    )
    first_offset: int = Field(0, alias="firstOffset")
    page_size: int = Field(0, alias="pageSize")
    raw: Dict[str, Any] = Field(default_factory=dict)
    source_url: str = Field(..., alias="sourceUrl")
    elapsed_ms: int = Field(0, alias="elapsedMs")


class ReviewPageMeta(BaseModel):
    """Bookkeeping for one page visited by a paged collection."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    count: int
    has_item: bool = Field(False, alias="hasItem")


class ReviewCollection(BaseModel):
    """Reviews gathered by walking several pages."""

    model_config = ConfigDict(populate_by_name=True)

    reviews: List[Dict[str, Any]] = Field(default_factory=list)
    source_fetched: int = Field(0, alias="sourceFetched")
    page_size: int = Field(0, alias="pageSizeRequested")
    pages: List[ReviewPageMeta] = Field(default_factory=list)


class ManifestoResult(BaseModel):
    """Seller bio text carved out of a profile page."""

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    length: int = 0
    line_count: int = Field(0, alias="lineCount")


class SellerMeta(BaseModel):
    """Online/joined metadata shown on a seller profile."""

    model_config = ConfigDict(populate_by_name=True)

    online_status: Optional[str] = Field(None, alias="onlineStatus")
    joined_text: Optional[str] = Field(None, alias="joinedText")


class SellerAggregate(BaseModel):
    """Deduplicated per-seller summary for one market."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[Any] = None
    name: str = ""
    url: Optional[str] = None
    online_status: Optional[str] = Field(None, alias="onlineStatus")
    items_count: int = Field(0, alias="itemsCount")
    average_rating: Optional[Union[int, float]] = Field(None, alias="averageRating")
    average_days_to_arrive: Optional[Union[int, float]] = Field(None, alias="averageDaysToArrive")
    number_of_reviews: Optional[Union[int, float]] = Field(None, alias="numberOfReviews")


class ItemImageLookup(BaseModel):
    """Representative image URL per item ref and per item id."""

    model_config = ConfigDict(populate_by_name=True)

    by_ref: Dict[str, str] = Field(default_factory=dict, alias="byRef")
    by_id: Dict[str, str] = Field(default_factory=dict, alias="byId")


class ScoreBoardEntry(BaseModel):
    """One score adjustment in a categorization trace."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: str
    delta: float
    running_total: float = Field(..., alias="runningTotal")
    reason: str = ""


class LocationFilterResult(BaseModel):
    """Outcome of posting the upstream location filter form."""

    ok: bool = False
    attempted: bool = False
    status: Optional[int] = None
    error: Optional[str] = None


class SellerDetail(BaseModel):
    """Enriched seller record written to the blob store."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    source_url: Optional[str] = Field(None, alias="sourceUrl")
    manifesto: Optional[str] = None
    manifesto_meta: Dict[str, int] = Field(
        default_factory=lambda: {"length": 0, "lines": 0}, alias="manifestoMeta"
    )
    online: Optional[str] = None
    joined: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    summary: Optional[Dict[str, Any]] = None
    statistics: Optional[Dict[str, Any]] = None
    reviews: List[Dict[str, Any]] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=datetime.now, alias="fetchedAt")


class CrawlResult(BaseModel):
    """Summary of one crawler run."""

    processed: int = 0
    written: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)
    images: Dict[str, str] = Field(default_factory=dict)


class RunOptions(BaseModel):
    """Inputs for one crawler run."""

    seller_ids: List[str] = Field(default_factory=list, description="Sellers to enrich")
    market: Optional[str] = Field(None, description="Market code for index builds")
    include_reviews: bool = Field(True, description="Also collect received reviews")
