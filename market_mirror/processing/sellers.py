"""
Seller aggregation for a market index.

Folds raw per-item records (for online status) and market index entries (for
seller identity and item counts) into one sorted record per seller. The fold
is pure: the same inputs always give the same ordered output.
"""

import locale
import logging
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..models import SellerAggregate

logger = logging.getLogger(__name__)

DEFAULT_SELLER_URL_BASE = "https://littlebiggy.net/viewSubject/p/"

# Only-upgrade ordering for online status.
ONLINE_RANK = {"yesterday": 1, "today": 2}


def seller_key(seller_id: Any, seller_name: Optional[str]) -> str:
    """Dedup key: ``id:<id>`` when an id is known, else ``name:<lowercased name>``."""
    if seller_id is not None and seller_id != "":
        return f"id:{seller_id}"
    return f"name:{(seller_name or '').lower()}"


def _index_identity(entry: Mapping[str, Any]) -> Tuple[Any, Optional[str]]:
    seller_id = entry.get("sellerId", entry.get("sid"))
    name = entry.get("sellerName", entry.get("sn"))
    return seller_id, (str(name) if name is not None else None)


def _raw_identity(item: Mapping[str, Any]) -> Tuple[Any, Optional[str], Any]:
    seller = item.get("seller") if isinstance(item.get("seller"), Mapping) else {}
    seller_id = seller.get("id", item.get("sellerId"))
    name = seller.get("name", item.get("sellerName"))
    online = seller.get("online", item.get("sellerOnline"))
    return seller_id, (str(name) if name is not None else None), online


def collect_online_status(raw_items: Iterable[Any]) -> Dict[str, str]:
    """
    Derive each seller's best online status from raw items.

    "today" beats "yesterday"; a status is only ever upgraded, so any other
    value (including an explicit offline marker) leaves it untouched.
    """
    status: Dict[str, str] = {}
    for item in raw_items or []:
        if not isinstance(item, Mapping):
            continue
        seller_id, name, online = _raw_identity(item)
        if seller_id is None and not name:
            continue
        rank = ONLINE_RANK.get(online) if isinstance(online, str) else None
        if rank is None:
            continue
        key = seller_key(seller_id, name)
        current = status.get(key)
        if current is None or rank > ONLINE_RANK[current]:
            status[key] = online
    return status


def _number(value: Any) -> Optional[Union[int, float]]:
    if isinstance(value, Real) and not isinstance(value, bool):
        return value
    return None


def _name_sort_key(name: str) -> str:
    # strxfrm rejects embedded NULs
    return locale.strxfrm(name.casefold().replace("\x00", ""))


def build_market_sellers(
    raw_items: Iterable[Any],
    market_index_items: Iterable[Any],
    seller_review_summaries: Optional[Mapping[str, Any]] = None,
    seller_url_base: str = DEFAULT_SELLER_URL_BASE,
) -> List[SellerAggregate]:
    """
    Build the per-market seller list.

    Args:
        raw_items: Raw item records; only their seller online flags are used.
        market_index_items: Index entries with ``sellerId``/``sellerName``
            (or the minified ``sid``/``sn``); one entry per listed item.
        seller_review_summaries: Review statistics keyed by seller id.
        seller_url_base: Prefix for the seller profile URL.

    Returns:
        One SellerAggregate per seller, most reviewed first, then by name.
    """
    counts: Dict[str, int] = {}
    first_seen: Dict[str, Tuple[Any, Optional[str]]] = {}
    for entry in market_index_items or []:
        if not isinstance(entry, Mapping):
            continue
        seller_id, name = _index_identity(entry)
        key = seller_key(seller_id, name)
        counts[key] = counts.get(key, 0) + 1
        first_seen.setdefault(key, (seller_id, name))

    online = collect_online_status(raw_items)
    summaries = seller_review_summaries if isinstance(seller_review_summaries, Mapping) else {}

    sellers: List[SellerAggregate] = []
    for key, count in counts.items():
        seller_id, name = first_seen[key]
        has_id = seller_id is not None and seller_id != ""
        stats = summaries.get(str(seller_id)) if has_id else None
        if not isinstance(stats, Mapping):
            stats = {}
        sellers.append(
            SellerAggregate(
                id=seller_id if has_id else None,
                name=name or "",
                url=f"{seller_url_base}{seller_id}" if has_id else None,
                online_status=online.get(key),
                items_count=count,
                average_rating=_number(stats.get("averageRating")),
                average_days_to_arrive=_number(stats.get("averageDaysToArrive")),
                number_of_reviews=_number(stats.get("numberOfReviews")),
            )
        )

    sellers.sort(key=lambda s: (-(s.number_of_reviews or 0), _name_sort_key(s.name), s.name))
    logger.debug(f"Built {len(sellers)} sellers from {sum(counts.values())} index entries")
    return sellers
