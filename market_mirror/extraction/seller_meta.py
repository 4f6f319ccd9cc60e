"""
Seller profile metadata: online/joined status and avatar image.

Nothing in here raises; a missing or malformed region yields empty values.
"""

import logging
import re
from typing import Iterator, Optional

from ..models import SellerMeta
from .regions import class_pattern, extract_balanced_region

logger = logging.getLogger(__name__)

META_CONTAINER = class_pattern("reginald", "Bp1")

IMAGE_CLASS_MARKER = "softened"
PLACEHOLDER_IMAGE = re.compile(r"spinner-bert\.gif", re.IGNORECASE)
REAL_ASSET_PATH = re.compile(r"/images/u/", re.IGNORECASE)

_SCRIPT_STYLE = re.compile(r"<script[\s\S]*?</script>|<style[\s\S]*?</style>", re.IGNORECASE)
_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")

_ONLINE = re.compile(r"\bonline\s+(\w+)", re.IGNORECASE)
_JOINED = re.compile(r"\bjoined\s+(.+)$", re.IGNORECASE)

# Whole-page fallbacks are stricter since they see far more text.
_FALLBACK_ONLINE = re.compile(
    r"\bonline\s+(now|today|yesterday|\d+\s*(?:mins?|minutes?|hours?|hrs?)\s*ago)",
    re.IGNORECASE,
)
_FALLBACK_JOINED = re.compile(r"\bjoined\s+([A-Za-z]{3,9}\s+\d{4})", re.IGNORECASE)

_IMG_TAG = re.compile(r"<img\b([^>]*)>", re.IGNORECASE)


def flatten_text(html: str) -> str:
    """Drop scripts, styles and tags, collapsing all whitespace to single spaces."""
    html = _SCRIPT_STYLE.sub(" ", html)
    html = _BR.sub("\n", html)
    return _WHITESPACE.sub(" ", _ANY_TAG.sub(" ", html)).strip()


def extract_online_and_joined(html: str) -> SellerMeta:
    """Read online/joined text from the profile's metadata region."""
    region = extract_balanced_region(html, META_CONTAINER)
    if region is None:
        return SellerMeta()

    text = flatten_text(region.html)
    online = _ONLINE.search(text)
    joined = _JOINED.search(text)
    return SellerMeta(
        online_status=online.group(1).lower() if online else None,
        joined_text=joined.group(1).strip() if joined else None,
    )


def extract_seller_meta_fallback(html: str) -> SellerMeta:
    """Scan the whole page when the metadata region is missing."""
    if not html or not isinstance(html, str):
        return SellerMeta()
    text = flatten_text(html)
    online = _FALLBACK_ONLINE.search(text)
    joined = _FALLBACK_JOINED.search(text)
    return SellerMeta(
        online_status=online.group(1).lower() if online else None,
        joined_text=joined.group(1).strip() if joined else None,
    )


def _attr(attrs: str, name: str) -> Optional[str]:
    match = re.search(rf"(?<![\w-]){re.escape(name)}=[\"']([^\"']+)[\"']", attrs, re.IGNORECASE)
    return match.group(1) if match else None


def _first_srcset_url(srcset: Optional[str]) -> Optional[str]:
    if not srcset:
        return None
    first = srcset.split(",")[0].strip().split()
    return first[0] if first else None


def _pick_src(attrs: str) -> Optional[str]:
    data_src = _attr(attrs, "data-src")
    src = data_src or _first_srcset_url(_attr(attrs, "srcset")) or _attr(attrs, "src")
    if src and PLACEHOLDER_IMAGE.search(src):
        if data_src and not PLACEHOLDER_IMAGE.search(data_src):
            src = data_src
        else:
            src = None
    return src


def _has_marker_class(attrs: str) -> bool:
    classes = _attr(attrs, "class") or ""
    return IMAGE_CLASS_MARKER in classes.lower().split()


def _img_attrs(html: str) -> Iterator[str]:
    for match in _IMG_TAG.finditer(html):
        yield match.group(1) or ""


def extract_seller_image_url(html: str) -> Optional[str]:
    """
    Pick the seller's avatar URL, skipping loading placeholders.

    The image carrying the marker class wins when it points at a real asset;
    otherwise every ``<img>`` is scanned for a real asset or the marker class.
    """
    if not html or not isinstance(html, str):
        return None

    primary = None
    for attrs in _img_attrs(html):
        if _has_marker_class(attrs):
            primary = _pick_src(attrs)
            break
    if primary and REAL_ASSET_PATH.search(primary):
        return primary

    for attrs in _img_attrs(html):
        candidate = _pick_src(attrs)
        if not candidate:
            continue
        if REAL_ASSET_PATH.search(candidate) or _has_marker_class(attrs):
            return candidate

    return primary
