"""
Item image lookup built from a market index.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from ..models import ItemImageLookup

logger = logging.getLogger(__name__)


def pick_item_image(entry: Mapping[str, Any]) -> Optional[str]:
    """
    Representative image for an index entry.

    Priority: ``imageUrl``, first of ``imageUrls``, minified primary ``i``,
    minified thumbnail ``t``.
    """
    image_url = entry.get("imageUrl")
    if isinstance(image_url, str) and image_url:
        return image_url
    image_urls = entry.get("imageUrls")
    if isinstance(image_urls, list) and image_urls and isinstance(image_urls[0], str) and image_urls[0]:
        return image_urls[0]
    for field in ("i", "t"):
        value = entry.get(field)
        if isinstance(value, str) and value:
            return value
    return None


def build_item_image_lookup(index: Iterable[Any]) -> ItemImageLookup:
    """
    Map item refs and item ids to an image URL; the first entry for a key wins.

    Entries that are not mappings, or have no usable image, are skipped.
    """
    lookup = ItemImageLookup()
    if not isinstance(index, (list, tuple)):
        return lookup

    for entry in index:
        if not isinstance(entry, Mapping):
            continue
        image = pick_item_image(entry)
        if not image:
            continue
        ref = entry.get("refNum")
        item_id = entry.get("id")
        if ref is not None:
            lookup.by_ref.setdefault(str(ref), image)
        if item_id is not None:
            lookup.by_id.setdefault(str(item_id), image)

    logger.debug(f"Image lookup: {len(lookup.by_ref)} refs, {len(lookup.by_id)} ids")
    return lookup
