"""
HTML region extraction for seller profile pages.
"""

from .manifesto import extract_manifesto
from .regions import BalancedRegion, class_pattern, extract_balanced_region
from .seller_meta import (extract_online_and_joined, extract_seller_image_url,
                          extract_seller_meta_fallback)

__all__ = [
    "BalancedRegion",
    "class_pattern",
    "extract_balanced_region",
    "extract_manifesto",
    "extract_online_and_joined",
    "extract_seller_image_url",
    "extract_seller_meta_fallback",
]
