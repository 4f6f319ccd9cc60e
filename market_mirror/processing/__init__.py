"""
Processing package: folds crawled records into index artifacts.
"""

from .images import build_item_image_lookup, pick_item_image
from .scoreboard import ScoreBoard
from .sellers import build_market_sellers, seller_key

__all__ = [
    "ScoreBoard",
    "build_item_image_lookup",
    "build_market_sellers",
    "pick_item_image",
    "seller_key",
]
