"""
Seller manifesto (bio) extraction.
"""

import logging
import re

from ..models import ManifestoResult
from .regions import class_pattern, extract_balanced_region, strip_labelled_block

logger = logging.getLogger(__name__)

MANIFESTO_CONTAINER = class_pattern("reginald", "Bp3")
MANIFESTO_LABEL = re.compile(
    r"<div[^>]*class=[\"'][^\"']*Bp0[^\"']*gone[^\"']*[\"'][^>]*>\s*manifesto\s*",
    re.IGNORECASE,
)
MAX_MANIFESTO_CHARS = 50 * 1024

_STRIP_BLOCKS = [
    re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE),
    re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE),
    re.compile(r"<form[\s\S]*?</form>", re.IGNORECASE),
    re.compile(r"<input[^>]*>", re.IGNORECASE),
    re.compile(r"<button[\s\S]*?</button>", re.IGNORECASE),
]
_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
_BLANK_RUN = re.compile(r"\n{3,}")


def html_to_text(html: str) -> str:
    """Flatten region HTML to text, keeping ``<br>`` line breaks."""
    for pattern in _STRIP_BLOCKS:
        html = pattern.sub("", html)
    html = _BR.sub("\n", html)
    text = _ANY_TAG.sub("", html)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _BLANK_RUN.sub("\n\n", text).strip()


def truncate_at_line(text: str, limit: int = MAX_MANIFESTO_CHARS) -> str:
    """Cut ``text`` to at most ``limit`` characters, ending on a full line."""
    if len(text) <= limit:
        return text
    text = text[:limit]
    last_newline = text.rfind("\n")
    if last_newline > 0:
        text = text[:last_newline]
    return text


def extract_manifesto(html: str) -> ManifestoResult:
    """
    Extract the seller's manifesto text from a profile page.

    Returns:
        ManifestoResult with ``text`` None when the container is missing or
        unbalanced, or holds no text.
    """
    region = extract_balanced_region(html, MANIFESTO_CONTAINER)
    if region is None:
        return ManifestoResult()

    body = strip_labelled_block(region.html, MANIFESTO_LABEL)
    text = truncate_at_line(html_to_text(body)).strip()
    if not text:
        return ManifestoResult()

    return ManifestoResult(text=text, length=len(text), line_count=len(text.split("\n")))
