"""
Balanced-depth extraction of HTML regions.

Upstream markup is not reliable enough to be worth a full parse, so regions
are located by an opening-tag regex and closed by counting nested open and
close tags of the same element. Callers only see ``extract_balanced_region``
and ``find_balanced_end``; swapping in a real parser later stays local to this
module.
"""

import re
from functools import lru_cache
from typing import NamedTuple, Optional, Pattern, Tuple, Union


class BalancedRegion(NamedTuple):
    """Location of a region inside the source HTML."""

    open_start: int  # index of the opening tag's "<"
    start: int  # first character after the opening tag
    end: int  # index of the matching closing tag's "<"
    close_end: int  # first character after the matching closing tag
    html: str  # source[start:end]


@lru_cache(maxsize=16)
def _tag_pattern(tag: str) -> Pattern[str]:
    return re.compile(rf"</?{re.escape(tag)}\b[^>]*>", re.IGNORECASE)


def class_pattern(*tokens: str, tag: str = "div") -> Pattern[str]:
    """Build an opening-tag pattern whose ``class`` attribute contains every token."""
    lookaheads = "".join(f"(?=[^\"']*{re.escape(token)})" for token in tokens)
    return re.compile(
        rf"<{re.escape(tag)}[^>]*class=[\"']{lookaheads}[^\"']*[\"'][^>]*>",
        re.IGNORECASE,
    )


def find_balanced_end(html: str, start: int, tag: str = "div") -> Optional[Tuple[int, int]]:
    """
    Scan from ``start`` (just inside an open ``tag``) to its matching close.

    Returns:
        ``(close_start, close_end)`` of the matching closing tag, or None if
        the input ends before depth returns to zero.
    """
    depth = 1
    for match in _tag_pattern(tag).finditer(html, start):
        if match.group(0).startswith("</"):
            depth -= 1
        else:
            depth += 1
        if depth == 0:
            return match.start(), match.end()
    return None


def extract_balanced_region(
    html: str, open_tag_pattern: Union[str, Pattern[str]], tag: str = "div"
) -> Optional[BalancedRegion]:
    """
    Carve out the contents of the first element opened by ``open_tag_pattern``.

    Never returns a partial region: unterminated markup gives None, as does a
    missing opening tag.
    """
    if not html or not isinstance(html, str):
        return None
    pattern = re.compile(open_tag_pattern, re.IGNORECASE) if isinstance(open_tag_pattern, str) else open_tag_pattern
    opening = pattern.search(html)
    if not opening:
        return None
    bounds = find_balanced_end(html, opening.end(), tag)
    if bounds is None:
        return None
    end, close_end = bounds
    return BalancedRegion(
        open_start=opening.start(),
        start=opening.end(),
        end=end,
        close_end=close_end,
        html=html[opening.end():end],
    )


def strip_labelled_block(
    html: str, label_pattern: Union[str, Pattern[str]], tag: str = "div"
) -> str:
    """
    Remove the balanced block opened by ``label_pattern``.

    If the block cannot be balanced only the label's own opening span is
    removed, so the label itself never shows up in extracted text.
    """
    pattern = re.compile(label_pattern, re.IGNORECASE) if isinstance(label_pattern, str) else label_pattern
    label = pattern.search(html)
    if not label:
        return html
    bounds = find_balanced_end(html, label.end(), tag)
    if bounds is None:
        return html[:label.start()] + html[label.end():]
    return html[:label.start()] + html[bounds[1]:]
