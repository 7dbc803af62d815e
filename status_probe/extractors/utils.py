"""Utilities shared by the extractors.

Regex caching for rule-table patterns and small soup helpers.
"""

import copy
import re
from functools import lru_cache
from re import Pattern

from bs4 import BeautifulSoup, Tag


@lru_cache(maxsize=256)
def compile_regex(pattern: str, flags: int = re.IGNORECASE) -> Pattern[str]:
    """Compile a regex pattern with caching.

    Rule tables hold patterns as strings; extractors compile them on
    first use and reuse the compiled object afterwards.

    Args:
        pattern: Regex pattern string.
        flags: Regex flags (case-insensitive by default).

    Returns:
        Compiled regex pattern object.
    """
    return re.compile(pattern, flags)


def matches_any(
    patterns: list[str], text: str, flags: int = re.IGNORECASE | re.DOTALL
) -> bool:
    """Check whether any pattern matches somewhere in text.

    Args:
        patterns: Regex pattern strings.
        text: Text to search.
        flags: Regex flags applied to every pattern.

    Returns:
        True if at least one pattern matches.
    """
    return any(compile_regex(pattern, flags).search(text) for pattern in patterns)


def element_text(element: Tag | BeautifulSoup) -> str:
    """Get whitespace-normalized text of an element.

    Args:
        element: Element to read.

    Returns:
        Text with runs of whitespace collapsed to single spaces.
    """
    return " ".join(element.get_text(" ", strip=True).split())


def detached_copy(element: Tag, strip_selector: str | None = None) -> Tag:
    """Copy an element so it can be pruned without touching the document.

    Args:
        element: Element to copy.
        strip_selector: Optional CSS selector for descendants to remove.

    Returns:
        Deep copy of the element.
    """
    clone = copy.copy(element)
    if strip_selector:
        for child in clone.select(strip_selector):
            child.decompose()
    return clone
