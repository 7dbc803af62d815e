"""Source extractors for vendor APIs, feeds and HTML status pages.

Each extractor turns one fetched source into an ``ExtractionResult``.
Failures are encoded in the result, except response-size violations,
which propagate as ``ResponseSizeExceededError``.
"""

from status_probe.extractors.api import VendorApiExtractor, summarize_components
from status_probe.extractors.base import (
    Attempt,
    BaseExtractor,
    FirstSuccess,
    first_success,
)
from status_probe.extractors.constants import (
    DEFAULT_MAX_LENGTH,
    MAX_HISTORY_ITEMS,
    MAX_MESSAGES,
)
from status_probe.extractors.feed import (
    NOT_A_FEED_MESSAGE,
    FeedExtractor,
    clean_markup,
    detect_feed_kind,
)
from status_probe.extractors.html import JS_RENDERED_MESSAGE, HtmlExtractor
from status_probe.extractors.models import ExtractionResult
from status_probe.extractors.rules import FeedRules, HtmlRules, VendorApiRules
from status_probe.extractors.text import (
    fit_to_budget,
    purify,
    rendered_length,
    truncate_array,
    truncate_text,
)
from status_probe.extractors.utils import compile_regex


__all__ = [
    # Extractors
    "BaseExtractor",
    "FeedExtractor",
    "HtmlExtractor",
    "VendorApiExtractor",
    # Models
    "ExtractionResult",
    # Rules
    "FeedRules",
    "HtmlRules",
    "VendorApiRules",
    # Candidate loops
    "Attempt",
    "FirstSuccess",
    "first_success",
    # Text
    "fit_to_budget",
    "purify",
    "rendered_length",
    "truncate_array",
    "truncate_text",
    # Helpers
    "clean_markup",
    "compile_regex",
    "detect_feed_kind",
    "summarize_components",
    # Constants
    "DEFAULT_MAX_LENGTH",
    "JS_RENDERED_MESSAGE",
    "MAX_HISTORY_ITEMS",
    "MAX_MESSAGES",
    "NOT_A_FEED_MESSAGE",
]
