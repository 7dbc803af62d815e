"""Pure merge rules for combining per-source extraction results."""

from dataclasses import dataclass, field

from status_probe.errors import ErrorKind
from status_probe.extractors.constants import (
    DEDUPE_PREFIX_LENGTH,
    MAX_HISTORY_ITEMS,
    MAX_MESSAGES,
)
from status_probe.extractors.models import ExtractionResult
from status_probe.extractors.text import fit_to_budget


SIZE_LIMIT_PREFIX = "Response size limit exceeded: "

# Feed failures worth reporting; anything else means "no feed here"
_REPORTABLE_FEED_ERRORS = frozenset({ErrorKind.FEED_FORMAT, ErrorKind.RESPONSE_SIZE})


@dataclass(frozen=True)
class SourceResults:
    """Per-source results of one query.

    A source that was not attempted, or found nothing to report, is None.
    """

    api: ExtractionResult | None = None
    feed: ExtractionResult | None = None
    primary: ExtractionResult | None = None
    history_page: ExtractionResult | None = None

    def in_order(self) -> list[ExtractionResult]:
        """Attempted sources in merge order: API, feed, primary, history."""
        return [
            result
            for result in (self.api, self.feed, self.primary, self.history_page)
            if result is not None
        ]


@dataclass(frozen=True)
class MergedFields:
    """Merged status, history, messages and error of one query."""

    latest_status: str | None
    history: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    error: str | None = None


def dedupe_history(items: list[str]) -> list[str]:
    """Drop entries whose first 100 characters were already seen.

    Args:
        items: History entries in merge order.

    Returns:
        Up to 20 unique entries, first occurrence kept.
    """
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        key = item[:DEDUPE_PREFIX_LENGTH]
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique[:MAX_HISTORY_ITEMS]


def select_status(sources: SourceResults) -> str | None:
    """Pick the status by source priority: API, primary page, feed."""
    for result in (sources.api, sources.primary, sources.feed):
        if result is not None and result.latest_status:
            return result.latest_status
    return None


def select_messages(sources: SourceResults) -> list[str]:
    """Take the first non-empty message list: API, feed, primary page."""
    for result in (sources.api, sources.feed, sources.primary):
        if result is not None and result.messages:
            return list(result.messages[:MAX_MESSAGES])
    return []


def select_error(sources: SourceResults) -> str | None:
    """Pick the most specific user-visible error.

    No error is reported when any source supplied data. Otherwise the
    order is: size-limit errors, primary page error, reportable feed
    error, API error. History page failures are never reported.

    Args:
        sources: Per-source results.

    Returns:
        Error message, or None.
    """
    if any(result.has_data for result in sources.in_order()):
        return None

    reportable = [sources.api, sources.feed, sources.primary]
    for result in reportable:
        if result is not None and result.error_kind == ErrorKind.RESPONSE_SIZE:
            return format_size_error(result.error or "")

    primary = sources.primary
    if primary is not None and primary.error:
        return primary.error

    feed = sources.feed
    if feed is not None and feed.error and feed.error_kind in _REPORTABLE_FEED_ERRORS:
        return feed.error

    api = sources.api
    if api is not None and api.error:
        return api.error

    return None


def format_size_error(message: str) -> str:
    """Prefix a size-limit message once."""
    if message.startswith(SIZE_LIMIT_PREFIX):
        return message
    return f"{SIZE_LIMIT_PREFIX}{message}"


def merge_sources(sources: SourceResults, max_length: int) -> MergedFields:
    """Combine per-source results into one set of fields.

    Args:
        sources: Per-source results.
        max_length: Maximum rendered length of status, history and messages.

    Returns:
        Merged fields within the budget.
    """
    history = dedupe_history(
        [item for result in sources.in_order() for item in result.history]
    )
    status, history, messages = fit_to_budget(
        select_status(sources), history, select_messages(sources), max_length
    )
    return MergedFields(
        latest_status=status,
        history=history,
        messages=messages,
        error=select_error(sources),
    )
