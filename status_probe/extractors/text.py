"""Text purification and budget enforcement for extracted content."""

import re

from status_probe.extractors.constants import (
    ELLIPSIS,
    HISTORY_BUDGET_SHARE,
    MESSAGES_BUDGET_SHARE,
    MIN_PARTIAL_ITEM_BUDGET,
    PURIFY_SHORT_TEXT_LENGTH,
    SECTION_SEPARATOR,
    STATUS_BUDGET_SHARE,
)
from status_probe.extractors.utils import compile_regex


# UI notices that leak into scraped text
_UI_NOISE_PATTERNS = [
    r"Notifications.*?signed in.*?reload",
    r"You must be signed in.*?reload",
    r"There was an error.*?reload",
    r"Please reload this page",
    r"Loading(?:\.\.\.|…)?",
]

_CONSENT_NOISE_PATTERN = r"\b(?:Cookie|Privacy|Accept|Decline)s?\b"

_SENTENCE_END_PATTERN = r"[.!?](?=\s)"


def purify(text: str | None) -> str:
    """Strip UI boilerplate and normalize whitespace.

    Args:
        text: Raw extracted text.

    Returns:
        Cleaned text (empty string for empty input).
    """
    if not text:
        return ""

    cleaned = text
    for pattern in _UI_NOISE_PATTERNS:
        cleaned = compile_regex(pattern, re.IGNORECASE | re.DOTALL).sub("", cleaned)

    if len(cleaned) < PURIFY_SHORT_TEXT_LENGTH:
        cleaned = compile_regex(_CONSENT_NOISE_PATTERN).sub("", cleaned)

    cleaned = compile_regex(r"\n{3,}", 0).sub("\n\n", cleaned)
    cleaned = compile_regex(r"[ \t]{2,}", 0).sub(" ", cleaned)
    return cleaned.strip()


def truncate_text(text: str, limit: int) -> str:
    """Cut text to a limit at the most natural boundary.

    The boundary preference is sentence end, paragraph break, line break
    and finally the hard limit. The returned text, ellipsis included,
    never exceeds the limit.

    Args:
        text: Text to cut.
        limit: Maximum length in characters.

    Returns:
        Text unchanged when it fits, otherwise the cut text plus ``...``.
    """
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[: max(0, limit)]

    budget = limit - len(ELLIPSIS)
    head = text[:budget]

    sentence_ends = list(compile_regex(_SENTENCE_END_PATTERN, 0).finditer(head))
    if sentence_ends:
        cut = head[: sentence_ends[-1].end()]
    elif head.rfind("\n\n") > 0:
        cut = head[: head.rfind("\n\n")]
    elif head.rfind("\n") > 0:
        cut = head[: head.rfind("\n")]
    else:
        cut = head

    return cut.rstrip() + ELLIPSIS


def truncate_array(items: list[str], budget: int) -> list[str]:
    """Keep as many whole items as fit in a character budget.

    Items are joined by newlines, and each separator counts toward the
    budget. The first item that does not fit is kept in truncated form
    only when enough room remains for it to be useful.

    Args:
        items: Items in priority order.
        budget: Maximum joined length in characters.

    Returns:
        Items that fit.
    """
    kept: list[str] = []
    used = 0

    for item in items:
        separator = len(SECTION_SEPARATOR) if kept else 0
        needed = separator + len(item)
        if used + needed <= budget:
            kept.append(item)
            used += needed
            continue

        remaining = budget - used - separator
        if remaining > MIN_PARTIAL_ITEM_BUDGET:
            kept.append(truncate_text(item, remaining))
        break

    return kept


def rendered_length(
    status: str | None, history: list[str], messages: list[str]
) -> int:
    """Length of the non-empty sections joined by newlines.

    Args:
        status: Status text.
        history: History items.
        messages: Message items.

    Returns:
        Rendered length in characters.
    """
    sections = [
        section
        for section in (
            status or "",
            SECTION_SEPARATOR.join(history),
            SECTION_SEPARATOR.join(messages),
        )
        if section
    ]
    return len(SECTION_SEPARATOR.join(sections))


def fit_to_budget(
    status: str | None,
    history: list[str],
    messages: list[str],
    max_length: int,
) -> tuple[str | None, list[str], list[str]]:
    """Proportionally cut status, history and messages to a budget.

    When the rendered length exceeds ``max_length``, the budget left after
    the two section separators is split 30/50/20 between status, history
    and messages.

    Args:
        status: Status text.
        history: History items.
        messages: Message items.
        max_length: Maximum rendered length.

    Returns:
        Tuple of (status, history, messages) within the budget.
    """
    if rendered_length(status, history, messages) <= max_length:
        return status, list(history), list(messages)

    available = max(0, max_length - 2 * len(SECTION_SEPARATOR))
    status_budget = int(available * STATUS_BUDGET_SHARE)
    history_budget = int(available * HISTORY_BUDGET_SHARE)
    messages_budget = int(available * MESSAGES_BUDGET_SHARE)

    fitted_status = truncate_text(status, status_budget) if status else status
    return (
        fitted_status or None,
        truncate_array(history, history_budget),
        truncate_array(messages, messages_budget),
    )
