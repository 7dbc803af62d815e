"""Fuzzy service-name matching against the catalog."""

from collections.abc import Iterable

from status_probe.catalog.models import MatchResult, MatchType, ServiceRecord


SEARCH_THRESHOLD = 0.5
LOOKUP_THRESHOLD = 0.6


def levenshtein_distance(first: str, second: str) -> int:
    """Edit distance with unit-cost insertion, deletion and substitution.

    Args:
        first: First string.
        second: Second string.

    Returns:
        Minimum number of edits turning one string into the other.
    """
    if not first:
        return len(second)
    if not second:
        return len(first)

    previous = list(range(len(second) + 1))
    for i, left in enumerate(first, start=1):
        current = [i]
        for j, right in enumerate(second, start=1):
            cost = 0 if left == right else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def similarity_ratio(first: str, second: str) -> float:
    """Normalized similarity in [0, 1]: ``1 - distance / longer length``."""
    if first == second:
        return 1.0
    if not first or not second:
        return 0.0
    longest = max(len(first), len(second))
    return 1.0 - levenshtein_distance(first, second) / longest


def _match_one(
    record: ServiceRecord, query: str, threshold: float
) -> MatchResult | None:
    name = record.name.lower().strip()

    if name == query:
        return MatchResult(service=record, score=1.0, match_type=MatchType.EXACT)

    if name and (query in name or name in query):
        score = min(len(name), len(query)) / max(len(name), len(query))
        return MatchResult(service=record, score=score, match_type=MatchType.SUBSTRING)

    similarity = similarity_ratio(name, query)
    if similarity >= threshold:
        return MatchResult(
            service=record, score=similarity, match_type=MatchType.FUZZY
        )
    return None


def find_matches(
    records: Iterable[ServiceRecord],
    query: str,
    threshold: float = LOOKUP_THRESHOLD,
) -> list[MatchResult]:
    """Rank catalog records against a free-text query.

    Exact matches score 1.0, containment in either direction scores the
    length ratio, and anything else is kept only when its edit-distance
    similarity reaches the threshold.

    Args:
        records: Catalog records.
        query: Free-text query; case and surrounding whitespace are ignored.
        threshold: Minimum similarity for fuzzy matches.

    Returns:
        Matches sorted by descending score, then name. Empty for a blank
        query.
    """
    normalized = query.lower().strip()
    if not normalized:
        return []

    matches = [
        match
        for record in records
        if (match := _match_one(record, normalized, threshold)) is not None
    ]
    matches.sort(key=lambda m: m.sort_key)
    return matches
