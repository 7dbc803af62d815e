"""Service catalog: records, loading, fuzzy matching and lookups."""

from status_probe.catalog.loader import CatalogLoader
from status_probe.catalog.matcher import (
    LOOKUP_THRESHOLD,
    SEARCH_THRESHOLD,
    find_matches,
    levenshtein_distance,
    similarity_ratio,
)
from status_probe.catalog.models import MatchResult, MatchType, ServiceRecord
from status_probe.catalog.service import CatalogService, format_service


__all__ = [
    # Models
    "MatchResult",
    "MatchType",
    "ServiceRecord",
    # Loading
    "CatalogLoader",
    # Matching
    "LOOKUP_THRESHOLD",
    "SEARCH_THRESHOLD",
    "find_matches",
    "levenshtein_distance",
    "similarity_ratio",
    # Lookups
    "CatalogService",
    "format_service",
]
