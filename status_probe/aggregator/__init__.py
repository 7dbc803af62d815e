"""Status aggregation: source ordering, URL derivation and merge rules."""

from status_probe.aggregator.coordinator import StatusAggregator
from status_probe.aggregator.merge import (
    SIZE_LIMIT_PREFIX,
    MergedFields,
    SourceResults,
    dedupe_history,
    merge_sources,
    select_error,
)
from status_probe.aggregator.models import AggregatedStatus
from status_probe.aggregator.urls import (
    build_api_url,
    build_feed_urls,
    build_history_url,
    is_vendor_host,
)


__all__ = [
    # Coordinator
    "StatusAggregator",
    # Models
    "AggregatedStatus",
    # Merge
    "MergedFields",
    "SourceResults",
    "SIZE_LIMIT_PREFIX",
    "dedupe_history",
    "merge_sources",
    "select_error",
    # URLs
    "build_api_url",
    "build_feed_urls",
    "build_history_url",
    "is_vendor_host",
]
