"""HTTP fetch layer with redirect and response-size protection.

This module provides the single network primitive of the pipeline:
- Manual redirect following with a hop limit
- Maximum response size enforcement (declared and actual bytes)
- Mandatory TLS verification with fixed timeouts
- Metrics collection for observability
"""

from status_probe.fetch.client import HttpFetcher
from status_probe.fetch.config import FetchConfig
from status_probe.fetch.constants import (
    ACCEPT_FEED,
    ACCEPT_HTML,
    ACCEPT_JSON,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    REDIRECT_STATUS_CODES,
)
from status_probe.fetch.metrics import FetchMetrics
from status_probe.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    describe_status,
)
from status_probe.fetch.redact import redact_url_credentials


__all__ = [
    # Client
    "HttpFetcher",
    # Config
    "FetchConfig",
    # Models
    "FetchResult",
    "FetchError",
    "FetchErrorClass",
    "describe_status",
    # Constants
    "ACCEPT_FEED",
    "ACCEPT_HTML",
    "ACCEPT_JSON",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "REDIRECT_STATUS_CODES",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_url_credentials",
]
