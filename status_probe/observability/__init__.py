"""Observability: structured logging setup and query context binding."""

from status_probe.observability.logging import (
    bind_query_context,
    clear_query_context,
    configure_logging,
    parse_log_level,
    redact_url_fields,
)


__all__ = [
    "bind_query_context",
    "clear_query_context",
    "configure_logging",
    "parse_log_level",
    "redact_url_fields",
]
