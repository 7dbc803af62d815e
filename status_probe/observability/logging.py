"""Structured logging configuration."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, TextIO

import structlog

from status_probe.fetch.redact import redact_url_credentials


def parse_log_level(level: int | str) -> int:
    """Convert a level name or number to a logging level.

    Args:
        level: Level number, or a name such as ``"debug"``.

    Returns:
        Numeric logging level.

    Raises:
        ValueError: If the name is not a known level.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def redact_url_fields(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor that strips credentials from URL-valued fields.

    Applies to every string field whose key ends in ``url``.
    """
    for key, value in event_dict.items():
        if key.endswith("url") and isinstance(value, str):
            event_dict[key] = redact_url_credentials(value)
    return event_dict


def configure_logging(
    level: int | str = logging.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON output format and standard processors
    for timestamps, log levels, URL redaction and context binding.

    Args:
        level: Logging level or level name (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    numeric_level = parse_log_level(level)
    stream = output or sys.stderr

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_url_fields,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    # Third-party libraries log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=max(numeric_level, logging.WARNING),
    )


def bind_query_context(query_id: str, status_url: str) -> None:
    """Bind query context to all subsequent log messages.

    Args:
        query_id: Unique identifier of one status query.
        status_url: Primary status page URL.
    """
    structlog.contextvars.bind_contextvars(
        query_id=query_id, status_url=redact_url_credentials(status_url)
    )


def clear_query_context() -> None:
    """Clear query context from log messages."""
    structlog.contextvars.unbind_contextvars("query_id", "status_url")
