"""Shared pytest fixtures."""

from collections.abc import Iterator

import pytest
import structlog

from status_probe.fetch.metrics import FetchMetrics


@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Reset logging configuration and fetch metrics between tests."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    FetchMetrics.reset()
