"""Base extractor interface and candidate-loop combinator."""

from abc import ABC
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import structlog

from status_probe.fetch.client import HttpFetcher
from status_probe.fetch.constants import ACCEPT_HTML
from status_probe.fetch.models import FetchResult


T = TypeVar("T")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """A lazily evaluated candidate in an ordered fallback list."""

    label: str
    run: Callable[[], T]


@dataclass(frozen=True)
class FirstSuccess(Generic[T]):
    """Outcome of ``first_success``.

    ``winner`` and ``value`` are None when no attempt was accepted;
    ``tried`` holds every evaluated attempt in order.
    """

    winner: str | None
    value: T | None
    tried: list[tuple[str, T]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """Check if an attempt was accepted."""
        return self.winner is not None


def first_success(
    attempts: Sequence[Attempt[T]], accept: Callable[[T], bool]
) -> FirstSuccess[T]:
    """Evaluate attempts in order until one is accepted.

    Args:
        attempts: Candidates, highest priority first.
        accept: Predicate deciding whether a value wins.

    Returns:
        FirstSuccess naming the winning attempt, if any.
    """
    tried: list[tuple[str, T]] = []
    for attempt in attempts:
        value = attempt.run()
        tried.append((attempt.label, value))
        if accept(value):
            return FirstSuccess(winner=attempt.label, value=value, tried=tried)
    return FirstSuccess(winner=None, value=None, tried=tried)


class BaseExtractor(ABC):  # noqa: B024
    """Abstract base class for source extractors.

    Provides the shared fetch step. Subclasses set ``accept`` and
    ``component`` and implement their own ``extract``.
    """

    accept: str = ACCEPT_HTML
    component: str = "extractor"

    def __init__(self, fetcher: HttpFetcher) -> None:
        """Initialize the extractor.

        Args:
            fetcher: HTTP fetcher used for every request.
        """
        self._fetcher = fetcher
        self._log = structlog.get_logger().bind(component=self.component)

    def _fetch(self, url: str) -> FetchResult:
        """Fetch a URL with this extractor's Accept header.

        Args:
            url: URL to fetch.

        Returns:
            FetchResult of a completed request (any HTTP status).

        Raises:
            NetworkError: Connection, timeout, TLS or invalid URL failure.
            RedirectLimitExceededError: Redirect chain too long.
            ResponseSizeExceededError: Body over the size limit.
        """
        result = self._fetcher.fetch(url, accept=self.accept)
        result.raise_for_error()
        return result
