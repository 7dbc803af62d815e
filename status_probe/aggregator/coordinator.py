"""Status aggregation across vendor API, feeds and HTML pages."""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from urllib.parse import urlsplit

import structlog

from status_probe.aggregator.merge import (
    SourceResults,
    format_size_error,
    merge_sources,
)
from status_probe.aggregator.models import AggregatedStatus
from status_probe.aggregator.urls import (
    build_api_url,
    build_feed_urls,
    build_history_url,
    is_vendor_host,
)
from status_probe.errors import ResponseSizeExceededError
from status_probe.extractors.api import VendorApiExtractor
from status_probe.extractors.constants import DEFAULT_MAX_LENGTH
from status_probe.extractors.feed import FeedExtractor
from status_probe.extractors.html import HtmlExtractor
from status_probe.extractors.models import ExtractionResult
from status_probe.extractors.rules import FeedRules, HtmlRules, VendorApiRules
from status_probe.fetch.client import HttpFetcher
from status_probe.observability.logging import bind_query_context, clear_query_context
from status_probe.settings.app import AppSettings


logger = structlog.get_logger()

_ALLOWED_SCHEMES = ("http", "https")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class StatusAggregator:
    """Fetches and merges a service's status from every reachable source.

    Sources are tried in a fixed order: vendor API (known vendor hosts
    only), feeds (only when the API supplied nothing), the primary page,
    and the derived history page. ``fetch_status`` never raises.
    """

    def __init__(
        self,
        fetcher: HttpFetcher | None = None,
        html_rules: HtmlRules | None = None,
        feed_rules: FeedRules | None = None,
        api_rules: VendorApiRules | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            fetcher: HTTP fetcher shared by all extractors.
            html_rules: HTML rule table.
            feed_rules: Feed rule table.
            api_rules: Vendor API rule table.
            clock: Source of the extraction timestamp (UTC).
        """
        self._fetcher = fetcher or HttpFetcher()
        self._feed_rules = feed_rules or FeedRules()
        self._api_rules = api_rules or VendorApiRules()
        self._clock = clock or _utc_now
        self._api = VendorApiExtractor(self._fetcher)
        self._feed = FeedExtractor(self._fetcher, self._feed_rules)
        self._html = HtmlExtractor(self._fetcher, html_rules)
        self._log = logger.bind(component="aggregator")

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "StatusAggregator":
        """Build an aggregator from application settings.

        Args:
            settings: Application settings.

        Returns:
            Configured aggregator.
        """
        return cls(
            fetcher=HttpFetcher(settings.to_fetch_config()),
            api_rules=VendorApiRules().with_extra_domains(settings.vendor_api_domains),
        )

    def fetch_status(
        self, status_url: str, max_length: int = DEFAULT_MAX_LENGTH
    ) -> AggregatedStatus:
        """Fetch and merge the status of one service.

        Args:
            status_url: Primary status page URL.
            max_length: Maximum rendered length of status, history and
                messages.

        Returns:
            AggregatedStatus; failures are reported in ``error``.
        """
        bind_query_context(uuid.uuid4().hex, status_url)
        try:
            return self._aggregate(status_url, max_length)
        except ResponseSizeExceededError as e:
            self._log.warning("aggregation_failed", error=e.message)
            return self._failure(status_url, format_size_error(e.message))
        except Exception as e:  # noqa: BLE001
            self._log.warning("aggregation_failed", error=str(e))
            return self._failure(status_url, f"Error fetching status: {e}")
        finally:
            clear_query_context()

    def _aggregate(self, status_url: str, max_length: int) -> AggregatedStatus:
        self._validate_url(status_url)

        api_url: str | None = None
        api_result: ExtractionResult | None = None
        if is_vendor_host(status_url, self._api_rules):
            api_url = build_api_url(status_url, self._api_rules)
            if api_url:
                api_result = self._isolate_size(
                    lambda: self._api.extract(api_url, max_length)
                )

        feed_url: str | None = None
        feed_result: ExtractionResult | None = None
        if api_result is None or not api_result.has_data:
            feed_url, feed_result = self._feed.extract_first(
                build_feed_urls(status_url, self._feed_rules), max_length
            )

        primary_result = self._isolate_size(
            lambda: self._html.extract(status_url, max_length)
        )

        history_url = build_history_url(status_url)
        history_result = self._history_page(history_url, status_url)

        sources = SourceResults(
            api=api_result,
            feed=feed_result,
            primary=primary_result,
            history_page=history_result,
        )
        merged = merge_sources(sources, max_length)

        self._log.info(
            "aggregation_complete",
            api_attempted=api_url is not None,
            api_has_data=bool(api_result and api_result.has_data),
            feed_url=feed_url,
            primary_has_data=bool(primary_result and primary_result.has_data),
            history_count=len(merged.history),
            error=merged.error,
        )

        return AggregatedStatus(
            status_url=status_url,
            api_url=api_url,
            feed_url=feed_url,
            history_url=history_url,
            latest_status=merged.latest_status,
            history=merged.history,
            messages=merged.messages,
            extracted_at=self._clock(),
            error=merged.error,
            http_status_code=(
                primary_result.http_status_code if primary_result else None
            ),
        )

    def _history_page(
        self, history_url: str | None, status_url: str
    ) -> ExtractionResult | None:
        if not history_url or history_url == status_url:
            return None
        try:
            result = self._html.extract_history(history_url)
        except ResponseSizeExceededError as e:
            self._log.debug("history_page_skipped", url=history_url, error=e.message)
            return None
        if result.error:
            self._log.debug(
                "history_page_skipped", url=history_url, error=result.error
            )
            return None
        return result

    def _isolate_size(
        self, run: Callable[[], ExtractionResult | None]
    ) -> ExtractionResult | None:
        try:
            return run()
        except ResponseSizeExceededError as e:
            self._log.info("source_size_limit_exceeded", error=e.message)
            return ExtractionResult.from_error(e)

    def _validate_url(self, status_url: str) -> None:
        parts = urlsplit(status_url)
        if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.hostname:
            raise ValueError(f"Invalid status URL: {status_url!r}")

    def _failure(self, status_url: str, message: str) -> AggregatedStatus:
        return AggregatedStatus(
            status_url=status_url,
            extracted_at=self._clock(),
            error=message,
        )
