"""Unit tests for the status aggregator."""

import json
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
import structlog

from status_probe.aggregator.coordinator import StatusAggregator
from status_probe.aggregator.merge import SIZE_LIMIT_PREFIX
from status_probe.extractors.text import rendered_length
from status_probe.fetch.client import HttpFetcher
from status_probe.fetch.models import FetchResult
from tests.helpers.fetch import make_fetch_result, routing_fetcher, size_error_result
from tests.helpers.pages import JS_SHELL, RSS_FEED, STATUS_PAGE


FIXED_NOW = datetime(2024, 1, 6, 12, 0, 0, tzinfo=UTC)

STATUS_URL = "https://status.acme.test/"
HISTORY_URL = "https://status.acme.test/history"
FEED_URL = "https://status.acme.test/feed.rss"

VENDOR_URL = "https://status.openai.com/"
VENDOR_API_URL = "https://status.openai.com/proxy/status.openai.com"


def page(body: str, url: str, status_code: int = 200) -> FetchResult:
    """Build an HTML response."""
    return make_fetch_result(body, status_code=status_code, url=url)


def aggregator(routes: dict[str, FetchResult]) -> StatusAggregator:
    """Build an aggregator over canned routes with a fixed clock."""
    return StatusAggregator(fetcher=routing_fetcher(routes), clock=lambda: FIXED_NOW)


class TestHtmlOnly:
    """Tests for services without an API or feed."""

    def test_primary_page(self) -> None:
        """Test that the primary page supplies status, history and messages."""
        result = aggregator({STATUS_URL: page(STATUS_PAGE, STATUS_URL)}).fetch_status(
            STATUS_URL
        )

        assert result.error is None
        assert result.latest_status == "All Systems Operational"
        assert len(result.history) == 2
        assert result.messages == ["Scheduled maintenance on Saturday at 02:00 UTC."]
        assert result.api_url is None
        assert result.feed_url is None
        assert result.history_url == HISTORY_URL
        assert result.http_status_code == 200
        assert result.extracted_at == FIXED_NOW

    def test_history_page_deduplicated(self) -> None:
        """Test that entries repeated on the history page appear once."""
        result = aggregator(
            {
                STATUS_URL: page(STATUS_PAGE, STATUS_URL),
                HISTORY_URL: page(STATUS_PAGE, HISTORY_URL),
            }
        ).fetch_status(STATUS_URL)

        assert len(result.history) == 2

    def test_history_url_not_refetched(self) -> None:
        """Test that a history page is not asked for another history page."""
        fetcher = routing_fetcher({HISTORY_URL: page(STATUS_PAGE, HISTORY_URL)})

        result = StatusAggregator(fetcher=fetcher).fetch_status(HISTORY_URL)

        assert result.history_url is None
        fetched = [call.args[0] for call in fetcher.fetch.call_args_list]
        assert fetched.count(HISTORY_URL) == 1

    def test_budget(self) -> None:
        """Test that a small budget bounds the rendered output."""
        result = aggregator({STATUS_URL: page(STATUS_PAGE, STATUS_URL)}).fetch_status(
            STATUS_URL, max_length=100
        )

        assert rendered_length(
            result.latest_status, result.history, result.messages
        ) <= 100


class TestFeedFallback:
    """Tests for feed data combined with a failing primary page."""

    def test_js_error_suppressed_by_feed_history(self) -> None:
        """Test that feed history hides a client-rendered primary page."""
        result = aggregator(
            {
                STATUS_URL: page(JS_SHELL, STATUS_URL),
                FEED_URL: make_fetch_result(RSS_FEED, url=FEED_URL),
            }
        ).fetch_status(STATUS_URL)

        assert result.error is None
        assert result.latest_status == "Resolved"
        assert result.history
        assert result.feed_url == FEED_URL
        assert "javascript" not in json.dumps(result.to_dict()).lower()

    def test_primary_status_beats_feed(self) -> None:
        """Test that the primary page's status outranks the feed's."""
        result = aggregator(
            {
                STATUS_URL: page(STATUS_PAGE, STATUS_URL),
                FEED_URL: make_fetch_result(RSS_FEED, url=FEED_URL),
            }
        ).fetch_status(STATUS_URL)

        assert result.latest_status == "All Systems Operational"
        assert len(result.history) == 4


class TestVendorApi:
    """Tests for hosts served by the vendor API."""

    def test_api_incident(self) -> None:
        """Test that an API incident wins and feeds are skipped."""
        payload = {
            "summary": {
                "ongoing_incidents": [
                    {"name": "Elevated errors on ChatGPT", "status": "Investigating"}
                ]
            }
        }
        fetcher = routing_fetcher(
            {
                VENDOR_API_URL: make_fetch_result(
                    json.dumps(payload),
                    url=VENDOR_API_URL,
                    content_type="application/json",
                ),
                VENDOR_URL: page(JS_SHELL, VENDOR_URL),
            }
        )

        result = StatusAggregator(fetcher=fetcher).fetch_status(VENDOR_URL)

        assert result.error is None
        assert result.latest_status == "Investigating"
        assert result.history == [
            "Elevated errors on ChatGPT - Status: Investigating"
        ]
        assert result.api_url == VENDOR_API_URL
        assert result.feed_url is None
        fetched = [call.args[0] for call in fetcher.fetch.call_args_list]
        assert not any("feed" in url or url.endswith("rss") for url in fetched)

    def test_missing_api_falls_back_to_feeds(self) -> None:
        """Test that a 404 API leads to the feed candidates."""
        feed_url = VENDOR_URL + "feed.rss"

        result = aggregator(
            {
                VENDOR_URL: page(JS_SHELL, VENDOR_URL),
                feed_url: make_fetch_result(RSS_FEED, url=feed_url),
            }
        ).fetch_status(VENDOR_URL)

        assert result.api_url == VENDOR_API_URL
        assert result.feed_url == feed_url
        assert result.latest_status == "Resolved"

    def test_api_size_error_isolated(self) -> None:
        """Test that an oversized API response does not stop other sources."""
        result = aggregator(
            {
                VENDOR_API_URL: size_error_result(VENDOR_API_URL),
                VENDOR_URL: page(STATUS_PAGE, VENDOR_URL),
            }
        ).fetch_status(VENDOR_URL)

        assert result.error is None
        assert result.latest_status == "All Systems Operational"


class TestFailures:
    """Tests for error reporting."""

    def test_primary_http_error(self) -> None:
        """Test that the primary page failure is reported."""
        result = aggregator(
            {STATUS_URL: page("unavailable", STATUS_URL, status_code=503)}
        ).fetch_status(STATUS_URL)

        assert result.error == "Failed to fetch: 503 Service Unavailable"
        assert result.latest_status is None
        assert result.history == []
        assert result.http_status_code == 503
        assert result.is_error

    def test_size_error_reported_with_prefix(self) -> None:
        """Test that size-limit failures win and are prefixed once."""
        result = aggregator({STATUS_URL: size_error_result(STATUS_URL)}).fetch_status(
            STATUS_URL
        )

        assert result.error is not None
        assert result.error.startswith(SIZE_LIMIT_PREFIX)
        assert result.error.count(SIZE_LIMIT_PREFIX) == 1

    @pytest.mark.parametrize("url", ["ftp://status.acme.test/", "not a url", ""])
    def test_invalid_url(self, url: str) -> None:
        """Test that unusable URLs are reported without fetching."""
        fetcher = routing_fetcher({})

        result = StatusAggregator(fetcher=fetcher).fetch_status(url)

        assert result.error is not None
        assert result.error.startswith("Error fetching status: Invalid status URL")
        fetcher.fetch.assert_not_called()

    def test_unexpected_exception_contained(self) -> None:
        """Test that unexpected failures become an error value."""
        fetcher = MagicMock(spec=HttpFetcher)
        fetcher.fetch.side_effect = RuntimeError("boom")

        result = StatusAggregator(fetcher=fetcher).fetch_status(STATUS_URL)

        assert result.error == "Error fetching status: boom"
        assert result.latest_status is None

    def test_query_context_cleared(self) -> None:
        """Test that per-query log context does not leak."""
        aggregator({}).fetch_status(STATUS_URL)

        context = structlog.contextvars.get_contextvars()
        assert "query_id" not in context
        assert "status_url" not in context
