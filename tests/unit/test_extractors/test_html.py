"""Unit tests for the HTML status page extractor."""

import pytest

from status_probe.errors import (
    ErrorKind,
    HtmlValidationError,
    NetworkError,
    ResponseSizeExceededError,
)
from status_probe.extractors.html import JS_RENDERED_MESSAGE, HtmlExtractor
from status_probe.extractors.text import rendered_length
from status_probe.fetch.models import FetchError, FetchErrorClass
from tests.helpers.fetch import make_fetch_result, routing_fetcher, size_error_result
from tests.helpers.pages import JS_SHELL, STATUS_PAGE


STATUS_URL = "https://status.acme.test/"


def component_page(*rows: str, extra: str = "") -> str:
    """Build a page listing components as ``name | state`` rows."""
    items = "".join(f"<li>{row}</li>" for row in rows)
    return (
        "<!DOCTYPE html><html><head><title>Acme</title></head><body><main>"
        "<p>Uptime for each component over the past ninety days.</p>"
        f"<ul>{items}</ul>{extra}</main></body></html>"
    )


@pytest.fixture
def extractor() -> HtmlExtractor:
    """HTML extractor with a fetcher that serves nothing."""
    return HtmlExtractor(routing_fetcher({}))


class TestValidate:
    """Tests for page validation."""

    def test_crawler_protection(self, extractor: HtmlExtractor) -> None:
        """Test that anti-bot challenges are rejected first."""
        body = (
            "<html><body>Checking your browser before accessing acme.test"
            "</body></html>"
        )

        with pytest.raises(HtmlValidationError) as exc_info:
            extractor.validate(body)

        assert exc_info.value.kind == ErrorKind.CRAWLER_PROTECTION

    def test_not_html(self, extractor: HtmlExtractor) -> None:
        """Test that non-HTML bodies are rejected."""
        with pytest.raises(HtmlValidationError) as exc_info:
            extractor.validate('{"status": "ok"}')

        assert exc_info.value.kind == ErrorKind.NOT_HTML

    def test_js_rendered_shell(self, extractor: HtmlExtractor) -> None:
        """Test that client-rendered shells are reported as such."""
        with pytest.raises(HtmlValidationError) as exc_info:
            extractor.validate(JS_SHELL)

        assert exc_info.value.kind == ErrorKind.JS_RENDERED
        assert exc_info.value.message == JS_RENDERED_MESSAGE

    def test_empty_page(self, extractor: HtmlExtractor) -> None:
        """Test that pages with almost no text are rejected."""
        with pytest.raises(HtmlValidationError) as exc_info:
            extractor.validate("<html><body><p>Hi</p></body></html>")

        assert exc_info.value.kind == ErrorKind.EMPTY_PAGE

    def test_error_page(self, extractor: HtmlExtractor) -> None:
        """Test that pages titled as errors are rejected."""
        body = (
            "<html><head><title>404 Not Found</title></head><body>"
            "<p>The page you requested could not be located on this server.</p>"
            "</body></html>"
        )

        with pytest.raises(HtmlValidationError) as exc_info:
            extractor.validate(body)

        assert exc_info.value.kind == ErrorKind.ERROR_PAGE

    def test_valid_page(self, extractor: HtmlExtractor) -> None:
        """Test that a normal status page passes."""
        soup = extractor.validate(STATUS_PAGE)

        assert soup.select_one(".status-indicator") is not None


class TestParse:
    """Tests for status, history and message extraction."""

    def test_status_page(self, extractor: HtmlExtractor) -> None:
        """Test extraction from a conventional status page."""
        result = extractor.parse(STATUS_PAGE)

        assert result.latest_status == "All Systems Operational"
        assert result.history == [
            "Database latency - This incident has been resolved. Jan 5, 2024",
            "API errors - Elevated error rates were fixed. Jan 2, 2024",
        ]
        assert result.messages == ["Scheduled maintenance on Saturday at 02:00 UTC."]

    def test_status_widget_mentioning_incident(self, extractor: HtmlExtractor) -> None:
        """Test that a widget naming an incident is kept as the status."""
        page = (
            "<html><head><title>Acme</title></head><body><main>"
            '<div class="status">'
            "Status: Partial outage - Incident under investigation</div>"
            "<p>Updates are posted here as soon as they are available.</p>"
            "</main></body></html>"
        )

        assert extractor.parse(page).latest_status == (
            "Status: Partial outage - Incident under investigation"
        )

    def test_incident_history_title_rejected(self, extractor: HtmlExtractor) -> None:
        """Test that page-title boilerplate is not reported as a status."""
        page = (
            "<html><head><title>Acme Status - Incident History</title></head>"
            "<body><div><p>Welcome to the Acme service page for customers."
            "</p></div></body></html>"
        )

        assert extractor.parse(page).latest_status is None

    def test_all_components_operational(self, extractor: HtmlExtractor) -> None:
        """Test that an all-operational roll-up is reported directly."""
        page = component_page("API | Operational", "Dashboard | Operational")

        assert extractor.parse(page).latest_status == "Operational"

    def test_component_outage(self, extractor: HtmlExtractor) -> None:
        """Test that a down component gives a partial outage."""
        page = component_page("API | Operational", "Search | Down")

        assert extractor.parse(page).latest_status == "Partial Outage"

    def test_component_degraded(self, extractor: HtmlExtractor) -> None:
        """Test that degraded components give degraded performance."""
        page = component_page("API | Degraded", "Search | Operational")

        assert extractor.parse(page).latest_status == "Degraded Performance"

    def test_active_incident_degrades(self, extractor: HtmlExtractor) -> None:
        """Test that an unresolved incident outranks a down component."""
        page = component_page(
            "API | Operational",
            "Search | Down",
            extra="<p>Investigating increased search errors.</p>",
        )

        assert extractor.parse(page).latest_status == "Degraded Performance"

    def test_status_from_main_paragraph(self, extractor: HtmlExtractor) -> None:
        """Test the main content fallback."""
        page = (
            "<html><head><title>Acme</title></head><body><main>"
            "<h2>Subscribe to updates</h2>"
            "<p>Everything is running smoothly and all services are operational.</p>"
            "</main></body></html>"
        )

        assert extractor.parse(page).latest_status == (
            "Everything is running smoothly and all services are operational."
        )

    def test_status_from_title(self, extractor: HtmlExtractor) -> None:
        """Test the title fallback."""
        page = (
            "<html><head><title>Degraded performance on API</title></head><body>"
            "<div><p>Welcome to the Acme service page for customers and partners."
            "</p></div></body></html>"
        )

        assert extractor.parse(page).latest_status == "Degraded performance on API"

    def test_generic_title_ignored(self, extractor: HtmlExtractor) -> None:
        """Test that a generic title is not a status."""
        page = (
            "<html><head><title>Acme Status</title></head><body>"
            "<div><p>Welcome to the Acme service page for customers and partners."
            "</p></div></body></html>"
        )

        assert extractor.parse(page).latest_status is None

    def test_history_fallback_scan(self, extractor: HtmlExtractor) -> None:
        """Test that dated list items are found without incident markup."""
        page = (
            "<html><head><title>Acme</title></head><body><main>"
            "<h1>Past notices</h1><ul>"
            "<li>Login failures fixed on 2024-01-05 14:00 UTC</li>"
            "<li>Short</li>"
            "<li>A plain sentence without any dates or keywords here</li>"
            "</ul></main></body></html>"
        )

        assert extractor.parse(page).history == [
            "Login failures fixed on 2024-01-05 14:00 UTC"
        ]

    def test_history_capped(self, extractor: HtmlExtractor) -> None:
        """Test that history never exceeds twenty entries."""
        incidents = "".join(
            f'<div class="incident">Incident {i} affecting the API was resolved</div>'
            for i in range(40)
        )
        page = f"<html><body><main>{incidents}</main></body></html>"

        history = extractor.parse(page).history

        assert 0 < len(history) <= 20

    def test_budget(self, extractor: HtmlExtractor) -> None:
        """Test that the rendered result fits a small budget."""
        result = extractor.parse(STATUS_PAGE, max_length=100)

        assert rendered_length(
            result.latest_status, result.history, result.messages
        ) <= 100


class TestExtract:
    """Tests for the fetch path."""

    def test_success(self) -> None:
        """Test that a fetched page is parsed with its status code."""
        fetcher = routing_fetcher(
            {STATUS_URL: make_fetch_result(STATUS_PAGE, url=STATUS_URL)}
        )

        result = HtmlExtractor(fetcher).extract(STATUS_URL, 10_000)

        assert result.latest_status == "All Systems Operational"
        assert result.http_status_code == 200
        assert result.error is None

    def test_http_error(self) -> None:
        """Test that non-2xx responses are reported with the status code."""
        fetcher = routing_fetcher(
            {STATUS_URL: make_fetch_result("down", status_code=503, url=STATUS_URL)}
        )

        result = HtmlExtractor(fetcher).extract(STATUS_URL, 10_000)

        assert result.error == "Failed to fetch: 503 Service Unavailable"
        assert result.error_kind == ErrorKind.HTTP_STATUS
        assert result.http_status_code == 503

    def test_validation_error_keeps_status_code(self) -> None:
        """Test that rejected pages keep the HTTP status."""
        fetcher = routing_fetcher(
            {STATUS_URL: make_fetch_result('{"ok": true}', url=STATUS_URL)}
        )

        result = HtmlExtractor(fetcher).extract(STATUS_URL, 10_000)

        assert result.error_kind == ErrorKind.NOT_HTML
        assert result.http_status_code == 200

    def test_network_error(self) -> None:
        """Test that network failures are encoded in the result."""
        fetcher = routing_fetcher(
            {
                STATUS_URL: make_fetch_result(
                    url=STATUS_URL,
                    error=FetchError(
                        error_class=FetchErrorClass.CONNECTION_ERROR,
                        message="Connection failed: refused",
                    ),
                )
            }
        )

        result = HtmlExtractor(fetcher).extract(STATUS_URL, 10_000)

        assert result.error == "Connection failed: refused"
        assert result.error_kind == NetworkError.kind

    def test_size_limit_propagates(self) -> None:
        """Test that size violations are raised to the caller."""
        fetcher = routing_fetcher({STATUS_URL: size_error_result(STATUS_URL)})

        with pytest.raises(ResponseSizeExceededError):
            HtmlExtractor(fetcher).extract(STATUS_URL, 10_000)

    def test_history_only(self) -> None:
        """Test that history pages yield history alone."""
        url = STATUS_URL + "history"
        fetcher = routing_fetcher({url: make_fetch_result(STATUS_PAGE, url=url)})

        result = HtmlExtractor(fetcher).extract_history(url)

        assert result.latest_status is None
        assert result.messages == []
        assert len(result.history) == 2
