"""Unit tests for the HTTP fetcher using httpx.MockTransport."""

import gzip

import httpx
import pytest

from status_probe.errors import (
    ErrorKind,
    NetworkError,
    RedirectLimitExceededError,
    ResponseSizeExceededError,
)
from status_probe.fetch.client import HttpFetcher
from status_probe.fetch.config import FetchConfig
from status_probe.fetch.constants import ACCEPT_FEED, ACCEPT_HTML
from status_probe.fetch.metrics import FetchMetrics
from status_probe.fetch.models import FetchErrorClass


def redirect_chain_transport(hops: int) -> httpx.MockTransport:
    """Build a transport that redirects ``hops`` times before answering."""

    def handler(request: httpx.Request) -> httpx.Response:
        step = int(request.url.params.get("step", "0"))
        if step < hops:
            return httpx.Response(
                302, headers={"Location": f"/hop?step={step + 1}"}
            )
        return httpx.Response(200, text="final")

    return httpx.MockTransport(handler)


class TestRedirects:
    """Tests for manual redirect following."""

    def test_five_redirects_succeed(self) -> None:
        """Test that a chain of exactly five hops succeeds."""
        fetcher = HttpFetcher(transport=redirect_chain_transport(5))

        result = fetcher.fetch("https://status.example.com/hop?step=0")

        assert result.is_success
        assert result.text == "final"
        assert result.final_url == "https://status.example.com/hop?step=5"

    def test_six_redirects_fail(self) -> None:
        """Test that a sixth hop exceeds the default limit."""
        fetcher = HttpFetcher(transport=redirect_chain_transport(6))

        result = fetcher.fetch("https://status.example.com/hop?step=0")

        assert not result.is_success
        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.REDIRECT_LIMIT_EXCEEDED
        with pytest.raises(RedirectLimitExceededError) as exc_info:
            result.raise_for_error()
        assert exc_info.value.kind == ErrorKind.REDIRECT_LIMIT
        assert exc_info.value.max_redirects == 5

    def test_custom_redirect_limit(self) -> None:
        """Test that the hop limit comes from the configuration."""
        fetcher = HttpFetcher(
            config=FetchConfig(max_redirects=1),
            transport=redirect_chain_transport(2),
        )

        result = fetcher.fetch("https://status.example.com/hop?step=0")

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.REDIRECT_LIMIT_EXCEEDED

    def test_relative_location_resolved(self) -> None:
        """Test that relative Location headers resolve against the current URL."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            if request.url.path == "/old/page":
                return httpx.Response(301, headers={"Location": "../new/page"})
            return httpx.Response(200, text="moved")

        fetcher = HttpFetcher(transport=httpx.MockTransport(handler))

        result = fetcher.fetch("https://example.com/old/page")

        assert result.is_success
        assert seen == ["https://example.com/old/page", "https://example.com/new/page"]

    def test_redirects_counted_in_metrics(self) -> None:
        """Test that followed hops are recorded."""
        fetcher = HttpFetcher(transport=redirect_chain_transport(3))

        fetcher.fetch("https://status.example.com/hop?step=0")

        assert FetchMetrics.get_instance().http_redirects_total == 3


class TestResponseSizeLimit:
    """Tests for response size enforcement."""

    def test_declared_size_rejected_before_read(self) -> None:
        """Test that an oversized Content-Length fails without reading."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"Content-Length": str(5 * 1024 * 1024)}, content=b"x"
            )

        fetcher = HttpFetcher(transport=httpx.MockTransport(handler))

        result = fetcher.fetch("https://example.com/")

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.RESPONSE_SIZE_EXCEEDED
        assert result.error.size == 5 * 1024 * 1024
        assert result.body_size == 0

    def test_actual_bytes_enforced_without_header(self) -> None:
        """Test that streamed bytes are counted when no length is declared."""
        body = b"a" * 4096

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=httpx.ByteStream(body))

        fetcher = HttpFetcher(
            config=FetchConfig(max_response_size_bytes=2048),
            transport=httpx.MockTransport(handler),
        )

        result = fetcher.fetch("https://example.com/")

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.RESPONSE_SIZE_EXCEEDED
        with pytest.raises(ResponseSizeExceededError) as exc_info:
            result.raise_for_error()
        assert exc_info.value.max_size == 2048
        assert exc_info.value.size > 2048

    def test_decompressed_size_enforced(self) -> None:
        """Test that a small gzip body expanding past the limit fails."""
        compressed = gzip.compress(b"\0" * 200_000)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=compressed
            )

        fetcher = HttpFetcher(
            config=FetchConfig(max_response_size_bytes=64 * 1024),
            transport=httpx.MockTransport(handler),
        )

        result = fetcher.fetch("https://example.com/")

        assert len(compressed) < 64 * 1024
        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.RESPONSE_SIZE_EXCEEDED

    def test_body_at_limit_accepted(self) -> None:
        """Test that a body of exactly the limit is accepted."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"b" * 1024)

        fetcher = HttpFetcher(
            config=FetchConfig(max_response_size_bytes=1024),
            transport=httpx.MockTransport(handler),
        )

        result = fetcher.fetch("https://example.com/")

        assert result.is_success
        assert result.body_size == 1024


class TestFetchResults:
    """Tests for status, headers and error mapping."""

    def test_non_2xx_returned_not_raised(self) -> None:
        """Test that a 404 is a result the caller classifies."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="missing")

        fetcher = HttpFetcher(transport=httpx.MockTransport(handler))

        result = fetcher.fetch("https://example.com/missing")

        assert result.error is None
        assert not result.is_success
        assert result.status_code == 404
        assert result.status_line == "404 Not Found"
        result.raise_for_error()

    def test_request_headers(self) -> None:
        """Test that Accept and User-Agent are sent."""
        captured: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(request.headers)
            return httpx.Response(200, text="ok")

        fetcher = HttpFetcher(
            config=FetchConfig(user_agent="agent-test/1.0"),
            transport=httpx.MockTransport(handler),
        )

        fetcher.fetch("https://example.com/feed", accept=ACCEPT_FEED)

        assert captured["accept"] == ACCEPT_FEED
        assert captured["user-agent"] == "agent-test/1.0"

    def test_default_accept_is_html(self) -> None:
        """Test that pages are requested with the HTML Accept header."""
        captured: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(request.headers)
            return httpx.Response(200, text="ok")

        HttpFetcher(transport=httpx.MockTransport(handler)).fetch(
            "https://example.com/"
        )

        assert captured["accept"] == ACCEPT_HTML

    def test_connect_error_mapped_to_network_error(self) -> None:
        """Test that connection failures become network errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        fetcher = HttpFetcher(transport=httpx.MockTransport(handler))

        result = fetcher.fetch("https://nowhere.invalid/")

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.CONNECTION_ERROR
        with pytest.raises(NetworkError):
            result.raise_for_error()

    def test_timeout_classified(self) -> None:
        """Test that timeouts are classified separately."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        fetcher = HttpFetcher(transport=httpx.MockTransport(handler))

        result = fetcher.fetch("https://slow.example.com/")

        assert result.error is not None
        assert result.error.error_class == FetchErrorClass.NETWORK_TIMEOUT
        failures = FetchMetrics.get_instance().http_failures_total
        assert failures == {"NETWORK_TIMEOUT": 1}

    def test_charset_from_content_type(self) -> None:
        """Test that the declared charset is used for decoding."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={"Content-Type": "text/html; charset=iso-8859-1"},
                content="café".encode("iso-8859-1"),
            )

        result = HttpFetcher(transport=httpx.MockTransport(handler)).fetch(
            "https://example.com/"
        )

        assert result.text == "café"
