"""HTTP client with redirect limits, size limits, and failure isolation."""

import time
from io import BytesIO
from urllib.parse import urljoin

import httpx
import structlog

from status_probe.fetch.config import FetchConfig
from status_probe.fetch.constants import (
    ACCEPT_HTML,
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    REDIRECT_STATUS_CODES,
)
from status_probe.fetch.metrics import FetchMetrics
from status_probe.fetch.models import FetchError, FetchErrorClass, FetchResult
from status_probe.fetch.redact import redact_url_credentials


logger = structlog.get_logger()


class HttpFetcher:
    """HTTP client with redirect and size protection.

    Provides a single GET primitive with:
    - Manual redirect following (301/302/307/308) with a hop limit
    - Maximum response size enforcement (Content-Length and actual bytes)
    - Mandatory TLS verification and fixed connect/read timeouts
    - Metrics collection

    Errors are returned in ``FetchResult.error`` rather than raised;
    ``FetchResult.raise_for_error`` converts them to exceptions.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP fetcher.

        Args:
            config: Fetch configuration (defaults apply when omitted).
            transport: Optional httpx transport, used by tests.
        """
        self._config = config or FetchConfig()
        self._transport = transport
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def config(self) -> FetchConfig:
        """Active fetch configuration."""
        return self._config

    def fetch(self, url: str, accept: str = ACCEPT_HTML) -> FetchResult:
        """Fetch a URL, following redirects.

        Args:
            url: The URL to fetch.
            accept: Value for the Accept header.

        Returns:
            FetchResult with status, body, and error information.
        """
        start_time_ns = time.perf_counter_ns()
        log = self._log.bind(url=redact_url_credentials(url))

        result = self._fetch_following_redirects(url, accept, log)

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_duration(duration_ms)
        if result.error:
            self._metrics.record_failure(result.error.error_class)
        else:
            self._metrics.record_request(result.status_code, result.body_size)

        log.info(
            "fetch_complete",
            status_code=result.status_code,
            final_url=redact_url_credentials(result.final_url),
            bytes=result.body_size,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )

        return result

    def _build_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self._config.read_timeout_seconds,
            connect=self._config.connect_timeout_seconds,
        )

    def _fetch_following_redirects(
        self,
        url: str,
        accept: str,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult:
        """Follow redirects manually so the hop count is enforced.

        A chain of exactly ``max_redirects`` hops ending in a
        non-redirect succeeds; one more redirect fails.

        Args:
            url: Initial URL.
            accept: Accept header value.
            log: Bound logger.

        Returns:
            FetchResult for the final response.
        """
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": accept,
            "Accept-Encoding": "gzip, deflate",
        }
        max_redirects = self._config.max_redirects
        current_url = url

        try:
            with httpx.Client(
                timeout=self._build_timeout(),
                follow_redirects=False,
                verify=True,
                transport=self._transport,
            ) as client:
                for hop in range(max_redirects + 1):
                    result, location = self._execute_single(
                        client, current_url, headers
                    )
                    if location is None:
                        return result

                    if hop == max_redirects:
                        break

                    next_url = urljoin(current_url, location)
                    self._metrics.record_redirect()
                    log.debug(
                        "redirect_followed",
                        hop=hop + 1,
                        status_code=result.status_code,
                        location=redact_url_credentials(next_url),
                    )
                    current_url = next_url

        except httpx.TimeoutException as e:
            return self._error_result(
                current_url,
                FetchErrorClass.NETWORK_TIMEOUT,
                f"Request timed out: {e}",
            )

        except httpx.ConnectError as e:
            message = str(e)
            error_class = (
                FetchErrorClass.SSL_ERROR
                if "ssl" in message.lower() or "certificate" in message.lower()
                else FetchErrorClass.CONNECTION_ERROR
            )
            return self._error_result(
                current_url, error_class, f"Connection failed: {message}"
            )

        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            return self._error_result(
                current_url, FetchErrorClass.INVALID_URL, f"Invalid URL: {e}"
            )

        except httpx.HTTPError as e:
            return self._error_result(
                current_url,
                FetchErrorClass.CONNECTION_ERROR,
                f"Request failed: {e}",
            )

        except Exception as e:  # noqa: BLE001
            return self._error_result(
                current_url, FetchErrorClass.UNKNOWN, f"Unexpected error: {e}"
            )

        log.warning("redirect_limit_exceeded", max_redirects=max_redirects)
        return FetchResult(
            status_code=0,
            final_url=current_url,
            error=FetchError(
                error_class=FetchErrorClass.REDIRECT_LIMIT_EXCEEDED,
                message=f"Too many redirects (max: {max_redirects})",
                url=current_url,
                max_redirects=max_redirects,
            ),
        )

    def _execute_single(
        self,
        client: httpx.Client,
        url: str,
        headers: dict[str, str],
    ) -> tuple[FetchResult, str | None]:
        """Execute a single HTTP request without following redirects.

        Args:
            client: Open httpx client.
            url: URL to fetch.
            headers: Request headers.

        Returns:
            Tuple of (result, redirect location or None).
        """
        with client.stream("GET", url, headers=headers) as response:
            response_headers = {k.lower(): v for k, v in response.headers.items()}
            status_code = response.status_code

            location = response.headers.get("location")
            if status_code in REDIRECT_STATUS_CODES and location:
                return (
                    FetchResult(
                        status_code=status_code,
                        final_url=url,
                        headers=response_headers,
                    ),
                    location,
                )

            if not HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
                body, _ = self._read_body_with_limit(response)
                return (
                    FetchResult(
                        status_code=status_code,
                        final_url=url,
                        headers=response_headers,
                        body_bytes=body,
                    ),
                    None,
                )

            max_size = self._config.max_response_size_bytes

            # Fast path: reject on the declared size before reading
            declared = self._parse_content_length(response.headers)
            if declared is not None and declared > max_size:
                return self._size_error(url, status_code, declared), None

            # Authoritative check on decoded bytes (catches bad headers and bombs)
            body, exceeded_at = self._read_body_with_limit(response)
            if exceeded_at is not None:
                return self._size_error(url, status_code, exceeded_at), None

            return (
                FetchResult(
                    status_code=status_code,
                    final_url=url,
                    headers=response_headers,
                    body_bytes=body,
                ),
                None,
            )

    def _read_body_with_limit(
        self, response: httpx.Response
    ) -> tuple[bytes, int | None]:
        """Read response body with size limit.

        Stops reading as soon as the limit is passed.

        Args:
            response: Streaming HTTP response.

        Returns:
            Tuple of (body bytes up to the limit, bytes read when the
            limit was exceeded or None).
        """
        buffer = BytesIO()
        total_read = 0
        max_size = self._config.max_response_size_bytes

        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            total_read += len(chunk)
            if total_read > max_size:
                buffer.write(chunk[: max(0, len(chunk) - (total_read - max_size))])
                return buffer.getvalue(), total_read
            buffer.write(chunk)

        return buffer.getvalue(), None

    def _parse_content_length(self, headers: httpx.Headers) -> int | None:
        value = headers.get("content-length")
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def _size_error(self, url: str, status_code: int, size: int) -> FetchResult:
        max_size = self._config.max_response_size_bytes
        return FetchResult(
            status_code=status_code,
            final_url=url,
            error=FetchError(
                error_class=FetchErrorClass.RESPONSE_SIZE_EXCEEDED,
                message=f"Response size {size} exceeds limit {max_size}",
                status_code=status_code,
                url=url,
                size=size,
                max_size=max_size,
            ),
        )

    def _error_result(
        self,
        url: str,
        error_class: FetchErrorClass,
        message: str,
    ) -> FetchResult:
        return FetchResult(
            status_code=0,
            final_url=url,
            error=FetchError(error_class=error_class, message=message, url=url),
        )
