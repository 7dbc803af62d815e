"""Error taxonomy for the status pipeline."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of pipeline errors.

    - NETWORK: connect, timeout, DNS, TLS or invalid URL failure
    - REDIRECT_LIMIT: redirect chain longer than the configured maximum
    - RESPONSE_SIZE: response exceeded the protective size limit
    - HTTP_STATUS: non-2xx response from a source
    - CRAWLER_PROTECTION: anti-bot challenge or rate-limit page
    - NOT_HTML: body is not an HTML document
    - JS_RENDERED: client-rendered shell with no server-side content
    - EMPTY_PAGE: HTML document without meaningful text
    - ERROR_PAGE: HTML document that is itself an error page
    - NOT_A_FEED: body is not an RSS or Atom document
    - FEED_FORMAT: feed document could not be read
    - API: vendor API returned an unusable payload
    - UNEXPECTED: anything else
    """

    NETWORK = "NETWORK"
    REDIRECT_LIMIT = "REDIRECT_LIMIT"
    RESPONSE_SIZE = "RESPONSE_SIZE"
    HTTP_STATUS = "HTTP_STATUS"
    CRAWLER_PROTECTION = "CRAWLER_PROTECTION"
    NOT_HTML = "NOT_HTML"
    JS_RENDERED = "JS_RENDERED"
    EMPTY_PAGE = "EMPTY_PAGE"
    ERROR_PAGE = "ERROR_PAGE"
    NOT_A_FEED = "NOT_A_FEED"
    FEED_FORMAT = "FEED_FORMAT"
    API = "API"
    UNEXPECTED = "UNEXPECTED"


class StatusProbeError(Exception):
    """Base exception for status pipeline errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            kind: Override for the class-level error kind.
        """
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class NetworkError(StatusProbeError):
    """Connection, timeout, DNS or TLS failure."""

    kind = ErrorKind.NETWORK


class RedirectLimitExceededError(StatusProbeError):
    """Raised when a redirect chain exceeds the hop limit."""

    kind = ErrorKind.REDIRECT_LIMIT

    def __init__(self, max_redirects: int, *, uri: str | None = None) -> None:
        """Initialize the error.

        Args:
            max_redirects: Hop limit that was exceeded.
            uri: Last URL visited before giving up.
        """
        super().__init__(f"Too many redirects (max: {max_redirects})")
        self.max_redirects = max_redirects
        self.uri = uri


class ResponseSizeExceededError(StatusProbeError):
    """Raised when a response body exceeds the protective size limit.

    Distinct from parse failures: an oversized body usually means crawler
    protection or a decompression bomb.
    """

    kind = ErrorKind.RESPONSE_SIZE

    def __init__(self, size: int, max_size: int, *, uri: str | None = None) -> None:
        """Initialize the error.

        Args:
            size: Reported or observed size in bytes.
            max_size: Configured limit in bytes.
            uri: URL whose response was too large.
        """
        super().__init__(
            f"Response size ({size} bytes) exceeds maximum allowed size "
            f"({max_size} bytes). This may indicate crawler protection or "
            "zip bomb."
        )
        self.size = size
        self.max_size = max_size
        self.uri = uri


class HtmlValidationError(StatusProbeError):
    """Raised when a fetched page is not usable HTML.

    The kind tells crawler protection, non-HTML bodies, JS-rendered
    shells, empty pages and error pages apart.
    """

    def __init__(self, message: str, *, kind: ErrorKind) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            kind: Specific rejection reason.
        """
        super().__init__(message, kind=kind)


class FeedFormatError(StatusProbeError):
    """Raised when a body is not a readable RSS or Atom feed."""

    kind = ErrorKind.FEED_FORMAT


class ApiError(StatusProbeError):
    """Raised for non-2xx or malformed vendor API responses."""

    kind = ErrorKind.API
