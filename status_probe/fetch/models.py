"""Data models for the HTTP fetch layer."""

from enum import Enum
from http import HTTPStatus
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from status_probe.errors import (
    ErrorKind,
    NetworkError,
    RedirectLimitExceededError,
    ResponseSizeExceededError,
    StatusProbeError,
)
from status_probe.fetch.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN


class FetchErrorClass(str, Enum):
    """Classification of fetch errors for metrics and error mapping.

    - NETWORK_TIMEOUT: Connect or read timed out
    - CONNECTION_ERROR: Could not establish connection (incl. DNS)
    - SSL_ERROR: TLS certificate or handshake error
    - INVALID_URL: URL could not be requested
    - REDIRECT_LIMIT_EXCEEDED: Too many redirect hops
    - RESPONSE_SIZE_EXCEEDED: Response exceeded max size limit
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SSL_ERROR = "SSL_ERROR"
    INVALID_URL = "INVALID_URL"
    REDIRECT_LIMIT_EXCEEDED = "REDIRECT_LIMIT_EXCEEDED"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    UNKNOWN = "UNKNOWN"


class FetchError(BaseModel):
    """Typed error from a fetch operation.

    Provides structured information about what went wrong during a fetch.
    Size violations carry the observed size and the limit.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass = Field(description="Classification of the error")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    status_code: int | None = Field(
        default=None, description="HTTP status code if available"
    )
    url: str | None = Field(default=None, description="URL the error refers to")
    size: int | None = Field(default=None, description="Observed size in bytes")
    max_size: int | None = Field(default=None, description="Size limit in bytes")
    max_redirects: int | None = Field(default=None, description="Redirect hop limit")

    def to_exception(self) -> StatusProbeError:
        """Convert this error record into the pipeline exception taxonomy.

        Returns:
            Exception instance matching the error class.
        """
        if self.error_class == FetchErrorClass.RESPONSE_SIZE_EXCEEDED:
            return ResponseSizeExceededError(
                self.size or 0, self.max_size or 0, uri=self.url
            )
        if self.error_class == FetchErrorClass.REDIRECT_LIMIT_EXCEEDED:
            return RedirectLimitExceededError(self.max_redirects or 0, uri=self.url)
        if self.error_class == FetchErrorClass.UNKNOWN:
            return StatusProbeError(self.message, kind=ErrorKind.UNEXPECTED)
        return NetworkError(self.message)


class FetchResult(BaseModel):
    """Result of a fetch operation.

    Contains the response data or error information from an HTTP fetch.
    Non-2xx responses are not errors at this layer; callers classify them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=0, le=599, description="HTTP status code, 0 if none")
    final_url: str = Field(description="Final URL after redirects")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers (lower-case keys)"
    )
    body_bytes: bytes = Field(default=b"", description="Response body")
    error: FetchError | None = Field(
        default=None, description="Error details if fetch failed"
    )

    @property
    def is_success(self) -> bool:
        """Check if the fetch was successful (2xx status, no error)."""
        return (
            self.error is None
            and HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX
        )

    @property
    def body_size(self) -> int:
        """Get the size of the response body in bytes."""
        return len(self.body_bytes)

    @property
    def text(self) -> str:
        """Decode the body using the declared charset, falling back to UTF-8."""
        content_type = self.headers.get("content-type", "")
        charset = "utf-8"
        for param in content_type.split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.lower() == "charset" and value:
                charset = value.strip("\"' ")
        try:
            return self.body_bytes.decode(charset, errors="replace")
        except LookupError:
            return self.body_bytes.decode("utf-8", errors="replace")

    @property
    def status_line(self) -> str:
        """Human-readable status such as ``404 Not Found``."""
        return describe_status(self.status_code)

    def raise_for_error(self) -> None:
        """Raise the typed pipeline exception if the fetch failed.

        Raises:
            NetworkError, RedirectLimitExceededError or
            ResponseSizeExceededError matching the error class.
        """
        if self.error is not None:
            raise self.error.to_exception()


def describe_status(status_code: int) -> str:
    """Render a status code with its standard reason phrase.

    Args:
        status_code: HTTP status code.

    Returns:
        ``"<code> <phrase>"`` or just the code for unknown statuses.
    """
    try:
        return f"{status_code} {HTTPStatus(status_code).phrase}"
    except ValueError:
        return str(status_code)
