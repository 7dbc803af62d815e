"""Result model shared by all source extractors."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from status_probe.errors import ErrorKind, StatusProbeError
from status_probe.extractors.constants import MAX_HISTORY_ITEMS, MAX_MESSAGES


class ExtractionResult(BaseModel):
    """Normalized output of one source extractor.

    Failures are encoded in ``error`` and ``error_kind`` instead of
    being raised, so the coordinator can weigh sources against each other.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    latest_status: str | None = Field(default=None, description="Current status")
    history: Annotated[
        list[str],
        Field(max_length=MAX_HISTORY_ITEMS, description="Incidents, source order"),
    ] = []
    messages: Annotated[
        list[str],
        Field(max_length=MAX_MESSAGES, description="Banner announcements"),
    ] = []
    error: str | None = Field(default=None, description="Error message if failed")
    error_kind: ErrorKind | None = Field(
        default=None, description="Classification of the error"
    )
    http_status_code: int | None = Field(
        default=None, description="HTTP status of the source fetch"
    )

    @property
    def has_data(self) -> bool:
        """Check whether the source supplied a status or any history."""
        return bool(self.latest_status) or bool(self.history)

    @classmethod
    def failed(
        cls,
        kind: ErrorKind,
        message: str,
        http_status_code: int | None = None,
    ) -> "ExtractionResult":
        """Build a result carrying only an error.

        Args:
            kind: Error classification.
            message: Human-readable error message.
            http_status_code: HTTP status, when one was received.

        Returns:
            Failed extraction result.
        """
        return cls(error=message, error_kind=kind, http_status_code=http_status_code)

    @classmethod
    def from_error(
        cls, error: StatusProbeError, http_status_code: int | None = None
    ) -> "ExtractionResult":
        """Build a failed result from a pipeline exception.

        Args:
            error: Caught pipeline exception.
            http_status_code: HTTP status, when one was received.

        Returns:
            Failed extraction result.
        """
        return cls.failed(error.kind, error.message, http_status_code)
