"""Merged status model returned to callers."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from status_probe.extractors.constants import MAX_HISTORY_ITEMS, MAX_MESSAGES


class AggregatedStatus(BaseModel):
    """Normalized status of one service, merged across sources.

    A failed query still yields a value: ``error`` is set, status is None
    and history is empty.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_url: str = Field(description="Primary status page URL")
    api_url: str | None = Field(default=None, description="Vendor API URL tried")
    feed_url: str | None = Field(default=None, description="Feed URL that won")
    history_url: str | None = Field(default=None, description="History page URL")
    latest_status: str | None = Field(default=None, description="Current status")
    history: Annotated[
        list[str],
        Field(max_length=MAX_HISTORY_ITEMS, description="De-duplicated incidents"),
    ] = []
    messages: Annotated[
        list[str],
        Field(max_length=MAX_MESSAGES, description="Banner announcements"),
    ] = []
    extracted_at: datetime = Field(description="Extraction time (UTC)")
    error: str | None = Field(default=None, description="User-visible error")
    http_status_code: int | None = Field(
        default=None, description="HTTP status of the primary page"
    )

    @property
    def is_error(self) -> bool:
        """Check if the query failed."""
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives.

        Returns:
            Dictionary with ``extracted_at`` as an ISO 8601 string.
        """
        return self.model_dump(mode="json")
