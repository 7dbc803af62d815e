"""Catalog record and match models."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class ServiceRecord(BaseModel):
    """One catalog entry: a service and its status-related links."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Annotated[str, Field(min_length=1, description="Service name")]
    status_url: str | None = Field(default=None, description="Official status page")
    website_url: str | None = Field(default=None, description="Main website")
    security_url: str | None = Field(default=None, description="Security page")
    support_url: str | None = Field(default=None, description="Support page")
    aux_urls: tuple[str, ...] = Field(default=(), description="Other related links")


class MatchType(str, Enum):
    """How a record matched a query.

    - EXACT: names equal, ignoring case and surrounding whitespace
    - SUBSTRING: one name contains the other
    - FUZZY: edit-distance similarity above the threshold
    """

    EXACT = "exact"
    SUBSTRING = "substring"
    FUZZY = "fuzzy"


class MatchResult(BaseModel):
    """A ranked catalog match."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service: ServiceRecord
    score: Annotated[float, Field(ge=0.0, le=1.0)]
    match_type: MatchType

    @property
    def sort_key(self) -> tuple[float, str]:
        """Ordering key: best score first, then name."""
        return (-self.score, self.service.name)
