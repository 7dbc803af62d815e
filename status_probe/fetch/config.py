"""Configuration model for the HTTP fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from status_probe.fetch.constants import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class FetchConfig(BaseModel):
    """Configuration for the HTTP fetch layer.

    TLS verification is not configurable: it is always enabled for
    https targets.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    connect_timeout_seconds: Annotated[float, Field(gt=0.0, le=120.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    read_timeout_seconds: Annotated[float, Field(gt=0.0, le=120.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
    max_redirects: Annotated[int, Field(ge=0, le=20)] = DEFAULT_MAX_REDIRECTS
