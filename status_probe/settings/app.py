"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from status_probe.fetch.config import FetchConfig
from status_probe.fetch.constants import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


DEFAULT_CATALOG_PATH = (
    Path(__file__).resolve().parent.parent / "catalog" / "data" / "services.json"
)


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Every field can be set with a ``STATUS_PROBE_`` prefixed environment
    variable or in a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="STATUS_PROBE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    catalog_path: Path = Field(
        default=DEFAULT_CATALOG_PATH, description="Service catalog JSON file"
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    max_response_size_bytes: int = Field(
        default=DEFAULT_MAX_RESPONSE_SIZE_BYTES, ge=1024, le=100 * 1024 * 1024
    )
    connect_timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0, le=120
    )
    read_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0, le=120)
    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS, ge=0, le=20)
    vendor_api_domains: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Extra hosts served by the vendor status API",
    )
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    @field_validator("vendor_api_domains", mode="before")
    @classmethod
    def split_domains(cls, value: object) -> object:
        """Accept a comma-separated string of domains."""
        if isinstance(value, str):
            return [part.strip().lower() for part in value.split(",") if part.strip()]
        return value

    def to_fetch_config(self) -> FetchConfig:
        """Build the fetch configuration from these settings."""
        return FetchConfig(
            user_agent=self.user_agent,
            connect_timeout_seconds=self.connect_timeout_seconds,
            read_timeout_seconds=self.read_timeout_seconds,
            max_response_size_bytes=self.max_response_size_bytes,
            max_redirects=self.max_redirects,
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
