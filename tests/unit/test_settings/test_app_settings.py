"""Unit tests for environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from status_probe.fetch.constants import DEFAULT_USER_AGENT
from status_probe.settings.app import DEFAULT_CATALOG_PATH, AppSettings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test without ambient settings or a .env file."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "STATUS_PROBE_CATALOG_PATH",
        "STATUS_PROBE_USER_AGENT",
        "STATUS_PROBE_MAX_REDIRECTS",
        "STATUS_PROBE_VENDOR_API_DOMAINS",
        "STATUS_PROBE_LOG_LEVEL",
        "STATUS_PROBE_LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self) -> None:
        """Test default values."""
        settings = AppSettings()

        assert settings.catalog_path == DEFAULT_CATALOG_PATH
        assert settings.user_agent == DEFAULT_USER_AGENT
        assert settings.vendor_api_domains == []
        assert settings.log_json is True

    def test_environment_overrides(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Test that prefixed environment variables are read."""
        catalog = tmp_path / "services.json"
        monkeypatch.setenv("STATUS_PROBE_CATALOG_PATH", str(catalog))
        monkeypatch.setenv("STATUS_PROBE_MAX_REDIRECTS", "3")
        monkeypatch.setenv("STATUS_PROBE_LOG_JSON", "false")

        settings = AppSettings()

        assert settings.catalog_path == catalog
        assert settings.max_redirects == 3
        assert settings.log_json is False

    def test_vendor_domains_comma_separated(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that vendor domains accept a comma-separated list."""
        monkeypatch.setenv(
            "STATUS_PROBE_VENDOR_API_DOMAINS", "status.acme.test, Status.Example.COM,"
        )

        settings = AppSettings()

        assert settings.vendor_api_domains == ["status.acme.test", "status.example.com"]

    def test_dotenv_file(self, tmp_path: Path) -> None:
        """Test that a .env file in the working directory is read."""
        (tmp_path / ".env").write_text(
            "STATUS_PROBE_USER_AGENT=agent-test/2.0\n", encoding="utf-8"
        )

        assert AppSettings().user_agent == "agent-test/2.0"

    def test_invalid_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that out-of-range values are rejected."""
        monkeypatch.setenv("STATUS_PROBE_MAX_REDIRECTS", "50")

        with pytest.raises(ValidationError):
            AppSettings()

    def test_to_fetch_config(self) -> None:
        """Test conversion to the fetch configuration."""
        settings = AppSettings(max_redirects=2, read_timeout_seconds=3.5)

        config = settings.to_fetch_config()

        assert config.max_redirects == 2
        assert config.read_timeout_seconds == 3.5
        assert config.user_agent == settings.user_agent
