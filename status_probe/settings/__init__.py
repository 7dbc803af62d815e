"""Environment-driven application settings."""

from status_probe.settings.app import DEFAULT_CATALOG_PATH, AppSettings, get_settings


__all__ = [
    "DEFAULT_CATALOG_PATH",
    "AppSettings",
    "get_settings",
]
