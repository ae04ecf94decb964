"""
Configuration module - Centralized settings management.

This module provides type-safe configuration management using Pydantic,
supporting environment variables and YAML files.

Usage:
    from headless_recorder.config import get_settings, load_config

    # Get global settings (loaded once)
    settings = get_settings()

    # Or load fresh settings with overrides
    settings = load_config(storage={"backend": "memory"})

Environment Variables:
    HEADLESS_RECORDER__STORAGE__PATH=/tmp/recorder-state.json
    HEADLESS_RECORDER__CODE__SHOW_PLAYWRIGHT_FIRST=true
    HEADLESS_RECORDER__LOGGING__LEVEL=DEBUG
"""

from headless_recorder.config.settings import (
    Settings,
    StorageSettings,
    BrowserSettings,
    CodeOptions,
    SessionSettings,
    LoggingSettings,
)
from headless_recorder.config.loader import ConfigLoader, load_config

# Global settings singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Settings are loaded once from environment variables and config files.
    Call reset_settings() to reload.

    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (forces reload on next get_settings())."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "StorageSettings",
    "BrowserSettings",
    "CodeOptions",
    "SessionSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
