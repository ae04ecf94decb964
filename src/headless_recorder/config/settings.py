"""
Settings - Pydantic models for type-safe configuration.

This module defines all configuration settings as Pydantic models,
providing validation, type hints, and automatic environment variable loading.

Example:
    >>> from headless_recorder.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.storage.backend)
    'file'
"""

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseModel):
    """
    State store settings.

    Attributes:
        backend: Where session state lives ("file" survives restarts)
        path: JSON file used by the file backend
    """
    backend: Literal["memory", "file"] = "file"
    path: str = ".headless-recorder/state.json"


class BrowserSettings(BaseModel):
    """
    Content-script injection and tab messaging settings.

    Attributes:
        content_script_path: Script injected into tabs (None injects only the marker)
        injection_marker: Window property set once the script is present
        message_event: DOM event name used to deliver outbound messages
    """
    content_script_path: Optional[str] = None
    injection_marker: str = "__headlessRecorderInjected"
    message_event: str = "headless-recorder:message"


class CodeOptions(BaseModel):
    """
    Code generation options.

    Field names are snake_case in Python; the persisted ``options.code``
    mapping written by the popup uses the camelCase aliases.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    wrap_async: bool = True
    headless: bool = True
    wait_for_navigation: bool = True
    wait_for_selector_on_click: bool = True
    blank_lines_between_blocks: bool = True
    data_attribute: str = ""
    show_playwright_first: bool = False

    def merged_with(self, stored: Optional[Dict[str, Any]]) -> "CodeOptions":
        """Overlay persisted camelCase options on top of these defaults."""
        if not stored:
            return self
        updates = CodeOptions.model_validate(stored).model_dump(exclude_unset=True)
        return self.model_copy(update=updates)


class SessionSettings(BaseModel):
    """
    Session controller behavior.

    Attributes:
        drain_on_clean_up: Discard queued, not-yet-started triggers when the
            popup purges the session
    """
    drain_on_clean_up: bool = False


class LoggingSettings(BaseModel):
    """
    Logging configuration.

    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.

    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor
    2. Environment variables (prefixed with HEADLESS_RECORDER__)
    3. Config file (YAML)
    4. Default values

    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(storage=StorageSettings(backend="memory"))
    """

    model_config = SettingsConfigDict(
        env_prefix="HEADLESS_RECORDER__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    code: CodeOptions = Field(default_factory=CodeOptions)
    session: SessionSettings = Field(default_factory=SessionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = False

    def merge_with(self, overrides: dict) -> "Settings":
        """
        Create a new Settings instance with overrides applied.

        Args:
            overrides: Dictionary of values to override

        Returns:
            New Settings instance with overrides applied
        """
        current = self.model_dump()

        def deep_merge(base: dict, updates: dict) -> dict:
            for key, value in updates.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value)
                else:
                    base[key] = value
            return base

        merged = deep_merge(current, overrides)
        return Settings(**merged)
