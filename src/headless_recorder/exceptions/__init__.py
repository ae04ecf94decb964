"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions raised by Headless Recorder
collaborators (state store, browser bridge, code generator).
"""

from headless_recorder.exceptions.base import (
    HeadlessRecorderError,
    ConfigurationError,
    CodeGenerationError,
)
from headless_recorder.exceptions.storage import (
    StateStoreError,
    StateStoreCorruptedError,
)
from headless_recorder.exceptions.browser import (
    BrowserBridgeError,
    InjectionError,
    TabMessageError,
)

__all__ = [
    # Base exceptions
    "HeadlessRecorderError",
    "ConfigurationError",
    "CodeGenerationError",
    # Storage exceptions
    "StateStoreError",
    "StateStoreCorruptedError",
    # Browser exceptions
    "BrowserBridgeError",
    "InjectionError",
    "TabMessageError",
]
