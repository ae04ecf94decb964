"""
Headless Recorder - Background coordinator for a browser interaction recorder.

This package owns the recording session state machine: it routes messages
between the popup, the in-page overlay, the injected content script and the
navigation observer, persists the recorded events, and turns them into
Puppeteer or Playwright code.

Example:
    >>> from headless_recorder import BackgroundService, Settings
    >>> from headless_recorder.services import InMemoryBrowser
    >>> service = BackgroundService.from_settings(Settings(), InMemoryBrowser())
    >>> await service.on_popup_message({"action": "START"})
"""

__version__ = "0.1.0"

# Public API exports
from headless_recorder.background.service import BackgroundService
from headless_recorder.background.controller import SessionController
from headless_recorder.config.settings import Settings

__all__ = [
    "BackgroundService",
    "SessionController",
    "Settings",
    "__version__",
]
