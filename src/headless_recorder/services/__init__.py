"""
Services - Leaf collaborators of the background coordinator.

State store, badge indicator and browser bridge, plus the tag
vocabularies shared across surfaces.
"""

from headless_recorder.services.badge import (
    Badge,
    BadgeMode,
    BadgeRenderer,
    BadgeView,
    LoggingBadgeRenderer,
    MemoryBadgeRenderer,
)
from headless_recorder.services.browser import (
    BrowserBridge,
    InMemoryBrowser,
    PlaywrightBrowserBridge,
    Tab,
)
from headless_recorder.services.storage import (
    StateStore,
    MemoryStateStore,
    JsonFileStateStore,
    create_state_store,
)

__all__ = [
    "Badge",
    "BadgeMode",
    "BadgeRenderer",
    "BadgeView",
    "LoggingBadgeRenderer",
    "MemoryBadgeRenderer",
    "BrowserBridge",
    "InMemoryBrowser",
    "PlaywrightBrowserBridge",
    "Tab",
    "StateStore",
    "MemoryStateStore",
    "JsonFileStateStore",
    "create_state_store",
]
