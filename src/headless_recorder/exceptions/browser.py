"""
Browser bridge exceptions.
"""

from headless_recorder.exceptions.base import HeadlessRecorderError


class BrowserBridgeError(HeadlessRecorderError):
    """Base exception for content-script injection and tab messaging."""
    pass


class InjectionError(BrowserBridgeError):
    """
    Error injecting the content script.

    Raised when the script could not be evaluated in the tab, for example
    because the page was closed or navigated away mid-injection.
    """

    def __init__(self, message: str, tab_id: int | None = None):
        super().__init__(message, {"tab_id": tab_id})
        self.tab_id = tab_id


class TabMessageError(BrowserBridgeError):
    """
    Error delivering a message to a tab.

    Raised when the tab exists but the message could not be dispatched.
    """

    def __init__(self, message: str, tab_id: int | None = None, action: str | None = None):
        super().__init__(message, {"tab_id": tab_id, "action": action})
        self.tab_id = tab_id
        self.action = action
