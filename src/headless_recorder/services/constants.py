"""
Tag vocabularies shared by the background coordinator and its surfaces.

Every closed set of string tags that crosses a surface boundary lives here
as a ``str`` Enum, so members compare equal to the raw wire strings.
"""

from enum import Enum


class PopupAction(str, Enum):
    """Actions sent by the popup control panel."""
    START = "START"
    STOP = "STOP"
    CLEAN_UP = "CLEAN_UP"
    PAUSE = "PAUSE"
    UN_PAUSE = "UN_PAUSE"


class RecordingControl(str, Enum):
    """Control tags sent by the content script."""
    EVENT_RECORDER_STARTED = "EVENT_RECORDER_STARTED"
    GET_VIEWPORT_SIZE = "GET_VIEWPORT_SIZE"
    GET_CURRENT_URL = "GET_CURRENT_URL"
    GET_SCREENSHOT = "GET_SCREENSHOT"


class OverlayControl(str, Enum):
    """Control tags sent by the in-page overlay."""
    RESTART = "RESTART"
    CLOSE = "CLOSE"
    COPY = "COPY"
    STOP = "STOP"
    PAUSE = "PAUSE"
    UNPAUSE = "UNPAUSE"
    CLIPPED_SCREENSHOT = "CLIPPED_SCREENSHOT"
    FULL_SCREENSHOT = "FULL_SCREENSHOT"
    ABORT_SCREENSHOT = "ABORT_SCREENSHOT"


class TabAction(str, Enum):
    """Outbound actions the background sends to the content script."""
    CODE = "CODE"
    TOGGLE_OVERLAY = "TOGGLE_OVERLAY"
    TOGGLE_SCREENSHOT_MODE = "TOGGLE_SCREENSHOT_MODE"
    TOGGLE_SCREENSHOT_CLIPPED_MODE = "TOGGLE_SCREENSHOT_CLIPPED_MODE"
    CLOSE_SCREENSHOT_MODE = "CLOSE_SCREENSHOT_MODE"
    STOP = "STOP"
    PAUSE = "PAUSE"
    UN_PAUSE = "UN_PAUSE"


class HeadlessAction(str, Enum):
    """Recorder-synthesized event actions understood by the code generator."""
    GOTO = "GOTO"
    VIEWPORT = "VIEWPORT"
    NAVIGATION = "NAVIGATION"
    SCREENSHOT = "SCREENSHOT"


class DomEvent(str, Enum):
    """DOM event types the content script records."""
    CLICK = "click"
    DBLCLICK = "dblclick"
    CHANGE = "change"
    KEYDOWN = "keydown"


# Reserved message type the content script sends on connect; never recorded.
SIGN_CONNECT = "SIGN_CONNECT"

# Badge text shown after stopping a session that captured events.
RECORDED_BADGE_TEXT = "1"

# Store keys owned by the session; removed together by clean-up.
SESSION_KEYS = (
    "recording",
    "isPaused",
    "badgeState",
    "hasGoto",
    "hasViewPort",
    "isRecording",
)

OPTIONS_KEY = "options"
