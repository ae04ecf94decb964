"""
Background Module - The recording session coordinator.

This module owns the recording session state machine and routes
messages between the popup, overlay, content script and navigation
observer.
"""

from headless_recorder.background.controller import SessionController
from headless_recorder.background.dispatcher import DispatchResult, TriggerQueue
from headless_recorder.background.messages import (
    MessageSender,
    NavigationCompleted,
    OverlayControlMessage,
    PopupCommand,
    RecordableEvent,
    RecordingControlMessage,
    SignConnectMessage,
    UnknownMessage,
    parse_navigation,
    parse_popup_message,
    parse_runtime_message,
)
from headless_recorder.background.service import BackgroundService
from headless_recorder.background.state import SessionRepository, SessionState

__all__ = [
    "BackgroundService",
    "SessionController",
    "SessionRepository",
    "SessionState",
    "TriggerQueue",
    "DispatchResult",
    "MessageSender",
    "NavigationCompleted",
    "OverlayControlMessage",
    "PopupCommand",
    "RecordableEvent",
    "RecordingControlMessage",
    "SignConnectMessage",
    "UnknownMessage",
    "parse_navigation",
    "parse_popup_message",
    "parse_runtime_message",
]
