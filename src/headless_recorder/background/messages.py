"""
Inbound message model.

Raw messages arrive as loosely shaped mappings from four surfaces. The
parsers here turn each one into exactly one member of a small tagged
union, so the controller can dispatch on type instead of probing
optional string fields. Anything that does not fit becomes an
``UnknownMessage``, which the controller logs and ignores.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from headless_recorder.services.constants import (
    OverlayControl,
    PopupAction,
    RecordingControl,
    SIGN_CONNECT,
)


@dataclass(frozen=True)
class MessageSender:
    """Where a runtime message came from."""
    frame_id: Optional[int] = None
    url: Optional[str] = None
    tab_id: Optional[int] = None

    @classmethod
    def coerce(cls, sender: Any) -> Optional["MessageSender"]:
        """Accept a ``MessageSender``, a ``{frameId, url, tabId}`` mapping or None."""
        if sender is None or isinstance(sender, MessageSender):
            return sender
        if isinstance(sender, Mapping):
            return cls(
                frame_id=sender.get("frameId", sender.get("frame_id")),
                url=sender.get("url"),
                tab_id=sender.get("tabId", sender.get("tab_id")),
            )
        return None


@dataclass(frozen=True)
class RecordableEvent:
    """A content-script message that belongs in the recording."""
    payload: Dict[str, Any] = field(default_factory=dict)

    def stamped(self, sender: Optional[MessageSender]) -> Dict[str, Any]:
        """
        Build the stored event: payload minus null fields, plus frame provenance.

        ``frameId``/``frameUrl`` always come from the sender, never from
        the payload; without a sender both are None.
        """
        event = {k: v for k, v in self.payload.items() if v is not None}
        event["frameId"] = sender.frame_id if sender else None
        event["frameUrl"] = sender.url if sender else None
        return event


@dataclass(frozen=True)
class RecordingControlMessage:
    """Content-script control request."""
    control: RecordingControl
    href: Optional[str] = None
    value: Any = None
    coordinates: Any = None


@dataclass(frozen=True)
class OverlayControlMessage:
    """Overlay button press."""
    control: OverlayControl


@dataclass(frozen=True)
class SignConnectMessage:
    """Reserved connect handshake; carries nothing."""


@dataclass(frozen=True)
class PopupCommand:
    """Popup control panel request."""
    action: PopupAction
    value: Any = None
    stop: bool = False


@dataclass(frozen=True)
class NavigationCompleted:
    """A page or sub-frame finished loading."""
    frame_id: Optional[int] = None
    tab_id: Optional[int] = None
    url: Optional[str] = None

    @property
    def is_top_frame(self) -> bool:
        return self.frame_id == 0


@dataclass(frozen=True)
class UnknownMessage:
    """Anything unrecognised; handled as a logged no-op."""
    raw: Any = None
    reason: str = ""


RuntimeMessage = Union[
    RecordableEvent,
    RecordingControlMessage,
    OverlayControlMessage,
    SignConnectMessage,
    UnknownMessage,
]


def _enum_member(enum_cls, value: Any):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_runtime_message(raw: Any) -> RuntimeMessage:
    """
    Classify a message from the content script or overlay.

    A truthy ``control`` field makes it a control message (recording or
    overlay, whose tag sets are disjoint) and it is never recorded.
    """
    if not isinstance(raw, Mapping):
        return UnknownMessage(raw, "not a mapping")

    control = raw.get("control")
    if control:
        recording_control = _enum_member(RecordingControl, control)
        if recording_control is not None:
            return RecordingControlMessage(
                control=recording_control,
                href=raw.get("href"),
                value=raw.get("value"),
                coordinates=raw.get("coordinates"),
            )
        overlay_control = _enum_member(OverlayControl, control)
        if overlay_control is not None:
            return OverlayControlMessage(control=overlay_control)
        return UnknownMessage(raw, f"unknown control {control!r}")

    if raw.get("type") == SIGN_CONNECT:
        return SignConnectMessage()

    return RecordableEvent(payload=dict(raw))


def parse_popup_message(raw: Any) -> Union[PopupCommand, UnknownMessage]:
    """Classify a message from the popup port."""
    if not isinstance(raw, Mapping) or not raw.get("action"):
        return UnknownMessage(raw, "missing action")
    action = _enum_member(PopupAction, raw.get("action"))
    if action is None:
        return UnknownMessage(raw, f"unknown popup action {raw.get('action')!r}")
    return PopupCommand(action=action, value=raw.get("value"), stop=bool(raw.get("stop")))


def parse_navigation(details: Any) -> NavigationCompleted:
    """Read ``{frameId, tabId, url}`` navigation details; missing fields stay None."""
    if not isinstance(details, Mapping):
        return NavigationCompleted()
    return NavigationCompleted(
        frame_id=details.get("frameId", details.get("frame_id")),
        tab_id=details.get("tabId", details.get("tab_id")),
        url=details.get("url"),
    )
