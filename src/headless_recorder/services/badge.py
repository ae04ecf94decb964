"""
Badge - The recorder's visual status indicator.

The badge combines an icon, a background color and a short text. The
session controller drives it through six operations; how the resulting
view is drawn is delegated to a ``BadgeRenderer``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class BadgeMode(str, Enum):
    """Badge vocabulary."""
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    WAITING = "waiting"


DEFAULT_COLOR = "#45C8F1"
DEFAULT_ICON = "images/logo.png"
RECORDING_ICON = "images/logo-red.png"
PAUSE_ICON = "images/logo-yellow.png"
WAIT_TEXT = "wait"


@dataclass(frozen=True)
class BadgeView:
    """What the badge currently shows."""
    mode: BadgeMode = BadgeMode.IDLE
    icon: str = DEFAULT_ICON
    color: str = DEFAULT_COLOR
    text: str = ""


class BadgeRenderer(ABC):
    """Draws a badge view on whatever surface hosts it."""

    @abstractmethod
    def render(self, view: BadgeView) -> None:
        ...


class LoggingBadgeRenderer(BadgeRenderer):
    """Renderer that only logs badge changes."""

    def render(self, view: BadgeView) -> None:
        logger.debug(f"Badge -> {view.mode.value} icon={view.icon} text={view.text!r}")


@dataclass
class MemoryBadgeRenderer(BadgeRenderer):
    """Renderer that keeps every rendered view, newest last."""
    history: List[BadgeView] = field(default_factory=list)

    def render(self, view: BadgeView) -> None:
        self.history.append(view)

    @property
    def current(self) -> Optional[BadgeView]:
        return self.history[-1] if self.history else None


class Badge:
    """
    Badge state holder.

    Example:
        >>> badge = Badge(MemoryBadgeRenderer())
        >>> badge.start()
        >>> badge.view.mode
        <BadgeMode.RECORDING: 'recording'>
    """

    def __init__(self, renderer: Optional[BadgeRenderer] = None):
        self._renderer = renderer or LoggingBadgeRenderer()
        self._view = BadgeView()

    @property
    def view(self) -> BadgeView:
        return self._view

    def _show(self, **changes) -> None:
        self._view = replace(self._view, **changes)
        self._renderer.render(self._view)

    def start(self) -> None:
        self._show(mode=BadgeMode.RECORDING, icon=RECORDING_ICON)

    def pause(self) -> None:
        self._show(mode=BadgeMode.PAUSED, icon=PAUSE_ICON)

    def stop(self, text: str = "") -> None:
        """Back to the idle icon, keeping ``text`` (the recorded-events marker)."""
        self._show(mode=BadgeMode.IDLE, icon=DEFAULT_ICON, color=DEFAULT_COLOR, text=text)

    def wait(self) -> None:
        self._show(mode=BadgeMode.WAITING, color=DEFAULT_COLOR, text=WAIT_TEXT)

    def reset(self) -> None:
        self.set_text("")

    def set_text(self, text: str) -> None:
        # Replacing the wait text ends the waiting indication; the icon
        # still tells which mode was active before.
        mode = self._view.mode
        if mode is BadgeMode.WAITING and text != WAIT_TEXT:
            mode = _ICON_MODES.get(self._view.icon, BadgeMode.IDLE)
        self._show(mode=mode, text=text)


_ICON_MODES = {
    RECORDING_ICON: BadgeMode.RECORDING,
    PAUSE_ICON: BadgeMode.PAUSED,
    DEFAULT_ICON: BadgeMode.IDLE,
}
