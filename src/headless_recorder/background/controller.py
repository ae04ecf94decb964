"""
Session Controller - The recording session state machine.

Consumes messages from the popup, the content script, the overlay and
the navigation observer; owns every transition of the persisted session
state; and drives the badge, the content-script injector and outbound
tab messages as side effects.

States:
    Idle -> Recording -> Paused -> Recording -> Stopped -> Idle

Stopped is transient: ``clean_up``/``start`` drive back to a fresh
session. All handlers are best effort. Collaborator errors propagate to
the caller, unrecognised messages are logged and ignored.

Example:
    >>> controller = SessionController(SessionRepository(store), Badge(), browser)
    >>> await controller.start()
    >>> await controller.handle_message({"action": "click", "selector": "#a"}, {"frameId": 0, "url": url})
    >>> await controller.stop()
"""

import logging
from typing import Any, Callable, Dict, Optional

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
from headless_recorder.background.state import SessionRepository, SessionState
from headless_recorder.codegen import CodeGenerator
from headless_recorder.config.settings import CodeOptions
from headless_recorder.services.badge import Badge
from headless_recorder.services.browser import BrowserBridge
from headless_recorder.services.constants import (
    HeadlessAction,
    OPTIONS_KEY,
    OverlayControl,
    PopupAction,
    RECORDED_BADGE_TEXT,
    RecordingControl,
    TabAction,
)

logger = logging.getLogger(__name__)

_NO_VALUE = object()


class SessionController:
    """
    Owns the recording session.

    Every state mutation runs inside one ``SessionRepository``
    transaction, so appends, once-only captures and stop's badge
    computation are atomic with respect to each other.
    """

    def __init__(
        self,
        repository: SessionRepository,
        badge: Badge,
        browser: BrowserBridge,
        code_defaults: Optional[CodeOptions] = None,
        generator_factory: Callable[[CodeOptions], CodeGenerator] = CodeGenerator,
    ):
        """
        Initialize the controller.

        Args:
            repository: Session state access
            badge: Badge indicator
            browser: Content-script injector and tab messenger
            code_defaults: Code options used where the persisted options are silent
            generator_factory: Builds the code generator for COPY
        """
        self._repo = repository
        self._badge = badge
        self._browser = browser
        self._code_defaults = code_defaults or CodeOptions()
        self._generator_factory = generator_factory

        self._recording_handlers = {
            RecordingControl.EVENT_RECORDER_STARTED: self._on_recorder_started,
            RecordingControl.GET_VIEWPORT_SIZE: lambda msg: self.record_current_viewport_size(msg.coordinates),
            RecordingControl.GET_CURRENT_URL: lambda msg: self.record_current_url(msg.href),
            RecordingControl.GET_SCREENSHOT: lambda msg: self.record_screenshot(msg.value),
        }
        self._overlay_handlers = {
            OverlayControl.RESTART: self._overlay_restart,
            OverlayControl.CLOSE: self.toggle_overlay,
            OverlayControl.COPY: self.copy_code,
            OverlayControl.STOP: self._overlay_stop,
            OverlayControl.UNPAUSE: self._overlay_unpause,
            OverlayControl.PAUSE: self._overlay_pause,
            # Screenshot modes are pure relays to the content script.
            OverlayControl.CLIPPED_SCREENSHOT: lambda: self._send(TabAction.TOGGLE_SCREENSHOT_CLIPPED_MODE),
            OverlayControl.FULL_SCREENSHOT: lambda: self._send(TabAction.TOGGLE_SCREENSHOT_MODE),
            OverlayControl.ABORT_SCREENSHOT: lambda: self._send(TabAction.CLOSE_SCREENSHOT_MODE),
        }
        self._popup_handlers = {
            PopupAction.START: self._popup_start,
            PopupAction.STOP: self._popup_stop,
            PopupAction.CLEAN_UP: self._popup_clean_up,
            PopupAction.PAUSE: self._popup_pause,
            PopupAction.UN_PAUSE: self._popup_un_pause,
        }

    @property
    def repository(self) -> SessionRepository:
        return self._repo

    async def get_state(self) -> SessionState:
        """Current session state (defaults for anything not persisted)."""
        return await self._repo.load()

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def start(self) -> None:
        """Begin a fresh session, discarding whatever the previous one left."""
        await self.clean_up()
        await self._repo.update(
            badge_state="",
            has_goto=False,
            has_viewport=False,
            is_recording=True,
        )
        await self._browser.inject_content_script()
        await self.toggle_overlay(open=True, clear=True)
        self._badge.start()
        logger.info("Recording started")

    async def stop(self) -> None:
        async with self._repo.transaction() as state:
            state.badge_state = RECORDED_BADGE_TEXT if state.recording else ""
            state.is_recording = False
        self._badge.stop(state.badge_state)
        logger.info(f"Recording stopped with {len(state.recording)} events")

    async def pause(self) -> None:
        self._badge.pause()
        await self._repo.update(is_paused=True)
        logger.info("Recording paused")

    async def un_pause(self) -> None:
        self._badge.start()
        await self._repo.update(is_paused=False)
        logger.info("Recording resumed")

    async def clean_up(self) -> None:
        """Erase the session. The only destructor of session state."""
        self._badge.reset()
        await self._repo.erase()

    # =========================================================================
    # RECORDING
    # =========================================================================

    @staticmethod
    def _append(state: SessionState, event: RecordableEvent, sender: Optional[MessageSender]) -> bool:
        # Provenance is stamped before the pause gate.
        stamped = event.stamped(sender)
        if state.is_paused:
            return False
        state.recording.append(stamped)
        return True

    async def _record(self, event: RecordableEvent, sender: Optional[MessageSender] = None) -> bool:
        async with self._repo.transaction() as state:
            appended = self._append(state, event, sender)
        if not appended:
            logger.debug(f"Paused, dropped {event.payload.get('action')!r}")
        return appended

    async def record_current_url(self, href: Optional[str]) -> bool:
        """Capture the session's initial URL once. Returns True on the first call."""
        async with self._repo.transaction() as state:
            if state.has_goto:
                return False
            self._append(state, _synthetic(HeadlessAction.GOTO, href=href), None)
            state.has_goto = True
        return True

    async def record_current_viewport_size(self, value: Any) -> bool:
        """Capture the session's initial viewport once. Returns True on the first call."""
        async with self._repo.transaction() as state:
            if state.has_viewport:
                return False
            self._append(state, _synthetic(HeadlessAction.VIEWPORT, value=value), None)
            state.has_viewport = True
        return True

    async def record_navigation(self) -> bool:
        return await self._record(_synthetic(HeadlessAction.NAVIGATION))

    async def record_screenshot(self, value: Any = None) -> bool:
        return await self._record(_synthetic(HeadlessAction.SCREENSHOT, value=value))

    # =========================================================================
    # CONTENT SCRIPT / OVERLAY CHANNEL
    # =========================================================================

    async def on_runtime_message(self, raw: Any, sender: Any = None) -> None:
        """
        Entry point for the runtime channel.

        Both the content-script handler and the overlay handler listen on
        it; their control tags are disjoint, so each message acts once.
        """
        message = parse_runtime_message(raw)
        await self.handle_message(message, sender)
        await self.handle_overlay_message(message)

    async def handle_message(self, message: Any, sender: Any = None) -> None:
        """
        Handle a content-script message.

        Control messages go to the recording-control handler and are never
        recorded; SIGN_CONNECT is ignored; anything else is stamped with
        the sender's frame and appended unless the session is paused.
        """
        if not isinstance(message, _RUNTIME_TYPES):
            message = parse_runtime_message(message)

        if isinstance(message, RecordingControlMessage):
            await self.handle_recording_message(message)
        elif isinstance(message, RecordableEvent):
            await self._record(message, MessageSender.coerce(sender))
        elif isinstance(message, UnknownMessage):
            logger.debug(f"Ignoring runtime message ({message.reason}): {message.raw!r}")
        # SignConnectMessage and overlay controls are no-ops here.

    async def handle_recording_message(self, message: RecordingControlMessage) -> None:
        handler = self._recording_handlers.get(message.control)
        if handler is None:
            logger.debug(f"No recording handler for {message.control!r}")
            return
        await handler(message)

    async def _on_recorder_started(self, message: RecordingControlMessage) -> None:
        # A freshly loaded content script means the badge text may have been reset.
        state = await self._repo.load()
        self._badge.set_text(state.badge_state)

    async def handle_overlay_message(self, message: Any) -> None:
        if not isinstance(message, _RUNTIME_TYPES):
            message = parse_runtime_message(message)
        if not isinstance(message, OverlayControlMessage):
            return
        logger.debug(f"Overlay control {message.control.value}")
        await self._overlay_handlers[message.control]()

    async def _overlay_restart(self) -> None:
        await self._set_ui_flags(restart=True, clear=False)
        # clean_up discards the badge text stop computes.
        await self.stop()
        await self.clean_up()
        await self.start()

    async def _overlay_stop(self) -> None:
        await self._set_ui_flags(clear=True, pause=False, restart=False)
        await self.stop()

    async def _overlay_unpause(self) -> None:
        await self._set_ui_flags(pause=False)
        await self.un_pause()

    async def _overlay_pause(self) -> None:
        await self._set_ui_flags(pause=True)
        await self.pause()

    async def copy_code(self) -> str:
        """Generate code for the whole recording and send it to the content script."""
        stored = await self._repo.store.get(OPTIONS_KEY)
        options = stored.get(OPTIONS_KEY) or {}
        code_options = self._code_defaults.merged_with(options.get("code"))

        state = await self._repo.load()
        code = self._generator_factory(code_options).generate(state.recording)
        selected = code.select(code_options.show_playwright_first)
        await self._send(TabAction.CODE, selected)
        return selected

    async def _set_ui_flags(self, **flags: bool) -> None:
        # Mirrors for the overlay's optimistic UI; nothing here reads them.
        await self._repo.store.set(flags)

    # =========================================================================
    # POPUP CHANNEL
    # =========================================================================

    async def handle_popup_message(self, message: Any) -> None:
        if not isinstance(message, (PopupCommand, UnknownMessage)):
            message = parse_popup_message(message)
        if isinstance(message, UnknownMessage):
            logger.debug(f"Ignoring popup message ({message.reason}): {message.raw!r}")
            return
        logger.debug(f"Popup action {message.action.value}")
        await self._popup_handlers[message.action](message)

    async def _popup_start(self, command: PopupCommand) -> None:
        await self.start()

    async def _popup_stop(self, command: PopupCommand) -> None:
        await self._send(TabAction.STOP)
        await self.stop()

    async def _popup_clean_up(self, command: PopupCommand) -> None:
        if command.value:
            await self.stop()
        await self.toggle_overlay()
        await self.clean_up()

    async def _popup_pause(self, command: PopupCommand) -> None:
        if not command.stop:
            await self._send(TabAction.PAUSE)
        await self.pause()

    async def _popup_un_pause(self, command: PopupCommand) -> None:
        if not command.stop:
            await self._send(TabAction.UN_PAUSE)
        await self.un_pause()

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    async def handle_navigation(self, details: Any) -> None:
        """
        A page or frame finished loading.

        The content script is re-ensured unconditionally since navigation
        tears the previous injection down. While recording, the overlay is
        re-opened in its current paused state, and a top-frame load is
        recorded as a navigation event.
        """
        if not isinstance(details, NavigationCompleted):
            details = parse_navigation(details)

        await self._browser.inject_content_script()

        state = await self._repo.load()
        if not state.is_recording:
            return
        await self.toggle_overlay(open=True, pause=state.is_paused)
        if details.is_top_frame:
            await self.record_navigation()

    async def handle_wait(self, details: Any = None) -> None:
        """Before-navigate hook; purely cosmetic."""
        self._badge.wait()

    # =========================================================================
    # OUTBOUND
    # =========================================================================

    async def toggle_overlay(self, open: bool = False, clear: bool = False, pause: bool = False) -> None:
        await self._send(TabAction.TOGGLE_OVERLAY, {"open": open, "clear": clear, "pause": pause})

    async def _send(self, action: TabAction, value: Any = _NO_VALUE) -> bool:
        message: Dict[str, Any] = {"action": action.value}
        if value is not _NO_VALUE:
            message["value"] = value
        return await self._browser.send_tab_message(message)


_RUNTIME_TYPES = (
    RecordableEvent,
    RecordingControlMessage,
    OverlayControlMessage,
    SignConnectMessage,
    UnknownMessage,
)


def _synthetic(action: HeadlessAction, **fields: Any) -> RecordableEvent:
    """An event the controller records on its own behalf (no selector, no sender)."""
    return RecordableEvent(payload={"selector": None, "action": action.value, **fields})


