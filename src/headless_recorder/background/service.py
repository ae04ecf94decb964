"""
Background Service - Wires the coordinator together.

Builds the state store, badge, browser bridge and session controller
from settings and exposes the four inbound channels. Every inbound
event is submitted to one ``TriggerQueue``, so the controller only ever
sees one trigger at a time.

Example:
    >>> async with BackgroundService.from_settings(settings, InMemoryBrowser()) as service:
    ...     await service.on_popup_message({"action": "START"})
    ...     await service.on_runtime_message({"action": "click", "selector": "#a"}, {"frameId": 0})
"""

import asyncio
import logging
from typing import Any, Optional

from headless_recorder.background.controller import SessionController
from headless_recorder.background.dispatcher import DispatchResult, TriggerQueue
from headless_recorder.background.messages import PopupCommand, parse_popup_message
from headless_recorder.background.state import SessionRepository
from headless_recorder.config.settings import Settings
from headless_recorder.services.badge import Badge, BadgeRenderer
from headless_recorder.services.browser import BrowserBridge
from headless_recorder.services.constants import PopupAction
from headless_recorder.services.storage import StateStore, create_state_store

logger = logging.getLogger(__name__)


class BackgroundService:
    """
    Inbound channel surface of the background coordinator.

    Each ``on_*`` method returns a future for the trigger's
    ``DispatchResult``; await it to wait for that trigger, or ignore it
    for fire-and-forget delivery.
    """

    def __init__(
        self,
        controller: SessionController,
        queue: Optional[TriggerQueue] = None,
        drain_on_clean_up: bool = False,
    ):
        self.controller = controller
        self.queue = queue or TriggerQueue()
        self._drain_on_clean_up = drain_on_clean_up

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        browser: BrowserBridge,
        store: Optional[StateStore] = None,
        badge_renderer: Optional[BadgeRenderer] = None,
    ) -> "BackgroundService":
        """
        Build a service from settings.

        Args:
            settings: Loaded settings
            browser: Bridge to the page surfaces
            store: State store (default: built from ``settings.storage``)
            badge_renderer: Badge renderer (default: logging renderer)
        """
        controller = SessionController(
            repository=SessionRepository(store or create_state_store(settings.storage)),
            badge=Badge(badge_renderer),
            browser=browser,
            code_defaults=settings.code,
        )
        return cls(controller, drain_on_clean_up=settings.session.drain_on_clean_up)

    async def __aenter__(self) -> "BackgroundService":
        self.queue.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def on_runtime_message(self, message: Any, sender: Any = None) -> "asyncio.Future[DispatchResult]":
        """Content-script or overlay message."""
        return self.queue.submit("runtime", self.controller.on_runtime_message, message, sender)

    def on_popup_message(self, message: Any) -> "asyncio.Future[DispatchResult]":
        """Popup port message."""
        command = parse_popup_message(message)
        if (
            self._drain_on_clean_up
            and isinstance(command, PopupCommand)
            and command.action is PopupAction.CLEAN_UP
        ):
            # Triggers that arrived before the purge would otherwise run
            # against the next session's state.
            self.queue.discard_pending()
        return self.queue.submit("popup", self.controller.handle_popup_message, command)

    def on_navigation_completed(self, details: Any) -> "asyncio.Future[DispatchResult]":
        return self.queue.submit("navigation", self.controller.handle_navigation, details)

    def on_before_navigate(self, details: Any = None) -> "asyncio.Future[DispatchResult]":
        return self.queue.submit("before-navigate", self.controller.handle_wait, details)

    async def drain(self) -> None:
        """Wait for every submitted trigger to finish."""
        await self.queue.join()

    async def close(self) -> None:
        await self.queue.close()
        logger.debug("Background service closed")
