"""
Browser Bridge - Content-script injection and tab messaging.

The background coordinator talks to pages through two operations:
idempotently making sure the recorder script is present in the active
tab, and delivering an outbound message to that tab. A missing active
tab is reported by logging a warning and returning False; the caller
does not branch on the outcome.

Example:
    >>> bridge = InMemoryBrowser()
    >>> bridge.open_tab("https://example.com")
    >>> await bridge.inject_content_script()
    True
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from headless_recorder.config.settings import BrowserSettings
from headless_recorder.exceptions import InjectionError, TabMessageError

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext, Page

logger = logging.getLogger(__name__)


@dataclass
class Tab:
    """A browser tab as seen by the coordinator."""
    tab_id: int
    url: str = "about:blank"


class BrowserBridge(ABC):
    """Contract the session controller uses to reach page surfaces."""

    @abstractmethod
    async def get_active_tab(self) -> Optional[Tab]:
        """Return the focused tab, or None when there is none."""
        ...

    @abstractmethod
    async def inject_content_script(self) -> bool:
        """
        Ensure the recorder script is present in the active tab.

        Returns:
            True if the script is present afterwards, False if there was
            no tab to inject into
        """
        ...

    @abstractmethod
    async def send_tab_message(self, message: Dict[str, Any]) -> bool:
        """
        Deliver a message to the active tab's content script.

        Returns:
            True if delivered, False if there was no tab to deliver to
        """
        ...


@dataclass
class InMemoryBrowser(BrowserBridge):
    """
    Browser double that tracks tabs, injections and sent messages.

    Used by the ``replay`` command and tests. Navigating a tab drops its
    injection, the same way a real page load tears the script down.
    """
    tabs: List[Tab] = field(default_factory=list)
    active_tab_id: Optional[int] = None
    injected: Set[int] = field(default_factory=set)
    sent: List[Tuple[int, Dict[str, Any]]] = field(default_factory=list)
    injection_count: int = 0

    def open_tab(self, url: str = "about:blank") -> Tab:
        tab = Tab(tab_id=len(self.tabs) + 1, url=url)
        self.tabs.append(tab)
        self.active_tab_id = tab.tab_id
        return tab

    def navigate(self, url: str, tab_id: Optional[int] = None) -> None:
        tab = self._find(tab_id if tab_id is not None else self.active_tab_id)
        if tab is None:
            return
        tab.url = url
        self.injected.discard(tab.tab_id)

    def close_tab(self, tab_id: int) -> None:
        self.tabs = [t for t in self.tabs if t.tab_id != tab_id]
        self.injected.discard(tab_id)
        if self.active_tab_id == tab_id:
            self.active_tab_id = self.tabs[-1].tab_id if self.tabs else None

    def messages(self, action: Optional[str] = None) -> List[Dict[str, Any]]:
        """Sent messages, optionally filtered by action."""
        return [m for _, m in self.sent if action is None or m.get("action") == action]

    def _find(self, tab_id: Optional[int]) -> Optional[Tab]:
        for tab in self.tabs:
            if tab.tab_id == tab_id:
                return tab
        return None

    async def get_active_tab(self) -> Optional[Tab]:
        return self._find(self.active_tab_id)

    async def inject_content_script(self) -> bool:
        tab = await self.get_active_tab()
        if tab is None:
            logger.warning("No active tab to inject the content script into")
            return False
        if tab.tab_id not in self.injected:
            self.injected.add(tab.tab_id)
            self.injection_count += 1
        return True

    async def send_tab_message(self, message: Dict[str, Any]) -> bool:
        tab = await self.get_active_tab()
        if tab is None:
            logger.warning(f"No active tab for message {message.get('action')}")
            return False
        self.sent.append((tab.tab_id, message))
        return True


class PlaywrightBrowserBridge(BrowserBridge):
    """
    Bridge backed by a Playwright browser context.

    Pages of the context are the tabs; the most recently opened page that
    is still open is the active one unless ``activate`` picks another.
    Outbound messages are dispatched in the page as a ``CustomEvent``
    whose ``detail`` is the message.
    """

    def __init__(self, context: "BrowserContext", settings: Optional[BrowserSettings] = None):
        """
        Initialize the bridge.

        Args:
            context: Playwright browser context whose pages are the tabs
            settings: Injection and messaging settings
        """
        self._context = context
        self._settings = settings or BrowserSettings()
        self._active: Optional["Page"] = None

    def activate(self, page: "Page") -> None:
        self._active = page

    def _active_page(self) -> Optional["Page"]:
        if self._active is not None and not self._active.is_closed():
            return self._active
        open_pages = [p for p in self._context.pages if not p.is_closed()]
        return open_pages[-1] if open_pages else None

    def _tab_id(self, page: "Page") -> int:
        return self._context.pages.index(page)

    async def get_active_tab(self) -> Optional[Tab]:
        page = self._active_page()
        if page is None:
            return None
        return Tab(tab_id=self._tab_id(page), url=page.url)

    async def inject_content_script(self) -> bool:
        page = self._active_page()
        if page is None:
            logger.warning("No active page to inject the content script into")
            return False

        marker = self._settings.injection_marker
        try:
            if await page.evaluate("m => Boolean(window[m])", marker):
                return True
            if self._settings.content_script_path:
                await page.add_script_tag(path=Path(self._settings.content_script_path))
            await page.evaluate("m => { window[m] = true }", marker)
        except PlaywrightError as e:
            raise InjectionError(f"Content script injection failed: {e}", tab_id=self._tab_id(page)) from e

        logger.debug(f"Injected content script into {page.url}")
        return True

    async def send_tab_message(self, message: Dict[str, Any]) -> bool:
        page = self._active_page()
        if page is None:
            logger.warning(f"No active page for message {message.get('action')}")
            return False
        try:
            await page.evaluate(
                "([name, detail]) => window.dispatchEvent(new CustomEvent(name, { detail }))",
                [self._settings.message_event, message],
            )
        except PlaywrightError as e:
            raise TabMessageError(
                f"Could not deliver message: {e}",
                tab_id=self._tab_id(page),
                action=message.get("action"),
            ) from e
        return True
