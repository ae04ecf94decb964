"""
Code Generator - Turns a recorded event sequence into automation scripts.

Two JavaScript flavors are produced from the same events: Puppeteer and
Playwright. Each recorded event becomes a block of one or more lines;
blocks are optionally separated by blank lines and wrapped in an async
IIFE that launches the browser.

Example:
    >>> generator = CodeGenerator(CodeOptions(wrap_async=False))
    >>> code = generator.generate([{"action": "GOTO", "href": "https://example.com"}])
    >>> print(code.playwright)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from headless_recorder.config.settings import CodeOptions
from headless_recorder.exceptions import CodeGenerationError
from headless_recorder.services.constants import DomEvent, HeadlessAction

logger = logging.getLogger(__name__)

TAB_KEY_CODE = 9
INDENT = "  "


@dataclass(frozen=True)
class GeneratedCode:
    """Both script flavors for one recording."""
    puppeteer: str
    playwright: str

    def select(self, show_playwright_first: bool) -> str:
        return self.playwright if show_playwright_first else self.puppeteer


def _quote(value: Any) -> str:
    text = "" if value is None else str(value)
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n") + "'"


class ScriptGenerator:
    """
    Flavor-agnostic script builder.

    Subclasses provide the import/launch header and the API spelling of
    each command; the walk over events, frame targeting and layout live
    here.
    """

    flavor = ""

    def __init__(self, options: Optional[CodeOptions] = None):
        self._options = options or CodeOptions()
        self._frames: Dict[Any, str] = {}
        self._screenshots = 0
        self._has_navigation = False

    # -- flavor hooks -------------------------------------------------------

    def _imports(self) -> List[str]:
        raise NotImplementedError

    def _launch(self) -> List[str]:
        raise NotImplementedError

    def _select(self, target: str, selector: str, value: Any) -> str:
        raise NotImplementedError

    def _dblclick(self, target: str, selector: str) -> str:
        raise NotImplementedError

    def _viewport(self, width: Any, height: Any) -> str:
        raise NotImplementedError

    def _navigation_setup(self) -> List[str]:
        return []

    def _navigation_wait(self) -> str:
        raise NotImplementedError

    # -- generation ---------------------------------------------------------

    def generate(self, events: Sequence[Mapping[str, Any]]) -> str:
        """
        Generate a script for the given events.

        Args:
            events: Recorded events in replay order

        Returns:
            The script source
        """
        for i, event in enumerate(events):
            if not isinstance(event, Mapping):
                raise CodeGenerationError(f"Recorded event {i} is not an object: {event!r}")

        self._frames = {}
        self._screenshots = 0
        self._has_navigation = any(e.get("action") == HeadlessAction.NAVIGATION for e in events)

        blocks: List[List[str]] = []
        for event in events:
            declared = dict(self._frames)
            block = self._block_for(event)
            if block:
                blocks.append(block)
            else:
                # A skipped event must not leave its frame marked as declared.
                self._frames = declared

        body: List[str] = list(self._launch())
        if self._has_navigation and self._options.wait_for_navigation:
            body.extend(self._navigation_setup())
        for i, block in enumerate(blocks):
            if self._options.blank_lines_between_blocks and (i > 0 or body):
                body.append("")
            body.extend(block)
        body.append("")
        body.append("await browser.close()")

        lines = self._imports() + [""]
        if self._options.wrap_async:
            lines.append("(async () => {")
            lines.extend(INDENT + line if line else "" for line in body)
            lines.append("})()")
        else:
            lines.extend(body)
        return "\n".join(lines) + "\n"

    def _block_for(self, event: Mapping[str, Any]) -> List[str]:
        action = event.get("action")
        block: List[str] = []
        target = self._target_for(event, block)
        selector = self._selector_for(event)

        if action == DomEvent.CLICK:
            if not selector:
                logger.debug("Skipping click without selector")
                return []
            if self._options.wait_for_selector_on_click:
                block.append(f"await {target}.waitForSelector({_quote(selector)})")
            block.append(f"await {target}.click({_quote(selector)})")
        elif action == DomEvent.DBLCLICK:
            block.append(self._dblclick(target, selector))
        elif action == DomEvent.KEYDOWN:
            if event.get("keyCode") != TAB_KEY_CODE:
                return []
            block.append(f"await {target}.type({_quote(selector)}, {_quote(event.get('value'))})")
        elif action == DomEvent.CHANGE:
            if str(event.get("tagName", "")).upper() != "SELECT":
                return []
            block.append(self._select(target, selector, event.get("value")))
        elif action == HeadlessAction.GOTO:
            block.append(f"await {target}.goto({_quote(event.get('href'))})")
        elif action == HeadlessAction.VIEWPORT:
            value = event.get("value")
            if not isinstance(value, Mapping):
                value = {}
            width, height = value.get("width"), value.get("height")
            if width is None or height is None:
                logger.debug("Skipping viewport without dimensions")
                return []
            block.append(self._viewport(width, height))
        elif action == HeadlessAction.NAVIGATION:
            if not self._options.wait_for_navigation:
                return []
            block.append(self._navigation_wait())
        elif action == HeadlessAction.SCREENSHOT:
            block.append(self._screenshot(event.get("value")))
        else:
            logger.debug(f"No code for action {action!r}")
            return []
        return block

    def _target_for(self, event: Mapping[str, Any], block: List[str]) -> str:
        frame_id = event.get("frameId")
        frame_url = event.get("frameUrl")
        if not frame_id or not frame_url:
            return "page"
        if frame_id not in self._frames:
            name = f"frame_{frame_id}"
            if not self._frames:
                block.append("let frames = await page.frames()")
            block.append(f"const {name} = frames.find(f => f.url() === {_quote(frame_url)})")
            self._frames[frame_id] = name
        return self._frames[frame_id]

    def _selector_for(self, event: Mapping[str, Any]) -> str:
        attribute = self._options.data_attribute
        attributes = event.get("attributes") or {}
        if attribute and attribute in attributes:
            return f'[{attribute}="{attributes[attribute]}"]'
        return event.get("selector") or ""

    def _screenshot(self, clip: Optional[Mapping[str, Any]]) -> str:
        self._screenshots += 1
        path = _quote(f"screenshot_{self._screenshots}.png")
        if clip:
            box = ", ".join(f"{k}: {clip.get(k, 0)}" for k in ("x", "y", "width", "height"))
            return f"await page.screenshot({{ path: {path}, clip: {{ {box} }} }})"
        return f"await page.screenshot({{ path: {path} }})"


class PuppeteerGenerator(ScriptGenerator):
    flavor = "puppeteer"

    def _imports(self) -> List[str]:
        return ["const puppeteer = require('puppeteer');"]

    def _launch(self) -> List[str]:
        launch_options = "" if self._options.headless else "{ headless: false }"
        return [
            f"const browser = await puppeteer.launch({launch_options})",
            "const page = await browser.newPage()",
        ]

    def _select(self, target: str, selector: str, value: Any) -> str:
        return f"await {target}.select({_quote(selector)}, {_quote(value)})"

    def _dblclick(self, target: str, selector: str) -> str:
        return f"await {target}.click({_quote(selector)}, {{ clickCount: 2 }})"

    def _viewport(self, width: Any, height: Any) -> str:
        return f"await page.setViewport({{ width: {width}, height: {height} }})"

    def _navigation_setup(self) -> List[str]:
        return ["const navigationPromise = page.waitForNavigation()"]

    def _navigation_wait(self) -> str:
        return "await navigationPromise"


class PlaywrightGenerator(ScriptGenerator):
    flavor = "playwright"

    def _imports(self) -> List[str]:
        return ["const { chromium } = require('playwright');"]

    def _launch(self) -> List[str]:
        launch_options = "" if self._options.headless else "{ headless: false }"
        return [
            f"const browser = await chromium.launch({launch_options})",
            "const page = await browser.newPage()",
        ]

    def _select(self, target: str, selector: str, value: Any) -> str:
        return f"await {target}.selectOption({_quote(selector)}, {_quote(value)})"

    def _dblclick(self, target: str, selector: str) -> str:
        return f"await {target}.dblclick({_quote(selector)})"

    def _viewport(self, width: Any, height: Any) -> str:
        return f"await page.setViewportSize({{ width: {width}, height: {height} }})"

    def _navigation_wait(self) -> str:
        return "await page.waitForLoadState()"


class CodeGenerator:
    """
    Produces both flavors for a recording.

    Example:
        >>> code = CodeGenerator().generate(events)
        >>> code.select(show_playwright_first=True)
    """

    def __init__(self, options: Optional[CodeOptions] = None):
        self.options = options or CodeOptions()

    def generate(self, events: Sequence[Mapping[str, Any]]) -> GeneratedCode:
        return GeneratedCode(
            puppeteer=PuppeteerGenerator(self.options).generate(events),
            playwright=PlaywrightGenerator(self.options).generate(events),
        )
