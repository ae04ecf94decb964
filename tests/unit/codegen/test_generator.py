"""
Tests for the code generator.
"""

import pytest

from headless_recorder.codegen import CodeGenerator, GeneratedCode
from headless_recorder.codegen.generator import PlaywrightGenerator, PuppeteerGenerator
from headless_recorder.config import CodeOptions
from headless_recorder.exceptions import CodeGenerationError
from headless_recorder.services.constants import DomEvent, HeadlessAction


GOTO = {"action": "GOTO", "href": "https://example.com/", "frameId": 0, "frameUrl": "https://example.com/"}
VIEWPORT = {"action": "VIEWPORT", "value": {"width": 1280, "height": 720}, "frameId": 0, "frameUrl": None}
CLICK = {"action": "click", "selector": "#submit", "frameId": 0, "frameUrl": "https://example.com/"}


class TestPuppeteer:
    """Test the Puppeteer flavor."""

    def test_basic_script(self):
        code = PuppeteerGenerator(CodeOptions()).generate([GOTO, VIEWPORT, CLICK])

        assert code.startswith("const puppeteer = require('puppeteer');\n")
        assert "(async () => {" in code
        assert "  const browser = await puppeteer.launch()" in code
        assert "  await page.goto('https://example.com/')" in code
        assert "  await page.setViewport({ width: 1280, height: 720 })" in code
        assert "  await page.waitForSelector('#submit')" in code
        assert "  await page.click('#submit')" in code
        assert code.rstrip().endswith("})()")

    def test_without_async_wrapper(self):
        code = PuppeteerGenerator(CodeOptions(wrap_async=False, headless=False)).generate([CLICK])

        assert "(async () => {" not in code
        assert "const browser = await puppeteer.launch({ headless: false })" in code
        assert "\nawait page.click('#submit')" in code

    def test_navigation_promise(self):
        code = PuppeteerGenerator(CodeOptions()).generate(
            [CLICK, {"action": "NAVIGATION", "frameId": 0, "frameUrl": None}]
        )

        assert "const navigationPromise = page.waitForNavigation()" in code
        assert "await navigationPromise" in code

    def test_navigation_disabled(self):
        code = PuppeteerGenerator(CodeOptions(wait_for_navigation=False)).generate(
            [{"action": "NAVIGATION"}]
        )

        assert "navigationPromise" not in code


class TestPlaywright:
    """Test the Playwright flavor."""

    def test_select_and_viewport(self):
        change = {"action": "change", "tagName": "SELECT", "selector": "#size", "value": "xl"}

        code = PlaywrightGenerator(CodeOptions()).generate([VIEWPORT, change])

        assert "const { chromium } = require('playwright');" in code
        assert "await page.setViewportSize({ width: 1280, height: 720 })" in code
        assert "await page.selectOption('#size', 'xl')" in code

    def test_navigation_waits_for_load_state(self):
        code = PlaywrightGenerator(CodeOptions()).generate([{"action": "NAVIGATION"}])

        assert "await page.waitForLoadState()" in code


class TestEventBlocks:
    """Test per-event output shared by both flavors."""

    def test_keydown_only_for_tab(self):
        tab = {"action": "keydown", "keyCode": 9, "selector": "#name", "value": "Ada"}
        enter = {"action": "keydown", "keyCode": 13, "selector": "#name", "value": "Ada"}

        code = PuppeteerGenerator(CodeOptions()).generate([tab, enter])

        assert code.count("await page.type('#name', 'Ada')") == 1

    def test_change_on_input_is_skipped(self):
        change = {"action": "change", "tagName": "INPUT", "selector": "#q", "value": "x"}

        code = PuppeteerGenerator(CodeOptions()).generate([change])

        assert ".select(" not in code

    def test_frame_targeting(self):
        in_frame = {"action": "click", "selector": "#pay", "frameId": 5, "frameUrl": "https://pay.test/"}

        code = PlaywrightGenerator(CodeOptions(wrap_async=False)).generate([in_frame, in_frame])

        assert code.count("let frames = await page.frames()") == 1
        assert "const frame_5 = frames.find(f => f.url() === 'https://pay.test/')" in code
        assert code.count("await frame_5.click('#pay')") == 2

    def test_frame_declared_after_skipped_event(self):
        skipped = {"action": "keydown", "keyCode": 13, "selector": "#pay", "frameId": 5, "frameUrl": "https://pay.test/"}
        click = {"action": "click", "selector": "#pay", "frameId": 5, "frameUrl": "https://pay.test/"}

        code = PlaywrightGenerator(CodeOptions(wrap_async=False)).generate([skipped, click])

        assert "let frames = await page.frames()" in code
        assert code.index("const frame_5") < code.index("await frame_5.click('#pay')")

    def test_screenshots_are_numbered(self):
        events = [
            {"action": "SCREENSHOT", "value": None},
            {"action": "SCREENSHOT", "value": {"x": 1, "y": 2, "width": 30, "height": 40}},
        ]

        code = PuppeteerGenerator(CodeOptions()).generate(events)

        assert "await page.screenshot({ path: 'screenshot_1.png' })" in code
        assert "clip: { x: 1, y: 2, width: 30, height: 40 }" in code
        assert "screenshot_2.png" in code

    def test_data_attribute_selector(self):
        click = dict(CLICK, attributes={"data-test": "submit"})

        code = PuppeteerGenerator(CodeOptions(data_attribute="data-test")).generate([click])

        assert "await page.click('[data-test=\"submit\"]')" in code

    def test_quotes_are_escaped(self):
        goto = {"action": "GOTO", "href": "https://example.com/?q=it's"}

        code = PuppeteerGenerator(CodeOptions()).generate([goto])

        assert "goto('https://example.com/?q=it\\'s')" in code

    def test_click_without_selector_is_skipped(self):
        code = PuppeteerGenerator(CodeOptions()).generate([{"action": "click"}, CLICK])

        assert code.count(".click(") == 1
        assert "await page.click('#submit')" in code

    def test_viewport_without_dimensions_is_skipped(self):
        code = PlaywrightGenerator(CodeOptions()).generate(
            [{"action": "VIEWPORT", "frameId": None, "frameUrl": None}, VIEWPORT]
        )

        assert "None" not in code
        assert code.count("setViewportSize") == 1

    def test_partial_viewport_is_skipped(self):
        code = PuppeteerGenerator(CodeOptions()).generate(
            [{"action": "VIEWPORT", "value": {"width": 800}}]
        )

        assert "setViewport" not in code

    def test_non_object_event(self):
        with pytest.raises(CodeGenerationError):
            PuppeteerGenerator(CodeOptions()).generate([GOTO, "click"])

    def test_unknown_actions_are_ignored(self):
        code = PuppeteerGenerator(CodeOptions()).generate([{"action": "mouseover"}])

        assert "mouseover" not in code

    def test_blank_lines_between_blocks(self):
        spaced = PuppeteerGenerator(CodeOptions(wrap_async=False)).generate([GOTO, CLICK])
        dense = PuppeteerGenerator(
            CodeOptions(wrap_async=False, blank_lines_between_blocks=False)
        ).generate([GOTO, CLICK])

        assert "goto('https://example.com/')\n\nawait page.waitForSelector" in spaced
        assert "goto('https://example.com/')\nawait page.waitForSelector" in dense


class TestCodeGenerator:
    """Test the two-flavor facade."""

    def test_generates_both_flavors(self):
        code = CodeGenerator().generate([GOTO])

        assert isinstance(code, GeneratedCode)
        assert "puppeteer" in code.puppeteer
        assert "chromium" in code.playwright

    def test_select(self):
        code = GeneratedCode(puppeteer="p", playwright="w")

        assert code.select(show_playwright_first=True) == "w"
        assert code.select(show_playwright_first=False) == "p"


class TestActionCoverage:
    """Every enumerated action has a code block."""

    EXAMPLES = {
        "click": {"selector": "#a"},
        "dblclick": {"selector": "#a"},
        "change": {"selector": "#a", "tagName": "SELECT", "value": "x"},
        "keydown": {"selector": "#a", "keyCode": 9, "value": "x"},
        "GOTO": {"href": "https://example.com/"},
        "VIEWPORT": {"value": {"width": 1, "height": 2}},
        "NAVIGATION": {},
        "SCREENSHOT": {},
    }

    @pytest.mark.parametrize("action", [*HeadlessAction, *DomEvent])
    def test_action_generates_code(self, action):
        event = {"action": action.value, **self.EXAMPLES[action.value]}
        bare = PuppeteerGenerator(CodeOptions(wrap_async=False)).generate([])

        code = PuppeteerGenerator(CodeOptions(wrap_async=False)).generate([event])

        assert len(code.splitlines()) > len(bare.splitlines())

    def test_other_dom_events_are_skipped(self):
        events = [{"action": a, "selector": "form"} for a in ("submit", "load", "unload", "select")]

        code = PuppeteerGenerator(CodeOptions(wrap_async=False)).generate(events)

        assert code == PuppeteerGenerator(CodeOptions(wrap_async=False)).generate([])
