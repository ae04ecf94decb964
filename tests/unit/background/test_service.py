"""
Tests for BackgroundService - inbound channels over the trigger queue.
"""

import asyncio

import pytest

from headless_recorder.background import BackgroundService
from headless_recorder.config import Settings, SessionSettings, StorageSettings
from headless_recorder.exceptions import TabMessageError
from headless_recorder.services import InMemoryBrowser, MemoryBadgeRenderer, MemoryStateStore

PAGE_URL = "https://example.com/"


def _service(browser, store=None, **session):
    settings = Settings(
        storage=StorageSettings(backend="memory"),
        session=SessionSettings(**session),
    )
    return BackgroundService.from_settings(
        settings, browser, store=store or MemoryStateStore(), badge_renderer=MemoryBadgeRenderer()
    )


class TestBackgroundService:
    """Test end-to-end flows through the service."""

    @pytest.mark.asyncio
    async def test_full_session(self, browser, top_frame):
        async with _service(browser) as service:
            service.on_popup_message({"action": "START"})
            service.on_runtime_message({"control": "GET_CURRENT_URL", "href": PAGE_URL}, top_frame)
            service.on_runtime_message({"control": "GET_VIEWPORT_SIZE", "coordinates": {"width": 1, "height": 2}}, top_frame)
            service.on_runtime_message({"action": "click", "selector": "#a"}, top_frame)
            service.on_before_navigate({"frameId": 0})
            service.on_navigation_completed({"frameId": 0})
            service.on_navigation_completed({"frameId": 2})
            result = await service.on_popup_message({"action": "STOP"})
            state = await service.controller.get_state()

        assert result.ok is True
        assert [e["action"] for e in state.recording] == ["GOTO", "VIEWPORT", "click", "NAVIGATION"]
        assert state.is_recording is False
        assert state.badge_state == "1"

    @pytest.mark.asyncio
    async def test_rapid_messages_are_all_recorded(self, browser, top_frame):
        async with _service(browser) as service:
            await service.on_popup_message({"action": "START"})
            results = await asyncio.gather(*(
                service.on_runtime_message({"action": "click", "selector": f"#{i}"}, top_frame)
                for i in range(20)
            ))
            state = await service.controller.get_state()

        assert all(r.ok for r in results)
        assert [e["selector"] for e in state.recording] == [f"#{i}" for i in range(20)]

    @pytest.mark.asyncio
    async def test_copy_succeeds_after_click_without_selector(self, browser, top_frame):
        async with _service(browser) as service:
            await service.on_popup_message({"action": "START"})
            await service.on_runtime_message({"action": "click"}, top_frame)
            result = await service.on_runtime_message({"control": "COPY"}, top_frame)

        assert result.ok is True
        assert len(browser.messages("CODE")) == 1

    @pytest.mark.asyncio
    async def test_collaborator_failure_is_reported(self, store, top_frame):
        class FailingBrowser(InMemoryBrowser):
            async def send_tab_message(self, message):
                raise TabMessageError("tab crashed", tab_id=1, action=message.get("action"))

        browser = FailingBrowser()
        browser.open_tab(PAGE_URL)

        async with _service(browser, store) as service:
            result = await service.on_runtime_message({"control": "CLOSE"}, top_frame)
            after = await service.on_runtime_message({"action": "click"}, top_frame)

        assert result.ok is False
        assert isinstance(result.error, TabMessageError)
        assert after.ok is True

    @pytest.mark.asyncio
    async def test_clean_up_drains_stale_triggers(self, browser, top_frame):
        service = _service(browser, drain_on_clean_up=True)
        gate = asyncio.Event()

        async def slow_start(command):
            await gate.wait()

        await service.on_popup_message({"action": "START"})

        original = service.controller.handle_popup_message
        service.controller.handle_popup_message = slow_start
        blocker = service.on_popup_message({"action": "START"})
        await asyncio.sleep(0)
        stale = service.on_runtime_message({"action": "click", "selector": "#stale"}, top_frame)
        service.controller.handle_popup_message = original

        clean = service.on_popup_message({"action": "CLEAN_UP"})
        gate.set()
        await blocker
        stale_result = await stale
        await clean
        state = await service.controller.get_state()
        await service.close()

        assert stale_result.cancelled is True
        assert state.recording == []
        assert state.is_recording is False

    @pytest.mark.asyncio
    async def test_clean_up_without_drain_keeps_order(self, browser, top_frame):
        async with _service(browser) as service:
            await service.on_popup_message({"action": "START"})
            stale = service.on_runtime_message({"action": "click"}, top_frame)
            await service.on_popup_message({"action": "CLEAN_UP"})
            result = await stale

        assert result.ok is True
        assert result.cancelled is False
