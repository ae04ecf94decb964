"""
Pytest configuration and fixtures.
"""

import pytest

PAGE_URL = "https://example.com/"


@pytest.fixture
def settings():
    """Provide test settings with an in-memory store."""
    from headless_recorder.config import Settings, StorageSettings

    return Settings(storage=StorageSettings(backend="memory"))


@pytest.fixture
def store():
    """Provide an empty in-memory state store."""
    from headless_recorder.services import MemoryStateStore

    return MemoryStateStore()


@pytest.fixture
def browser():
    """Provide an in-memory browser with one open tab."""
    from headless_recorder.services import InMemoryBrowser

    browser = InMemoryBrowser()
    browser.open_tab(PAGE_URL)
    return browser


@pytest.fixture
def renderer():
    """Provide a badge renderer that keeps its history."""
    from headless_recorder.services import MemoryBadgeRenderer

    return MemoryBadgeRenderer()


@pytest.fixture
def badge(renderer):
    from headless_recorder.services import Badge

    return Badge(renderer)


@pytest.fixture
def repository(store):
    from headless_recorder.background import SessionRepository

    return SessionRepository(store)


@pytest.fixture
def controller(repository, badge, browser):
    """Provide a session controller wired to in-memory collaborators."""
    from headless_recorder.background import SessionController

    return SessionController(repository, badge, browser)


@pytest.fixture
def top_frame():
    """Sender for the top-level frame of the open tab."""
    return {"frameId": 0, "url": PAGE_URL, "tabId": 1}
