"""
Tests for the state stores.
"""

import json

import pytest

from headless_recorder.config import StorageSettings
from headless_recorder.exceptions import StateStoreCorruptedError
from headless_recorder.services.storage import (
    JsonFileStateStore,
    MemoryStateStore,
    create_state_store,
)


class TestMemoryStateStore:
    """Test the in-memory store."""

    @pytest.mark.asyncio
    async def test_partial_get(self):
        store = MemoryStateStore({"a": 1, "b": 2})

        assert await store.get("a") == {"a": 1}
        assert await store.get(["a", "missing"]) == {"a": 1}
        assert await store.get() == {"a": 1, "b": 2}

    @pytest.mark.asyncio
    async def test_values_are_copies(self):
        store = MemoryStateStore()
        events = [{"action": "click"}]
        await store.set({"recording": events})
        events.append({"action": "change"})

        fetched = (await store.get("recording"))["recording"]
        fetched.append({"action": "keydown"})

        assert (await store.get("recording"))["recording"] == [{"action": "click"}]

    @pytest.mark.asyncio
    async def test_remove_and_clear(self):
        store = MemoryStateStore({"a": 1, "b": 2, "c": 3})

        await store.remove(["a", "missing"])
        assert await store.get() == {"b": 2, "c": 3}

        await store.clear()
        assert await store.get() == {}


class TestJsonFileStateStore:
    """Test the durable file store."""

    @pytest.mark.asyncio
    async def test_survives_restart(self, tmp_path):
        path = tmp_path / "state" / "state.json"
        await JsonFileStateStore(path).set({"isRecording": True, "recording": [{"action": "click"}]})

        reopened = JsonFileStateStore(path)

        assert await reopened.get(["isRecording", "recording"]) == {
            "isRecording": True,
            "recording": [{"action": "click"}],
        }

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStateStore(tmp_path / "nothing.json")

        assert await store.get() == {}
        assert not (tmp_path / "nothing.json").exists()

    @pytest.mark.asyncio
    async def test_remove_rewrites_file(self, tmp_path):
        path = tmp_path / "state.json"
        store = JsonFileStateStore(path)
        await store.set({"a": 1, "b": 2})

        await store.remove("a")

        assert json.loads(path.read_text()) == {"b": 2}

    @pytest.mark.asyncio
    async def test_corrupted_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json")

        with pytest.raises(StateStoreCorruptedError) as exc_info:
            await JsonFileStateStore(path).get()

        assert exc_info.value.path == str(path)

    @pytest.mark.asyncio
    async def test_non_object_file(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2]")

        with pytest.raises(StateStoreCorruptedError):
            await JsonFileStateStore(path).get()


class TestCreateStateStore:
    """Test backend selection."""

    def test_memory_backend(self):
        assert isinstance(create_state_store(StorageSettings(backend="memory")), MemoryStateStore)

    def test_file_backend(self, tmp_path):
        store = create_state_store(StorageSettings(backend="file", path=str(tmp_path / "s.json")))

        assert isinstance(store, JsonFileStateStore)
        assert store.path == tmp_path / "s.json"
