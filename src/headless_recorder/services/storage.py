"""
State Store - Durable key/value storage for session state.

The store mirrors the partial get/set/remove contract of an extension's
local storage area: callers read and write named keys, absent keys are
simply missing from the result, and every value is JSON-compatible.

Example:
    >>> store = JsonFileStateStore("state.json")
    >>> await store.set({"isRecording": True})
    >>> await store.get(["isRecording", "recording"])
    {'isRecording': True}
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from headless_recorder.config.settings import StorageSettings
from headless_recorder.exceptions import StateStoreError, StateStoreCorruptedError

logger = logging.getLogger(__name__)

Keys = Union[str, Iterable[str], None]


def _normalize_keys(keys: Keys) -> Optional[list]:
    if keys is None:
        return None
    if isinstance(keys, str):
        return [keys]
    return list(keys)


class StateStore(ABC):
    """
    Abstract key/value store.

    Values handed out by ``get`` are copies; mutating them never changes
    the stored state until they are written back with ``set``.
    """

    @abstractmethod
    async def get(self, keys: Keys = None) -> Dict[str, Any]:
        """
        Read the given keys.

        Args:
            keys: A key, an iterable of keys, or None for everything

        Returns:
            Mapping of the requested keys that are present
        """
        ...

    @abstractmethod
    async def set(self, items: Mapping[str, Any]) -> None:
        """Write (merge) the given key/value pairs."""
        ...

    @abstractmethod
    async def remove(self, keys: Keys) -> None:
        """Delete the given keys; missing keys are ignored."""
        ...

    async def clear(self) -> None:
        """Delete every key."""
        await self.remove(list(await self.get()))


class MemoryStateStore(StateStore):
    """In-process store. State is lost when the process exits."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(dict(initial or {}))

    async def get(self, keys: Keys = None) -> Dict[str, Any]:
        wanted = _normalize_keys(keys)
        if wanted is None:
            return copy.deepcopy(self._data)
        return {k: copy.deepcopy(self._data[k]) for k in wanted if k in self._data}

    async def set(self, items: Mapping[str, Any]) -> None:
        self._data.update(copy.deepcopy(dict(items)))

    async def remove(self, keys: Keys) -> None:
        for key in _normalize_keys(keys) or []:
            self._data.pop(key, None)


class JsonFileStateStore(StateStore):
    """
    Store backed by a single JSON file.

    The file is read lazily on first access and rewritten atomically
    (temp file + replace) on every mutation, so a crash mid-write leaves
    the previous state intact.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            path: JSON file holding the state; created on first write
        """
        self._path = Path(path).expanduser()
        self._data: Optional[Dict[str, Any]] = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StateStoreError(f"Could not read state file {self._path}", {"error": str(e)}) from e
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StateStoreCorruptedError(
                f"State file is not valid JSON: {e}", path=str(self._path)
            ) from e
        if not isinstance(data, dict):
            raise StateStoreCorruptedError("State file must hold a JSON object", path=str(self._path))
        return data

    def _write_file(self, data: Dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".state-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self._path)
        except OSError as e:
            raise StateStoreError(f"Could not write state file {self._path}", {"error": str(e)}) from e

    async def _load(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = await asyncio.to_thread(self._read_file)
            logger.debug(f"Loaded {len(self._data)} keys from {self._path}")
        return self._data

    async def get(self, keys: Keys = None) -> Dict[str, Any]:
        async with self._lock:
            data = await self._load()
            wanted = _normalize_keys(keys)
            if wanted is None:
                return copy.deepcopy(data)
            return {k: copy.deepcopy(data[k]) for k in wanted if k in data}

    async def set(self, items: Mapping[str, Any]) -> None:
        async with self._lock:
            data = dict(await self._load())
            data.update(copy.deepcopy(dict(items)))
            await asyncio.to_thread(self._write_file, data)
            self._data = data

    async def remove(self, keys: Keys) -> None:
        async with self._lock:
            data = dict(await self._load())
            present = [k for k in _normalize_keys(keys) or [] if k in data]
            if not present:
                return
            for key in present:
                del data[key]
            await asyncio.to_thread(self._write_file, data)
            self._data = data


def create_state_store(settings: StorageSettings) -> StateStore:
    """Build the store selected by the ``storage`` settings section."""
    if settings.backend == "memory":
        return MemoryStateStore()
    return JsonFileStateStore(settings.path)
