"""
Session State - The persisted recording session aggregate.

Session state lives in the state store as six plain keys. This module
gives it a typed shape (``SessionState``) and a single mutation entry
point (``SessionRepository.transaction``) that serializes every
read-modify-write against handlers interleaving at await points.

Example:
    >>> repo = SessionRepository(MemoryStateStore())
    >>> async with repo.transaction() as state:
    ...     state.recording.append({"action": "click", "selector": "#a"})
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List

from headless_recorder.services.constants import SESSION_KEYS
from headless_recorder.services.storage import StateStore

logger = logging.getLogger(__name__)

FIELD_KEYS = {
    "recording": "recording",
    "is_paused": "isPaused",
    "is_recording": "isRecording",
    "badge_state": "badgeState",
    "has_goto": "hasGoto",
    "has_viewport": "hasViewPort",
}


@dataclass
class SessionState:
    """
    Snapshot of the recording session.

    Attributes:
        recording: Recorded events in replay order
        is_paused: Appends are suppressed while True
        is_recording: True between start and stop
        badge_state: Last known badge text
        has_goto: Initial URL already captured this session
        has_viewport: Initial viewport already captured this session
    """
    recording: List[Dict[str, Any]] = field(default_factory=list)
    is_paused: bool = False
    is_recording: bool = False
    badge_state: str = ""
    has_goto: bool = False
    has_viewport: bool = False

    def to_store(self) -> Dict[str, Any]:
        """Convert to the persisted key layout."""
        return {
            "recording": self.recording,
            "isPaused": self.is_paused,
            "badgeState": self.badge_state,
            "hasGoto": self.has_goto,
            "hasViewPort": self.has_viewport,
            "isRecording": self.is_recording,
        }

    @classmethod
    def from_store(cls, data: Dict[str, Any]) -> "SessionState":
        """Create from persisted keys; absent or null keys take their defaults."""
        recording = data.get("recording")
        return cls(
            recording=list(recording) if isinstance(recording, list) else [],
            is_paused=bool(data.get("isPaused", False)),
            is_recording=bool(data.get("isRecording", False)),
            badge_state=data.get("badgeState") or "",
            has_goto=bool(data.get("hasGoto", False)),
            has_viewport=bool(data.get("hasViewPort", False)),
        )


class SessionRepository:
    """
    Owns all reads and writes of the session keys.

    Every write goes through ``transaction`` (or the helpers built on
    it), which holds a lock from the read to the write-back. Transactions
    are not re-entrant: do not open one inside another.
    """

    def __init__(self, store: StateStore):
        self._store = store
        self._lock = asyncio.Lock()

    @property
    def store(self) -> StateStore:
        return self._store

    async def load(self) -> SessionState:
        """Read the current state without locking (a consistent snapshot)."""
        return SessionState.from_store(await self._store.get(list(SESSION_KEYS)))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SessionState]:
        """
        Atomically read, mutate and write back the session.

        Only keys whose value changed are written. If the block raises,
        nothing is written.
        """
        async with self._lock:
            before = await self.load()
            state = copy.deepcopy(before)
            yield state
            original = before.to_store()
            changes = {k: v for k, v in state.to_store().items() if original[k] != v}
            if changes:
                await self._store.set(changes)

    async def update(self, **fields: Any) -> None:
        """
        Write the given ``SessionState`` fields, changed or not.

        Example:
            >>> await repo.update(is_paused=True)
        """
        unknown = set(fields) - set(FIELD_KEYS)
        if unknown:
            raise AttributeError(f"SessionState has no field(s) {sorted(unknown)}")
        async with self._lock:
            await self._store.set({FIELD_KEYS[name]: value for name, value in fields.items()})

    async def erase(self) -> None:
        """Remove every session key from the store."""
        async with self._lock:
            await self._store.remove(list(SESSION_KEYS))
        logger.debug("Session state erased")
