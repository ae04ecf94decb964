"""
Trigger Queue - Serializes external triggers onto one consumer.

Each inbound event (runtime message, popup message, navigation) becomes
a trigger that runs to completion before the next one starts, so
handlers never interleave at their await points. Collaborator failures
are caught at the trigger boundary, logged, and reported as a
``DispatchResult`` instead of vanishing.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Outcome of one trigger."""
    trigger: str
    ok: bool = True
    error: Optional[BaseException] = None
    cancelled: bool = False


@dataclass
class _Trigger:
    name: str
    handler: Callable[..., Awaitable[Any]]
    args: Tuple[Any, ...]
    future: "asyncio.Future[DispatchResult]"


class TriggerQueue:
    """
    Single-consumer FIFO of triggers.

    Example:
        >>> queue = TriggerQueue()
        >>> result = await queue.submit("popup", controller.handle_popup_message, {"action": "START"})
        >>> result.ok
        True
    """

    def __init__(self, name: str = "session"):
        self._name = name
        self._queue: "asyncio.Queue[Optional[_Trigger]]" = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        """Triggers waiting to start."""
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if not self.running:
            self._worker = asyncio.get_running_loop().create_task(self._run(), name=f"{self._name}-triggers")

    def submit(self, name: str, handler: Callable[..., Awaitable[Any]], *args: Any) -> "asyncio.Future[DispatchResult]":
        """
        Queue a trigger; starts the worker if needed.

        Returns:
            Future resolving to the trigger's ``DispatchResult``
        """
        self.start()
        future: "asyncio.Future[DispatchResult]" = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(_Trigger(name, handler, args, future))
        return future

    def discard_pending(self) -> int:
        """
        Drop every trigger that has not started yet.

        The trigger currently running (if any) is unaffected. Discarded
        futures resolve with ``cancelled=True``.

        Returns:
            Number of triggers discarded
        """
        discarded = 0
        stop_requested = False
        while True:
            try:
                trigger = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._queue.task_done()
            if trigger is None:
                stop_requested = True
                continue
            if not trigger.future.done():
                trigger.future.set_result(DispatchResult(trigger.name, ok=False, cancelled=True))
            discarded += 1
        if stop_requested:
            self._queue.put_nowait(None)
        if discarded:
            logger.info(f"Discarded {discarded} pending trigger(s)")
        return discarded

    async def join(self) -> None:
        """Wait until every submitted trigger has finished."""
        await self._queue.join()

    async def close(self) -> None:
        """Finish queued triggers, then stop the worker."""
        if not self.running:
            return
        self._queue.put_nowait(None)
        await self._worker
        self._worker = None

    async def _run(self) -> None:
        while True:
            trigger = await self._queue.get()
            try:
                if trigger is None:
                    return
                if trigger.future.done():
                    continue
                result = await self._execute(trigger)
                if not trigger.future.done():
                    trigger.future.set_result(result)
            finally:
                self._queue.task_done()

    async def _execute(self, trigger: _Trigger) -> DispatchResult:
        try:
            await trigger.handler(*trigger.args)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Trigger {trigger.name} failed: {e}", exc_info=True)
            return DispatchResult(trigger.name, ok=False, error=e)
        return DispatchResult(trigger.name)
