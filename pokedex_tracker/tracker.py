"""Acquisition tracker: simulated-latency catches keyed by entry id.

Every catch is an asyncio task that sleeps the configured delay and then
finalizes only its own entry.  Several catches may be in flight at once.
Closing the tracker cancels outstanding tasks before they touch state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Tuple

from pokedex_tracker.models import (
    ACQUIRED,
    ACQUIRING,
    NOT_ACQUIRED,
    AcquisitionEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_ACQUIRE_DELAY_MS = 700

Listener = Callable[[AcquisitionEvent], None]


class AcquisitionTracker:
    """Owns the acquired and in-progress id sets.

    Only ``initiate_acquire`` and the completion handler write state.
    There is no release or reset.
    """

    def __init__(self, acquire_delay_ms: int = DEFAULT_ACQUIRE_DELAY_MS) -> None:
        self._delay = acquire_delay_ms / 1000.0
        self._acquired: set[int] = set()
        self._order: List[int] = []
        self._in_progress: set[int] = set()
        self._tasks: Dict[int, asyncio.Task] = {}
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def acquired(self) -> frozenset[int]:
        return frozenset(self._acquired)

    @property
    def acquired_in_order(self) -> Tuple[int, ...]:
        return tuple(self._order)

    @property
    def in_progress(self) -> frozenset[int]:
        return frozenset(self._in_progress)

    @property
    def closed(self) -> bool:
        return self._closed

    def status(self, entry_id: int) -> str:
        if entry_id in self._acquired:
            return ACQUIRED
        if entry_id in self._in_progress:
            return ACQUIRING
        return NOT_ACQUIRED

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def initiate_acquire(self, entry_id: int) -> bool:
        """Start catching ``entry_id``; returns False if nothing was started.

        Returns immediately.  Must be called with a running event loop.
        """
        if self._closed:
            raise RuntimeError("Acquisition tracker is closed")
        if entry_id in self._acquired or entry_id in self._in_progress:
            logger.debug("Ignoring acquire for %d: %s", entry_id, self.status(entry_id))
            return False

        loop = asyncio.get_running_loop()
        self._in_progress.add(entry_id)
        self._tasks[entry_id] = loop.create_task(
            self._complete_after_delay(entry_id),
            name=f"acquire-{entry_id}",
        )
        logger.debug("Acquiring %d (%.0f ms)", entry_id, self._delay * 1000)
        self._publish(AcquisitionEvent(entry_id=entry_id, status=ACQUIRING))
        return True

    async def wait_idle(self) -> None:
        """Wait until every outstanding acquisition has completed or been cancelled."""
        while self._tasks and not self._closed:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding acquisitions; no state changes after this."""
        if self._closed:
            return
        self._closed = True
        pending = list(self._tasks.values())
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("Cancelled %d pending acquisition(s)", len(pending))
        self._tasks.clear()
        self._in_progress.clear()
        self._listeners.clear()

    async def __aenter__(self) -> "AcquisitionTracker":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _complete_after_delay(self, entry_id: int) -> None:
        await asyncio.sleep(self._delay)
        self._finalize(entry_id)

    def _finalize(self, entry_id: int) -> None:
        self._tasks.pop(entry_id, None)
        self._in_progress.discard(entry_id)
        if entry_id not in self._acquired:
            self._acquired.add(entry_id)
            self._order.append(entry_id)
        logger.debug("Acquired %d", entry_id)
        self._publish(AcquisitionEvent(entry_id=entry_id, status=ACQUIRED))

    def _publish(self, event: AcquisitionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                logger.warning("Listener failed on %s for %d: %s", event.status, event.entry_id, exc)
