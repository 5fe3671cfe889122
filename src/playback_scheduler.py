"""
Playback Scheduler

Drives the reveal engine's step timer on the running asyncio loop. At most
one task exists at a time; selecting or closing cancels it before anything
else happens, and the engine rejects any tick whose handle belongs to an
older session.
"""

import asyncio
from typing import Optional

from logging_config import get_logger
from reveal_engine import PlaybackTask, RevealEngine

logger = get_logger("playback_scheduler")


class PlaybackScheduler:
    def __init__(self, engine: RevealEngine):
        self.engine = engine
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def select(self, entity_id: str) -> Optional[PlaybackTask]:
        """Select through the engine and schedule its playback, if any."""
        handle = self.engine.on_entity_selected(entity_id)
        # Only reached when the selection was accepted
        self._cancel()
        if handle is not None:
            self._start(handle)
        return handle

    def close(self) -> None:
        self._cancel()
        self.engine.on_close_session()

    def tick(self) -> bool:
        """Advance immediately and restart the interval for the next step."""
        advanced = self.engine.on_tick()
        self._cancel()
        if self.engine.pending_task is not None:
            self._start(self.engine.pending_task)
        return advanced

    async def shutdown(self) -> None:
        task = self._task
        self._cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _start(self, handle: PlaybackTask) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run(handle))

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, handle: PlaybackTask) -> None:
        interval = handle.interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            if not self.engine.advance(handle):
                logger.debug("Playback task for session %d stopped", handle.session_id)
                return
            if self.engine.pending_task is None:
                return
