from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .config import CLEANUP_INTERVAL_SECONDS
from .store import PasteStore

log = logging.getLogger("pastestore.reaper")


class ExpiryReaper:
    """Background task that sweeps expired pastes on a fixed interval.

    One instance per process. `start()` must be called from a running event
    loop; `stop()` wakes the loop and waits for it to finish.
    """

    def __init__(self, store: PasteStore, interval_seconds: float = CLEANUP_INTERVAL_SECONDS):
        self.store = store
        self.interval_seconds = interval_seconds
        self.sweeps = 0
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            raise RuntimeError("reaper already running")
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self.run(), name="paste-reaper")
        log.info("reaper.start interval_s=%s", self.interval_seconds)
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        log.info("reaper.stop sweeps=%s", self.sweeps)

    async def run(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
                break  # stop requested
            except asyncio.TimeoutError:
                pass
            await self.sweep_once()

    async def sweep_once(self) -> int:
        """Run one sweep off the event loop. Never raises."""
        log.info("reaper.sweep start")
        try:
            removed = await asyncio.to_thread(self.store.reap_expired)
        except Exception:
            log.exception("reaper.sweep failed")
            return 0
        finally:
            self.sweeps += 1
        return removed
