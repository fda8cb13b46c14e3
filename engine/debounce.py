"""
Keyed debounced task scheduler.

- `submit(key, job)` (re)arms a timer for `key`; a later submit with the same key
  replaces the pending job, so a burst of edits collapses into one call.
- `flush(key)` runs the pending job right away (e.g. on blur/commit).
- Once a job has been dispatched it is not cancellable.

ASSUMPTION: runs on a single asyncio loop; no locking.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Hashable, Optional, Set

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


class DebouncedScheduler:
    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._timers: Dict[Hashable, asyncio.TimerHandle] = {}
        self._jobs: Dict[Hashable, Job] = {}
        self._inflight: Set[asyncio.Task] = set()

    def pending(self, key: Hashable) -> bool:
        return key in self._jobs

    @property
    def pending_keys(self) -> Set[Hashable]:
        return set(self._jobs)

    def submit(self, key: Hashable, job: Job) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        loop = asyncio.get_running_loop()
        self._jobs[key] = job
        self._timers[key] = loop.call_later(self.delay, self._fire, key)

    async def flush(self, key: Hashable) -> Optional[object]:
        """Run the pending job for `key` now. Returns None when nothing was pending."""
        job = self._take(key)
        if job is None:
            return None
        return await job()

    async def flush_all(self) -> None:
        for key in list(self._jobs):
            await self.flush(key)

    def discard(self, key: Hashable) -> bool:
        """Drop a pending (not yet dispatched) job. Used when a save supersedes it."""
        return self._take(key) is not None

    async def drain(self) -> None:
        """Wait for dispatched jobs to finish (pending timers are left alone)."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ---- internals -----------------------------------------------------------
    def _take(self, key: Hashable) -> Optional[Job]:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        return self._jobs.pop(key, None)

    def _fire(self, key: Hashable) -> None:
        self._timers.pop(key, None)
        job = self._jobs.pop(key, None)
        if job is None:
            return
        task = asyncio.ensure_future(job())
        self._inflight.add(task)
        task.add_done_callback(self._done)

    def _done(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced job failed", exc_info=exc)
