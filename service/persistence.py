"""
Persistence coordinator: keeps the setup and criteria documents in step with
the in-memory quiz state.

- save_state:    replace the setup document, adopt the host's normalised copy
- save_criteria: reconcile, then replace the criteria document
- save:          both at once; one completion callback after both finish
- save_debounced / commit: keyed debounce for text edits, and its bypass
- fire:          fire-and-forget dispatch for host-triggered saves

Every save is bracketed by the status signal. A host call that never returns
leaves the signal on; there is no timeout or retry.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Set

from db.host import DocumentStore
from engine.debounce import DebouncedScheduler
from engine.join import fire_and_forget, join
from engine.status import StatusSignal
from models.quiz import QuizState

logger = logging.getLogger(__name__)


class PersistenceCoordinator:
    def __init__(
        self,
        state: QuizState,
        setup_store: DocumentStore,
        criteria_store: DocumentStore,
        status: Optional[StatusSignal] = None,
        debounce_delay: float = 0.5,
    ) -> None:
        self.state = state
        self._setup = setup_store
        self._criteria = criteria_store
        self.status = status or StatusSignal()
        self.scheduler = DebouncedScheduler(debounce_delay)
        self._background: Set[asyncio.Future] = set()

    # ---- Immediate saves -----------------------------------------------------
    async def save_state(self) -> Dict[str, Any]:
        body = self.state.setup_document()
        return await self._replace_setup(body, self.state.revision)

    async def save_criteria(self) -> Dict[str, bool]:
        return await self._replace_criteria(self._criteria_body())

    async def save(self, callback: Optional[Callable[[], Any]] = None) -> None:
        """
        Joint save. Both bodies are captured and both replace calls dispatched before
        either can complete; `callback` runs once, after both, in any completion order.
        """
        setup_body = self.state.setup_document()
        revision = self.state.revision
        criteria_body = self._criteria_body()
        await join(
            self._replace_setup(setup_body, revision),
            self._replace_criteria(criteria_body),
            callback=(lambda _results: callback()) if callback else None,
        )

    # ---- Debounced saves -----------------------------------------------------
    def save_debounced(self, key: Hashable) -> None:
        self.scheduler.submit(key, self.save_state)

    async def commit(self, key: Hashable) -> Dict[str, Any]:
        """Edit committed (blur/change): save now whatever the timer state."""
        self.scheduler.discard(key)
        return await self.save_state()

    # ---- Fire-and-forget -----------------------------------------------------
    def fire(self, operation: Awaitable[Any]) -> asyncio.Future:
        return fire_and_forget(operation, self._background, label="save")

    async def close(self) -> None:
        """Flush pending debounced edits and wait for anything already dispatched."""
        await self.scheduler.flush_all()
        await self.scheduler.drain()
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ---- internals -----------------------------------------------------------
    def _criteria_body(self) -> Dict[str, bool]:
        # Never write an entry for an answer that no longer exists
        self.state.criteria.reconcile(self.state.answers.ids())
        return self.state.criteria.to_dict()

    async def _replace_setup(self, body: Dict[str, Any], revision: int) -> Dict[str, Any]:
        async with self.status.bracket():
            result = await self._setup.replace(body)
            if self.state.revision == revision:
                self.state.adopt_setup(result)
            else:
                # A newer edit exists locally; its own save will carry it
                logger.debug("Setup edited during save (rev %d -> %d), keeping local copy",
                             revision, self.state.revision)
        return result

    async def _replace_criteria(self, body: Dict[str, bool]) -> Dict[str, bool]:
        async with self.status.bracket():
            return await self._criteria.replace(body)
