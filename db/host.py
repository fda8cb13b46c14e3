"""
Interface of the host learning platform, as consumed by the widget.

The host owns persistence, grading and analytics:
- two whole-document stores per quiz ("setup" and "criteria"),
- a per-user store that also grades submissions and logs interactions,
- an opaque id generator,
- a "save all" event the host can raise at any time.

Backends: db/memory.py (in-process) and db/repo.py (Prisma).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

SaveHandler = Callable[[], None]


@dataclass
class SubmitResult:
    success: bool


class DocumentStore(Protocol):
    async def retrieve(self) -> Optional[Any]:
        """Stored body, or None if it was never saved."""

    async def replace(self, body: Any) -> Any:
        """Replace the whole body; returns the host-normalised copy."""


class UserStore(DocumentStore, Protocol):
    async def submit(self, selection: Dict[str, bool]) -> SubmitResult: ...

    async def log_interaction(self) -> None: ...


class HostPlatform(Protocol):
    def setup(self, quiz_id: str) -> DocumentStore: ...

    def criteria(self, quiz_id: str) -> DocumentStore: ...

    def user(self, quiz_id: str, user_id: str) -> UserStore: ...

    def generate_id(self) -> str: ...

    def subscribe_save(self, quiz_id: str, handler: SaveHandler) -> None: ...

    def unsubscribe_save(self, quiz_id: str, handler: SaveHandler) -> None: ...

    def request_save(self, quiz_id: str) -> None: ...


class SaveEvents:
    """Subscriber bookkeeping for the host's "save all" event (shared by backends)."""

    def __init__(self) -> None:
        self._save_handlers: Dict[str, List[SaveHandler]] = {}

    def subscribe_save(self, quiz_id: str, handler: SaveHandler) -> None:
        self._save_handlers.setdefault(quiz_id, []).append(handler)

    def unsubscribe_save(self, quiz_id: str, handler: SaveHandler) -> None:
        handlers = self._save_handlers.get(quiz_id, [])
        if handler in handlers:
            handlers.remove(handler)

    def request_save(self, quiz_id: str) -> None:
        handlers = list(self._save_handlers.get(quiz_id, []))
        logger.info("Host save requested for quiz %s (%d subscriber(s))", quiz_id, len(handlers))
        for handler in handlers:
            handler()
