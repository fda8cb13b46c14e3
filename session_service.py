"""
Session orchestration:
- Owns the open author/display sessions and the host backend they talk to.
- Keeps the web layer thin and swappable.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Dict, Hashable, Optional, Tuple

from config import settings
from db.host import HostPlatform
from db.memory import InMemoryHost
from service.author import AuthorSession
from service.display import DisplaySession

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    pass


class SessionStore:
    """In-memory store (one author session per quiz, one display session per learner)."""
    def __init__(self) -> None:
        self._authors: Dict[str, AuthorSession] = {}
        self._displays: Dict[Tuple[str, str], DisplaySession] = {}

    def get_author(self, quiz_id: str) -> Optional[AuthorSession]:
        return self._authors.get(quiz_id)

    def put_author(self, session: AuthorSession) -> None:
        self._authors[session.quiz_id] = session

    def pop_author(self, quiz_id: str) -> Optional[AuthorSession]:
        return self._authors.pop(quiz_id, None)

    def get_display(self, quiz_id: str, user_id: str) -> Optional[DisplaySession]:
        return self._displays.get((quiz_id, user_id))

    def put_display(self, session: DisplaySession) -> None:
        self._displays[(session.quiz_id, session.user_id)] = session

    def authors(self) -> list[AuthorSession]:
        return list(self._authors.values())


class SessionService:
    def __init__(self, host: HostPlatform, store: Optional[SessionStore] = None) -> None:
        self.host = host
        self._store = store or SessionStore()
        # one open at a time per quiz / learner, so a session is never created twice
        self._open_locks: Dict[Hashable, asyncio.Lock] = {}

    def _open_lock(self, key: Hashable) -> asyncio.Lock:
        lock = self._open_locks.get(key)
        if lock is None:
            lock = self._open_locks[key] = asyncio.Lock()
        return lock

    # ---- Author ----------------------------------------------------------------
    async def open_author(self, quiz_id: str) -> AuthorSession:
        async with self._open_lock(("author", quiz_id)):
            session = self._store.get_author(quiz_id)
            if session is None:
                session = await AuthorSession.open(self.host, quiz_id)
                self._store.put_author(session)
        return session

    def author(self, quiz_id: str) -> AuthorSession:
        session = self._store.get_author(quiz_id)
        if session is None:
            raise SessionNotFoundError(f"No author session for quiz {quiz_id}")
        return session

    async def close_author(self, quiz_id: str) -> None:
        session = self._store.pop_author(quiz_id)
        if session is not None:
            await session.close()

    # ---- Display ---------------------------------------------------------------
    async def open_display(self, quiz_id: str, user_id: str) -> DisplaySession:
        async with self._open_lock(("display", quiz_id, user_id)):
            session = self._store.get_display(quiz_id, user_id)
            if session is None:
                session = await DisplaySession.open(self.host, quiz_id, user_id)
                self._store.put_display(session)
        return session

    def display(self, quiz_id: str, user_id: str) -> DisplaySession:
        session = self._store.get_display(quiz_id, user_id)
        if session is None:
            raise SessionNotFoundError(f"No display session for quiz {quiz_id}, user {user_id}")
        return session

    async def shutdown(self) -> None:
        """Flush every author's pending edits before the process exits."""
        for session in self._store.authors():
            await self.close_author(session.quiz_id)


def build_host(backend: Optional[str] = None) -> HostPlatform:
    backend = backend or settings.host_backend
    if backend == "memory":
        return InMemoryHost()
    if backend == "prisma":
        # Imported lazily: needs a generated Prisma client and DATABASE_URL
        from db.repo import PrismaHost
        return PrismaHost()
    raise ValueError(f"Unknown host backend: {backend!r}")


_service: Optional[SessionService] = None


def get_session_service() -> SessionService:
    global _service
    if _service is None:
        _service = SessionService(build_host())
        logger.info("Session service ready (backend=%s)", settings.host_backend)
    return _service
