"""
Prisma-backed host backend.

Each host document is one `Document` row keyed like the in-memory backend
(setup:<quiz>, criteria:<quiz>, user:<quiz>:<user>). Bodies are normalised with
the same pydantic models before they are written, and the stored row is what
gets returned to the caller.

NOTE: requires `prisma generate` against schema.prisma and a reachable DATABASE_URL.
"""
from __future__ import annotations
import logging
import uuid
from typing import Any, Callable, Dict, Optional

from prisma import Json

from db.client import db
from db.host import SaveEvents, SubmitResult
from models.criteria import grade
from schemas import normalize_criteria, normalize_selection, normalize_setup

logger = logging.getLogger(__name__)


# -------- Documents --------

async def get_document(key: str) -> Optional[Any]:
    row = await db.document.find_unique(where={"key": key})
    return row.body if row else None


async def put_document(key: str, body: Any) -> Any:
    row = await db.document.upsert(
        where={"key": key},
        data={
            "create": {"key": key, "body": Json(body)},
            "update": {"body": Json(body)},
        },
    )
    return row.body


# -------- Interactions --------

async def record_interaction(quiz_id: str, user_id: str) -> None:
    await db.interaction.create(data={"quizId": quiz_id, "userId": user_id})


class PrismaDocumentStore:
    def __init__(self, key: str, normalize: Callable[[Any], Any]) -> None:
        self.key = key
        self._normalize = normalize

    async def retrieve(self) -> Optional[Any]:
        return await get_document(self.key)

    async def replace(self, body: Any) -> Any:
        stored = await put_document(self.key, self._normalize(body))
        logger.debug("Replaced %s", self.key)
        return stored


class PrismaUserStore(PrismaDocumentStore):
    def __init__(self, quiz_id: str, user_id: str) -> None:
        super().__init__(f"user:{quiz_id}:{user_id}", normalize_selection)
        self.quiz_id = quiz_id
        self.user_id = user_id

    async def submit(self, selection: Dict[str, bool]) -> SubmitResult:
        criteria = await get_document(f"criteria:{self.quiz_id}") or {}
        setup = await get_document(f"setup:{self.quiz_id}")
        if setup:
            answer_ids = [a["id"] for a in setup.get("answers", [])]
        else:
            answer_ids = sorted(set(criteria) | set(selection))
        return SubmitResult(success=grade(selection, criteria, answer_ids))

    async def log_interaction(self) -> None:
        await record_interaction(self.quiz_id, self.user_id)


class PrismaHost(SaveEvents):
    def setup(self, quiz_id: str) -> PrismaDocumentStore:
        return PrismaDocumentStore(f"setup:{quiz_id}", normalize_setup)

    def criteria(self, quiz_id: str) -> PrismaDocumentStore:
        return PrismaDocumentStore(f"criteria:{quiz_id}", normalize_criteria)

    def user(self, quiz_id: str, user_id: str) -> PrismaUserStore:
        return PrismaUserStore(quiz_id, user_id)

    def generate_id(self) -> str:
        return str(uuid.uuid4())

    async def connect(self) -> None:
        if not db.is_connected():
            await db.connect()

    async def disconnect(self) -> None:
        if db.is_connected():
            await db.disconnect()
