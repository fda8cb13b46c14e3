"""
In-process host backend (default for local runs and tests).

Keeps every document in a dict, hands out deep copies, and normalises bodies on
replace the way the real host does, so callers must adopt what comes back.
"""
from __future__ import annotations
import copy
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from db.host import SaveEvents, SubmitResult
from models.criteria import grade
from schemas import normalize_criteria, normalize_selection, normalize_setup

logger = logging.getLogger(__name__)


class MemoryDocumentStore:
    def __init__(self, key: str, normalize: Callable[[Any], Any], docs: Dict[str, Any]) -> None:
        self.key = key
        self._normalize = normalize
        self._docs = docs
        self.writes: List[Any] = []

    async def retrieve(self) -> Optional[Any]:
        return copy.deepcopy(self._docs.get(self.key))

    async def replace(self, body: Any) -> Any:
        stored = self._normalize(copy.deepcopy(body))
        self._docs[self.key] = stored
        self.writes.append(copy.deepcopy(stored))
        logger.debug("Replaced %s", self.key)
        return copy.deepcopy(stored)


class MemoryUserStore(MemoryDocumentStore):
    def __init__(self, host: "InMemoryHost", quiz_id: str, user_id: str) -> None:
        super().__init__(f"user:{quiz_id}:{user_id}", normalize_selection, host.docs)
        self._host = host
        self.quiz_id = quiz_id
        self.user_id = user_id

    async def submit(self, selection: Dict[str, bool]) -> SubmitResult:
        return SubmitResult(success=self._host.grade(self.quiz_id, selection))

    async def log_interaction(self) -> None:
        self._host.interactions.append((self.quiz_id, self.user_id))


class InMemoryHost(SaveEvents):
    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        super().__init__()
        self.docs: Dict[str, Any] = {}
        self.interactions: List[Tuple[str, str]] = []
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._stores: Dict[str, MemoryDocumentStore] = {}

    def setup(self, quiz_id: str) -> MemoryDocumentStore:
        return self._store(f"setup:{quiz_id}", normalize_setup)

    def criteria(self, quiz_id: str) -> MemoryDocumentStore:
        return self._store(f"criteria:{quiz_id}", normalize_criteria)

    def user(self, quiz_id: str, user_id: str) -> MemoryUserStore:
        key = f"user:{quiz_id}:{user_id}"
        if key not in self._stores:
            self._stores[key] = MemoryUserStore(self, quiz_id, user_id)
        return self._stores[key]  # type: ignore[return-value]

    def generate_id(self) -> str:
        return self._id_factory()

    def grade(self, quiz_id: str, selection: Dict[str, bool]) -> bool:
        criteria = self.docs.get(f"criteria:{quiz_id}") or {}
        setup = self.docs.get(f"setup:{quiz_id}")
        if setup:
            answer_ids = [a["id"] for a in setup["answers"]]
        else:
            answer_ids = sorted(set(criteria) | set(selection))
        return grade(selection, criteria, answer_ids)

    def _store(self, key: str, normalize: Callable[[Any], Any]) -> MemoryDocumentStore:
        if key not in self._stores:
            self._stores[key] = MemoryDocumentStore(key, normalize, self.docs)
        return self._stores[key]
