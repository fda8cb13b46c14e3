"""Shared fixtures and fake host stores."""
import asyncio
import copy
import itertools

import pytest

from db.memory import InMemoryHost, MemoryDocumentStore, MemoryUserStore
from models.answers import AnswerSet, QuizMode
from models.criteria import CriteriaMap
from models.quiz import QuizState


async def settle(rounds: int = 10) -> None:
    """Let every ready task run until it blocks."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class GatedStore:
    """Document store whose replace calls only complete when released by the test."""

    def __init__(self, normalize=None, fail=False):
        self.calls = []
        self.writes = []
        self._gates = []
        self._normalize = normalize or (lambda body: body)
        self._fail = fail

    async def retrieve(self):
        return copy.deepcopy(self.writes[-1]) if self.writes else None

    async def replace(self, body):
        gate = asyncio.Event()
        self.calls.append(copy.deepcopy(body))
        self._gates.append(gate)
        await gate.wait()
        if self._fail:
            raise RuntimeError("host unavailable")
        stored = self._normalize(copy.deepcopy(body))
        self.writes.append(stored)
        return copy.deepcopy(stored)

    def release(self, index=-1):
        self._gates[index].set()

    def release_all(self):
        for gate in self._gates:
            gate.set()


class RecordingStore:
    """Completes immediately; optionally rewrites bodies like a normalising host."""

    def __init__(self, normalize=None, fail=False):
        self.writes = []
        self._normalize = normalize or (lambda body: body)
        self._fail = fail

    async def retrieve(self):
        return copy.deepcopy(self.writes[-1]) if self.writes else None

    async def replace(self, body):
        await asyncio.sleep(0)
        if self._fail:
            raise RuntimeError("host unavailable")
        stored = self._normalize(copy.deepcopy(body))
        self.writes.append(stored)
        return copy.deepcopy(stored)


class GatedUserStore(MemoryUserStore):
    """Selection writes wait until the test opens the gate."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gate = asyncio.Event()

    async def replace(self, body):
        await self.gate.wait()
        return await super().replace(body)


class GatedHost(InMemoryHost):
    def user(self, quiz_id, user_id):
        key = f"user:{quiz_id}:{user_id}"
        if key not in self._stores:
            self._stores[key] = GatedUserStore(self, quiz_id, user_id)
        return self._stores[key]


class YieldingDocumentStore(MemoryDocumentStore):
    """Reads suspend once, like a real host round trip."""

    async def retrieve(self):
        await asyncio.sleep(0)
        return await super().retrieve()


class YieldingUserStore(MemoryUserStore):
    async def retrieve(self):
        await asyncio.sleep(0)
        return await super().retrieve()


class YieldingHost(InMemoryHost):
    def user(self, quiz_id, user_id):
        key = f"user:{quiz_id}:{user_id}"
        if key not in self._stores:
            self._stores[key] = YieldingUserStore(self, quiz_id, user_id)
        return self._stores[key]

    def _store(self, key, normalize):
        if key not in self._stores:
            self._stores[key] = YieldingDocumentStore(key, normalize, self.docs)
        return self._stores[key]


def counter_ids(start=1):
    counter = itertools.count(start)
    return lambda: str(next(counter))


@pytest.fixture
def host():
    return InMemoryHost(id_factory=counter_ids(100))


@pytest.fixture
def quiz_state():
    return QuizState(
        answers=AnswerSet.from_dicts([{"id": "1", "text": "A"}, {"id": "2", "text": "B"}]),
        mode=QuizMode.SINGLE,
        criteria=CriteriaMap({"1": True, "2": False}),
        correct_message="Well done",
        incorrect_message="Try again",
    )
