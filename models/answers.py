"""
Answer options for a quiz.

- `Answer` is one selectable option (host-generated id + display text).
- `AnswerSet` keeps them ordered and guarantees unique ids.
- `QuizMode` is the selection style; anything but single/multiple is a
  configuration error, never a silent default.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional


class QuizConfigurationError(ValueError):
    """Raised when the quiz setup cannot be rendered (e.g. unknown mode)."""


class QuizMode(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"

    @classmethod
    def parse(cls, value: Any) -> "QuizMode":
        if isinstance(value, QuizMode):
            return value
        try:
            return cls(value)
        except ValueError:
            raise QuizConfigurationError(f"Not Implemented: {value!r}") from None


@dataclass
class Answer:
    id: str
    text: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class AnswerSet:
    """Ordered answers. Order matters for display only."""

    def __init__(self, answers: Iterable[Answer] = ()) -> None:
        self._answers: List[Answer] = []
        for answer in answers:
            self._append(answer)

    @classmethod
    def from_dicts(cls, rows: Iterable[Dict[str, Any]]) -> "AnswerSet":
        return cls(Answer(id=str(r["id"]), text=str(r.get("text") or "")) for r in rows)

    # ---- Queries -------------------------------------------------------------
    def __iter__(self) -> Iterator[Answer]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def __contains__(self, answer_id: object) -> bool:
        return any(a.id == answer_id for a in self._answers)

    def ids(self) -> List[str]:
        return [a.id for a in self._answers]

    def get(self, answer_id: str) -> Optional[Answer]:
        return next((a for a in self._answers if a.id == answer_id), None)

    def to_dicts(self) -> List[Dict[str, str]]:
        return [a.to_dict() for a in self._answers]

    # ---- Mutations -----------------------------------------------------------
    def add(self, text: str, generate_id: Callable[[], str]) -> Answer:
        """Append a new answer with a fresh id from `generate_id`."""
        answer = Answer(id=str(generate_id()), text=text)
        self._append(answer)
        return answer

    def remove(self, answer_id: str) -> bool:
        """Drop the answer with this id. Returns False (no error) when absent."""
        for i, answer in enumerate(self._answers):
            if answer.id == answer_id:
                del self._answers[i]
                return True
        return False

    def update_text(self, answer_id: str, text: str) -> bool:
        answer = self.get(answer_id)
        if answer is None:
            return False
        answer.text = text
        return True

    def shuffle(self, rng) -> None:
        """In-place shuffle (display only, never persisted)."""
        rng.shuffle(self._answers)

    # ---- internals -----------------------------------------------------------
    def _append(self, answer: Answer) -> None:
        if answer.id in self:
            raise ValueError(f"Duplicate answer id: {answer.id!r}")
        self._answers.append(answer)
