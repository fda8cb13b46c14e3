"""
Authoring state for one quiz: answers, mode, feedback text and criteria.

Replaces module-level globals with one object per session. `revision` bumps on
every local edit so a save can tell whether the host's reply is still current.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.answers import AnswerSet, QuizMode
from models.criteria import CriteriaMap

FEEDBACK_KINDS = ("correct", "incorrect")


@dataclass
class QuizState:
    answers: AnswerSet
    mode: QuizMode
    criteria: CriteriaMap
    correct_message: str = ""
    incorrect_message: str = ""
    is_shuffled: bool = False
    revision: int = field(default=0, compare=False)

    @classmethod
    def from_documents(
        cls,
        setup: Optional[Dict[str, Any]],
        criteria: Optional[Dict[str, bool]],
        default_answers: List[Dict[str, str]],
        default_type: str,
        default_criteria: Dict[str, bool],
    ) -> "QuizState":
        setup = setup or {}
        answers = setup.get("answers")
        return cls(
            answers=AnswerSet.from_dicts(default_answers if answers is None else answers),
            mode=QuizMode.parse(setup.get("type") or default_type),
            criteria=CriteriaMap(criteria if criteria is not None else default_criteria),
            correct_message=setup.get("correctMessage") or "",
            incorrect_message=setup.get("incorrectMessage") or "",
            is_shuffled=bool(setup.get("isShuffled", False)),
        )

    def touch(self) -> None:
        self.revision += 1

    def set_feedback(self, kind: str, text: str) -> None:
        if kind == "correct":
            self.correct_message = text
        elif kind == "incorrect":
            self.incorrect_message = text
        else:
            raise ValueError(f"Unknown feedback kind: {kind!r}")
        self.touch()

    def setup_document(self) -> Dict[str, Any]:
        return {
            "answers": self.answers.to_dicts(),
            "type": self.mode.value,
            "correctMessage": self.correct_message,
            "incorrectMessage": self.incorrect_message,
            "isShuffled": self.is_shuffled,
        }

    def adopt_setup(self, doc: Dict[str, Any]) -> None:
        """Take the host's normalised copy as the new truth (does not bump revision)."""
        self.answers = AnswerSet.from_dicts(doc.get("answers") or [])
        self.mode = QuizMode.parse(doc.get("type"))
        self.correct_message = doc.get("correctMessage") or ""
        self.incorrect_message = doc.get("incorrectMessage") or ""
        self.is_shuffled = bool(doc.get("isShuffled", False))
