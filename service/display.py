"""
Display Tool session (learner surface) and its submission evaluator.

The learner only owns their selection. Answers, mode and feedback text are
read-only here, and the criteria are never loaded: grading is done by the host.
"""
from __future__ import annotations
import asyncio
import logging
import random
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from config import settings
from db.host import HostPlatform, SubmitResult, UserStore
from engine.controls import AnswerControl, build_controls, checked_pairs
from engine.join import fire_and_forget
from engine.status import StatusSignal
from models.answers import AnswerSet, QuizMode
from models.criteria import apply_toggle, rescan

logger = logging.getLogger(__name__)


class SubmissionInProgressError(RuntimeError):
    """A submission is already being graded/saved for this learner."""


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


class SubmissionEvaluator:
    """
    idle -> submitting on submit(); back to idle only once the learner's selection
    has been written, so a second submit cannot race the first one's save.
    """

    def __init__(self, user: UserStore, status: StatusSignal, correct_visible: bool = False) -> None:
        self._user = user
        self._status = status
        self.state = SubmissionState.IDLE
        self.correct_visible = correct_visible
        self.incorrect_visible = False
        self.last_saved: Optional[Dict[str, Any]] = None
        self._background: Set[asyncio.Future] = set()

    @property
    def submitting(self) -> bool:
        return self.state is SubmissionState.SUBMITTING

    async def submit(self, controls: List[AnswerControl], callback: Optional[Callable[[], Any]] = None) -> Dict[str, Any]:
        if self.submitting:
            raise SubmissionInProgressError("Submission already in progress")
        self.state = SubmissionState.SUBMITTING
        try:
            selection = rescan(checked_pairs(controls))
            async with self._status.bracket():
                grading = asyncio.ensure_future(self._user.submit(selection))
                fire_and_forget(self._user.log_interaction(), self._background, label="interaction log")
                result: SubmitResult = await grading

                self.correct_visible = result.success
                self.incorrect_visible = not result.success

                self.last_saved = await self._user.replace({"selected": selection, "isCorrect": result.success})
        finally:
            self.state = SubmissionState.IDLE
        logger.info("Submission graded: success=%s", result.success)
        if callback is not None:
            callback()
        return {"selection": selection, "success": result.success, "saved": self.last_saved}


class DisplaySession:
    def __init__(
        self,
        quiz_id: str,
        user_id: str,
        answers: AnswerSet,
        mode: QuizMode,
        selection: Dict[str, bool],
        evaluator: SubmissionEvaluator,
        status: StatusSignal,
        correct_message: str = "",
        incorrect_message: str = "",
    ) -> None:
        self.quiz_id = quiz_id
        self.user_id = user_id
        self.answers = answers
        self.mode = mode
        self.selection = selection
        self.evaluator = evaluator
        self.status = status
        self.correct_message = correct_message
        self.incorrect_message = incorrect_message

    @classmethod
    async def open(cls, host: HostPlatform, quiz_id: str, user_id: str, rng: Optional[random.Random] = None) -> "DisplaySession":
        setup = await host.setup(quiz_id).retrieve() or {}
        user = host.user(quiz_id, user_id)
        saved = await user.retrieve() or {}

        raw_answers = setup.get("answers")
        answers = AnswerSet.from_dicts(settings.default_answers if raw_answers is None else raw_answers)
        mode = QuizMode.parse(setup.get("type") or settings.default_type)
        if setup.get("isShuffled"):
            answers.shuffle(rng or random.Random())

        status = StatusSignal()
        session = cls(
            quiz_id=quiz_id,
            user_id=user_id,
            answers=answers,
            mode=mode,
            selection=dict(saved.get("selected") or {}),
            evaluator=SubmissionEvaluator(user, status, correct_visible=bool(saved.get("isCorrect"))),
            status=status,
            correct_message=setup.get("correctMessage") or "",
            incorrect_message=setup.get("incorrectMessage") or "",
        )
        session.controls()
        return session

    @property
    def saving(self) -> bool:
        return self.status.saving

    def controls(self) -> List[AnswerControl]:
        return build_controls(self.answers, self.mode, self.selection)

    def toggle(self, answer_id: str) -> bool:
        if answer_id not in self.answers:
            return False
        apply_toggle(self.selection, answer_id, self.mode)
        return True

    async def submit(self, callback: Optional[Callable[[], Any]] = None) -> Dict[str, Any]:
        outcome = await self.evaluator.submit(self.controls(), callback)
        self.selection = dict(outcome["selection"])
        return outcome
