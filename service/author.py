"""
Author Tool session (setup surface).

Owns the answers, mode, feedback text and criteria of one quiz while it is being
edited, turns view intents into state changes and picks the save policy for each:

- add / remove / mode change  -> joint save (both documents)
- correctness toggle          -> criteria save
- text edits                  -> debounced setup save, flushed on commit
- host "save all" event       -> fire-and-forget joint save
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Iterable, List, Optional, Tuple

from config import settings
from db.host import HostPlatform
from engine.controls import AnswerControl, build_controls
from models.answers import Answer, QuizMode
from models.quiz import QuizState
from service.persistence import PersistenceCoordinator

logger = logging.getLogger(__name__)


def _answer_key(answer_id: str) -> str:
    return f"answer:{answer_id}"


def _feedback_key(kind: str) -> str:
    return f"feedback:{kind}"


class AuthorSession:
    def __init__(self, host: HostPlatform, quiz_id: str, state: QuizState, coordinator: PersistenceCoordinator) -> None:
        self.host = host
        self.quiz_id = quiz_id
        self.state = state
        self.coordinator = coordinator

    @classmethod
    async def open(cls, host: HostPlatform, quiz_id: str, debounce_delay: Optional[float] = None) -> "AuthorSession":
        """Ready hook: load both documents (or defaults) and subscribe to host saves."""
        setup_store = host.setup(quiz_id)
        criteria_store = host.criteria(quiz_id)
        setup = await setup_store.retrieve()
        criteria = await criteria_store.retrieve()

        state = QuizState.from_documents(
            setup,
            criteria,
            default_answers=settings.default_answers,
            default_type=settings.default_type,
            default_criteria=settings.default_criteria,
        )
        coordinator = PersistenceCoordinator(
            state,
            setup_store,
            criteria_store,
            debounce_delay=settings.debounce_delay if debounce_delay is None else debounce_delay,
        )
        session = cls(host, quiz_id, state, coordinator)
        session.controls()
        host.subscribe_save(quiz_id, session._on_host_save)
        logger.info("Author session opened for quiz %s (%d answers, %s)",
                    quiz_id, len(state.answers), state.mode.value)
        return session

    # ---- View state ----------------------------------------------------------
    @property
    def saving(self) -> bool:
        return self.coordinator.status.saving

    def controls(self) -> List[AnswerControl]:
        return build_controls(self.state.answers, self.state.mode, self.state.criteria.to_dict())

    # ---- Structural intents --------------------------------------------------
    async def add_answer(self, text: str = "", correct: bool = False) -> Answer:
        answer = self.state.answers.add(text, self.host.generate_id)
        self.state.criteria.set(answer.id, correct)
        self.state.touch()
        await self.coordinator.save()
        return answer

    async def remove_answer(self, answer_id: str) -> bool:
        removed = self.state.answers.remove(answer_id)
        if not removed:
            logger.debug("Remove ignored, no answer %s in quiz %s", answer_id, self.quiz_id)
            return False
        self.coordinator.scheduler.discard(_answer_key(answer_id))
        self.state.touch()
        await self.coordinator.save()
        return True

    async def change_mode(self, mode: Any) -> None:
        self.state.mode = QuizMode.parse(mode)
        self.state.touch()
        await self.coordinator.save()

    async def set_shuffled(self, is_shuffled: bool) -> None:
        self.state.is_shuffled = bool(is_shuffled)
        self.state.touch()
        await self.coordinator.save_state()

    # ---- Correctness ---------------------------------------------------------
    async def toggle_correctness(self, answer_id: str) -> bool:
        if answer_id not in self.state.answers:
            return False
        self.state.criteria.toggle(answer_id, self.state.mode)
        await self.coordinator.save_criteria()
        return True

    async def rescan_correctness(self, controls: Iterable[Tuple[str, bool]]) -> None:
        """Rebuild every criteria entry from the rendered controls, then save."""
        self.state.criteria.rebuild_from_controls(controls)
        await self.coordinator.save_criteria()

    # ---- Text intents --------------------------------------------------------
    def edit_text(self, answer_id: str, text: str) -> bool:
        if not self.state.answers.update_text(answer_id, text):
            return False
        self.state.touch()
        self.coordinator.save_debounced(_answer_key(answer_id))
        return True

    async def commit_text(self, answer_id: str, text: str) -> bool:
        if not self.state.answers.update_text(answer_id, text):
            return False
        self.state.touch()
        await self.coordinator.commit(_answer_key(answer_id))
        return True

    def edit_feedback(self, kind: str, text: str) -> None:
        self.state.set_feedback(kind, text)
        self.coordinator.save_debounced(_feedback_key(kind))

    async def commit_feedback(self, kind: str, text: str) -> None:
        self.state.set_feedback(kind, text)
        await self.coordinator.commit(_feedback_key(kind))

    # ---- Whole-quiz saves ----------------------------------------------------
    async def save_all(self, callback: Optional[Callable[[], Any]] = None) -> None:
        await self.coordinator.save(callback)

    def _on_host_save(self) -> None:
        self.coordinator.fire(self.save_all())

    async def close(self) -> None:
        self.host.unsubscribe_save(self.quiz_id, self._on_host_save)
        await self.coordinator.close()
        logger.info("Author session closed for quiz %s", self.quiz_id)
