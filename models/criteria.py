"""
Correctness criteria: answer id -> "is part of the correct selection".

WHAT:
- Discrete updates for toggle intents (radio vs checkbox semantics).
- A full rebuild from rendered controls, kept for parity with rescans.
- `reconcile` purges entries whose answer no longer exists. It must run right
  before every criteria persist, otherwise a deleted answer's correctness
  comes back on the next load.
"""
from __future__ import annotations
import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from models.answers import QuizMode

logger = logging.getLogger(__name__)


def apply_toggle(mapping: Dict[str, bool], answer_id: str, mode: QuizMode) -> None:
    """
    Apply one toggle intent to a selection-like mapping.

    single: the toggled answer becomes the only True entry (a radio cannot be unchecked
    by clicking it again). multiple: the entry flips.
    """
    if mode is QuizMode.SINGLE:
        for key in mapping:
            mapping[key] = False
        mapping[answer_id] = True
    elif mode is QuizMode.MULTIPLE:
        mapping[answer_id] = not mapping.get(answer_id, False)
    else:  # pragma: no cover - QuizMode is closed
        raise ValueError(f"Unsupported mode: {mode!r}")


def rescan(controls: Iterable[Tuple[str, bool]]) -> Dict[str, bool]:
    """Rebuild a mapping from (value, checked) pairs of every rendered control."""
    return {str(value): bool(checked) for value, checked in controls}


class CriteriaMap:
    def __init__(self, data: Optional[Mapping[str, bool]] = None) -> None:
        self._data: Dict[str, bool] = {str(k): bool(v) for k, v in (data or {}).items()}

    # ---- Queries -------------------------------------------------------------
    def __contains__(self, answer_id: object) -> bool:
        return answer_id in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def to_dict(self) -> Dict[str, bool]:
        return dict(self._data)

    # ---- Mutations -----------------------------------------------------------
    def set(self, answer_id: str, correct: bool) -> None:
        self._data[answer_id] = bool(correct)

    def toggle(self, answer_id: str, mode: QuizMode) -> None:
        apply_toggle(self._data, answer_id, mode)

    def rebuild_from_controls(self, controls: Iterable[Tuple[str, bool]]) -> None:
        """Replace every entry with the checked state of the rendered controls."""
        self._data = rescan(controls)

    def reconcile(self, answer_ids: Iterable[str]) -> List[str]:
        """Delete entries for answers that no longer exist. Returns the purged ids."""
        live = set(answer_ids)
        orphans = [key for key in self._data if key not in live]
        for key in orphans:
            del self._data[key]
        if orphans:
            logger.debug("Purged criteria for removed answers: %s", orphans)
        return orphans


def grade(selection: Mapping[str, bool], criteria: Mapping[str, bool], answer_ids: Iterable[str]) -> bool:
    """
    True iff every answer's selected state matches its criteria value.
    Missing entries on either side count as False.
    """
    return all(
        bool(selection.get(answer_id, False)) == bool(criteria.get(answer_id, False))
        for answer_id in answer_ids
    )
