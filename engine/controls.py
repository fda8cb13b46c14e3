"""
Render-ready description of the answer controls.

Rendering itself lives in the client; this only decides control kind, input group
and checked state. single -> radios sharing one group, multiple -> checkboxes each
grouped by their own id.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Tuple

from models.answers import Answer, QuizConfigurationError

SHARED_GROUP = "answer"


@dataclass
class AnswerControl:
    kind: str       # "radio" | "checkbox"
    group: str      # input name; shared by all radios
    value: str      # answer id
    text: str
    checked: bool


def build_controls(answers: Iterable[Answer], mode: Any, checked: Mapping[str, bool]) -> List[AnswerControl]:
    # QuizMode or the raw string from setup data
    value = getattr(mode, "value", mode)
    if value == "multiple":
        kind = "checkbox"
    elif value == "single":
        kind = "radio"
    else:
        raise QuizConfigurationError(f"Not Implemented: {mode!r}")

    controls = []
    for answer in answers:
        controls.append(AnswerControl(
            kind=kind,
            group=answer.id if kind == "checkbox" else SHARED_GROUP,
            value=answer.id,
            text=answer.text,
            checked=bool(checked.get(answer.id, False)),
        ))
    return controls


def checked_pairs(controls: Iterable[AnswerControl]) -> List[Tuple[str, bool]]:
    """(value, checked) for each control, the input to a full rescan."""
    return [(c.value, c.checked) for c in controls]
