import pytest

from engine.controls import SHARED_GROUP, build_controls
from models.answers import AnswerSet, QuizConfigurationError, QuizMode


@pytest.fixture
def answers():
    return AnswerSet.from_dicts([{"id": "1", "text": "A"}, {"id": "2", "text": "B"}])


def test_single_mode_renders_radios_in_one_group(answers):
    controls = build_controls(answers, QuizMode.SINGLE, {"1": True})
    assert [c.kind for c in controls] == ["radio", "radio"]
    assert {c.group for c in controls} == {SHARED_GROUP}
    assert [c.checked for c in controls] == [True, False]


def test_multiple_mode_groups_by_answer_id(answers):
    controls = build_controls(answers, "multiple", {"2": True})
    assert [c.kind for c in controls] == ["checkbox", "checkbox"]
    assert [c.group for c in controls] == ["1", "2"]
    assert [(c.value, c.text, c.checked) for c in controls] == [("1", "A", False), ("2", "B", True)]


def test_unknown_mode_refuses_to_render(answers):
    with pytest.raises(QuizConfigurationError, match="dropdown"):
        build_controls(answers, "dropdown", {})
