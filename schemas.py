"""
Pydantic models for the persisted documents and the HTTP API.

Document field names are camelCase because that is how the host stores them.
"""
from __future__ import annotations
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


# ---- Host documents ----

class AnswerPayload(BaseModel):
    id: str
    text: str = ""


class SetupDocument(BaseModel):
    answers: List[AnswerPayload] = Field(default_factory=list)
    type: str = "single"                          # validated when controls are built
    correctMessage: str = ""
    incorrectMessage: str = ""
    isShuffled: bool = False


class UserSelectionDocument(BaseModel):
    selected: Dict[str, bool] = Field(default_factory=dict)
    isCorrect: bool = False


def normalize_setup(body: dict) -> dict:
    return SetupDocument.model_validate(body).model_dump()


def normalize_criteria(body: dict) -> Dict[str, bool]:
    return {str(k): bool(v) for k, v in (body or {}).items()}


def normalize_selection(body: dict) -> dict:
    return UserSelectionDocument.model_validate(body).model_dump()


# ---- Requests ----

class AddAnswerRequest(BaseModel):
    text: str = ""
    correct: bool = False


class EditTextRequest(BaseModel):
    text: str
    commit: bool = False                          # True on blur/change: skip the debounce


class ModeRequest(BaseModel):
    type: str


class FeedbackRequest(BaseModel):
    text: str
    commit: bool = False


class ShuffleRequest(BaseModel):
    isShuffled: bool


# ---- Responses ----

class ControlPayload(BaseModel):
    kind: str                                     # radio | checkbox
    group: str
    value: str
    text: str
    checked: bool


class AuthorView(BaseModel):
    quiz_id: str
    type: str
    controls: List[ControlPayload]
    correct_message: str
    incorrect_message: str
    is_shuffled: bool
    saving: bool


class DisplayView(BaseModel):
    quiz_id: str
    user_id: str
    type: str
    controls: List[ControlPayload]
    correct_message: str
    incorrect_message: str
    correct_visible: bool
    incorrect_visible: bool
    submitting: bool
    saving: bool


class SubmitResponse(BaseModel):
    success: bool
    view: DisplayView
    saved: Optional[UserSelectionDocument] = None
