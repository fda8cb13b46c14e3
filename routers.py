"""
FastAPI routes: the client reports intents, we answer with the state it renders.

Author tool (per quiz):
- POST   /v1/quizzes/{quiz_id}/author                         (open / ready)
- GET    /v1/quizzes/{quiz_id}/author
- POST   /v1/quizzes/{quiz_id}/author/answers                 (add)
- DELETE /v1/quizzes/{quiz_id}/author/answers/{answer_id}     (remove)
- PATCH  /v1/quizzes/{quiz_id}/author/answers/{answer_id}     (edit text)
- POST   /v1/quizzes/{quiz_id}/author/answers/{answer_id}/toggle
- PUT    /v1/quizzes/{quiz_id}/author/mode
- PUT    /v1/quizzes/{quiz_id}/author/feedback/{kind}
- PUT    /v1/quizzes/{quiz_id}/author/shuffle
- POST   /v1/quizzes/{quiz_id}/author/save                    (host "save all")

Display tool (per quiz and learner):
- POST   /v1/quizzes/{quiz_id}/users/{user_id}/display        (open / ready)
- GET    /v1/quizzes/{quiz_id}/users/{user_id}/display
- POST   /v1/quizzes/{quiz_id}/users/{user_id}/display/answers/{answer_id}/toggle
- POST   /v1/quizzes/{quiz_id}/users/{user_id}/display/submit

ASSUMPTION: auth is handled by the host in front of this service.
"""
from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Response
from schemas import (
    AddAnswerRequest, EditTextRequest, ModeRequest, FeedbackRequest, ShuffleRequest,
    AuthorView, DisplayView, ControlPayload, SubmitResponse, UserSelectionDocument,
)
from models.answers import QuizConfigurationError
from models.quiz import FEEDBACK_KINDS
from service.author import AuthorSession
from service.display import DisplaySession, SubmissionInProgressError
from session_service import SessionNotFoundError, SessionService, get_session_service

router = APIRouter(tags=["quiz"])


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


def _controls(session) -> list[ControlPayload]:
    try:
        controls = session.controls()
    except QuizConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return [ControlPayload(**vars(c)) for c in controls]


def _author_view(session: AuthorSession) -> AuthorView:
    state = session.state
    return AuthorView(
        quiz_id=session.quiz_id,
        type=state.mode.value,
        controls=_controls(session),
        correct_message=state.correct_message,
        incorrect_message=state.incorrect_message,
        is_shuffled=state.is_shuffled,
        saving=session.saving,
    )


def _display_view(session: DisplaySession) -> DisplayView:
    return DisplayView(
        quiz_id=session.quiz_id,
        user_id=session.user_id,
        type=session.mode.value,
        controls=_controls(session),
        correct_message=session.correct_message,
        incorrect_message=session.incorrect_message,
        correct_visible=session.evaluator.correct_visible,
        incorrect_visible=session.evaluator.incorrect_visible,
        submitting=session.evaluator.submitting,
        saving=session.saving,
    )


def _author(service: SessionService, quiz_id: str) -> AuthorSession:
    try:
        return service.author(quiz_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _display(service: SessionService, quiz_id: str, user_id: str) -> DisplaySession:
    try:
        return service.display(quiz_id, user_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


# ---- Author ----

@router.post("/quizzes/{quiz_id}/author", response_model=AuthorView)
async def open_author(quiz_id: str, service: SessionService = Depends(get_session_service)) -> AuthorView:
    try:
        session = await service.open_author(quiz_id)
    except QuizConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _author_view(session)


@router.get("/quizzes/{quiz_id}/author", response_model=AuthorView)
async def author_view(quiz_id: str, service: SessionService = Depends(get_session_service)) -> AuthorView:
    return _author_view(_author(service, quiz_id))


@router.post("/quizzes/{quiz_id}/author/answers", response_model=AuthorView, status_code=201)
async def add_answer(quiz_id: str, payload: AddAnswerRequest,
                     service: SessionService = Depends(get_session_service)) -> AuthorView:
    session = _author(service, quiz_id)
    await session.add_answer(payload.text, payload.correct)
    return _author_view(session)


@router.delete("/quizzes/{quiz_id}/author/answers/{answer_id}", response_model=AuthorView)
async def remove_answer(quiz_id: str, answer_id: str,
                        service: SessionService = Depends(get_session_service)) -> AuthorView:
    session = _author(service, quiz_id)
    await session.remove_answer(answer_id)
    return _author_view(session)


@router.patch("/quizzes/{quiz_id}/author/answers/{answer_id}", response_model=AuthorView)
async def edit_answer_text(quiz_id: str, answer_id: str, payload: EditTextRequest,
                           service: SessionService = Depends(get_session_service)) -> AuthorView:
    session = _author(service, quiz_id)
    if payload.commit:
        found = await session.commit_text(answer_id, payload.text)
    else:
        found = session.edit_text(answer_id, payload.text)
    if not found:
        raise HTTPException(status_code=404, detail=f"Unknown answer_id {answer_id}")
    return _author_view(session)


@router.post("/quizzes/{quiz_id}/author/answers/{answer_id}/toggle", response_model=AuthorView)
async def toggle_correctness(quiz_id: str, answer_id: str,
                             service: SessionService = Depends(get_session_service)) -> AuthorView:
    session = _author(service, quiz_id)
    if not await session.toggle_correctness(answer_id):
        raise HTTPException(status_code=404, detail=f"Unknown answer_id {answer_id}")
    return _author_view(session)


@router.put("/quizzes/{quiz_id}/author/mode", response_model=AuthorView)
async def change_mode(quiz_id: str, payload: ModeRequest,
                      service: SessionService = Depends(get_session_service)) -> AuthorView:
    session = _author(service, quiz_id)
    try:
        await session.change_mode(payload.type)
    except QuizConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _author_view(session)


@router.put("/quizzes/{quiz_id}/author/feedback/{kind}", response_model=AuthorView)
async def edit_feedback(quiz_id: str, kind: str, payload: FeedbackRequest,
                        service: SessionService = Depends(get_session_service)) -> AuthorView:
    if kind not in FEEDBACK_KINDS:
        raise HTTPException(status_code=400, detail=f"kind must be one of {', '.join(FEEDBACK_KINDS)}")
    session = _author(service, quiz_id)
    if payload.commit:
        await session.commit_feedback(kind, payload.text)
    else:
        session.edit_feedback(kind, payload.text)
    return _author_view(session)


@router.put("/quizzes/{quiz_id}/author/shuffle", response_model=AuthorView)
async def set_shuffled(quiz_id: str, payload: ShuffleRequest,
                       service: SessionService = Depends(get_session_service)) -> AuthorView:
    session = _author(service, quiz_id)
    await session.set_shuffled(payload.isShuffled)
    return _author_view(session)


@router.post("/quizzes/{quiz_id}/author/save", status_code=202)
async def request_save(quiz_id: str, service: SessionService = Depends(get_session_service)) -> Response:
    _author(service, quiz_id)
    service.host.request_save(quiz_id)
    return Response(status_code=202)


# ---- Display ----

@router.post("/quizzes/{quiz_id}/users/{user_id}/display", response_model=DisplayView)
async def open_display(quiz_id: str, user_id: str,
                       service: SessionService = Depends(get_session_service)) -> DisplayView:
    try:
        session = await service.open_display(quiz_id, user_id)
    except QuizConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _display_view(session)


@router.get("/quizzes/{quiz_id}/users/{user_id}/display", response_model=DisplayView)
async def display_view(quiz_id: str, user_id: str,
                       service: SessionService = Depends(get_session_service)) -> DisplayView:
    return _display_view(_display(service, quiz_id, user_id))


@router.post("/quizzes/{quiz_id}/users/{user_id}/display/answers/{answer_id}/toggle", response_model=DisplayView)
async def toggle_selection(quiz_id: str, user_id: str, answer_id: str,
                           service: SessionService = Depends(get_session_service)) -> DisplayView:
    session = _display(service, quiz_id, user_id)
    if not session.toggle(answer_id):
        raise HTTPException(status_code=404, detail=f"Unknown answer_id {answer_id}")
    return _display_view(session)


@router.post("/quizzes/{quiz_id}/users/{user_id}/display/submit", response_model=SubmitResponse)
async def submit(quiz_id: str, user_id: str,
                 service: SessionService = Depends(get_session_service)) -> SubmitResponse:
    session = _display(service, quiz_id, user_id)
    try:
        outcome = await session.submit()
    except SubmissionInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    saved = outcome["saved"]
    return SubmitResponse(
        success=outcome["success"],
        view=_display_view(session),
        saved=UserSelectionDocument.model_validate(saved) if saved is not None else None,
    )
