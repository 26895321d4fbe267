"""
Mock interview API endpoints

Handles the mock session lifecycle:
- Creating and starting sessions
- Recording (chunked upload) or typing answers
- Skipping rounds
- Ending sessions early
"""

from fastapi import APIRouter, HTTPException, UploadFile, File
from pydantic import BaseModel

from src.api.dependencies import get_question_bank, get_registry
from src.core.answer_capture import UploadedAnswerCapture
from src.core.errors import (
    DeviceUnavailable,
    EmptyAnswer,
    InsufficientQuestionPool,
    StateTransitionError,
)
from src.core.session_controller import ROUNDS_PER_SESSION, SessionController
from src.models.question import Question
from src.models.session import RoundResult, SessionState

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CreateSessionRequest(BaseModel):
    """Request model for a new mock session."""
    question_ids: list[str] | None = None
    questions: list[Question] | None = None


class TextAnswerRequest(BaseModel):
    """Request model for a typed answer."""
    answer: str


class RoundView(BaseModel):
    """The round currently presented."""
    index: int
    question_id: str
    question_text: str
    category: str
    is_english_round: bool


class RoundResultView(BaseModel):
    """A finalized round (audio omitted)."""
    question_id: str
    question_text: str
    is_english_round: bool
    transcription: str
    feedback: str
    text_answer: str | None = None
    has_audio: bool = False
    skipped: bool = False


class SessionStatusResponse(BaseModel):
    """Snapshot of a mock session."""
    session_id: str
    state: str
    total_rounds: int
    current_round: RoundView | None = None
    results: list[RoundResultView]
    exit_pending: bool = False
    outcome: str | None = None


class ChunkResponse(BaseModel):
    """Bytes buffered for the open recording."""
    session_id: str
    buffered_bytes: int


def _result_view(result: RoundResult) -> RoundResultView:
    return RoundResultView(
        question_id=result.question_id,
        question_text=result.question_text,
        is_english_round=result.is_english_round,
        transcription=result.transcription,
        feedback=result.feedback,
        text_answer=result.text_answer,
        has_audio=result.audio is not None,
        skipped=result.skipped,
    )


def _status(controller: SessionController) -> SessionStatusResponse:
    current = controller.current_round
    return SessionStatusResponse(
        session_id=controller.session_id,
        state=controller.state.value,
        total_rounds=ROUNDS_PER_SESSION,
        current_round=RoundView(
            index=controller.current_index,
            question_id=current.question.id,
            question_text=current.display_text,
            category=current.question.category.value,
            is_english_round=current.is_english_round,
        ) if current else None,
        results=[_result_view(result) for result in controller.results],
        exit_pending=controller.exit_pending,
        outcome=controller.outcome.status.value if controller.outcome else None,
    )


def _get_controller(session_id: str) -> SessionController:
    controller = get_registry().get(session_id)
    if not controller:
        raise HTTPException(status_code=404, detail="Session not found")
    return controller


def _finish(controller: SessionController) -> SessionStatusResponse:
    """Snapshot the session, dropping it from the registry once terminal."""
    status = _status(controller)
    if controller.is_terminal:
        get_registry().discard(controller.session_id)
    return status


# ============================================================================
# REST ENDPOINTS
# ============================================================================

@router.post("", response_model=SessionStatusResponse)
async def create_session(request: CreateSessionRequest) -> SessionStatusResponse:
    """
    Create a mock session and present the first question.

    The pool is the supplied questions, the named bank questions,
    or the whole question bank.
    """
    bank = get_question_bank()
    if request.questions is not None:
        pool = request.questions
    elif request.question_ids is not None:
        pool = [q for q in (bank.get(qid) for qid in request.question_ids) if q]
    else:
        pool = bank.all()

    try:
        controller = await get_registry().create(pool)
    except InsufficientQuestionPool as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _status(controller)


@router.get("/{session_id}", response_model=SessionStatusResponse)
async def get_session_status(session_id: str) -> SessionStatusResponse:
    """Get the current status of a mock session."""
    return _status(_get_controller(session_id))


@router.post("/{session_id}/recording/start", response_model=SessionStatusResponse)
async def start_recording(session_id: str) -> SessionStatusResponse:
    """Open the recording slot for the current round."""
    controller = _get_controller(session_id)
    try:
        await controller.begin_recording()
    except DeviceUnavailable as e:
        raise HTTPException(status_code=409, detail=f"Recording unavailable: {e}")
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _status(controller)


@router.post("/{session_id}/recording/chunk", response_model=ChunkResponse)
async def upload_chunk(session_id: str, audio: UploadFile = File(...)) -> ChunkResponse:
    """Append recorded audio to the open recording."""
    controller = _get_controller(session_id)
    handle = controller.capture_handle
    if controller.state != SessionState.RECORDING or handle is None:
        raise HTTPException(status_code=409, detail="No recording in progress")
    if not isinstance(controller.capture, UploadedAnswerCapture):
        raise HTTPException(status_code=409, detail="Session does not accept uploads")

    if audio.content_type and audio.content_type.startswith("audio/"):
        handle.mime_type = audio.content_type

    try:
        buffered = controller.capture.append_chunk(handle, await audio.read())
    except DeviceUnavailable as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ChunkResponse(session_id=session_id, buffered_bytes=buffered)


@router.post("/{session_id}/recording/stop", response_model=SessionStatusResponse)
async def stop_recording(session_id: str) -> SessionStatusResponse:
    """Close the recording and evaluate it."""
    controller = _get_controller(session_id)
    try:
        await controller.stop_recording()
    except DeviceUnavailable as e:
        raise HTTPException(status_code=409, detail=f"Recording lost: {e}")
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _finish(controller)


@router.post("/{session_id}/text-mode", response_model=SessionStatusResponse)
async def choose_text_mode(session_id: str) -> SessionStatusResponse:
    """Answer the current round by typing."""
    controller = _get_controller(session_id)
    try:
        await controller.choose_text_mode()
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _status(controller)


@router.post("/{session_id}/answer", response_model=SessionStatusResponse)
async def submit_text_answer(
    session_id: str,
    request: TextAnswerRequest,
) -> SessionStatusResponse:
    """Submit a typed answer for evaluation."""
    controller = _get_controller(session_id)
    try:
        await controller.submit_text(request.answer)
    except EmptyAnswer as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _finish(controller)


@router.post("/{session_id}/skip", response_model=SessionStatusResponse)
async def skip_round(session_id: str) -> SessionStatusResponse:
    """Skip the current round."""
    controller = _get_controller(session_id)
    try:
        await controller.skip()
    except StateTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _finish(controller)


@router.post("/{session_id}/exit", response_model=SessionStatusResponse)
async def exit_session(session_id: str) -> SessionStatusResponse:
    """
    End the session early.

    Finalized rounds are saved to history. If an answer is being
    evaluated, the exit takes effect once it is recorded.
    """
    controller = _get_controller(session_id)
    await controller.request_exit()
    return _finish(controller)
