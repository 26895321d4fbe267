"""
History API endpoints

Lists finished mock sessions, newest first.
"""

import base64
from datetime import datetime

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from src.api.dependencies import get_history_store
from src.models.session import Session

router = APIRouter()


class HistoryRound(BaseModel):
    """A round as shown in history, audio inlined as base64."""
    question_id: str
    question_text: str
    is_english_round: bool
    transcription: str
    feedback: str
    text_answer: str | None = None
    audio_base64: str | None = None
    audio_mime_type: str | None = None
    skipped: bool = False


class HistorySession(BaseModel):
    """A finished session."""
    id: str
    created_at: datetime
    rounds: list[HistoryRound]


def _to_view(session: Session) -> HistorySession:
    return HistorySession(
        id=session.id,
        created_at=session.created_at,
        rounds=[
            HistoryRound(
                question_id=r.question_id,
                question_text=r.question_text,
                is_english_round=r.is_english_round,
                transcription=r.transcription,
                feedback=r.feedback,
                text_answer=r.text_answer,
                audio_base64=base64.b64encode(r.audio).decode("ascii") if r.audio else None,
                audio_mime_type=r.audio_mime_type,
                skipped=r.skipped,
            )
            for r in session.rounds
        ],
    )


@router.get("", response_model=list[HistorySession])
async def list_history() -> list[HistorySession]:
    return [_to_view(session) for session in get_history_store().list()]


@router.get("/{session_id}", response_model=HistorySession)
async def get_history_session(session_id: str) -> HistorySession:
    session = get_history_store().get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return _to_view(session)
