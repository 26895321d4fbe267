"""
Mock interview session models for MockPrep
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from src.models.question import Question


class SessionState(str, Enum):
    """Mock session state machine states."""

    READY = "ready"                  # Question pool supplied, not started
    QUESTION = "question"            # Current round's prompt displayed
    RECORDING = "recording"          # Capture device held open
    AWAITING_TEXT = "awaiting_text"  # Waiting for a typed answer
    PROCESSING = "processing"        # Evaluation call in flight
    DONE = "done"                    # All rounds finalized
    EARLY_EXIT = "early_exit"        # Candidate left before the last round


class SessionStatus(str, Enum):
    """How a session ended, as reported to the caller."""

    COMPLETED = "completed"
    ENDED_EARLY = "ended_early"  # Partial rounds saved
    CANCELLED = "cancelled"      # Nothing finalized, nothing saved


class SelectedQuestion(BaseModel):
    """One entry of the round selection."""

    model_config = ConfigDict(frozen=True)

    question: Question
    is_english_round: bool = False

    @property
    def display_text(self) -> str:
        return self.question.display_text(self.is_english_round)


class AudioAnswer(BaseModel):
    """A recorded spoken answer."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["audio"] = "audio"
    data: bytes
    mime_type: str = "audio/webm"


class TextAnswer(BaseModel):
    """A typed answer."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


AnswerPayload = Annotated[AudioAnswer | TextAnswer, Field(discriminator="kind")]


class EvaluationOutcome(BaseModel):
    """Transcription and feedback for one answer."""

    transcription: str
    feedback: str
    degraded: bool = Field(
        default=False,
        description="True when produced by the fallback path"
    )


class RoundResult(BaseModel):
    """The finalized outcome of one round."""

    model_config = ConfigDict(frozen=True)

    question_id: str
    question_text: str
    is_english_round: bool
    transcription: str
    feedback: str

    # Raw artifacts
    audio: bytes | None = None
    audio_mime_type: str | None = None
    text_answer: str | None = None

    skipped: bool = False


class Session(BaseModel):
    """A finalized practice session handed to the history store."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    rounds: tuple[RoundResult, ...] = ()


class SessionOutcome(BaseModel):
    """Terminal report of a controller to its caller."""

    status: SessionStatus
    session: Session | None = None
    rounds: tuple[RoundResult, ...] = ()
