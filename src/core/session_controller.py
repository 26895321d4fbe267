"""
Session Controller - State machine for one mock interview session.

Sequences question presentation, answer capture and evaluation for a
fixed three-round session (two rounds in the primary language, the last
one in English), then hands the finished session to the history store.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Sequence
from uuid import uuid4

from src.core.answer_capture import AnswerCapture, CaptureHandle
from src.core.errors import (
    DeviceUnavailable,
    EmptyAnswer,
    InsufficientQuestionPool,
    StateTransitionError,
)
from src.core.history_store import SessionHistoryStore
from src.models.question import Question
from src.models.session import (
    AnswerPayload,
    AudioAnswer,
    RoundResult,
    SelectedQuestion,
    Session,
    SessionOutcome,
    SessionState,
    SessionStatus,
    TextAnswer,
)

logger = logging.getLogger(__name__)

ROUNDS_PER_SESSION = 3
ENGLISH_ROUND_INDEX = ROUNDS_PER_SESSION - 1

SKIPPED_TRANSCRIPTION = "Skipped"
SKIPPED_FEEDBACK = "Question skipped."

StateCallback = Callable[[str, SessionState, SessionState], Awaitable[None]]
SavedCallback = Callable[[Session], Awaitable[None]]


class SessionController:
    """
    Drives one session through its rounds.

    States:
        READY → QUESTION → (RECORDING | AWAITING_TEXT) → PROCESSING → (QUESTION | DONE)

    EARLY_EXIT is reachable from every non-terminal state. An exit requested
    while PROCESSING is deferred until that round's result is recorded.
    """

    VALID_TRANSITIONS: dict[SessionState, list[SessionState]] = {
        SessionState.READY: [SessionState.QUESTION, SessionState.EARLY_EXIT],
        SessionState.QUESTION: [
            SessionState.RECORDING,
            SessionState.AWAITING_TEXT,
            SessionState.QUESTION,  # skipped to the next round
            SessionState.DONE,
            SessionState.EARLY_EXIT,
        ],
        SessionState.RECORDING: [
            SessionState.PROCESSING,
            SessionState.QUESTION,
            SessionState.DONE,
            SessionState.EARLY_EXIT,
        ],
        SessionState.AWAITING_TEXT: [
            SessionState.PROCESSING,
            SessionState.RECORDING,
            SessionState.QUESTION,
            SessionState.DONE,
            SessionState.EARLY_EXIT,
        ],
        SessionState.PROCESSING: [SessionState.QUESTION, SessionState.DONE, SessionState.EARLY_EXIT],
        SessionState.DONE: [],  # Terminal state
        SessionState.EARLY_EXIT: [],  # Terminal state
    }

    def __init__(
        self,
        question_pool: Sequence[Question],
        gateway,  # EvaluationGateway
        capture: AnswerCapture,
        history_store: SessionHistoryStore,
        rng: random.Random | None = None,
        session_id: str | None = None,
    ):
        """
        Args:
            question_pool: Questions to draw from (at least 3 distinct)
            gateway: Evaluation gateway used in PROCESSING
            capture: Answer capture adapter owned by this session
            history_store: Receives the finalized Session
            rng: Random source for question selection
            session_id: Controller ID, generated if omitted
        """
        self.session_id = session_id or str(uuid4())
        self.gateway = gateway
        self.capture = capture
        self.history_store = history_store
        self._pool = list(question_pool)
        self._rng = rng or random.Random()

        self._state = SessionState.READY
        self._selection: tuple[SelectedQuestion, ...] = ()
        self._index = 0
        self._results: list[RoundResult] = []
        self._handle: CaptureHandle | None = None
        self._exit_requested = False
        self._outcome: SessionOutcome | None = None

        self._lock = asyncio.Lock()
        self._state_change_callbacks: list[StateCallback] = []
        self._saved_callbacks: list[SavedCallback] = []

    # =========================================================================
    # INSPECTION
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def selection(self) -> tuple[SelectedQuestion, ...]:
        return self._selection

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_round(self) -> SelectedQuestion | None:
        if self.is_terminal or not self._selection:
            return None
        return self._selection[self._index]

    @property
    def results(self) -> tuple[RoundResult, ...]:
        return tuple(self._results)

    @property
    def outcome(self) -> SessionOutcome | None:
        return self._outcome

    @property
    def is_terminal(self) -> bool:
        return self._state in (SessionState.DONE, SessionState.EARLY_EXIT)

    @property
    def exit_pending(self) -> bool:
        return self._exit_requested and not self.is_terminal

    @property
    def capture_handle(self) -> CaptureHandle | None:
        return self._handle

    def on_state_change(self, callback: StateCallback) -> None:
        """Register an async callback ``(session_id, old_state, new_state)``."""
        self._state_change_callbacks.append(callback)

    def on_session_saved(self, callback: SavedCallback) -> None:
        """Register an async callback run after the Session reaches the history store."""
        self._saved_callbacks.append(callback)

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    async def _transition(self, new_state: SessionState) -> None:
        old_state = self._state
        if new_state not in self.VALID_TRANSITIONS[old_state]:
            raise StateTransitionError(
                f"Invalid transition from {old_state.value} to {new_state.value}"
            )

        self._state = new_state
        logger.info(f"Session {self.session_id}: {old_state.value} → {new_state.value}")

        for callback in self._state_change_callbacks:
            try:
                await callback(self.session_id, old_state, new_state)
            except Exception as e:
                logger.error(f"State change callback error: {e}")

    def _require(self, action: str, *states: SessionState) -> None:
        if self._state not in states:
            raise StateTransitionError(f"Cannot {action} in state: {self._state.value}")

    # =========================================================================
    # SESSION FLOW
    # =========================================================================

    async def start_session(self) -> tuple[SelectedQuestion, ...]:
        """
        Draw the round selection and present the first question.

        Raises:
            InsufficientQuestionPool: If the pool has fewer than 3 distinct questions
        """
        async with self._lock:
            self._require("start session", SessionState.READY)

            distinct = list({question.id: question for question in self._pool}.values())
            if len(distinct) < ROUNDS_PER_SESSION:
                raise InsufficientQuestionPool(len(distinct), ROUNDS_PER_SESSION)

            picked = self._rng.sample(distinct, ROUNDS_PER_SESSION)
            # Whatever was drawn into the last slot is answered in English
            self._selection = tuple(
                SelectedQuestion(question=question, is_english_round=index == ENGLISH_ROUND_INDEX)
                for index, question in enumerate(picked)
            )
            self._index = 0

            logger.info(
                f"Session {self.session_id} selected questions: "
                f"{[entry.question.id for entry in self._selection]}"
            )
            await self._transition(SessionState.QUESTION)
            return self._selection

    async def begin_recording(self) -> CaptureHandle:
        """
        Open the capture device for the current round.

        Raises:
            DeviceUnavailable: Device or permission refused; state is unchanged
        """
        async with self._lock:
            self._require("start recording", SessionState.QUESTION, SessionState.AWAITING_TEXT)

            handle = await self.capture.begin_audio_capture()
            self._handle = handle
            await self._transition(SessionState.RECORDING)
            return handle

    async def choose_text_mode(self) -> None:
        async with self._lock:
            self._require("switch to text mode", SessionState.QUESTION)
            await self._transition(SessionState.AWAITING_TEXT)

    async def stop_recording(self) -> RoundResult:
        """
        Close the recording and evaluate it.

        Raises:
            DeviceUnavailable: The recording was lost; the round goes back
                to QUESTION so it can be answered by text or skipped
        """
        async with self._lock:
            self._require("stop recording", SessionState.RECORDING)

            handle, self._handle = self._handle, None
            try:
                answer = await self.capture.end_audio_capture(handle)
            except DeviceUnavailable:
                logger.warning(f"Session {self.session_id}: recording lost on stop")
                await self._transition(SessionState.QUESTION)
                raise
            return await self._process(answer)

    async def submit_text(self, value: str) -> RoundResult:
        """
        Evaluate a typed answer.

        Raises:
            EmptyAnswer: If the answer is blank; state is unchanged
        """
        async with self._lock:
            self._require("submit text", SessionState.AWAITING_TEXT)
            if not value or not value.strip():
                raise EmptyAnswer("Answer text is empty")

            return await self._process(self.capture.submit_text(value))

    async def skip(self) -> RoundResult:
        """Finalize the current round as skipped without evaluating it."""
        async with self._lock:
            self._require(
                "skip",
                SessionState.QUESTION,
                SessionState.AWAITING_TEXT,
                SessionState.RECORDING,
            )
            await self._release_capture()

            current = self._selection[self._index]
            result = RoundResult(
                question_id=current.question.id,
                question_text=current.display_text,
                is_english_round=current.is_english_round,
                transcription=SKIPPED_TRANSCRIPTION,
                feedback=SKIPPED_FEEDBACK,
                skipped=True,
            )
            self._results.append(result)
            logger.info(f"Session {self.session_id}: round {self._index} skipped")

            await self._advance()
            return result

    async def request_exit(self) -> SessionOutcome | None:
        """
        End the session early.

        Returns:
            The terminal outcome, or None if the exit was deferred because
            an evaluation is in flight (the outcome is set once it lands)
        """
        if self._state == SessionState.PROCESSING:
            self._exit_requested = True
            logger.info(f"Session {self.session_id}: exit deferred until evaluation completes")
            return None

        async with self._lock:
            if self.is_terminal:
                return self._outcome

            await self._release_capture()
            await self._exit_early()
            return self._outcome

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _process(self, answer: AnswerPayload) -> RoundResult:
        """PROCESSING: evaluate, record, advance. Caller holds the lock."""
        await self._transition(SessionState.PROCESSING)

        current = self._selection[self._index]
        evaluation = await self.gateway.evaluate_answer(
            answer,
            current.display_text,
            current.is_english_round,
        )

        result = RoundResult(
            question_id=current.question.id,
            question_text=current.display_text,
            is_english_round=current.is_english_round,
            transcription=evaluation.transcription,
            feedback=evaluation.feedback,
            audio=answer.data if isinstance(answer, AudioAnswer) else None,
            audio_mime_type=answer.mime_type if isinstance(answer, AudioAnswer) else None,
            text_answer=answer.text if isinstance(answer, TextAnswer) else None,
        )
        self._results.append(result)

        await self._advance()
        return result

    async def _advance(self) -> None:
        """Move past a finalized round."""
        if self._exit_requested:
            await self._exit_early()
        elif self._index < ROUNDS_PER_SESSION - 1:
            self._index += 1
            await self._transition(SessionState.QUESTION)
        else:
            await self._transition(SessionState.DONE)
            await self._finalize(SessionStatus.COMPLETED)

    async def _exit_early(self) -> None:
        await self._transition(SessionState.EARLY_EXIT)
        if self._results:
            await self._finalize(SessionStatus.ENDED_EARLY)
        else:
            self._outcome = SessionOutcome(status=SessionStatus.CANCELLED)
            logger.info(f"Session {self.session_id} cancelled with no finalized rounds")

    async def _finalize(self, status: SessionStatus) -> None:
        session = Session(id=self.session_id, rounds=tuple(self._results))
        self._outcome = SessionOutcome(status=status, session=session, rounds=session.rounds)
        await self.history_store.save(session)

        for callback in self._saved_callbacks:
            try:
                await callback(session)
            except Exception as e:
                logger.error(f"Session saved callback error: {e}")

    async def _release_capture(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            await self.capture.abort_audio_capture(handle)
