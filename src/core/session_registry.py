"""
Registry of live mock sessions.

Each session gets its own controller and capture adapter; the gateway,
history store and question bank are shared. Sessions nobody has touched
for ``session_idle_timeout_seconds`` are ended early and dropped the next
time a session is created.
"""

import logging
import random
import time
from typing import Callable, Sequence

from src.config.settings import Settings, get_settings
from src.core.answer_capture import AnswerCapture, TextOnlyAnswerCapture, UploadedAnswerCapture
from src.core.history_store import SessionHistoryStore
from src.core.question_bank import QuestionBank
from src.core.session_controller import SessionController
from src.models.question import Question
from src.models.session import Session, SessionState

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Creates, looks up and discards SessionControllers."""

    def __init__(
        self,
        gateway,  # EvaluationGateway
        history_store: SessionHistoryStore,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        question_bank: QuestionBank | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.gateway = gateway
        self.history_store = history_store
        self.settings = settings or get_settings()
        self.question_bank = question_bank
        self._rng = rng
        self._clock = clock
        self._controllers: dict[str, SessionController] = {}
        self._last_seen: dict[str, float] = {}

    def _new_capture(self) -> AnswerCapture:
        if self.settings.audio_answers_enabled:
            return UploadedAnswerCapture()
        return TextOnlyAnswerCapture()

    async def _record_practice(self, session: Session) -> None:
        self.question_bank.record_practice(r.question_id for r in session.rounds)

    async def create(self, question_pool: Sequence[Question]) -> SessionController:
        """
        Build a controller and start it.

        Raises:
            InsufficientQuestionPool: The controller is not registered
        """
        await self.expire_idle()

        controller = SessionController(
            question_pool=question_pool,
            gateway=self.gateway,
            capture=self._new_capture(),
            history_store=self.history_store,
            rng=self._rng,
        )
        if self.question_bank is not None:
            controller.on_session_saved(self._record_practice)

        await controller.start_session()
        self._controllers[controller.session_id] = controller
        self._last_seen[controller.session_id] = self._clock()

        logger.info(f"Created mock session: {controller.session_id}")
        return controller

    def get(self, session_id: str) -> SessionController | None:
        controller = self._controllers.get(session_id)
        if controller:
            self._last_seen[session_id] = self._clock()
        return controller

    def discard(self, session_id: str) -> None:
        self._controllers.pop(session_id, None)
        self._last_seen.pop(session_id, None)

    async def expire_idle(self) -> list[str]:
        """
        End and drop sessions idle past the timeout.

        A session mid-evaluation is left alone. Finalized rounds of an
        expired session are saved like any early exit.

        Returns:
            IDs of the expired sessions
        """
        cutoff = self._clock() - self.settings.session_idle_timeout_seconds
        expired = [
            session_id
            for session_id, seen in self._last_seen.items()
            if seen < cutoff and self._controllers[session_id].state != SessionState.PROCESSING
        ]

        for session_id in expired:
            await self._controllers[session_id].request_exit()
            self.discard(session_id)
            logger.info(f"Expired idle mock session: {session_id}")

        return expired

    def __len__(self) -> int:
        return len(self._controllers)
