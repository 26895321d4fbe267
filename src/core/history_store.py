"""
Session history storage for MockPrep

The controller only needs ``save``. The in-memory store also serves the
history endpoints.
"""

import logging
from typing import Protocol

from src.models.session import Session

logger = logging.getLogger(__name__)


class SessionHistoryStore(Protocol):
    """Receives one finalized Session per completed or early-exited session."""

    async def save(self, session: Session) -> None: ...


class InMemorySessionHistoryStore:
    """Newest-first session history kept in process memory."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    async def save(self, session: Session) -> None:
        self._sessions[session.id] = session
        logger.info(f"Saved session {session.id} with {len(session.rounds)} rounds")

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def list(self) -> list[Session]:
        return sorted(self._sessions.values(), key=lambda s: s.created_at, reverse=True)
