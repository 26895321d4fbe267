"""
API Dependencies

Provides dependency injection for API endpoints.
Manages singleton instances of core components.
"""

from src.core.evaluation_gateway import EvaluationGateway
from src.core.history_store import InMemorySessionHistoryStore
from src.core.question_bank import QuestionBank
from src.core.session_registry import SessionRegistry


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_gateway: EvaluationGateway | None = None
_history_store: InMemorySessionHistoryStore | None = None
_question_bank: QuestionBank | None = None
_registry: SessionRegistry | None = None


def get_gateway() -> EvaluationGateway:
    """Get the evaluation gateway singleton."""
    global _gateway

    if _gateway is None:
        _gateway = EvaluationGateway()

    return _gateway


def get_history_store() -> InMemorySessionHistoryStore:
    """Get the session history store singleton."""
    global _history_store

    if _history_store is None:
        _history_store = InMemorySessionHistoryStore()

    return _history_store


def get_question_bank() -> QuestionBank:
    """Get the question bank singleton."""
    global _question_bank

    if _question_bank is None:
        _question_bank = QuestionBank()

    return _question_bank


def get_registry() -> SessionRegistry:
    """
    Get the mock session registry singleton.

    Lazily initializes the gateway, history store and question bank it depends on.
    """
    global _registry

    if _registry is None:
        _registry = SessionRegistry(
            gateway=get_gateway(),
            history_store=get_history_store(),
            question_bank=get_question_bank(),
        )

    return _registry


async def cleanup():
    """Drop all in-process state on shutdown."""
    global _gateway, _history_store, _question_bank, _registry

    _registry = None
    _question_bank = None
    _history_store = None
    _gateway = None
