"""
Core business logic modules for MockPrep

Contains:
- Session Controller: State machine for one mock interview session
- Evaluation Gateway: AI analysis, answer evaluation and speech synthesis
- Retryable Invoker: Bounded retries with exponential backoff
- Answer Capture: Recording and typed-answer adapters
- History Store: Finished session storage
"""

from src.core.session_controller import SessionController
from src.core.evaluation_gateway import EvaluationGateway
from src.core.retry import RetryableInvoker, RetryPolicy
from src.core.answer_capture import AnswerCapture, UploadedAnswerCapture, TextOnlyAnswerCapture
from src.core.history_store import InMemorySessionHistoryStore, SessionHistoryStore
from src.core.question_bank import QuestionBank
from src.core.session_registry import SessionRegistry

__all__ = [
    "SessionController",
    "EvaluationGateway",
    "RetryableInvoker",
    "RetryPolicy",
    "AnswerCapture",
    "UploadedAnswerCapture",
    "TextOnlyAnswerCapture",
    "InMemorySessionHistoryStore",
    "SessionHistoryStore",
    "QuestionBank",
    "SessionRegistry",
]
