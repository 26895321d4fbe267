"""
Data models and schemas for MockPrep

Contains Pydantic models for:
- Practice questions
- Resume analysis results
- Mock interview sessions, answers and round results
"""

from src.models.question import (
    BankQuestion,
    Question,
    QuestionCategory,
    GeneratedQuestion,
    GeneratedQuestionSet,
)
from src.models.analysis import (
    AnalysisResult,
    CompetencyLevel,
    IntroStyle,
    ResumeFile,
    ResumeInput,
    SelfIntro,
    StrengthItem,
)
from src.models.session import (
    AnswerPayload,
    AudioAnswer,
    EvaluationOutcome,
    RoundResult,
    SelectedQuestion,
    Session,
    SessionOutcome,
    SessionState,
    SessionStatus,
    TextAnswer,
)

__all__ = [
    # Question
    "BankQuestion",
    "Question",
    "QuestionCategory",
    "GeneratedQuestion",
    "GeneratedQuestionSet",
    # Analysis
    "AnalysisResult",
    "CompetencyLevel",
    "IntroStyle",
    "ResumeFile",
    "ResumeInput",
    "SelfIntro",
    "StrengthItem",
    # Session
    "AnswerPayload",
    "AudioAnswer",
    "EvaluationOutcome",
    "RoundResult",
    "SelectedQuestion",
    "Session",
    "SessionOutcome",
    "SessionState",
    "SessionStatus",
    "TextAnswer",
]
