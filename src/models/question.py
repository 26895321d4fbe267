"""
Question models for MockPrep
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class QuestionCategory(str, Enum):
    """Question categories used by the re-examination question bank."""

    MOTIVATION = "Motivation"  # Why this school / major / research
    ACADEMIC = "Academic"      # Theory and hot topics of the major
    BEHAVIORAL = "Behavioral"  # STAR-style leadership, teamwork, conflict
    RESUME = "Resume"          # Deep dive into resume details
    PERSONAL = "Personal"      # Hobbies, books, daily life


class Question(BaseModel):
    """A single practice question. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Identification
    id: str = Field(..., description="Unique question ID")

    # Classification
    category: QuestionCategory = Field(..., description="Question category")

    # Content
    text: str = Field(
        ...,
        validation_alias="question",
        description="Question text in the primary language (Chinese)"
    )
    text_en: str | None = Field(
        default=None,
        validation_alias="questionEN",
        description="Question text in the secondary language (English)"
    )

    # Coaching guidance
    intent: str = Field(default="", description="What the interviewer is probing for")
    structure: str = Field(default="", description="Recommended answer structure")
    key_points: str = Field(
        default="",
        validation_alias="keyPoints",
        description="Resume details worth mentioning"
    )
    recommended_answer: str | None = Field(
        default=None,
        validation_alias="recommendedAnswer",
        description="A full sample answer"
    )

    def display_text(self, is_english_round: bool) -> str:
        """Text shown to the candidate for a round in the given language."""
        if is_english_round and self.text_en:
            return self.text_en
        return self.text


class GeneratedQuestion(BaseModel):
    """One item of the question-generation structured response."""

    model_config = ConfigDict(populate_by_name=True)

    category: QuestionCategory
    question: str = Field(..., min_length=1)
    question_en: str = Field(..., validation_alias="questionEN")
    intent: str
    structure: str
    key_points: str = Field(..., validation_alias="keyPoints")
    recommended_answer: str = Field(..., validation_alias="recommendedAnswer")

    def to_question(self, question_id: str) -> Question:
        """Attach an ID and turn the generated item into a bank Question."""
        return Question(
            id=question_id,
            category=self.category,
            question=self.question,
            questionEN=self.question_en,
            intent=self.intent,
            structure=self.structure,
            keyPoints=self.key_points,
            recommendedAnswer=self.recommended_answer,
        )


class GeneratedQuestionSet(BaseModel):
    """Structured response of the question-generation call."""

    items: list[GeneratedQuestion]


class BankQuestion(Question):
    """A bank question as listed to the client, with its practice count."""

    practice_count: int = Field(
        default=0,
        validation_alias="practiceCount",
        description="Saved sessions that used this question"
    )
