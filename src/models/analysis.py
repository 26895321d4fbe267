"""
Resume analysis models for MockPrep

The analysis call returns camelCase JSON; fields are read through
validation aliases and exposed in snake_case.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

STRENGTH_COUNT = 4
INTRO_COUNT = 3


class CompetencyLevel(str, Enum):
    """Competitiveness relative to peers."""

    A = "A"  # Top 10%
    B = "B"  # Top 30%
    C = "C"  # Top 60%
    D = "D"  # Others


class IntroStyle(str, Enum):
    """Self-introduction variants."""

    AFFINITY = "Affinity"    # Personality, communication
    ACADEMIC = "Academic"    # Research, reading, rigor
    PRACTICAL = "Practical"  # Internships, projects, potential


class StrengthItem(BaseModel):
    """A key strength with evidence cited from the resume."""

    strength: str
    description: str


class SelfIntro(BaseModel):
    """A bilingual self-introduction in one style."""

    model_config = ConfigDict(populate_by_name=True)

    style: IntroStyle
    title: str
    content_cn: str = Field(..., validation_alias="contentCN")
    content_en: str = Field(..., validation_alias="contentEN")


class AnalysisResult(BaseModel):
    """Structured response of the resume analysis call."""

    model_config = ConfigDict(populate_by_name=True)

    strengths: list[StrengthItem] = Field(
        ...,
        min_length=STRENGTH_COUNT,
        max_length=STRENGTH_COUNT,
    )
    competency_level: CompetencyLevel = Field(..., validation_alias="competencyLevel")
    competency_evaluation: str = Field(..., validation_alias="competencyEvaluation")
    intros: list[SelfIntro] = Field(
        ...,
        min_length=INTRO_COUNT,
        max_length=INTRO_COUNT,
    )


class ResumeFile(BaseModel):
    """A binary resume document forwarded to the service as inline data."""

    mime_type: str
    data: str = Field(..., description="Base64-encoded document bytes")
    name: str = ""


class ResumeInput(BaseModel):
    """Resume content: plain text, or an attached document."""

    text: str = ""
    file: ResumeFile | None = None
