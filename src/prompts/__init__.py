"""
AI prompt templates for MockPrep

Contains structured prompts and response schemas for:
- Resume analysis
- Question generation
- Answer evaluation
"""

from src.prompts.coach import CoachPrompts
from src.prompts.schemas import ANALYSIS_SCHEMA, EVALUATION_SCHEMA, QUESTIONS_SCHEMA

__all__ = [
    "CoachPrompts",
    "ANALYSIS_SCHEMA",
    "EVALUATION_SCHEMA",
    "QUESTIONS_SCHEMA",
]
