"""
Response schemas sent with structured generation requests.

Written in the service's OpenAPI subset; parsed results are validated
again with the pydantic models in ``src.models``.
"""

from src.models.analysis import CompetencyLevel, IntroStyle
from src.models.question import QuestionCategory

ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "strengths": {
            "type": "ARRAY",
            "description": "List of 4 key capability strengths with evidence.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "strength": {"type": "STRING"},
                    "description": {"type": "STRING"},
                },
                "required": ["strength", "description"],
            },
        },
        "competencyLevel": {
            "type": "STRING",
            "enum": [level.value for level in CompetencyLevel],
        },
        "competencyEvaluation": {"type": "STRING"},
        "intros": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "style": {"type": "STRING", "enum": [style.value for style in IntroStyle]},
                    "title": {"type": "STRING"},
                    "contentCN": {"type": "STRING"},
                    "contentEN": {"type": "STRING"},
                },
                "required": ["style", "title", "contentCN", "contentEN"],
            },
        },
    },
    "required": ["strengths", "competencyLevel", "competencyEvaluation", "intros"],
}

QUESTIONS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "items": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "category": {
                        "type": "STRING",
                        "enum": [category.value for category in QuestionCategory],
                    },
                    "question": {"type": "STRING"},
                    "questionEN": {"type": "STRING"},
                    "intent": {"type": "STRING"},
                    "structure": {"type": "STRING"},
                    "keyPoints": {"type": "STRING"},
                    "recommendedAnswer": {"type": "STRING"},
                },
                "required": [
                    "category", "question", "questionEN", "intent",
                    "structure", "keyPoints", "recommendedAnswer",
                ],
            },
        },
    },
    "required": ["items"],
}

EVALUATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "transcription": {
            "type": "STRING",
            "description": "Verbatim transcription of the user's answer.",
        },
        "feedback": {
            "type": "STRING",
            "description": "Constructive feedback on the answer.",
        },
    },
    "required": ["transcription", "feedback"],
}
