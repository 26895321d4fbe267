import random

import pytest

from src.core.audio import pcm_to_wav
from src.core.history_store import InMemorySessionHistoryStore
from src.models.analysis import AnalysisResult
from src.models.question import Question, QuestionCategory
from src.models.session import AudioAnswer, EvaluationOutcome, TextAnswer

CATEGORIES = list(QuestionCategory)

ANALYSIS_PAYLOAD = {
    "strengths": [
        {"strength": f"优势{i}", "description": "本科期间发表论文"} for i in range(4)
    ],
    "competencyLevel": "B",
    "competencyEvaluation": "恭喜你，你的能力水平定位为B级别。",
    "intros": [
        {"style": style, "title": style, "contentCN": "老师好", "contentEN": "Hello"}
        for style in ("Affinity", "Academic", "Practical")
    ],
}


def build_questions(count: int) -> list[Question]:
    return [
        Question(
            id=f"q{i}",
            category=CATEGORIES[i % len(CATEGORIES)],
            text=f"问题{i}",
            text_en=f"Question {i}",
            intent="考察动机",
        )
        for i in range(count)
    ]


class FakeGateway:
    """Evaluation gateway double that records calls."""

    def __init__(self):
        self.evaluations = []
        self.spoken = []
        self.analysis_error = None

    async def evaluate_answer(self, answer, question_text, is_english_round):
        self.evaluations.append((answer, question_text, is_english_round))
        if isinstance(answer, TextAnswer):
            return EvaluationOutcome(transcription=answer.text, feedback="结构清晰。")
        assert isinstance(answer, AudioAnswer)
        return EvaluationOutcome(transcription="transcribed audio", feedback="Fluent answer.")

    async def synthesize_speech(self, text):
        self.spoken.append(text)
        return pcm_to_wav(b"\x00\x00" * 2400, 24000)

    async def request_analysis_and_questions(self, resume, major, university):
        if self.analysis_error:
            raise self.analysis_error
        return AnalysisResult.model_validate(ANALYSIS_PAYLOAD), build_questions(4)


class FakeSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def questions():
    return build_questions(5)


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def history_store():
    return InMemorySessionHistoryStore()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def rng():
    return random.Random(42)
