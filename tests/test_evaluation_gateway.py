import asyncio
import base64
import json

import httpx
import pytest

from conftest import ANALYSIS_PAYLOAD, FakeSleep
from src.config.settings import Settings
from src.core.audio import describe_wav
from src.core.errors import (
    AIRequestRejected,
    InvocationExhausted,
    MalformedResponse,
    SynthesisFailed,
)
from src.core.evaluation_gateway import (
    AUDIO_FALLBACK_TRANSCRIPTION,
    FALLBACK_FEEDBACK,
    EvaluationGateway,
)
from src.core.retry import RetryableInvoker
from src.models.analysis import CompetencyLevel, ResumeFile, ResumeInput
from src.models.question import QuestionCategory
from src.models.session import AudioAnswer, TextAnswer

QUESTIONS_PAYLOAD = {
    "items": [
        {
            "category": "Motivation",
            "question": "为什么报考我校？",
            "questionEN": "Why did you apply to our university?",
            "intent": "考察动机",
            "structure": "总分总",
            "keyPoints": "科研经历",
            "recommendedAnswer": "老师好……",
        },
        {
            "category": "Resume",
            "question": "介绍一下你的实习。",
            "questionEN": "Tell us about your internship.",
            "intent": "背调",
            "structure": "STAR",
            "keyPoints": "实习成果",
            "recommendedAnswer": "我在……",
        },
    ]
}


def gemini_text(body) -> dict:
    text = body if isinstance(body, str) else json.dumps(body, ensure_ascii=False)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class Recorder:
    """MockTransport handler replaying canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    def body(self, index=0) -> dict:
        return json.loads(self.requests[index].content)


def make_gateway(handler, sleep=None) -> EvaluationGateway:
    settings = Settings(gemini_api_key="test-key", langfuse_enabled=False)
    transport = httpx.MockTransport(handler)
    return EvaluationGateway(
        settings=settings,
        client_factory=lambda: httpx.AsyncClient(
            transport=transport,
            base_url="https://ai.test/v1beta",
            headers={"x-goog-api-key": settings.gemini_api_key},
        ),
        invoker=RetryableInvoker(sleep=sleep or FakeSleep()),
    )


RESUME = ResumeInput(text="本科：某大学 计算机科学。发表论文两篇。")


# =============================================================================
# ANALYSIS & QUESTIONS
# =============================================================================

def test_generate_analysis_parses_structured_response():
    handler = Recorder(gemini_text(ANALYSIS_PAYLOAD))
    gateway = make_gateway(handler)

    analysis = asyncio.run(gateway.generate_analysis(RESUME, "计算机", "清华大学"))

    assert analysis.competency_level == CompetencyLevel.B
    assert len(analysis.strengths) == 4
    assert [intro.style.value for intro in analysis.intros] == ["Affinity", "Academic", "Practical"]

    request = handler.requests[0]
    assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    body = handler.body()
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert "competencyLevel" in body["generationConfig"]["responseSchema"]["properties"]
    prompt = body["contents"][0]["parts"][0]["text"]
    assert "清华大学" in prompt and "计算机" in prompt
    assert "发表论文两篇" in prompt


def test_resume_file_is_sent_as_inline_data():
    handler = Recorder(gemini_text(ANALYSIS_PAYLOAD))
    resume = ResumeInput(
        file=ResumeFile(mime_type="application/pdf", data=base64.b64encode(b"%PDF").decode())
    )

    asyncio.run(make_gateway(handler).generate_analysis(resume, "法学", "北京大学"))

    parts = handler.body()["contents"][0]["parts"]
    assert "attached as a file" in parts[0]["text"]
    assert parts[1]["inlineData"]["mimeType"] == "application/pdf"


def test_analysis_with_wrong_strength_count_is_malformed_without_retry():
    payload = dict(ANALYSIS_PAYLOAD, strengths=ANALYSIS_PAYLOAD["strengths"][:2])
    handler = Recorder(gemini_text(payload))
    sleep = FakeSleep()

    with pytest.raises(MalformedResponse):
        asyncio.run(make_gateway(handler, sleep).generate_analysis(RESUME, "计算机", "清华大学"))

    assert len(handler.requests) == 1
    assert sleep.delays == []


def test_non_json_response_is_malformed():
    handler = Recorder(gemini_text("Sorry, I cannot help with that."))

    with pytest.raises(MalformedResponse):
        asyncio.run(make_gateway(handler).generate_questions(RESUME, "计算机", "清华大学"))


def test_transport_errors_are_retried_then_exhausted():
    handler = Recorder(httpx.ConnectError("connection refused"))
    sleep = FakeSleep()

    with pytest.raises(InvocationExhausted) as exc_info:
        asyncio.run(make_gateway(handler, sleep).generate_analysis(RESUME, "计算机", "清华大学"))

    assert len(handler.requests) == 3
    assert sleep.delays == [1.0, 2.0]
    assert isinstance(exc_info.value.last_error, httpx.ConnectError)


def test_rate_limit_then_success():
    handler = Recorder(
        httpx.Response(429, json={"error": "RESOURCE_EXHAUSTED"}),
        gemini_text(QUESTIONS_PAYLOAD),
    )

    questions = asyncio.run(
        make_gateway(handler).generate_questions(RESUME, "计算机", "清华大学")
    )

    assert len(handler.requests) == 2
    assert [q.category for q in questions] == [QuestionCategory.MOTIVATION, QuestionCategory.RESUME]
    assert questions[0].text == "为什么报考我校？"
    assert questions[0].text_en == "Why did you apply to our university?"
    assert questions[0].id.startswith("q-") and questions[0].id.endswith("-0")
    assert len({q.id for q in questions}) == 2


def test_request_analysis_and_questions_runs_both():
    def handler(request: httpx.Request) -> httpx.Response:
        schema = json.loads(request.content)["generationConfig"]["responseSchema"]
        payload = QUESTIONS_PAYLOAD if "items" in schema["properties"] else ANALYSIS_PAYLOAD
        return httpx.Response(200, json=gemini_text(payload))

    analysis, questions = asyncio.run(
        make_gateway(handler).request_analysis_and_questions(RESUME, "计算机", "清华大学")
    )

    assert analysis.competency_level == CompetencyLevel.B
    assert len(questions) == 2


def test_rejected_request_is_not_retried():
    handler = Recorder(httpx.Response(401, json={"error": "API key not valid"}))
    sleep = FakeSleep()

    with pytest.raises(AIRequestRejected) as exc_info:
        asyncio.run(make_gateway(handler, sleep).generate_analysis(RESUME, "计算机", "清华大学"))

    assert exc_info.value.status_code == 401
    assert len(handler.requests) == 1
    assert sleep.delays == []


def test_request_timeout_status_is_retried():
    handler = Recorder(
        httpx.Response(408, json={"error": "timeout"}),
        gemini_text(ANALYSIS_PAYLOAD),
    )

    analysis = asyncio.run(make_gateway(handler).generate_analysis(RESUME, "计算机", "清华大学"))

    assert len(handler.requests) == 2
    assert analysis.competency_level == CompetencyLevel.B


def test_failed_half_cancels_the_other():
    async def scenario():
        gateway = make_gateway(Recorder(gemini_text("unused")))
        cancelled = asyncio.Event()

        async def slow_analysis(*args):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async def broken_questions(*args):
            await asyncio.sleep(0)
            raise MalformedResponse("generate_questions", "bad shape")

        gateway.generate_analysis = slow_analysis
        gateway.generate_questions = broken_questions

        with pytest.raises(MalformedResponse):
            await gateway.request_analysis_and_questions(RESUME, "计算机", "清华大学")
        await asyncio.sleep(0)
        return cancelled.is_set()

    assert asyncio.run(scenario()) is True


# =============================================================================
# ANSWER EVALUATION
# =============================================================================

def test_text_answer_transcription_is_verbatim_input():
    handler = Recorder(gemini_text({"transcription": "paraphrased", "feedback": "回答了核心问题。"}))
    answer = TextAnswer(text="I led a team of 4 engineers")

    outcome = asyncio.run(
        make_gateway(handler).evaluate_answer(answer, "Tell us about leadership.", True)
    )

    assert outcome.transcription == "I led a team of 4 engineers"
    assert outcome.feedback == "回答了核心问题。"
    assert outcome.degraded is False

    parts = handler.body()["contents"][0]["parts"]
    assert "English proficiency" in parts[0]["text"]
    assert "Tell us about leadership." in parts[0]["text"]
    assert parts[1]["text"] == 'Student Text Answer: "I led a team of 4 engineers"'


def test_audio_answer_requests_transcription():
    handler = Recorder(gemini_text({"transcription": "我想报考贵校", "feedback": "不错"}))
    answer = AudioAnswer(data=b"\x1aE\xdf\xa3webm", mime_type="audio/webm")

    outcome = asyncio.run(make_gateway(handler).evaluate_answer(answer, "为什么报考我校？", False))

    assert outcome.transcription == "我想报考贵校"
    parts = handler.body()["contents"][0]["parts"]
    assert "Transcribe the audio" in parts[0]["text"]
    assert "English proficiency" not in parts[0]["text"]
    assert parts[1]["inlineData"]["mimeType"] == "audio/webm"
    assert base64.b64decode(parts[1]["inlineData"]["data"]) == answer.data


def test_exhausted_evaluation_falls_back_for_text():
    handler = Recorder(httpx.Response(503, json={"error": "UNAVAILABLE"}))
    sleep = FakeSleep()

    outcome = asyncio.run(
        make_gateway(handler, sleep).evaluate_answer(TextAnswer(text="我的回答"), "问题", False)
    )

    assert len(handler.requests) == 3
    assert outcome.transcription == "我的回答"
    assert outcome.feedback == FALLBACK_FEEDBACK
    assert outcome.degraded is True


def test_exhausted_evaluation_falls_back_for_audio():
    handler = Recorder(httpx.ReadTimeout("timed out"))

    outcome = asyncio.run(
        make_gateway(handler).evaluate_answer(AudioAnswer(data=b"abc"), "Question", True)
    )

    assert outcome.transcription == AUDIO_FALLBACK_TRANSCRIPTION
    assert outcome.feedback == FALLBACK_FEEDBACK


def test_malformed_evaluation_falls_back():
    handler = Recorder(gemini_text({"feedback": "missing transcription"}))

    outcome = asyncio.run(
        make_gateway(handler).evaluate_answer(TextAnswer(text="answer"), "Question", False)
    )

    assert len(handler.requests) == 1
    assert outcome.degraded is True
    assert outcome.transcription == "answer"


def test_rejected_evaluation_falls_back_without_retry():
    handler = Recorder(httpx.Response(400, json={"error": "INVALID_ARGUMENT"}))

    outcome = asyncio.run(
        make_gateway(handler).evaluate_answer(AudioAnswer(data=b"abc"), "Question", True)
    )

    assert len(handler.requests) == 1
    assert outcome.degraded is True
    assert outcome.transcription == AUDIO_FALLBACK_TRANSCRIPTION


# =============================================================================
# SPEECH SYNTHESIS
# =============================================================================

def test_synthesize_speech_returns_wav():
    pcm = b"\x10\x00" * 24000
    handler = Recorder({
        "candidates": [{
            "content": {"parts": [{
                "inlineData": {"mimeType": "audio/L16;rate=24000", "data": base64.b64encode(pcm).decode()}
            }]}
        }]
    })

    wav = asyncio.run(make_gateway(handler).synthesize_speech("为什么报考我校？"))

    assert wav[:4] == b"RIFF"
    assert wav[44:] == pcm
    info = describe_wav(wav)
    assert info["sample_rate"] == 24000
    assert info["duration_seconds"] == 1.0

    body = handler.body()
    assert handler.requests[0].url.path.endswith("gemini-2.5-flash-preview-tts:generateContent")
    assert body["generationConfig"]["responseModalities"] == ["AUDIO"]
    voice = body["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]
    assert voice["voiceName"] == "Kore"


def test_synthesize_speech_without_audio_fails_after_retries():
    handler = Recorder(gemini_text("no audio here"))

    with pytest.raises(SynthesisFailed) as exc_info:
        asyncio.run(make_gateway(handler).synthesize_speech("hello"))

    assert len(handler.requests) == 3
    assert isinstance(exc_info.value.__cause__, InvocationExhausted)


def test_synthesize_speech_rejects_blank_text():
    handler = Recorder(gemini_text("unused"))

    with pytest.raises(ValueError):
        asyncio.run(make_gateway(handler).synthesize_speech("   "))

    assert handler.requests == []


def test_synthesize_speech_rejected_request_fails_at_once():
    handler = Recorder(httpx.Response(403, json={"error": "PERMISSION_DENIED"}))

    with pytest.raises(SynthesisFailed) as exc_info:
        asyncio.run(make_gateway(handler).synthesize_speech("hello"))

    assert len(handler.requests) == 1
    assert isinstance(exc_info.value.__cause__, AIRequestRejected)
