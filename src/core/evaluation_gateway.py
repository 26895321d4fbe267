"""
Evaluation Gateway for MockPrep

All traffic to the AI judging service goes through here:
- Resume analysis and question bank generation (structured, schema-validated)
- Per-answer transcription and feedback (never fails a session)
- Speech synthesis for question read-aloud

Every call runs under the RetryableInvoker. Schema violations and
rejected requests are not retried; transport and availability errors are.
"""

import asyncio
import base64
import logging
import time
from typing import Callable, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.config.settings import Settings, get_settings
from src.core.ai_client import (
    extract_inline_data,
    extract_text,
    generate_content,
    get_ai_client,
    inline_part,
    text_part,
    traced,
)
from src.core.audio import pcm_to_wav
from src.core.errors import (
    AIRequestRejected,
    AIServiceError,
    InvocationExhausted,
    MalformedResponse,
    SynthesisFailed,
)
from src.core.retry import RetryableInvoker, RetryPolicy
from src.models.analysis import AnalysisResult, ResumeInput
from src.models.question import GeneratedQuestionSet, Question
from src.models.session import AnswerPayload, AudioAnswer, EvaluationOutcome
from src.prompts.coach import CoachPrompts
from src.prompts.schemas import ANALYSIS_SCHEMA, EVALUATION_SCHEMA, QUESTIONS_SCHEMA

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

AUDIO_FALLBACK_TRANSCRIPTION = "Error processing audio."
FALLBACK_FEEDBACK = "Could not generate feedback due to an error."


class _EvaluationResponse(BaseModel):
    transcription: str
    feedback: str


def _parse(schema: type[T], raw: str, operation: str) -> T:
    """Validate a JSON response body against a model."""
    try:
        return schema.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedResponse(operation, f"{e.error_count()} validation errors") from e


class EvaluationGateway:
    """
    Stateless facade over the inference service.

    A new HTTP client is built for every attempt, so one gateway can be
    shared by any number of concurrent sessions.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        invoker: RetryableInvoker | None = None,
        policy: RetryPolicy | None = None,
    ):
        self.settings = settings or get_settings()
        self._client_factory = client_factory or (lambda: get_ai_client(self.settings))
        self.invoker = invoker or RetryableInvoker()
        self.policy = policy or RetryPolicy.from_settings(self.settings)
        self.prompts = CoachPrompts()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    async def _structured_call(
        self,
        operation: str,
        model: str,
        parts: list[dict],
        schema: dict,
        response_model: type[T],
        temperature: float | None = None,
    ) -> T:
        """Request JSON conforming to ``schema`` and parse it into ``response_model``."""
        generation_config: dict = {
            "responseMimeType": "application/json",
            "responseSchema": schema,
        }
        if temperature is not None:
            generation_config["temperature"] = temperature

        async def attempt() -> T:
            async with self._client_factory() as client:
                result = await generate_content(client, model, parts, generation_config)
            return _parse(response_model, extract_text(result), operation)

        with traced(operation, {"model": model}, self.settings):
            return await self.invoker.invoke(attempt, self.policy, name=operation)

    def _resume_parts(self, resume: ResumeInput, prompt: str) -> list[dict]:
        if resume.file:
            return [
                text_part(prompt + self.prompts.RESUME_ATTACHED),
                inline_part(resume.file.mime_type, resume.file.data),
            ]
        return [text_part(prompt + self.prompts.resume_text(resume.text))]

    # =========================================================================
    # ANALYSIS & QUESTION GENERATION
    # =========================================================================

    async def generate_analysis(
        self,
        resume: ResumeInput,
        major: str,
        university: str,
    ) -> AnalysisResult:
        """
        Competency level, strengths and self-introductions for a resume.

        Raises:
            MalformedResponse: If the response does not match the schema
            AIRequestRejected: If the service refused the request
            InvocationExhausted: If the service stayed unavailable
        """
        parts = self._resume_parts(resume, self.prompts.analysis_prompt(major, university))
        analysis = await self._structured_call(
            "generate_analysis",
            self.settings.analysis_model,
            parts,
            ANALYSIS_SCHEMA,
            AnalysisResult,
            temperature=0.7,
        )
        logger.info(f"Analysis complete: competency level {analysis.competency_level.value}")
        return analysis

    async def generate_questions(
        self,
        resume: ResumeInput,
        major: str,
        university: str,
    ) -> list[Question]:
        """
        Categorized practice questions tailored to a resume.

        Raises:
            MalformedResponse: If the response does not match the schema
            AIRequestRejected: If the service refused the request
            InvocationExhausted: If the service stayed unavailable
        """
        parts = self._resume_parts(resume, self.prompts.questions_prompt(major, university))
        generated = await self._structured_call(
            "generate_questions",
            self.settings.analysis_model,
            parts,
            QUESTIONS_SCHEMA,
            GeneratedQuestionSet,
            temperature=0.7,
        )

        stamp = int(time.time() * 1000)
        questions = [
            item.to_question(f"q-{stamp}-{index}")
            for index, item in enumerate(generated.items)
        ]
        logger.info(f"Generated {len(questions)} questions")
        return questions

    async def request_analysis_and_questions(
        self,
        resume: ResumeInput,
        major: str,
        university: str,
    ) -> tuple[AnalysisResult, list[Question]]:
        """
        Run analysis and question generation concurrently.

        If either fails, the other is cancelled and the error propagates.
        """
        tasks = [
            asyncio.create_task(self.generate_analysis(resume, major, university)),
            asyncio.create_task(self.generate_questions(resume, major, university)),
        ]
        try:
            analysis, questions = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        return analysis, questions

    # =========================================================================
    # ANSWER EVALUATION
    # =========================================================================

    async def evaluate_answer(
        self,
        answer: AnswerPayload,
        question_text: str,
        is_english_round: bool,
    ) -> EvaluationOutcome:
        """
        Transcribe (audio) and give feedback on one answer.

        Never raises on service failure: a degraded outcome with the
        literal input (or an unprocessable marker for audio) and a fixed
        notice is returned instead, so the session keeps going.
        """
        is_audio = isinstance(answer, AudioAnswer)
        prompt = self.prompts.evaluation_prompt(question_text, is_english_round, is_audio)

        parts = [text_part(prompt)]
        if is_audio:
            parts.append(inline_part(
                answer.mime_type or "audio/webm",
                base64.b64encode(answer.data).decode("ascii"),
            ))
        else:
            parts.append(text_part(self.prompts.text_answer(answer.text)))

        try:
            result = await self._structured_call(
                "evaluate_answer",
                self.settings.evaluation_model,
                parts,
                EVALUATION_SCHEMA,
                _EvaluationResponse,
            )
        except (InvocationExhausted, MalformedResponse, AIRequestRejected) as e:
            logger.error(f"Evaluation failed, using fallback: {e}")
            return EvaluationOutcome(
                transcription=AUDIO_FALLBACK_TRANSCRIPTION if is_audio else answer.text,
                feedback=FALLBACK_FEEDBACK,
                degraded=True,
            )

        return EvaluationOutcome(
            transcription=result.transcription if is_audio else answer.text,
            feedback=result.feedback,
        )

    # =========================================================================
    # SPEECH SYNTHESIS
    # =========================================================================

    async def synthesize_speech(self, text: str) -> bytes:
        """
        Read ``text`` aloud.

        Returns:
            WAV bytes (mono, 16-bit, ``settings.tts_sample_rate``)

        Raises:
            SynthesisFailed: If no audio could be produced
        """
        if not text.strip():
            raise ValueError("Nothing to synthesize")

        generation_config = {
            "responseModalities": ["AUDIO"],
            "speechConfig": {
                "voiceConfig": {
                    "prebuiltVoiceConfig": {"voiceName": self.settings.tts_voice},
                },
            },
        }

        async def attempt() -> bytes:
            async with self._client_factory() as client:
                result = await generate_content(
                    client, self.settings.tts_model, [text_part(text)], generation_config
                )
            audio_b64 = extract_inline_data(result)
            if not audio_b64:
                raise AIServiceError("No audio data returned")
            return base64.b64decode(audio_b64)

        try:
            with traced("synthesize_speech", {"model": self.settings.tts_model}, self.settings):
                pcm = await self.invoker.invoke(attempt, self.policy, name="synthesize_speech")
        except (InvocationExhausted, AIRequestRejected) as e:
            logger.error(f"TTS generation failed: {e}")
            raise SynthesisFailed(str(e)) from e

        return pcm_to_wav(pcm, self.settings.tts_sample_rate)
