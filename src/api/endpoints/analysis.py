"""
Analysis API endpoints

Handles:
- Resume analysis (competency level, strengths, self-introductions)
- Question bank generation and listing
"""

import base64

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from src.api.dependencies import get_gateway, get_question_bank
from src.core.errors import AIRequestRejected, InvocationExhausted, MalformedResponse
from src.models.analysis import AnalysisResult, ResumeFile, ResumeInput
from src.models.question import BankQuestion, Question

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class AnalysisRequest(BaseModel):
    """Request model for analysing a pasted resume."""
    resume_text: str
    target_major: str
    target_university: str


class AnalysisResponse(BaseModel):
    """Analysis plus the generated question bank."""
    analysis: AnalysisResult
    questions: list[Question]


class QuestionsRequest(BaseModel):
    """Request model for loading questions into the bank."""
    questions: list[Question]
    replace: bool = False


async def _analyse(resume: ResumeInput, major: str, university: str) -> AnalysisResponse:
    try:
        analysis, questions = await get_gateway().request_analysis_and_questions(
            resume, major, university
        )
    except (MalformedResponse, AIRequestRejected) as e:
        raise HTTPException(status_code=502, detail=str(e))
    except InvocationExhausted as e:
        raise HTTPException(status_code=503, detail=f"AI service unavailable: {e}")

    get_question_bank().add_many(questions)
    return AnalysisResponse(analysis=analysis, questions=questions)


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/analysis", response_model=AnalysisResponse)
async def analyse_resume(request: AnalysisRequest) -> AnalysisResponse:
    """
    Analyse a pasted resume and generate practice questions.

    Generated questions are added to the question bank.
    """
    if not request.resume_text.strip():
        raise HTTPException(status_code=400, detail="Resume text is empty")

    return await _analyse(
        ResumeInput(text=request.resume_text),
        request.target_major,
        request.target_university,
    )


@router.post("/analysis/upload", response_model=AnalysisResponse)
async def analyse_resume_file(
    resume: UploadFile = File(...),
    target_major: str = Form(...),
    target_university: str = Form(...),
) -> AnalysisResponse:
    """
    Analyse an uploaded resume document.

    The document is forwarded to the AI service as-is.
    """
    data = await resume.read()
    if not data:
        raise HTTPException(status_code=400, detail="Resume file is empty")

    resume_input = ResumeInput(
        file=ResumeFile(
            mime_type=resume.content_type or "application/pdf",
            data=base64.b64encode(data).decode("ascii"),
            name=resume.filename or "",
        )
    )
    return await _analyse(resume_input, target_major, target_university)


@router.get("/questions", response_model=list[BankQuestion])
async def list_questions() -> list[BankQuestion]:
    """List the question bank with how often each question was practiced."""
    return get_question_bank().with_practice()


@router.post("/questions", response_model=list[BankQuestion])
async def load_questions(request: QuestionsRequest) -> list[BankQuestion]:
    """Add questions to the bank, optionally replacing its contents."""
    bank = get_question_bank()
    if request.replace:
        bank.replace(request.questions)
    else:
        bank.add_many(request.questions)
    return bank.with_practice()
