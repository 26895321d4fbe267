"""
Audio API endpoints

Handles:
- Text-to-speech for reading questions aloud
"""

import base64

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from src.api.dependencies import get_gateway
from src.core.audio import describe_wav
from src.core.errors import SynthesisFailed

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class TTSRequest(BaseModel):
    """Request for text-to-speech."""
    text: str = Field(..., min_length=1)


class TTSResponse(BaseModel):
    """Response with generated audio."""
    audio_base64: str
    format: str
    duration_seconds: float
    sample_rate: int


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/tts", response_model=TTSResponse)
async def text_to_speech(request: TTSRequest) -> TTSResponse:
    """
    Convert text to speech.

    Returns base64-encoded WAV audio.
    """
    try:
        wav_data = await get_gateway().synthesize_speech(request.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SynthesisFailed as e:
        raise HTTPException(status_code=503, detail=f"TTS failed: {e}")

    info = describe_wav(wav_data)
    return TTSResponse(
        audio_base64=base64.b64encode(wav_data).decode("utf-8"),
        format="wav",
        duration_seconds=info.get("duration_seconds", 0),
        sample_rate=info.get("sample_rate", 0),
    )
