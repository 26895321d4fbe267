"""
Audio container helpers for MockPrep

The speech service returns bare PCM samples; callers always receive WAV.
"""

import io
import wave
from typing import Any

PCM_SAMPLE_WIDTH = 2  # 16-bit
PCM_CHANNELS = 1


def pcm_to_wav(pcm_data: bytes, sample_rate: int = 24000) -> bytes:
    """
    Wrap raw 16-bit mono PCM in a canonical RIFF/WAVE container.

    Args:
        pcm_data: Little-endian signed 16-bit samples
        sample_rate: Samples per second

    Returns:
        WAV bytes with a 44-byte header
    """
    output = io.BytesIO()
    with wave.open(output, "wb") as wav:
        wav.setnchannels(PCM_CHANNELS)
        wav.setsampwidth(PCM_SAMPLE_WIDTH)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm_data)
    return output.getvalue()


def describe_wav(audio_data: bytes) -> dict[str, Any]:
    """
    Inspect WAV data.

    Returns:
        Validation result with duration, sample rate, etc.
    """
    try:
        with io.BytesIO(audio_data) as audio_io:
            with wave.open(audio_io, "rb") as wav:
                frames = wav.getnframes()
                rate = wav.getframerate()

                return {
                    "valid": True,
                    "format": "wav",
                    "duration_seconds": frames / float(rate),
                    "sample_rate": rate,
                    "channels": wav.getnchannels(),
                    "sample_width": wav.getsampwidth(),
                }

    except (wave.Error, EOFError) as e:
        return {
            "valid": False,
            "error": str(e),
        }
