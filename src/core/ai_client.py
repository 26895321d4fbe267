"""
Gemini REST client helpers for MockPrep

Each call builds its own HTTP client from settings, so nothing is shared
between sessions. Langfuse tracing is optional and never affects results.
"""

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Iterator

import httpx
from langfuse import Langfuse

from src.config.settings import Settings, get_settings
from src.core.errors import AIRequestRejected, AIServiceError

logger = logging.getLogger(__name__)

# 4xx statuses that are worth another attempt
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


def get_ai_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Build a fresh client for the inference service."""
    settings = settings or get_settings()
    return httpx.AsyncClient(
        base_url=settings.gemini_base_url.rstrip("/"),
        headers={
            "x-goog-api-key": settings.gemini_api_key,
            "Content-Type": "application/json",
        },
        timeout=settings.request_timeout_seconds,
    )


# =============================================================================
# REQUEST / RESPONSE SHAPES
# =============================================================================

def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def inline_part(mime_type: str, data_b64: str) -> dict[str, Any]:
    return {"inlineData": {"mimeType": mime_type, "data": data_b64}}


async def generate_content(
    client: httpx.AsyncClient,
    model: str,
    parts: list[dict[str, Any]],
    generation_config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Call ``models/{model}:generateContent``.

    Raises:
        AIRequestRejected: On a 4xx other than 408/429
        httpx.HTTPError: On transport failures and other non-2xx responses
    """
    payload: dict[str, Any] = {"contents": [{"parts": parts}]}
    if generation_config:
        payload["generationConfig"] = generation_config

    response = await client.post(f"/models/{model}:generateContent", json=payload)
    if response.is_client_error and response.status_code not in RETRYABLE_CLIENT_STATUSES:
        raise AIRequestRejected(response.status_code, response.text[:200])
    response.raise_for_status()
    return response.json()


def _first_parts(result: dict[str, Any]) -> list[dict[str, Any]]:
    candidates = result.get("candidates") or []
    if not candidates:
        raise AIServiceError("Response contained no candidates")
    return (candidates[0].get("content") or {}).get("parts") or []


def extract_text(result: dict[str, Any]) -> str:
    """Join the text parts of the first candidate."""
    return "".join(
        part["text"] for part in _first_parts(result) if isinstance(part.get("text"), str)
    )


def extract_inline_data(result: dict[str, Any]) -> str | None:
    """Return the base64 payload of the first inline-data part, if any."""
    for part in _first_parts(result):
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            return inline["data"]
    return None


# =============================================================================
# TRACING
# =============================================================================

def get_langfuse(settings: Settings | None = None) -> Langfuse | None:
    """Langfuse client for these settings, or None when tracing is disabled."""
    settings = settings or get_settings()
    if not settings.langfuse_enabled:
        return None
    if not (settings.langfuse_secret_key and settings.langfuse_public_key):
        logger.debug("Langfuse keys not configured, tracing disabled")
        return None

    return _langfuse_client(
        settings.langfuse_secret_key,
        settings.langfuse_public_key,
        settings.langfuse_base_url,
    )


@lru_cache
def _langfuse_client(secret_key: str, public_key: str, host: str) -> Langfuse | None:
    """One client per credential set."""
    try:
        langfuse = Langfuse(secret_key=secret_key, public_key=public_key, host=host)
        logger.info("Langfuse initialized for LLM observability")
        return langfuse
    except Exception as e:
        logger.warning(f"Failed to initialize Langfuse: {e}")
        return None


@contextmanager
def traced(
    name: str,
    metadata: dict[str, Any] | None = None,
    settings: Settings | None = None,
) -> Iterator[Any]:
    """Wrap a block in a Langfuse span. Yields the span or None."""
    langfuse = get_langfuse(settings)
    span = None
    if langfuse:
        try:
            span = langfuse.start_span(name=name, metadata=metadata or {})
        except Exception as lf_err:
            logger.warning(f"Langfuse span start failed: {lf_err}")
            span = None

    try:
        yield span
    except Exception as e:
        if span:
            try:
                span.update(level="ERROR", status_message=str(e))
            except Exception:
                logger.debug("Langfuse span update failed", exc_info=True)
        raise
    finally:
        if span:
            try:
                span.end()
            except Exception:
                logger.debug("Langfuse span end failed", exc_info=True)
