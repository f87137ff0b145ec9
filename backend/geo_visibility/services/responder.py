"""Responder collaborator.

Asks a provider the user's prompt and captures the raw answer text.
A moderate temperature keeps answers stable while still resembling a
real user interaction.
"""

from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI

from ..config import (
    get_gemini_key,
    get_gemini_model,
    get_openai_key,
    get_openai_model,
    get_request_timeout,
)
from ..http_client import get_client, get_timeout, is_retryable_error
from .errors import FatalProviderError, TransientProviderError, classify_provider_error

logger = logging.getLogger(__name__)

_GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
_RESPONDER_TEMPERATURE = 0.7

_openai_client: Optional[AsyncOpenAI] = None


def get_openai_client() -> AsyncOpenAI:
    """Shared responder client, created on first use."""
    global _openai_client
    if _openai_client is None:
        _openai_client = AsyncOpenAI(api_key=get_openai_key(), timeout=get_request_timeout())
    return _openai_client


async def close_openai_client():
    """Close the shared responder client (call on app shutdown)."""
    global _openai_client
    if _openai_client is not None:
        await _openai_client.close()
        _openai_client = None


async def _ask_openai(prompt: str) -> str:
    client = get_openai_client()
    response = await client.chat.completions.create(
        model=get_openai_model(),
        messages=[{"role": "user", "content": prompt}],
        temperature=_RESPONDER_TEMPERATURE,
    )
    return response.choices[0].message.content or ""


async def _ask_gemini(prompt: str) -> str:
    client = await get_client()
    response = await client.post(
        _GEMINI_API_URL.format(model=get_gemini_model()),
        params={"key": get_gemini_key()},
        json={
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": _RESPONDER_TEMPERATURE},
        },
        timeout=get_timeout("gemini", get_request_timeout()),
    )
    if response.status_code != 200:
        message = f"Gemini HTTP {response.status_code}: {response.text[:300]}"
        if is_retryable_error(response.status_code):
            raise TransientProviderError(message, status_code=response.status_code)
        raise FatalProviderError(message, status_code=response.status_code)

    data = response.json()
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as exc:
        raise FatalProviderError(f"Gemini returned no candidates: {exc}") from exc
    text = "".join(part.get("text", "") for part in parts)
    print(f"🤖 [RESPONDER] Gemini response: {text[:50]}...")
    return text


async def run_responder(prompt_text: str, provider_id: str) -> str:
    """Return the provider's answer to *prompt_text*.

    Raises a classified ProviderError on any failure, including an unknown
    provider id or a missing API key.
    """
    try:
        if provider_id == "openai":
            return await _ask_openai(prompt_text)
        if provider_id == "gemini":
            return await _ask_gemini(prompt_text)
    except (TransientProviderError, FatalProviderError):
        raise
    except Exception as exc:
        logger.warning("Responder %s failed: %s", provider_id, exc)
        raise classify_provider_error(exc) from exc

    raise FatalProviderError(f"Unknown provider: {provider_id!r}")
