"""Centralized OpenAI chat-completions client.

Every LLM call in the pipelines goes through this module:
  - ``call_openai_chat_raw_async()`` is the judge-model collaborator. One
    call, raw content string back, classified ProviderError on failure.
    Retrying is the caller's job.
  - ``call_openai_chat_async()`` returns a parsed JSON dict or None after
    one internal retry. Used by the competitor sources and validator,
    which degrade gracefully on None.
Model, temperature, timeout and token limits are read from env.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any, Dict, List, Optional

import httpx

from ..config import (
    get_max_completion_tokens,
    get_openai_key,
    get_openai_model,
    get_request_timeout,
)
from ..http_client import get_client, get_timeout, is_retryable_error
from .errors import (
    FatalProviderError,
    ProviderError,
    TransientProviderError,
    classify_provider_error,
)

_OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"


# ---------------------------------------------------------------------------
# JSON sanitizer: extracts valid JSON from LLM output
# ---------------------------------------------------------------------------
def sanitize_json(raw: str) -> str:
    """Extract a JSON object from raw LLM output.

    Handles:
      - Markdown fences (```json ... ```)
      - Leading/trailing whitespace and BOM
      - Prose before/after JSON
      - Trailing commas before } or ]

    Raises ValueError if no JSON object is found.
    """
    text = (raw or "").strip().lstrip("\ufeff")

    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 3:
            text = parts[1]
        else:
            text = text[3:]

    text = text.strip()
    if text.lower().startswith("json"):
        text = text[4:].strip()

    brace_idx = text.find("{")
    if brace_idx == -1:
        raise ValueError("LLM did not return a JSON object - no '{' found")
    text = text[brace_idx:]

    rbrace_idx = text.rfind("}")
    if rbrace_idx == -1:
        raise ValueError("LLM did not return a JSON object - no '}' found")
    text = text[: rbrace_idx + 1]

    text = re.sub(r",\s*([}\]])", r"\1", text)

    return text


def validate_required_keys(
    parsed: dict,
    required_keys: tuple[str, ...] | list[str],
    context: str = "OpenAI",
) -> List[str]:
    """Return the required keys missing from *parsed* (empty list when complete).

    Logs any missing keys.
    """
    missing = [k for k in required_keys if k not in parsed]
    if missing:
        print(f"⚠️  [{context}] Missing required keys: {missing}")
    return missing


def build_payload(
    *,
    model: str,
    messages: List[Dict[str, str]],
    max_completion_tokens: int,
    temperature: float,
    json_mode: bool = True,
) -> Dict[str, Any]:
    """Build an OpenAI chat completions payload."""
    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_completion_tokens,
        "temperature": temperature,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}
    return payload


async def _post_chat(payload: Dict[str, Any], api_key: str) -> str:
    """POST one chat completion and return the message content.

    Raises TransientProviderError / FatalProviderError.
    """
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    client = await get_client()
    t0 = time.time()
    try:
        response = await client.post(
            _OPENAI_API_URL,
            headers=headers,
            json=payload,
            timeout=get_timeout("openai", get_request_timeout()),
        )
    except httpx.HTTPError as exc:
        raise classify_provider_error(exc) from exc

    duration = time.time() - t0
    print(f"📦 [OPENAI] HTTP {response.status_code} ({duration:.1f}s)")

    if response.status_code != 200:
        body = response.text[:400]
        if is_retryable_error(response.status_code):
            raise TransientProviderError(
                f"OpenAI HTTP {response.status_code}: {body}",
                status_code=response.status_code,
            )
        raise FatalProviderError(
            f"OpenAI HTTP {response.status_code}: {body}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
        content = data["choices"][0]["message"]["content"] or ""
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise FatalProviderError(f"Malformed OpenAI response envelope: {exc}") from exc

    usage = data.get("usage")
    if usage:
        print(f"🧠 [OPENAI] Tokens used: total={usage.get('total_tokens', '?')}")

    return content.strip()


async def call_openai_chat_raw_async(
    system_instruction: str,
    user_content: str,
    *,
    temperature: float = 0.0,
    max_completion_tokens: int = 0,
) -> str:
    """Judge-model collaborator: one call, raw response text, no parsing.

    Raises TransientProviderError or FatalProviderError.
    """
    try:
        api_key = get_openai_key()
    except EnvironmentError as exc:
        raise FatalProviderError(str(exc)) from exc

    if max_completion_tokens <= 0:
        max_completion_tokens = get_max_completion_tokens()

    payload = build_payload(
        model=get_openai_model(),
        messages=[
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": user_content},
        ],
        max_completion_tokens=max_completion_tokens,
        temperature=temperature,
    )
    return await _post_chat(payload, api_key)


async def call_openai_chat_async(
    *,
    messages: List[Dict[str, str]],
    max_completion_tokens: int = 0,
    temperature: float = 0.2,
) -> Optional[Dict[str, Any]]:
    """Call OpenAI chat completions and return parsed JSON dict, or None on failure.

    1 retry on failure (HTTP error, empty content or invalid JSON), then None.
    """
    try:
        api_key = get_openai_key()
    except EnvironmentError:
        return None

    if max_completion_tokens <= 0:
        max_completion_tokens = get_max_completion_tokens()

    model = get_openai_model()
    payload = build_payload(
        model=model,
        messages=messages,
        max_completion_tokens=max_completion_tokens,
        temperature=temperature,
    )
    max_retries = 1

    for attempt in range(max_retries + 1):
        print(f"🧠 [OPENAI] Calling {model} (attempt {attempt + 1}/{max_retries + 1})")
        try:
            raw_content = await _post_chat(payload, api_key)
        except ProviderError as exc:
            print(f"❌ [OPENAI] {type(exc).__name__}: {str(exc)[:200]}")
            if attempt < max_retries:
                continue
            return None

        if not raw_content:
            print(f"⚠️  [OPENAI] Empty response (attempt {attempt + 1})")
            if attempt < max_retries:
                continue
            return None

        try:
            parsed = json.loads(sanitize_json(raw_content))
        except ValueError as exc:
            print(f"❌ [OPENAI] JSON parse failed: {exc}")
            print(f"⚠️  [OPENAI] Raw (first 300 chars): {raw_content[:300]}")
            if attempt < max_retries:
                continue
            return None

        if not isinstance(parsed, dict):
            if attempt < max_retries:
                continue
            return None

        print("🧠 [OPENAI] Success")
        return parsed

    return None
