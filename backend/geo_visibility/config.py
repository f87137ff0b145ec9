"""Environment-driven configuration.

Every setting is read lazily from the environment with a safe default so
tests can override values with ``patch.dict(os.environ, ...)``.
The FastAPI app loads ``.env`` via python-dotenv on startup.
"""

from __future__ import annotations

import os
from typing import List

from .constants import MAX_COMPETITORS, MAX_VALIDATION_CANDIDATES

_DEFAULT_BATCH_SIZE = 12
_DEFAULT_JUDGE_MAX_ATTEMPTS = 3


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Provider credentials
# ---------------------------------------------------------------------------
def get_openai_key() -> str:
    """Read OPENAI_API_KEY from the environment. Raises EnvironmentError if missing."""
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        print("⚠️  [CONFIG] API key missing (OPENAI_API_KEY)")
        raise EnvironmentError("OPENAI_API_KEY environment variable not set")
    return key


def get_openai_model() -> str:
    return os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()


def get_gemini_key() -> str:
    key = os.getenv("GEMINI_API_KEY", "").strip()
    if not key:
        raise EnvironmentError("GEMINI_API_KEY environment variable not set")
    return key


def get_gemini_model() -> str:
    return os.getenv("GEMINI_MODEL", "gemini-1.5-flash").strip()


def get_request_timeout() -> float:
    return _env_float("OPENAI_REQUEST_TIMEOUT", 40.0)


def get_max_completion_tokens() -> int:
    return _env_int("OPENAI_MAX_COMPLETION_TOKENS", 1200)


def get_providers() -> List[str]:
    """Providers queried for every prompt. Gemini joins only when keyed."""
    providers = ["openai"]
    if os.getenv("GEMINI_API_KEY", "").strip():
        providers.append("gemini")
    return providers


# ---------------------------------------------------------------------------
# Evaluation pipeline
# ---------------------------------------------------------------------------
def get_batch_size() -> int:
    return max(1, _env_int("ANALYSIS_BATCH_SIZE", _DEFAULT_BATCH_SIZE))


def get_judge_max_attempts() -> int:
    return max(1, _env_int("JUDGE_MAX_ATTEMPTS", _DEFAULT_JUDGE_MAX_ATTEMPTS))


def get_judge_backoff_base() -> float:
    return max(0.0, _env_float("JUDGE_BACKOFF_BASE", 1.0))


def get_judge_backoff_max() -> float:
    return max(0.0, _env_float("JUDGE_BACKOFF_MAX", 8.0))


# ---------------------------------------------------------------------------
# Competitor resolution
# ---------------------------------------------------------------------------
def get_validation_top_k() -> int:
    return min(MAX_VALIDATION_CANDIDATES, max(1, _env_int("COMPETITOR_VALIDATION_TOP_K", MAX_VALIDATION_CANDIDATES)))


def get_max_competitors() -> int:
    return min(MAX_COMPETITORS, max(1, _env_int("COMPETITOR_MAX_RESULTS", MAX_COMPETITORS)))


def is_debug() -> bool:
    return os.getenv("DEBUG", "false").lower() == "true"
