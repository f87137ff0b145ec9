"""Error taxonomy for collaborator calls and LLM output handling.

Nothing in the evaluation or competitor pipelines lets these escape to the
caller of an analysis run; they are retried, degraded to fallbacks, or
cause a single task to be dropped.
"""

from __future__ import annotations

from typing import Optional

import httpx
import openai

from ..http_client import is_retryable_error

# Substrings (lowercase) that mark a failure as transient
_TRANSIENT_MARKERS: tuple[str, ...] = (
    "rate limit",
    "rate_limit",
    "ratelimit",
    "too many requests",
    "timeout",
    "timed out",
    "connection reset",
    "econnreset",
    "429",
)


class GeoVisibilityError(Exception):
    """Base class for every error raised inside the pipelines."""


class ParseError(GeoVisibilityError):
    """Collaborator output could not be parsed as structured data."""


class SchemaError(GeoVisibilityError):
    """Parsed output is missing required fields or has invalid values."""


class ProviderError(GeoVisibilityError):
    """A collaborator call (responder, judge model, validator) failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientProviderError(ProviderError):
    """Timeout, rate limit, connection reset or HTTP 429. Safe to retry."""


class FatalProviderError(ProviderError):
    """Any other collaborator failure. Retrying will not help."""


class ValidatorError(GeoVisibilityError):
    """The validation collaborator is unavailable or returned garbage."""


def _status_code_of(exc: BaseException) -> Optional[int]:
    if isinstance(exc, ProviderError):
        return exc.status_code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    status = getattr(exc, "status_code", None)
    return status if isinstance(status, int) else None


def is_transient(exc: BaseException) -> bool:
    """Return True when *exc* looks like a timeout, rate limit or dropped connection."""
    if isinstance(exc, TransientProviderError):
        return True
    if isinstance(exc, FatalProviderError):
        return False
    if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)):
        return True
    if isinstance(exc, (openai.RateLimitError, openai.APITimeoutError, openai.APIConnectionError)):
        return True
    if isinstance(exc, (TimeoutError, ConnectionResetError)):
        return True

    status = _status_code_of(exc)
    if status is not None and is_retryable_error(status):
        return True

    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


def classify_provider_error(exc: BaseException) -> ProviderError:
    """Map any collaborator exception onto Transient or Fatal provider errors.

    Already-classified errors are returned unchanged.
    """
    if isinstance(exc, (TransientProviderError, FatalProviderError)):
        return exc

    status = _status_code_of(exc)
    message = str(exc) or exc.__class__.__name__
    if is_transient(exc):
        return TransientProviderError(message, status_code=status)
    return FatalProviderError(message, status_code=status)
