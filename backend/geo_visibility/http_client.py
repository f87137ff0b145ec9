"""
Async HTTP Client Configuration

Provides a shared httpx.AsyncClient with connection pooling plus the
status-code tables used to tell transient collaborator failures from
fatal ones.
"""

import httpx
from typing import Optional


class Timeouts:
    """Timeout presets for external collaborators (seconds)."""
    OPENAI = 40.0
    GEMINI = 40.0
    CONNECT = 5.0


class RetryConfig:
    """Status codes that decide whether a collaborator failure is retryable."""

    # Request timeout and rate limiting are the only transient statuses
    RETRYABLE_CODES = {408, 429}


_client: Optional[httpx.AsyncClient] = None


async def get_client() -> httpx.AsyncClient:
    """Get the shared async HTTP client."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(Timeouts.OPENAI, connect=Timeouts.CONNECT),
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
            follow_redirects=True,
        )
    return _client


async def close_client():
    """Close the shared client (call on app shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def get_timeout(service: str, seconds: Optional[float] = None) -> httpx.Timeout:
    """Get timeout configuration for a service."""
    timeouts = {
        "openai": Timeouts.OPENAI,
        "gemini": Timeouts.GEMINI,
    }
    if seconds is None:
        seconds = timeouts.get(service.lower(), 10.0)
    return httpx.Timeout(seconds, connect=Timeouts.CONNECT)


def is_retryable_error(status_code: int) -> bool:
    """Check if an HTTP error is retryable."""
    return status_code in RetryConfig.RETRYABLE_CODES
