"""Bounded retry state machine.

The machine knows nothing about HTTP or LLMs. It drives an operation that
returns a tagged ``Ok`` / ``Err`` result through the states

    attempting(n) -> succeeded
    attempting(n) -> attempting(n + 1)      (retryable error, attempts left)
    attempting(n) -> fallback_returned      (non-retryable or exhausted)

The sleep function is injected so tests can run without real delays.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryState(str, Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FALLBACK_RETURNED = "fallback_returned"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: Exception


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt cap plus one exponential backoff formula for every retryable error."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 8.0

    def backoff(self, attempt: int) -> float:
        """Delay after failed *attempt* (1-based): base * 2^(attempt-1), capped."""
        return min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))


@dataclass
class RetryOutcome(Generic[T]):
    state: RetryState
    value: Optional[T] = None
    attempts: int = 0
    errors: List[Exception] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is RetryState.SUCCEEDED


class RetryMachine:
    """Run an ``Ok``/``Err``-returning operation under a :class:`RetryPolicy`."""

    def __init__(
        self,
        policy: RetryPolicy,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        label: str = "RETRY",
    ):
        if policy.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.policy = policy
        self._sleep = sleep
        self.label = label
        self.state: Optional[RetryState] = None

    async def run(
        self,
        operation: Callable[[int], Awaitable[Result]],
        is_retryable: Callable[[Exception], bool],
    ) -> RetryOutcome:
        """Call ``operation(attempt)`` until it succeeds or the policy gives up.

        The operation must not raise; collaborator exceptions are expected to
        arrive here wrapped in ``Err``.
        """
        errors: List[Exception] = []
        attempt = 1
        while True:
            self.state = RetryState.ATTEMPTING
            result = await operation(attempt)

            if isinstance(result, Ok):
                self.state = RetryState.SUCCEEDED
                return RetryOutcome(state=RetryState.SUCCEEDED, value=result.value, attempts=attempt, errors=errors)

            error = result.error
            errors.append(error)
            retryable = is_retryable(error)
            if not retryable or attempt >= self.policy.max_attempts:
                self.state = RetryState.FALLBACK_RETURNED
                reason = "non-retryable" if not retryable else "attempts exhausted"
                print(
                    f"❌ [{self.label}] Giving up after attempt {attempt}/{self.policy.max_attempts} "
                    f"({reason}): {type(error).__name__}: {str(error)[:120]}"
                )
                return RetryOutcome(state=RetryState.FALLBACK_RETURNED, attempts=attempt, errors=errors)

            delay = self.policy.backoff(attempt)
            print(
                f"🔄 [{self.label}] Attempt {attempt}/{self.policy.max_attempts} failed with "
                f"{type(error).__name__} - retrying in {delay:.1f}s"
            )
            logger.debug("%s retry after %s: %s", self.label, type(error).__name__, error)
            await self._sleep(delay)
            attempt += 1
