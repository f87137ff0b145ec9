"""Retry state machine tests: backoff schedule and attempt cap."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio

import pytest

from geo_visibility.services.retry import Err, Ok, RetryMachine, RetryPolicy, RetryState


class RetryableError(Exception):
    pass


class PermanentError(Exception):
    pass


def _is_retryable(error):
    return isinstance(error, RetryableError)


def _run(machine, results):
    calls = []

    async def operation(attempt):
        calls.append(attempt)
        return results[attempt - 1]

    outcome = asyncio.run(machine.run(operation, _is_retryable))
    return outcome, calls


class TestRetryPolicy:
    def test_exponential_backoff(self):
        policy = RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=8.0)
        assert [policy.backoff(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 8.0, 8.0]

    def test_custom_base(self):
        policy = RetryPolicy(base_delay=0.5, max_delay=10.0)
        assert policy.backoff(3) == 2.0


class TestRetryMachine:
    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryMachine(RetryPolicy(max_attempts=0))

    def test_success_on_first_attempt(self):
        delays = []

        async def sleep(seconds):
            delays.append(seconds)

        machine = RetryMachine(RetryPolicy(), sleep=sleep)
        outcome, calls = _run(machine, [Ok("v")])
        assert outcome.succeeded
        assert outcome.value == "v"
        assert outcome.attempts == 1
        assert calls == [1]
        assert delays == []
        assert machine.state is RetryState.SUCCEEDED

    def test_retries_until_success(self):
        delays = []

        async def sleep(seconds):
            delays.append(seconds)

        machine = RetryMachine(RetryPolicy(max_attempts=3), sleep=sleep)
        outcome, calls = _run(machine, [Err(RetryableError()), Err(RetryableError()), Ok(3)])
        assert outcome.succeeded
        assert outcome.value == 3
        assert calls == [1, 2, 3]
        assert delays == [1.0, 2.0]
        assert len(outcome.errors) == 2

    def test_exhaustion_returns_fallback_state(self):
        async def sleep(seconds):
            pass

        machine = RetryMachine(RetryPolicy(max_attempts=3), sleep=sleep)
        outcome, calls = _run(machine, [Err(RetryableError())] * 3)
        assert not outcome.succeeded
        assert outcome.state is RetryState.FALLBACK_RETURNED
        assert outcome.value is None
        assert calls == [1, 2, 3]
        assert machine.state is RetryState.FALLBACK_RETURNED

    def test_non_retryable_stops_immediately(self):
        delays = []

        async def sleep(seconds):
            delays.append(seconds)

        machine = RetryMachine(RetryPolicy(max_attempts=3), sleep=sleep)
        outcome, calls = _run(machine, [Err(PermanentError()), Ok(1)])
        assert outcome.state is RetryState.FALLBACK_RETURNED
        assert calls == [1]
        assert delays == []

    def test_single_attempt_policy(self):
        async def sleep(seconds):
            raise AssertionError("should not sleep")

        machine = RetryMachine(RetryPolicy(max_attempts=1), sleep=sleep)
        outcome, calls = _run(machine, [Err(RetryableError())])
        assert outcome.state is RetryState.FALLBACK_RETURNED
        assert calls == [1]
