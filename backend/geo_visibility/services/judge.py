"""Judge Evaluator.

Turns one answer text into a :class:`JudgeVerdict` for the target entity.

Failure handling
----------------
- ParseError      (not JSON)                 -> retry with backoff
- SchemaError     (JSON, required key absent) -> retry with backoff
- Transient error (timeout / rate limit)      -> retry with backoff
- Fatal error     (anything else)             -> stop, fallback verdict
After the last attempt the neutral fallback verdict is returned.
The evaluator never raises to its caller.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from ..config import get_judge_backoff_base, get_judge_backoff_max, get_judge_max_attempts
from ..schemas.entity_schema import EntitySnapshot
from ..schemas.judge_schema import REQUIRED_VERDICT_KEYS, JudgeVerdict, fallback_verdict
from .errors import ParseError, SchemaError, classify_provider_error, is_transient
from .openai_client import call_openai_chat_raw_async, sanitize_json, validate_required_keys
from .retry import Err, Ok, Result, RetryMachine, RetryPolicy

logger = logging.getLogger(__name__)

JudgeModel = Callable[[str, str], Awaitable[str]]

_JUDGE_SYSTEM = """You are an impartial judge evaluating an AI's response to see if it recommends a specific business.
Input:
1. Target Business Snapshot
2. The AI's Answer Text

Task:
Analyze if the 'Target Business' is mentioned in the 'Answer Text'.

Return JSON only conforming to this schema:
{{
  "isMentioned": boolean,
  "mentionType": "direct" | "alias" | "implied" | "none",
  "rankPosition": number | null,
  "industryMatch": boolean,
  "locationMatch": boolean,
  "sentiment": "positive" | "neutral" | "negative"
}}

rankPosition is the 1-based rank when the answer is a list, otherwise null.
industryMatch: does the answer discuss the correct industry?
locationMatch: does the answer discuss the correct location?

Target Business:
Name: {name}
Industry: {industry}
Region: {region}
Specs: {specs}
Website: {website}
"""


def build_judge_instruction(snapshot: EntitySnapshot) -> str:
    return _JUDGE_SYSTEM.format(
        name=snapshot.business_name,
        industry=snapshot.industry,
        region=snapshot.region,
        specs="; ".join(snapshot.description_specs),
        website=snapshot.website or "N/A",
    )


def build_judge_user_content(answer_text: str) -> str:
    return f'AI Answer Text to Evaluate:\n"""\n{answer_text}\n"""'


def parse_judge_response(raw: str) -> Result:
    """Parse raw judge-model output into ``Ok(JudgeVerdict)`` or ``Err(ParseError | SchemaError)``."""
    try:
        parsed: Any = json.loads(sanitize_json(raw))
    except ValueError as exc:
        return Err(ParseError(str(exc)))

    if not isinstance(parsed, dict):
        return Err(ParseError(f"Expected a JSON object, got {type(parsed).__name__}"))

    missing = validate_required_keys(parsed, REQUIRED_VERDICT_KEYS, context="JUDGE")
    if missing:
        return Err(SchemaError(f"Missing required keys: {missing}"))

    try:
        return Ok(JudgeVerdict.model_validate(parsed))
    except ValidationError as exc:
        return Err(SchemaError(f"Invalid verdict fields: {exc.error_count()} error(s)"))


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, (ParseError, SchemaError)):
        return True
    return is_transient(error)


class JudgeEvaluator:
    """Bounded-retry wrapper around a judge-model collaborator."""

    def __init__(
        self,
        judge_model: JudgeModel = call_openai_chat_raw_async,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.judge_model = judge_model
        self.policy = policy or RetryPolicy(
            max_attempts=get_judge_max_attempts(),
            base_delay=get_judge_backoff_base(),
            max_delay=get_judge_backoff_max(),
        )
        self._sleep = sleep

    async def evaluate(self, answer_text: str, snapshot: EntitySnapshot) -> JudgeVerdict:
        system_instruction = build_judge_instruction(snapshot)
        user_content = build_judge_user_content(answer_text)

        async def attempt_once(attempt: int) -> Result:
            try:
                raw = await self.judge_model(system_instruction, user_content)
            except Exception as exc:
                return Err(classify_provider_error(exc))
            return parse_judge_response(raw)

        machine = RetryMachine(self.policy, sleep=self._sleep, label="JUDGE")
        outcome = await machine.run(attempt_once, _is_retryable)

        if outcome.succeeded:
            verdict = outcome.value
            logger.debug(
                "Judge verdict: mentioned=%s rank=%s", verdict.is_mentioned, verdict.rank_position
            )
            return verdict

        last_error = outcome.errors[-1] if outcome.errors else None
        logger.warning(
            "Judge fell back to neutral verdict after %d attempt(s): %s",
            outcome.attempts,
            type(last_error).__name__ if last_error else "unknown",
        )
        return fallback_verdict()


async def run_judge(answer_text: str, snapshot: EntitySnapshot) -> JudgeVerdict:
    """Evaluate *answer_text* with the default OpenAI judge model."""
    return await JudgeEvaluator().evaluate(answer_text, snapshot)
