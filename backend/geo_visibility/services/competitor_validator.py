"""Validation Pass.

Asks a strict classifier which candidate names are real, specific,
findable companies. The pass fails open: if the validator is unavailable
or answers with something unusable, the pre-validation list is kept.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Sequence

from pydantic import ValidationError

from ..schemas.competitor_schema import CompetitorCandidate, ValidationVerdict
from .competitor_normalizer import normalize_name
from .errors import ValidatorError
from .openai_client import call_openai_chat_async

logger = logging.getLogger(__name__)

Validator = Callable[[List[str]], Awaitable[List[ValidationVerdict]]]

# "3. HubSpot" when the model echoes the numbered prompt list
_ECHOED_NUMBER = re.compile(r"^\s*\d+\s*[.)]\s+")

_VALIDATOR_SYSTEM = """You are a strict company-name validator.

For each name decide whether it is an actual, specific company or brand that
a customer could find by searching for it.

Mark VALID only if you can confirm the name refers to a real, specific,
findable company. Mark INVALID for:
- categories or descriptions ("CRM providers", "local dealerships")
- made-up or unverifiable names
- people, places, publications or product lines without a company
When in doubt, INVALID.

Return JSON only:
{
  "results": [
    {"name": "<name exactly as given>", "status": "VALID" | "INVALID", "reason": "short reason"}
  ]
}
"""


def _parse_verdicts(parsed: Dict[str, Any]) -> List[ValidationVerdict]:
    rows = parsed.get("results")
    if not isinstance(rows, list):
        raise ValidatorError("Validator response has no 'results' list")
    if not rows:
        raise ValidatorError("Validator returned an empty 'results' list")

    verdicts: List[ValidationVerdict] = []
    for row in rows:
        if not isinstance(row, dict):
            raise ValidatorError(f"Validator row is not an object: {row!r}")
        try:
            verdicts.append(
                ValidationVerdict(
                    name=_ECHOED_NUMBER.sub("", str(row.get("name", ""))).strip(),
                    status=str(row.get("status", "")).strip().lower(),
                    reason=str(row.get("reason") or ""),
                )
            )
        except ValidationError as exc:
            raise ValidatorError(f"Malformed validator row: {row!r}") from exc
    return verdicts


async def llm_validate_names(names: List[str]) -> List[ValidationVerdict]:
    """Validator collaborator backed by the OpenAI chat model.

    Raises ValidatorError when the model is unavailable or its output is malformed.
    """
    if not names:
        return []

    numbered = "\n".join(f"{i}. {name}" for i, name in enumerate(names, 1))
    parsed = await call_openai_chat_async(
        messages=[
            {"role": "system", "content": _VALIDATOR_SYSTEM},
            {"role": "user", "content": f"Validate these names:\n{numbered}"},
        ],
        temperature=0.0,
    )
    if parsed is None:
        raise ValidatorError("Validator model returned no usable response")
    return _parse_verdicts(parsed)


def _require_coverage(
    candidates: Sequence[CompetitorCandidate],
    verdicts: Sequence[ValidationVerdict],
) -> None:
    verdict_keys = {normalize_name(v.original_name) for v in verdicts}
    if not any(c.normalized_key in verdict_keys for c in candidates):
        raise ValidatorError(
            f"Validator answered for {len(verdicts)} name(s), none of them a submitted candidate"
        )


async def validate_candidates(
    candidates: Sequence[CompetitorCandidate],
    validator: Validator = llm_validate_names,
) -> List[CompetitorCandidate]:
    """Keep candidates the validator marks VALID; on any validator failure keep them all."""
    if not candidates:
        return []

    try:
        verdicts = await validator([c.name for c in candidates])
        _require_coverage(candidates, verdicts)
    except Exception as exc:
        print(f"⚠️  [COMPETITORS] Validator failed, keeping {len(candidates)} unvalidated candidate(s): {exc}")
        logger.warning("Competitor validation failed open: %s", exc)
        return list(candidates)

    valid_keys = {normalize_name(v.original_name) for v in verdicts if v.status == "valid"}
    kept = [c for c in candidates if c.normalized_key in valid_keys]

    for verdict in verdicts:
        if verdict.status == "invalid":
            logger.debug("Validator rejected %s: %s", verdict.original_name, verdict.reason)
    print(f"✅ [COMPETITORS] Validator confirmed {len(kept)}/{len(candidates)} candidate(s)")
    return kept
