"""Deterministic Visibility Scoring Engine.

Converts judge verdicts into an overall 0-100 visibility score and a
coverage fraction.

Per-result points
-----------------
- mentioned                     +10
- mentioned and rank 1-3        +6
- industry match                +2
- location match                +2
Maximum per result = 20.

Rules
-----
- NO API calls
- NO LLMs
- Order-independent (pure sum)
- Monotonic: flipping a flag false -> true never lowers the score
"""

from __future__ import annotations

import math
from typing import Iterable, List

from ..schemas.analysis_schema import PromptResult, VisibilityScore
from ..schemas.judge_schema import JudgeVerdict

MENTION_POINTS = 10
TOP_RANK_POINTS = 6
TOP_RANK_CUTOFF = 3
INDUSTRY_POINTS = 2
LOCATION_POINTS = 2
MAX_POINTS_PER_RESULT = MENTION_POINTS + TOP_RANK_POINTS + INDUSTRY_POINTS + LOCATION_POINTS


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_verdict(verdict: JudgeVerdict) -> int:
    """Points earned by a single verdict (0-20)."""
    points = 0
    if verdict.is_mentioned:
        points += MENTION_POINTS
        if verdict.rank_position is not None and verdict.rank_position <= TOP_RANK_CUTOFF:
            points += TOP_RANK_POINTS
    if verdict.industry_match:
        points += INDUSTRY_POINTS
    if verdict.location_match:
        points += LOCATION_POINTS
    return points


def compute_visibility_score(results: Iterable[PromptResult]) -> VisibilityScore:
    """Aggregate results into ``overallScore`` and ``coverageFraction``.

    ``overallScore = round(100 * sum(points) / (20 * n))``, or 0 when there
    are no results.
    """
    verdicts: List[JudgeVerdict] = [r.judge_result for r in results]
    total = len(verdicts)
    mentions = sum(1 for v in verdicts if v.is_mentioned)

    if total == 0:
        overall = 0
    else:
        earned = sum(score_verdict(v) for v in verdicts)
        overall = _round_half_up(100 * earned / (MAX_POINTS_PER_RESULT * total))
        overall = max(0, min(100, overall))

    return VisibilityScore(
        overall_score=overall,
        coverage_fraction=f"{mentions}/{total}",
    )
