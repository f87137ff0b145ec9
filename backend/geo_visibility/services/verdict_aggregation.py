"""Multi-run verdict aggregation with a Wilson score interval on the mention rate."""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence

from pydantic import BaseModel, Field

from ..schemas.judge_schema import JudgeVerdict

_Z_95 = 1.96


class ConfidenceInterval(BaseModel):
    lower: float = Field(..., ge=0.0, le=1.0)
    upper: float = Field(..., ge=0.0, le=1.0)


class AggregatedVerdict(BaseModel):
    """Summary of several judge verdicts for the same prompt."""

    mention_rate: float = Field(..., alias="mentionRate")
    average_rank_position: Optional[float] = Field(default=None, alias="averageRankPosition")
    industry_match_rate: float = Field(..., alias="industryMatchRate")
    location_match_rate: float = Field(..., alias="locationMatchRate")
    sentiment_distribution: Dict[str, float] = Field(..., alias="sentimentDistribution")
    confidence_interval: ConfidenceInterval = Field(..., alias="confidenceInterval")
    run_count: int = Field(..., alias="runCount")

    class Config:
        populate_by_name = True


def wilson_interval(successes: int, trials: int, z: float = _Z_95) -> ConfidenceInterval:
    """Wilson score interval; better than the normal approximation for small n."""
    if trials <= 0:
        raise ValueError("trials must be positive")
    p = successes / trials
    denominator = 1 + z * z / trials
    center = (p + z * z / (2 * trials)) / denominator
    margin = (z / denominator) * math.sqrt(p * (1 - p) / trials + z * z / (4 * trials * trials))
    return ConfidenceInterval(lower=max(0.0, center - margin), upper=min(1.0, center + margin))


def aggregate_judge_results(verdicts: Sequence[JudgeVerdict]) -> AggregatedVerdict:
    if not verdicts:
        raise ValueError("Cannot aggregate empty results")

    total = len(verdicts)
    mentioned = sum(1 for v in verdicts if v.is_mentioned)

    ranks = [v.rank_position for v in verdicts if v.is_mentioned and v.rank_position is not None]
    average_rank = sum(ranks) / len(ranks) if ranks else None

    sentiments = {"positive": 0, "neutral": 0, "negative": 0}
    for verdict in verdicts:
        sentiments[verdict.sentiment or "neutral"] += 1

    return AggregatedVerdict(
        mention_rate=mentioned / total,
        average_rank_position=average_rank,
        industry_match_rate=sum(1 for v in verdicts if v.industry_match) / total,
        location_match_rate=sum(1 for v in verdicts if v.location_match) / total,
        sentiment_distribution={k: count / total for k, count in sentiments.items()},
        confidence_interval=wilson_interval(mentioned, total),
        run_count=total,
    )
