"""Relevance Scorer.

score = confidence
      + 0.30                 business is country-specific and the candidate matches that country
      + 0.15 * localWeight   geographicMatch == "local"    and localWeight    > 0.3
      + 0.10 * regionalWeight geographicMatch == "regional" and regionalWeight > 0.3
      + 0.10 * nationalWeight geographicMatch == "national" and nationalWeight > 0.3
      + 0.10 / 0.05          serviceMatch high / medium
      + 0.05                 more than one source
clipped to [0, 1].
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..constants import (
    COUNTRY_MATCH_BONUS,
    GEO_WEIGHT_THRESHOLD,
    LOCAL_WEIGHT_FACTOR,
    MULTI_SOURCE_BONUS,
    NATIONAL_WEIGHT_FACTOR,
    REGIONAL_WEIGHT_FACTOR,
    SERVICE_MATCH_BONUS,
)
from ..schemas.competitor_schema import CompetitorCandidate, GeoContext
from .geo_context import mentions_country


def _matches_country(candidate: CompetitorCandidate, geo: GeoContext) -> bool:
    if not geo.is_country_specific or not geo.country:
        return False
    if candidate.country_match:
        return True
    return mentions_country(f"{candidate.name} {candidate.reason}", geo.country)


def _geographic_bonus(candidate: CompetitorCandidate, geo: GeoContext) -> float:
    terms = {
        "local": (geo.local_weight, LOCAL_WEIGHT_FACTOR),
        "regional": (geo.regional_weight, REGIONAL_WEIGHT_FACTOR),
        "national": (geo.national_weight, NATIONAL_WEIGHT_FACTOR),
    }
    weight, factor = terms.get(candidate.geographic_match or "", (0.0, 0.0))
    return factor * weight if weight > GEO_WEIGHT_THRESHOLD else 0.0


def relevance_score(candidate: CompetitorCandidate, geo: GeoContext) -> float:
    score = candidate.confidence
    if _matches_country(candidate, geo):
        score += COUNTRY_MATCH_BONUS
    score += _geographic_bonus(candidate, geo)
    score += SERVICE_MATCH_BONUS.get(candidate.service_match or "", 0.0)
    if len(candidate.sources) > 1:
        score += MULTI_SOURCE_BONUS
    return max(0.0, min(1.0, score))


def score_and_rank(
    candidates: Sequence[CompetitorCandidate],
    geo: GeoContext,
    top_k: Optional[int] = None,
) -> List[CompetitorCandidate]:
    """Attach ``relevance_score``, sort descending and keep the top *top_k*.

    Ties keep collection order (``sorted`` is stable).
    """
    scored = [c.model_copy(update={"relevance_score": relevance_score(c, geo)}) for c in candidates]
    ranked = sorted(scored, key=lambda c: c.relevance_score, reverse=True)
    return ranked if top_k is None else ranked[:top_k]
