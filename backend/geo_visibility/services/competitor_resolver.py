"""Competitor entity-resolution pipeline.

collect + merge -> generic filter -> relevance score (top K)
-> validation pass (fail-open) -> final ranker (top N)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import get_max_competitors, get_validation_top_k
from ..constants import (
    MAX_COMPETITORS,
    MAX_VALIDATION_CANDIDATES,
    SOURCE_COMPETITIVE_LANDSCAPE,
    SOURCE_MARKET_INTELLIGENCE,
    SOURCE_WEBSITE,
)
from ..schemas.competitor_schema import CompetitorCandidate, RawCandidate
from ..schemas.entity_schema import EntitySnapshot
from ..timing import StageTrace
from .competitor_cleaner import filter_generic
from .competitor_merger import collect_candidates
from .competitor_normalizer import normalize_name
from .competitor_sources import (
    fetch_competitive_landscape,
    fetch_market_intelligence,
    website_candidates,
)
from .competitor_validator import Validator, llm_validate_names, validate_candidates
from .geo_context import detect_geo_context
from .relevance_scorer import score_and_rank

logger = logging.getLogger(__name__)

_SOURCE_LABELS = {
    SOURCE_WEBSITE: "website",
    SOURCE_MARKET_INTELLIGENCE: "market intelligence",
    SOURCE_COMPETITIVE_LANDSCAPE: "competitive landscape",
}


def annotate_reason(candidate: CompetitorCandidate) -> str:
    labels = ", ".join(_SOURCE_LABELS.get(s, s) for s in sorted(candidate.sources))
    base = candidate.reason.strip() or "Identified as a competitor"
    return f"{base} (sources: {labels})"


def rank_competitors(
    candidates: Sequence[CompetitorCandidate],
    limit: Optional[int] = None,
) -> List[CompetitorCandidate]:
    """Final Ranker: dedupe again, keep relevance order, truncate, annotate reasons."""
    limit = get_max_competitors() if limit is None else max(0, min(limit, MAX_COMPETITORS))
    seen: set[str] = set()
    ranked: List[CompetitorCandidate] = []
    for candidate in sorted(candidates, key=lambda c: c.relevance_score, reverse=True):
        if len(ranked) >= limit:
            break
        key = normalize_name(candidate.name)
        if key in seen:
            continue
        seen.add(key)
        ranked.append(candidate.model_copy(update={"reason": annotate_reason(candidate)}))
    return ranked


async def resolve_competitors(
    snapshot: EntitySnapshot,
    source_lists: Mapping[str, Sequence[RawCandidate]],
    validator: Validator = llm_validate_names,
    *,
    top_k: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[CompetitorCandidate]:
    """Run the whole resolution pipeline over already-gathered source lists.

    Never raises on validator failure; the filtered, scored list is used
    instead.
    """
    if top_k is None:
        top_k = get_validation_top_k()
    else:
        top_k = max(0, min(top_k, MAX_VALIDATION_CANDIDATES))
    trace = StageTrace("competitors")

    with trace.stage("collect", sum(len(rows) for rows in source_lists.values())) as stage:
        candidates = stage.keep(collect_candidates(source_lists))
    with trace.stage("generic_filter", len(candidates)) as stage:
        candidates = stage.keep(filter_generic(candidates))
    with trace.stage("relevance", len(candidates)) as stage:
        geo = detect_geo_context(snapshot)
        candidates = stage.keep(score_and_rank(candidates, geo, top_k=top_k))
    async with trace.async_stage("validation", len(candidates)) as stage:
        candidates = stage.keep(await validate_candidates(candidates, validator))
    with trace.stage("rank", len(candidates)) as stage:
        ranked = stage.keep(rank_competitors(candidates, limit))

    trace.summary()
    print(f"🏁 [COMPETITORS] Resolved {len(ranked)} competitor(s) for \"{snapshot.business_name}\"")
    return ranked


async def gather_sources(
    snapshot: EntitySnapshot,
    website_mentions: Sequence[str] = (),
    include_llm_sources: bool = True,
) -> Dict[str, List[RawCandidate]]:
    """Fetch every candidate source. LLM sources run concurrently."""
    sources: Dict[str, List[RawCandidate]] = {SOURCE_WEBSITE: website_candidates(website_mentions)}
    if include_llm_sources:
        outcomes = await asyncio.gather(
            fetch_market_intelligence(snapshot),
            fetch_competitive_landscape(snapshot),
            return_exceptions=True,
        )
        for source, outcome in zip((SOURCE_MARKET_INTELLIGENCE, SOURCE_COMPETITIVE_LANDSCAPE), outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Competitor source %s failed: %s", source, outcome)
                print(f"⚠️ [COMPETITORS] Source {source} failed, continuing without it")
                outcome = []
            sources[source] = outcome
    return sources


async def find_competitors(
    snapshot: EntitySnapshot,
    website_mentions: Sequence[str] = (),
    include_llm_sources: bool = True,
    validator: Validator = llm_validate_names,
) -> List[Dict[str, Any]]:
    """Gather sources, resolve, and return the competitor JSON list."""
    sources = await gather_sources(snapshot, website_mentions, include_llm_sources)
    ranked = await resolve_competitors(snapshot, sources, validator)
    return [c.to_output() for c in ranked]
