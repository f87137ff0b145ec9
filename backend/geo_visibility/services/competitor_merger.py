"""Candidate Collector & Merger.

Collects raw competitor names from every source, in source-priority order,
into an owned dict keyed by normalized name. A later sighting of the same
key is folded into the existing candidate with the pure
:func:`merge_candidate` instead of creating a second entry.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence

from ..constants import (
    DEFAULT_SOURCE_CONFIDENCE,
    LANDSCAPE_CONFIDENCE,
    MARKET_INTELLIGENCE_CONFIDENCE,
    MERGE_CONFIDENCE_BOOST,
    MERGE_CONFIDENCE_CAP,
    SOURCE_COMPETITIVE_LANDSCAPE,
    SOURCE_MARKET_INTELLIGENCE,
    SOURCE_PRIORITY,
    SOURCE_WEBSITE,
    WEBSITE_CONFIDENCE,
)
from ..schemas.competitor_schema import CompetitorCandidate, RawCandidate
from .competitor_cleaner import is_rejected_at_collection
from .competitor_normalizer import normalize_name

logger = logging.getLogger(__name__)


def initial_confidence(raw: RawCandidate) -> float:
    """Source-trust confidence for a first sighting."""
    tier = (raw.confidence_tier or "").strip().lower()
    if raw.source == SOURCE_WEBSITE:
        return WEBSITE_CONFIDENCE
    if raw.source == SOURCE_MARKET_INTELLIGENCE:
        return MARKET_INTELLIGENCE_CONFIDENCE.get(tier, DEFAULT_SOURCE_CONFIDENCE)
    if raw.source == SOURCE_COMPETITIVE_LANDSCAPE:
        return LANDSCAPE_CONFIDENCE.get(tier or (raw.type or ""), DEFAULT_SOURCE_CONFIDENCE)
    return DEFAULT_SOURCE_CONFIDENCE


def candidate_from_raw(raw: RawCandidate) -> CompetitorCandidate:
    return CompetitorCandidate(
        name=raw.name.strip(),
        normalized_key=normalize_name(raw.name),
        type=raw.type or "direct",
        reason=raw.reason.strip(),
        confidence=initial_confidence(raw),
        sources={raw.source},
        geographic_match=raw.geographic_match,
        service_match=raw.service_match,
        country_match=bool(raw.country_match),
    )


def merge_candidate(existing: CompetitorCandidate, incoming: RawCandidate) -> CompetitorCandidate:
    """Fold a later sighting into an existing candidate.

    Sources are unioned, confidence rises by a fixed step up to a cap, and
    geographic/service/country fields are overwritten only when the
    incoming source supplies them. Name, type and reason from the
    higher-priority source are kept. Returns a new candidate.
    """
    update: Dict[str, object] = {
        "sources": existing.sources | {incoming.source},
        "confidence": min(MERGE_CONFIDENCE_CAP, existing.confidence + MERGE_CONFIDENCE_BOOST),
    }
    if incoming.geographic_match is not None:
        update["geographic_match"] = incoming.geographic_match
    if incoming.service_match is not None:
        update["service_match"] = incoming.service_match
    if incoming.country_match is not None:
        update["country_match"] = incoming.country_match
    if not existing.reason and incoming.reason:
        update["reason"] = incoming.reason.strip()
    return existing.model_copy(update=update)


def _ordered_sources(source_lists: Mapping[str, Sequence[RawCandidate]]) -> List[str]:
    known = [s for s in SOURCE_PRIORITY if s in source_lists]
    extra = [s for s in source_lists if s not in SOURCE_PRIORITY]
    return known + extra


def collect_candidates(
    source_lists: Mapping[str, Sequence[RawCandidate]],
) -> List[CompetitorCandidate]:
    """Merge every source into one candidate per normalized key.

    Parameters
    ----------
    source_lists : mapping
        Source tag -> raw candidates from that source. Sources are
        processed website first, then market intelligence, then the
        competitive landscape, then anything else in insertion order.

    Returns
    -------
    list[CompetitorCandidate]
        First-sighting order, no duplicate ``normalized_key``.
    """
    merged: Dict[str, CompetitorCandidate] = {}
    rejected = 0

    for source in _ordered_sources(source_lists):
        for raw in source_lists[source]:
            if raw.source != source:
                raw = raw.model_copy(update={"source": source})
            if is_rejected_at_collection(raw.name):
                rejected += 1
                continue
            key = normalize_name(raw.name)
            existing = merged.get(key)
            if existing is None:
                merged[key] = candidate_from_raw(raw)
            else:
                merged[key] = merge_candidate(existing, raw)

    print(
        f"🧩 [COMPETITORS] Collected {len(merged)} unique candidate(s) "
        f"from {len(source_lists)} source(s), rejected {rejected}"
    )
    return list(merged.values())

