"""Competitor candidate sources.

Each source returns a list of :class:`RawCandidate` tagged with its source
name. LLM-backed sources never raise: a failed call yields an empty list.

Sources:
  website                names the business mentions on its own site (highest trust)
  market_intelligence    direct/indirect competitors with confidence and fit signals
  competitive_landscape  market leaders and emerging players in the niche
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..constants import (
    SOURCE_COMPETITIVE_LANDSCAPE,
    SOURCE_MARKET_INTELLIGENCE,
    SOURCE_WEBSITE,
)
from ..schemas.competitor_schema import RawCandidate
from ..schemas.entity_schema import EntitySnapshot
from .openai_client import call_openai_chat_async

logger = logging.getLogger(__name__)

_GEOGRAPHIC_VALUES = {"local", "regional", "national", "global"}
_SERVICE_VALUES = {"high", "medium", "low"}
_CONFIDENCE_VALUES = {"high", "medium", "low"}


def _business_block(snapshot: EntitySnapshot) -> str:
    return (
        f"- Name: {snapshot.business_name}\n"
        f"- Industry/Niche: {snapshot.industry or 'Unknown'}\n"
        f"- Region: {snapshot.region or 'Unknown'}\n"
        f"- Services: {', '.join(snapshot.description_specs) or 'Unknown'}\n"
        f"- Strategic Focus: {', '.join(snapshot.strategic_focus) or 'Unknown'}"
    )


_MARKET_INTELLIGENCE_PROMPT = """You are a Market Intelligence Agent.
Task: Identify direct and indirect competitors for this business.

Business Information:
{business}

Return ONLY JSON:
{{
  "competitors": [
    {{
      "name": "Competitor Company Name",
      "type": "direct" | "indirect",
      "reason": "Brief explanation why this is a competitor",
      "confidence": "high" | "medium" | "low",
      "geographicMatch": "local" | "regional" | "national" | "global",
      "serviceMatch": "high" | "medium" | "low",
      "countryMatch": true | false
    }}
  ]
}}

Guidelines:
- Identify 5-10 competitors (mix of direct and indirect)
- Direct competitors: same industry, same region, similar services
- Indirect competitors: different approach but serve the same customer needs
- countryMatch is true only if the competitor operates in the business's country
- Be specific with company names (not generic categories)
"""

_LANDSCAPE_PROMPT = """You are a Competitive Landscape Analyst.
Task: List the market leaders and the fastest-growing emerging players in this business's niche.

Business Information:
{business}

Return ONLY JSON:
{{
  "marketLeaders": [{{"name": "Company", "reason": "why it leads"}}],
  "emergingPlayers": [{{"name": "Company", "reason": "why it is rising"}}]
}}

Guidelines:
- 3-5 entries per list
- Real company names only, never categories like "local agencies"
"""


def _clean(value: Any, allowed: set[str]) -> Optional[str]:
    text = str(value).strip().lower() if value is not None else ""
    return text if text in allowed else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def website_candidates(names: Iterable[str]) -> List[RawCandidate]:
    """On-site competitor mentions supplied by the caller."""
    return [
        RawCandidate(name=name.strip(), source=SOURCE_WEBSITE, reason="Mentioned on the business website")
        for name in names
        if name and name.strip()
    ]


def _rows(parsed: Any, key: str) -> List[Any]:
    rows = parsed.get(key) if isinstance(parsed, dict) else None
    return rows if isinstance(rows, list) else []


def parse_market_intelligence(parsed: Dict[str, Any]) -> List[RawCandidate]:
    candidates: List[RawCandidate] = []
    for row in _rows(parsed, "competitors"):
        if not isinstance(row, dict) or not str(row.get("name") or "").strip():
            continue
        raw_type = str(row.get("type") or "direct").strip().lower()
        candidates.append(
            RawCandidate(
                name=str(row["name"]).strip(),
                source=SOURCE_MARKET_INTELLIGENCE,
                type="indirect" if raw_type == "indirect" else "direct",
                reason=str(row.get("reason") or ""),
                confidence_tier=_clean(row.get("confidence"), _CONFIDENCE_VALUES),
                geographic_match=_clean(row.get("geographicMatch"), _GEOGRAPHIC_VALUES),
                service_match=_clean(row.get("serviceMatch"), _SERVICE_VALUES),
                country_match=_as_bool(row.get("countryMatch")),
            )
        )
    return candidates


def parse_competitive_landscape(parsed: Dict[str, Any]) -> List[RawCandidate]:
    candidates: List[RawCandidate] = []
    for key, tier in (("marketLeaders", "market_leader"), ("emergingPlayers", "emerging")):
        for row in _rows(parsed, key):
            if not isinstance(row, dict) or not str(row.get("name") or "").strip():
                continue
            candidates.append(
                RawCandidate(
                    name=str(row["name"]).strip(),
                    source=SOURCE_COMPETITIVE_LANDSCAPE,
                    type=tier,
                    reason=str(row.get("reason") or ""),
                    confidence_tier=tier,
                )
            )
    return candidates


async def fetch_market_intelligence(snapshot: EntitySnapshot) -> List[RawCandidate]:
    parsed = await call_openai_chat_async(
        messages=[
            {"role": "system", "content": _MARKET_INTELLIGENCE_PROMPT.format(business=_business_block(snapshot))},
            {"role": "user", "content": "Identify competitors."},
        ],
        temperature=0.4,
    )
    if parsed is None:
        logger.warning("Market intelligence source returned nothing for %s", snapshot.business_name)
        return []
    try:
        candidates = parse_market_intelligence(parsed)
    except Exception as exc:
        logger.warning("Market intelligence output unusable for %s: %s", snapshot.business_name, exc)
        return []
    print(f"🔎 [COMPETITORS] Market intelligence: {len(candidates)} candidate(s)")
    return candidates


async def fetch_competitive_landscape(snapshot: EntitySnapshot) -> List[RawCandidate]:
    parsed = await call_openai_chat_async(
        messages=[
            {"role": "system", "content": _LANDSCAPE_PROMPT.format(business=_business_block(snapshot))},
            {"role": "user", "content": "Map the competitive landscape."},
        ],
        temperature=0.4,
    )
    if parsed is None:
        logger.warning("Competitive landscape source returned nothing for %s", snapshot.business_name)
        return []
    try:
        candidates = parse_competitive_landscape(parsed)
    except Exception as exc:
        logger.warning("Competitive landscape output unusable for %s: %s", snapshot.business_name, exc)
        return []
    print(f"🔎 [COMPETITORS] Competitive landscape: {len(candidates)} candidate(s)")
    return candidates
