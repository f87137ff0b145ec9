"""Centralized constants shared by the evaluation and competitor pipelines.

This module is the SINGLE SOURCE OF TRUTH for source-trust confidences,
generic-name vocabularies and the country table used for geographic
relevance. Reused by:
  - Candidate Collector & Merger
  - Generic-Name Filter
  - Relevance Scorer
"""

from __future__ import annotations

# ── Candidate sources (processed in this priority order) ────────────────
SOURCE_WEBSITE = "website"
SOURCE_MARKET_INTELLIGENCE = "market_intelligence"
SOURCE_COMPETITIVE_LANDSCAPE = "competitive_landscape"

SOURCE_PRIORITY: tuple[str, ...] = (
    SOURCE_WEBSITE,
    SOURCE_MARKET_INTELLIGENCE,
    SOURCE_COMPETITIVE_LANDSCAPE,
)

# ── Initial confidence by source ────────────────────────────────────────
WEBSITE_CONFIDENCE: float = 0.95

MARKET_INTELLIGENCE_CONFIDENCE: dict[str, float] = {
    "high": 0.85,
    "medium": 0.70,
    "low": 0.50,
}

LANDSCAPE_CONFIDENCE: dict[str, float] = {
    "market_leader": 0.75,
    "emerging": 0.65,
}

# Anything we cannot place in a tier above
DEFAULT_SOURCE_CONFIDENCE: float = 0.60

MERGE_CONFIDENCE_BOOST: float = 0.10
MERGE_CONFIDENCE_CAP: float = 0.98

# ── Competitor types ────────────────────────────────────────────────────
COMPETITOR_TYPES: frozenset[str] = frozenset(
    {"direct", "indirect", "market_leader", "emerging"}
)

# ── Collection-time rejects ─────────────────────────────────────────────
MIN_NAME_LENGTH = 3

# Single words that name a category, never a company
CATEGORY_NOUNS: frozenset[str] = frozenset({
    "providers", "provider", "solutions", "solution", "platforms",
    "platform", "services", "service", "tools", "tool", "systems",
    "system", "software", "companies", "company", "vendors", "vendor",
    "agencies", "agency", "apps", "brands", "competitors", "others",
})

# ── Generic-name filter vocabulary ──────────────────────────────────────
GENERIC_LEADING_ADJECTIVES: tuple[str, ...] = (
    "other", "others", "global", "international", "local", "regional",
    "national", "enterprise", "business", "various", "multiple",
    "several", "professional", "commercial", "european", "american",
    "nordic", "scandinavian", "generic", "traditional", "independent",
    "small", "large", "major", "leading", "top", "online", "many",
)

GENERIC_TRAILING_NOUNS: tuple[str, ...] = (
    "solutions", "providers", "platforms", "companies", "services",
    "tools", "systems", "software", "vendors", "agencies", "firms",
    "businesses", "brands", "players", "alternatives", "apps",
)

# ── Relevance bonuses ───────────────────────────────────────────────────
COUNTRY_MATCH_BONUS = 0.30
LOCAL_WEIGHT_FACTOR = 0.15
REGIONAL_WEIGHT_FACTOR = 0.10
NATIONAL_WEIGHT_FACTOR = 0.10
GEO_WEIGHT_THRESHOLD = 0.3
SERVICE_MATCH_BONUS: dict[str, float] = {"high": 0.10, "medium": 0.05}
MULTI_SOURCE_BONUS = 0.05

# ── Pipeline caps ───────────────────────────────────────────────────────
MAX_VALIDATION_CANDIDATES = 15
MAX_COMPETITORS = 10

# ── Country table: canonical name -> lowercase aliases and demonyms ─────
COUNTRIES: dict[str, tuple[str, ...]] = {
    "Sweden": ("sweden", "swedish", "sverige"),
    "Norway": ("norway", "norwegian", "norge"),
    "Denmark": ("denmark", "danish", "danmark"),
    "Finland": ("finland", "finnish", "suomi"),
    "Iceland": ("iceland", "icelandic"),
    "Germany": ("germany", "german", "deutschland"),
    "Austria": ("austria", "austrian", "österreich"),
    "Switzerland": ("switzerland", "swiss"),
    "Netherlands": ("netherlands", "dutch", "holland"),
    "Belgium": ("belgium", "belgian"),
    "France": ("france", "french"),
    "Spain": ("spain", "spanish", "españa"),
    "Portugal": ("portugal", "portuguese"),
    "Italy": ("italy", "italian", "italia"),
    "Poland": ("poland", "polish", "polska"),
    "Ireland": ("ireland", "irish"),
    "United Kingdom": ("united kingdom", "uk", "britain", "british", "england", "scotland", "wales"),
    "United States": ("united states", "usa", "u.s.", "america", "american"),
    "Canada": ("canada", "canadian"),
    "Mexico": ("mexico", "mexican"),
    "Brazil": ("brazil", "brazilian", "brasil"),
    "Australia": ("australia", "australian"),
    "New Zealand": ("new zealand",),
    "India": ("india", "indian"),
    "Pakistan": ("pakistan", "pakistani"),
    "Japan": ("japan", "japanese"),
    "Singapore": ("singapore", "singaporean"),
    "United Arab Emirates": ("united arab emirates", "uae", "emirati"),
    "South Africa": ("south africa", "south african"),
}

# ── Geographic weight presets ───────────────────────────────────────────
# (local, regional, national)
CITY_LEVEL_WEIGHTS: tuple[float, float, float] = (0.6, 0.25, 0.15)
COUNTRY_LEVEL_WEIGHTS: tuple[float, float, float] = (0.1, 0.3, 0.6)
