"""Geographic context detection for competitor relevance weighting.

"Malmö, Sweden" -> city-level market in Sweden (local competitors matter most)
"Sweden"        -> country-level market (national competitors matter most)
anything else   -> no geographic weighting
"""

from __future__ import annotations

import re
from typing import Optional

from ..constants import CITY_LEVEL_WEIGHTS, COUNTRIES, COUNTRY_LEVEL_WEIGHTS
from ..schemas.competitor_schema import GeoContext
from ..schemas.entity_schema import EntitySnapshot


def _alias_pattern(alias: str) -> re.Pattern[str]:
    # \b fails next to "." in aliases like "u.s.", so use look-arounds
    return re.compile(rf"(?<!\w){re.escape(alias)}(?!\w)", re.IGNORECASE)


_COUNTRY_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    country: tuple(_alias_pattern(alias) for alias in aliases)
    for country, aliases in COUNTRIES.items()
}


def find_country(text: str) -> Optional[str]:
    """Canonical country named in *text*, or None."""
    if not text:
        return None
    for country, patterns in _COUNTRY_PATTERNS.items():
        if any(p.search(text) for p in patterns):
            return country
    return None


def mentions_country(text: str, country: str) -> bool:
    patterns = _COUNTRY_PATTERNS.get(country, ())
    return any(p.search(text) for p in patterns)


def detect_geo_context(snapshot: EntitySnapshot) -> GeoContext:
    region = snapshot.region.strip()
    country = find_country(region) or find_country(" ".join(snapshot.description_specs))
    if country is None:
        return GeoContext()

    parts = [p.strip() for p in region.split(",") if p.strip()]
    has_locality = len(parts) > 1 and find_country(parts[0]) is None
    local, regional, national = CITY_LEVEL_WEIGHTS if has_locality else COUNTRY_LEVEL_WEIGHTS

    return GeoContext(
        country=country,
        is_country_specific=True,
        local_weight=local,
        regional_weight=regional,
        national_weight=national,
    )
