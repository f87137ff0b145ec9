"""Generic-Name Filter.

LLM sources regularly answer with categories ("Other providers",
"Global CRM Solutions") instead of companies. These are dropped after
merging and before relevance scoring.

Pattern rules:
  1. Leading generic adjective  ("other ...", "global ...", "enterprise ...")
  2. Trailing category noun     ("... solutions", "... platforms")
  3. Boilerplate                ("... and others", "etc.")
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence

from ..constants import (
    CATEGORY_NOUNS,
    GENERIC_LEADING_ADJECTIVES,
    GENERIC_TRAILING_NOUNS,
    MIN_NAME_LENGTH,
)
from ..schemas.competitor_schema import CompetitorCandidate
from .competitor_normalizer import normalize_name

logger = logging.getLogger(__name__)


def _alternation(words: Sequence[str]) -> str:
    return "|".join(re.escape(w) for w in words)


GENERIC_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"^(?:{_alternation(GENERIC_LEADING_ADJECTIVES)})\b", re.IGNORECASE),
    re.compile(rf"\b(?:{_alternation(GENERIC_TRAILING_NOUNS)})$", re.IGNORECASE),
    re.compile(r"\band\s+others?\b", re.IGNORECASE),
    re.compile(r"\betc\.?$", re.IGNORECASE),
    re.compile(r"^(?:n/?a|none|unknown)$", re.IGNORECASE),
)


def is_rejected_at_collection(name: str) -> bool:
    """Too short, or a lone category noun such as "providers"."""
    key = normalize_name(name)
    if len(key) < MIN_NAME_LENGTH:
        return True
    return " " not in key and key in CATEGORY_NOUNS


def is_generic_name(name: str) -> bool:
    key = normalize_name(name)
    if not key:
        return True
    return any(pattern.search(key) for pattern in GENERIC_PATTERNS)


def filter_generic(candidates: Sequence[CompetitorCandidate]) -> List[CompetitorCandidate]:
    """Keep only candidates that look like a specific entity."""
    kept: List[CompetitorCandidate] = []
    for candidate in candidates:
        if is_generic_name(candidate.name):
            print(f"🧹 [COMPETITORS] Dropped generic name: \"{candidate.name}\"")
            continue
        kept.append(candidate)
    logger.debug("Generic filter kept %d of %d", len(kept), len(candidates))
    return kept
