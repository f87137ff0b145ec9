"""Competitor name normalizer.

Produces the identity key used to deduplicate candidates across sources.

Rules:
  - Trim and lowercase
  - Collapse internal whitespace to single spaces
  - Strip terminal punctuation (. , ; : ! ?)

Idempotent: normalize_name(normalize_name(x)) == normalize_name(x).
"""

from __future__ import annotations

import re
from typing import Iterable, List

_WHITESPACE = re.compile(r"\s+")
_TERMINAL_PUNCTUATION = ".,;:!?"


def normalize_name(raw_name: str) -> str:
    """Canonical identity key for a free-text name."""
    key = _WHITESPACE.sub(" ", raw_name.strip().lower())
    # Stripping punctuation can expose trailing whitespace ("acme ." -> "acme ")
    while key and (key[-1] in _TERMINAL_PUNCTUATION or key[-1].isspace()):
        key = key.rstrip(_TERMINAL_PUNCTUATION).rstrip()
    return key


def dedupe_names(raw_names: Iterable[str]) -> List[str]:
    """Drop later names whose key was already seen. First spelling wins."""
    seen: set[str] = set()
    unique: List[str] = []
    for name in raw_names:
        key = normalize_name(name)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(name.strip())
    return unique
