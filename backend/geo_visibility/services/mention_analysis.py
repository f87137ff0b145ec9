"""Brand and competitor mention counting across answer texts.

Pure string matching. No LLMs.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..schemas.analysis_schema import PromptResult

_COMPANY_SUFFIX = re.compile(r"\s+(inc|llc|ltd|ab|corp|corporation|company|co)\.?$", re.IGNORECASE)
_LIST_ITEM = re.compile(r"(?:^|\n)\s*(?:\d+[.)]|-|\*|•)\s*([^\n]+)")


class CompetitorMention(BaseModel):
    competitor: str
    mentioned: bool
    rank_position: Optional[int] = Field(default=None, alias="rankPosition")

    class Config:
        populate_by_name = True


def strip_company_suffix(name: str) -> str:
    """'Acme Inc.' -> 'acme'."""
    return _COMPANY_SUFFIX.sub("", name.lower()).strip()


def extract_list_items(answer_text: str) -> List[str]:
    """Numbered or bulleted lines, in order."""
    return [m.group(1).strip() for m in _LIST_ITEM.finditer(answer_text)]


def detect_competitor_mentions(
    answer_text: str,
    competitors: Sequence[str],
    brand: Optional[str] = None,
) -> List[CompetitorMention]:
    """Report, per competitor, whether the answer mentions it and at which list rank.

    A competitor that is the brand itself is never reported as mentioned.
    """
    brand_key = strip_company_suffix(brand) if brand else None
    lower_answer = answer_text.lower()
    list_items = [item.lower() for item in extract_list_items(answer_text)]
    detections: List[CompetitorMention] = []

    for competitor in competitors:
        lower_name = competitor.lower().strip()
        short_name = strip_company_suffix(competitor)
        if not lower_name or (brand_key and short_name == brand_key):
            detections.append(CompetitorMention(competitor=competitor, mentioned=False))
            continue

        mentioned = lower_name in lower_answer or (bool(short_name) and short_name in lower_answer)

        rank: Optional[int] = None
        if mentioned:
            for index, item in enumerate(list_items):
                if lower_name in item or (short_name and short_name in item):
                    rank = index + 1
                    break

        detections.append(
            CompetitorMention(competitor=competitor, mentioned=mentioned, rank_position=rank)
        )

    return detections


def count_brand_mentions(results: Iterable[PromptResult]) -> int:
    return sum(1 for r in results if r.judge_result.is_mentioned)


def count_competitor_mentions(
    results: Iterable[PromptResult],
    competitors: Sequence[str],
    brand: Optional[str] = None,
) -> Dict[str, int]:
    """Number of answers that mention each competitor (every competitor starts at 0)."""
    counts: Dict[str, int] = {competitor: 0 for competitor in competitors}
    for result in results:
        for detection in detect_competitor_mentions(result.responder_answer, competitors, brand):
            if detection.mentioned:
                counts[detection.competitor] += 1
    return counts
