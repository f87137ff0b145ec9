from typing import Literal, Optional

from pydantic import BaseModel, Field, StrictBool, field_validator

MentionType = Literal["direct", "alias", "implied", "none"]
Sentiment = Literal["positive", "neutral", "negative"]

_MENTION_TYPES = frozenset(("direct", "alias", "implied", "none"))
_SENTIMENTS = frozenset(("positive", "neutral", "negative"))

# Keys the judge model must return before a verdict is trusted
REQUIRED_VERDICT_KEYS: tuple[str, ...] = ("isMentioned", "industryMatch", "locationMatch")


class JudgeVerdict(BaseModel):
    """Structured judgment of whether and how the target appears in one answer."""

    is_mentioned: StrictBool = Field(..., alias="isMentioned")
    mention_type: MentionType = Field(default="none", alias="mentionType")
    rank_position: Optional[int] = Field(
        default=None,
        alias="rankPosition",
        description="1-based position when the answer is a list, else null",
    )
    industry_match: StrictBool = Field(..., alias="industryMatch")
    location_match: StrictBool = Field(..., alias="locationMatch")
    sentiment: Sentiment = Field(default="neutral")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("rank_position", mode="before")
    @classmethod
    def _positive_rank_only(cls, value):
        # Judges report 0 or negatives for "not ranked"
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)) and value >= 1 and float(value).is_integer():
            return int(value)
        return None

    @field_validator("mention_type", mode="before")
    @classmethod
    def _known_mention_type(cls, value):
        text = value.strip().lower() if isinstance(value, str) else ""
        return text if text in _MENTION_TYPES else "none"

    @field_validator("sentiment", mode="before")
    @classmethod
    def _known_sentiment(cls, value):
        # "mixed", null and the like read as neutral
        text = value.strip().lower() if isinstance(value, str) else ""
        return text if text in _SENTIMENTS else "neutral"


def fallback_verdict() -> JudgeVerdict:
    """Neutral verdict returned when the judge cannot produce a usable one.

    Scores zero on every positive term but still counts toward coverage.
    """
    return JudgeVerdict(
        is_mentioned=False,
        mention_type="none",
        rank_position=None,
        industry_match=False,
        location_match=False,
        sentiment="neutral",
    )
