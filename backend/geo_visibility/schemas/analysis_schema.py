from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .entity_schema import EntitySnapshot
from .judge_schema import JudgeVerdict


class PromptResult(BaseModel):
    """One completed (prompt, provider) evaluation."""

    model: str = Field(..., description="Provider that produced the answer, e.g. 'openai'")
    prompt_text: str = Field(..., alias="promptText")
    responder_answer: str = Field(..., alias="responderAnswer")
    judge_result: JudgeVerdict = Field(..., alias="judgeResult")

    class Config:
        populate_by_name = True


class VisibilityScore(BaseModel):
    """Deterministic aggregate of a result set."""

    overall_score: int = Field(..., ge=0, le=100, alias="overallScore")
    coverage_fraction: str = Field(
        ...,
        alias="coverageFraction",
        description="'{mentions}/{len(results)}', e.g. '3/4'",
    )

    class Config:
        populate_by_name = True


class AnalysisResult(BaseModel):
    """Outcome of a visibility analysis run.

    ``coverage_fraction`` denominator always equals ``len(results)``; tasks
    that failed outright contribute no entry.
    """

    snapshot: EntitySnapshot
    results: List[PromptResult] = Field(default_factory=list)
    overall_score: int = Field(..., ge=0, le=100, alias="overallScore")
    coverage_fraction: str = Field(..., alias="coverageFraction")
    competitor_mentions: Dict[str, int] = Field(
        default_factory=dict,
        alias="competitorMentions",
        description="Answers mentioning each supplied competitor",
    )

    class Config:
        populate_by_name = True


class AnalysisRequest(BaseModel):
    """Request body for POST /analyze."""

    snapshot: EntitySnapshot
    prompts: List[str] = Field(..., min_length=1, max_length=100)
    competitors: Optional[List[str]] = Field(default=None, max_length=50)


class ScoreRequest(BaseModel):
    """Request body for POST /score."""

    results: List[PromptResult] = Field(default_factory=list)
