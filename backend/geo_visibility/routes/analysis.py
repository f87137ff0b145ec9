"""AI visibility analysis routes.

Thin layer: request validation is pydantic's, all work happens in
``services.analysis_service`` and ``services.scoring_engine``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from ..schemas.analysis_schema import AnalysisRequest, AnalysisResult, ScoreRequest, VisibilityScore
from ..services.analysis_service import analyze_visibility
from ..services.scoring_engine import compute_visibility_score

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    summary="Run a visibility analysis",
    response_description="Per-answer verdicts with the overall score and coverage",
)
async def analyze(request: AnalysisRequest) -> AnalysisResult:
    """Ask every provider every prompt, judge each answer, and score the run.

    Individual provider or judge failures never fail the request; they only
    shrink ``results`` (and so the coverage denominator).
    """
    print(f"➡️  [ANALYSIS] /analyze for \"{request.snapshot.business_name}\"")
    logger.info("Analyze request: %d prompt(s)", len(request.prompts))
    return await analyze_visibility(
        request.snapshot,
        request.prompts,
        request.competitors,
    )


@router.post(
    "/score",
    response_model=VisibilityScore,
    summary="Recompute score and coverage",
)
async def score(request: ScoreRequest) -> VisibilityScore:
    """Deterministic aggregate over already-judged results. No LLM calls."""
    return compute_visibility_score(request.results)
