"""Visibility analysis orchestration.

prompts x providers -> batch runner (responder + judge) -> score aggregator.
The route stays thin; all of the work happens here.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence

from ..config import get_providers
from ..schemas.analysis_schema import AnalysisResult
from ..schemas.entity_schema import EntitySnapshot
from .batch_runner import Judge, ProgressCallback, Responder, build_tasks, run_tasks
from .judge import run_judge
from .mention_analysis import count_competitor_mentions
from .responder import run_responder
from .scoring_engine import compute_visibility_score

logger = logging.getLogger(__name__)


def _log_progress(done: int, total: int, completed: int) -> None:
    print(f"📊 [ANALYSIS] Batch {done}/{total} settled - {completed} result(s) so far")


async def analyze_visibility(
    snapshot: EntitySnapshot,
    prompts: Sequence[str],
    competitors: Optional[Sequence[str]] = None,
    *,
    providers: Optional[Sequence[str]] = None,
    responder: Responder = run_responder,
    judge: Judge = run_judge,
    batch_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = _log_progress,
) -> AnalysisResult:
    """Run every prompt against every provider and score the outcome.

    Failed tasks are dropped; ``coverage_fraction`` reflects only the
    results that exist.
    """
    provider_ids: List[str] = list(providers) if providers is not None else get_providers()
    tasks = build_tasks(prompts, provider_ids)

    print(
        f"🔍 [ANALYSIS] Starting analysis for \"{snapshot.business_name}\" "
        f"({len(prompts)} prompts x {len(provider_ids)} providers)"
    )
    t0 = time.perf_counter()

    results = await run_tasks(
        tasks,
        snapshot,
        responder=responder,
        judge=judge,
        batch_size=batch_size,
        on_progress=on_progress,
    )
    score = compute_visibility_score(results)
    competitor_mentions = count_competitor_mentions(results, competitors or [], snapshot.business_name)

    elapsed = time.perf_counter() - t0
    dropped = len(tasks) - len(results)
    print(
        f"✅ [ANALYSIS] Complete - score={score.overall_score} coverage={score.coverage_fraction} "
        f"dropped={dropped} ({elapsed:.1f}s)"
    )
    if dropped:
        logger.warning("%d of %d task(s) dropped for %s", dropped, len(tasks), snapshot.business_name)

    return AnalysisResult(
        snapshot=snapshot,
        results=results,
        overall_score=score.overall_score,
        coverage_fraction=score.coverage_fraction,
        competitor_mentions=competitor_mentions,
    )
