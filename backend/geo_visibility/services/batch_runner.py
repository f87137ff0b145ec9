"""Task Scheduler (Batch Runner).

Builds the prompt x provider cartesian product and runs it in fixed-size
batches on the event loop. Every task in a batch starts together; the
next batch starts only after the whole batch has settled. A failing task
is logged and dropped, it never aborts its batch.

``results`` is appended to as tasks complete. All appends happen on the
event loop between awaits, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from ..config import get_batch_size
from ..schemas.analysis_schema import PromptResult
from ..schemas.entity_schema import EntitySnapshot
from ..schemas.judge_schema import JudgeVerdict
from ..timing import batch_timer

logger = logging.getLogger(__name__)

Responder = Callable[[str, str], Awaitable[str]]
Judge = Callable[[str, EntitySnapshot], Awaitable[JudgeVerdict]]
ProgressCallback = Callable[[int, int, int], None]


@dataclass(frozen=True)
class Task:
    prompt_text: str
    provider_id: str


def build_tasks(prompts: Sequence[str], providers: Sequence[str]) -> List[Task]:
    """Cartesian product, prompt-major: (p1, a), (p1, b), (p2, a), ..."""
    return [Task(prompt, provider) for prompt in prompts for provider in providers]


def batch_count(total_tasks: int, batch_size: int) -> int:
    return math.ceil(total_tasks / batch_size) if total_tasks else 0


async def run_tasks(
    tasks: Sequence[Task],
    snapshot: EntitySnapshot,
    responder: Responder,
    judge: Judge,
    batch_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> List[PromptResult]:
    """Run every task and return the results of those that succeeded.

    Parameters
    ----------
    tasks : sequence of Task
        Work items, executed in order of batches.
    responder : async (prompt_text, provider_id) -> answer_text
    judge : async (answer_text, snapshot) -> JudgeVerdict
    batch_size : int, optional
        Tasks in flight at once (default from ``ANALYSIS_BATCH_SIZE``).
    on_progress : callable, optional
        Called as ``on_progress(batches_done, total_batches, results_so_far)``
        after each batch settles.

    Returns
    -------
    list[PromptResult]
        In completion order; ``len(results) <= len(tasks)``.
    """
    size = max(1, batch_size or get_batch_size())
    total_batches = batch_count(len(tasks), size)
    results: List[PromptResult] = []

    async def process(task: Task) -> None:
        try:
            print(f"Running: \"{task.prompt_text[:30]}...\" [{task.provider_id}]")
            answer = await responder(task.prompt_text, task.provider_id)
            verdict = await judge(answer, snapshot)
        except Exception as exc:
            print(
                f"❌ [ANALYSIS] Task failed: \"{task.prompt_text[:20]}...\" "
                f"[{task.provider_id}] -> {type(exc).__name__}: {str(exc)[:120]}"
            )
            logger.warning("Dropped task provider=%s: %s", task.provider_id, exc)
            return
        results.append(
            PromptResult(
                model=task.provider_id,
                prompt_text=task.prompt_text,
                responder_answer=answer,
                judge_result=verdict,
            )
        )

    print(f"🚀 [ANALYSIS] Processing {len(tasks)} checks in {total_batches} batch(es) of up to {size}")

    for index in range(total_batches):
        batch = tasks[index * size:(index + 1) * size]
        settled_before = len(results)
        async with batch_timer(index + 1, total_batches, len(batch)) as stats:
            outcomes = await asyncio.gather(*(process(t) for t in batch), return_exceptions=True)
            stats.settled = len(results) - settled_before
        for outcome in outcomes:
            if isinstance(outcome, Exception):
                logger.error("Unexpected task error escaped worker: %s", outcome)
        if on_progress is not None:
            on_progress(index + 1, total_batches, len(results))

    return results
