"""
Stage Instrumentation

Every evaluation batch and every competitor-resolution stage reports its
wall time together with how many items went in and how many came out, so
a thin competitor list or a short result set can be traced back to the
stage that lost the items.

    [TIMING] competitors: generic_filter 14 -> 11 (-3) - duration=0ms
    [TIMING] analysis: batch 2/3 END 11/12 settled, 1 dropped - duration=5120ms
"""

import time
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import Dict, List, Optional


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


@dataclass
class StageCounts:
    """Items entering and leaving one pipeline stage."""

    name: str
    count_in: int = 0
    count_out: Optional[int] = None
    duration_ms: float = 0.0

    def keep(self, items):
        """Record *items* as the stage output and hand them back."""
        self.count_out = len(items)
        return items

    @property
    def dropped(self) -> int:
        if self.count_out is None:
            return 0
        return max(0, self.count_in - self.count_out)

    def describe(self) -> str:
        if self.count_out is None:
            return f"{self.name} {self.count_in} in"
        return f"{self.name} {self.count_in} -> {self.count_out} (-{self.dropped})"


class StageTrace:
    """
    Ordered per-stage counts and timings for one pipeline run.

    Usage:
        trace = StageTrace("competitors")
        with trace.stage("generic_filter", len(candidates)) as stage:
            candidates = stage.keep(filter_generic(candidates))
        async with trace.async_stage("validation", len(candidates)) as stage:
            candidates = stage.keep(await validate_candidates(candidates))
        trace.summary()
    """

    def __init__(self, pipeline: str):
        self.pipeline = pipeline
        self.stages: List[StageCounts] = []
        self.start_time = time.perf_counter()

    def _finish(self, record: StageCounts, start: float) -> None:
        record.duration_ms = _elapsed_ms(start)
        self.stages.append(record)
        print(f"[TIMING] {self.pipeline}: {record.describe()} - duration={record.duration_ms:.0f}ms")

    @contextmanager
    def stage(self, name: str, count_in: int = 0):
        record = StageCounts(name, count_in)
        start = time.perf_counter()
        try:
            yield record
        finally:
            self._finish(record, start)

    @asynccontextmanager
    async def async_stage(self, name: str, count_in: int = 0):
        record = StageCounts(name, count_in)
        start = time.perf_counter()
        try:
            yield record
        finally:
            self._finish(record, start)

    def counts(self) -> Dict[str, Optional[int]]:
        """Stage name -> items that left the stage."""
        return {record.name: record.count_out for record in self.stages}

    def summary(self) -> float:
        total_ms = _elapsed_ms(self.start_time)
        funnel = " -> ".join(
            f"{record.name}={record.count_out}" for record in self.stages if record.count_out is not None
        )
        print(f"[TIMING] {self.pipeline}: TOTAL {funnel} - duration={total_ms:.0f}ms")
        return total_ms


@dataclass
class BatchStats:
    """Settle outcome of one evaluation batch."""

    index: int
    total_batches: int
    tasks: int
    settled: int = 0
    duration_ms: float = 0.0

    @property
    def dropped(self) -> int:
        return max(0, self.tasks - self.settled)


@asynccontextmanager
async def batch_timer(index: int, total_batches: int, tasks: int):
    """Time one batch. The caller sets ``settled`` before the block exits."""
    stats = BatchStats(index, total_batches, tasks)
    label = f"batch {index}/{total_batches}"
    print(f"[TIMING] analysis: {label} START {tasks} task(s)")
    start = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_ms = _elapsed_ms(start)
        print(
            f"[TIMING] analysis: {label} END {stats.settled}/{stats.tasks} settled, "
            f"{stats.dropped} dropped - duration={stats.duration_ms:.0f}ms"
        )
