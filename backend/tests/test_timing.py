"""Stage instrumentation tests: per-stage counts, batch settle stats and log lines."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio

import pytest

from geo_visibility.schemas.competitor_schema import RawCandidate, ValidationVerdict
from geo_visibility.schemas.entity_schema import EntitySnapshot
from geo_visibility.services.competitor_resolver import resolve_competitors
from geo_visibility.timing import BatchStats, StageCounts, StageTrace, batch_timer


class TestStageCounts:
    def test_keep_records_output_and_returns_items(self):
        record = StageCounts("generic_filter", count_in=5)
        items = ["HubSpot", "Pipedrive"]
        assert record.keep(items) is items
        assert record.count_out == 2
        assert record.dropped == 3
        assert record.describe() == "generic_filter 5 -> 2 (-3)"

    def test_unfinished_stage_drops_nothing(self):
        record = StageCounts("validation", count_in=4)
        assert record.dropped == 0
        assert record.describe() == "validation 4 in"


class TestStageTrace:
    def test_stages_recorded_in_order(self, capsys):
        trace = StageTrace("competitors")
        with trace.stage("collect", 6) as stage:
            stage.keep([1, 2, 3, 4])
        with trace.stage("generic_filter", 4) as stage:
            stage.keep([1, 2, 3])
        assert [s.name for s in trace.stages] == ["collect", "generic_filter"]
        assert trace.counts() == {"collect": 4, "generic_filter": 3}
        assert all(s.duration_ms >= 0 for s in trace.stages)

        out = capsys.readouterr().out
        assert "[TIMING] competitors: collect 6 -> 4 (-2)" in out
        assert "[TIMING] competitors: generic_filter 4 -> 3 (-1)" in out

    def test_async_stage(self):
        trace = StageTrace("competitors")

        async def run():
            async with trace.async_stage("validation", 3) as stage:
                await asyncio.sleep(0)
                stage.keep(["HubSpot"])

        asyncio.run(run())
        assert trace.counts() == {"validation": 1}

    def test_stage_recorded_when_block_raises(self):
        trace = StageTrace("competitors")
        with pytest.raises(RuntimeError):
            with trace.stage("relevance", 2):
                raise RuntimeError("boom")
        assert trace.stages[0].name == "relevance"
        assert trace.stages[0].count_out is None

    def test_summary_prints_funnel(self, capsys):
        trace = StageTrace("competitors")
        with trace.stage("collect", 3) as stage:
            stage.keep([1, 2])
        with trace.stage("rank", 2) as stage:
            stage.keep([1])
        total_ms = trace.summary()
        assert total_ms >= 0
        assert "[TIMING] competitors: TOTAL collect=2 -> rank=1" in capsys.readouterr().out


class TestBatchTimer:
    def test_settle_stats(self, capsys):
        async def run():
            async with batch_timer(2, 3, 12) as stats:
                stats.settled = 10
            return stats

        stats = asyncio.run(run())
        assert isinstance(stats, BatchStats)
        assert stats.dropped == 2
        out = capsys.readouterr().out
        assert "[TIMING] analysis: batch 2/3 START 12 task(s)" in out
        assert "[TIMING] analysis: batch 2/3 END 10/12 settled, 2 dropped" in out


class TestResolverTrace:
    def test_pipeline_logs_candidate_funnel(self, capsys):
        async def validator(names):
            return [ValidationVerdict(name=n, status="valid") for n in names]

        snapshot = EntitySnapshot(business_name="Acme CRM", industry="CRM software", region="Stockholm, Sweden")
        sources = {
            "website": [RawCandidate(name="HubSpot", source="website")],
            "market_intelligence": [
                RawCandidate(name="hubspot.", source="market_intelligence"),
                RawCandidate(name="Other providers", source="market_intelligence"),
                RawCandidate(name="Pipedrive", source="market_intelligence"),
            ],
        }
        asyncio.run(resolve_competitors(snapshot, sources, validator))
        out = capsys.readouterr().out
        assert "[TIMING] competitors: collect 4 -> " in out
        assert "[TIMING] competitors: rank 2 -> 2 (-0)" in out
        assert "[TIMING] competitors: TOTAL collect=" in out
