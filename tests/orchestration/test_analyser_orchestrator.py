"""Tests for the analyser orchestrator, including the overlapped early analyser."""

import asyncio

import pytest

from site_audit.bundle import CompositeDataBundle, EarlyBundle
from site_audit.exceptions import RequiredCollectorFailure
from site_audit.models import Rating
from site_audit.orchestration import (
    AnalyserOrchestrator,
    CollectorOrchestrator,
    Tier,
    UnitDescriptor,
)


def _analyser(title, make_result, delay=0.0, error=None, seen=None):
    async def operation(bundle):
        if seen is not None:
            seen.append((title, type(bundle).__name__))
        await asyncio.sleep(delay)
        if error is not None:
            raise error
        return make_result(title)

    return UnitDescriptor(title, Tier.OPTIONAL, operation)


def _collectors(bundle, hooks=None, failing=()):
    hooks = hooks or {}
    units = []
    for name in CompositeDataBundle.model_fields:
        tier = Tier.REQUIRED if name in ("screenshots", "lighthouse", "html") else Tier.OPTIONAL

        async def operation(url, job_id, name=name):
            if name in hooks:
                await hooks[name]()
            if name in failing:
                raise RuntimeError(f"{name} failed")
            return getattr(bundle, name)

        units.append(UnitDescriptor(name, tier, operation))
    return units


class TestAnalyserOrchestrator:
    def test_one_failure_leaves_others_unaffected(self, bundle, make_result):
        titles = ["A", "B", "C", "D"]
        descriptors = [
            _analyser("A", make_result, delay=0.03),
            _analyser("B", make_result, error=RuntimeError("provider down")),
            _analyser("C", make_result),
            _analyser("D", make_result, delay=0.01),
        ]
        results = asyncio.run(AnalyserOrchestrator(descriptors, timeout_seconds=1).run(bundle))

        assert [r.section_title for r in results] == titles
        failed = results[1]
        assert failed.overall_rating is Rating.ERROR
        assert failed.findings == []
        assert "provider down" in failed.eli5_summary
        for title, result in zip(titles, results):
            if title != "B":
                assert result == make_result(title)

    def test_timeout_becomes_error_placeholder(self, bundle, make_result):
        descriptors = [
            _analyser("Fast", make_result),
            _analyser("Hangs", make_result, delay=5),
        ]
        results = asyncio.run(AnalyserOrchestrator(descriptors, timeout_seconds=0.05).run(bundle))
        assert results[0].overall_rating is Rating.GOOD
        assert results[1].overall_rating is Rating.ERROR
        assert results[1].findings == []
        assert "timed out" in results[1].eli5_summary


class TestOverlappedAnalysis:
    def test_early_analyser_starts_before_collection_finishes(self, bundle, make_result):
        seen = []

        async def scenario():
            visual_started = asyncio.Event()

            async def visual(early):
                seen.append(type(early).__name__)
                visual_started.set()
                return make_result("Visual")

            async def wait_for_visual():
                # deadlocks (and times out) unless the early analyser runs first
                await asyncio.wait_for(visual_started.wait(), timeout=2)

            collectors = CollectorOrchestrator(_collectors(bundle, hooks={"serp": wait_for_visual}), 5)
            analysers = AnalyserOrchestrator(
                [
                    UnitDescriptor("Visual", Tier.OPTIONAL, visual),
                    _analyser("Perf", make_result),
                    _analyser("SEO", make_result),
                ],
                timeout_seconds=5,
            )
            collected = []
            result = await analysers.run_overlapped(
                collectors.start("https://acme.test/", "job"), "Visual", on_collected=collected.append
            )
            return result, collected

        (full, results), collected = asyncio.run(scenario())
        assert seen == [EarlyBundle.__name__]
        assert full.serp == bundle.serp
        assert collected == [full]
        assert [r.section_title for r in results] == ["Visual", "Perf", "SEO"]

    def test_early_analyser_runs_exactly_once_at_static_position(self, bundle, make_result):
        seen = []
        descriptors = [
            _analyser("Perf", make_result, seen=seen),
            _analyser("Visual", make_result, seen=seen),
            _analyser("SEO", make_result, seen=seen),
        ]

        async def scenario():
            collection = CollectorOrchestrator(_collectors(bundle), 5).start("u", "j")
            return await AnalyserOrchestrator(descriptors, 5).run_overlapped(collection, "Visual")

        _, results = asyncio.run(scenario())
        assert [r.section_title for r in results] == ["Perf", "Visual", "SEO"]
        assert sorted(seen) == [
            ("Perf", "CompositeDataBundle"),
            ("SEO", "CompositeDataBundle"),
            ("Visual", "EarlyBundle"),
        ]

    def test_early_failure_degrades_to_placeholder(self, bundle, make_result):
        descriptors = [
            _analyser("Visual", make_result, error=RuntimeError("vision model down")),
            _analyser("Perf", make_result),
        ]

        async def scenario():
            collection = CollectorOrchestrator(_collectors(bundle), 5).start("u", "j")
            return await AnalyserOrchestrator(descriptors, 5).run_overlapped(collection, "Visual")

        _, results = asyncio.run(scenario())
        assert results[0].overall_rating is Rating.ERROR
        assert "vision model down" in results[0].eli5_summary
        assert results[1].overall_rating is Rating.GOOD

    def test_required_failure_cancels_early_analyser(self, bundle, make_result):
        state = {"cancelled": False}

        async def scenario():
            started = asyncio.Event()

            async def hanging_visual(early):
                started.set()
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    state["cancelled"] = True
                    raise

            async def after_visual_starts():
                await asyncio.wait_for(started.wait(), timeout=2)

            collection = CollectorOrchestrator(
                _collectors(bundle, hooks={"lighthouse": after_visual_starts}, failing={"lighthouse"}), 5
            ).start("u", "j")
            analysers = AnalyserOrchestrator(
                [UnitDescriptor("Visual", Tier.OPTIONAL, hanging_visual), _analyser("Perf", make_result)],
                timeout_seconds=30,
            )
            await analysers.run_overlapped(collection, "Visual")

        with pytest.raises(RequiredCollectorFailure) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.failed_collectors == ["lighthouse"]
        assert state["cancelled"]
