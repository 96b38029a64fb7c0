"""Tests for section analysers: fallback chain, heuristics and inputs."""

import asyncio

import pytest

from site_audit.analysers import (
    ANALYSER_CLASSES,
    ContentAnalyser,
    PerformanceAnalyser,
    SecurityAnalyser,
    SeoAnalyser,
    TechStackAnalyser,
    VisualAnalyser,
    default_analysers,
    rate_findings,
)
from site_audit.bundle import (
    DetectedApp,
    HtmlData,
    LinkCheckData,
    BrokenLink,
    TechStackData,
)
from site_audit.exceptions import MissingInputError, ProviderExhausted
from site_audit.models import AnalysisResult, EvidenceKind, Finding, Impact, Rating
from site_audit.orchestration import AnalyserOrchestrator
from site_audit.providers import ProviderSet


class _Stalled:
    """Provider that never answers."""

    def __init__(self):
        self.calls = 0

    async def call(self, prompt, schema):
        self.calls += 1
        await asyncio.sleep(30)


def _finding(impact):
    return Finding(
        id="t-001",
        title="t",
        description="d",
        evidence="e",
        evidence_type=EvidenceKind.HTML,
        impact=impact,
        fix="f",
        category="c",
        section="s",
    )


def _payload(title, score=77):
    return AnalysisResult(
        section_title=title,
        eli5_summary="Looks good overall.",
        why_it_matters="Because.",
        overall_rating=Rating.GOOD,
        score=score,
        findings=[],
    )


class TestRateFindings:
    def test_two_high_is_critical(self):
        rating, score = rate_findings([_finding(Impact.HIGH), _finding(Impact.HIGH), _finding(Impact.LOW)])
        assert rating is Rating.CRITICAL
        assert score == 100 - 50 - 3

    def test_one_high_needs_work(self):
        rating, score = rate_findings([_finding(Impact.HIGH), _finding(Impact.MEDIUM)])
        assert rating is Rating.NEEDS_WORK
        assert score == 65

    def test_no_high_is_good(self):
        assert rate_findings([]) == (Rating.GOOD, 100.0)

    def test_score_is_clamped(self):
        _, score = rate_findings([_finding(Impact.HIGH)] * 6)
        assert score == 0


class TestFallbackChain:
    def test_fallback_result_is_returned_unchanged(self, bundle, fake_provider):
        """Primary always fails, secondary succeeds with P: the result is exactly P."""
        payload = _payload(PerformanceAnalyser.title)
        primary = fake_provider("gemini_fast", [RuntimeError("503"), RuntimeError("503")])
        secondary = fake_provider("openai_fast", [payload])
        analyser = PerformanceAnalyser(ProviderSet({"gemini_fast": primary, "openai_fast": secondary}))

        result = asyncio.run(analyser.analyse(bundle))
        assert result is payload
        assert len(primary.prompts) == 2
        assert len(secondary.prompts) == 1

    def test_primary_retried_once_before_secondary(self, bundle, fake_provider):
        payload = _payload(PerformanceAnalyser.title)
        primary = fake_provider("gemini_fast", [RuntimeError("reset"), payload])
        secondary = fake_provider("openai_fast", [])
        analyser = PerformanceAnalyser(ProviderSet({"gemini_fast": primary, "openai_fast": secondary}))

        assert asyncio.run(analyser.analyse(bundle)) is payload
        assert secondary.prompts == []

    def test_exhausted_providers_fall_back_to_heuristic(self, bundle, fake_provider):
        primary = fake_provider("gemini", [RuntimeError("x"), RuntimeError("y")])
        secondary = fake_provider("openai", [RuntimeError("z")])
        analyser = VisualAnalyser(ProviderSet({"gemini": primary, "openai": secondary}))

        result = asyncio.run(analyser.analyse(bundle))
        assert result == analyser.heuristic(bundle)

    def test_mislabelled_payload_is_pinned_to_section(self, bundle, fake_provider):
        analyser = PerformanceAnalyser(ProviderSet({"gemini_fast": fake_provider("g", [_payload("Speed")])}))
        result = asyncio.run(analyser.analyse(bundle))
        assert result.section_title == PerformanceAnalyser.title
        assert result.score == 77

    def test_missing_required_field_raises_before_any_call(self, make_bundle, fake_provider):
        provider = fake_provider("openai_fast", [])
        analyser = TechStackAnalyser(ProviderSet({"openai_fast": provider}))
        with pytest.raises(MissingInputError) as exc_info:
            asyncio.run(analyser.analyse(make_bundle(sparse=True)))
        assert exc_info.value.fields == ["tech_stack"]
        assert provider.prompts == []

    def test_heuristic_failure_exhausts_chain(self, bundle):
        class Broken(ContentAnalyser):
            def findings(self, bundle):
                raise ValueError("bad data")

        with pytest.raises(ProviderExhausted):
            asyncio.run(Broken().analyse(bundle))

    def test_stalled_providers_still_reach_heuristic(self, bundle):
        primary = _Stalled()
        secondary = _Stalled()
        analyser = SeoAnalyser(
            ProviderSet({SeoAnalyser.primary: primary, SeoAnalyser.secondary: secondary}),
            attempt_timeout=0.5,
            unit_timeout=1.0,
        )
        orchestrator = AnalyserOrchestrator([analyser.descriptor()], timeout_seconds=1.0)

        [result] = asyncio.run(orchestrator.run(bundle))
        assert result.overall_rating is not Rating.ERROR
        assert result == analyser.heuristic(bundle)
        assert primary.calls == 2
        assert secondary.calls == 1

    def test_provider_timeout_fits_unit_budget(self):
        analyser = SeoAnalyser(attempt_timeout=60, unit_timeout=120)
        assert analyser.provider_timeout(3) * 3 < 120
        assert SeoAnalyser(attempt_timeout=10, unit_timeout=120).provider_timeout(3) == 10
        assert SeoAnalyser(attempt_timeout=60).provider_timeout(3) == 60


class TestPrompt:
    def test_prompt_is_deterministic(self, make_bundle):
        analyser = ContentAnalyser()
        assert analyser.build_prompt(make_bundle()) == analyser.build_prompt(make_bundle())

    def test_prompt_projects_only_read_fields(self, bundle):
        prompt = SecurityAnalyser().build_prompt(bundle)
        assert '"security_headers"' in prompt
        assert '"missingHeaders"' in prompt
        assert '"html"' not in prompt


class TestHeuristics:
    def test_every_analyser_runs_on_full_bundle(self, bundle):
        for analyser in default_analysers():
            result = analyser.heuristic(bundle)
            assert result.section_title == analyser.title
            assert all(f.section == analyser.title for f in result.findings)
            assert 0 <= result.score <= 100

    def test_analysers_without_requirements_tolerate_sparse_bundle(self, make_bundle):
        sparse = make_bundle(sparse=True)
        for analyser in default_analysers():
            if analyser.requires and any(getattr(sparse, f) is None for f in analyser.requires):
                continue
            assert analyser.heuristic(sparse).overall_rating is not Rating.ERROR

    def test_security_without_data_is_high_impact(self, make_bundle):
        result = SecurityAnalyser().heuristic(make_bundle(sparse=True))
        assert result.findings[0].title == "Security data unavailable"
        assert result.findings[0].impact is Impact.HIGH

    def test_missing_analytics_is_reported_as_missing_tool(self, make_bundle):
        stack = TechStackData(platform="WordPress", detected_apps=[DetectedApp(name="jQuery", category="JavaScript Library")])
        result = TechStackAnalyser().heuristic(make_bundle(tech_stack=stack))
        missing = [f for f in result.findings if f.category == "Missing Tools"]
        assert {f.title for f in missing} == {"No analytics tool detected", "No email marketing tool detected"}
        assert result.overall_rating is Rating.NEEDS_WORK

    def test_broken_links_counted(self, make_bundle):
        links = LinkCheckData(
            total_checked=4,
            broken=[BrokenLink(url=f"https://acme.test/{i}", status_code=404, source_url="https://acme.test/") for i in range(4)],
        )
        result = ContentAnalyser().heuristic(make_bundle(link_check=links))
        broken = [f for f in result.findings if "broken" in f.title]
        assert broken[0].title == "4 broken internal links"
        assert broken[0].impact is Impact.HIGH

    def test_bare_page_needs_work_for_visual(self, make_bundle):
        result = VisualAnalyser().heuristic(make_bundle(html=HtmlData()))
        assert result.overall_rating is Rating.NEEDS_WORK
        assert result.findings[0].id == "vis-001"


class TestRegistry:
    def test_static_order_and_weights(self):
        analysers = default_analysers()
        assert [a.title for a in analysers] == [cls.title for cls in ANALYSER_CLASSES]
        assert [a.weight for a in analysers] == [1.5, 1.5, 1.0, 1.0, 1.0, 0.75, 0.75, 1.0]
        assert [a.section_id for a in analysers][:2] == ["visual-design", "performance-speed"]

    def test_descriptor_names_match_titles(self):
        for analyser in default_analysers():
            assert analyser.descriptor().name == analyser.title
            assert not analyser.descriptor().required
