"""Synthesis stage: provider chain with a local fallback of the same shape."""

from __future__ import annotations

import json
from typing import Optional, Sequence

from ..analysis.scoring import executive_summary, top_fixes, weighted_score
from ..bundle import CompositeDataBundle
from ..exceptions import ProviderExhausted
from ..logging_config import get_logger
from ..models import AnalysisResult, Impact, SynthesisOutput
from ..providers import ProviderSet
from .fallback import Attempt, try_in_order

logger = get_logger(__name__)

SYNTHESIS_ROLES = ("openai", "gemini_fast")


def local_synthesis(
    results: Sequence[AnalysisResult],
    weights: Sequence[float],
    hostname: str,
    max_fixes: int = 5,
) -> SynthesisOutput:
    """Compute the synthesis locally. Never calls out."""
    score = weighted_score(results, weights)
    fixes = top_fixes(results, max_fixes)
    return SynthesisOutput(
        executive_summary=executive_summary(hostname, score, results, fixes),
        overall_score=score,
        top_fixes=fixes,
    )


def consolidate(
    results: Sequence[AnalysisResult],
    bundle: Optional[CompositeDataBundle],
    hostname: str,
) -> dict:
    """Per-section rating, score and high-impact findings."""
    sections = []
    for result in results:
        sections.append({
            "section": result.section_title,
            "rating": result.overall_rating.value,
            "score": None if result.is_error else result.score,
            "highImpactFindings": [
                {"title": f.title, "fix": f.fix}
                for f in result.findings
                if f.impact is Impact.HIGH
            ],
        })
    data: dict = {"hostname": hostname, "sections": sections}
    if bundle is not None:
        data["lighthouse"] = {
            "mobilePerformance": bundle.lighthouse.mobile.performance,
            "desktopPerformance": bundle.lighthouse.desktop.performance,
        }
        data["platform"] = bundle.tech_stack.platform if bundle.tech_stack else None
    return data


class SynthesisStage:
    """``run(results, bundle) -> SynthesisOutput``; never raises on provider failure."""

    def __init__(
        self,
        providers: ProviderSet,
        weights: Sequence[float],
        max_fixes: int = 5,
        attempt_timeout: Optional[float] = None,
    ):
        self.providers = providers
        self.weights = list(weights)
        self.max_fixes = max_fixes
        self.attempt_timeout = attempt_timeout

    def build_prompt(
        self,
        results: Sequence[AnalysisResult],
        bundle: Optional[CompositeDataBundle],
        hostname: str,
    ) -> str:
        payload = json.dumps(consolidate(results, bundle, hostname), sort_keys=True, indent=2)
        return (
            "You are writing the summary of a website audit for a non-technical owner.\n"
            "Write a short executive summary, an overall score from 0 to 100 that weighs "
            "visual design and performance highest, and up to "
            f"{self.max_fixes} prioritised fixes drawn from the high-impact findings.\n\n"
            f"Section results:\n{payload}"
        )

    async def run(
        self,
        results: Sequence[AnalysisResult],
        bundle: Optional[CompositeDataBundle],
        hostname: str,
    ) -> SynthesisOutput:
        prompt = self.build_prompt(results, bundle, hostname)
        attempts = [
            Attempt(role, lambda p=provider: p.call(prompt, SynthesisOutput))
            for role, provider in self.providers.chain(SYNTHESIS_ROLES)
        ]
        try:
            return await try_in_order(attempts, "synthesis", self.attempt_timeout)
        except ProviderExhausted as e:
            if e.errors:
                logger.warning(f"Synthesis providers exhausted, computing locally: {e}")
            else:
                logger.info("No synthesis provider configured, computing locally")
            return local_synthesis(results, self.weights, hostname, self.max_fixes)
