"""Section analyser base: prompt, provider fallback chain, local heuristic."""

from __future__ import annotations

import json
from typing import Any, Optional

from ..exceptions import MissingInputError
from ..logging_config import get_logger
from ..models import AnalysisResult, EvidenceKind, Finding, Impact, Rating, section_id
from ..orchestration.fallback import Attempt, try_in_order
from ..orchestration.units import Tier, UnitDescriptor
from ..providers import ProviderSet

logger = get_logger(__name__)

# Provider attempts together may use this share of the unit budget.
PROVIDER_BUDGET_SHARE = 0.8


def rate_findings(findings: list[Finding]) -> tuple[Rating, float]:
    """Rating and score derived from impact counts."""
    high = sum(1 for f in findings if f.impact is Impact.HIGH)
    medium = sum(1 for f in findings if f.impact is Impact.MEDIUM)
    low = sum(1 for f in findings if f.impact is Impact.LOW)

    if high >= 2:
        rating = Rating.CRITICAL
    elif high == 1:
        rating = Rating.NEEDS_WORK
    else:
        rating = Rating.GOOD
    score = 100 - 25 * high - 10 * medium - 3 * low
    return rating, float(max(0, min(100, score)))


class SectionAnalyser:
    """One report section.

    Subclasses set the class attributes and implement :meth:`findings`.
    ``requires`` names bundle fields that must be non-null; ``reads`` names
    the fields projected into the provider prompt.
    """

    title: str = ""
    icon_key: str = "circle"
    weight: float = 1.0
    prefix: str = "sec"
    requires: tuple[str, ...] = ()
    reads: tuple[str, ...] = ()
    primary: str = "gemini_fast"
    secondary: str = "openai_fast"
    instructions: str = ""
    why_it_matters: str = ""

    def __init__(
        self,
        providers: Optional[ProviderSet] = None,
        attempt_timeout: Optional[float] = None,
        unit_timeout: Optional[float] = None,
    ):
        self.providers = providers if providers is not None else ProviderSet()
        self.attempt_timeout = attempt_timeout
        self.unit_timeout = unit_timeout

    @property
    def section_id(self) -> str:
        return section_id(self.title)

    def descriptor(self) -> UnitDescriptor:
        return UnitDescriptor(self.title, Tier.OPTIONAL, self.analyse)

    # ── Inputs ─────────────────────────────────────────────────────

    def check_inputs(self, bundle: Any) -> None:
        missing = [name for name in self.requires if getattr(bundle, name, None) is None]
        if missing:
            raise MissingInputError(self.title, missing)

    def project(self, bundle: Any) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for name in self.reads:
            value = getattr(bundle, name, None)
            data[name] = value.model_dump(mode="json", by_alias=True) if value is not None else None
        return data

    def build_prompt(self, bundle: Any) -> str:
        """Deterministic for a given bundle."""
        payload = json.dumps(self.project(bundle), sort_keys=True, indent=2, ensure_ascii=False)
        return (
            f"You are auditing the '{self.title}' section of a website audit.\n"
            f"{self.instructions}\n\n"
            f"Set sectionTitle to \"{self.title}\" and every finding's section to \"{self.title}\". "
            "Rate the section Good, Needs Work or Critical and give a 0-100 score. "
            "Cite evidence for every finding.\n\n"
            f"Collected data:\n{payload}"
        )

    # ── Chain ──────────────────────────────────────────────────────

    def attempts(self, bundle: Any, prompt: str) -> list[Attempt[AnalysisResult]]:
        """Primary twice, then secondary, then the local heuristic."""
        attempts: list[Attempt[AnalysisResult]] = []
        for role, provider in self.providers.chain((self.primary, self.primary, self.secondary)):
            attempts.append(Attempt(role, lambda p=provider: p.call(prompt, AnalysisResult)))
        attempts.append(Attempt("heuristic", lambda: self._run_heuristic(bundle)))
        return attempts

    async def _run_heuristic(self, bundle: Any) -> AnalysisResult:
        return self.heuristic(bundle)

    def provider_timeout(self, provider_attempts: int) -> Optional[float]:
        """Per-attempt timeout that leaves the heuristic room inside ``unit_timeout``."""
        if self.unit_timeout is None or provider_attempts == 0:
            return self.attempt_timeout
        share = self.unit_timeout * PROVIDER_BUDGET_SHARE / provider_attempts
        return share if self.attempt_timeout is None else min(self.attempt_timeout, share)

    async def analyse(self, bundle: Any) -> AnalysisResult:
        self.check_inputs(bundle)
        prompt = self.build_prompt(bundle)
        attempts = self.attempts(bundle, prompt)
        result = await try_in_order(attempts, self.title, self.provider_timeout(len(attempts) - 1))
        return self.normalise(result)

    def normalise(self, result: AnalysisResult) -> AnalysisResult:
        """Pin section labels to this analyser's title; untouched when they already match."""
        if result.section_title == self.title and all(f.section == self.title for f in result.findings):
            return result
        findings = [f if f.section == self.title else f.model_copy(update={"section": self.title}) for f in result.findings]
        return result.model_copy(update={"section_title": self.title, "findings": findings})

    # ── Heuristic ──────────────────────────────────────────────────

    def heuristic(self, bundle: Any) -> AnalysisResult:
        findings = self.findings(bundle)
        rating, score = rate_findings(findings)
        return AnalysisResult(
            section_title=self.title,
            eli5_summary=self.summarise(rating, findings),
            why_it_matters=self.why_it_matters,
            overall_rating=rating,
            score=score,
            findings=findings,
        )

    def findings(self, bundle: Any) -> list[Finding]:
        raise NotImplementedError

    def summarise(self, rating: Rating, findings: list[Finding]) -> str:
        if not findings:
            return f"No {self.title.lower()} problems were found."
        if rating is Rating.CRITICAL:
            return f"Several serious {self.title.lower()} problems need fixing ({len(findings)} findings)."
        if rating is Rating.NEEDS_WORK:
            return f"One important {self.title.lower()} problem stands out, plus {len(findings) - 1} smaller ones."
        noun = "issue" if len(findings) == 1 else "issues"
        return f"{self.title} is in good shape with {len(findings)} minor {noun} to tidy up."

    def finding(
        self,
        n: int,
        title: str,
        description: str,
        evidence: str,
        evidence_type: EvidenceKind,
        impact: Impact,
        fix: str,
        category: str,
        evidence_detail: Optional[str] = None,
    ) -> Finding:
        return Finding(
            id=f"{self.prefix}-{n:03d}",
            title=title,
            description=description,
            evidence=evidence,
            evidence_type=evidence_type,
            evidence_detail=evidence_detail,
            impact=impact,
            fix=fix,
            category=category,
            section=self.title,
        )
