"""Assemble the final report from the pipeline's stage outputs."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Sequence

from ..bundle import CompositeDataBundle
from ..models import (
    AnalysisResult,
    AuditSection,
    EvidenceKind,
    Rating,
    RecommendedApp,
    StageTimings,
    SynthesisOutput,
    TargetJob,
    section_id,
)
from .models import FinalReport, LighthouseSummary, ScreenshotUrls, SocialPreview

MISSING_TOOLS = "Missing Tools"
TECH_STACK_TITLE = "Tech Stack & Apps"

_NO_PREFIX = re.compile(r"^No\s+", re.IGNORECASE)
_DETECTED_SUFFIX = re.compile(r"\s+detected$", re.IGNORECASE)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_sections(
    results: Sequence[AnalysisResult],
    titles: Sequence[str],
    icons: Sequence[str],
) -> list[AuditSection]:
    """One section per result, titled by the static analyser list."""
    return [
        AuditSection(
            id=section_id(title),
            title=title,
            icon_key=icon,
            eli5_summary=result.eli5_summary,
            why_it_matters=result.why_it_matters,
            rating=result.overall_rating,
            score=None if result.is_error else result.score,
            findings=list(result.findings),
        )
        for result, title, icon in zip(results, titles, icons)
    ]


def missing_apps(results: Sequence[AnalysisResult], titles: Sequence[str]) -> list[RecommendedApp]:
    apps = []
    for result, title in zip(results, titles):
        if title != TECH_STACK_TITLE:
            continue
        for finding in result.findings:
            if finding.evidence_type is EvidenceKind.MISSING and finding.category == MISSING_TOOLS:
                name = _DETECTED_SUFFIX.sub("", _NO_PREFIX.sub("", finding.title))
                apps.append(RecommendedApp(name=name, category=finding.category, reason=finding.description))
    return apps


def build_report(
    job: TargetJob,
    bundle: CompositeDataBundle,
    results: Sequence[AnalysisResult],
    synthesis: SynthesisOutput,
    timings: StageTimings,
    titles: Sequence[str],
    icons: Sequence[str],
    failed_collectors: Sequence[str] = (),
) -> FinalReport:
    sections = build_sections(results, titles, icons)
    og = bundle.html.og_tags
    stack = bundle.tech_stack
    return FinalReport(
        job_id=job.job_id,
        url=job.url,
        hostname=job.hostname,
        page_label=job.label,
        generated_at=utc_now_iso(),
        audit_duration_ms=timings.total_ms,
        timings=timings,
        overall_score=synthesis.overall_score,
        executive_summary=synthesis.executive_summary,
        sections=sections,
        top_fixes=list(synthesis.top_fixes),
        platform=stack.platform if stack else None,
        detected_apps=list(stack.detected_apps) if stack else [],
        missing_apps=missing_apps(results, titles),
        screenshots=ScreenshotUrls(desktop=bundle.screenshots.desktop, mobile=bundle.screenshots.mobile),
        social_preview=SocialPreview(og_image=og.image, og_title=og.title, og_description=og.description),
        lighthouse=LighthouseSummary(mobile=bundle.lighthouse.mobile, desktop=bundle.lighthouse.desktop),
        unavailable_sections=[s.id for s in sections if s.rating is Rating.ERROR],
        failed_collectors=list(failed_collectors),
    )
