"""The externally visible report."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..bundle import DetectedApp, LighthouseScores
from ..models import AuditModel, AuditSection, PageLabel, RecommendedApp, StageTimings, TopFix


class ScreenshotUrls(AuditModel):
    desktop: str
    mobile: str


class SocialPreview(AuditModel):
    og_image: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None


class LighthouseSummary(AuditModel):
    mobile: LighthouseScores
    desktop: LighthouseScores


class FinalReport(AuditModel):
    """Built once at the end of a job; never mutated afterwards."""

    job_id: str
    url: str
    hostname: str
    page_label: PageLabel
    generated_at: str
    audit_duration_ms: int
    timings: StageTimings
    overall_score: float
    executive_summary: str
    sections: list[AuditSection]
    top_fixes: list[TopFix]
    platform: Optional[str] = None
    detected_apps: list[DetectedApp] = Field(default_factory=list)
    missing_apps: list[RecommendedApp] = Field(default_factory=list)
    screenshots: ScreenshotUrls
    social_preview: SocialPreview
    lighthouse: LighthouseSummary
    unavailable_sections: list[str] = Field(default_factory=list)
    failed_collectors: list[str] = Field(default_factory=list)
