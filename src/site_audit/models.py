"""Domain models shared by the pipeline stages.

Everything that crosses a provider boundary or ends up in the report is a
pydantic model, so the same class both validates structured provider output
and serialises the final JSON. Field names are snake_case in Python and
camelCase on the wire.
"""

from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PageLabel = Literal["homepage", "product-page"]


class AuditModel(BaseModel):
    """Base for immutable, camelCase-serialised models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ── Target ─────────────────────────────────────────────────────────


def generate_job_id() -> str:
    """``audit_<epoch-ms>_<6 random chars>``."""
    return f"audit_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def extract_hostname(url: str) -> str:
    return urlparse(url).hostname or url


def section_id(title: str) -> str:
    """``"Visual & Design"`` -> ``"visual-design"``."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


@dataclass(frozen=True)
class TargetJob:
    """One validated audit input; identifies one full pipeline run."""

    url: str
    job_id: str = field(default_factory=generate_job_id)
    label: PageLabel = "homepage"

    @property
    def hostname(self) -> str:
        return extract_hostname(self.url)


# ── Analysis ───────────────────────────────────────────────────────


class Rating(str, Enum):
    GOOD = "Good"
    NEEDS_WORK = "Needs Work"
    CRITICAL = "Critical"
    ERROR = "Error"


class Impact(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class EvidenceKind(str, Enum):
    HTML = "HTML"
    SCREENSHOT = "SCREENSHOT"
    METRIC = "METRIC"
    HEADER = "HEADER"
    MISSING = "MISSING"


class Finding(AuditModel):
    id: str
    title: str
    description: str
    evidence: str
    evidence_type: EvidenceKind
    evidence_detail: Optional[str] = None
    impact: Impact
    fix: str
    category: str
    section: str


class AnalysisResult(AuditModel):
    """Output of one analyser. ``score`` is ignored when rating is Error."""

    section_title: str
    eli5_summary: str
    why_it_matters: str
    overall_rating: Rating
    score: float = Field(default=0, ge=0, le=100)
    findings: list[Finding] = Field(default_factory=list)

    @property
    def is_error(self) -> bool:
        return self.overall_rating is Rating.ERROR


def error_result(section_title: str, error: BaseException) -> AnalysisResult:
    """Placeholder for an analyser that could not run."""
    message = str(error) or type(error).__name__
    return AnalysisResult(
        section_title=section_title,
        eli5_summary=f"Analysis unavailable: {message}",
        why_it_matters="This section could not be analysed due to an error.",
        overall_rating=Rating.ERROR,
        score=0,
        findings=[],
    )


# ── Synthesis ──────────────────────────────────────────────────────


class TopFix(AuditModel):
    title: str
    section: str
    impact: str
    description: str


class SynthesisOutput(AuditModel):
    """Same shape whether a provider or the local fallback produced it."""

    executive_summary: str
    overall_score: float = Field(ge=0, le=100)
    top_fixes: list[TopFix] = Field(default_factory=list)


# ── Report ─────────────────────────────────────────────────────────


class AuditSection(AuditModel):
    id: str
    title: str
    icon_key: str
    eli5_summary: str
    why_it_matters: str
    rating: Rating
    score: Optional[float] = None
    findings: list[Finding] = Field(default_factory=list)


class RecommendedApp(AuditModel):
    name: str
    category: str
    reason: str


class StageTimings(AuditModel):
    collecting_ms: int = 0
    analysing_ms: int = 0
    synthesizing_ms: int = 0
    total_ms: int = 0


class HistoryEntry(AuditModel):
    job_id: str
    url: str
    hostname: str
    overall_score: Optional[float] = None
    status: Literal["running", "complete", "failed"]
    created_at: str
    report_url: Optional[str] = None
