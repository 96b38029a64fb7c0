"""Section analysers in static report order."""

from typing import Optional

from ..providers import ProviderSet
from .accessibility import AccessibilityAnalyser
from .base import SectionAnalyser, rate_findings, section_id
from .content import ContentAnalyser
from .performance import PerformanceAnalyser
from .security import SecurityAnalyser
from .seo import SeoAnalyser
from .social import SocialAnalyser
from .tech_stack import TechStackAnalyser
from .visual import VisualAnalyser

ANALYSER_CLASSES = (
    VisualAnalyser,
    PerformanceAnalyser,
    SeoAnalyser,
    AccessibilityAnalyser,
    SecurityAnalyser,
    SocialAnalyser,
    TechStackAnalyser,
    ContentAnalyser,
)

# Started on the early bundle while the remaining collectors run.
EARLY_ANALYSER = VisualAnalyser.title


def default_analysers(
    providers: Optional[ProviderSet] = None,
    attempt_timeout: Optional[float] = None,
    unit_timeout: Optional[float] = None,
) -> list[SectionAnalyser]:
    """Return the eight section analysers in report order."""
    return [cls(providers, attempt_timeout, unit_timeout) for cls in ANALYSER_CLASSES]


__all__ = [
    "ANALYSER_CLASSES",
    "EARLY_ANALYSER",
    "SectionAnalyser",
    "default_analysers",
    "rate_findings",
    "section_id",
    "VisualAnalyser",
    "PerformanceAnalyser",
    "SeoAnalyser",
    "AccessibilityAnalyser",
    "SecurityAnalyser",
    "SocialAnalyser",
    "TechStackAnalyser",
    "ContentAnalyser",
]
