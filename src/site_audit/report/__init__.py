"""Final report model and assembly."""

from .builder import build_report, build_sections, missing_apps
from .models import FinalReport, LighthouseSummary, ScreenshotUrls, SocialPreview

__all__ = [
    "FinalReport",
    "LighthouseSummary",
    "ScreenshotUrls",
    "SocialPreview",
    "build_report",
    "build_sections",
    "missing_apps",
]
