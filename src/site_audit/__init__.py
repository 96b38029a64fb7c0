"""
Site Audit - concurrent website auditing

Collects page data from several sources in parallel, runs one analyser per
report section with provider fallback chains, and synthesises a scored
report. Missing optional data degrades a section instead of failing the job.
"""

__version__ = "0.1.0"

from .config import AuditConfig, ProviderKeys, load_config, load_provider_keys
from .models import AnalysisResult, Rating, TargetJob
from .report.models import FinalReport
from .service import AuditService
from .url_safety import normalise_url

__all__ = [
    "AuditConfig",
    "AuditService",
    "AnalysisResult",
    "FinalReport",
    "ProviderKeys",
    "Rating",
    "TargetJob",
    "load_config",
    "load_provider_keys",
    "normalise_url",
]
