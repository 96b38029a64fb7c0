"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AuditConfig, load_config
from ..models import Rating

console = Console()

RATING_STYLES = {
    Rating.GOOD: "green",
    Rating.NEEDS_WORK: "yellow",
    Rating.CRITICAL: "red",
    Rating.ERROR: "dim",
}

# Exit codes
EXIT_REQUIRED_DATA = 1
EXIT_VALIDATION = 2


def score_style(score: float) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def resolve_config(
    config: Optional[Path] = None,
    verbose: bool = False,
    quiet: bool = False,
    no_ai: bool = False,
    storage_dir: Optional[Path] = None,
) -> AuditConfig:
    """Build configuration from CLI options."""
    overrides = {"verbose": verbose, "quiet": quiet}
    if no_ai:
        overrides["use_ai"] = False
    if storage_dir is not None:
        overrides["storage_dir"] = str(storage_dir)
    return load_config(config_file=config, **overrides)
