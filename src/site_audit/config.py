"""Configuration loading and management for Site Audit.

Configuration sources are merged in priority order:
    1. Defaults (defined in AuditConfig)
    2. Global config (~/.site-audit.toml)
    3. Project config (./site-audit.toml)
    4. Explicit config file
    5. Environment variables (SITE_AUDIT_* prefix)
    6. Overrides (passed as kwargs)

Provider API keys are not part of the TOML/override chain; they are read
from the process environment by :func:`load_provider_keys`.

Example:
    >>> config = load_config(collector_timeout_seconds=30)
    >>> config.collector_timeout_seconds
    30.0
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

Verbosity = Literal["quiet", "normal", "verbose"]

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SiteAuditBot/1.0)"


@dataclass(frozen=True)
class AuditConfig:
    """Configuration for one audit pipeline.

    Attributes:
        Timeouts (seconds, uniform per stage):
            collector_timeout_seconds: Per-collector timeout guard
            analyser_timeout_seconds: Per-analyser timeout guard
            synthesis_timeout_seconds: Per-attempt timeout for synthesis providers
            audit_max_duration_seconds: Overall budget for one HTTP request
            http_timeout_seconds: Timeout for individual HTTP requests
            provider_timeout_seconds: Per-attempt timeout for analyser provider calls

        Retries:
            fetch_max_attempts: Attempts for network fetches in collectors
            fetch_base_delay_seconds: First backoff delay, doubled per attempt

        Rate limiting:
            rate_limit_max_requests: Requests allowed per key per window
            rate_limit_window_seconds: Sliding window length

        Collection limits:
            max_internal_links_to_check: Cap for the link checker
            max_pages_per_request: Pages accepted by one audit request

        Synthesis:
            max_top_fixes: Length cap of the prioritised fix list
            use_ai: Call external providers; when False only local fallbacks run
            early_visual: Start the visual analyser as soon as its inputs resolve

        Providers:
            gemini_model / gemini_fast_model / openai_model /
            openai_fast_model / anthropic_model: model identifiers

        Storage and output:
            storage_dir: Root directory for reports, screenshots and history
            user_agent: User-Agent header sent by collectors
            verbosity: Logging verbosity level
    """

    collector_timeout_seconds: float = 120.0
    analyser_timeout_seconds: float = 120.0
    synthesis_timeout_seconds: float = 120.0
    audit_max_duration_seconds: float = 300.0
    http_timeout_seconds: float = 30.0
    provider_timeout_seconds: float = 60.0

    fetch_max_attempts: int = 2
    fetch_base_delay_seconds: float = 1.0

    rate_limit_max_requests: int = 5
    rate_limit_window_seconds: float = 60.0

    max_internal_links_to_check: int = 50
    max_pages_per_request: int = 2

    max_top_fixes: int = 5
    use_ai: bool = True
    early_visual: bool = True

    gemini_model: str = "gemini-2.5-pro"
    gemini_fast_model: str = "gemini-2.5-flash"
    openai_model: str = "gpt-5"
    openai_fast_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-sonnet-4-5"

    storage_dir: str = ".site-audit"
    user_agent: str = DEFAULT_USER_AGENT
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for field_name in (
            "collector_timeout_seconds",
            "analyser_timeout_seconds",
            "synthesis_timeout_seconds",
            "audit_max_duration_seconds",
            "http_timeout_seconds",
            "provider_timeout_seconds",
            "rate_limit_window_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be positive")

        if self.fetch_max_attempts < 1:
            raise ValueError("fetch_max_attempts must be at least 1")
        if self.fetch_base_delay_seconds < 0:
            raise ValueError("fetch_base_delay_seconds must be non-negative")
        if self.rate_limit_max_requests < 1:
            raise ValueError("rate_limit_max_requests must be at least 1")
        if self.max_internal_links_to_check < 0:
            raise ValueError("max_internal_links_to_check must be non-negative")
        if self.max_pages_per_request < 1:
            raise ValueError("max_pages_per_request must be at least 1")
        if self.max_top_fixes < 1:
            raise ValueError("max_top_fixes must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def storage_path(self) -> Path:
        return Path(self.storage_dir)


@dataclass(frozen=True)
class ProviderKeys:
    """API keys for external services. ``None`` means not configured.

    A missing key never fails at startup: the collector or provider that
    needs it fails at call time and takes the normal degrade path.
    """

    gemini: Optional[str] = None
    openai: Optional[str] = None
    anthropic: Optional[str] = None
    pagespeed: Optional[str] = None
    screenshotone: Optional[str] = None
    google_cse_key: Optional[str] = None
    google_cse_id: Optional[str] = None

    @property
    def google_cse(self) -> Optional[tuple[str, str]]:
        if self.google_cse_key and self.google_cse_id:
            return self.google_cse_key, self.google_cse_id
        return None


_KEY_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "pagespeed": "PAGESPEED_API_KEY",
    "screenshotone": "SCREENSHOTONE_API_KEY",
    "google_cse_key": "GOOGLE_CSE_API_KEY",
    "google_cse_id": "GOOGLE_CSE_ID",
}


def load_provider_keys(environ: Optional[Mapping[str, str]] = None) -> ProviderKeys:
    """Read provider API keys from the environment (blank values count as missing)."""
    env = os.environ if environ is None else environ
    values = {}
    for field_name, env_key in _KEY_ENV_VARS.items():
        raw = (env.get(env_key) or "").strip()
        values[field_name] = raw or None
    return ProviderKeys(**values)


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AuditConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``verbose``
            and ``quiet`` map onto ``verbosity``; ``None`` values are skipped.

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a value
            fails validation
    """
    merged: dict[str, Any] = {}
    discovered = (
        ("global config", Path.home() / ".site-audit.toml"),
        ("project config", Path.cwd() / "site-audit.toml"),
    )
    for label, path in discovered:
        if path.exists():
            merged.update(_read_toml(path, label))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_read_toml(config_file, "config file"))

    merged.update(_env_values())
    merged.update(_override_values(overrides))
    return _build(merged)


def _read_toml(path: Path, label: str) -> dict[str, Any]:
    """Top-level keys, or the ``[audit]`` table when the file has one."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")
    section = data.get("audit")
    return dict(section) if isinstance(section, dict) else data


def _env_values(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """``SITE_AUDIT_<FIELD>`` variables, e.g. ``SITE_AUDIT_USE_AI=false``."""
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for name, hint in _FIELD_TYPES.items():
        env_key = f"{ENV_PREFIX}{name.upper()}"
        raw = env.get(env_key)
        if raw is None:
            continue
        try:
            values[name] = _coerce_env(raw, hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, raw, str(e))
    return values


def _coerce_env(raw: str, hint: Any) -> Any:
    if hint is bool:
        lowered = raw.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        raise ValueError(f"expected true/false, got '{raw}'")
    if hint in (int, float):
        return hint(raw)
    # str and Literal fields are validated by AuditConfig itself
    return raw


def _override_values(overrides: dict[str, Any]) -> dict[str, Any]:
    values = {k: v for k, v in overrides.items() if v is not None and k not in ("verbose", "quiet")}
    if overrides.get("quiet"):
        values["verbosity"] = "quiet"
    elif overrides.get("verbose"):
        values["verbosity"] = "verbose"
    return values


def _build(values: dict[str, Any]) -> AuditConfig:
    coerced = {}
    for key, value in values.items():
        # TOML and kwargs give ints for float fields
        if _FIELD_TYPES.get(key) is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        coerced[key] = value
    try:
        return AuditConfig(**coerced)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


ENV_PREFIX = "SITE_AUDIT_"
_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})
_FIELD_TYPES = get_type_hints(AuditConfig)
