"""Tests for configuration discovery, merging and provider key loading."""

import os

import pytest

from site_audit.config import AuditConfig, ProviderKeys, load_config, load_provider_keys
from site_audit.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """No global or project config files and no SITE_AUDIT_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for name in list(os.environ):
        if name.startswith("SITE_AUDIT_"):
            monkeypatch.delenv(name)
    return home, work


class TestLoadConfig:
    def test_defaults(self, isolated):
        config = load_config()
        assert config == AuditConfig()
        assert config.collector_timeout_seconds == 120.0
        assert config.rate_limit_max_requests == 5
        assert config.max_pages_per_request == 2

    def test_precedence(self, isolated, monkeypatch):
        home, work = isolated
        (home / ".site-audit.toml").write_text("max_top_fixes = 3\nhttp_timeout_seconds = 10\n")
        (work / "site-audit.toml").write_text("[audit]\nmax_top_fixes = 4\n")
        monkeypatch.setenv("SITE_AUDIT_HTTP_TIMEOUT_SECONDS", "15")

        config = load_config()
        assert config.max_top_fixes == 4
        assert config.http_timeout_seconds == 15.0

        assert load_config(max_top_fixes=7).max_top_fixes == 7

    def test_explicit_file(self, isolated, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("use_ai = false\ncollector_timeout_seconds = 30\n")
        config = load_config(path)
        assert config.use_ai is False
        assert config.collector_timeout_seconds == 30.0
        assert isinstance(config.collector_timeout_seconds, float)

    def test_missing_explicit_file(self, isolated, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.toml")

    def test_invalid_value(self, isolated):
        with pytest.raises(ConfigurationError):
            load_config(collector_timeout_seconds=0)

    def test_bad_env_value(self, isolated, monkeypatch):
        monkeypatch.setenv("SITE_AUDIT_USE_AI", "maybe")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert isinstance(exc_info.value, InvalidConfigError)
        assert exc_info.value.key == "SITE_AUDIT_USE_AI"
        assert exc_info.value.value == "maybe"

    def test_verbosity_flags(self, isolated):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"

    def test_none_overrides_ignored(self, isolated):
        assert load_config(storage_dir=None).storage_dir == ".site-audit"


class TestProviderKeys:
    def test_blank_values_are_missing(self):
        keys = load_provider_keys({"GEMINI_API_KEY": "  ", "OPENAI_API_KEY": "sk-1"})
        assert keys.gemini is None
        assert keys.openai == "sk-1"

    def test_cse_needs_both_parts(self):
        assert ProviderKeys(google_cse_key="k").google_cse is None
        assert ProviderKeys(google_cse_key="k", google_cse_id="cx").google_cse == ("k", "cx")
