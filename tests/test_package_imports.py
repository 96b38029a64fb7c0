"""Every public package imports cleanly in a fresh interpreter."""

import subprocess
import sys

import pytest

MODULES = [
    "site_audit",
    "site_audit.bundle",
    "site_audit.collectors",
    "site_audit.orchestration",
    "site_audit.report",
    "site_audit.report.builder",
    "site_audit.storage",
    "site_audit.analysers",
    "site_audit.service",
    "site_audit.server.app",
    "site_audit.cli",
]


class TestPackageImports:
    @pytest.mark.parametrize("module", MODULES)
    def test_imports_first(self, module):
        # a fresh process, so import order is the one a user would hit
        proc = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            capture_output=True,
            text=True,
            timeout=60,
        )
        assert proc.returncode == 0, proc.stderr
