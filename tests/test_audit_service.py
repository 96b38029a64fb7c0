"""Tests for AuditService page fan-out."""

import asyncio

import pytest

from site_audit.config import AuditConfig, ProviderKeys
from site_audit.exceptions import RequiredCollectorFailure
from site_audit.service import AuditService


class ScriptedDriver:
    """Fails jobs for ``failing`` hosts at once; others hang until cancelled."""

    def __init__(self, failing):
        self.failing = failing
        self.cancelled = []
        self.finished = []

    async def run(self, job):
        if job.hostname in self.failing:
            raise RequiredCollectorFailure([("html", "HTTP 503")])
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled.append(job.hostname)
            raise
        self.finished.append(job.hostname)


@pytest.fixture
def service(tmp_path):
    return AuditService(AuditConfig(storage_dir=str(tmp_path)), keys=ProviderKeys())


class TestAuditPages:
    def test_failure_cancels_sibling_pages(self, service):
        driver = ScriptedDriver(failing={"broken.test"})
        service.driver = driver

        async def scenario():
            try:
                with pytest.raises(RequiredCollectorFailure):
                    await service.audit_pages(
                        [("https://slow.test/", "homepage"), ("https://broken.test/", "product-page")]
                    )
            finally:
                await service.aclose()

        asyncio.run(scenario())
        assert driver.cancelled == ["slow.test"]
        assert driver.finished == []

    def test_reports_keep_page_order(self, service):
        class EchoDriver:
            async def run(self, job):
                await asyncio.sleep(0.02 if job.hostname == "a.test" else 0)
                return job.hostname

        service.driver = EchoDriver()

        async def scenario():
            try:
                return await service.audit_pages([("a.test", "homepage"), ("b.test", "product-page")])
            finally:
                await service.aclose()

        assert asyncio.run(scenario()) == ["a.test", "b.test"]
