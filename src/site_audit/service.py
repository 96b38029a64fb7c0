"""Process-level wiring: one HTTP client, one provider set, one driver."""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

import httpx

from .analysers import EARLY_ANALYSER, default_analysers
from .collectors import CollectorContext, default_collectors
from .config import AuditConfig, ProviderKeys, load_provider_keys
from .logging_config import get_logger
from .models import PageLabel, TargetJob
from .orchestration import (
    AnalyserOrchestrator,
    CollectorOrchestrator,
    DetachedTasks,
    PipelineDriver,
    SynthesisStage,
)
from .providers import ProviderSet
from .report.models import FinalReport
from .storage import HistoryDB, ReportStore
from .url_safety import normalise_url

logger = get_logger(__name__)


class AuditService:
    """Owns the shared resources of an audit process.

    Use as an async context manager; background writes are drained and the
    HTTP client closed on exit::

        async with AuditService(config) as service:
            report = await service.audit("example.com")
    """

    def __init__(
        self,
        config: AuditConfig,
        keys: Optional[ProviderKeys] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.keys = keys if keys is not None else load_provider_keys()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()
        self.detached = DetachedTasks()
        self.report_store = ReportStore(config.storage_path)
        self.providers = ProviderSet.from_config(config, self.keys, self.client)
        self.driver = self._build_driver()

    def _build_driver(self) -> PipelineDriver:
        config = self.config
        ctx = CollectorContext(
            config=config,
            keys=self.keys,
            client=self.client,
            report_store=self.report_store,
            detached=self.detached,
        )
        analysers = default_analysers(
            self.providers, config.provider_timeout_seconds, config.analyser_timeout_seconds
        )
        return PipelineDriver(
            collectors=CollectorOrchestrator(default_collectors(ctx), config.collector_timeout_seconds),
            analysers=AnalyserOrchestrator(
                [a.descriptor() for a in analysers], config.analyser_timeout_seconds
            ),
            synthesis=SynthesisStage(
                self.providers,
                [a.weight for a in analysers],
                max_fixes=config.max_top_fixes,
                attempt_timeout=config.synthesis_timeout_seconds,
            ),
            icons={a.title: a.icon_key for a in analysers},
            early_analyser=EARLY_ANALYSER if config.early_visual else None,
            report_store=self.report_store,
            history_dir=config.storage_path,
        )

    async def audit(self, url: str, label: PageLabel = "homepage") -> FinalReport:
        """Normalise ``url`` and run one job.

        Raises:
            ValidationFailure: the URL may not be audited
            RequiredCollectorFailure: screenshots, lighthouse or html failed
        """
        job = TargetJob(url=normalise_url(url), label=label)
        return await self.driver.run(job)

    async def audit_pages(self, pages: Sequence[tuple[str, PageLabel]]) -> list[FinalReport]:
        """Audit several pages concurrently.

        The first failure propagates once the other pages' jobs have been
        cancelled and have finished unwinding.
        """
        jobs = [TargetJob(url=normalise_url(url), label=label) for url, label in pages]
        tasks = [asyncio.create_task(self.driver.run(job)) for job in jobs]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def history(self, limit: int = 20):
        with HistoryDB(self.config.storage_path) as db:
            return db.recent(limit)

    async def aclose(self) -> None:
        await self.detached.drain()
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "AuditService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
