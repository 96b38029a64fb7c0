"""Pipeline driver: collect -> analyse -> synthesize -> report.

State machine per job::

    COLLECTING -> ANALYSING -> SYNTHESIZING -> COMPLETE
         |
         +-> FAILED   (required collector failure only)
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from ..exceptions import PersistenceFailure, RequiredCollectorFailure
from ..logging_config import get_logger, job_context
from ..models import HistoryEntry, StageTimings, TargetJob
from ..report.builder import build_report, utc_now_iso
from ..report.models import FinalReport
from ..storage.history import HistoryDB
from ..storage.reports import ReportStore
from .analyse import AnalyserOrchestrator
from .collect import CollectorOrchestrator
from .synthesis import SynthesisStage

logger = get_logger(__name__)


class JobState(str, Enum):
    COLLECTING = "collecting"
    ANALYSING = "analysing"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"
    FAILED = "failed"


_TRANSITIONS = {
    JobState.COLLECTING: {JobState.ANALYSING, JobState.FAILED},
    JobState.ANALYSING: {JobState.SYNTHESIZING},
    JobState.SYNTHESIZING: {JobState.COMPLETE},
    JobState.COMPLETE: set(),
    JobState.FAILED: set(),
}

_TERMINAL = (JobState.COMPLETE, JobState.FAILED)

StateCallback = Optional[Callable[[TargetJob, JobState], None]]


@dataclass
class JobRecord:
    """Mutable progress of one job, for observability."""

    job: TargetJob
    state: JobState = JobState.COLLECTING
    stage_ms: dict[str, int] = field(default_factory=dict)
    error: Optional[BaseException] = None

    def advance(self, new_state: JobState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal job transition {self.state.value} -> {new_state.value}")
        self.state = new_state

    def timings(self, total_ms: int) -> StageTimings:
        return StageTimings(
            collecting_ms=self.stage_ms.get("collecting", 0),
            analysing_ms=self.stage_ms.get("analysing", 0),
            synthesizing_ms=self.stage_ms.get("synthesizing", 0),
            total_ms=total_ms,
        )


def _ms_since(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class PipelineDriver:
    """Sequences the three stages for one :class:`TargetJob` at a time.

    ``run`` raises only :class:`RequiredCollectorFailure`; analysis and
    synthesis degrade instead of failing. Report and history writes are
    best-effort.
    """

    def __init__(
        self,
        collectors: CollectorOrchestrator,
        analysers: AnalyserOrchestrator,
        synthesis: SynthesisStage,
        icons: Optional[Mapping[str, str]] = None,
        early_analyser: Optional[str] = None,
        report_store: Optional[ReportStore] = None,
        history_dir: Optional[Union[str, Path]] = None,
        on_state: StateCallback = None,
        max_records: int = 100,
    ):
        self.collectors = collectors
        self.analysers = analysers
        self.synthesis = synthesis
        self.icons = dict(icons or {})
        self.early_analyser = early_analyser if early_analyser in analysers.names else None
        self.report_store = report_store
        self.history_dir = history_dir
        self.on_state = on_state
        self.max_records = max_records
        # insertion ordered; finished records are evicted oldest first
        self.jobs: dict[str, JobRecord] = {}

    def _remember(self, record: JobRecord) -> None:
        self.jobs[record.job.job_id] = record
        while len(self.jobs) > self.max_records:
            oldest = next((k for k, r in self.jobs.items() if r.state in _TERMINAL), None)
            if oldest is None:
                break
            del self.jobs[oldest]

    def _advance(self, record: JobRecord, state: JobState) -> None:
        record.advance(state)
        logger.debug(f"[pipeline] {record.job.job_id} -> {state.value}")
        if self.on_state is not None:
            self.on_state(record.job, state)

    async def run(self, job: TargetJob) -> FinalReport:
        with job_context(job.job_id):
            return await self._run(job)

    async def _run(self, job: TargetJob) -> FinalReport:
        record = JobRecord(job)
        self._remember(record)
        started = time.perf_counter()
        logger.info(f"[pipeline] Starting audit {job.job_id} for {job.url}")
        if self.on_state is not None:
            self.on_state(job, JobState.COLLECTING)

        collection = self.collectors.start(job.url, job.job_id)
        try:
            if self.early_analyser is not None:
                def collected(_bundle: Any) -> None:
                    record.stage_ms["collecting"] = _ms_since(started)
                    self._advance(record, JobState.ANALYSING)

                bundle, results = await self.analysers.run_overlapped(
                    collection, self.early_analyser, on_collected=collected
                )
            else:
                bundle = await collection.bundle()
                record.stage_ms["collecting"] = _ms_since(started)
                self._advance(record, JobState.ANALYSING)
                results = await self.analysers.run(bundle)
        except RequiredCollectorFailure as e:
            record.stage_ms["collecting"] = _ms_since(started)
            record.error = e
            self._advance(record, JobState.FAILED)
            logger.error(f"[pipeline] Audit {job.job_id} failed: {e}")
            await self._record_history(job, status="failed", score=None, report_url=None)
            raise
        record.stage_ms["analysing"] = _ms_since(started) - record.stage_ms["collecting"]

        self._advance(record, JobState.SYNTHESIZING)
        synth_started = time.perf_counter()
        synthesis = await self.synthesis.run(results, bundle, job.hostname)
        record.stage_ms["synthesizing"] = _ms_since(synth_started)

        total_ms = _ms_since(started)
        titles = self.analysers.names
        failed_collectors = [o.name for o in collection.outcomes or [] if not o.ok]
        report = build_report(
            job,
            bundle,
            results,
            synthesis,
            record.timings(total_ms),
            titles,
            [self.icons.get(t, "circle") for t in titles],
            failed_collectors,
        )
        self._advance(record, JobState.COMPLETE)
        logger.info(
            f"[pipeline] Audit {job.job_id} complete in {total_ms}ms "
            f"(collect {record.stage_ms['collecting']}ms, analyse {record.stage_ms['analysing']}ms, "
            f"synthesize {record.stage_ms['synthesizing']}ms), score {report.overall_score:g}"
        )

        report_url = await self._store_report(job, report)
        await self._record_history(job, status="complete", score=report.overall_score, report_url=report_url)
        return report

    # ── persistence (best-effort) ─────────────────────────────────

    async def _store_report(self, job: TargetJob, report: FinalReport) -> Optional[str]:
        if self.report_store is None:
            return None
        try:
            return await asyncio.to_thread(self.report_store.store_report, job.job_id, report)
        except Exception as e:
            logger.warning(str(PersistenceFailure(f"report {job.job_id}", str(e))))
            return None

    async def _record_history(
        self,
        job: TargetJob,
        status: str,
        score: Optional[float],
        report_url: Optional[str],
    ) -> None:
        if self.history_dir is None:
            return
        entry = HistoryEntry(
            job_id=job.job_id,
            url=job.url,
            hostname=job.hostname,
            overall_score=score,
            status=status,
            created_at=utc_now_iso(),
            report_url=report_url,
        )
        try:
            await asyncio.to_thread(_append_history, self.history_dir, entry)
        except Exception as e:
            logger.warning(str(PersistenceFailure(f"history {job.job_id}", str(e))))


def _append_history(history_dir: Union[str, Path], entry: HistoryEntry) -> None:
    with HistoryDB(history_dir) as db:
        db.append_history(entry)
