"""Analyser orchestrator: parallel fan-out with Error placeholders.

Failures never escape: a failed or timed-out analyser becomes an
``Error``-rated result at its static position.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Optional, Sequence

from ..logging_config import get_logger
from ..models import AnalysisResult, error_result
from .collect import CollectionRun
from .units import UnitDescriptor, UnitOutcome, run_unit, settle

logger = get_logger(__name__)


def to_result(descriptor: UnitDescriptor, outcome: UnitOutcome) -> AnalysisResult:
    if outcome.ok:
        return outcome.value
    return error_result(descriptor.name, outcome.error)


class AnalyserOrchestrator:
    """Runs every analyser concurrently; all analysers are optional."""

    def __init__(self, descriptors: Sequence[UnitDescriptor], timeout_seconds: float):
        self.descriptors = list(descriptors)
        self.timeout_seconds = timeout_seconds

    @property
    def names(self) -> list[str]:
        return [d.name for d in self.descriptors]

    def _launch(self, descriptor: UnitDescriptor, bundle: Any) -> asyncio.Task:
        return asyncio.create_task(
            run_unit(
                descriptor.name,
                lambda: descriptor.operation(bundle),
                self.timeout_seconds,
                kind="analyser",
            ),
            name=f"analyser:{descriptor.name}",
        )

    async def _run_batch(self, descriptors: Sequence[UnitDescriptor], bundle: Any) -> list[UnitOutcome]:
        start = time.perf_counter()
        outcomes = await settle([self._launch(d, bundle) for d in descriptors])
        logger.info(
            f"[pipeline] {len(descriptors)} analysers done in "
            f"{int((time.perf_counter() - start) * 1000)}ms"
        )
        return outcomes

    async def run(self, bundle: Any) -> list[AnalysisResult]:
        """One result per analyser, in static order."""
        outcomes = await self._run_batch(self.descriptors, bundle)
        return [to_result(d, o) for d, o in zip(self.descriptors, outcomes)]

    async def _early_unit(self, descriptor: UnitDescriptor, collection: CollectionRun) -> UnitOutcome:
        try:
            early = await collection.early()
        except Exception as e:
            return UnitOutcome(name=descriptor.name, error=e)
        logger.info(f"[pipeline] Early inputs ready, starting {descriptor.name}")
        return await run_unit(
            descriptor.name,
            lambda: descriptor.operation(early),
            self.timeout_seconds,
            kind="analyser",
        )

    async def run_overlapped(
        self,
        collection: CollectionRun,
        early_name: str,
        on_collected: Optional[Callable[[Any], None]] = None,
    ) -> tuple[Any, list[AnalysisResult]]:
        """Start ``early_name`` on the early inputs while collection continues.

        The early result is merged back at its static index only after the
        remaining analysers have settled. If collection fails, the early task
        is cancelled and awaited before the failure propagates.

        Returns:
            ``(bundle, results)``
        """
        index = self.names.index(early_name)
        early_descriptor = self.descriptors[index]
        early_task = asyncio.create_task(
            self._early_unit(early_descriptor, collection),
            name=f"analyser:{early_name}:early",
        )

        try:
            bundle = await collection.bundle()
        except BaseException:
            early_task.cancel()
            await asyncio.gather(early_task, return_exceptions=True)
            raise
        if on_collected is not None:
            on_collected(bundle)

        remaining = [d for i, d in enumerate(self.descriptors) if i != index]
        remaining_outcomes = await self._run_batch(remaining, bundle)
        early_outcome = await early_task

        outcomes = list(remaining_outcomes)
        outcomes.insert(index, early_outcome)
        return bundle, [to_result(d, o) for d, o in zip(self.descriptors, outcomes)]
