"""Collector orchestrator: parallel fan-out, tiered failure, bundle assembly."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Optional, Sequence

from ..bundle import CompositeDataBundle, EarlyBundle
from ..exceptions import RequiredCollectorFailure
from ..logging_config import get_logger
from .units import UnitDescriptor, UnitOutcome, run_unit, settle

logger = get_logger(__name__)

BundleFactory = Callable[[dict[str, Any]], Any]

EARLY_FIELDS = ("screenshots", "html")


def assemble(
    descriptors: Sequence[UnitDescriptor],
    outcomes: Sequence[UnitOutcome],
    bundle_factory: BundleFactory = CompositeDataBundle.model_validate,
) -> Any:
    """Build the bundle from outcomes given in descriptor order.

    Raises:
        RequiredCollectorFailure: naming every failed required collector
    """
    failures = [
        (descriptor.name, outcome.message)
        for descriptor, outcome in zip(descriptors, outcomes)
        if descriptor.required and not outcome.ok
    ]
    if failures:
        raise RequiredCollectorFailure(failures)

    fields = {
        descriptor.name: outcome.value if outcome.ok else None
        for descriptor, outcome in zip(descriptors, outcomes)
    }
    return bundle_factory(fields)


class CollectionRun:
    """One in-flight collection.

    Every unit is started exactly once when the run is created. Outcomes can
    be read early per unit (:meth:`early`) or in aggregate (:meth:`bundle`);
    both read the same tasks and never re-invoke a unit.
    """

    def __init__(
        self,
        job_id: str,
        descriptors: Sequence[UnitDescriptor],
        tasks: Sequence[asyncio.Task],
        bundle_factory: BundleFactory,
        early_fields: Sequence[str] = EARLY_FIELDS,
    ):
        self.job_id = job_id
        self.descriptors = list(descriptors)
        self._tasks = dict(zip((d.name for d in self.descriptors), tasks))
        self._bundle_factory = bundle_factory
        self._early_fields = tuple(early_fields)
        self._started = time.perf_counter()
        self.outcomes: Optional[list[UnitOutcome]] = None
        self.elapsed_ms: Optional[int] = None

    async def outcome(self, name: str) -> UnitOutcome:
        # Shielded so a cancelled early reader never cancels the collector.
        return await asyncio.shield(self._tasks[name])

    async def value(self, name: str) -> Any:
        """The unit's value, or its error raised."""
        outcome = await self.outcome(name)
        if not outcome.ok:
            raise outcome.error
        return outcome.value

    async def early(self) -> EarlyBundle:
        """Resolve as soon as the early-access units have settled."""
        values = [await self.value(name) for name in self._early_fields]
        return EarlyBundle.model_validate(dict(zip(self._early_fields, values)))

    async def bundle(self) -> Any:
        """Settle every unit, then assemble the bundle in declaration order."""
        self.outcomes = await settle([self._tasks[d.name] for d in self.descriptors])
        elapsed = self.elapsed_ms = int((time.perf_counter() - self._started) * 1000)
        failed = [o.name for o in self.outcomes if not o.ok]
        logger.info(
            f"[pipeline] Collection for {self.job_id} settled in {elapsed}ms "
            f"({len(self.outcomes) - len(failed)} ok, {len(failed)} failed)"
        )
        return assemble(self.descriptors, self.outcomes, self._bundle_factory)

    def cancel(self) -> None:
        for task in self._tasks.values():
            task.cancel()


class CollectorOrchestrator:
    """Runs every collector concurrently under a uniform timeout."""

    def __init__(
        self,
        descriptors: Sequence[UnitDescriptor],
        timeout_seconds: float,
        bundle_factory: BundleFactory = CompositeDataBundle.model_validate,
        early_fields: Sequence[str] = EARLY_FIELDS,
    ):
        names = [d.name for d in descriptors]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate collector names: {names}")
        self.descriptors = list(descriptors)
        self.timeout_seconds = timeout_seconds
        self.bundle_factory = bundle_factory
        self.early_fields = tuple(f for f in early_fields if f in names)

    def start(self, url: str, job_id: str) -> CollectionRun:
        """Launch every collector now. Must be called inside a running loop."""
        logger.info(f"[pipeline] Launching {len(self.descriptors)} collectors for {url}")
        tasks = [
            asyncio.create_task(
                run_unit(
                    d.name,
                    lambda d=d: d.operation(url, job_id),
                    self.timeout_seconds,
                    kind="collector",
                ),
                name=f"collector:{d.name}",
            )
            for d in self.descriptors
        ]
        return CollectionRun(job_id, self.descriptors, tasks, self.bundle_factory, self.early_fields)

    async def run(self, url: str, job_id: str) -> Any:
        return await self.start(url, job_id).bundle()
