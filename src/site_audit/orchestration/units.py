"""Unit descriptors and the timeout-guarded unit runner.

A unit is one collector or analyser. Running a unit never raises: whatever
happens, the caller gets a :class:`UnitOutcome` that records the value or the
error together with the elapsed time.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence

from ..exceptions import UnitTimeout
from ..logging_config import get_logger

logger = get_logger(__name__)


class Tier(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class UnitDescriptor:
    """Static pairing of a unit name, its tier and its async operation.

    For collectors ``operation`` is ``(url, job_id) -> value``; for analysers
    it is ``(bundle) -> AnalysisResult``.
    """

    name: str
    tier: Tier
    operation: Callable[..., Awaitable[Any]]

    @property
    def required(self) -> bool:
        return self.tier is Tier.REQUIRED


@dataclass(frozen=True)
class UnitOutcome:
    """``Ok(value)`` when ``error`` is None, otherwise ``Failed(error)``."""

    name: str
    value: Any = None
    error: Optional[BaseException] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, UnitTimeout)

    @property
    def message(self) -> str:
        if self.error is None:
            return ""
        return str(self.error) or type(self.error).__name__


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


async def run_unit(
    name: str,
    operation: Callable[[], Awaitable[Any]],
    timeout_seconds: float,
    kind: str = "unit",
) -> UnitOutcome:
    """Await ``operation()`` under a timeout and record the outcome.

    A timeout cancels the operation and becomes a :class:`UnitTimeout`
    failure. Cancellation of the caller itself is not swallowed.
    """
    start = time.perf_counter()
    try:
        value = await asyncio.wait_for(operation(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        error: BaseException = UnitTimeout(name, timeout_seconds)
    except Exception as e:
        error = e
    else:
        elapsed = _elapsed_ms(start)
        logger.info(f"[{kind}] {name} OK in {elapsed}ms")
        return UnitOutcome(name=name, value=value, elapsed_ms=elapsed)

    outcome = UnitOutcome(name=name, error=error, elapsed_ms=_elapsed_ms(start))
    logger.warning(f"[{kind}] {name} FAILED in {outcome.elapsed_ms}ms: {outcome.message}")
    return outcome


async def settle(tasks: Sequence[Awaitable[UnitOutcome]]) -> list[UnitOutcome]:
    """Wait for every unit, returning outcomes in the order given."""
    return list(await asyncio.gather(*tasks))
