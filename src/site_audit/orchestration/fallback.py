"""Ordered fallback chains and bounded retries."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from ..exceptions import ProviderExhausted, UnitTimeout
from ..logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """One step of a fallback chain."""

    label: str
    run: Callable[[], Awaitable[T]]


async def try_in_order(
    attempts: Sequence[Attempt[T]],
    label: str,
    attempt_timeout: Optional[float] = None,
) -> T:
    """Run ``attempts`` strictly in order and return the first success unchanged.

    Each failure (including a per-attempt timeout) is logged and swallowed.
    When every attempt fails, raises :class:`ProviderExhausted` carrying each
    attempt's error.
    """
    errors: list[tuple[str, BaseException]] = []
    for attempt in attempts:
        try:
            if attempt_timeout is None:
                return await attempt.run()
            return await asyncio.wait_for(attempt.run(), timeout=attempt_timeout)
        except asyncio.TimeoutError:
            error: BaseException = UnitTimeout(attempt.label, attempt_timeout or 0)
        except Exception as e:
            error = e
        logger.warning(f"{label}: {attempt.label} failed, trying next: {error}")
        errors.append((attempt.label, error))
    raise ProviderExhausted(label, errors)


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 2,
    base_delay: float = 1.0,
    label: str = "request",
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Call ``fn`` up to ``max_attempts`` times with doubling delays.

    The last error is re-raised once attempts run out.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except retry_on as e:
            if attempt >= max_attempts:
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.debug(f"{label} attempt {attempt}/{max_attempts} failed ({e}); retrying in {delay:g}s")
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")
