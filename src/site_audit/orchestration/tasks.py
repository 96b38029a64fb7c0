"""Fire-and-forget tasks whose failures are recorded instead of lost."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Coroutine, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)


class DetachedTasks:
    """Owns background tasks nobody awaits for correctness.

    Every spawned task gets a done callback that logs and records its
    failure, so a lost screenshot upload shows up in logs and in
    :attr:`failures` (the most recent ``max_failures``). :meth:`drain` waits
    for everything still running.
    """

    def __init__(self, max_failures: int = 100) -> None:
        self._tasks: set[asyncio.Task] = set()
        self.failures: deque[tuple[str, BaseException]] = deque(maxlen=max_failures)

    def spawn(self, coro: Coroutine[Any, Any, Any], label: Optional[str] = None) -> asyncio.Task:
        task = asyncio.create_task(coro)
        name = label or task.get_name()
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(t, name))
        return task

    def _on_done(self, task: asyncio.Task, label: str) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug(f"Background task {label} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self.failures.append((label, exc))
            logger.warning(f"Background task {label} failed: {exc}")

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
