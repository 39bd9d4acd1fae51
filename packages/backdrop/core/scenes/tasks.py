"""Fire-and-forget background tasks.

Write-backs and usage increments must not delay the caller. Tasks spawned
here are never awaited by the resolver; their failures are logged and
dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class DetachedTaskRunner:
    """Schedules detached coroutines and keeps them alive until done.

    The event loop only holds weak references to tasks, so the runner keeps a
    strong reference to each pending task.

    Example:
        >>> runner = DetachedTaskRunner()
        >>> runner.spawn(registry.record_usage("a1"), name="registry-usage")
        >>> await runner.drain()  # tests / shutdown
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def spawn(
        self, coro: Coroutine[Any, Any, Any], *, name: str | None = None
    ) -> asyncio.Task[Any]:
        """Schedule a coroutine on the running loop without awaiting it."""
        task = asyncio.create_task(coro, name=name)
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.debug("Detached task %s cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "Detached task %s failed: %s",
                task.get_name(),
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self) -> None:
        """Wait for every pending task (including ones spawned while draining)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
