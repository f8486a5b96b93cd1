"""Owner of the background pollers spawned by submissions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from app.telemetry import set_outstanding_pollers

logger = logging.getLogger("app.tasks.supervisor")


class TaskSupervisor:
    """Schedule pollers without awaiting them, but keep track of every one.

    Submissions hand work over via ``spawn`` and return immediately. The
    supervisor holds the only reference to each ``asyncio.Task``, caps how
    many pollers run at once and cancels the remainder on shutdown.
    """

    def __init__(self, max_concurrent: int = 256) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._max_concurrent = max_concurrent
        self._semaphore: asyncio.Semaphore | None = None
        self._running: dict[asyncio.Task[Any], str] = {}
        self._closed = False

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, name: str, work: Callable[[], Awaitable[Any]]) -> None:
        """Start ``work`` in the background under the given task name."""

        if self._closed:
            raise RuntimeError("Supervisor has been shut down")

        job = asyncio.get_running_loop().create_task(
            self._guarded(name, work),
            name=f"poller-{name}",
        )
        self._running[job] = name
        job.add_done_callback(self._on_done)
        set_outstanding_pollers(len(self._running))

    def outstanding(self) -> list[str]:
        return [name for job, name in self._running.items() if not job.done()]

    def __len__(self) -> int:
        return len(self._running)

    async def wait_idle(self) -> None:
        """Wait until every spawned poller has finished."""

        while self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding pollers; their tasks stay ``processing``."""

        self._closed = True
        jobs = list(self._running)
        if jobs:
            logger.info("Cancelling %s outstanding poller(s)", len(jobs))
        for job in jobs:
            job.cancel()
        await asyncio.gather(*jobs, return_exceptions=True)

    async def _guarded(self, name: str, work: Callable[[], Awaitable[Any]]) -> Any:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrent)
        async with self._semaphore:
            return await work()

    def _on_done(self, job: asyncio.Task[Any]) -> None:
        name = self._running.pop(job, None)
        set_outstanding_pollers(len(self._running))
        if job.cancelled():
            logger.debug("Poller for task %s cancelled", name)
            return
        exc = job.exception()
        if exc is not None:
            logger.error(
                "Poller for task %s crashed",
                name,
                exc_info=(type(exc), exc, exc.__traceback__),
            )


__all__ = ["TaskSupervisor"]
