"""Read-only task lookup used by clients polling for results."""

from __future__ import annotations

from app.tasks.models import Task
from app.tasks.store import TaskStore


class StatusHandler:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def get_status(self, task_id: str) -> Task:
        """Return the current record; raises ``TaskNotFoundError`` for unknown ids."""

        return await self._store.get(task_id)


__all__ = ["StatusHandler"]
