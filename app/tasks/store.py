"""In-memory task store shared by the request handlers and the pollers."""

from __future__ import annotations

import asyncio
from collections import Counter

from app.tasks.errors import TaskNotFoundError
from app.tasks.models import Task, TaskStatus


class TaskStore:
    """Lock-guarded map from task identifier to its latest record.

    Only whole records are written; there is no partial update and no
    removal, records live as long as the store instance.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = asyncio.Lock()

    async def put(self, task: Task) -> None:
        async with self._lock:
            self._tasks[task.id] = task

    async def add(self, task: Task) -> bool:
        """Insert a new record; return ``False`` if the id is already taken."""

        async with self._lock:
            if task.id in self._tasks:
                return False
            self._tasks[task.id] = task
            return True

    async def get(self, task_id: str) -> Task:
        async with self._lock:
            task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def snapshot(self) -> list[Task]:
        async with self._lock:
            return list(self._tasks.values())

    async def count_by_status(self) -> dict[str, int]:
        """Return the number of records in each status, zero-filled."""

        tasks = await self.snapshot()
        counts = Counter(task.status.value for task in tasks)
        return {status.value: counts.get(status.value, 0) for status in TaskStatus}

    def __len__(self) -> int:
        return len(self._tasks)


__all__ = ["TaskStore"]
