"""Task records and the status vocabulary shared by the recognition core."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from app.tasks.errors import TaskAlreadySettledError


class TaskStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PROCESSING


class BackendStatus(str, Enum):
    """Outcome reported by the recognition backend for one status query."""

    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class BackendQueryResult:
    status: BackendStatus
    transcript: str | None = None
    detail: str | None = None


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-interval polling budget.

    ``initial_delay`` decides whether the interval is also waited before the
    first query. Server-side pollers query immediately, clients wait first.
    """

    max_attempts: int
    interval: float
    initial_delay: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval < 0:
            raise ValueError("interval must not be negative")

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before the given 1-based attempt."""

        if attempt == 1 and not self.initial_delay:
            return 0.0
        return self.interval


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Task:
    """Lifecycle record of one recognition request.

    Records are immutable: every write replaces the whole record, so readers
    never see a terminal status without its result.
    """

    id: str
    status: TaskStatus = TaskStatus.PROCESSING
    result: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    attempts: int = 0

    @classmethod
    def new(cls, task_id: str) -> "Task":
        return cls(id=task_id)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def settle(self, status: TaskStatus, result: str, attempts: int) -> "Task":
        """Return the terminal version of this record."""

        if self.is_terminal:
            raise TaskAlreadySettledError(self.id, self.status.value)
        if not status.is_terminal:
            raise ValueError("A task can only be settled into a terminal status")
        if result is None:
            raise ValueError("Terminal tasks must carry a result")
        if attempts < self.attempts:
            raise ValueError("attempts must not decrease")
        return replace(self, status=status, result=result, attempts=attempts)


__all__ = [
    "BackendQueryResult",
    "BackendStatus",
    "RetryPolicy",
    "Task",
    "TaskStatus",
]
