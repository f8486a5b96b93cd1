"""Schemas for recognition task submission and status polling."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.tasks import Task, TaskStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreatedResponse(CamelModel):
    task_id: str
    status: TaskStatus

    @classmethod
    def from_task(cls, task: Task) -> "TaskCreatedResponse":
        return cls(task_id=task.id, status=task.status)


class TaskStatusResponse(CamelModel):
    task_id: str
    status: TaskStatus
    result: Optional[str] = None
    attempts: int

    @classmethod
    def from_task(cls, task: Task) -> "TaskStatusResponse":
        return cls(
            task_id=task.id,
            status=task.status,
            result=task.result,
            attempts=task.attempts,
        )


class TaskOverviewResponse(CamelModel):
    """Diagnostic counters for the in-memory task store."""

    total: int
    by_status: dict[str, int]
    outstanding_pollers: int
    max_concurrent_pollers: int


class MockRecognitionResponse(CamelModel):
    text: str
    confidence: float
