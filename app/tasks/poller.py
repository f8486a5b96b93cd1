"""Background poller driving one recognition task to a terminal state.

Each accepted submission gets exactly one poller. The poller queries the
recognition backend on a fixed-interval budget and writes the task record
exactly once more after creation:

* backend success -> ``completed`` with the transcript (or a placeholder
  when the recognizer heard nothing),
* backend failure / backend timeout -> the internal status configured in
  ``status_mapping`` (``failed`` by default),
* budget exhausted -> ``timeout``.

Transport errors while querying are logged and retried; nothing raised
while polling escapes ``run``, the task record is the only channel through
which clients learn about the outcome.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Mapping

from app.tasks.errors import BackendTransientError
from app.tasks.interfaces import RecognitionBackend
from app.tasks.models import BackendQueryResult, BackendStatus, RetryPolicy, Task, TaskStatus
from app.tasks.store import TaskStore
from app.telemetry import increment_backend_query, increment_task_settled

logger = logging.getLogger("app.tasks.poller")

DEFAULT_EMPTY_TRANSCRIPT = "（无识别结果，可能是静音或无声音）"
DEFAULT_FAILURE_MESSAGE = "识别失败，请重新录音"
DEFAULT_TIMEOUT_MESSAGE = "查询超时，请重试"

DEFAULT_STATUS_MAPPING: Mapping[BackendStatus, TaskStatus] = {
    BackendStatus.FAILURE: TaskStatus.FAILED,
    BackendStatus.TIMEOUT: TaskStatus.FAILED,
}

Sleeper = Callable[[float], Awaitable[None]]


class BackgroundPoller:
    """Query the backend until the task settles or the budget runs out."""

    def __init__(
        self,
        store: TaskStore,
        backend: RecognitionBackend,
        policy: RetryPolicy,
        *,
        status_mapping: Mapping[BackendStatus, TaskStatus] | None = None,
        empty_transcript_placeholder: str = DEFAULT_EMPTY_TRANSCRIPT,
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
        timeout_message: str = DEFAULT_TIMEOUT_MESSAGE,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        mapping = dict(DEFAULT_STATUS_MAPPING)
        mapping.update(status_mapping or {})
        for backend_status, task_status in mapping.items():
            if task_status not in (TaskStatus.FAILED, TaskStatus.TIMEOUT):
                raise ValueError(
                    f"Backend status {backend_status.value} must map to failed or timeout"
                )

        self._store = store
        self._backend = backend
        self._policy = policy
        self._status_mapping = mapping
        self._empty_placeholder = empty_transcript_placeholder
        self._failure_message = failure_message
        self._timeout_message = timeout_message
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def failure_message(self) -> str:
        return self._failure_message

    async def run(self, task_id: str) -> Task:
        """Poll the backend for ``task_id`` and return the settled record."""

        logger.info(
            "Polling task %s (max_attempts=%s, interval=%.2fs)",
            task_id,
            self._policy.max_attempts,
            self._policy.interval,
        )

        for attempt in range(1, self._policy.max_attempts + 1):
            delay = self._policy.delay_before(attempt)
            if delay > 0:
                await self._sleep(delay)

            try:
                outcome = await self._backend.query(task_id)
            except BackendTransientError as exc:
                increment_backend_query("error")
                logger.warning(
                    "Query %s/%s for task %s failed: %s",
                    attempt,
                    self._policy.max_attempts,
                    task_id,
                    exc,
                )
                continue
            except Exception:
                increment_backend_query("error")
                logger.exception(
                    "Unexpected error on query %s/%s for task %s",
                    attempt,
                    self._policy.max_attempts,
                    task_id,
                )
                continue

            increment_backend_query(outcome.status.value)
            logger.debug(
                "Query %s/%s for task %s returned %s",
                attempt,
                self._policy.max_attempts,
                task_id,
                outcome.status.value,
            )

            if outcome.status is BackendStatus.IN_PROGRESS:
                continue

            status, result = self._resolve_terminal(outcome)
            return await self._settle(task_id, status, result, attempt)

        return await self._settle(
            task_id,
            TaskStatus.TIMEOUT,
            self._timeout_message,
            self._policy.max_attempts,
        )

    def _resolve_terminal(self, outcome: BackendQueryResult) -> tuple[TaskStatus, str]:
        if outcome.status is BackendStatus.SUCCESS:
            transcript = outcome.transcript or ""
            return TaskStatus.COMPLETED, transcript or self._empty_placeholder

        status = self._status_mapping[outcome.status]
        return status, outcome.detail or self._failure_message

    async def _settle(
        self,
        task_id: str,
        status: TaskStatus,
        result: str,
        attempts: int,
    ) -> Task:
        current = await self._store.get(task_id)
        settled = current.settle(status, result, attempts)
        await self._store.put(settled)
        increment_task_settled(status.value)
        logger.info(
            "Task %s settled as %s after %s attempt(s)",
            task_id,
            status.value,
            attempts,
        )
        return settled


__all__ = [
    "BackgroundPoller",
    "DEFAULT_EMPTY_TRANSCRIPT",
    "DEFAULT_FAILURE_MESSAGE",
    "DEFAULT_STATUS_MAPPING",
    "DEFAULT_TIMEOUT_MESSAGE",
]
