# tests/test_poller.py

from __future__ import annotations

import pytest

from app.tasks import (
    BackendQueryResult,
    BackendStatus,
    BackendTransientError,
    BackgroundPoller,
    RetryPolicy,
    Task,
    TaskStatus,
    TaskStore,
)
from app.tasks.poller import (
    DEFAULT_EMPTY_TRANSCRIPT,
    DEFAULT_FAILURE_MESSAGE,
    DEFAULT_TIMEOUT_MESSAGE,
)

from .fakes import IN_PROGRESS, RecordingSleeper, ScriptedBackend, success


async def _run(store, backend, policy, sleeper, task_id="77", **kwargs) -> Task:
    await store.put(Task.new(task_id))
    poller = BackgroundPoller(store, backend, policy, sleep=sleeper, **kwargs)
    return await poller.run(task_id)


@pytest.mark.asyncio
async def test_in_progress_then_success(store: TaskStore, policy, sleeper: RecordingSleeper) -> None:
    backend = ScriptedBackend(script=[IN_PROGRESS, success("hello")])

    task = await _run(store, backend, policy, sleeper)

    assert (task.id, task.status, task.result, task.attempts) == (
        "77",
        TaskStatus.COMPLETED,
        "hello",
        2,
    )
    assert await store.get("77") == task
    # First query is immediate, the second waits one interval.
    assert sleeper.delays == [2.0]
    assert backend.queries == ["77", "77"]


@pytest.mark.asyncio
async def test_budget_exhaustion_settles_as_timeout(store, policy, sleeper) -> None:
    backend = ScriptedBackend(task_ids=["5"])

    task = await _run(store, backend, policy, sleeper, task_id="5")

    assert task.status is TaskStatus.TIMEOUT
    assert task.result == DEFAULT_TIMEOUT_MESSAGE
    assert task.attempts == 30
    assert len(backend.queries) == 30
    assert sleeper.delays == [2.0] * 29


@pytest.mark.asyncio
@pytest.mark.parametrize("transcript", ["", None])
async def test_empty_transcript_uses_placeholder(store, policy, sleeper, transcript) -> None:
    backend = ScriptedBackend(script=[success(transcript)])

    task = await _run(store, backend, policy, sleeper)

    assert task.status is TaskStatus.COMPLETED
    assert task.result == DEFAULT_EMPTY_TRANSCRIPT
    assert task.attempts == 1
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_custom_placeholder(store, policy, sleeper) -> None:
    backend = ScriptedBackend(script=[success("")])

    task = await _run(
        store, backend, policy, sleeper, empty_transcript_placeholder="(silence)"
    )

    assert task.result == "(silence)"


@pytest.mark.asyncio
async def test_backend_failure_settles_as_failed_with_detail(store, policy, sleeper) -> None:
    backend = ScriptedBackend(
        script=[
            IN_PROGRESS,
            BackendQueryResult(status=BackendStatus.FAILURE, detail="unsupported codec"),
        ]
    )

    task = await _run(store, backend, policy, sleeper)

    assert task.status is TaskStatus.FAILED
    assert task.result == "unsupported codec"
    assert task.attempts == 2


@pytest.mark.asyncio
async def test_backend_timeout_maps_to_failed_by_default(store, policy, sleeper) -> None:
    backend = ScriptedBackend(script=[BackendQueryResult(status=BackendStatus.TIMEOUT)])

    task = await _run(store, backend, policy, sleeper)

    assert task.status is TaskStatus.FAILED
    assert task.result == DEFAULT_FAILURE_MESSAGE


@pytest.mark.asyncio
async def test_backend_timeout_mapping_is_configurable(store, policy, sleeper) -> None:
    backend = ScriptedBackend(script=[BackendQueryResult(status=BackendStatus.TIMEOUT)])

    task = await _run(
        store,
        backend,
        policy,
        sleeper,
        status_mapping={BackendStatus.TIMEOUT: TaskStatus.TIMEOUT},
    )

    assert task.status is TaskStatus.TIMEOUT


def test_mapping_to_non_failure_status_is_rejected(store, backend, policy) -> None:
    with pytest.raises(ValueError):
        BackgroundPoller(
            store,
            backend,
            policy,
            status_mapping={BackendStatus.FAILURE: TaskStatus.COMPLETED},
        )


@pytest.mark.asyncio
async def test_transient_errors_are_retried(store, policy, sleeper) -> None:
    backend = ScriptedBackend(
        script=[
            BackendTransientError("connection reset"),
            RuntimeError("unexpected"),
            success("later"),
        ]
    )

    task = await _run(store, backend, policy, sleeper)

    assert task.status is TaskStatus.COMPLETED
    assert task.result == "later"
    assert task.attempts == 3
    assert sleeper.delays == [2.0, 2.0]


@pytest.mark.asyncio
async def test_only_transient_errors_end_in_timeout(store, sleeper) -> None:
    policy = RetryPolicy(max_attempts=3, interval=0.5)
    backend = ScriptedBackend(script=[BackendTransientError("down")] * 3)

    task = await _run(store, backend, policy, sleeper)

    assert task.status is TaskStatus.TIMEOUT
    assert task.attempts == 3


@pytest.mark.asyncio
async def test_in_progress_queries_do_not_write(store, sleeper) -> None:
    policy = RetryPolicy(max_attempts=2, interval=0)
    writes: list[Task] = []
    original_put = store.put

    async def tracking_put(task: Task) -> None:
        writes.append(task)
        await original_put(task)

    await store.put(Task.new("77"))
    store.put = tracking_put  # type: ignore[method-assign]

    poller = BackgroundPoller(store, ScriptedBackend(), policy, sleep=sleeper)
    await poller.run("77")

    assert len(writes) == 1
    assert writes[0].status is TaskStatus.TIMEOUT
    # interval 0 means no sleeping at all
    assert sleeper.delays == []
