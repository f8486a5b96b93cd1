from __future__ import annotations

import random

import pytest

from app.services.mock_recognition import (
    MOCK_TRANSCRIPTS,
    MockRecognitionBackend,
    pick_mock_transcript,
)
from app.tasks import BackendStatus, BackgroundPoller, RetryPolicy, TaskStatus, TaskStore, Task


@pytest.mark.asyncio
async def test_pending_queries_then_success() -> None:
    backend = MockRecognitionBackend(pending_queries=2, rng=random.Random(7))
    external_id = await backend.create(b"RIFF")

    statuses = [(await backend.query(external_id)).status for _ in range(3)]

    assert statuses == [BackendStatus.IN_PROGRESS, BackendStatus.IN_PROGRESS, BackendStatus.SUCCESS]
    assert (await backend.query(external_id)).transcript in MOCK_TRANSCRIPTS


@pytest.mark.asyncio
async def test_ids_are_unique() -> None:
    backend = MockRecognitionBackend()

    ids = {await backend.create(b"RIFF") for _ in range(5)}

    assert len(ids) == 5


@pytest.mark.asyncio
async def test_unknown_id_fails() -> None:
    result = await MockRecognitionBackend().query("nope")

    assert result.status is BackendStatus.FAILURE


@pytest.mark.asyncio
async def test_drives_poller_to_completion(sleeper) -> None:
    store = TaskStore()
    backend = MockRecognitionBackend(pending_queries=1, transcripts=["固定文本"])
    external_id = await backend.create(b"RIFF")
    await store.put(Task.new(external_id))

    poller = BackgroundPoller(
        store, backend, RetryPolicy(max_attempts=30, interval=2.0), sleep=sleeper
    )
    await poller.run(external_id)

    task = await store.get(external_id)
    assert (task.status, task.result, task.attempts) == (TaskStatus.COMPLETED, "固定文本", 2)
    assert sleeper.delays == [2.0]


def test_pick_mock_transcript_confidence_range() -> None:
    rng = random.Random(1)

    for _ in range(20):
        text, confidence = pick_mock_transcript(rng)
        assert text in MOCK_TRANSCRIPTS
        assert 0.6 <= confidence <= 1.0
