from __future__ import annotations

import asyncio
import logging

import pytest

from app.tasks import TaskSupervisor


@pytest.mark.asyncio
async def test_spawn_returns_before_work_finishes(supervisor: TaskSupervisor) -> None:
    release = asyncio.Event()
    finished: list[str] = []

    async def work() -> None:
        await release.wait()
        finished.append("77")

    supervisor.spawn("77", work)

    assert supervisor.outstanding() == ["77"]
    assert finished == []

    release.set()
    await supervisor.wait_idle()

    assert finished == ["77"]
    assert len(supervisor) == 0


@pytest.mark.asyncio
async def test_concurrency_is_capped() -> None:
    supervisor = TaskSupervisor(max_concurrent=1)
    release = asyncio.Event()
    started: list[str] = []

    def make_work(name: str):
        async def work() -> None:
            started.append(name)
            await release.wait()

        return work

    supervisor.spawn("a", make_work("a"))
    supervisor.spawn("b", make_work("b"))
    for _ in range(5):
        await asyncio.sleep(0)

    assert started == ["a"]
    assert sorted(supervisor.outstanding()) == ["a", "b"]

    release.set()
    await supervisor.wait_idle()
    assert started == ["a", "b"]


@pytest.mark.asyncio
async def test_shutdown_cancels_outstanding_work() -> None:
    supervisor = TaskSupervisor()

    async def forever() -> None:
        await asyncio.Event().wait()

    supervisor.spawn("1", forever)
    await asyncio.sleep(0)
    await supervisor.shutdown()

    assert len(supervisor) == 0
    with pytest.raises(RuntimeError):
        supervisor.spawn("2", forever)


@pytest.mark.asyncio
async def test_crashing_work_is_logged_not_raised(
    supervisor: TaskSupervisor, caplog: pytest.LogCaptureFixture
) -> None:
    async def boom() -> None:
        raise ValueError("boom")

    with caplog.at_level(logging.ERROR, logger="app.tasks.supervisor"):
        supervisor.spawn("9", boom)
        await supervisor.wait_idle()

    assert "Poller for task 9 crashed" in caplog.text


def test_invalid_cap() -> None:
    with pytest.raises(ValueError):
        TaskSupervisor(max_concurrent=0)
