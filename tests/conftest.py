# tests/conftest.py

from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.config.settings import (  # noqa: E402
    PollingConfig,
    RecognitionConfig,
    Settings,
)
from app.tasks import RetryPolicy, TaskStore, TaskSupervisor  # noqa: E402

from .fakes import FakeNormalizer, RecordingSleeper, ScriptedBackend  # noqa: E402


@pytest.fixture()
def store() -> TaskStore:
    return TaskStore()


@pytest.fixture()
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture()
def policy() -> RetryPolicy:
    """Reference server-side budget: 30 attempts, 2 s apart, first query immediate."""
    return RetryPolicy(max_attempts=30, interval=2.0, initial_delay=False)


@pytest.fixture()
def normalizer() -> FakeNormalizer:
    return FakeNormalizer()


@pytest.fixture()
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture()
async def supervisor():
    supervisor = TaskSupervisor(max_concurrent=8)
    yield supervisor
    await supervisor.shutdown()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings with zero-interval polling and log files under tmp_path.

    Built explicitly so a developer's .env cannot leak into tests.
    """
    return Settings(
        log_file=str(tmp_path / "app.log"),
        task_log_file=str(tmp_path / "tasks.log"),
        polling=PollingConfig(max_attempts=30, interval_seconds=0),
        recognition=RecognitionConfig(provider="mock", max_upload_bytes=1024),
    )
