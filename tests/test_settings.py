from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config.dependencies import build_recognition_backend, build_recognition_components
from app.config.settings import (
    ClientPollingConfig,
    PollingConfig,
    RecognitionConfig,
    Settings,
)
from app.services.mock_recognition import MockRecognitionBackend
from app.services.transcribe import TranscribeRecognitionBackend
from app.tasks import TaskStatus

from .fakes import FakeNormalizer, ScriptedBackend


def test_server_polling_defaults() -> None:
    policy = PollingConfig().policy()

    assert (policy.max_attempts, policy.interval, policy.initial_delay) == (30, 2.0, False)
    assert policy.delay_before(1) == 0.0
    assert policy.delay_before(2) == 2.0


def test_client_polling_defaults_wait_before_first_query() -> None:
    policy = ClientPollingConfig().policy()

    assert (policy.max_attempts, policy.interval) == (5, 1.0)
    assert policy.delay_before(1) == 1.0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POLL_MAX_ATTEMPTS", "12")
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("RECOGNITION_PROVIDER", "mock")
    monkeypatch.setenv("RECOGNITION_BACKEND_TIMEOUT_STATUS", "timeout")

    settings = Settings()

    assert settings.polling.max_attempts == 12
    assert settings.polling.interval_seconds == 0.5
    assert settings.recognition.provider == "mock"
    assert settings.recognition.backend_timeout_status is TaskStatus.TIMEOUT


def test_backend_outcomes_map_to_failed_by_default() -> None:
    config = RecognitionConfig()

    assert config.backend_failure_status is TaskStatus.FAILED
    assert config.backend_timeout_status is TaskStatus.FAILED


def test_provider_selects_backend(settings) -> None:
    assert isinstance(build_recognition_backend(settings), MockRecognitionBackend)

    settings.recognition.provider = "transcribe"
    settings.s3.bucket_name = "asr-bucket"
    settings.aws.region = "ap-northeast-1"

    assert isinstance(build_recognition_backend(settings), TranscribeRecognitionBackend)


@pytest.mark.parametrize("field", ["backend_failure_status", "backend_timeout_status"])
def test_backend_outcomes_cannot_map_to_processing(field) -> None:
    with pytest.raises(ValidationError):
        RecognitionConfig(**{field: "processing"})


def test_processing_mapping_from_environment_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECOGNITION_BACKEND_FAILURE_STATUS", "processing")

    with pytest.raises(ValidationError):
        RecognitionConfig()


def test_components_reject_invalid_mapping_at_build_time(settings) -> None:
    # Assignment bypasses validation; the component builder still refuses it.
    settings.recognition.backend_timeout_status = TaskStatus.COMPLETED

    with pytest.raises(ValueError):
        build_recognition_components(settings, FakeNormalizer(), ScriptedBackend())
