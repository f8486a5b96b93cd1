"""Integration-style tests for the /api/audio-to-text endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.mock_recognition import MOCK_TRANSCRIPTS
from app.tasks import AudioNormalizationError, BackendConfigurationError

from .fakes import (
    IN_PROGRESS,
    FakeNormalizer,
    FakeSpeechService,
    FakeTranslationService,
    ScriptedBackend,
    success,
)


def _build(settings, backend, normalizer=None):
    return create_app(
        settings,
        normalizer=normalizer or FakeNormalizer(),
        backend=backend,
        speech=FakeSpeechService(),
        translator=FakeTranslationService(),
        configure_logging=False,
    )


def _wait_for_pollers(client: TestClient) -> None:
    client.portal.call(client.app.state.recognition.supervisor.wait_idle)


def _upload(client: TestClient, content_type: str = "audio/mp4", data: bytes = b"m4a-bytes"):
    return client.post(
        "/api/audio-to-text",
        files={"audio": ("recording.m4a", data, content_type)},
    )


def test_submit_then_poll_until_completed(settings) -> None:
    backend = ScriptedBackend(task_ids=["77"], script=[IN_PROGRESS, success("hello")])

    with TestClient(_build(settings, backend)) as client:
        response = _upload(client)

        assert response.status_code == 200
        assert response.json() == {"taskId": "77", "status": "processing"}

        _wait_for_pollers(client)

        first = client.get("/api/audio-to-text/status/77")
        second = client.get("/api/audio-to-text/status/77")

    assert first.status_code == 200
    assert first.json() == {
        "taskId": "77",
        "status": "completed",
        "result": "hello",
        "attempts": 2,
    }
    assert second.json() == first.json()


def test_status_while_processing(settings) -> None:
    settings.polling.interval_seconds = 60
    backend = ScriptedBackend(task_ids=["12"])

    with TestClient(_build(settings, backend)) as client:
        _upload(client)
        response = client.get("/api/audio-to-text/status/12")

    assert response.status_code == 200
    assert response.json() == {
        "taskId": "12",
        "status": "processing",
        "result": None,
        "attempts": 0,
    }


def test_exhausted_budget_reports_timeout(settings) -> None:
    settings.polling.max_attempts = 3
    backend = ScriptedBackend(task_ids=["5"])

    with TestClient(_build(settings, backend)) as client:
        _upload(client)
        _wait_for_pollers(client)
        payload = client.get("/api/audio-to-text/status/5").json()

    assert payload["status"] == "timeout"
    assert payload["attempts"] == 3
    assert payload["result"] == settings.recognition.timeout_message


def test_unknown_task_is_not_found(settings) -> None:
    with TestClient(_build(settings, ScriptedBackend())) as client:
        response = client.get("/api/audio-to-text/status/does-not-exist")

    assert response.status_code == 404
    assert response.json()["code"] == "task_not_found"


@pytest.mark.parametrize(
    ("kwargs", "status_code", "code"),
    [
        ({"content_type": "text/plain"}, 415, "unsupported_audio_type"),
        ({"data": b""}, 400, "audio_missing"),
        ({"data": b"x" * 4096}, 413, "audio_too_large"),
    ],
)
def test_invalid_uploads_are_rejected(settings, kwargs, status_code, code) -> None:
    backend = ScriptedBackend()

    with TestClient(_build(settings, backend)) as client:
        response = _upload(client, **kwargs)
        overview = client.get("/api/audio-to-text/tasks").json()

    assert response.status_code == status_code
    assert response.json()["code"] == code
    assert backend.created == []
    assert overview["total"] == 0


def test_missing_audio_field(settings) -> None:
    with TestClient(_build(settings, ScriptedBackend())) as client:
        response = client.post("/api/audio-to-text", data={"other": "field"})

    assert response.status_code == 400
    assert response.json()["code"] == "audio_missing"


def test_normalization_failure_is_reported_synchronously(settings) -> None:
    normalizer = FakeNormalizer(error=AudioNormalizationError("moov atom not found"))
    backend = ScriptedBackend()

    with TestClient(_build(settings, backend, normalizer)) as client:
        response = _upload(client)

    assert response.status_code == 400
    assert response.json() == {
        "detail": "moov atom not found",
        "code": "audio_normalization_failed",
    }
    assert backend.created == []


def test_missing_backend_credentials(settings) -> None:
    backend = ScriptedBackend(create_error=BackendConfigurationError())

    with TestClient(_build(settings, backend)) as client:
        response = _upload(client)
        overview = client.get("/api/audio-to-text/tasks").json()

    assert response.status_code == 500
    assert response.json()["code"] == "backend_not_configured"
    assert overview["total"] == 0


def test_task_overview_counts(settings) -> None:
    backend = ScriptedBackend(task_ids=["1", "2"], script=[success("a")])

    with TestClient(_build(settings, backend)) as client:
        _upload(client)
        _wait_for_pollers(client)
        overview = client.get("/api/audio-to-text/tasks").json()

    assert overview["total"] == 1
    assert overview["byStatus"]["completed"] == 1
    assert overview["outstandingPollers"] == 0


def test_mock_recognition_endpoint(settings) -> None:
    with TestClient(_build(settings, ScriptedBackend())) as client:
        response = client.post(
            "/api/audio-to-text-mock",
            files={"audio": ("recording.m4a", b"bytes", "audio/mp4")},
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["text"] in MOCK_TRANSCRIPTS
    assert 0.6 <= payload["confidence"] <= 1.0


def test_health_and_metrics(settings) -> None:
    backend = ScriptedBackend(script=[success("hi")])

    with TestClient(_build(settings, backend)) as client:
        health = client.get("/health")
        _upload(client)
        _wait_for_pollers(client)
        metrics = client.get("/metrics")

    assert health.json()["status"] == "healthy"
    assert "recognition_tasks_created_total" in metrics.text
    assert 'recognition_tasks_settled_total{status="completed"}' in metrics.text


def test_error_and_health_schemas_are_published(settings) -> None:
    with TestClient(_build(settings, ScriptedBackend())) as client:
        schema = client.get("/openapi.json").json()
        health = client.get("/health").json()

    assert set(health) == {"status", "service", "version"}
    create = schema["paths"]["/api/audio-to-text"]["post"]["responses"]
    assert create["415"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
    assert schema["paths"]["/health"]["get"]["responses"]["200"]["content"]["application/json"][
        "schema"
    ]["$ref"].endswith("/HealthResponse")


def test_submission_after_shutdown_is_unavailable(settings) -> None:
    backend = ScriptedBackend()

    with TestClient(_build(settings, backend)) as client:
        client.portal.call(client.app.state.recognition.supervisor.shutdown)
        response = _upload(client)

    assert response.status_code == 503
    assert response.json()["code"] == "service_unavailable"
    assert backend.created == []
