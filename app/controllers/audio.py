"""Audio recognition endpoints.

POST ``/api/audio-to-text`` accepts a recording and returns a task id
straight away; the recognition itself is driven by a background poller.
Clients then poll GET ``/api/audio-to-text/status/{task_id}`` until the
task reports ``completed``, ``failed`` or ``timeout``.

Errors raised by the task core (``RecognitionTaskError``) are rendered by
the exception handler registered in ``app.main``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, UploadFile

from app.controllers.dependencies import (
    SettingsDep,
    StatusDep,
    SubmissionDep,
    SupervisorDep,
    TaskStoreDep,
)
from app.pipelines.audio import read_audio_bytes, resolve_content_type
from app.services.mock_recognition import pick_mock_transcript
from app.tasks import AudioValidationError
from app.views import (
    ErrorResponse,
    MockRecognitionResponse,
    TaskCreatedResponse,
    TaskOverviewResponse,
    TaskStatusResponse,
)

router = APIRouter(
    prefix="/api",
    tags=["audio"],
    responses={
        status_code: {"model": ErrorResponse}
        for status_code in (400, 404, 413, 415, 500, 502, 503)
    },
)

logger = logging.getLogger(__name__)

_AUDIO_FILE_UPLOAD = File(None)


@router.post("/audio-to-text", response_model=TaskCreatedResponse)
async def create_recognition_task(
    submission: SubmissionDep,
    settings: SettingsDep,
    audio: Optional[UploadFile] = _AUDIO_FILE_UPLOAD,
) -> TaskCreatedResponse:
    """Normalize the upload, create a recognition task and return its id."""

    if audio is None:
        raise AudioValidationError()

    content_type = resolve_content_type(audio)
    audio_bytes = await read_audio_bytes(audio, settings.recognition.max_upload_bytes)
    logger.info(
        "Received audio upload %s (%s, %s bytes)",
        audio.filename,
        content_type,
        len(audio_bytes),
    )

    task = await submission.submit(audio_bytes, content_type)
    return TaskCreatedResponse.from_task(task)


@router.get("/audio-to-text/status/{task_id}", response_model=TaskStatusResponse)
async def get_recognition_status(task_id: str, status_handler: StatusDep) -> TaskStatusResponse:
    task = await status_handler.get_status(task_id)
    return TaskStatusResponse.from_task(task)


@router.get("/audio-to-text/tasks", response_model=TaskOverviewResponse)
async def get_task_overview(
    store: TaskStoreDep,
    supervisor: SupervisorDep,
) -> TaskOverviewResponse:
    """Counts of stored tasks by status and of pollers still running."""

    by_status = await store.count_by_status()
    return TaskOverviewResponse(
        total=sum(by_status.values()),
        by_status=by_status,
        outstanding_pollers=len(supervisor),
        max_concurrent_pollers=supervisor.max_concurrent,
    )


@router.post("/audio-to-text-mock", response_model=MockRecognitionResponse)
async def mock_recognition(
    settings: SettingsDep,
    audio: Optional[UploadFile] = _AUDIO_FILE_UPLOAD,
) -> MockRecognitionResponse:
    """Return a canned transcript without touching the recognition backend."""

    if audio is None:
        raise AudioValidationError()

    audio_bytes = await read_audio_bytes(audio, settings.recognition.max_upload_bytes)
    if not audio_bytes:
        raise AudioValidationError()

    logger.info("Received %s bytes for mock recognition", len(audio_bytes))
    text, confidence = pick_mock_transcript()
    return MockRecognitionResponse(text=text, confidence=confidence)
