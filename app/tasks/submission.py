"""Submission handler: validate, normalize, create, record, hand off."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from app.tasks.errors import (
    AudioTooLargeError,
    AudioValidationError,
    BackendCreateError,
    ServiceUnavailableError,
    UnsupportedAudioTypeError,
)
from app.tasks.interfaces import AudioNormalizer, RecognitionBackend
from app.tasks.models import Task, TaskStatus
from app.tasks.poller import BackgroundPoller
from app.tasks.store import TaskStore
from app.tasks.supervisor import TaskSupervisor
from app.telemetry import increment_task_created, increment_task_settled

logger = logging.getLogger("app.tasks.submission")

_SOURCE_FORMATS = {
    "audio/mp4": "m4a",
    "audio/m4a": "m4a",
    "audio/x-m4a": "m4a",
    "audio/aac": "aac",
    "audio/x-aac": "aac",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}


def base_content_type(content_type: str | None) -> str | None:
    """Strip parameters (``; codecs=...``) and normalise case."""

    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


class SubmissionHandler:
    """Accept a recording and return a ``processing`` task without waiting on it."""

    def __init__(
        self,
        store: TaskStore,
        normalizer: AudioNormalizer,
        backend: RecognitionBackend,
        supervisor: TaskSupervisor,
        poller_factory: Callable[[], BackgroundPoller],
        *,
        accepted_content_types: Iterable[str],
        max_audio_bytes: int,
    ) -> None:
        self._store = store
        self._normalizer = normalizer
        self._backend = backend
        self._supervisor = supervisor
        self._poller_factory = poller_factory
        self._accepted = frozenset(
            filter(None, (base_content_type(value) for value in accepted_content_types))
        )
        self._max_audio_bytes = max_audio_bytes

    @property
    def accepted_content_types(self) -> frozenset[str]:
        return self._accepted

    def validate(self, audio: bytes | None, content_type: str | None) -> str:
        """Check the raw upload and return its normalised content type."""

        if not audio:
            raise AudioValidationError()
        if len(audio) > self._max_audio_bytes:
            raise AudioTooLargeError(len(audio), self._max_audio_bytes)

        resolved = base_content_type(content_type)
        if resolved not in self._accepted:
            raise UnsupportedAudioTypeError(content_type)
        return resolved

    async def submit(self, audio: bytes | None, content_type: str | None) -> Task:
        resolved = self.validate(audio, content_type)
        if self._supervisor.closed:
            raise ServiceUnavailableError()
        poller = self._poller_factory()
        logger.info("Received %s bytes of %s audio", len(audio), resolved)

        normalized = await self._normalizer.normalize(audio, _SOURCE_FORMATS.get(resolved))
        logger.info("Audio normalized to %s bytes of PCM", len(normalized))

        external_id = await self._backend.create(normalized)
        task = Task.new(str(external_id))
        if not await self._store.add(task):
            logger.error("Recognition backend reused task id %s", task.id)
            raise BackendCreateError(f"Recognition backend reused task id {task.id}")
        increment_task_created()

        try:
            self._supervisor.spawn(task.id, lambda: poller.run(task.id))
        except RuntimeError:
            # No poller will ever write this record, so settle it here.
            await self._store.put(task.settle(TaskStatus.FAILED, poller.failure_message, 0))
            increment_task_settled(TaskStatus.FAILED.value)
            logger.warning("Task %s failed: pollers are shut down", task.id)
            raise ServiceUnavailableError() from None
        logger.info("Created recognition task %s", task.id)
        return task


__all__ = ["SubmissionHandler", "base_content_type"]
