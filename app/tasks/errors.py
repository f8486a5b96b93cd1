"""Error vocabulary for recognition task submission, polling and lookup."""

from __future__ import annotations


class RecognitionTaskError(RuntimeError):
    """Base class for errors surfaced by the recognition task core."""

    code = "recognition_error"
    status_code = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return "Recognition request failed"

    @property
    def message(self) -> str:
        return str(self)


class AudioValidationError(RecognitionTaskError):
    """Raised when the submitted audio is missing or empty."""

    code = "audio_missing"
    status_code = 400

    @classmethod
    def default_message(cls) -> str:
        return "Please upload an audio file"


class UnsupportedAudioTypeError(AudioValidationError):
    code = "unsupported_audio_type"
    status_code = 415

    def __init__(self, content_type: str | None) -> None:
        self.content_type = content_type
        super().__init__(f"Unsupported audio content type: {content_type or 'unknown'}")


class AudioTooLargeError(AudioValidationError):
    code = "audio_too_large"
    status_code = 413

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Audio payload of {size} bytes exceeds the {limit} byte limit")


class AudioNormalizationError(RecognitionTaskError):
    """Raised when the audio cannot be converted to canonical PCM."""

    code = "audio_normalization_failed"
    status_code = 400

    @classmethod
    def default_message(cls) -> str:
        return "Audio conversion failed"


class BackendConfigurationError(RecognitionTaskError):
    """Raised when the recognition backend is missing credentials or setup."""

    code = "backend_not_configured"
    status_code = 500

    @classmethod
    def default_message(cls) -> str:
        return "Recognition backend is not configured"


class BackendCreateError(RecognitionTaskError):
    """Raised when the backend refuses or fails to create a task."""

    code = "backend_create_failed"
    status_code = 502

    @classmethod
    def default_message(cls) -> str:
        return "Failed to create recognition task"


class BackendTransientError(RecognitionTaskError):
    """Raised by a status query that failed in transport; retried by the poller."""

    code = "backend_unavailable"
    status_code = 503


class ServiceUnavailableError(RecognitionTaskError):
    """Raised when submissions arrive after the pollers have been shut down."""

    code = "service_unavailable"
    status_code = 503

    @classmethod
    def default_message(cls) -> str:
        return "Recognition service is shutting down"


class TaskNotFoundError(RecognitionTaskError):
    code = "task_not_found"
    status_code = 404

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} does not exist")


class TaskAlreadySettledError(RecognitionTaskError):
    code = "task_already_settled"
    status_code = 500

    def __init__(self, task_id: str, status: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} is already {status}")


__all__ = [
    "AudioNormalizationError",
    "AudioTooLargeError",
    "AudioValidationError",
    "BackendConfigurationError",
    "BackendCreateError",
    "BackendTransientError",
    "RecognitionTaskError",
    "ServiceUnavailableError",
    "TaskAlreadySettledError",
    "TaskNotFoundError",
    "UnsupportedAudioTypeError",
]
