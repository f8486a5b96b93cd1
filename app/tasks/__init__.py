"""Asynchronous recognition task orchestration.

1. ``submission`` – validate + normalize audio, create the external task.
2. ``supervisor`` – own the fire-and-forget background pollers.
3. ``poller`` – drive each task from ``processing`` to a terminal status.
4. ``status`` – read-only lookup for client polling.

``store`` holds the task records shared by all of the above.
"""

from .errors import (
    AudioNormalizationError,
    AudioTooLargeError,
    AudioValidationError,
    BackendConfigurationError,
    BackendCreateError,
    BackendTransientError,
    RecognitionTaskError,
    ServiceUnavailableError,
    TaskAlreadySettledError,
    TaskNotFoundError,
    UnsupportedAudioTypeError,
)
from .interfaces import AudioNormalizer, RecognitionBackend
from .models import BackendQueryResult, BackendStatus, RetryPolicy, Task, TaskStatus
from .poller import BackgroundPoller
from .status import StatusHandler
from .store import TaskStore
from .submission import SubmissionHandler
from .supervisor import TaskSupervisor

__all__ = [
    "AudioNormalizationError",
    "AudioNormalizer",
    "AudioTooLargeError",
    "AudioValidationError",
    "BackendConfigurationError",
    "BackendCreateError",
    "BackendQueryResult",
    "BackendStatus",
    "BackendTransientError",
    "BackgroundPoller",
    "RecognitionBackend",
    "RecognitionTaskError",
    "RetryPolicy",
    "ServiceUnavailableError",
    "StatusHandler",
    "SubmissionHandler",
    "Task",
    "TaskAlreadySettledError",
    "TaskNotFoundError",
    "TaskStatus",
    "TaskStore",
    "TaskSupervisor",
    "UnsupportedAudioTypeError",
]
