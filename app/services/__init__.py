"""Service layer helpers for external integrations."""

from .audio_normalizer import FfmpegAudioNormalizer
from .mock_recognition import MockRecognitionBackend, pick_mock_transcript
from .speech import (
    SpeechConfigurationError,
    SpeechResult,
    SpeechSynthesisError,
    SpeechSynthesisService,
)
from .storage import S3AudioStorage, StorageError
from .transcribe import TranscribeRecognitionBackend, extract_transcript
from .translation import (
    TranslationConfigurationError,
    TranslationError,
    TranslationService,
)

__all__ = [
    "FfmpegAudioNormalizer",
    "MockRecognitionBackend",
    "pick_mock_transcript",
    "S3AudioStorage",
    "StorageError",
    "SpeechConfigurationError",
    "SpeechResult",
    "SpeechSynthesisError",
    "SpeechSynthesisService",
    "TranscribeRecognitionBackend",
    "extract_transcript",
    "TranslationConfigurationError",
    "TranslationError",
    "TranslationService",
]
