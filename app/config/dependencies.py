"""Builders wiring settings into the recognition components."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.config.settings import Settings
from app.services.audio_normalizer import FfmpegAudioNormalizer
from app.services.aws import create_boto3_client
from app.services.mock_recognition import MockRecognitionBackend
from app.services.speech import SpeechSynthesisService
from app.services.storage import S3AudioStorage
from app.services.transcribe import TranscribeRecognitionBackend
from app.services.translation import TranslationService
from app.tasks import (
    AudioNormalizer,
    BackendStatus,
    BackgroundPoller,
    RecognitionBackend,
    StatusHandler,
    SubmissionHandler,
    TaskStore,
    TaskSupervisor,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognitionComponents:
    """Everything one application instance needs to run recognition tasks."""

    store: TaskStore
    supervisor: TaskSupervisor
    submission: SubmissionHandler
    status: StatusHandler


def build_normalizer(settings: Settings) -> AudioNormalizer:
    return FfmpegAudioNormalizer(
        ffmpeg_binary=settings.recognition.ffmpeg_binary,
        sample_rate=settings.recognition.sample_rate,
    )


def build_recognition_backend(settings: Settings) -> RecognitionBackend:
    """Return the backend selected by ``RECOGNITION_PROVIDER``."""

    if settings.recognition.provider == "mock":
        logger.warning("Using the mock recognition backend; transcripts are canned")
        return MockRecognitionBackend(
            pending_queries=settings.recognition.mock_pending_queries
        )

    storage = None
    if settings.s3.bucket_name:
        storage = S3AudioStorage(
            create_boto3_client("s3", aws=settings.aws),
            settings.s3.bucket_name,
            prefix=settings.s3.prefix,
        )
    return TranscribeRecognitionBackend(
        create_boto3_client("transcribe", aws=settings.aws),
        storage,
        language_code=settings.transcribe.language_code,
        sample_rate=settings.recognition.sample_rate,
        output_prefix=settings.transcribe.output_prefix,
    )


def build_recognition_components(
    settings: Settings,
    normalizer: AudioNormalizer,
    backend: RecognitionBackend,
) -> RecognitionComponents:
    store = TaskStore()
    supervisor = TaskSupervisor(max_concurrent=settings.recognition.max_concurrent_pollers)
    recognition = settings.recognition
    poll_policy = settings.polling.policy()
    status_mapping = {
        BackendStatus.FAILURE: recognition.backend_failure_status,
        BackendStatus.TIMEOUT: recognition.backend_timeout_status,
    }

    def poller_factory() -> BackgroundPoller:
        return BackgroundPoller(
            store,
            backend,
            poll_policy,
            status_mapping=status_mapping,
            empty_transcript_placeholder=recognition.empty_transcript_placeholder,
            failure_message=recognition.failure_message,
            timeout_message=recognition.timeout_message,
        )

    # Raises ValueError now rather than on the first submission.
    poller_factory()

    submission = SubmissionHandler(
        store,
        normalizer,
        backend,
        supervisor,
        poller_factory,
        accepted_content_types=recognition.accepted_content_types,
        max_audio_bytes=recognition.max_upload_bytes,
    )
    return RecognitionComponents(
        store=store,
        supervisor=supervisor,
        submission=submission,
        status=StatusHandler(store),
    )


def build_speech_service(settings: Settings) -> SpeechSynthesisService:
    return SpeechSynthesisService(
        create_boto3_client("polly", region_name=settings.polly.region, aws=settings.aws),
        female_voice_id=settings.polly.female_voice_id,
        male_voice_id=settings.polly.male_voice_id,
        engine=settings.polly.engine,
    )


def build_translation_service(settings: Settings) -> TranslationService:
    try:
        client = create_boto3_client(
            "bedrock-runtime",
            region_name=settings.bedrock.region,
            aws=settings.aws,
        )
    except Exception as exc:  # pragma: no cover - configuration issue
        logger.warning("Could not initialise Bedrock: %s", exc)
        client = None

    return TranslationService(
        client,
        model_id=settings.bedrock.model_id,
        max_tokens=settings.bedrock.max_tokens,
        temperature=settings.bedrock.temperature,
    )


__all__ = [
    "RecognitionComponents",
    "build_normalizer",
    "build_recognition_backend",
    "build_recognition_components",
    "build_speech_service",
    "build_translation_service",
]
