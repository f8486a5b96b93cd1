"""Amazon Transcribe batch jobs as the recognition backend."""

from __future__ import annotations

import logging
from typing import Any, Callable
from uuid import uuid4

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)
from fastapi.concurrency import run_in_threadpool

from app.services.storage import S3AudioStorage, StorageError
from app.tasks import (
    BackendConfigurationError,
    BackendCreateError,
    BackendQueryResult,
    BackendStatus,
    BackendTransientError,
    RecognitionBackend,
)

logger = logging.getLogger(__name__)

_IN_PROGRESS_STATES = {"QUEUED", "IN_PROGRESS"}
_CREDENTIAL_ERRORS = (NoCredentialsError, PartialCredentialsError)
_CREDENTIAL_ERROR_CODES = {
    "UnrecognizedClientException",
    "InvalidClientTokenId",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "AuthFailure",
}


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def extract_transcript(document: dict[str, Any]) -> str:
    """Join every transcript alternative in a Transcribe output document."""

    transcripts = document.get("results", {}).get("transcripts", [])
    texts = [item.get("transcript", "") for item in transcripts]
    return " ".join(text for text in texts if text).strip()


class TranscribeRecognitionBackend(RecognitionBackend):
    """Create Transcribe jobs from S3-hosted WAV audio and read back results.

    The job name doubles as the task identifier handed to clients.
    """

    def __init__(
        self,
        transcribe_client: Any,
        storage: S3AudioStorage | None,
        *,
        language_code: str = "zh-CN",
        sample_rate: int = 16000,
        output_prefix: str = "transcripts",
        job_name_factory: Callable[[], str] | None = None,
    ) -> None:
        self._client = transcribe_client
        self._storage = storage
        self._language_code = language_code
        self._sample_rate = sample_rate
        self._output_prefix = output_prefix.strip("/")
        self._job_name_factory = job_name_factory or (lambda: f"asr-{uuid4().hex}")

    def _require_storage(self) -> S3AudioStorage:
        if self._storage is None or not self._storage.bucket:
            raise BackendConfigurationError(
                "S3 bucket is not configured; set S3_BUCKET_NAME for Amazon Transcribe"
            )
        return self._storage

    def output_key(self, job_name: str) -> str:
        return f"{self._output_prefix}/{job_name}.json"

    async def create(self, audio: bytes) -> str:
        storage = self._require_storage()
        job_name = self._job_name_factory()

        try:
            audio_key = await storage.upload_audio(job_name, audio)
        except StorageError as exc:
            if isinstance(exc.__cause__, _CREDENTIAL_ERRORS):
                raise BackendConfigurationError(
                    "AWS credentials are not configured; set AWS_ACCESS_KEY and AWS_SECRET_KEY"
                ) from exc
            raise BackendCreateError(str(exc)) from exc

        try:
            await run_in_threadpool(
                self._client.start_transcription_job,
                TranscriptionJobName=job_name,
                LanguageCode=self._language_code,
                MediaSampleRateHertz=self._sample_rate,
                MediaFormat="wav",
                Media={"MediaFileUri": storage.media_uri(audio_key)},
                OutputBucketName=storage.bucket,
                OutputKey=self.output_key(job_name),
            )
        except _CREDENTIAL_ERRORS as exc:
            raise BackendConfigurationError(
                "AWS credentials are not configured; set AWS_ACCESS_KEY and AWS_SECRET_KEY"
            ) from exc
        except ClientError as exc:
            if _error_code(exc) in _CREDENTIAL_ERROR_CODES:
                raise BackendConfigurationError(f"AWS credentials rejected: {exc}") from exc
            raise BackendCreateError(f"Failed to start transcription job: {exc}") from exc
        except BotoCoreError as exc:
            raise BackendCreateError(f"Failed to start transcription job: {exc}") from exc

        logger.info("Started transcription job %s for %s bytes", job_name, len(audio))
        return job_name

    async def query(self, external_id: str) -> BackendQueryResult:
        try:
            response = await run_in_threadpool(
                self._client.get_transcription_job,
                TranscriptionJobName=external_id,
            )
        except (BotoCoreError, ClientError) as exc:
            raise BackendTransientError(f"Transcribe status query failed: {exc}") from exc

        job = response.get("TranscriptionJob", {})
        job_status = job.get("TranscriptionJobStatus", "")

        if job_status in _IN_PROGRESS_STATES:
            return BackendQueryResult(status=BackendStatus.IN_PROGRESS)

        if job_status == "FAILED":
            return BackendQueryResult(
                status=BackendStatus.FAILURE,
                detail=job.get("FailureReason"),
            )

        if job_status == "COMPLETED":
            storage = self._require_storage()
            try:
                document = await storage.read_json(self.output_key(external_id))
            except StorageError as exc:
                raise BackendTransientError(str(exc)) from exc
            return BackendQueryResult(
                status=BackendStatus.SUCCESS,
                transcript=extract_transcript(document),
            )

        logger.warning("Unknown Transcribe job status %r for %s", job_status, external_id)
        return BackendQueryResult(status=BackendStatus.IN_PROGRESS)


__all__ = ["TranscribeRecognitionBackend", "extract_transcript"]
