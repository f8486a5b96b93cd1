"""HTTP client for callers of the audio-to-text API.

The client mirrors what the mini-program does: upload a recording, then
poll the status endpoint on its own budget. That budget is independent of
the server's background poller, so the client may give up while the task
is still ``processing`` on the server (``ClientPollingTimeoutError``) even
though the server later settles it.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional, Union

import requests
from requests import Response, Session
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException

from app.tasks.models import RetryPolicy, TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_POLICY = RetryPolicy(max_attempts=5, interval=1.0, initial_delay=True)

AudioSource = Union[str, Path, bytes, BinaryIO]
ProgressCallback = Callable[[dict[str, Any]], None]


class RecognitionClientError(RuntimeError):
    """Base class for client-side failures."""


class ClientUploadError(RecognitionClientError):
    pass


class ClientStatusError(RecognitionClientError):
    pass


class RecognitionFailedError(RecognitionClientError):
    """The server settled the task as ``failed``."""


class RecognitionTimeoutError(RecognitionClientError):
    """The server gave up polling the recognizer (task status ``timeout``)."""


class ClientPollingTimeoutError(RecognitionClientError):
    """The client exhausted its own polling budget."""


class RecognitionClient:
    """Upload recordings and wait for their transcripts."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[Session] = None,
        policy: RetryPolicy = DEFAULT_CLIENT_POLICY,
        upload_retries: int = 2,
        upload_retry_delay: float = 2.0,
        timeout: float = 300.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._policy = policy
        self._upload_retries = max(upload_retries, 1)
        self._upload_retry_delay = upload_retry_delay
        self._timeout = timeout
        self._sleep = sleep

    @classmethod
    def from_settings(cls, base_url: str, settings: Any, **kwargs: Any) -> "RecognitionClient":
        """Build a client from a ``ClientPollingConfig``."""

        return cls(
            base_url,
            policy=settings.policy(),
            upload_retries=settings.upload_retries,
            upload_retry_delay=settings.upload_retry_delay_seconds,
            timeout=settings.request_timeout_seconds,
            **kwargs,
        )

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    @staticmethod
    def _read_audio(source: AudioSource) -> bytes:
        if isinstance(source, bytes):
            return source
        if isinstance(source, (str, Path)):
            return Path(source).read_bytes()
        return source.read()

    @staticmethod
    def _detail(response: Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(payload, dict):
            return str(payload.get("detail") or payload)
        return str(payload)

    def upload_audio(
        self,
        source: AudioSource,
        *,
        filename: str = "recording.m4a",
        content_type: str = "audio/mp4",
    ) -> str:
        """Submit a recording and return the task id, retrying dropped connections."""

        audio_bytes = self._read_audio(source)
        attempts = 0
        while True:
            attempts += 1
            logger.info("Uploading %s bytes (attempt %s)", len(audio_bytes), attempts)
            try:
                response = self._session.post(
                    self._url("/api/audio-to-text"),
                    files={"audio": (filename, audio_bytes, content_type)},
                    timeout=self._timeout,
                )
            except RequestsConnectionError as exc:
                if attempts < self._upload_retries:
                    logger.warning(
                        "Upload connection failed, retrying in %.1fs: %s",
                        self._upload_retry_delay,
                        exc,
                    )
                    self._sleep(self._upload_retry_delay)
                    continue
                raise ClientUploadError(
                    f"Upload failed after {attempts} attempt(s): {exc}"
                ) from exc
            except RequestException as exc:
                raise ClientUploadError(f"Upload failed: {exc}") from exc
            break

        if response.status_code == 413:
            raise ClientUploadError("Audio file is too large")
        if response.status_code != 200:
            raise ClientUploadError(
                f"Upload rejected (HTTP {response.status_code}): {self._detail(response)}"
            )

        try:
            task_id = response.json()["taskId"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ClientUploadError(
                f"Upload response did not contain a task id: {response.text!r}"
            ) from exc
        logger.info("Upload accepted, task %s", task_id)
        return str(task_id)

    def check_task_status(self, task_id: str) -> dict[str, Any]:
        try:
            response = self._session.get(
                self._url(f"/api/audio-to-text/status/{task_id}"),
                timeout=self._timeout,
            )
        except RequestException as exc:
            raise ClientStatusError(f"Status query failed: {exc}") from exc

        if response.status_code != 200:
            raise ClientStatusError(
                f"Status query failed (HTTP {response.status_code}): {self._detail(response)}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ClientStatusError(f"Status response was not JSON: {response.text!r}") from exc
        if not isinstance(payload, dict):
            raise ClientStatusError(f"Unexpected status payload: {payload!r}")
        return payload

    def poll_task_result(
        self,
        task_id: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Poll until the task settles and return its transcript."""

        for attempt in range(1, self._policy.max_attempts + 1):
            delay = self._policy.delay_before(attempt)
            if delay > 0:
                self._sleep(delay)

            try:
                task = self.check_task_status(task_id)
            except ClientStatusError as exc:
                logger.warning("Polling task %s failed on attempt %s: %s", task_id, attempt, exc)
                continue

            if on_progress is not None:
                on_progress({"status": task.get("status"), "attempts": attempt})

            status = task.get("status")
            if status == TaskStatus.COMPLETED.value:
                return task.get("result") or ""
            if status == TaskStatus.FAILED.value:
                raise RecognitionFailedError(task.get("result") or "Recognition failed")
            if status == TaskStatus.TIMEOUT.value:
                raise RecognitionTimeoutError(task.get("result") or "Server polling timed out")

        raise ClientPollingTimeoutError(
            f"Gave up on task {task_id} after {self._policy.max_attempts} polls"
        )

    def transcribe(
        self,
        source: AudioSource,
        *,
        filename: str = "recording.m4a",
        content_type: str = "audio/mp4",
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Upload and wait for the transcript in one call."""

        task_id = self.upload_audio(source, filename=filename, content_type=content_type)
        return self.poll_task_result(task_id, on_progress=on_progress)

    def translate(self, text: str, target_lang: str = "yue", source_lang: str = "zh") -> str:
        response = self._session.post(
            self._url("/api/translate"),
            json={"text": text, "sourceLang": source_lang, "targetLang": target_lang},
            timeout=self._timeout,
        )
        if response.status_code != 200:
            raise RecognitionClientError(f"Translation failed: {self._detail(response)}")
        return response.json()["translatedText"]

    def text_to_speech(self, text: str, voice_type: int = 0) -> bytes:
        response = self._session.post(
            self._url("/api/text-to-speech"),
            json={"text": text, "voiceType": voice_type},
            timeout=self._timeout,
        )
        if response.status_code != 200:
            raise RecognitionClientError(f"Text-to-speech failed: {self._detail(response)}")
        return response.content


__all__ = [
    "ClientPollingTimeoutError",
    "ClientStatusError",
    "ClientUploadError",
    "DEFAULT_CLIENT_POLICY",
    "RecognitionClient",
    "RecognitionClientError",
    "RecognitionFailedError",
    "RecognitionTimeoutError",
]
