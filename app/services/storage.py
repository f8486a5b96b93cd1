"""S3 storage helpers for recognition audio and transcript documents."""

from __future__ import annotations

import json
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool


class StorageError(RuntimeError):
    """Raised when S3 asset persistence or retrieval fails."""


class S3AudioStorage:
    """Put normalized recordings where the recognizer can read them."""

    def __init__(self, client: Any, bucket: str, *, prefix: str = "recognition") -> None:
        self._client = client
        self._bucket = bucket
        self._prefix = prefix.strip("/")

    @property
    def bucket(self) -> str:
        return self._bucket

    def object_key(self, name: str, extension: str) -> str:
        return f"{self._prefix}/{name}.{extension.lstrip('.')}"

    def media_uri(self, key: str) -> str:
        return f"s3://{self._bucket}/{key}"

    async def upload_audio(
        self,
        name: str,
        audio_bytes: bytes,
        *,
        content_type: str = "audio/wav",
        extension: str = "wav",
    ) -> str:
        """Upload audio under the recognition prefix and return its object key."""

        if not audio_bytes:
            raise StorageError("Audio payload for upload was empty.")

        object_key = self.object_key(name, extension)
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=object_key,
                Body=audio_bytes,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload recognition audio: {exc}") from exc

        return object_key

    async def read_json(self, key: str) -> dict[str, Any]:
        """Fetch and decode a JSON document stored in the bucket."""

        def _read() -> bytes:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()

        try:
            raw = await run_in_threadpool(_read)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to read s3://{self._bucket}/{key}: {exc}") from exc

        try:
            return json.loads(raw)
        except ValueError as exc:
            raise StorageError(f"Object {key} is not valid JSON") from exc


__all__ = ["S3AudioStorage", "StorageError"]
