"""Request ingestion helpers for recognition uploads."""

from __future__ import annotations

import mimetypes

from fastapi import UploadFile

from app.tasks import AudioTooLargeError

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Mini-program recorders upload AAC/M4A files the stdlib table does not know.
for _extension, _mime in ((".m4a", "audio/mp4"), (".aac", "audio/aac")):
    mimetypes.add_type(_mime, _extension)


def resolve_content_type(audio_file: UploadFile) -> str:
    """Use the part header, else guess from the filename, else octet-stream."""

    content_type = audio_file.content_type
    if not content_type and audio_file.filename:
        guessed_type, _ = mimetypes.guess_type(audio_file.filename)
        content_type = guessed_type

    return content_type or DEFAULT_CONTENT_TYPE


async def read_audio_bytes(audio_file: UploadFile, max_bytes: int) -> bytes:
    """Load the upload into memory, refusing to read past ``max_bytes``."""

    try:
        audio_bytes = await audio_file.read(max_bytes + 1)
    finally:
        await audio_file.close()

    if len(audio_bytes) > max_bytes:
        size = audio_file.size if audio_file.size is not None else len(audio_bytes)
        raise AudioTooLargeError(size, max_bytes)
    return audio_bytes


__all__ = ["DEFAULT_CONTENT_TYPE", "read_audio_bytes", "resolve_content_type"]
