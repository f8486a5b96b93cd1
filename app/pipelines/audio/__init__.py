"""Audio upload pipeline helpers.

The recognition controller reads uploads through ``ingestion`` before
handing the bytes to ``app.tasks.SubmissionHandler``, which normalizes the
audio and creates the external recognition task.
"""

from .ingestion import DEFAULT_CONTENT_TYPE, read_audio_bytes, resolve_content_type

__all__ = ["DEFAULT_CONTENT_TYPE", "read_audio_bytes", "resolve_content_type"]
