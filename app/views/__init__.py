"""Pydantic schemas used as views in the MVC architecture."""

from .audio import (
    MockRecognitionResponse,
    TaskCreatedResponse,
    TaskOverviewResponse,
    TaskStatusResponse,
)
from .common import ErrorResponse, HealthResponse
from .translation import TextToSpeechRequest, TranslateRequest, TranslateResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "MockRecognitionResponse",
    "TaskCreatedResponse",
    "TaskOverviewResponse",
    "TaskStatusResponse",
    "TextToSpeechRequest",
    "TranslateRequest",
    "TranslateResponse",
]
