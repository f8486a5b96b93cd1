"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.config.settings import Settings
from app.services.speech import SpeechSynthesisService
from app.services.translation import TranslationService
from app.tasks import StatusHandler, SubmissionHandler, TaskStore, TaskSupervisor


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_submission_handler(request: Request) -> SubmissionHandler:
    return request.app.state.recognition.submission


def get_status_handler(request: Request) -> StatusHandler:
    return request.app.state.recognition.status


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.recognition.store


def get_task_supervisor(request: Request) -> TaskSupervisor:
    return request.app.state.recognition.supervisor


def get_speech_service(request: Request) -> SpeechSynthesisService:
    return request.app.state.speech


def get_translation_service(request: Request) -> TranslationService:
    return request.app.state.translation


SettingsDep = Annotated[Settings, Depends(get_settings)]
SubmissionDep = Annotated[SubmissionHandler, Depends(get_submission_handler)]
StatusDep = Annotated[StatusHandler, Depends(get_status_handler)]
TaskStoreDep = Annotated[TaskStore, Depends(get_task_store)]
SupervisorDep = Annotated[TaskSupervisor, Depends(get_task_supervisor)]
SpeechDep = Annotated[SpeechSynthesisService, Depends(get_speech_service)]
TranslationDep = Annotated[TranslationService, Depends(get_translation_service)]


__all__ = [
    "get_settings",
    "get_speech_service",
    "get_status_handler",
    "get_submission_handler",
    "get_task_store",
    "get_task_supervisor",
    "get_translation_service",
    "SettingsDep",
    "SpeechDep",
    "StatusDep",
    "SubmissionDep",
    "SupervisorDep",
    "TaskStoreDep",
    "TranslationDep",
]
