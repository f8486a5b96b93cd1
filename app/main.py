"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.dependencies import (
    build_normalizer,
    build_recognition_backend,
    build_recognition_components,
    build_speech_service,
    build_translation_service,
)
from .config.settings import Settings, settings as default_settings
from .controllers import audio, translation, tts
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .services.speech import SpeechSynthesisService
from .services.translation import TranslationService
from .tasks import AudioNormalizer, RecognitionBackend, RecognitionTaskError
from .views import ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    """Ensure structured middleware logs stream to stdout and file."""

    logging.getLogger().handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    log_path = Path(settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    middleware_logger = logging.getLogger("app.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    task_log_path = Path(settings.task_log_file)
    task_log_path.parent.mkdir(parents=True, exist_ok=True)
    task_handler = RotatingFileHandler(
        task_log_path,
        maxBytes=500_000,
        backupCount=5,
        encoding="utf-8",
    )
    task_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    task_logger = logging.getLogger("app.tasks")
    task_logger.handlers.clear()
    task_logger.addHandler(task_handler)
    task_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    noisy_loggers = [
        "botocore",
        "boto3",
        "urllib3",
        "s3transfer",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app(
    settings: Settings | None = None,
    *,
    normalizer: AudioNormalizer | None = None,
    backend: RecognitionBackend | None = None,
    speech: SpeechSynthesisService | None = None,
    translator: TranslationService | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators default to the ones described by ``settings``; tests pass
    fakes instead.
    """

    settings = settings or default_settings
    if configure_logging:
        _configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Audio-to-text backend with asynchronous recognition tasks",
    )

    app.state.settings = settings
    app.state.recognition = build_recognition_components(
        settings,
        normalizer or build_normalizer(settings),
        backend or build_recognition_backend(settings),
    )
    app.state.speech = speech or build_speech_service(settings)
    app.state.translation = translator or build_translation_service(settings)

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(audio.router)
    app.include_router(translation.router)
    app.include_router(tts.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "status": "operational",
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""

        return HealthResponse(
            status="healthy",
            service=settings.app_name,
            version=settings.app_version,
        )

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(RecognitionTaskError)
    async def recognition_exception_handler(request: Request, exc: RecognitionTaskError):
        payload = ErrorResponse(detail=exc.message, code=exc.code)
        if exc.status_code >= 500:
            logger.error("Recognition request failed: %s", exc, exc_info=exc)
        else:
            logger.info("Rejected recognition request: %s", exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=payload.model_dump(),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        logger.exception("Unhandled error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await app.state.recognition.supervisor.shutdown()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
