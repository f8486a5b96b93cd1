"""Text-to-speech controller backed by Amazon Polly."""

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

from app.controllers.dependencies import SpeechDep
from app.services.speech import SpeechConfigurationError, SpeechSynthesisError
from app.views import TextToSpeechRequest

router = APIRouter(prefix="/api", tags=["tts"])

logger = logging.getLogger(__name__)


@router.post("/text-to-speech", response_class=Response)
async def text_to_speech(request: TextToSpeechRequest, speech: SpeechDep) -> Response:
    """Convert text to speech and return MP3 bytes."""

    try:
        result = await speech.synthesize(request.text, request.voice_type)
    except SpeechConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server configuration error: {exc}",
        ) from exc
    except SpeechSynthesisError as exc:
        logger.error("Speech synthesis failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc

    return Response(
        content=result.audio_bytes,
        media_type=result.media_type,
        headers={"Cache-Control": "max-age=3600"},
    )
