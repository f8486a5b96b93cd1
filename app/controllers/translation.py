"""Translation controller backed by Amazon Bedrock."""

import logging

from fastapi import APIRouter, HTTPException, status

from app.controllers.dependencies import TranslationDep
from app.services.translation import TranslationConfigurationError, TranslationError
from app.views import TranslateRequest, TranslateResponse

router = APIRouter(prefix="/api", tags=["translation"])

logger = logging.getLogger(__name__)


@router.post("/translate", response_model=TranslateResponse)
async def translate(request: TranslateRequest, translator: TranslationDep) -> TranslateResponse:
    logger.info(
        "Translation request: %s chars, %s -> %s",
        len(request.text),
        request.source_lang,
        request.target_lang,
    )
    try:
        translated = await translator.translate(
            request.text,
            source_lang=request.source_lang,
            target_lang=request.target_lang,
        )
    except TranslationConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server configuration error: {exc}",
        ) from exc
    except TranslationError as exc:
        logger.error("Translation failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc

    return TranslateResponse(
        translated_text=translated,
        source_lang=request.source_lang,
        target_lang=request.target_lang,
    )
