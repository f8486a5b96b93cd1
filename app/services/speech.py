"""Text-to-speech backed by Amazon Polly."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

FEMALE_VOICE = 0
MALE_VOICE = 1


@dataclass(frozen=True)
class SpeechResult:
    """Synthesised audio bytes and the voice that produced them."""

    audio_bytes: bytes
    media_type: str
    voice_id: str


class SpeechSynthesisError(RuntimeError):
    """Raised when Polly fails to synthesise speech."""


class SpeechConfigurationError(SpeechSynthesisError):
    """Raised when Polly credentials are missing."""


class SpeechSynthesisService:
    """Convert text to MP3 with one of two configured voices."""

    def __init__(
        self,
        client: Any,
        *,
        female_voice_id: str,
        male_voice_id: str,
        engine: str = "neural",
    ) -> None:
        self._client = client
        self._voices = {FEMALE_VOICE: female_voice_id, MALE_VOICE: male_voice_id}
        self._engine = engine

    def voice_for(self, voice_type: int) -> str:
        try:
            return self._voices[voice_type]
        except KeyError:
            raise ValueError("voice_type must be 0 (female) or 1 (male)") from None

    async def synthesize(self, text: str, voice_type: int = FEMALE_VOICE) -> SpeechResult:
        voice_id = self.voice_for(voice_type)
        try:
            result = await run_in_threadpool(
                self._client.synthesize_speech,
                Text=text,
                VoiceId=voice_id,
                OutputFormat="mp3",
                Engine=self._engine,
            )
        except NoCredentialsError as exc:
            raise SpeechConfigurationError("AWS credentials are not configured for Polly") from exc
        except (BotoCoreError, ClientError) as exc:  # pragma: no cover - network call
            raise SpeechSynthesisError(str(exc)) from exc

        audio_stream = result.get("AudioStream")
        if audio_stream is None:
            raise SpeechSynthesisError("Polly returned no audio stream")
        audio_bytes = audio_stream.read()

        logger.info("Synthesised %s characters with voice %s", len(text), voice_id)
        return SpeechResult(audio_bytes=audio_bytes, media_type="audio/mpeg", voice_id=voice_id)


__all__ = [
    "FEMALE_VOICE",
    "MALE_VOICE",
    "SpeechConfigurationError",
    "SpeechResult",
    "SpeechSynthesisError",
    "SpeechSynthesisService",
]
