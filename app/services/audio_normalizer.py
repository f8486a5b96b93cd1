"""ffmpeg-backed conversion of uploads to 16 kHz mono PCM WAV."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from app.tasks import AudioNormalizationError, AudioNormalizer

logger = logging.getLogger(__name__)


class FfmpegAudioNormalizer(AudioNormalizer):
    """Transcode any container ffmpeg understands into ``pcm_s16le`` WAV."""

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        sample_rate: int = 16000,
        channels: int = 1,
    ) -> None:
        self._ffmpeg_binary = ffmpeg_binary
        self._sample_rate = sample_rate
        self._channels = channels

    async def normalize(self, audio: bytes, source_format: str | None = None) -> bytes:
        if not audio:
            raise AudioNormalizationError("The uploaded audio file is empty.")
        return await run_in_threadpool(self._convert_sync, audio, source_format)

    def build_command(self, input_path: str, output_path: str) -> list[str]:
        return [
            self._ffmpeg_binary,
            "-y",
            "-hide_banner",
            "-loglevel", "error",
            "-i", input_path,
            "-acodec", "pcm_s16le",
            "-ac", str(self._channels),
            "-ar", str(self._sample_rate),
            "-f", "wav",
            output_path,
        ]

    def _convert_sync(self, audio: bytes, source_format: str | None) -> bytes:
        """Run ffmpeg between temporary files so both sides can seek."""

        suffix = f".{source_format}" if source_format else ".tmp"
        with tempfile.TemporaryDirectory(prefix="normalize-") as workdir:
            input_path = Path(workdir) / f"input{suffix}"
            output_path = Path(workdir) / "output.wav"
            input_path.write_bytes(audio)

            try:
                subprocess.run(
                    self.build_command(os.fspath(input_path), os.fspath(output_path)),
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    check=True,
                )
            except FileNotFoundError as exc:
                logger.error("ffmpeg binary %r not found", self._ffmpeg_binary)
                raise AudioNormalizationError(
                    f"ffmpeg binary '{self._ffmpeg_binary}' is not available"
                ) from exc
            except subprocess.CalledProcessError as exc:
                error_msg = exc.stderr.decode("utf-8", errors="replace") if exc.stderr else "No stderr"
                logger.error("ffmpeg failed. stderr: %s", error_msg)
                raise AudioNormalizationError(
                    f"Audio conversion failed: {error_msg.strip()}"
                ) from exc

            wav_bytes = output_path.read_bytes() if output_path.exists() else b""

        if not wav_bytes:
            raise AudioNormalizationError("Audio conversion produced no output")

        logger.info("Audio converted to WAV, %s bytes", len(wav_bytes))
        return wav_bytes


__all__ = ["FfmpegAudioNormalizer"]
