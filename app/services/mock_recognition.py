"""Credential-free recognition backend for local development."""

from __future__ import annotations

import asyncio
import itertools
import random
from typing import Sequence

from app.tasks import BackendQueryResult, BackendStatus, RecognitionBackend

MOCK_TRANSCRIPTS: tuple[str, ...] = (
    "这是一条识别的文字",
    "你好，这是音频转文字的测试",
    "微信小程序很有意思",
    "语音识别功能正在运行中",
    "成功转换了你的语音",
)


def pick_mock_transcript(rng: random.Random | None = None) -> tuple[str, float]:
    """Return a canned transcript and a confidence between 0.6 and 1.0."""

    chooser = rng or random
    return chooser.choice(MOCK_TRANSCRIPTS), chooser.random() * 0.4 + 0.6


class MockRecognitionBackend(RecognitionBackend):
    """Report ``in_progress`` for a few queries, then succeed with canned text."""

    def __init__(
        self,
        pending_queries: int = 1,
        transcripts: Sequence[str] = MOCK_TRANSCRIPTS,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._pending_queries = pending_queries
        self._transcripts = tuple(transcripts)
        self._rng = rng or random.Random()
        self._ids = itertools.count(1)
        self._queries: dict[str, int] = {}
        self._results: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def create(self, audio: bytes) -> str:
        async with self._lock:
            external_id = str(next(self._ids))
            self._queries[external_id] = 0
            self._results[external_id] = self._rng.choice(self._transcripts)
        return external_id

    async def query(self, external_id: str) -> BackendQueryResult:
        async with self._lock:
            if external_id not in self._queries:
                return BackendQueryResult(
                    status=BackendStatus.FAILURE,
                    detail=f"Unknown task {external_id}",
                )
            self._queries[external_id] += 1
            seen = self._queries[external_id]

        if seen <= self._pending_queries:
            return BackendQueryResult(status=BackendStatus.IN_PROGRESS)
        return BackendQueryResult(
            status=BackendStatus.SUCCESS,
            transcript=self._results[external_id],
        )


__all__ = ["MOCK_TRANSCRIPTS", "MockRecognitionBackend", "pick_mock_transcript"]
