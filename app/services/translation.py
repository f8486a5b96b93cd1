"""Thin Bedrock client wrapper for text translation."""

from __future__ import annotations

import logging
from typing import Any

from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

_LANGUAGE_NAMES = {
    "zh": "普通话",
    "yue": "粤语",
    "zh-HK": "香港繁体中文",
    "zh-TW": "繁体中文",
    "en": "英语",
}

SYSTEM_PROMPT = "你是一位资深翻译专家。只返回翻译结果，不要包含任何解释。"


class TranslationError(RuntimeError):
    """Raised when the Bedrock invocation fails."""


class TranslationConfigurationError(TranslationError):
    """Raised when no Bedrock client could be created."""


def build_translation_prompt(text: str, source_lang: str, target_lang: str) -> str:
    source_name = _LANGUAGE_NAMES.get(source_lang, "文本")
    target_name = _LANGUAGE_NAMES.get(target_lang, target_lang)
    return (
        f"请将以下{source_name}翻译成{target_name}，使用香港地区的日常用语和表达习惯。"
        "翻译时保持原意，不要添加其他内容。\n\n"
        f"原文：{text}\n\n翻译结果："
    )


class TranslationService:
    """Invoke an Amazon Bedrock model to translate short texts."""

    def __init__(
        self,
        client: Any | None,
        *,
        model_id: str,
        max_tokens: int = 2000,
        temperature: float = 0.3,
    ) -> None:
        self._client = client
        self._model_id = model_id
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def translate(
        self,
        text: str,
        source_lang: str = "zh",
        target_lang: str = "yue",
    ) -> str:
        if self._client is None or not self._model_id:
            raise TranslationConfigurationError("Bedrock client is not configured")

        user_prompt = build_translation_prompt(text, source_lang, target_lang)

        def _call() -> str:
            response = self._client.converse(
                modelId=self._model_id,
                system=[{"text": SYSTEM_PROMPT}],
                messages=[{"role": "user", "content": [{"text": user_prompt}]}],
                inferenceConfig={
                    "maxTokens": self._max_tokens,
                    "temperature": self._temperature,
                },
            )
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        try:
            result = await run_in_threadpool(_call)
        except Exception as exc:  # pragma: no cover - external dependency
            raise TranslationError(str(exc)) from exc

        if not result:
            raise TranslationError("Bedrock returned an empty translation")

        logger.info("Translated %s characters %s -> %s", len(text), source_lang, target_lang)
        return result


__all__ = [
    "TranslationConfigurationError",
    "TranslationError",
    "TranslationService",
    "build_translation_prompt",
]
