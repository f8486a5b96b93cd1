"""Schemas for translation and text-to-speech requests."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_TEXT_LENGTH = 2000


class TranslateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    source_lang: str = "zh"
    target_lang: str = "yue"


class TranslateResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    translated_text: str
    source_lang: str
    target_lang: str


class TextToSpeechRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    voice_type: Literal[0, 1] = 0
