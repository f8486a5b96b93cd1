"""FastAPI routers acting as controllers in the MVC architecture."""

from . import audio, translation, tts

__all__ = ["audio", "translation", "tts"]
