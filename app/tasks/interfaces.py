from abc import ABC, abstractmethod
from typing import Optional

from app.tasks.models import BackendQueryResult


class AudioNormalizer(ABC):
    """Converts uploaded audio into canonical 16 kHz mono PCM"""

    @abstractmethod
    async def normalize(self, audio: bytes, source_format: Optional[str] = None) -> bytes:
        ...


class RecognitionBackend(ABC):
    """Asynchronous speech recognition service contract"""

    @abstractmethod
    async def create(self, audio: bytes) -> str:
        ...

    @abstractmethod
    async def query(self, external_id: str) -> BackendQueryResult:
        ...
