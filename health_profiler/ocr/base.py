from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class OCRError(RuntimeError):
    def __init__(self, code: str, message: str, provider_name: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name


@dataclass(frozen=True)
class OCRResult:
    text: str
    # Engine-reported recognition quality in [0, 1].
    confidence: float


class OCRProvider(ABC):
    @abstractmethod
    def recognize(self, image_bytes: bytes, timeout_sec: int = 60) -> OCRResult: ...

    @abstractmethod
    def name(self) -> str: ...
