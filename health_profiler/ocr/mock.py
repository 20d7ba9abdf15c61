from __future__ import annotations

from .base import OCRProvider, OCRResult


class MockOCRProvider(OCRProvider):
    def __init__(self, text: str = "", confidence: float = 0.9) -> None:
        self._text = text
        self._confidence = float(confidence)
        self.calls = 0

    def recognize(self, image_bytes: bytes, timeout_sec: int = 60) -> OCRResult:
        self.calls += 1
        return OCRResult(text=self._text, confidence=self._confidence)

    def name(self) -> str:
        return "mock"
