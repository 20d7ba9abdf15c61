from __future__ import annotations

from .base import OCRError, OCRProvider, OCRResult
from .mock import MockOCRProvider
from .tesseract_cli import TesseractCliProvider, parse_tesseract_tsv, tesseract_available

__all__ = [
    "OCRError",
    "OCRProvider",
    "OCRResult",
    "MockOCRProvider",
    "TesseractCliProvider",
    "parse_tesseract_tsv",
    "tesseract_available",
]
