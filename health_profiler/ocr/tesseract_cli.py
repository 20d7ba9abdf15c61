from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Tuple

from .base import OCRError, OCRProvider, OCRResult

_WORD_LEVEL = "5"


def resolve_tesseract_bin(bin_path: str) -> str:
    if not bin_path:
        return ""
    if Path(bin_path).exists():
        return bin_path
    return shutil.which(bin_path) or ""


def tesseract_available(bin_path: str) -> Tuple[bool, str]:
    if not bin_path:
        return False, "missing HRP_TESSERACT_BIN"
    if not resolve_tesseract_bin(bin_path):
        return False, f"tesseract not found: {bin_path}"
    return True, ""


def parse_tesseract_tsv(tsv: str) -> OCRResult:
    """Join word rows into lines and average their confidences (0-100 -> 0-1)."""
    lines: dict[tuple[str, str, str, str], list[str]] = {}
    confidences: list[float] = []

    rows = (tsv or "").splitlines()
    for row in rows[1:]:
        cols = row.split("\t")
        if len(cols) < 12 or cols[0] != _WORD_LEVEL:
            continue
        word = cols[11].strip()
        if not word:
            continue
        try:
            conf = float(cols[10])
        except ValueError:
            continue
        if conf < 0:
            continue
        lines.setdefault((cols[1], cols[2], cols[3], cols[4]), []).append(word)
        confidences.append(conf)

    text = "\n".join(" ".join(words) for words in lines.values())
    mean_conf = (sum(confidences) / len(confidences) / 100.0) if confidences else 0.0
    return OCRResult(text=text, confidence=max(0.0, min(1.0, mean_conf)))


class TesseractCliProvider(OCRProvider):
    def __init__(self, bin_path: str = "tesseract", language: str = "eng"):
        self._bin_path = bin_path
        self._language = language or "eng"

    def name(self) -> str:
        return "tesseract"

    def recognize(self, image_bytes: bytes, timeout_sec: int = 60) -> OCRResult:
        available, reason = tesseract_available(self._bin_path)
        if not available:
            raise OCRError("TESSERACT_BIN_MISSING", f"{reason} (set HRP_TESSERACT_BIN)", self.name())
        resolved = resolve_tesseract_bin(self._bin_path)
        if not image_bytes:
            raise OCRError("OCR_EMPTY_INPUT", "image payload is empty", self.name())

        cmd = [resolved, "stdin", "stdout", "-l", self._language, "--psm", "6", "tsv"]
        try:
            res = subprocess.run(
                cmd,
                input=image_bytes,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=timeout_sec,
            )
        except subprocess.TimeoutExpired as exc:
            raise OCRError("TESSERACT_TIMEOUT", f"tesseract timed out after {timeout_sec}s", self.name()) from exc
        except OSError as exc:
            raise OCRError("TESSERACT_EXEC_FAILED", str(exc), self.name()) from exc

        if res.returncode != 0:
            msg = (res.stderr or b"").decode("utf-8", errors="replace").strip() or f"exit_code={res.returncode}"
            if len(msg) > 200:
                msg = msg[:200] + "..."
            raise OCRError("TESSERACT_EXIT_NONZERO", msg, self.name())

        result = parse_tesseract_tsv((res.stdout or b"").decode("utf-8", errors="replace"))
        if not result.text.strip():
            raise OCRError("TESSERACT_EMPTY_OUTPUT", "tesseract recognised no text", self.name())
        return result
