from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _project_root() -> Path:
    # health_profiler/internal_core/config.py -> health_profiler -> repo
    return Path(__file__).resolve().parents[2]


def _resolve_existing_path_or_empty(candidates: list[Path]) -> str:
    for candidate in candidates:
        try:
            resolved = candidate.expanduser().resolve()
        except Exception:
            continue
        if resolved.exists():
            return str(resolved)
    return ""


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int, *, min_value: Optional[int] = None) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if min_value is not None and parsed < min_value:
        return default
    return parsed


def _getenv_float(name: str, default: float, *, min_value: Optional[float] = None) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if min_value is not None and parsed < min_value:
        return default
    return parsed


def _getenv_choice(name: str, default: str, allowed: set[str]) -> str:
    value = os.getenv(name, "").strip().lower()
    if value in allowed:
        return value
    return default


@dataclass(frozen=True)
class ProfilerConfig:
    HRP_LOG_LEVEL: str
    HRP_LOG_FILE: str
    HRP_OCR_PROVIDER: str
    HRP_TESSERACT_BIN: str
    HRP_TESSERACT_LANG: str
    HRP_OCR_TIMEOUT_SEC: int
    HRP_MAX_UPLOAD_BYTES: int
    HRP_RECOMMENDATION_BACKEND: str
    GEMINI_API_KEY: str
    HRP_GEMINI_MODEL: str
    HRP_LLAMA_CPP_MODEL: str
    HRP_LLAMA_CPP_CHAT_FORMAT: str
    HRP_LLAMA_CPP_N_CTX: int
    HRP_AI_MAX_TOKENS: int
    HRP_AI_TEMPERATURE: float
    HRP_AI_TIMEOUT_SEC: float

    @property
    def gemini_enabled(self) -> bool:
        return bool(self.GEMINI_API_KEY.strip())

    def log_file_path(self, repo_root: Path) -> Optional[Path]:
        if not self.HRP_LOG_FILE:
            return None
        return (repo_root / self.HRP_LOG_FILE).resolve()


def load_config() -> ProfilerConfig:
    project_root = _project_root()

    default_llama_cpp_model = _resolve_existing_path_or_empty(
        [
            project_root / "models" / "recommendations.gguf",
            project_root.parent / "models" / "recommendations.gguf",
        ]
    )

    return ProfilerConfig(
        HRP_LOG_LEVEL=_getenv_str("HRP_LOG_LEVEL", "INFO"),
        HRP_LOG_FILE=_getenv_str("HRP_LOG_FILE", ""),
        HRP_OCR_PROVIDER=_getenv_choice("HRP_OCR_PROVIDER", "tesseract", {"tesseract", "mock"}),
        HRP_TESSERACT_BIN=_getenv_str("HRP_TESSERACT_BIN", "tesseract"),
        HRP_TESSERACT_LANG=_getenv_str("HRP_TESSERACT_LANG", "eng"),
        HRP_OCR_TIMEOUT_SEC=_getenv_int("HRP_OCR_TIMEOUT_SEC", 60, min_value=1),
        HRP_MAX_UPLOAD_BYTES=_getenv_int("HRP_MAX_UPLOAD_BYTES", 10 * 1024 * 1024, min_value=1),
        HRP_RECOMMENDATION_BACKEND=_getenv_choice(
            "HRP_RECOMMENDATION_BACKEND",
            "gemini",
            {"gemini", "llama_cpp", "static"},
        ),
        GEMINI_API_KEY=_getenv_str("GEMINI_API_KEY", ""),
        HRP_GEMINI_MODEL=_getenv_str("HRP_GEMINI_MODEL", "gemini-2.5-flash-lite"),
        HRP_LLAMA_CPP_MODEL=_getenv_str("HRP_LLAMA_CPP_MODEL", default_llama_cpp_model),
        HRP_LLAMA_CPP_CHAT_FORMAT=_getenv_str("HRP_LLAMA_CPP_CHAT_FORMAT", "gemma"),
        HRP_LLAMA_CPP_N_CTX=_getenv_int("HRP_LLAMA_CPP_N_CTX", 1024, min_value=256),
        HRP_AI_MAX_TOKENS=_getenv_int("HRP_AI_MAX_TOKENS", 256, min_value=16),
        HRP_AI_TEMPERATURE=_getenv_float("HRP_AI_TEMPERATURE", 0.2, min_value=0.0),
        HRP_AI_TIMEOUT_SEC=_getenv_float("HRP_AI_TIMEOUT_SEC", 10.0, min_value=0.1),
    )
