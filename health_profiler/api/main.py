from __future__ import annotations

"""
HTTP surface for the health risk profiler.

Design intent:
- Keep API orchestration thin; domain logic lives in intake/guardrails/risk/recommendations.
- Reject malformed input shapes before the pipeline is entered.
- Forward guardrail rejections verbatim as their machine-readable payloads.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from health_profiler.internal_core.config import ProfilerConfig, load_config
from health_profiler.internal_core.contracts import (
    AnalyzeRequest,
    GuardrailRejectionResponse,
    ProfileAnalysisResponse,
    ProfileIntakeResponse,
)
from health_profiler.ocr import MockOCRProvider, OCRError, OCRProvider, OCRResult, TesseractCliProvider
from health_profiler.pipeline import ProfileIntake, analyze_intake, build_intake
from health_profiler.recommendations import RecommendationStrategy, select_recommendation_strategy
from health_profiler.utils.logging import setup_logging

_CONFIG = load_config()
setup_logging(_CONFIG.HRP_LOG_LEVEL, _CONFIG.log_file_path(Path.cwd()))

app = FastAPI(title="health risk profiler service")
logger = logging.getLogger(__name__)

_ALLOWED_IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp", ".gif"}

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


def _get_config() -> ProfilerConfig:
    existing = getattr(app.state, "config", None)
    if isinstance(existing, ProfilerConfig):
        return existing
    return _CONFIG


def _get_ocr_provider() -> OCRProvider:
    injected = getattr(app.state, "ocr_provider", None)
    if isinstance(injected, OCRProvider):
        return injected
    config = _get_config()
    if config.HRP_OCR_PROVIDER == "mock":
        return MockOCRProvider()
    return TesseractCliProvider(config.HRP_TESSERACT_BIN, config.HRP_TESSERACT_LANG)


def _get_recommendation_strategy() -> RecommendationStrategy:
    injected = getattr(app.state, "recommendation_strategy", None)
    if injected is not None:
        return injected
    return select_recommendation_strategy(_get_config())


def _validate_image_filename(filename: str) -> str:
    name = Path(str(filename or "")).name
    if not name:
        raise HTTPException(status_code=400, detail="Missing filename.")
    suffix = Path(name).suffix.lower()
    if suffix not in _ALLOWED_IMAGE_SUFFIXES:
        raise HTTPException(status_code=400, detail="Only image files are accepted.")
    return name


async def _read_image_payload(request: Request, filename: str) -> bytes:
    _validate_image_filename(filename)
    payload = await request.body()
    if not payload:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    max_bytes = _get_config().HRP_MAX_UPLOAD_BYTES
    if len(payload) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Uploaded file exceeds {max_bytes} byte limit.",
        )
    return payload


async def _run_ocr(payload: bytes) -> OCRResult:
    provider = _get_ocr_provider()
    timeout_sec = _get_config().HRP_OCR_TIMEOUT_SEC
    try:
        result = await asyncio.to_thread(provider.recognize, payload, timeout_sec)
    except OCRError as exc:
        logger.error("ocr failed provider=%s code=%s: %s", exc.provider_name, exc.code, exc.message)
        raise HTTPException(status_code=500, detail=f"OCR failed: {exc.message}") from exc
    logger.info(
        "ocr done provider=%s chars=%s confidence=%.2f",
        provider.name(),
        len(result.text),
        result.confidence,
    )
    return result


async def _analyze(intake: ProfileIntake) -> Any:
    outcome = await analyze_intake(
        intake,
        strategy=_get_recommendation_strategy(),
        timeout_sec=_get_config().HRP_AI_TIMEOUT_SEC,
    )
    logger.info("analysis outcome ok=%s debug=%s", outcome.ok, outcome.debug)
    if not outcome.ok:
        return JSONResponse(status_code=400, content=outcome.payload)
    return ProfileAnalysisResponse(**outcome.payload)


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/api/analyze",
    response_model=ProfileAnalysisResponse,
    response_model_exclude_none=True,
    responses={400: {"model": GuardrailRejectionResponse}},
)
async def analyze(payload: AnalyzeRequest) -> Any:
    if payload.text is not None and payload.data is not None:
        raise HTTPException(status_code=400, detail="Provide only one of: text or data.")
    if payload.text is not None:
        text_input = payload.text
    elif payload.data is not None:
        text_input = json.dumps(payload.data)
    else:
        raise HTTPException(status_code=400, detail="Provide one of: text, data, or an image upload.")

    intake = build_intake(text_input, input_kind="text")
    return await _analyze(intake)


@app.post(
    "/api/analyze/image",
    response_model=ProfileAnalysisResponse,
    response_model_exclude_none=True,
    responses={400: {"model": GuardrailRejectionResponse}},
)
async def analyze_image(
    request: Request,
    filename: str = Query(min_length=1, max_length=255),
) -> Any:
    image = await _read_image_payload(request, filename)
    ocr = await _run_ocr(image)
    intake = build_intake(ocr.text, input_kind="image", ocr_confidence=ocr.confidence)
    return await _analyze(intake)


@app.post("/api/ocr", response_model=ProfileIntakeResponse, response_model_exclude_none=True)
async def ocr_only(
    request: Request,
    filename: str = Query(min_length=1, max_length=255),
) -> ProfileIntakeResponse:
    image = await _read_image_payload(request, filename)
    ocr = await _run_ocr(image)
    intake = build_intake(ocr.text, input_kind="image", ocr_confidence=ocr.confidence)
    return ProfileIntakeResponse(text=ocr.text, **intake.to_payload())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "health_profiler.api.main:app",
        host="0.0.0.0",
        port=8000,
        log_config=None,
    )
