from __future__ import annotations

"""
Estimate how much the extracted answer set can be trusted.

Extraction confidence measures completeness and input reliability. The OCR
engine's own recognition confidence is a different quantity and is carried
next to it, never folded into it.
"""

from dataclasses import dataclass
from typing import Any, Sequence

from health_profiler.intake.fields import InputKind

BASE_CONFIDENCE = 0.5
FIELD_BONUS = 0.05
MISSING_FIELD_PENALTY = 0.1
TEXT_INPUT_BONUS = 0.15


@dataclass(frozen=True)
class ConfidenceReport:
    extraction: float
    ocr: float | None = None


def estimate_confidence(
    answers: dict[str, Any],
    missing_fields: Sequence[str],
    input_kind: InputKind,
) -> float:
    extracted = sum(1 for value in answers.values() if value is not None and value != "")
    score = BASE_CONFIDENCE
    score += FIELD_BONUS * extracted
    score -= MISSING_FIELD_PENALTY * len(missing_fields)
    if input_kind == "text":
        score += TEXT_INPUT_BONUS
    return _clamp_unit(score)


def build_confidence_report(
    answers: dict[str, Any],
    missing_fields: Sequence[str],
    input_kind: InputKind,
    *,
    ocr_confidence: float | None = None,
) -> ConfidenceReport:
    extraction = estimate_confidence(answers, missing_fields, input_kind)
    if input_kind != "image" or ocr_confidence is None:
        return ConfidenceReport(extraction=extraction, ocr=None)
    return ConfidenceReport(extraction=extraction, ocr=_clamp_unit(float(ocr_confidence)))


def _clamp_unit(value: float) -> float:
    return round(max(0.0, min(1.0, value)), 2)
