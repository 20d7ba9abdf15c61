from __future__ import annotations

"""
Hard accept/reject gates applied before any scoring.

Design intent:
- Three ordered gates: completeness, confidence, field schema.
- Rejections are typed values with a machine-readable status, not exceptions.
- Schema checking is fail-fast: only the first violation is reported.
"""

import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Sequence, Union, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
)

from health_profiler.intake.confidence import ConfidenceReport
from health_profiler.intake.fields import REQUIRED_FIELDS

logger = logging.getLogger(__name__)

RejectionStatus = Literal["incomplete_profile", "low_confidence", "invalid_data"]

MAX_MISSING_RATIO = 0.5
MIN_CONFIDENCE = 0.3

ExerciseLevel = Literal["never", "rarely", "sometimes", "often", "daily"]
AlcoholLevel = Literal["never", "rarely", "sometimes", "often", "no"]
EXERCISE_LEVELS: tuple[str, ...] = get_args(ExerciseLevel)
ALCOHOL_LEVELS: tuple[str, ...] = get_args(AlcoholLevel)


@dataclass(frozen=True)
class GuardrailRejection:
    status: RejectionStatus
    reason: str
    missing_fields: list[str] | None = None
    confidence: float | None = None
    ocr_confidence: float | None = None
    field: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status, "reason": self.reason}
        if self.missing_fields is not None:
            payload["missing_fields"] = list(self.missing_fields)
        if self.confidence is not None:
            payload["confidence"] = self.confidence
        if self.ocr_confidence is not None:
            payload["ocr_confidence"] = self.ocr_confidence
        if self.field is not None:
            payload["field"] = self.field
        return payload


@dataclass(frozen=True)
class GuardrailDecision:
    accepted: bool
    rejection: GuardrailRejection | None = None


def validate_profile(
    answers: dict[str, Any],
    missing_fields: Sequence[str],
    confidence: ConfidenceReport,
) -> GuardrailDecision:
    missing = list(missing_fields)
    missing_ratio = len(missing) / len(REQUIRED_FIELDS)
    if missing_ratio > MAX_MISSING_RATIO:
        logger.warning("guardrail reject incomplete_profile missing=%s", missing)
        return _reject(
            GuardrailRejection(
                status="incomplete_profile",
                reason=">50% fields missing",
                missing_fields=missing,
                confidence=confidence.extraction,
            )
        )

    if confidence.extraction < MIN_CONFIDENCE:
        logger.warning("guardrail reject low_confidence extraction=%.2f", confidence.extraction)
        return _reject(
            GuardrailRejection(
                status="low_confidence",
                reason="Extraction confidence too low",
                confidence=confidence.extraction,
            )
        )
    if confidence.ocr is not None and confidence.ocr < MIN_CONFIDENCE:
        logger.warning("guardrail reject low_confidence ocr=%.2f", confidence.ocr)
        return _reject(
            GuardrailRejection(
                status="low_confidence",
                reason="OCR confidence too low",
                confidence=confidence.extraction,
                ocr_confidence=confidence.ocr,
            )
        )

    violation = check_schema(answers)
    if violation is not None:
        bad_field, reason = violation
        logger.warning("guardrail reject invalid_data field=%s reason=%s", bad_field, reason)
        return _reject(
            GuardrailRejection(status="invalid_data", reason=reason, field=bad_field)
        )

    logger.info("guardrails passed fields=%s", sorted(answers))
    return GuardrailDecision(accepted=True)


class AnswerSchema(BaseModel):
    """Field-level constraints for an answer set; absent fields are not checked."""

    model_config = ConfigDict(extra="forbid")

    age: StrictInt = Field(default=None, ge=1, le=120)
    smoker: StrictBool = None
    exercise: ExerciseLevel = None
    diet: StrictStr = Field(default=None, min_length=1)
    bmi: StrictFloat = Field(default=None, ge=10, le=50, allow_inf_nan=False)
    sleep: StrictFloat = Field(default=None, ge=0, le=24, allow_inf_nan=False)
    alcohol: Union[StrictBool, AlcoholLevel] = None


def check_schema(answers: dict[str, Any]) -> tuple[str, str] | None:
    """Return ``(field, reason)`` for the first violation, or ``None``."""
    try:
        AnswerSchema.model_validate(answers)
    except ValidationError as exc:
        return _describe_error(exc.errors()[0])
    return None


def _reject(rejection: GuardrailRejection) -> GuardrailDecision:
    return GuardrailDecision(accepted=False, rejection=rejection)


def _describe_error(error: Mapping[str, Any]) -> tuple[str, str]:
    loc = error.get("loc") or ("value",)
    name = str(loc[0])
    kind = str(error.get("type", ""))
    ctx = error.get("ctx") or {}
    value = error.get("input")

    if kind == "extra_forbidden":
        return name, f'"{name}" is not allowed'
    if name == "alcohol":
        return name, f'"{name}" must be one of [true, false, {", ".join(ALCOHOL_LEVELS)}]'
    if kind == "literal_error":
        return name, f'"{name}" must be one of [{", ".join(EXERCISE_LEVELS)}]'
    if kind == "greater_than_equal":
        return name, f'"{name}" must be greater than or equal to {_fmt(ctx.get("ge"))}'
    if kind == "less_than_equal":
        return name, f'"{name}" must be less than or equal to {_fmt(ctx.get("le"))}'
    if kind == "bool_type":
        return name, f'"{name}" must be a boolean'
    if kind == "string_type":
        return name, f'"{name}" must be a string'
    if kind == "string_too_short":
        return name, f'"{name}" is not allowed to be empty'
    if kind == "int_type" and isinstance(value, float):
        return name, f'"{name}" must be an integer'
    return name, f'"{name}" must be a number'


def _fmt(bound: Any) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)
