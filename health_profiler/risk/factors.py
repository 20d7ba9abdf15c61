from __future__ import annotations

"""
Derive named risk factors from a validated answer set.

Design intent:
- One independent boolean rule per risk dimension, evaluated in a fixed order.
- Detection order is significant: the scorer's rationale keeps the first three.
- Report a separate confidence for rule-based inference on sparse data.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class FactorTag(str, Enum):
    SMOKING = "smoking"
    POOR_DIET = "poor diet"
    HIGH_FAT_INTAKE = "high fat intake"
    LOW_EXERCISE = "low exercise"
    OBESITY = "obesity"
    OVERWEIGHT = "overweight"
    UNDERWEIGHT = "underweight"
    ADVANCED_AGE = "advanced age"
    POOR_SLEEP = "poor sleep"
    ALCOHOL_CONSUMPTION = "alcohol consumption"


BASE_FACTOR_CONFIDENCE = 0.9
SPARSE_DATA_PENALTY = 0.2
SPARSE_DATA_MIN_KEYS = 3

_LOW_EXERCISE_LEVELS = {"never", "rarely"}
_POOR_DIET_TERMS = ("high sugar", "fast food", "processed")
_HIGH_FAT_TERMS = ("high fat", "fried")
_ALCOHOL_RISK_LEVELS = {"often", "sometimes"}


@dataclass(frozen=True)
class FactorExtraction:
    factors: tuple[FactorTag, ...]
    confidence: float


def extract_factors(answers: dict[str, Any]) -> FactorExtraction:
    factors: list[FactorTag] = []

    age = _number(answers.get("age"))
    if age is not None and age >= 65:
        factors.append(FactorTag.ADVANCED_AGE)

    if answers.get("smoker") is True:
        factors.append(FactorTag.SMOKING)

    exercise = _lower_text(answers.get("exercise"))
    if exercise in _LOW_EXERCISE_LEVELS:
        factors.append(FactorTag.LOW_EXERCISE)

    diet = _lower_text(answers.get("diet"))
    if any(term in diet for term in _POOR_DIET_TERMS):
        factors.append(FactorTag.POOR_DIET)
    if any(term in diet for term in _HIGH_FAT_TERMS):
        factors.append(FactorTag.HIGH_FAT_INTAKE)

    bmi_tag = _bmi_band(_number(answers.get("bmi")))
    if bmi_tag is not None:
        factors.append(bmi_tag)

    sleep = _number(answers.get("sleep"))
    if sleep is not None and (sleep < 6 or sleep > 9):
        factors.append(FactorTag.POOR_SLEEP)

    if _lower_text(answers.get("alcohol")) in _ALCOHOL_RISK_LEVELS:
        factors.append(FactorTag.ALCOHOL_CONSUMPTION)

    confidence = BASE_FACTOR_CONFIDENCE
    if len(answers) < SPARSE_DATA_MIN_KEYS:
        confidence -= SPARSE_DATA_PENALTY

    logger.info("factor extraction done factors=%s", [item.value for item in factors])
    return FactorExtraction(factors=tuple(factors), confidence=round(confidence, 2))


def _bmi_band(bmi: float | None) -> FactorTag | None:
    if bmi is None:
        return None
    if bmi >= 30:
        return FactorTag.OBESITY
    if bmi >= 25:
        return FactorTag.OVERWEIGHT
    if bmi < 18.5:
        return FactorTag.UNDERWEIGHT
    return None


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _lower_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()
