from __future__ import annotations

"""
Weighted, deterministic risk score over detected factors.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, Mapping, Sequence

from health_profiler.risk.factors import FactorTag

logger = logging.getLogger(__name__)

RiskLevel = Literal["low", "medium", "high"]

FACTOR_WEIGHTS: Mapping[FactorTag, int] = MappingProxyType(
    {
        FactorTag.SMOKING: 25,
        FactorTag.OBESITY: 20,
        FactorTag.POOR_DIET: 15,
        FactorTag.LOW_EXERCISE: 15,
        FactorTag.ADVANCED_AGE: 15,
        FactorTag.HIGH_FAT_INTAKE: 12,
        FactorTag.UNDERWEIGHT: 12,
        FactorTag.OVERWEIGHT: 10,
        FactorTag.POOR_SLEEP: 10,
        FactorTag.ALCOHOL_CONSUMPTION: 8,
    }
)
UNKNOWN_FACTOR_WEIGHT = 5

AGE_ESCALATOR_START = 50
AGE_ESCALATOR_STEP_YEARS = 5
AGE_ESCALATOR_POINTS = 2

LOW_RISK_MAX = 30
MEDIUM_RISK_MAX = 60
RATIONALE_SIZE = 3


@dataclass(frozen=True)
class RiskAssessment:
    score: int
    risk_level: RiskLevel
    rationale: tuple[str, ...]


def calculate_risk(factors: Sequence[FactorTag | str], answers: dict[str, Any]) -> RiskAssessment:
    score = 0
    labels: list[str] = []
    for item in factors:
        tag = _coerce_tag(item)
        if tag is None:
            logger.warning("unrecognized factor tag=%r; using fallback weight", item)
            score += UNKNOWN_FACTOR_WEIGHT
            labels.append(str(item))
            continue
        score += FACTOR_WEIGHTS[tag]
        labels.append(tag.value)

    score += age_adjustment(answers.get("age"))
    score = max(0, min(100, score))
    level = risk_level_for_score(score)

    logger.info("risk scored score=%s level=%s", score, level)
    return RiskAssessment(
        score=score,
        risk_level=level,
        rationale=tuple(labels[:RATIONALE_SIZE]),
    )


def age_adjustment(age: Any) -> int:
    if isinstance(age, bool) or not isinstance(age, (int, float)):
        return 0
    if age <= AGE_ESCALATOR_START:
        return 0
    steps = int((age - AGE_ESCALATOR_START) // AGE_ESCALATOR_STEP_YEARS)
    return steps * AGE_ESCALATOR_POINTS


def risk_level_for_score(score: int) -> RiskLevel:
    if score <= LOW_RISK_MAX:
        return "low"
    if score <= MEDIUM_RISK_MAX:
        return "medium"
    return "high"


def _coerce_tag(item: FactorTag | str) -> FactorTag | None:
    if isinstance(item, FactorTag):
        return item
    try:
        return FactorTag(str(item))
    except ValueError:
        return None
