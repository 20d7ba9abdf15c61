from __future__ import annotations

"""
Rule-based recommendations used when no generative backend is available.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Sequence

from health_profiler.risk.factors import FactorTag
from health_profiler.risk.scoring import RiskLevel

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5
MIN_STATIC_RECOMMENDATIONS = 3

FACTOR_RECOMMENDATIONS: Mapping[FactorTag, str] = MappingProxyType(
    {
        FactorTag.SMOKING: "Quit smoking with professional support",
        FactorTag.POOR_DIET: "Reduce sugar and increase vegetables",
        FactorTag.LOW_EXERCISE: "Walk 30 minutes daily",
        FactorTag.OBESITY: "Consult healthcare provider for weight management",
        FactorTag.OVERWEIGHT: "Aim for gradual weight loss through diet and exercise",
        FactorTag.UNDERWEIGHT: "Increase calorie intake with nutrient-dense foods",
        FactorTag.ADVANCED_AGE: "Regular health checkups and screenings",
        FactorTag.POOR_SLEEP: "Maintain consistent sleep schedule (7-8 hours)",
        FactorTag.HIGH_FAT_INTAKE: "Choose lean proteins and healthy fats",
        FactorTag.ALCOHOL_CONSUMPTION: "Limit alcohol intake to recommended guidelines",
    }
)

HEALTHCARE_RECOMMENDATION = "Consult healthcare provider for comprehensive assessment"
STRESS_RECOMMENDATION = "Practice stress management techniques"
HYDRATION_RECOMMENDATION = "Stay hydrated with 8 glasses of water daily"
# Hydration always comes first; the rest only pad very short lists.
FILLER_RECOMMENDATIONS: tuple[str, ...] = (
    HYDRATION_RECOMMENDATION,
    "Keep up regular physical activity you enjoy",
    "Schedule a routine annual checkup",
)


def build_static_recommendations(
    risk_level: RiskLevel,
    factors: Sequence[FactorTag | str],
) -> list[str]:
    recommendations: list[str] = []

    for item in factors:
        text = _lookup(item)
        if text is None:
            logger.debug("no static recommendation for factor=%r", item)
            continue
        if text not in recommendations:
            recommendations.append(text)

    if risk_level == "high" and not _mentions(recommendations, "healthcare"):
        recommendations.append(HEALTHCARE_RECOMMENDATION)

    if risk_level in {"medium", "high"} and not _mentions(recommendations, "stress"):
        recommendations.append(STRESS_RECOMMENDATION)

    for filler in FILLER_RECOMMENDATIONS:
        if len(recommendations) >= MIN_STATIC_RECOMMENDATIONS:
            break
        recommendations.append(filler)

    return recommendations[:MAX_RECOMMENDATIONS]


def _lookup(item: FactorTag | str) -> str | None:
    try:
        tag = item if isinstance(item, FactorTag) else FactorTag(str(item))
    except ValueError:
        return None
    return FACTOR_RECOMMENDATIONS.get(tag)


def _mentions(recommendations: Sequence[str], keyword: str) -> bool:
    return any(keyword in item for item in recommendations)
