from __future__ import annotations

"""
Sequential survey analysis pipeline.

Design intent:
- Intake (extraction + confidence) is separate from analysis so OCR-only
  callers can stop after intake.
- Guardrail rejection is the single early exit.
- Each stage builds a new value from the previous one; nothing is shared
  across requests.
"""

import logging
from dataclasses import dataclass
from typing import Any

from health_profiler.guardrails.validator import validate_profile
from health_profiler.intake.confidence import ConfidenceReport, build_confidence_report
from health_profiler.intake.fields import InputKind, extract_fields, sanitize_text
from health_profiler.recommendations.generator import RecommendationStrategy, generate_recommendations
from health_profiler.risk.factors import extract_factors
from health_profiler.risk.scoring import calculate_risk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileIntake:
    input_kind: InputKind
    answers: dict[str, Any]
    missing_fields: list[str]
    confidence: ConfidenceReport
    extraction_method: str

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "answers": dict(self.answers),
            "missing_fields": list(self.missing_fields),
            "confidence": self.confidence.extraction,
        }
        if self.confidence.ocr is not None:
            payload["ocr_confidence"] = self.confidence.ocr
        return payload


@dataclass(frozen=True)
class AnalysisOutcome:
    ok: bool
    payload: dict[str, Any]
    debug: dict[str, Any]


def build_intake(
    text: str,
    *,
    input_kind: InputKind = "text",
    ocr_confidence: float | None = None,
) -> ProfileIntake:
    extraction = extract_fields(sanitize_text(text))
    confidence = build_confidence_report(
        extraction.answers,
        extraction.missing_fields,
        input_kind,
        ocr_confidence=ocr_confidence,
    )
    return ProfileIntake(
        input_kind=input_kind,
        answers=extraction.answers,
        missing_fields=extraction.missing_fields,
        confidence=confidence,
        extraction_method=extraction.method,
    )


async def analyze_intake(
    intake: ProfileIntake,
    *,
    strategy: RecommendationStrategy | None = None,
    timeout_sec: float = 10.0,
) -> AnalysisOutcome:
    decision = validate_profile(intake.answers, intake.missing_fields, intake.confidence)
    if not decision.accepted and decision.rejection is not None:
        return AnalysisOutcome(
            ok=False,
            payload=decision.rejection.to_payload(),
            debug={
                "input_kind": intake.input_kind,
                "extraction_method": intake.extraction_method,
                "stage": "guardrails",
            },
        )

    factor_data = extract_factors(intake.answers)
    risk = calculate_risk(factor_data.factors, intake.answers)
    recs = await generate_recommendations(
        risk.risk_level,
        factor_data.factors,
        strategy=strategy,
        timeout_sec=timeout_sec,
    )

    payload = intake.to_payload()
    payload.update(
        {
            "factors": [item.value for item in factor_data.factors],
            "factor_confidence": factor_data.confidence,
            "score": risk.score,
            "risk_level": risk.risk_level,
            "rationale": list(risk.rationale),
            "recommendations": list(recs.recommendations),
            "source": recs.source,
            "status": "ok",
        }
    )
    logger.info(
        "analysis complete level=%s score=%s factors=%s source=%s",
        risk.risk_level,
        risk.score,
        len(factor_data.factors),
        recs.source,
    )
    return AnalysisOutcome(
        ok=True,
        payload=payload,
        debug={
            "input_kind": intake.input_kind,
            "extraction_method": intake.extraction_method,
            "stage": "complete",
            "recommendation_strategy": recs.strategy,
            "recommendation_fallback_reason": recs.fallback_reason,
        },
    )
