from __future__ import annotations

"""
Pick a recommendation strategy and guarantee a usable result.

Design intent:
- One interface, several backends, chosen by a runtime capability check.
- A single attempt against the generative backend, bounded by a timeout.
- Any failure degrades to the static rules; callers only see the source tag.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

from health_profiler.internal_core.config import ProfilerConfig
from health_profiler.recommendations.generative import (
    GeminiRecommendationStrategy,
    LlamaCppRecommendationStrategy,
)
from health_profiler.recommendations.static import MAX_RECOMMENDATIONS, build_static_recommendations
from health_profiler.risk.factors import FactorTag
from health_profiler.risk.scoring import RiskLevel

logger = logging.getLogger(__name__)

RecommendationSource = Literal["ai-generated", "static"]


class RecommendationStrategy(Protocol):
    source: RecommendationSource

    def name(self) -> str: ...

    async def recommend(
        self, risk_level: RiskLevel, factors: Sequence[FactorTag | str]
    ) -> list[str]: ...


class StaticRecommendationStrategy:
    source: RecommendationSource = "static"

    def name(self) -> str:
        return "static"

    async def recommend(self, risk_level: RiskLevel, factors: Sequence[FactorTag | str]) -> list[str]:
        return build_static_recommendations(risk_level, factors)


@dataclass(frozen=True)
class RecommendationResult:
    recommendations: list[str]
    source: RecommendationSource
    strategy: str
    fallback_reason: str = ""


def select_recommendation_strategy(config: ProfilerConfig) -> RecommendationStrategy:
    backend = config.HRP_RECOMMENDATION_BACKEND
    if backend == "gemini" and config.gemini_enabled:
        return GeminiRecommendationStrategy(
            config.GEMINI_API_KEY,
            model_name=config.HRP_GEMINI_MODEL,
            max_tokens=config.HRP_AI_MAX_TOKENS,
            temperature=config.HRP_AI_TEMPERATURE,
        )
    if backend == "llama_cpp" and config.HRP_LLAMA_CPP_MODEL and os.path.exists(config.HRP_LLAMA_CPP_MODEL):
        return LlamaCppRecommendationStrategy(
            config.HRP_LLAMA_CPP_MODEL,
            chat_format=config.HRP_LLAMA_CPP_CHAT_FORMAT,
            n_ctx=config.HRP_LLAMA_CPP_N_CTX,
            max_tokens=config.HRP_AI_MAX_TOKENS,
            temperature=config.HRP_AI_TEMPERATURE,
        )
    if backend != "static":
        logger.warning("recommendation backend=%s unavailable; using static rules", backend)
    return StaticRecommendationStrategy()


async def generate_recommendations(
    risk_level: RiskLevel,
    factors: Sequence[FactorTag | str],
    *,
    strategy: RecommendationStrategy | None = None,
    timeout_sec: float = 10.0,
) -> RecommendationResult:
    chosen = strategy or StaticRecommendationStrategy()
    if chosen.source == "static":
        return _static_result(risk_level, factors, reason="")

    try:
        items = await asyncio.wait_for(chosen.recommend(risk_level, factors), timeout=timeout_sec)
    except asyncio.TimeoutError:
        logger.warning("recommendation strategy=%s timed out after %.1fs", chosen.name(), timeout_sec)
        return _static_result(risk_level, factors, reason="timeout")
    except Exception as exc:
        logger.warning("recommendation strategy=%s failed: %s", chosen.name(), exc)
        return _static_result(risk_level, factors, reason="strategy_error")

    if not isinstance(items, (list, tuple)):
        items = []
    cleaned = [str(item).strip() for item in items if str(item or "").strip()][:MAX_RECOMMENDATIONS]
    if not cleaned:
        logger.warning("recommendation strategy=%s returned nothing", chosen.name())
        return _static_result(risk_level, factors, reason="empty_output")

    logger.info("recommendations generated strategy=%s count=%s", chosen.name(), len(cleaned))
    return RecommendationResult(
        recommendations=cleaned,
        source=chosen.source,
        strategy=chosen.name(),
    )


def _static_result(
    risk_level: RiskLevel,
    factors: Sequence[FactorTag | str],
    *,
    reason: str,
) -> RecommendationResult:
    return RecommendationResult(
        recommendations=build_static_recommendations(risk_level, factors),
        source="static",
        strategy="static",
        fallback_reason=reason,
    )
