from __future__ import annotations

from .generative import (
    GeminiRecommendationStrategy,
    LlamaCppRecommendationStrategy,
    RecommendationStrategyError,
)
from .generator import (
    RecommendationResult,
    RecommendationStrategy,
    StaticRecommendationStrategy,
    generate_recommendations,
    select_recommendation_strategy,
)
from .static import build_static_recommendations

__all__ = [
    "GeminiRecommendationStrategy",
    "LlamaCppRecommendationStrategy",
    "RecommendationStrategyError",
    "RecommendationResult",
    "RecommendationStrategy",
    "StaticRecommendationStrategy",
    "build_static_recommendations",
    "generate_recommendations",
    "select_recommendation_strategy",
]
