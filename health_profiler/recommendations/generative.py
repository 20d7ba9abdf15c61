from __future__ import annotations

"""
Generative recommendation backends.

Design intent:
- Ask a language model for a short list of actionable items.
- Fail loudly with RecommendationStrategyError so the caller can fall back.
- Keep the prompt and output parsing shared across backends.
"""

import asyncio
import logging
import os
import re
from typing import Any, Sequence

from google import genai

from health_profiler.recommendations.static import MAX_RECOMMENDATIONS
from health_profiler.risk.factors import FactorTag
from health_profiler.risk.scoring import RiskLevel

logger = logging.getLogger(__name__)

AI_SOURCE = "ai-generated"

_LIST_PREFIX_RE = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")


class RecommendationStrategyError(RuntimeError):
    """Raised when a generative backend cannot produce usable recommendations."""


def build_recommendation_prompt(risk_level: RiskLevel, factors: Sequence[FactorTag | str]) -> str:
    factor_text = ", ".join(_factor_label(item) for item in factors) or "none"
    return (
        "You are a healthcare AI assistant. Based on the following health information, "
        f"provide less than {MAX_RECOMMENDATIONS} specific, actionable health recommendations.\n\n"
        f"Risk Level: {risk_level}\n"
        f"Health Factors: {factor_text}\n\n"
        "Please provide recommendations that are:\n"
        "1. Short, specific and actionable\n"
        "2. Appropriate for the given risk level\n"
        "3. Tailored to the given health factors\n"
        "4. Professional and medically sound\n"
        "5. Formatted as a simple numbered list\n\n"
        f"Return only less than {MAX_RECOMMENDATIONS} recommendations, and nothing else."
    )


def parse_recommendation_lines(raw: str) -> list[str]:
    items: list[str] = []
    for line in str(raw or "").splitlines():
        text = _LIST_PREFIX_RE.sub("", line).strip()
        text = re.sub(r"\s+", " ", text)
        if not text:
            continue
        items.append(text)
        if len(items) >= MAX_RECOMMENDATIONS:
            break
    return items


class GeminiRecommendationStrategy:
    source = AI_SOURCE

    def __init__(
        self,
        api_key: str,
        *,
        model_name: str = "gemini-2.5-flash-lite",
        max_tokens: int = 256,
        temperature: float = 0.2,
    ) -> None:
        self._api_key = api_key
        self._model_name = model_name
        self._max_tokens = int(max_tokens)
        self._temperature = float(temperature)

    def name(self) -> str:
        return "gemini"

    async def recommend(self, risk_level: RiskLevel, factors: Sequence[FactorTag | str]) -> list[str]:
        if not self._api_key:
            raise RecommendationStrategyError("GEMINI_API_KEY is not configured")

        prompt = build_recommendation_prompt(risk_level, factors)
        logger.debug("gemini prompt model=%s chars=%s", self._model_name, len(prompt))
        try:
            client = genai.Client(api_key=self._api_key)
            response = await client.aio.models.generate_content(
                model=self._model_name,
                contents=prompt,
                config={
                    "max_output_tokens": self._max_tokens,
                    "temperature": self._temperature,
                },
            )
            raw = str(response.text or "")
        except Exception as exc:
            raise RecommendationStrategyError(f"gemini call failed: {exc}") from exc

        items = parse_recommendation_lines(raw)
        if not items:
            raise RecommendationStrategyError("gemini returned no usable recommendations")
        return items


class LlamaCppRecommendationStrategy:
    source = AI_SOURCE

    def __init__(
        self,
        model_path: str,
        *,
        chat_format: str = "gemma",
        n_ctx: int = 1024,
        max_tokens: int = 256,
        temperature: float = 0.2,
    ) -> None:
        self._model_path = model_path
        self._chat_format = chat_format
        self._n_ctx = int(n_ctx)
        self._max_tokens = int(max_tokens)
        self._temperature = float(temperature)

    def name(self) -> str:
        return "llama_cpp"

    async def recommend(self, risk_level: RiskLevel, factors: Sequence[FactorTag | str]) -> list[str]:
        prompt = build_recommendation_prompt(risk_level, factors)
        raw = await asyncio.to_thread(self._complete, prompt)
        items = parse_recommendation_lines(raw)
        if not items:
            raise RecommendationStrategyError("llama_cpp returned no usable recommendations")
        return items

    def _complete(self, prompt: str) -> str:
        if not self._model_path:
            raise RecommendationStrategyError("HRP_LLAMA_CPP_MODEL is not configured")
        if not os.path.exists(self._model_path):
            raise RecommendationStrategyError(f"llama_cpp model file not found: {self._model_path}")

        try:
            from llama_cpp import Llama  # type: ignore
        except Exception as exc:
            raise RecommendationStrategyError(f"llama_cpp import failed: {exc}") from exc

        llm_kwargs: dict[str, Any] = {
            "model_path": self._model_path,
            "n_ctx": self._n_ctx,
            "verbose": False,
            "chat_format": self._chat_format,
        }
        try:
            try:
                llm = Llama(**llm_kwargs)
            except TypeError as exc:
                if "chat_format" not in str(exc):
                    raise
                llm_kwargs.pop("chat_format", None)
                llm = Llama(**llm_kwargs)
            resp = llm.create_chat_completion(
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            return str(resp["choices"][0]["message"]["content"] or "")
        except Exception as exc:
            raise RecommendationStrategyError(f"llama_cpp call failed: {exc}") from exc


def _factor_label(item: FactorTag | str) -> str:
    return item.value if isinstance(item, FactorTag) else str(item)
