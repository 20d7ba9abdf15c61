"""
Shared fixtures for the health profiler test suite.
"""

import pytest
from fastapi.testclient import TestClient

from health_profiler.api.main import app
from health_profiler.recommendations import StaticRecommendationStrategy

SAMPLE_SURVEY_TEXT = "Age: 42\nSmoker: yes\nExercise: rarely\nDiet: high sugar"


@pytest.fixture
def healthy_answers() -> dict:
    return {
        "age": 35,
        "smoker": False,
        "exercise": "daily",
        "diet": "balanced",
        "bmi": 24.2,
        "sleep": 7.5,
        "alcohol": "rarely",
    }


@pytest.fixture
def high_risk_answers() -> dict:
    return {
        "age": 68,
        "smoker": True,
        "exercise": "never",
        "diet": "high sugar processed foods and fried meals",
        "bmi": 34.2,
        "sleep": 4,
        "alcohol": "often",
    }


def _clear_injected_state() -> None:
    for name in ("recommendation_strategy", "ocr_provider", "config"):
        if hasattr(app.state, name):
            delattr(app.state, name)


@pytest.fixture
def client():
    _clear_injected_state()
    # Never reach a real generative backend from tests unless a test injects one.
    app.state.recommendation_strategy = StaticRecommendationStrategy()
    try:
        yield TestClient(app)
    finally:
        _clear_injected_state()
