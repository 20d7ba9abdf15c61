from __future__ import annotations

"""
Turn raw survey text into a partial answer set.

Design intent:
- Accept a structured JSON record verbatim when the input looks like one.
- Otherwise run one independent, order-insensitive detector per field.
- Never raise on malformed input; absent fields are simply omitted.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal

from health_profiler.utils.logging import text_snippet

logger = logging.getLogger(__name__)

InputKind = Literal["text", "image"]
ExtractionMethod = Literal["structured", "pattern"]

REQUIRED_FIELDS: tuple[str, ...] = ("age", "smoker", "exercise", "diet")

_AGE_RE = re.compile(r"age[:\s]*(\d+)", re.IGNORECASE)
_SMOKER_RE = re.compile(r"smok(?:er|ing)[:\s]*(yes|no|true|false)\b", re.IGNORECASE)
_EXERCISE_RE = re.compile(
    r"exercise[:\s]*(never|rarely|sometimes|often|daily|[\w \t]+)",
    re.IGNORECASE,
)
# The label terminator stays case-sensitive so "Sleep:" ends the diet run but "sleep:" does not.
_DIET_RE = re.compile(r"diet[:\s]*([\w\s]+?)(?:\n|$|(?-i:[A-Z][a-z]+:))", re.IGNORECASE)
_BMI_RE = re.compile(r"bmi[:\s]*(\d+(?:\.\d+)?)", re.IGNORECASE)
_SLEEP_RE = re.compile(r"sleep[:\s]*(\d+(?:\.\d+)?)", re.IGNORECASE)
_ALCOHOL_RE = re.compile(
    r"alcohol[:\s]*(yes|no|true|false|never|rarely|sometimes|often)\b",
    re.IGNORECASE,
)

_ALCOHOL_KEPT_VALUES = {"yes", "true", "often", "sometimes"}
_SANITIZE_RE = re.compile(r"[<>]")


@dataclass(frozen=True)
class FieldExtraction:
    answers: dict[str, Any]
    missing_fields: list[str]
    method: ExtractionMethod


def sanitize_text(text: str) -> str:
    return _SANITIZE_RE.sub("", str(text or "")).strip()


def extract_fields(text: str) -> FieldExtraction:
    source = str(text or "")
    logger.debug("field extraction input snippet=%r", text_snippet(source))

    structured = _parse_structured_record(source)
    if structured is not None:
        answers = structured
        method: ExtractionMethod = "structured"
    else:
        answers = _extract_by_patterns(source)
        method = "pattern"

    missing = find_missing_fields(answers)
    logger.info(
        "field extraction done method=%s fields=%s missing=%s",
        method,
        sorted(answers),
        missing,
    )
    return FieldExtraction(answers=answers, missing_fields=missing, method=method)


def find_missing_fields(answers: dict[str, Any]) -> list[str]:
    return [field for field in REQUIRED_FIELDS if _is_empty(answers.get(field))]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    return False


def _parse_structured_record(text: str) -> dict[str, Any] | None:
    if not text.strip().startswith("{"):
        return None
    try:
        data = json.loads(text)
    except ValueError:
        logger.info("input starts with '{' but is not valid JSON; using pattern extraction")
        return None
    if not isinstance(data, dict):
        logger.info("structured input is not an object; using pattern extraction")
        return None
    return data


def _extract_by_patterns(text: str) -> dict[str, Any]:
    answers: dict[str, Any] = {}

    match = _AGE_RE.search(text)
    if match:
        try:
            answers["age"] = int(match.group(1))
        except ValueError:
            logger.info("age digit run too long to convert; leaving age absent")

    match = _SMOKER_RE.search(text)
    if match:
        answers["smoker"] = match.group(1).lower() in {"yes", "true"}

    match = _EXERCISE_RE.search(text)
    if match:
        exercise = match.group(1).lower().strip()
        if exercise:
            answers["exercise"] = exercise

    match = _DIET_RE.search(text)
    if match:
        diet = match.group(1).strip()
        if diet:
            answers["diet"] = diet

    match = _BMI_RE.search(text)
    if match:
        answers["bmi"] = float(match.group(1))

    match = _SLEEP_RE.search(text)
    if match:
        answers["sleep"] = float(match.group(1))

    match = _ALCOHOL_RE.search(text)
    if match:
        value = match.group(1).lower()
        answers["alcohol"] = value if value in _ALCOHOL_KEPT_VALUES else "no"

    return answers
