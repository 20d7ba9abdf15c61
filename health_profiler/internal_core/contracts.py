from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

RiskLevelName = Literal["low", "medium", "high"]
RecommendationSourceName = Literal["ai-generated", "static"]
RejectionStatusName = Literal["incomplete_profile", "low_confidence", "invalid_data"]


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _strip_blank_text(self) -> "AnalyzeRequest":
        if self.text is not None and not self.text.strip():
            self.text = None
        return self


class ProfileIntakeResponse(BaseModel):
    answers: Dict[str, Any] = Field(default_factory=dict)
    missing_fields: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    ocr_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    text: Optional[str] = None


class ProfileAnalysisResponse(BaseModel):
    status: Literal["ok"] = "ok"
    answers: Dict[str, Any] = Field(default_factory=dict)
    missing_fields: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    ocr_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    factors: List[str] = Field(default_factory=list)
    factor_confidence: float = Field(ge=0.0, le=1.0)
    score: int = Field(ge=0, le=100)
    risk_level: RiskLevelName
    rationale: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(min_length=1, max_length=5)
    source: RecommendationSourceName


class GuardrailRejectionResponse(BaseModel):
    status: RejectionStatusName
    reason: str
    missing_fields: Optional[List[str]] = None
    confidence: Optional[float] = None
    ocr_confidence: Optional[float] = None
    field: Optional[str] = None
