# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# === ENUM-LIKE LITERALS ===

Modality = Literal["text", "voice", "sketch", "photo"]
AnalysisKind = Literal["text_analysis", "image_analysis", "sketch_analysis"]
ResultSource = Literal[
    "primary-ai",
    "primary-ai-fallback-parse",
    "secondary-ai",
    "secondary-ai-fallback-parse",
    "heuristic",
]

# Confidence per provenance tier. Strictly decreasing in this order.
CONFIDENCE_BY_SOURCE: dict[str, float] = {
    "primary-ai": 0.9,
    "primary-ai-fallback-parse": 0.7,
    "secondary-ai": 0.8,
    "secondary-ai-fallback-parse": 0.6,
    "heuristic": 0.4,
}

MAX_CONFIDENCE = 0.95

IMAGE_KINDS: frozenset[str] = frozenset({"image_analysis", "sketch_analysis"})


# === REQUEST ===


class AnalysisRequest(BaseModel):
    """Normalized attribute-extraction request handed to the orchestrator."""

    model_config = ConfigDict(frozen=True)

    modality: Modality
    raw_content: str
    analysis_kind: AnalysisKind
    prompt: str | None = None

    @property
    def is_image(self) -> bool:
        return self.analysis_kind in IMAGE_KINDS


# === RESULT ===


class Dimensions(BaseModel):
    """Partial overall dimensions in centimetres."""

    model_config = ConfigDict(frozen=True)

    length: float | None = None
    width: float | None = None
    height: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.length is None and self.width is None and self.height is None


class Manufacturing(BaseModel):
    """Suggested manufacturing route."""

    model_config = ConfigDict(frozen=True)

    method: str | None = None
    complexity: Literal["simple", "moderate", "complex"] | None = None


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        item = v.strip()
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


class AnalysisResult(BaseModel):
    """Structured design attributes produced by exactly one provider tier.

    Frozen: a newer result replaces a cached one instead of patching it.
    String collections keep first-seen order and drop duplicates.
    """

    model_config = ConfigDict(frozen=True)

    requirements: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    style: str = "modern"
    components: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)
    dimensions: Dimensions | None = None
    manufacturing: Manufacturing | None = None
    use_case: str = "general"
    layout: str | None = None
    source: ResultSource
    confidence: float = Field(ge=0.0, le=MAX_CONFIDENCE)

    @field_validator(
        "requirements", "constraints", "components", "features", "materials"
    )
    @classmethod
    def dedupe(cls, v: list[str]) -> list[str]:
        return _unique(v)

    @property
    def is_heuristic(self) -> bool:
        return self.source == "heuristic"
