# src/api/models.py — v2
"""API-level models: GenerationRequest, GenerationResponse, ProductModel."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from agenticad.analysis.normalizer import MultimodalInput


class Preferences(BaseModel):
    """Caller preferences applied when building the product model."""

    style: Literal["modern", "traditional", "minimalist", "industrial"] | None = None
    units: Literal["metric", "imperial"] = "metric"
    complexity: Literal["simple", "detailed", "complex"] = "simple"


class GenerationRequest(BaseModel):
    """Input of generate_model()."""

    inputs: MultimodalInput
    preferences: Preferences = Field(default_factory=Preferences)


class Size3D(BaseModel):
    """Width/length/height in centimetres."""

    width: float
    length: float
    height: float

    @property
    def volume(self) -> float:
        return self.width * self.length * self.height


class Position3D(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class ProductComponent(BaseModel):
    id: str
    name: str
    dimensions: Size3D
    position: Position3D = Field(default_factory=Position3D)
    material: str
    function: str
    features: list[str] = Field(default_factory=list)
    connections: list[str] = Field(default_factory=list)


class ManufacturingPlan(BaseModel):
    method: str
    materials: list[str] = Field(default_factory=list)
    complexity: Literal["simple", "moderate", "complex"] = "simple"
    estimated_cost: str = ""


class ProductSpecification(BaseModel):
    weight: str
    dimensions: Size3D
    color_options: list[str] = Field(default_factory=list)
    durability: Literal["low", "medium", "high"] = "medium"


class ProductModel(BaseModel):
    """Buildable product description derived from merged attributes."""

    id: str
    name: str
    description: str
    style: str
    use_case: str
    product_type: str
    components: list[ProductComponent] = Field(default_factory=list)
    total_volume: float = 0.0
    manufacturing: ManufacturingPlan
    specifications: ProductSpecification
    layout: str | None = None


class GenerationResponse(BaseModel):
    """Return value of generate_model()."""

    model: ProductModel
    confidence: float = Field(ge=0.0, le=0.95)
    alternatives: list[ProductModel] = Field(default_factory=list)
    processing_steps: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    duration_ms: int = 0
    sources: list[str] = Field(default_factory=list)
    cache_hits: int = 0
