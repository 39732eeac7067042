# src/analysis/merger.py — v1
"""Combine per-modality analysis results into one attribute set.

Text contributes everything. Voice adds lists and may set the use case.
Sketches contribute layout, components, features and override dimensions.
Photos override style and add features and materials.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from agenticad.core.models import AnalysisResult, Dimensions, Manufacturing, Modality

logger = logging.getLogger(__name__)

DEFAULT_COMPONENTS = ["body", "interface"]
DEFAULT_USE_CASE = "general"


class MergedAttributes(BaseModel):
    """Design attributes after merging every modality of one request."""

    requirements: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    style: str = "modern"
    components: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)
    dimensions: Dimensions | None = None
    manufacturing: Manufacturing | None = None
    use_case: str = DEFAULT_USE_CASE
    layout: str | None = None
    sources: list[str] = Field(default_factory=list)


class AttributeMerger:
    """Fold (modality, result) pairs in input order."""

    def merge(self, results: list[tuple[Modality, AnalysisResult]]) -> MergedAttributes:
        merged = MergedAttributes()
        for modality, result in results:
            handler = getattr(self, f"_merge_{modality}")
            handler(merged, result)
            merged.sources.append(result.source)
            logger.debug(
                "Merged %s result (source=%s, confidence=%.2f)",
                modality, result.source, result.confidence,
            )

        merged.requirements = _unique(merged.requirements)
        merged.constraints = _unique(merged.constraints)
        merged.components = _unique(merged.components) or list(DEFAULT_COMPONENTS)
        merged.features = _unique(merged.features)
        merged.materials = _unique(merged.materials)
        merged.use_case = merged.use_case or DEFAULT_USE_CASE
        return merged

    def _merge_text(self, merged: MergedAttributes, result: AnalysisResult) -> None:
        merged.requirements.extend(result.requirements)
        merged.constraints.extend(result.constraints)
        merged.style = result.style or merged.style
        merged.components.extend(result.components)
        merged.features.extend(result.features)
        merged.materials.extend(result.materials)
        if result.dimensions is not None and merged.dimensions is None:
            merged.dimensions = result.dimensions
        merged.manufacturing = result.manufacturing or merged.manufacturing
        merged.use_case = result.use_case or merged.use_case

    def _merge_voice(self, merged: MergedAttributes, result: AnalysisResult) -> None:
        merged.requirements.extend(result.requirements)
        merged.components.extend(result.components)
        merged.features.extend(result.features)
        merged.materials.extend(result.materials)
        if result.use_case and result.use_case != DEFAULT_USE_CASE:
            merged.use_case = result.use_case

    def _merge_sketch(self, merged: MergedAttributes, result: AnalysisResult) -> None:
        merged.layout = result.layout or merged.layout
        merged.components.extend(result.components)
        merged.features.extend(result.features)
        if result.dimensions is not None and not result.dimensions.is_empty:
            merged.dimensions = result.dimensions

    def _merge_photo(self, merged: MergedAttributes, result: AnalysisResult) -> None:
        merged.style = result.style or merged.style
        merged.features.extend(result.features)
        merged.materials.extend(result.materials)


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))
