# src/analysis/product_builder.py — v1
"""Deterministic product model construction from merged attributes.

The same attributes and preferences always produce the same model, id
included, so built models can be cached under their input fingerprint.
"""

from __future__ import annotations

import json
import logging

from agenticad.analysis.merger import MergedAttributes
from agenticad.api.models import (
    ManufacturingPlan,
    Position3D,
    Preferences,
    ProductComponent,
    ProductModel,
    ProductSpecification,
    Size3D,
)
from agenticad.cache.fingerprint import fingerprint

logger = logging.getLogger(__name__)

# Main body size when no dimensions were inferred (cm).
DEFAULT_BODY = Size3D(width=14.0, length=20.0, height=6.0)
DEFAULT_MATERIAL = "PLA plastic"
COLOR_OPTIONS = ["black", "white", "gray"]
ALTERNATIVE_SCALES = (0.85, 1.15)

# Ordered (product type, predicate) rules; first match wins.
_PRODUCT_TYPES: list[tuple[str, tuple[str, ...], tuple[str, ...], tuple[str, ...], tuple[str, ...]]] = [
    # name, use_case terms, requirement terms, feature terms, component terms
    ("Kitchen Utensil Holder", ("kitchen",), ("utensil",), ("kitchen",), ("holder_body",)),
    ("Mechanical Component", ("mechanical",), ("gear", "shaft"), ("precision",), ("gear", "shaft", "spring")),
    ("Office Organizer", ("office",), ("work",), ("desk",), ()),
    ("Tool Organizer", ("tool",), ("workshop",), ("garage",), ()),
    ("Home Storage", ("home",), ("household",), (), ()),
    ("Tech Accessory", ("tech",), ("electronic",), ("digital",), ()),
    ("Portable Organizer", (), (), ("portable", "carry"), ()),
]
DEFAULT_PRODUCT_TYPE = "Custom Organizer"


def infer_product_type(attrs: MergedAttributes) -> str:
    use_case = attrs.use_case.lower()
    requirements = " ".join(attrs.requirements).lower()
    features = " ".join(attrs.features).lower()
    components = " ".join(attrs.components).lower()

    for name, uc_terms, req_terms, feat_terms, comp_terms in _PRODUCT_TYPES:
        if (
            any(t in use_case for t in uc_terms)
            or any(t in requirements for t in req_terms)
            or any(t in features for t in feat_terms)
            or any(t in components for t in comp_terms)
        ):
            return name
    return DEFAULT_PRODUCT_TYPE


class ProductModelBuilder:
    """Builds ProductModel values and their scaled alternatives."""

    def build(self, attrs: MergedAttributes, preferences: Preferences | None = None) -> ProductModel:
        preferences = preferences or Preferences()
        product_type = infer_product_type(attrs)
        style = preferences.style or attrs.style or "modern"

        components = self._components(attrs)
        total_volume = round(sum(c.dimensions.volume for c in components), 2)
        complexity = self._complexity(attrs, components)

        model = ProductModel(
            id=f"product_{model_fingerprint(attrs, preferences)}",
            name=f"{style.title()} {product_type}",
            description=(
                f"A {product_type.lower()} designed for {attrs.use_case} "
                f"with {style} styling"
            ),
            style=style,
            use_case=attrs.use_case,
            product_type=product_type,
            components=components,
            total_volume=total_volume,
            manufacturing=ManufacturingPlan(
                method=self._method(attrs),
                materials=attrs.materials or [DEFAULT_MATERIAL],
                complexity=complexity,
                estimated_cost="$25-75" if complexity == "simple" else "$75-150",
            ),
            specifications=ProductSpecification(
                weight=f"{len(components) * 150}g",
                dimensions=Size3D(
                    length=max(c.dimensions.length for c in components),
                    width=max(c.dimensions.width for c in components),
                    height=max(c.dimensions.height for c in components),
                ),
                color_options=list(COLOR_OPTIONS),
                durability="high" if "durable" in attrs.features else "medium",
            ),
            layout=attrs.layout,
        )
        logger.debug(
            "Built product model %s (%s, %d components)",
            model.id, product_type, len(components),
        )
        return model

    def alternatives(self, model: ProductModel) -> list[ProductModel]:
        """Footprint-scaled variants of ``model``; heights are kept."""
        variants: list[ProductModel] = []
        for i, scale in enumerate(ALTERNATIVE_SCALES):
            components = [
                c.model_copy(
                    update={
                        "dimensions": Size3D(
                            width=round(c.dimensions.width * scale, 2),
                            length=round(c.dimensions.length * scale, 2),
                            height=c.dimensions.height,
                        )
                    }
                )
                for c in model.components
            ]
            variants.append(
                model.model_copy(
                    update={
                        "id": f"{model.id}_alt_{i}",
                        "name": f"{model.name} - Alternative {i + 1}",
                        "components": components,
                        "total_volume": round(
                            sum(c.dimensions.volume for c in components), 2
                        ),
                    }
                )
            )
        return variants

    # --- Internal helpers ---

    def _components(self, attrs: MergedAttributes) -> list[ProductComponent]:
        body = DEFAULT_BODY
        if attrs.dimensions is not None and not attrs.dimensions.is_empty:
            body = Size3D(
                width=attrs.dimensions.width or DEFAULT_BODY.width,
                length=attrs.dimensions.length or DEFAULT_BODY.length,
                height=attrs.dimensions.height or DEFAULT_BODY.height,
            )

        specs: list[tuple[str, Size3D, str, str, list[str]]] = [
            (
                "main_body",
                body,
                attrs.materials[0] if attrs.materials else DEFAULT_MATERIAL,
                "Primary structure",
                attrs.features[:2] or ["functional"],
            )
        ]
        if "interface" in attrs.components or "interactive" in attrs.features:
            specs.append(
                ("interface", Size3D(width=8, length=12, height=2), "Metal",
                 "User interaction", ["ergonomic"])
            )
        if "handle" in attrs.components or "portable" in attrs.features:
            specs.append(
                ("handle", Size3D(width=3, length=15, height=2),
                 "Rubber" if "rubber" in attrs.materials else "Plastic",
                 "Grip and portability", ["ergonomic", "non-slip"])
            )

        return [
            ProductComponent(
                id=f"component_{i}",
                name=name,
                dimensions=size,
                position=Position3D(x=i * 3.0),
                material=material,
                function=function,
                features=features,
                connections=[] if i == 0 else ["main_body"],
            )
            for i, (name, size, material, function, features) in enumerate(specs)
        ]

    @staticmethod
    def _method(attrs: MergedAttributes) -> str:
        if attrs.manufacturing is not None and attrs.manufacturing.method:
            return attrs.manufacturing.method
        if "3d_print" in attrs.features:
            return "3D printing"
        return "Injection molding"

    @staticmethod
    def _complexity(attrs: MergedAttributes, components: list[ProductComponent]) -> str:
        if attrs.manufacturing is not None and attrs.manufacturing.complexity:
            return attrs.manufacturing.complexity
        return "moderate" if len(components) > 2 else "simple"


def model_fingerprint(attrs: MergedAttributes, preferences: Preferences) -> str:
    """Stable hash of everything that determines a built model."""
    payload = json.dumps(
        {
            "attributes": attrs.model_dump(mode="json", exclude={"sources"}),
            "preferences": preferences.model_dump(mode="json"),
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return fingerprint(payload, prefix=None)
