# src/analysis/heuristic.py — v2
"""Deterministic keyword/regex attribute extraction.

Last tier of the provider cascade and the emergency path when every cache
and network call fails. Never raises and never returns an empty component
list. No network access.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from agenticad.core.models import (
    CONFIDENCE_BY_SOURCE,
    AnalysisResult,
    Dimensions,
    Manufacturing,
)

logger = logging.getLogger(__name__)

HEURISTIC_CONFIDENCE = CONFIDENCE_BY_SOURCE["heuristic"]
IMAGE_FALLBACK_CONFIDENCE = 0.4

DEFAULT_COMPONENTS = ["body", "interface"]
DEFAULT_FEATURES = ["functional"]
DEFAULT_MATERIALS = ["plastic"]
DEFAULT_REQUIREMENTS = ["durable", "functional"]
DEFAULT_USE_CASE = "general"
DEFAULT_STYLE = "modern"

_I = re.IGNORECASE

# === PATTERN TABLES ===

COMPONENT_PATTERNS: dict[str, re.Pattern[str]] = {
    "holder_body": re.compile(r"holder|container|organizer|rack|caddy|stand", _I),
    "handle": re.compile(r"handle|grip|hold", _I),
    "body": re.compile(r"body|main|core|base", _I),
    "compartments": re.compile(r"compartment|slot|divider|section|pocket", _I),
    "base": re.compile(r"base|bottom|foundation|platform", _I),
    "interface": re.compile(r"button|screen|display|control", _I),
    "cover": re.compile(r"cover|lid|top|cap", _I),
    "stand": re.compile(r"stand|support|leg|mount", _I),
    "connector": re.compile(r"connector|plug|port|cable", _I),
    "sensor": re.compile(r"sensor|detector|monitor", _I),
    "battery": re.compile(r"battery|power|energy", _I),
    "speaker": re.compile(r"speaker|audio|sound", _I),
    "slots": re.compile(r"slot|opening|hole|space", _I),
    "gear": re.compile(r"gear|cog|sprocket|pinion|\bteeth\b", _I),
    "shaft": re.compile(r"shaft|axle|spindle", _I),
    "spring": re.compile(r"spring|coil", _I),
    "hinge": re.compile(r"hinge|pivot", _I),
    "enclosure": re.compile(r"enclosure|housing|casing|\bcase\b", _I),
    "bracket": re.compile(r"bracket|clamp|clip", _I),
    "wheel": re.compile(r"wheel|pulley|roller", _I),
}

# Order matters: the last matching style wins.
STYLE_PATTERNS: dict[str, re.Pattern[str]] = {
    "modern": re.compile(r"modern|contemporary|minimalist|clean|sleek", _I),
    "retro": re.compile(r"retro|vintage|classic|old.school", _I),
    "industrial": re.compile(r"industrial|rugged|metal|steel", _I),
    "ergonomic": re.compile(r"ergonomic|comfortable|user.friendly", _I),
    "compact": re.compile(r"compact|small|portable|mini", _I),
}

MATERIAL_PATTERNS: dict[str, re.Pattern[str]] = {
    "plastic": re.compile(r"plastic|polymer|\bABS\b|\bPLA\b|\bPETG\b|nylon", _I),
    "metal": re.compile(r"metal|alumin(?:i)?um|steel|titanium|brass", _I),
    "wood": re.compile(r"wood|bamboo|timber", _I),
    "glass": re.compile(r"glass|crystal|transparent", _I),
    "rubber": re.compile(r"rubber|silicone|flexible|\bTPU\b", _I),
    "fabric": re.compile(r"fabric|textile|cloth", _I),
}

FEATURE_PATTERNS: dict[str, re.Pattern[str]] = {
    "organizing": re.compile(r"organiz|stor|hold|contain|arrang", _I),
    "kitchen_safe": re.compile(r"food.safe|bpa.free|dishwasher|kitchen", _I),
    "stable": re.compile(r"stable|steady|secure|firm|non.slip", _I),
    "modular": re.compile(r"modular|customizable|expandable|adjustable", _I),
    "easy_clean": re.compile(r"easy.clean|washable|wipe|maintenance", _I),
    "space_saving": re.compile(r"space.saving|compact|efficient|countertop", _I),
    "utensil_specific": re.compile(
        r"utensil|spoon|fork|knife|spatula|whisk|\btool", _I
    ),
    "wireless": re.compile(r"wireless|bluetooth|wifi", _I),
    "waterproof": re.compile(r"waterproof|water.resistant|sealed", _I),
    "portable": re.compile(r"portable|mobile|carry|travel", _I),
    "rechargeable": re.compile(r"rechargeable|battery|usb.charge", _I),
    "durable": re.compile(r"durable|sturdy|strong|robust", _I),
    "lightweight": re.compile(r"lightweight|\blight\b|portable", _I),
    "foldable": re.compile(r"foldable|collapsible|compact", _I),
    "adjustable": re.compile(r"adjustable|customizable|variable", _I),
    "precision": re.compile(r"precision|tolerance|involute|helical|\bmodule\b", _I),
}

# Order matters: the first matching use case wins.
USE_CASE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (
        "kitchen organization",
        re.compile(
            r"kitchen|cook|food|culinary|utensil|spoon|fork|knife|spatula|whisk|cutting|chef",
            _I,
        ),
    ),
    ("office organization", re.compile(r"office|\bwork|desk|business|pen\b|pencil|document", _I)),
    ("home organization", re.compile(r"\bhome|household|domestic|living|bedroom|bathroom", _I)),
    ("technology accessory", re.compile(r"\btech|electronic|digital|smart|phone|tablet|computer", _I)),
    ("outdoor equipment", re.compile(r"outdoor|garden|yard|exterior|camping|hiking", _I)),
    ("tool organization", re.compile(r"\btool|workshop|garage|repair", _I)),
    ("mechanical part", re.compile(r"gear|sprocket|bearing|shaft|pulley|transmission", _I)),
]

MANUFACTURING_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("3D printing", re.compile(r"3d.print|additive|\bFDM\b|\bSLA\b", _I)),
    ("injection molding", re.compile(r"inject|mold(?:ed|ing)?\b|mould", _I)),
    ("CNC machining", re.compile(r"\bCNC\b|machin|milled|lathe", _I)),
    ("laser cutting", re.compile(r"laser", _I)),
    ("casting", re.compile(r"\bcast(?:ing)?\b", _I)),
]

_UTENSIL_HOLDER = re.compile(r"utensil.*holder|kitchen.*organizer|cutlery.*stand", _I)

_REQUIREMENT_PHRASE = re.compile(
    r"\b(?:must|should|needs? to|has to)\s+([^.,;!?]{3,80})", _I
)
_CONSTRAINT_PHRASE = re.compile(
    r"\b(?:under|less than|no more than|at most|maximum|max\.?|within)\s+([^.,;!?]{1,60})",
    _I,
)

# === DIMENSIONS ===

_UNIT_TO_CM = {
    "mm": 0.1,
    "cm": 1.0,
    "m": 100.0,
    "in": 2.54,
    "inch": 2.54,
    "inches": 2.54,
    '"': 2.54,
}
# A unit must not run into a following word ("3 monitors" is not 3 m).
_UNIT = r"(mm|cm|m|inches|inch|in|\")(?![a-z])"
_NUMBER = r"(\d+(?:\.\d+)?)"
_AXIS_WORDS = (
    r"(length|long|width|wide|height|high|tall|diameter|dia|thickness|thick|depth|deep)"
)
_VALUE_THEN_AXIS = re.compile(
    rf"{_NUMBER}\s*{_UNIT}\s*(?:in\s+|of\s+)?{_AXIS_WORDS}\b", _I
)
_AXIS_THEN_VALUE = re.compile(
    rf"\b{_AXIS_WORDS}\s*(?:of|:|=|is)?\s*{_NUMBER}\s*{_UNIT}", _I
)
_TRIPLE = re.compile(
    rf"{_NUMBER}\s*[x×]\s*{_NUMBER}\s*[x×]\s*{_NUMBER}\s*{_UNIT}", _I
)

_AXIS_MAP = {
    "length": "length",
    "long": "length",
    "width": "width",
    "wide": "width",
    "height": "height",
    "high": "height",
    "tall": "height",
    "thickness": "height",
    "thick": "height",
    "depth": "height",
    "deep": "height",
    "diameter": "diameter",
    "dia": "diameter",
}


def _to_cm(value: str, unit: str) -> float:
    return round(float(value) * _UNIT_TO_CM[unit.lower()], 2)


def extract_dimensions(text: str) -> Dimensions | None:
    """Extract overall dimensions in centimetres, or None if none stated."""
    found: dict[str, float] = {}

    triple = _TRIPLE.search(text)
    if triple:
        a, b, c, unit = triple.groups()
        found = {
            "length": _to_cm(a, unit),
            "width": _to_cm(b, unit),
            "height": _to_cm(c, unit),
        }

    pairs = [(m.group(3), m.group(1), m.group(2)) for m in _VALUE_THEN_AXIS.finditer(text)]
    pairs += [(m.group(1), m.group(2), m.group(3)) for m in _AXIS_THEN_VALUE.finditer(text)]
    for axis_word, value, unit in pairs:
        axis = _AXIS_MAP[axis_word.lower()]
        cm = _to_cm(value, unit)
        if axis == "diameter":
            found.setdefault("length", cm)
            found.setdefault("width", cm)
        else:
            found.setdefault(axis, cm)

    if not found:
        return None
    return Dimensions(**found)


# === ANALYSIS ===


def extract_attributes(text: str) -> dict[str, Any]:
    """Run every pattern table over ``text`` without applying defaults."""
    components = [name for name, p in COMPONENT_PATTERNS.items() if p.search(text)]
    materials = [name for name, p in MATERIAL_PATTERNS.items() if p.search(text)]
    features = [name for name, p in FEATURE_PATTERNS.items() if p.search(text)]

    style = None
    for name, pattern in STYLE_PATTERNS.items():
        if pattern.search(text):
            style = name

    use_case = None
    for name, pattern in USE_CASE_PATTERNS:
        if pattern.search(text):
            use_case = name
            break

    method = None
    for name, pattern in MANUFACTURING_PATTERNS:
        if pattern.search(text):
            method = name
            break

    requirements = [m.group(1).strip() for m in _REQUIREMENT_PHRASE.finditer(text)]
    constraints = [m.group(0).strip() for m in _CONSTRAINT_PHRASE.finditer(text)]

    return {
        "components": components,
        "materials": materials,
        "features": features,
        "style": style,
        "use_case": use_case,
        "manufacturing_method": method,
        "requirements": requirements,
        "constraints": constraints,
        "dimensions": extract_dimensions(text),
    }


def analyze_heuristically(text: str) -> AnalysisResult:
    """Infer structured attributes from free text with pattern tables.

    Args:
        text: User description or transcript. Non-string input is coerced.

    Returns:
        AnalysisResult with source "heuristic" and a fixed low confidence.
    """
    try:
        return _analyze(text if isinstance(text, str) else str(text or ""))
    except Exception:
        logger.exception("Heuristic analysis failed, returning defaults")
        return default_result()


def _analyze(text: str) -> AnalysisResult:
    attrs = extract_attributes(text)

    components = attrs["components"]
    features = attrs["features"]
    materials = attrs["materials"]
    requirements = attrs["requirements"]
    style = attrs["style"] or DEFAULT_STYLE

    if _UTENSIL_HOLDER.search(text):
        components = ["holder_body", "compartments", "base"]
        features = ["organizing", "kitchen_safe", "stable", "easy_clean"]
        materials = ["stainless steel", "bamboo", "plastic"]
        requirements = ["organize utensils", "stable base", "easy to clean"]
        style = "modern"

    manufacturing = None
    if attrs["manufacturing_method"]:
        manufacturing = Manufacturing(
            method=attrs["manufacturing_method"],
            complexity="moderate" if len(components) > 2 else "simple",
        )

    return AnalysisResult(
        requirements=requirements or DEFAULT_REQUIREMENTS,
        constraints=attrs["constraints"],
        style=style,
        components=components or DEFAULT_COMPONENTS,
        features=features or DEFAULT_FEATURES,
        materials=materials or DEFAULT_MATERIALS,
        dimensions=attrs["dimensions"],
        manufacturing=manufacturing,
        use_case=attrs["use_case"] or DEFAULT_USE_CASE,
        source="heuristic",
        confidence=HEURISTIC_CONFIDENCE,
    )


def default_result() -> AnalysisResult:
    """Safe result when nothing at all can be inferred."""
    return AnalysisResult(
        requirements=DEFAULT_REQUIREMENTS,
        style=DEFAULT_STYLE,
        components=DEFAULT_COMPONENTS,
        features=DEFAULT_FEATURES,
        materials=DEFAULT_MATERIALS,
        use_case=DEFAULT_USE_CASE,
        source="heuristic",
        confidence=HEURISTIC_CONFIDENCE,
    )


def fallback_image_result() -> AnalysisResult:
    """Canned result for an image nobody could analyze."""
    return AnalysisResult(
        style=DEFAULT_STYLE,
        components=["body"],
        features=["analyzed_from_image"],
        use_case=DEFAULT_USE_CASE,
        layout="rectangular",
        source="heuristic",
        confidence=IMAGE_FALLBACK_CONFIDENCE,
    )
