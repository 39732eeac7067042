# src/providers/response_parser.py — v1
"""Provider reply parsing into AnalysisResult.

Two grades: a strict parse of a clean JSON object, and a best-effort pass
that repairs common JSON defects or, failing that, keyword-scans the reply
together with the original input. Parsing itself never raises; the grade
is recorded in the result source and confidence.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Literal

from agenticad.analysis.heuristic import extract_attributes
from agenticad.core.models import (
    CONFIDENCE_BY_SOURCE,
    AnalysisResult,
    Dimensions,
    Manufacturing,
)

logger = logging.getLogger(__name__)

Tier = Literal["primary", "secondary"]

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_OBJECT = re.compile(r"\{[\s\S]*\}")
_LINE_COMMENT = re.compile(r"^\s*//.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_]\w*)\s*:")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

_COMPLEXITIES = ("simple", "moderate", "complex")
_LIST_FIELDS = ("requirements", "constraints", "components", "features", "materials")


def clean_json_response(content: str) -> str:
    """Strip markdown fences and surrounding prose, keeping the outer object."""
    cleaned = _FENCE.sub("", content or "").strip()
    match = _OBJECT.search(cleaned)
    return match.group(0) if match else cleaned


def repair_json(text: str) -> str:
    """Fix comments, unquoted keys, trailing commas and single quotes."""
    repaired = _BLOCK_COMMENT.sub("", text)
    repaired = _LINE_COMMENT.sub("", repaired)
    if '"' not in repaired:
        repaired = repaired.replace("'", '"')
    repaired = _UNQUOTED_KEY.sub(r'\1"\2":', repaired)
    repaired = _TRAILING_COMMA.sub(r"\1", repaired)
    return repaired


def parse_strict(content: str) -> dict[str, Any] | None:
    try:
        data = json.loads(clean_json_response(content))
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def parse_lenient(content: str) -> dict[str, Any] | None:
    match = _OBJECT.search(content or "")
    if not match:
        return None
    try:
        data = json.loads(repair_json(match.group(0)))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def parse_analysis(
    content: str,
    tier: Tier,
    original_input: str = "",
) -> AnalysisResult:
    """Parse a provider reply for ``tier`` into a result.

    Args:
        content: Raw reply text.
        tier: Cascade tier that produced the reply.
        original_input: User text scanned with the reply on the keyword path.
            Empty for image requests.

    Returns:
        AnalysisResult sourced ``{tier}-ai`` or ``{tier}-ai-fallback-parse``.
    """
    strict_source = f"{tier}-ai"
    loose_source = f"{tier}-ai-fallback-parse"

    data = parse_strict(content)
    if data is not None:
        try:
            return coerce_result(data, strict_source)
        except ValueError as e:
            logger.debug("Strict %s reply failed coercion: %s", tier, e)

    data = parse_lenient(content)
    if data is not None:
        try:
            return coerce_result(data, loose_source)
        except ValueError as e:
            logger.debug("Repaired %s reply failed coercion: %s", tier, e)

    logger.info("Unparseable %s reply, falling back to keyword scan", tier)
    return keyword_result(f"{content}\n{original_input}", loose_source)


def coerce_result(data: dict[str, Any], source: str) -> AnalysisResult:
    """Map a loosely-typed JSON object onto AnalysisResult.

    Raises:
        ValueError: If the object carries no usable attribute at all.
    """
    fields: dict[str, Any] = {f: _as_str_list(data.get(f)) for f in _LIST_FIELDS}
    # Image replies sometimes name parts "rooms" or "elements".
    if not fields["components"]:
        fields["components"] = _as_str_list(data.get("rooms") or data.get("elements"))

    for key in ("style", "use_case", "layout"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            fields[key] = value.strip()

    fields["dimensions"] = _as_dimensions(data.get("dimensions"))
    fields["manufacturing"] = _as_manufacturing(data.get("manufacturing"))

    if not any(fields.get(k) for k in (*_LIST_FIELDS, "style", "use_case", "layout")):
        raise ValueError("reply contains no design attributes")

    return AnalysisResult(
        **{k: v for k, v in fields.items() if v is not None},
        source=source,
        confidence=CONFIDENCE_BY_SOURCE[source],
    )


def keyword_result(text: str, source: str) -> AnalysisResult:
    """Best-effort result from keyword tables over reply plus input."""
    attrs = extract_attributes(text)
    manufacturing = None
    if attrs["manufacturing_method"]:
        manufacturing = Manufacturing(method=attrs["manufacturing_method"])
    return AnalysisResult(
        requirements=attrs["requirements"],
        constraints=attrs["constraints"],
        style=attrs["style"] or "modern",
        components=attrs["components"] or ["body"],
        features=attrs["features"],
        materials=attrs["materials"],
        dimensions=attrs["dimensions"],
        manufacturing=manufacturing,
        use_case=attrs["use_case"] or "general",
        source=source,
        confidence=CONFIDENCE_BY_SOURCE[source],
    )


# --- Coercion helpers ---


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, dict):
        return [str(k) for k in value]
    if isinstance(value, (list, tuple)):
        out: list[str] = []
        for item in value:
            if isinstance(item, str):
                out.append(item)
            elif isinstance(item, dict) and item.get("name"):
                out.append(str(item["name"]))
            elif item is not None:
                out.append(str(item))
        return out
    return [str(value)]


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else None
    if isinstance(value, str):
        match = _NUMBER.search(value)
        if match:
            number = float(match.group(0))
            return number if number > 0 else None
    return None


def _as_dimensions(value: Any) -> Dimensions | None:
    if not isinstance(value, dict):
        return None
    dims = Dimensions(
        length=_as_number(value.get("length")),
        width=_as_number(value.get("width")),
        height=_as_number(value.get("height")),
    )
    return None if dims.is_empty else dims


def _as_manufacturing(value: Any) -> Manufacturing | None:
    if not isinstance(value, dict):
        return None
    method = value.get("method")
    complexity = str(value.get("complexity", "")).strip().lower()
    manufacturing = Manufacturing(
        method=method.strip() if isinstance(method, str) and method.strip() else None,
        complexity=complexity if complexity in _COMPLEXITIES else None,
    )
    if manufacturing.method is None and manufacturing.complexity is None:
        return None
    return manufacturing
