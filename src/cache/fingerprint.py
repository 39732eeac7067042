# src/cache/fingerprint.py — v1
"""Content fingerprinting for cache keys.

A 32-bit rolling hash rendered in base 36. Only a bounded prefix of the
content is hashed, so the cost is constant for large image data URIs.
Collisions are accepted: the worst case is a stale but plausible cache hit.
"""

from __future__ import annotations

import json
from typing import Any

TEXT_PREFIX_CHARS = 4000
IMAGE_PREFIX_CHARS = 1000

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def fingerprint(content: str, prefix: int | None = TEXT_PREFIX_CHARS) -> str:
    """Return a short printable hash of the first ``prefix`` characters.

    Args:
        content: Text or encoded payload.
        prefix: Number of leading characters hashed. None hashes everything.

    Returns:
        Base-36 string, never empty.
    """
    if not isinstance(content, str):
        content = str(content)
    if prefix is not None:
        content = content[:prefix]

    h = 0
    for ch in content:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    # Reinterpret as signed 32-bit before taking the magnitude.
    if h & 0x80000000:
        h -= 1 << 32
    return _to_base36(abs(h))


def image_fingerprint(data: str, prefix: int = IMAGE_PREFIX_CHARS) -> str:
    """Fingerprint of an image payload (base64 or data URI)."""
    return fingerprint(data, prefix=prefix)


def cache_key(namespace: str, **params: Any) -> str:
    """Build ``{namespace}_{hash}`` from params serialized with sorted keys.

    String params are hashed in full; callers pre-truncate large payloads
    by passing their fingerprint instead.
    """
    serialized = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return f"{namespace}_{fingerprint(serialized, prefix=None)}"


def text_analysis_key(text: str, prefix: int = TEXT_PREFIX_CHARS) -> str:
    return cache_key("text_analysis", input=text[:prefix])


def image_analysis_key(
    image_data: str, analysis_kind: str, prefix: int = IMAGE_PREFIX_CHARS
) -> str:
    return cache_key(
        "image_analysis",
        image_hash=image_fingerprint(image_data, prefix),
        analysis_type=analysis_kind,
    )


def voice_synthesis_key(text: str, voice_id: str) -> str:
    return cache_key("voice_synthesis", text=text, voice_id=voice_id)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    out: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS[rem])
    return "".join(reversed(out))
