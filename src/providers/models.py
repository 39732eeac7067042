# src/providers/models.py — v2
"""Provider-level types: Message, ImageInput, ProviderReply."""

from __future__ import annotations

import base64
import re
from typing import Any, Literal

from pydantic import BaseModel

_DATA_URI = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w=-]+)*?;base64,(?P<data>.*)$", re.S)

DEFAULT_IMAGE_MIME = "image/png"


class Message(BaseModel):
    """Single message in a conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


class ImageInput(BaseModel):
    """Image payload kept as base64 text, the way it arrives from clients."""

    data_b64: str
    media_type: str = DEFAULT_IMAGE_MIME

    @classmethod
    def from_payload(cls, payload: str) -> ImageInput:
        """Accept a ``data:`` URI or bare base64."""
        match = _DATA_URI.match(payload.strip())
        if match:
            return cls(
                data_b64=match.group("data"),
                media_type=match.group("mime") or DEFAULT_IMAGE_MIME,
            )
        return cls(data_b64=payload.strip())

    @property
    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.data_b64}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data_b64)


class ProviderReply(BaseModel):
    """Normalized raw reply from any analysis provider."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str
    provider: str
    latency_ms: int = 0
    raw_response: Any = None
