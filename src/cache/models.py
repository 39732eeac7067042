# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats.

Timestamps are epoch milliseconds so expiry arithmetic stays integral.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

CacheKind = Literal["ai_response", "image_analysis", "voice_synthesis", "model_data"]

CACHE_KINDS: tuple[str, ...] = (
    "ai_response",
    "image_analysis",
    "voice_synthesis",
    "model_data",
)


class CacheEntry(BaseModel):
    """Single cache entry.

    ``value`` holds an AnalysisResult dump, a product model dump, or a
    base64 audio string for speech.
    """

    key: str
    kind: CacheKind
    value: Any
    created_at_ms: int
    ttl_ms: int = Field(gt=0)
    sync_to_remote: bool = True

    @property
    def expires_at_ms(self) -> int:
        return self.created_at_ms + self.ttl_ms

    def is_expired(self, now_ms: int) -> bool:
        """Entry is logically absent from ``created_at_ms + ttl_ms`` onwards."""
        return now_ms >= self.expires_at_ms

    def approx_size(self) -> int:
        """Serialized size in bytes, used for diagnostics only."""
        return len(self.model_dump_json())


class CacheStats(BaseModel):
    """Read-only diagnostics over both tiers."""

    local_entries: int = 0
    remote_entries: int = 0
    total_size_approx: int = 0
    oldest_entry_timestamp: int | None = None
    newest_entry_timestamp: int | None = None
    expired_entries: int = 0
    entries_by_kind: dict[str, int] = Field(default_factory=dict)
    remote_available: bool = False
