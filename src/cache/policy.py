# src/cache/policy.py — v1
"""TTL and remote-sync policy per cache kind and result provenance.

Heuristic results get a short TTL and stay local; AI results get long TTLs
and are synced. Speech audio is deterministic per (text, voice) and keeps
the longest TTL.
"""

from __future__ import annotations

from dataclasses import dataclass

from agenticad.cache.models import CacheKind

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def cache_kind_for(analysis_kind: str) -> CacheKind:
    """Map an AnalysisRequest.analysis_kind to its cache kind."""
    if analysis_kind in ("image_analysis", "sketch_analysis"):
        return "image_analysis"
    return "ai_response"


@dataclass(frozen=True)
class CacheRule:
    """Resolved TTL and sync flag for one write."""

    ttl_ms: int
    sync_to_remote: bool


@dataclass(frozen=True)
class CachePolicy:
    """Configurable TTL table."""

    text_primary_ttl_ms: int = DAY_MS
    text_secondary_ttl_ms: int = DAY_MS
    image_primary_ttl_ms: int = 7 * DAY_MS
    image_secondary_ttl_ms: int = 3 * DAY_MS
    heuristic_ttl_ms: int = HOUR_MS
    voice_ttl_ms: int = 30 * DAY_MS
    model_ttl_ms: int = 7 * DAY_MS

    def for_result(self, kind: str, source: str) -> CacheRule:
        """Rule for an analysis result of ``source`` stored under ``kind``."""
        if source == "heuristic":
            return CacheRule(self.heuristic_ttl_ms, sync_to_remote=False)
        primary = source.startswith("primary")
        if kind == "image_analysis":
            ttl = self.image_primary_ttl_ms if primary else self.image_secondary_ttl_ms
        else:
            ttl = self.text_primary_ttl_ms if primary else self.text_secondary_ttl_ms
        return CacheRule(ttl, sync_to_remote=True)

    def for_voice(self) -> CacheRule:
        return CacheRule(self.voice_ttl_ms, sync_to_remote=True)

    def for_model(self, heuristic_only: bool = False) -> CacheRule:
        if heuristic_only:
            return CacheRule(self.heuristic_ttl_ms, sync_to_remote=False)
        return CacheRule(self.model_ttl_ms, sync_to_remote=True)
