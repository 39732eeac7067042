# src/tracking/models.py — v2
"""Tracking models: ProviderCallRecord, CacheCounters."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class ProviderCallRecord(BaseModel):
    """One provider adapter invocation."""

    call_id: str
    timestamp: datetime
    provider: str
    kind: str
    status: Literal["success", "failed", "skipped"]
    error_kind: str | None = None
    latency_ms: int = 0


class CacheCounters(BaseModel):
    """Running cache access counters for one TieredCache."""

    reads: int = 0
    hits: int = 0
    misses: int = 0
    remote_hits: int = 0
    writes: int = 0
    remote_sync_failures: int = 0

    @property
    def hit_rate(self) -> float:
        return self.hits / self.reads if self.reads else 0.0
