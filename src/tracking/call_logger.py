# src/tracking/call_logger.py — v2
"""Provider call logging: records every adapter invocation of the cascade."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from agenticad.tracking.models import ProviderCallRecord

logger = logging.getLogger(__name__)


class CallLogger:
    """Accumulates provider call records for the lifetime of a context."""

    def __init__(self) -> None:
        self._records: list[ProviderCallRecord] = []

    def record(
        self,
        provider: str,
        kind: str,
        status: str = "success",
        error_kind: str | None = None,
        latency_ms: int = 0,
    ) -> ProviderCallRecord:
        """Record a provider call.

        Args:
            provider: Adapter name (e.g. "openai").
            kind: Request kind (text_analysis, image_analysis, speech...).
            status: success, failed, or skipped (credentials missing).
            error_kind: ProviderError kind when not successful.
            latency_ms: Wall time spent in the adapter.

        Returns:
            The recorded ProviderCallRecord.
        """
        record = ProviderCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            provider=provider,
            kind=kind,
            status=status,
            error_kind=error_kind,
            latency_ms=latency_ms,
        )
        self._records.append(record)
        logger.debug(
            "Provider call: provider=%s kind=%s status=%s", provider, kind, status
        )
        return record

    @property
    def records(self) -> list[ProviderCallRecord]:
        """All recorded calls."""
        return list(self._records)

    @property
    def total_calls(self) -> int:
        """Calls that reached the network (skips excluded)."""
        return sum(1 for r in self._records if r.status != "skipped")

    def calls_for(self, provider: str) -> list[ProviderCallRecord]:
        return [r for r in self._records if r.provider == provider]
