# src/pipeline/context.py — v1
"""Process-wide dependencies shared by every analysis and speech call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agenticad.tracking.call_logger import CallLogger

if TYPE_CHECKING:
    from agenticad.cache.tiered_cache import TieredCache
    from agenticad.config.settings import Settings
    from agenticad.providers.base_provider import AnalysisProvider, SpeechProvider


@dataclass
class CoreContext:
    """Settings, cache and providers, built once and passed explicitly.

    ``providers`` is the analysis cascade in order, primary first.
    """

    settings: Settings
    cache: TieredCache
    providers: list[AnalysisProvider] = field(default_factory=list)
    speech_provider: SpeechProvider | None = None
    call_logger: CallLogger = field(default_factory=CallLogger)

    async def close(self) -> None:
        """Flush pending remote syncs and release clients."""
        await self.cache.close()
        for client in (*self.providers, self.speech_provider):
            close = getattr(client, "close", None)
            if close is not None:
                await close()
