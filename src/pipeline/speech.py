# src/pipeline/speech.py — v2
"""Cached text-to-speech."""

from __future__ import annotations

import logging
import time

from agenticad.cache.fingerprint import voice_synthesis_key
from agenticad.core.errors import CacheUnavailable, ConfigMissing, ProviderError
from agenticad.pipeline.context import CoreContext

logger = logging.getLogger(__name__)


class SpeechService:
    """Synthesize speech through the cache and the speech provider."""

    def __init__(self, context: CoreContext) -> None:
        self._context = context

    async def synthesize(self, text: str, voice_id: str | None = None) -> str | None:
        """Return base64 audio, or None when synthesis is unavailable.

        Raises:
            ValueError: If ``text`` is blank.
        """
        if not text or not text.strip():
            raise ValueError("Cannot synthesize empty text")

        ctx = self._context
        voice = voice_id or ctx.settings.elevenlabs_default_voice_id
        key = voice_synthesis_key(text, voice)

        try:
            entry = await ctx.cache.get(key, "voice_synthesis")
        except CacheUnavailable as e:
            logger.warning("Cache read bypassed: %s", e)
            entry = None
        if entry is not None and isinstance(entry.value, str):
            logger.info("Using cached voice synthesis for %s", key)
            return entry.value

        provider = ctx.speech_provider
        if provider is None:
            return ctx.cache.fallback_for("voice_synthesis")

        t0 = time.monotonic()
        try:
            audio = await provider.synthesize(text, voice)
        except ConfigMissing as e:
            ctx.call_logger.record(provider.name, "speech", "skipped", e.kind)
            logger.info("Speech synthesis unavailable: %s", e)
            return ctx.cache.fallback_for("voice_synthesis")
        except ProviderError as e:
            latency = int((time.monotonic() - t0) * 1000)
            ctx.call_logger.record(provider.name, "speech", "failed", e.kind, latency)
            logger.warning("Speech synthesis failed (%s): %s", e.kind, e)
            return ctx.cache.fallback_for("voice_synthesis")
        except Exception as e:
            latency = int((time.monotonic() - t0) * 1000)
            ctx.call_logger.record(
                provider.name, "speech", "failed", "transport_failure", latency
            )
            logger.warning(
                "Speech provider %s raised %s: %s", provider.name, type(e).__name__, e
            )
            return ctx.cache.fallback_for("voice_synthesis")

        ctx.call_logger.record(
            provider.name, "speech", "success",
            latency_ms=int((time.monotonic() - t0) * 1000),
        )
        rule = ctx.cache.policy.for_voice()
        try:
            await ctx.cache.put(
                key, "voice_synthesis", audio,
                ttl_ms=rule.ttl_ms, sync_to_remote=rule.sync_to_remote,
            )
        except CacheUnavailable as e:
            logger.warning("Cache write bypassed: %s", e)
        return audio
