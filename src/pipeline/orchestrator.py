# src/pipeline/orchestrator.py — v3
"""Analysis orchestrator: cache check, provider cascade, heuristic, store.

For one request the steps are strictly sequential:

  CacheCheck → Provider[0] → Provider[1] → ... → Heuristic → Store

A cache hit returns the stored result unchanged. Every provider failure
advances the cascade; the heuristic tier cannot fail, so analyze() always
returns a result. No retries and no parallel tiers.
"""

from __future__ import annotations

import logging
import time
import uuid

from pydantic import BaseModel, Field, ValidationError

from agenticad.analysis.normalizer import PhotoInput, SketchInput, TextInput, normalize
from agenticad.cache.fingerprint import image_analysis_key, text_analysis_key
from agenticad.cache.policy import cache_kind_for
from agenticad.core.errors import CacheUnavailable, ConfigMissing, ProviderError
from agenticad.core.models import AnalysisKind, AnalysisRequest, AnalysisResult
from agenticad.logging.context import (
    clear_context,
    get_context,
    set_request_context,
    set_stage_context,
)
from agenticad.pipeline.context import CoreContext

logger = logging.getLogger(__name__)


class AnalysisOutcome(BaseModel):
    """Result of one orchestrated analysis plus how it was obtained.

    ``attempts`` lists each step taken, e.g. ``["cache:miss",
    "openai:transport_failure", "google:success"]``.
    """

    result: AnalysisResult
    cache_hit: bool = False
    cache_key: str
    attempts: list[str] = Field(default_factory=list)


class AnalysisOrchestrator:
    """Runs the cascade for AnalysisRequest values.

    Args:
        context: Shared settings, cache, providers and call logger.
    """

    def __init__(self, context: CoreContext) -> None:
        self._context = context

    def cache_key_for(self, request: AnalysisRequest) -> str:
        settings = self._context.settings
        if request.is_image:
            return image_analysis_key(
                request.raw_content, request.analysis_kind, settings.image_prefix_chars
            )
        return text_analysis_key(request.raw_content, settings.text_prefix_chars)

    async def analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        """Produce an AnalysisResult for ``request``. Never raises."""
        owns_context = get_context().request_id is None
        if owns_context:
            set_request_context(str(uuid.uuid4()), request.modality)
        try:
            return await self._analyze(request)
        finally:
            if owns_context:
                clear_context()

    async def _analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        cache = self._context.cache
        key = self.cache_key_for(request)
        kind = cache_kind_for(request.analysis_kind)
        attempts: list[str] = []

        set_stage_context("cache_check")
        cached = await self._read_cache(key, kind)
        if cached is not None:
            attempts.append("cache:hit")
            logger.info("Cache hit for %s (source=%s)", key, cached.source)
            return AnalysisOutcome(
                result=cached, cache_hit=True, cache_key=key, attempts=attempts
            )
        attempts.append("cache:miss")

        result = await self._run_providers(request, attempts)

        if result is None:
            set_stage_context("heuristic")
            result = cache.fallback_for(kind, {"input": request.raw_content})
            attempts.append("heuristic:success")
            logger.info("All providers failed, using heuristic result for %s", key)

        set_stage_context("store")
        rule = cache.policy.for_result(kind, result.source)
        try:
            await cache.put(
                key,
                kind,
                result.model_dump(mode="json"),
                ttl_ms=rule.ttl_ms,
                sync_to_remote=rule.sync_to_remote,
            )
        except CacheUnavailable as e:
            logger.warning("Cache write bypassed: %s", e)

        return AnalysisOutcome(result=result, cache_key=key, attempts=attempts)

    async def analyze_text(self, text: str) -> AnalysisOutcome:
        return await self.analyze(normalize(TextInput(content=text)))

    async def analyze_image(
        self, image_data: str, analysis_kind: AnalysisKind = "image_analysis"
    ) -> AnalysisOutcome:
        if analysis_kind == "sketch_analysis":
            request = normalize(SketchInput(image_data=image_data))
        elif analysis_kind == "image_analysis":
            request = normalize(PhotoInput(image_data=image_data))
        else:
            raise ValueError(f"Not an image analysis kind: {analysis_kind!r}")
        return await self.analyze(request)

    # --- Internal helpers ---

    async def _read_cache(self, key: str, kind: str) -> AnalysisResult | None:
        try:
            entry = await self._context.cache.get(key, kind)  # type: ignore[arg-type]
        except CacheUnavailable as e:
            logger.warning("Cache read bypassed: %s", e)
            return None
        if entry is None:
            return None
        try:
            return AnalysisResult.model_validate(entry.value)
        except ValidationError as e:
            logger.warning("Discarding malformed cache entry %s: %s", key, e)
            return None

    async def _run_providers(
        self, request: AnalysisRequest, attempts: list[str]
    ) -> AnalysisResult | None:
        call_logger = self._context.call_logger
        for provider in self._context.providers:
            set_stage_context("provider", provider.name)
            t0 = time.monotonic()
            try:
                result = await provider.analyze(request)
            except ConfigMissing as e:
                call_logger.record(
                    provider.name, request.analysis_kind, "skipped", e.kind
                )
                attempts.append(f"{provider.name}:{e.kind}")
                logger.debug("Skipping %s: %s", provider.name, e)
                continue
            except ProviderError as e:
                latency = int((time.monotonic() - t0) * 1000)
                call_logger.record(
                    provider.name, request.analysis_kind, "failed", e.kind, latency
                )
                attempts.append(f"{provider.name}:{e.kind}")
                logger.warning("Provider %s failed (%s): %s", provider.name, e.kind, e)
                continue
            except Exception as e:
                latency = int((time.monotonic() - t0) * 1000)
                call_logger.record(
                    provider.name, request.analysis_kind, "failed",
                    "transport_failure", latency,
                )
                attempts.append(f"{provider.name}:transport_failure")
                logger.warning(
                    "Provider %s raised %s: %s", provider.name, type(e).__name__, e
                )
                continue

            latency = int((time.monotonic() - t0) * 1000)
            call_logger.record(
                provider.name, request.analysis_kind, "success", latency_ms=latency
            )
            attempts.append(f"{provider.name}:success")
            logger.info(
                "Provider %s answered (source=%s, %dms)",
                provider.name, result.source, latency,
            )
            return result
        return None
