# src/api/facade.py — v2
"""Public API facade.

Usage:
    from agenticad.api.facade import create_context, generate_model
    context = create_context()
    response = await generate_model(request, context)

Functions accept an explicit CoreContext; without one they share a
lazily-built process default.
"""

from __future__ import annotations

import logging
import time
import uuid
from statistics import mean
from typing import TYPE_CHECKING

from pydantic import ValidationError

from agenticad.analysis.merger import AttributeMerger, MergedAttributes
from agenticad.analysis.normalizer import normalize_all
from agenticad.analysis.product_builder import ProductModelBuilder, model_fingerprint
from agenticad.api.models import GenerationRequest, GenerationResponse, ProductModel
from agenticad.cache.fingerprint import cache_key
from agenticad.core.errors import CacheUnavailable
from agenticad.core.models import MAX_CONFIDENCE
from agenticad.logging.context import clear_context, set_request_context, set_stage_context
from agenticad.pipeline.context import CoreContext
from agenticad.pipeline.orchestrator import AnalysisOrchestrator
from agenticad.pipeline.speech import SpeechService

if TYPE_CHECKING:
    from agenticad.cache.models import CacheStats
    from agenticad.cache.tiered_cache import Clock, TieredCache
    from agenticad.config.settings import Settings
    from agenticad.providers.base_provider import AnalysisProvider, SpeechProvider

logger = logging.getLogger(__name__)

_default_context: CoreContext | None = None


def create_context(
    settings: Settings | None = None,
    cache: TieredCache | None = None,
    providers: list[AnalysisProvider] | None = None,
    speech_provider: SpeechProvider | None = None,
    clock: Clock | None = None,
) -> CoreContext:
    """Build a CoreContext; any part not given is created from settings.

    Args:
        settings: Global settings. Loaded from .env if None.
        cache: Tiered cache. Built by cache_factory if None.
        providers: Analysis cascade. Built from PROVIDER_ORDER if None.
        speech_provider: Speech adapter. ElevenLabs if None.
        clock: Epoch-ms clock for the cache (tests).
    """
    from agenticad.cache.cache_factory import create_cache
    from agenticad.config.settings import load_settings
    from agenticad.providers.provider_factory import (
        create_analysis_providers,
        create_speech_provider,
    )

    settings = settings or load_settings()
    if cache is None:
        cache = create_cache(settings, clock) if clock else create_cache(settings)
    if providers is None:
        providers = create_analysis_providers(settings)
    if speech_provider is None:
        speech_provider = create_speech_provider(settings)

    return CoreContext(
        settings=settings,
        cache=cache,
        providers=providers,
        speech_provider=speech_provider,
    )


def get_default_context() -> CoreContext:
    """Process-wide context, built on first use."""
    global _default_context
    if _default_context is None:
        _default_context = create_context()
    return _default_context


async def generate_model(
    request: GenerationRequest,
    context: CoreContext | None = None,
) -> GenerationResponse:
    """Analyze every input, merge, and build a product model.

    Never fails for analysis reasons: each input falls back to heuristic
    analysis at worst.

    Raises:
        ValueError: If the request carries no usable input.
    """
    context = context or get_default_context()
    t0 = time.monotonic()
    steps: list[str] = []
    warnings: list[str] = []

    request_id = str(uuid.uuid4())
    set_request_context(request_id)
    try:
        steps.append("Processing inputs...")
        requests = normalize_all(request.inputs)

        orchestrator = AnalysisOrchestrator(context)
        pairs = []
        cache_hits = 0
        for analysis_request in requests:
            set_request_context(request_id, analysis_request.modality)
            outcome = await orchestrator.analyze(analysis_request)
            pairs.append((analysis_request.modality, outcome.result))
            cache_hits += int(outcome.cache_hit)
            if outcome.result.is_heuristic:
                warnings.append(
                    f"{analysis_request.modality} input was analyzed heuristically"
                )
        steps.append("Inputs processed successfully")

        set_stage_context("merge")
        merged = AttributeMerger().merge(pairs)

        steps.append("Generating product model...")
        set_stage_context("build")
        builder = ProductModelBuilder()
        heuristic_only = all(result.is_heuristic for _, result in pairs)
        model = await _build_model(context, builder, merged, request, heuristic_only)
        steps.append("Model generated successfully")

        steps.append("Creating alternative designs...")
        alternatives = builder.alternatives(model)
        steps.append("Alternatives created")

        confidence = min(mean(r.confidence for _, r in pairs), MAX_CONFIDENCE)
        duration_ms = int((time.monotonic() - t0) * 1000)
        logger.info(
            "Generated %s from %d input(s) in %dms (confidence=%.2f)",
            model.id, len(pairs), duration_ms, confidence,
        )
        return GenerationResponse(
            model=model,
            confidence=round(confidence, 4),
            alternatives=alternatives,
            processing_steps=steps,
            warnings=warnings,
            duration_ms=duration_ms,
            sources=[result.source for _, result in pairs],
            cache_hits=cache_hits,
        )
    finally:
        clear_context()


async def synthesize_speech(
    text: str,
    voice_id: str | None = None,
    context: CoreContext | None = None,
) -> str | None:
    """Base64 audio for ``text``, or None when synthesis is unavailable.

    Raises:
        ValueError: If ``text`` is blank.
    """
    context = context or get_default_context()
    return await SpeechService(context).synthesize(text, voice_id)


async def get_cache_stats(context: CoreContext | None = None) -> CacheStats:
    context = context or get_default_context()
    return await context.cache.stats()


async def clear_cache(
    context: CoreContext | None = None, kind: str | None = None
) -> int:
    """Remove cached entries (all kinds by default). Returns local count."""
    context = context or get_default_context()
    return await context.cache.clear(kind)


async def _build_model(
    context: CoreContext,
    builder: ProductModelBuilder,
    merged: MergedAttributes,
    request: GenerationRequest,
    heuristic_only: bool,
) -> ProductModel:
    cache = context.cache
    key = cache_key(
        "model_data", fingerprint=model_fingerprint(merged, request.preferences)
    )
    try:
        entry = await cache.get(key, "model_data")
    except CacheUnavailable as e:
        logger.warning("Cache read bypassed: %s", e)
        entry = None
    if entry is not None:
        try:
            return ProductModel.model_validate(entry.value)
        except ValidationError as e:
            logger.warning("Discarding malformed cached model %s: %s", key, e)

    model = builder.build(merged, request.preferences)
    rule = cache.policy.for_model(heuristic_only=heuristic_only)
    try:
        await cache.put(
            key, "model_data", model.model_dump(mode="json"),
            ttl_ms=rule.ttl_ms, sync_to_remote=rule.sync_to_remote,
        )
    except CacheUnavailable as e:
        logger.warning("Cache write bypassed: %s", e)
    return model
