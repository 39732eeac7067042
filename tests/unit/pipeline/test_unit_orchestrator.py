# tests/unit/pipeline/test_unit_orchestrator.py — v3
"""Tests for pipeline/orchestrator.py — cache check, cascade, heuristic, store."""

from __future__ import annotations

import pytest

from agenticad.cache.policy import DAY_MS, HOUR_MS
from agenticad.cache.tiered_cache import TieredCache
from agenticad.core.errors import (
    ConfigMissing,
    NonSuccessResponse,
    TransportFailure,
    UnparseableResponse,
)
from agenticad.logging.context import clear_context, get_context, set_request_context
from agenticad.pipeline.context import CoreContext
from agenticad.pipeline.orchestrator import AnalysisOrchestrator

ONE_PIXEL_PNG = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk"
    "YPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

# Failure factories by expected attempt label; RuntimeError stands for an adapter bug.
_FAILURES = {
    "config_missing": lambda name: ConfigMissing(name, "no key"),
    "transport_failure": lambda name: TransportFailure(name, "timeout"),
    "non_success_response": lambda name: NonSuccessResponse(name, 503, "unavailable"),
    "unparseable_response": lambda name: UnparseableResponse(name, "empty reply"),
    "unexpected": lambda name: RuntimeError(f"{name} sdk bug"),
}


def _attempt_label(failure: str) -> str:
    return "transport_failure" if failure == "unexpected" else failure


class TestCacheCheck:
    @pytest.mark.asyncio
    async def test_second_call_is_cache_hit(self, make_context, make_provider, text_request, primary_result):
        openai = make_provider("openai", primary_result)
        orchestrator = AnalysisOrchestrator(make_context([openai]))

        first = await orchestrator.analyze(text_request)
        second = await orchestrator.analyze(text_request)

        assert first.cache_hit is False
        assert second.cache_hit is True
        assert second.attempts == ["cache:hit"]
        assert second.result == first.result
        assert openai.analyze.await_count == 1

    @pytest.mark.asyncio
    async def test_one_pixel_image_analyzed_once(self, make_context, make_provider, cache, primary_result):
        openai = make_provider("openai", primary_result)
        orchestrator = AnalysisOrchestrator(make_context([openai]))

        await orchestrator.analyze_image(ONE_PIXEL_PNG)
        outcome = await orchestrator.analyze_image(ONE_PIXEL_PNG)

        assert outcome.cache_hit is True
        assert openai.analyze.await_count == 1
        assert cache.counters.reads == 2
        assert cache.counters.hits == 1

    @pytest.mark.asyncio
    async def test_sketch_and_photo_keys_differ(self, make_context):
        orchestrator = AnalysisOrchestrator(make_context())
        sketch = await orchestrator.analyze_image(ONE_PIXEL_PNG, "sketch_analysis")
        photo = await orchestrator.analyze_image(ONE_PIXEL_PNG, "image_analysis")
        assert sketch.cache_key != photo.cache_key

    @pytest.mark.asyncio
    async def test_expired_entry_reanalyzed(self, make_context, make_provider, clock, text_request, primary_result):
        openai = make_provider("openai", primary_result)
        orchestrator = AnalysisOrchestrator(make_context([openai]))

        await orchestrator.analyze(text_request)
        clock.advance(DAY_MS)
        outcome = await orchestrator.analyze(text_request)

        assert outcome.cache_hit is False
        assert openai.analyze.await_count == 2

    @pytest.mark.asyncio
    async def test_malformed_entry_discarded(self, make_context, make_provider, cache, text_request, primary_result):
        orchestrator = AnalysisOrchestrator(make_context([make_provider("openai", primary_result)]))
        key = orchestrator.cache_key_for(text_request)
        await cache.put(key, "ai_response", {"confidence": "very"}, ttl_ms=DAY_MS)

        outcome = await orchestrator.analyze(text_request)

        assert outcome.cache_hit is False
        assert outcome.result == primary_result


class TestCascade:
    @pytest.mark.asyncio
    async def test_primary_success(self, make_context, make_provider, text_request, primary_result):
        openai = make_provider("openai", primary_result)
        google = make_provider("google", None)
        outcome = await AnalysisOrchestrator(make_context([openai, google])).analyze(text_request)

        assert outcome.result.source == "primary-ai"
        assert outcome.attempts == ["cache:miss", "openai:success"]
        google.analyze.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_through_to_secondary(self, make_context, make_provider, text_request, secondary_result):
        openai = make_provider("openai", TransportFailure("openai", "timeout"))
        google = make_provider("google", secondary_result)
        ctx = make_context([openai, google])

        outcome = await AnalysisOrchestrator(ctx).analyze(text_request)

        assert outcome.result == secondary_result
        assert outcome.attempts == ["cache:miss", "openai:transport_failure", "google:success"]
        statuses = [(r.provider, r.status, r.error_kind) for r in ctx.call_logger.records]
        assert statuses == [
            ("openai", "failed", "transport_failure"),
            ("google", "success", None),
        ]

    @pytest.mark.asyncio
    async def test_all_fail_uses_heuristic(self, make_context, make_provider, cache, text_request):
        ctx = make_context([
            make_provider("openai", NonSuccessResponse("openai", 500, "boom")),
            make_provider("google", UnparseableResponse("google", "empty reply")),
        ])
        orchestrator = AnalysisOrchestrator(ctx)

        outcome = await orchestrator.analyze(text_request)

        assert outcome.result.source == "heuristic"
        assert outcome.result.confidence == 0.4
        assert "speaker" in outcome.result.components
        assert outcome.attempts == [
            "cache:miss",
            "openai:non_success_response",
            "google:unparseable_response",
            "heuristic:success",
        ]
        entry = await cache.get(outcome.cache_key, "ai_response")
        assert entry.ttl_ms == HOUR_MS
        assert entry.sync_to_remote is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("primary_failure", sorted(_FAILURES))
    @pytest.mark.parametrize("secondary_failure", sorted(_FAILURES))
    async def test_every_failure_pair_ends_in_heuristic(
        self, make_context, make_provider, cache, text_request,
        primary_failure, secondary_failure,
    ):
        ctx = make_context([
            make_provider("openai", _FAILURES[primary_failure]("openai")),
            make_provider("google", _FAILURES[secondary_failure]("google")),
        ])

        outcome = await AnalysisOrchestrator(ctx).analyze(text_request)

        assert outcome.result.source == "heuristic"
        assert outcome.attempts == [
            "cache:miss",
            f"openai:{_attempt_label(primary_failure)}",
            f"google:{_attempt_label(secondary_failure)}",
            "heuristic:success",
        ]
        entry = await cache.get(outcome.cache_key, "ai_response")
        assert entry.ttl_ms == HOUR_MS
        assert entry.sync_to_remote is False

    @pytest.mark.asyncio
    async def test_config_missing_is_skipped(self, make_context, make_provider, text_request, secondary_result):
        ctx = make_context([
            make_provider("openai", ConfigMissing("openai", "no key")),
            make_provider("google", secondary_result),
        ])

        outcome = await AnalysisOrchestrator(ctx).analyze(text_request)

        assert outcome.attempts[1] == "openai:config_missing"
        assert ctx.call_logger.records[0].status == "skipped"
        assert ctx.call_logger.total_calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_advances(self, make_context, make_provider, text_request, secondary_result):
        ctx = make_context([
            make_provider("openai", RuntimeError("sdk bug")),
            make_provider("google", secondary_result),
        ])
        outcome = await AnalysisOrchestrator(ctx).analyze(text_request)
        assert outcome.attempts[1] == "openai:transport_failure"
        assert outcome.result.source == "secondary-ai"

    @pytest.mark.asyncio
    async def test_no_providers(self, make_context, text_request):
        outcome = await AnalysisOrchestrator(make_context()).analyze(text_request)
        assert outcome.result.is_heuristic

    @pytest.mark.asyncio
    async def test_image_heuristic_fallback(self, make_context):
        outcome = await AnalysisOrchestrator(make_context()).analyze_image(ONE_PIXEL_PNG)
        assert outcome.result.features == ["analyzed_from_image"]

    @pytest.mark.asyncio
    async def test_stored_with_policy_ttl(self, make_context, make_provider, cache, text_request, primary_result):
        orchestrator = AnalysisOrchestrator(make_context([make_provider("openai", primary_result)]))
        outcome = await orchestrator.analyze(text_request)
        entry = await cache.get(outcome.cache_key, "ai_response")
        assert entry.ttl_ms == DAY_MS
        assert entry.sync_to_remote is True

    @pytest.mark.asyncio
    async def test_invalid_image_kind(self, make_context):
        with pytest.raises(ValueError):
            await AnalysisOrchestrator(make_context()).analyze_image(ONE_PIXEL_PNG, "text_analysis")


class TestCacheUnavailable:
    @pytest.mark.asyncio
    async def test_bypassed_when_local_tier_fails(
        self, settings, clock, failing_store, make_provider, text_request, primary_result
    ):
        ctx = CoreContext(
            settings=settings,
            cache=TieredCache(local=failing_store(), clock=clock),
            providers=[make_provider("openai", primary_result)],
        )
        outcome = await AnalysisOrchestrator(ctx).analyze(text_request)

        assert outcome.result == primary_result
        assert outcome.attempts == ["cache:miss", "openai:success"]


class TestAnalyzeText:
    @pytest.mark.asyncio
    async def test_wraps_normalize(self, make_context, make_provider, primary_result):
        openai = make_provider("openai", primary_result)
        outcome = await AnalysisOrchestrator(make_context([openai])).analyze_text("a lamp")
        request = openai.analyze.call_args.args[0]
        assert request.modality == "text"
        assert outcome.result == primary_result

    @pytest.mark.asyncio
    async def test_empty_text_raises(self, make_context):
        with pytest.raises(ValueError):
            await AnalysisOrchestrator(make_context()).analyze_text("  ")


class TestUnconfiguredProviders:
    @pytest.mark.asyncio
    async def test_helical_gear_without_credentials(self, make_context):
        from agenticad.providers.google_adapter import GoogleAdapter
        from agenticad.providers.openai_adapter import OpenAIAdapter

        ctx = make_context([OpenAIAdapter(), GoogleAdapter()])
        outcome = await AnalysisOrchestrator(ctx).analyze_text(
            "involute helical gear with 36 teeth, 50mm diameter, 10mm thickness"
        )

        assert outcome.result.source == "heuristic"
        assert len(outcome.result.components) >= 1
        assert outcome.result.confidence <= 0.5
        assert outcome.attempts == [
            "cache:miss",
            "openai:config_missing",
            "google:config_missing",
            "heuristic:success",
        ]
        assert ctx.call_logger.total_calls == 0


class TestLogContext:
    @pytest.mark.asyncio
    async def test_own_request_context_cleared(self, make_context, text_request):
        clear_context()
        await AnalysisOrchestrator(make_context()).analyze(text_request)
        assert get_context().request_id is None

    @pytest.mark.asyncio
    async def test_successive_calls_get_distinct_request_ids(self, make_context, make_provider, text_request):
        seen: list[str | None] = []

        async def _capture(request):
            seen.append(get_context().request_id)
            raise TransportFailure("openai", "timeout")

        provider = make_provider("openai")
        provider.analyze.side_effect = _capture
        orchestrator = AnalysisOrchestrator(make_context([provider]))
        clear_context()

        await orchestrator.analyze_text("a walnut bookshelf")
        await orchestrator.analyze_text("a steel water bottle")

        assert None not in seen
        assert seen[0] != seen[1]

    @pytest.mark.asyncio
    async def test_caller_context_preserved(self, make_context, text_request):
        set_request_context("outer-request", "text")
        try:
            await AnalysisOrchestrator(make_context()).analyze(text_request)
            assert get_context().request_id == "outer-request"
        finally:
            clear_context()
