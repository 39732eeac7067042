# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides a manual clock, an in-memory tiered cache, fake providers and a
ready CoreContext. No network access: every provider is mocked.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from agenticad.cache.memory_store import MemoryCacheStore
from agenticad.cache.tiered_cache import TieredCache
from agenticad.config.settings import Settings
from agenticad.core.models import AnalysisRequest, AnalysisResult
from agenticad.pipeline.context import CoreContext

START_MS = 1_700_000_000_000


class ManualClock:
    """Epoch-ms clock advanced explicitly by tests."""

    def __init__(self, now_ms: int = START_MS) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


# === FIXTURES: Infrastructure ===


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from any .env file, memory cache backend."""
    return Settings(
        _env_file=None,
        cache_backend="memory",
        cache_root=tmp_path / "cache",
        openai_api_key="",
        google_api_key="",
        elevenlabs_api_key="",
        cache_remote_url="",
    )


@pytest.fixture
def local_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def cache(local_store, clock) -> TieredCache:
    return TieredCache(local=local_store, clock=clock)


class FailingStore(MemoryCacheStore):
    """Store whose every operation raises, like an unreadable disk."""

    async def get(self, key):
        raise OSError("disk gone")

    async def put(self, entry):
        raise OSError("disk gone")

    async def clear(self, kind=None):
        raise OSError("disk gone")

    async def list_entries(self):
        raise OSError("disk gone")

    async def count(self):
        raise OSError("disk gone")


@pytest.fixture
def failing_store():
    """Factory for stores that fail every operation."""
    return FailingStore


# === FIXTURES: Sample data ===


@pytest.fixture
def text_request() -> AnalysisRequest:
    return AnalysisRequest(
        modality="text",
        raw_content="A portable bluetooth speaker with a rubber handle",
        analysis_kind="text_analysis",
    )


@pytest.fixture
def primary_result() -> AnalysisResult:
    return AnalysisResult(
        requirements=["portable"],
        style="modern",
        components=["speaker", "handle"],
        features=["wireless", "portable"],
        materials=["rubber", "plastic"],
        use_case="technology accessory",
        source="primary-ai",
        confidence=0.9,
    )


@pytest.fixture
def secondary_result() -> AnalysisResult:
    return AnalysisResult(
        components=["speaker"],
        features=["wireless"],
        source="secondary-ai",
        confidence=0.8,
    )


# === FIXTURES: Fake providers ===


@pytest.fixture
def make_provider():
    """Factory for mocked AnalysisProvider instances.

    ``outcome`` is either an AnalysisResult to return or an exception to raise.
    """

    def _make(name: str, outcome=None) -> MagicMock:
        provider = MagicMock()
        provider.name = name
        provider.is_configured = True
        if isinstance(outcome, BaseException):
            provider.analyze = AsyncMock(side_effect=outcome)
        else:
            provider.analyze = AsyncMock(return_value=outcome)
        return provider

    return _make


@pytest.fixture
def make_context(settings, cache):
    """Factory for a CoreContext over the shared in-memory cache."""

    def _make(providers=None, speech_provider=None) -> CoreContext:
        return CoreContext(
            settings=settings,
            cache=cache,
            providers=list(providers or []),
            speech_provider=speech_provider,
        )

    return _make
