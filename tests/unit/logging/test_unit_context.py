# tests/unit/logging/test_unit_context.py — v2
"""Tests for logging/context.py — contextual logging variables."""

from __future__ import annotations

import asyncio

import pytest

from agenticad.logging.context import (
    clear_context,
    get_context,
    set_request_context,
    set_stage_context,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.request_id is None
        assert ctx.stage is None
        assert ctx.as_dict() == {}

    def test_set_request_context(self):
        set_request_context("req-1", "voice")
        ctx = get_context()
        assert ctx.request_id == "req-1"
        assert ctx.modality == "voice"

    def test_stage_resets_provider(self):
        set_stage_context("provider", "openai")
        set_stage_context("store")
        ctx = get_context()
        assert ctx.stage == "store"
        assert ctx.provider is None

    def test_as_dict_skips_none(self):
        set_request_context("req-1")
        assert get_context().as_dict() == {"request_id": "req-1"}

    def test_clear(self):
        set_request_context("req-1", "text")
        set_stage_context("heuristic")
        clear_context()
        assert get_context().as_dict() == {}

    @pytest.mark.asyncio
    async def test_tasks_keep_own_context(self):
        async def run(request_id: str) -> str | None:
            set_request_context(request_id)
            await asyncio.sleep(0)
            return get_context().request_id

        results = await asyncio.gather(run("a"), run("b"))
        assert results == ["a", "b"]
