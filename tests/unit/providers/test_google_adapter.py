# tests/unit/providers/test_google_adapter.py — v1
"""Tests for providers/google_adapter.py — fake GenerativeModel."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.api_core import exceptions as gexc

from agenticad.core.errors import (
    ConfigMissing,
    NonSuccessResponse,
    TransportFailure,
    UnparseableResponse,
)
from agenticad.core.models import AnalysisRequest
from agenticad.providers.google_adapter import GoogleAdapter


class _BlockedResponse:
    usage_metadata = None

    @property
    def text(self):
        raise ValueError("candidate was blocked")


def _model(outcome) -> MagicMock:
    model = MagicMock()
    if isinstance(outcome, BaseException):
        model.generate_content_async = AsyncMock(side_effect=outcome)
    else:
        model.generate_content_async = AsyncMock(return_value=outcome)
    return model


class TestGoogleAdapter:
    @pytest.mark.asyncio
    async def test_missing_key_makes_no_call(self, text_request):
        with pytest.raises(ConfigMissing):
            await GoogleAdapter().analyze(text_request)

    @pytest.mark.asyncio
    async def test_text_analysis_is_secondary(self, text_request):
        model = _model(SimpleNamespace(text='{"components": ["speaker"]}', usage_metadata=None))
        result = await GoogleAdapter(api_key="g", client=model).analyze(text_request)
        assert result.source == "secondary-ai"
        assert result.confidence == 0.8
        contents = model.generate_content_async.call_args.args[0]
        assert contents[0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_image_sent_inline(self):
        model = _model(SimpleNamespace(text='{"layout": "round"}', usage_metadata=None))
        request = AnalysisRequest(
            modality="sketch",
            raw_content="data:image/png;base64,aGVsbG8=",
            analysis_kind="sketch_analysis",
        )
        result = await GoogleAdapter(api_key="g", client=model).analyze(request)

        parts = model.generate_content_async.call_args.args[0]
        assert parts[1]["inline_data"] == {"mime_type": "image/png", "data": b"hello"}
        assert result.layout == "round"

    @pytest.mark.asyncio
    async def test_blocked_reply_unparseable(self, text_request):
        adapter = GoogleAdapter(api_key="g", client=_model(_BlockedResponse()))
        with pytest.raises(UnparseableResponse):
            await adapter.analyze(text_request)

    @pytest.mark.asyncio
    async def test_api_error_mapped(self, text_request):
        adapter = GoogleAdapter(api_key="g", client=_model(gexc.ServiceUnavailable("down")))
        with pytest.raises(NonSuccessResponse) as exc_info:
            await adapter.analyze(text_request)
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_deadline_is_transport_failure(self, text_request):
        adapter = GoogleAdapter(api_key="g", client=_model(gexc.DeadlineExceeded("slow")))
        with pytest.raises(TransportFailure):
            await adapter.analyze(text_request)
