# src/providers/google_adapter.py — v2
"""Google Gemini adapter, secondary analysis tier by default.

Uses the google-generativeai SDK. Images are sent as inline data parts.
"""

from __future__ import annotations

import time
from typing import Any

from agenticad.core.errors import (
    NonSuccessResponse,
    ProviderError,
    TransportFailure,
    UnparseableResponse,
)
from agenticad.providers.base_provider import ChatAnalysisProvider, Tier
from agenticad.providers.models import ImageInput, Message, ProviderReply


class GoogleAdapter(ChatAnalysisProvider):
    """Google Gemini adapter."""

    default_tier = "secondary"

    def __init__(
        self,
        model: str = "gemini-1.5-flash",
        api_key: str = "",
        temperature: float = 0.3,
        max_tokens: int = 2000,
        timeout_s: float = 30.0,
        client: Any = None,
        tier: Tier | None = None,
    ) -> None:
        super().__init__(model=model, timeout_s=timeout_s, tier=tier)
        self._api_key = api_key
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = client

    @property
    def name(self) -> str:
        return "google"

    @property
    def is_configured(self) -> bool:
        return bool(self._client is not None or self._api_key)

    def _get_model(self, system: str) -> Any:
        if self._client is not None:
            return self._client
        import google.generativeai as genai

        genai.configure(api_key=self._api_key)
        return genai.GenerativeModel(self._model, system_instruction=system)

    async def complete(self, messages: list[Message], system: str) -> ProviderReply:
        contents = []
        for m in messages:
            role = "model" if m.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": m.content}]})
        return await self._generate(contents, system)

    async def complete_with_vision(
        self, messages: list[Message], images: list[ImageInput], system: str
    ) -> ProviderReply:
        parts: list[dict[str, Any]] = []
        for m in messages:
            parts.append({"text": m.content})
        for img in images:
            parts.append(
                {"inline_data": {"mime_type": img.media_type, "data": img.to_bytes()}}
            )
        return await self._generate(parts, system)

    async def _generate(self, contents: Any, system: str) -> ProviderReply:
        model = self._get_model(system)
        t0 = time.monotonic()
        resp = await model.generate_content_async(
            contents,
            generation_config={
                "max_output_tokens": self._max_tokens,
                "temperature": self._temperature,
            },
        )
        latency = int((time.monotonic() - t0) * 1000)

        try:
            text = resp.text
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked or empty.
            raise UnparseableResponse(self.name, str(e)) from e

        usage = getattr(resp, "usage_metadata", None)
        return ProviderReply(
            content=text or "",
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider=self.name,
            latency_ms=latency,
            raw_response=resp,
        )

    def map_error(self, error: Exception) -> ProviderError:
        from google.api_core import exceptions as gexc

        if isinstance(error, (gexc.DeadlineExceeded, gexc.RetryError)):
            return TransportFailure(self.name, str(error))
        if isinstance(error, gexc.GoogleAPICallError):
            return NonSuccessResponse(self.name, error.code, error.message or str(error))
        return TransportFailure(self.name, f"{type(error).__name__}: {error}")
