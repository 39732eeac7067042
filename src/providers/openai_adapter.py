# src/providers/openai_adapter.py — v2
"""OpenAI GPT adapter, primary analysis tier by default.

Uses the official openai SDK with its own retries disabled. Can run
through an OpenAI-compatible passthrough gateway (base URL plus secret and
connection-key headers) instead of a direct API key.
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

DEFAULT_GATEWAY_URL = "https://api.picaos.com/v1/passthrough"


class OpenAIAdapter(ChatAnalysisProvider):
    """OpenAI GPT adapter."""

    default_tier = "primary"

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: str = "",
        base_url: str = "",
        gateway_headers: dict[str, str] | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        timeout_s: float = 30.0,
        client: Any = None,
        tier: Tier | None = None,
    ) -> None:
        super().__init__(model=model, timeout_s=timeout_s, tier=tier)
        self._api_key = api_key
        self._base_url = base_url
        self._gateway_headers = gateway_headers or {}
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = client

    @property
    def name(self) -> str:
        return "openai"

    @property
    def is_configured(self) -> bool:
        return bool(self._client is not None or self._api_key or self._gateway_headers)

    def _get_client(self) -> Any:
        if self._client is None:
            import openai

            kwargs: dict[str, Any] = {
                # Gateway mode authenticates through headers only.
                "api_key": self._api_key or "gateway",
                "max_retries": 0,
                "timeout": self._timeout_s,
            }
            if self._gateway_headers:
                kwargs["base_url"] = self._base_url or DEFAULT_GATEWAY_URL
                kwargs["default_headers"] = self._gateway_headers
            elif self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = openai.AsyncOpenAI(**kwargs)
        return self._client

    async def complete(self, messages: list[Message], system: str) -> ProviderReply:
        oai_messages: list[dict[str, Any]] = [{"role": "system", "content": system}]
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})
        return await self._create(oai_messages)

    async def complete_with_vision(
        self, messages: list[Message], images: list[ImageInput], system: str
    ) -> ProviderReply:
        content_parts: list[dict[str, Any]] = []
        for m in messages:
            content_parts.append({"type": "text", "text": m.content})
        for img in images:
            content_parts.append({"type": "image_url", "image_url": {"url": img.data_uri}})
        oai_messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": content_parts},
        ]
        return await self._create(oai_messages)

    async def _create(self, oai_messages: list[dict[str, Any]]) -> ProviderReply:
        client = self._get_client()
        t0 = time.monotonic()
        resp = await client.chat.completions.create(
            model=self._model,
            messages=oai_messages,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        latency = int((time.monotonic() - t0) * 1000)

        if not resp.choices:
            raise UnparseableResponse(self.name, "reply has no choices")
        usage = resp.usage
        return ProviderReply(
            content=resp.choices[0].message.content or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self._model,
            provider=self.name,
            latency_ms=latency,
            raw_response=resp,
        )

    def map_error(self, error: Exception) -> ProviderError:
        import openai

        if isinstance(error, openai.APIStatusError):
            return NonSuccessResponse(self.name, error.status_code, str(error))
        if isinstance(error, (openai.APIConnectionError, OSError)):
            return TransportFailure(self.name, str(error) or type(error).__name__)
        return TransportFailure(self.name, f"{type(error).__name__}: {error}")
