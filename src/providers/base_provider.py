# src/providers/base_provider.py — v2
"""Provider capabilities and the shared chat-completion analysis base.

The orchestrator only depends on the AnalysisProvider and SpeechProvider
protocols. Concrete chat providers subclass ChatAnalysisProvider, which
owns the credential check, the timeout bound, error mapping and reply
parsing; subclasses only implement the two completion calls.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from agenticad.core.errors import (
    ConfigMissing,
    ProviderError,
    TransportFailure,
    UnparseableResponse,
)
from agenticad.core.models import AnalysisRequest, AnalysisResult
from agenticad.providers.models import ImageInput, Message, ProviderReply
from agenticad.providers.prompts import system_prompt_for, user_prompt_for
from agenticad.providers.response_parser import Tier, parse_analysis

logger = logging.getLogger(__name__)


@runtime_checkable
class AnalysisProvider(Protocol):
    """Anything that can turn an AnalysisRequest into an AnalysisResult."""

    @property
    def name(self) -> str: ...

    @property
    def is_configured(self) -> bool: ...

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult: ...


@runtime_checkable
class SpeechProvider(Protocol):
    """Text-to-speech capability returning base64 audio."""

    @property
    def name(self) -> str: ...

    @property
    def is_configured(self) -> bool: ...

    async def synthesize(self, text: str, voice_id: str) -> str: ...


class ChatAnalysisProvider(ABC):
    """Analysis over a chat-completion model."""

    default_tier: Tier = "primary"

    def __init__(
        self, model: str, timeout_s: float = 30.0, tier: Tier | None = None
    ) -> None:
        self._model = model
        self._timeout_s = timeout_s
        # Provenance follows cascade position, not the vendor.
        self.tier: Tier = tier or self.default_tier

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (openai, google)."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present."""

    @abstractmethod
    async def complete(self, messages: list[Message], system: str) -> ProviderReply:
        """Text completion."""

    @abstractmethod
    async def complete_with_vision(
        self, messages: list[Message], images: list[ImageInput], system: str
    ) -> ProviderReply:
        """Vision-enabled completion (images + text)."""

    @abstractmethod
    def map_error(self, error: Exception) -> ProviderError:
        """Translate an SDK exception into the provider error taxonomy."""

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run one bounded completion and parse it.

        Raises:
            ConfigMissing: Credentials absent; no network call was made.
            TransportFailure: Timeout or network error.
            NonSuccessResponse: Provider answered with an error status.
            UnparseableResponse: Provider answered with no content.
        """
        if not self.is_configured:
            raise ConfigMissing(self.name, "credentials not configured")

        messages = [Message(role="user", content=user_prompt_for(request))]
        system = system_prompt_for(request)

        t0 = time.monotonic()
        try:
            if request.is_image:
                call = self.complete_with_vision(
                    messages, [ImageInput.from_payload(request.raw_content)], system
                )
            else:
                call = self.complete(messages, system)
            reply = await asyncio.wait_for(call, timeout=self._timeout_s)
        except asyncio.TimeoutError as e:
            raise TransportFailure(
                self.name, f"no reply within {self._timeout_s:g}s"
            ) from e
        except ProviderError:
            raise
        except Exception as e:
            raise self.map_error(e) from e

        if not reply.content.strip():
            raise UnparseableResponse(self.name, "empty reply")

        logger.debug(
            "%s replied in %dms (%d chars)",
            self.name, int((time.monotonic() - t0) * 1000), len(reply.content),
        )
        original = "" if request.is_image else request.raw_content
        return parse_analysis(reply.content, self.tier, original_input=original)
