# src/providers/provider_factory.py — v4
"""Factory: instantiate provider adapters from settings.

The analysis cascade order comes from PROVIDER_ORDER. Adapters without
credentials are still built; they skip themselves with ConfigMissing.
"""

from __future__ import annotations

import importlib
import logging

from agenticad.config.settings import Settings
from agenticad.providers.base_provider import AnalysisProvider, SpeechProvider, Tier

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "openai": "agenticad.providers.openai_adapter.OpenAIAdapter",
    "google": "agenticad.providers.google_adapter.GoogleAdapter",
}

_SPEECH_CLASS = "agenticad.providers.elevenlabs_adapter.ElevenLabsAdapter"


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def _adapter_kwargs(provider: str, settings: Settings) -> dict[str, object]:
    common: dict[str, object] = {
        "timeout_s": settings.provider_timeout_s,
        "temperature": settings.openai_temperature,
        "max_tokens": settings.openai_max_tokens,
    }
    if provider == "openai":
        gateway_headers: dict[str, str] | None = None
        if settings.uses_openai_gateway:
            gateway_headers = {
                "x-pica-secret": settings.pica_secret_key,
                "x-pica-connection-key": settings.pica_openai_connection_key,
            }
            if settings.pica_openai_action_id:
                gateway_headers["x-pica-action-id"] = settings.pica_openai_action_id
        return {
            **common,
            "model": settings.openai_model,
            "api_key": settings.openai_api_key,
            "base_url": settings.openai_base_url,
            "gateway_headers": gateway_headers,
        }
    if provider == "google":
        return {
            **common,
            "model": settings.gemini_model,
            "api_key": settings.google_api_key,
        }
    return common


def create_provider(
    provider: str, settings: Settings, tier: Tier | None = None
) -> AnalysisProvider:
    """Instantiate one analysis adapter by name.

    ``tier`` overrides the adapter default provenance tier.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported analysis provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )
    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])
    logger.debug("Creating analysis provider: %s", provider)
    return adapter_cls(**_adapter_kwargs(provider, settings), tier=tier)


def create_analysis_providers(settings: Settings) -> list[AnalysisProvider]:
    """Adapters in cascade order.

    The first adapter is the primary tier and every later one secondary,
    whichever vendor sits in each position.
    """
    providers = [
        create_provider(name, settings, tier="primary" if i == 0 else "secondary")
        for i, name in enumerate(settings.provider_order_list)
    ]
    unconfigured = [p.name for p in providers if not p.is_configured]
    if unconfigured:
        logger.info(
            "Providers without credentials will be skipped: %s",
            ", ".join(unconfigured),
        )
    return providers


def create_speech_provider(settings: Settings) -> SpeechProvider:
    adapter_cls = _import_class(_SPEECH_CLASS)
    return adapter_cls(
        api_key=settings.elevenlabs_api_key,
        base_url=settings.elevenlabs_base_url,
        model_id=settings.elevenlabs_model_id,
        max_chars=settings.speech_max_chars,
        timeout_s=settings.provider_timeout_s,
    )


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
