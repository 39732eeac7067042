# src/core/errors.py — v1
"""Error taxonomy for the analysis core.

Provider errors drive the cascade forward; CacheUnavailable makes the
orchestrator bypass the cache. Malformed replies are recovered inside
adapters; UnparseableResponse only signals a reply with no content at all.
"""

from __future__ import annotations

from typing import Literal

ProviderErrorKind = Literal[
    "config_missing",
    "transport_failure",
    "non_success_response",
    "unparseable_response",
]


class AgenticadError(Exception):
    """Base class for all agenticad errors."""


class ProviderError(AgenticadError):
    """A provider adapter could not produce a result."""

    kind: ProviderErrorKind = "transport_failure"

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ConfigMissing(ProviderError):
    """Required credential absent; the adapter is skipped."""

    kind = "config_missing"


class TransportFailure(ProviderError):
    """Network error or timeout."""

    kind = "transport_failure"


class NonSuccessResponse(ProviderError):
    """Provider answered with an error status."""

    kind = "non_success_response"

    def __init__(self, provider: str, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        super().__init__(provider, f"HTTP {status_code}: {message}")


class UnparseableResponse(ProviderError):
    """Provider reply could not be interpreted at all."""

    kind = "unparseable_response"


class CacheUnavailable(AgenticadError):
    """Local cache tier is inaccessible."""

    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Cache {operation} failed: {cause}")
