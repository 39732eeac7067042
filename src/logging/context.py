# src/logging/context.py — v2
"""Contextual logging support: attach request_id, modality, provider, stage.

Values live in context variables, so concurrent requests running as
separate asyncio tasks keep their own context.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_modality: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "modality", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    request_id: str | None = None
    modality: str | None = None
    provider: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        modality=_modality.get(),
        provider=_provider.get(),
        stage=_stage.get(),
    )


def set_request_context(request_id: str, modality: str | None = None) -> None:
    """Set request-level context (once per analysis or generation)."""
    _request_id.set(request_id)
    _modality.set(modality)


def set_stage_context(stage: str, provider: str | None = None) -> None:
    """Set the current cascade stage and, when calling one, its provider."""
    _stage.set(stage)
    _provider.set(provider)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _modality.set(None)
    _provider.set(None)
    _stage.set(None)
