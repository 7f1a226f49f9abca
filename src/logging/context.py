# src/logging/context.py — v2
"""Contextual logging support — attach request_id, flow and scope to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging — set per analysis request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_flow: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "flow", default=None
)
_scope: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scope", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    flow: str | None = None
    scope: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        flow=_flow.get(),
        scope=_scope.get(),
    )


def set_request_context(request_id: str, flow: str) -> None:
    """Set request-level context (called once per analysis request)."""
    _request_id.set(request_id)
    _flow.set(flow)


def set_scope_context(scope: str) -> None:
    """Set the cache scope the current request works on."""
    _scope.set(scope)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _flow.set(None)
    _scope.set(None)
