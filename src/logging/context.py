# src/logging/context.py — v1
"""Contextual logging support — attach request_id, resource, collection to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per logical request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_resource: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "resource", default=None
)
_collection: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "collection", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    resource: str | None = None
    collection: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        resource=_resource.get(),
        collection=_collection.get(),
    )


def set_request_context(request_id: str, resource: str | None = None) -> None:
    """Set request-level context (called once per logical API request)."""
    _request_id.set(request_id)
    _resource.set(resource)


def set_collection_context(collection: str) -> None:
    """Set collection-level context (called per optimistic mutation)."""
    _collection.set(collection)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _resource.set(None)
    _collection.set(None)
