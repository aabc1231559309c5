# src/logging/context.py — v2
"""Contextual logging support: attach cache operation and key to log records."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

# Key prefix length shown in logs; full SHA-256 keys are noise.
KEY_PREFIX_LENGTH = 12

_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    operation: str | None = None
    cache_key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(operation=_operation.get(), cache_key=_cache_key.get())


def key_prefix(key: str | None) -> str | None:
    """Shorten a cache key for display."""
    if not key:
        return key
    return key[:KEY_PREFIX_LENGTH]


def set_operation_context(operation: str, cache_key: str | None = None) -> None:
    """Set the cache operation currently executing."""
    _operation.set(operation)
    _cache_key.set(key_prefix(cache_key))


@contextmanager
def operation_context(
    operation: str, cache_key: str | None = None
) -> Iterator[LogContext]:
    """Scope the operation context to a block, restoring the previous one."""
    op_token = _operation.set(operation)
    key_token = _cache_key.set(key_prefix(cache_key))
    try:
        yield get_context()
    finally:
        _operation.reset(op_token)
        _cache_key.reset(key_token)


def clear_context() -> None:
    """Reset all context variables."""
    _operation.set(None)
    _cache_key.set(None)
