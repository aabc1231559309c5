# src/cache/cache_factory.py — v3
"""Factories for the persistent backend and the two-tier DiffCache."""

from __future__ import annotations

from aicommit.cache.base_cache_store import BaseCacheStore
from aicommit.cache.diff_cache import DiffCache
from aicommit.config.settings import Settings

DEFAULT_CACHE_ROOT = "~/.ai-commit-generator/cache"


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore | None:
    """Instantiate the configured persistent backend.

    Args:
        settings: Application settings. Defaults to the JSON backend.

    Returns:
        A BaseCacheStore, or None when the backend is ``none`` (memory only).
    """
    backend = "json" if settings is None else settings.cache_backend

    if backend == "none":
        return None

    if backend == "json":
        from aicommit.cache.json_store import JsonCacheStore
        cache_root = DEFAULT_CACHE_ROOT if settings is None else settings.cache_root
        return JsonCacheStore(cache_root=cache_root)

    raise ValueError(f"Unsupported cache backend: {backend!r}")


def create_diff_cache(settings: Settings | None = None) -> DiffCache:
    """Build a DiffCache wired to the configured persistent backend."""
    return DiffCache(store=create_cache_store(settings), settings=settings)
