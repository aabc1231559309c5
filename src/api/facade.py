# src/api/facade.py — v2
"""Public API facade: single entry point for diff sizing and caching.

Usage:
    from aicommit.api.facade import open_commit_cache

    async with open_commit_cache(settings) as cache:
        prepared = cache.prepare(diff)
        messages = await cache.get(diff)
        if messages is None:
            messages = generate(prepared)   # caller's provider
            await cache.set(diff, messages)

Methods return safe values (None, 0, empty stats) for cache misses and storage
failures. Only arguments of the wrong type raise, as TypeError.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from aicommit.cache.cache_factory import create_diff_cache
from aicommit.cache.diff_cache import DiffCache
from aicommit.cache.models import CacheStats
from aicommit.chunking.diff_size_manager import DiffSizeManager
from aicommit.config.settings import Settings
from aicommit.core.message_ranker import select_best_messages
from aicommit.core.models import DiffUnit, PreparedDiff

logger = logging.getLogger(__name__)

DiffInput = str | DiffUnit


class CommitCache:
    """Cache client: composes the size manager and the two-tier cache."""

    def __init__(
        self,
        cache: DiffCache,
        size_manager: DiffSizeManager | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._cache = cache
        self._size_manager = size_manager or DiffSizeManager(settings=settings)
        self._enabled = True if settings is None else settings.cache_enabled
        self._fast_lookup = settings is not None and settings.cache_lookup_mode == "fast"

    @property
    def cache(self) -> DiffCache:
        return self._cache

    async def open(self) -> None:
        await self._cache.open()

    async def close(self) -> None:
        await self._cache.close()

    # --- Diff sizing ---

    def prepare(self, diff: str, max_size: int | None = None) -> PreparedDiff:
        """Truncate or chunk a diff to the configured budget."""
        return self._size_manager.prepare(_require_text(diff), max_size)

    # --- Cache operations ---

    async def get(self, diff: DiffInput, fast: bool | None = None) -> list[str] | None:
        """Cached messages for a diff or chunk, or None on a miss.

        ``fast`` selects the unvalidated memory-only lookup; by default the
        configured lookup mode applies.
        """
        text = _require_text(diff)
        if not self._enabled:
            return None
        use_fast = self._fast_lookup if fast is None else fast
        if use_fast:
            return self._cache.get_ultra_fast(text)
        return await self._cache.get_validated(text)

    async def set(self, diff: DiffInput, messages: list[str]) -> None:
        """Store messages for a diff or chunk; last write wins."""
        text = _require_text(diff)
        if not isinstance(messages, list) or not all(isinstance(m, str) for m in messages):
            raise TypeError("messages must be a list of str")
        if not self._enabled:
            return
        await self._cache.set_validated(text, messages)

    async def find_similar(self, diff: DiffInput) -> list[str] | None:
        """Messages from a near-miss entry; lower confidence than get()."""
        text = _require_text(diff)
        if not self._enabled:
            return None
        return self._cache.find_similar(text)

    async def clear(self) -> None:
        await self._cache.clear()

    async def get_stats(self) -> CacheStats:
        return await self._cache.get_stats()

    async def cleanup(self) -> int:
        return await self._cache.cleanup()

    # --- Chunk results ---

    @staticmethod
    def merge_chunk_messages(per_unit: list[list[str]], count: int = 3) -> list[str]:
        """Combine message lists produced for each chunk into the best few."""
        if not isinstance(per_unit, list):
            raise TypeError("per_unit must be a list of message lists")
        candidates = [message for messages in per_unit for message in messages]
        return select_best_messages(candidates, count=count)


def _require_text(diff: object) -> str:
    if isinstance(diff, DiffUnit):
        return diff.content
    if isinstance(diff, str):
        return diff
    raise TypeError(f"diff must be str or DiffUnit, got {type(diff).__name__}")


def create_commit_cache(settings: Settings | None = None) -> CommitCache:
    """Build a CommitCache from settings without opening it."""
    return CommitCache(
        cache=create_diff_cache(settings),
        size_manager=DiffSizeManager(settings=settings),
        settings=settings,
    )


@asynccontextmanager
async def open_commit_cache(settings: Settings | None = None) -> AsyncIterator[CommitCache]:
    """Open a CommitCache for the duration of a block."""
    client = create_commit_cache(settings)
    await client.open()
    try:
        yield client
    finally:
        await client.close()
