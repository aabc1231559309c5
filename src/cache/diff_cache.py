# src/cache/diff_cache.py — v1
"""Two-tier commit-message cache keyed by diff fingerprint.

The memory tier answers repeated lookups within a process; the persistent
tier (any BaseCacheStore) survives restarts. Lookups are validated: a stored
entry is only returned when the semantic and structural fingerprints of the
querying diff match the ones recorded at write time.

Every public operation converts failures into a safe result (None, 0, or
zeroed stats) after logging them. The cache is an optimization and must never
stop the caller from generating messages live.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from aicommit.cache.base_cache_store import BaseCacheStore
from aicommit.cache.fingerprint import compute_fingerprint, exact_key, extract_code_changes
from aicommit.cache.memory_cache import MemoryCache
from aicommit.cache.models import (
    CacheEntry,
    CacheStats,
    DiffFingerprint,
    MemoryTierStats,
    PersistentTierStats,
)
from aicommit.cache.retry import error_code, with_retry
from aicommit.config.settings import Settings
from aicommit.core.similarity import jaccard_similarity
from aicommit.logging.context import key_prefix, operation_context

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_LIMIT = 2000


def truncate_diff(diff_text: str, limit: int = DEFAULT_PREVIEW_LIMIT) -> str:
    """Bound a diff for storage: first ``limit`` chars plus ``...`` when longer."""
    if len(diff_text) <= limit:
        return diff_text
    return diff_text[:limit] + "..."


class DiffCache:
    """Memory + persistent cache of generated commit messages."""

    truncate_diff = staticmethod(truncate_diff)
    extract_code_changes = staticmethod(extract_code_changes)

    def __init__(
        self,
        store: BaseCacheStore | None = None,
        memory: MemoryCache | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        s = settings
        self._store = store
        self._clock = clock
        self._memory = memory or MemoryCache(
            max_entries=256 if s is None else s.memory_cache_max_entries,
            ttl_seconds=86_400 if s is None else s.cache_ttl_seconds,
            clock=clock,
        )
        self._max_age_s = 86_400.0 if s is None else s.cache_max_age_seconds
        self._max_entries = 500 if s is None else s.max_cache_entries
        self._timeout_s = 5.0 if s is None else s.cache_io_timeout_s
        self._similarity_threshold = 0.7 if s is None else s.similarity_threshold
        self._preview_limit = DEFAULT_PREVIEW_LIMIT if s is None else s.diff_preview_limit
        self._hits = 0
        self._misses = 0

    @property
    def memory(self) -> MemoryCache:
        return self._memory

    @property
    def store(self) -> BaseCacheStore | None:
        return self._store

    # --- Lifecycle ---

    async def open(self) -> None:
        """Prepare the persistent tier and warm the memory tier from it.

        The newest unexpired records are loaded, up to the memory capacity, so
        memory-only lookups (``get_ultra_fast``, ``find_similar``) see entries
        written by earlier processes. Failure leaves the cache memory-only.
        """
        if self._store is None:
            return
        try:
            await self._io("open", self._store.initialize)
            loaded = await self._warm_memory()
        except Exception as e:
            self._log_failure("open", None, e)
            return
        if loaded:
            logger.debug("Loaded %d persistent cache records into memory", loaded)

    async def _warm_memory(self) -> int:
        entries = await self._io("open", self._store.list_entries)  # type: ignore[union-attr]
        live = [entry for entry in entries if not self._is_expired(entry)]
        live.sort(key=lambda entry: entry.created_at, reverse=True)
        newest = live[: self._memory.max_entries]

        loaded = 0
        # Oldest first so the newest record ends up most recently used.
        for entry in reversed(newest):
            if entry.key not in self._memory:
                self._memory.set(entry.key, entry)
                loaded += 1
        return loaded

    async def close(self) -> None:
        if self._store is None:
            return
        try:
            await self._store.close()
        except Exception as e:
            self._log_failure("close", None, e)

    async def __aenter__(self) -> DiffCache:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # --- Lookups ---

    def get_ultra_fast(self, diff_text: str) -> list[str] | None:
        """Exact-key lookup in the memory tier only, without validation."""
        key = None
        try:
            key = exact_key(diff_text)
            entry = self._memory.get(key)
        except Exception as e:
            self._log_failure("get_ultra_fast", key, e)
            return self._record(None)
        return self._record(entry.messages if entry else None)

    async def get_validated(self, diff_text: str) -> list[str] | None:
        """Memory then persistent lookup, accepted only if fingerprints match."""
        key = None
        try:
            fingerprint = compute_fingerprint(diff_text)
            key = fingerprint.exact_key
            with operation_context("get_validated", key):
                return self._record(await self._lookup_validated(fingerprint))
        except Exception as e:
            self._log_failure("get_validated", key, e)
            return self._record(None)

    async def _lookup_validated(self, fingerprint: DiffFingerprint) -> list[str] | None:
        key = fingerprint.exact_key

        entry = self._memory.get(key)
        if entry is not None:
            if entry.matches(fingerprint):
                return entry.messages
            logger.debug("Memory entry rejected: fingerprint mismatch")
            return None

        if self._store is None:
            return None

        entry = await self._io("get_validated", self._store.get, key)
        if entry is None:
            return None
        if self._is_expired(entry):
            logger.debug("Persistent entry expired")
            return None
        if not entry.matches(fingerprint):
            logger.debug("Persistent entry rejected: fingerprint mismatch")
            return None

        self._memory.set(key, entry)
        return entry.messages

    def find_similar_key(self, diff_text: str) -> str | None:
        """Best-effort near-miss lookup over the memory tier.

        An entry with the same quick hash and semantic fingerprint wins
        outright; otherwise the entry whose code-change lines are most similar
        (Jaccard, at least ``similarity_threshold``) is returned.
        """
        try:
            fingerprint = compute_fingerprint(diff_text)
            query = {line.lower() for line in extract_code_changes(diff_text)}
            if not query:
                return None

            best_key: str | None = None
            best_score = 0.0
            for key, entry in self._memory.items():
                if (
                    entry.quick_hash == fingerprint.quick_hash
                    and entry.semantic_fingerprint == fingerprint.semantic
                ):
                    return key
                cached = {line.lower() for line in extract_code_changes(entry.diff_preview)}
                score = jaccard_similarity(query, cached)
                if score >= self._similarity_threshold and score > best_score:
                    best_key, best_score = key, score
            return best_key
        except Exception as e:
            self._log_failure("find_similar_key", None, e)
            return None

    def find_similar(self, diff_text: str) -> list[str] | None:
        """Messages of the most similar memory-tier entry, if any."""
        try:
            key = self.find_similar_key(diff_text)
            if key is None:
                return None
            entry = self._memory.peek(key)
            return list(entry.messages) if entry else None
        except Exception as e:
            self._log_failure("find_similar", None, e)
            return None

    # --- Writes ---

    async def set_validated(self, diff_text: str, messages: list[str]) -> None:
        """Store messages for a diff: memory first, then write-through to disk.

        The memory tier is updated immediately. The call then awaits the
        persistent write, so it returns only once the write has finished, has
        exhausted its retries, or has hit ``cache_io_timeout_s``. Persistent
        failures are logged and never raised.
        """
        key = None
        try:
            fingerprint = compute_fingerprint(diff_text)
            key = fingerprint.exact_key
            entry = CacheEntry(
                key=key,
                messages=list(messages),
                created_at=datetime.fromtimestamp(self._clock(), tz=timezone.utc),
                semantic_fingerprint=fingerprint.semantic,
                structural_fingerprint=fingerprint.structural,
                quick_hash=fingerprint.quick_hash,
                diff_preview=truncate_diff(diff_text, self._preview_limit),
            )
            with operation_context("set_validated", key):
                self._memory.set(key, entry)
                if self._store is not None:
                    await self._io("set_validated", self._store.put, key, entry)
        except Exception as e:
            self._log_failure("set_validated", key, e)

    # --- Maintenance ---

    async def clear(self) -> None:
        """Flush the memory tier and remove every persistent record."""
        self._memory.flush()
        self._hits = 0
        self._misses = 0
        if self._store is None:
            return
        try:
            with operation_context("clear"):
                removed = await self._io("clear", self._store.clear)
                logger.info("Cleared %d persistent cache records", removed)
        except Exception as e:
            self._log_failure("clear", None, e)

    async def get_stats(self) -> CacheStats:
        """Snapshot of both tiers; zeroed stats when anything fails."""
        try:
            total = self._hits + self._misses
            memory = MemoryTierStats(
                keys=len(self._memory),
                hits=self._hits,
                misses=self._misses,
                hit_rate=(self._hits / total * 100) if total else 0.0,
            )
            persistent = PersistentTierStats()
            if self._store is not None:
                usage = await self._io("get_stats", self._store.usage)
                persistent = PersistentTierStats(
                    files=usage.files,
                    size_bytes=usage.size_bytes,
                    size_mb=round(usage.size_bytes / 1024 / 1024, 2),
                )
            return CacheStats(memory=memory, persistent=persistent)
        except Exception as e:
            self._log_failure("get_stats", None, e)
            return CacheStats()

    async def cleanup(self) -> int:
        """Remove unreadable, expired and excess persistent records.

        Excess records (beyond ``max_cache_entries``) are removed oldest first.
        Returns the number of persistent records removed.
        """
        try:
            self._memory.prune_expired()
            if self._store is None:
                return 0

            with operation_context("cleanup"):
                keys = await self._io("cleanup", self._store.list_keys)
                removed = 0
                live: list[tuple[str, CacheEntry]] = []

                for key in keys:
                    try:
                        entry = await self._io("cleanup", self._store.get, key)
                        if entry is None or self._is_expired(entry):
                            removed += await self._evict(key)
                        else:
                            live.append((key, entry))
                    except Exception as e:
                        self._log_failure("cleanup", key, e)

                excess = len(live) - self._max_entries
                if excess > 0:
                    live.sort(key=lambda item: item[1].created_at)
                    for key, _ in live[:excess]:
                        try:
                            removed += await self._evict(key)
                        except Exception as e:
                            self._log_failure("cleanup", key, e)

            if removed:
                logger.info("Cache cleanup removed %d records", removed)
            return removed
        except Exception as e:
            self._log_failure("cleanup", None, e)
            return 0

    # --- Internals ---

    async def _evict(self, key: str) -> int:
        self._memory.delete(key)
        deleted = await self._io("cleanup", self._store.delete, key)  # type: ignore[union-attr]
        return 1 if deleted else 0

    async def _io(
        self, operation: str, fn: Callable[..., Awaitable[Any]], *args: Any
    ) -> Any:
        return await with_retry(fn, *args, operation=operation, timeout_s=self._timeout_s)

    def _is_expired(self, entry: CacheEntry) -> bool:
        if self._max_age_s <= 0:
            return False
        return self._clock() - entry.created_at.timestamp() > self._max_age_s

    def _record(self, messages: list[str] | None) -> list[str] | None:
        if messages is None:
            self._misses += 1
            return None
        self._hits += 1
        return list(messages)

    @staticmethod
    def _log_failure(operation: str, key: str | None, error: BaseException) -> None:
        logger.warning(
            "Cache %s failed (key=%s, code=%s): %s",
            operation, key_prefix(key) or "-", error_code(error), error,
        )
