# src/cache/memory_cache.py — v1
"""In-process memory tier: an LRU map with per-entry expiry.

All operations are synchronous; nothing here touches the disk.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable, Iterator

from aicommit.cache.models import CacheEntry


class MemoryCache:
    """LRU cache of CacheEntry objects keyed by exact diff key."""

    def __init__(
        self,
        max_entries: int = 256,
        ttl_seconds: float = 86_400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._max_entries = max_entries
        self._ttl = ttl_seconds
        self._clock = clock
        self._data: OrderedDict[str, tuple[float, CacheEntry]] = OrderedDict()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        self.prune_expired()
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.peek(key) is not None

    def get(self, key: str) -> CacheEntry | None:
        """Return a live entry and mark it as recently used."""
        entry = self.peek(key)
        if entry is not None:
            self._data.move_to_end(key)
        return entry

    def peek(self, key: str) -> CacheEntry | None:
        """Return a live entry without touching recency."""
        item = self._data.get(key)
        if item is None:
            return None
        expires_at, entry = item
        if self._expired(expires_at):
            del self._data[key]
            return None
        return entry

    def set(self, key: str, entry: CacheEntry) -> None:
        """Insert or overwrite an entry, evicting the least recently used."""
        expires_at = self._clock() + self._ttl if self._ttl > 0 else float("inf")
        self._data[key] = (expires_at, entry)
        self._data.move_to_end(key)
        while len(self._data) > self._max_entries:
            self._data.popitem(last=False)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        """Live keys, most recently used first."""
        self.prune_expired()
        return list(reversed(self._data.keys()))

    def items(self) -> Iterator[tuple[str, CacheEntry]]:
        """Live entries, most recently used first."""
        for key in self.keys():
            entry = self.peek(key)
            if entry is not None:
                yield key, entry

    def prune_expired(self) -> int:
        expired = [key for key, (exp, _) in self._data.items() if self._expired(exp)]
        for key in expired:
            del self._data[key]
        return len(expired)

    def flush(self) -> None:
        self._data.clear()

    def _expired(self, expires_at: float) -> bool:
        return self._clock() >= expires_at
