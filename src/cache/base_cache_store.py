# src/cache/base_cache_store.py — v2
"""Abstract persistent cache backend.

Backends raise on I/O failure; DiffCache owns retries and error conversion.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from aicommit.cache.models import CacheEntry, StoreUsage


class BaseCacheStore(ABC):
    """Unified interface for persistent cache backends."""

    async def initialize(self) -> None:
        """Prepare the backend (create directories, open connections)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve an entry; None when absent or unreadable."""

    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store an entry, replacing any previous one."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove an entry; True if something was removed."""

    @abstractmethod
    async def list_keys(self) -> list[str]:
        """Keys of every stored record, readable or not."""

    @abstractmethod
    async def list_entries(self) -> list[CacheEntry]:
        """All readable entries."""

    @abstractmethod
    async def usage(self) -> StoreUsage:
        """Record count and total size on disk."""

    @abstractmethod
    async def clear(self) -> int:
        """Remove every record; returns the number removed."""
