# src/cache/json_store.py — v2
"""JSON file-based cache store (default CACHE_BACKEND=json).

Stores each entry as its own JSON file under CACHE_ROOT, so records can be
removed individually and a failed write only affects its own key. Writes go
to a temporary file first and are moved into place with os.replace.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from aicommit.cache.base_cache_store import BaseCacheStore
from aicommit.cache.models import CacheEntry, StoreUsage

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using one JSON file per key."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    async def initialize(self) -> None:
        await asyncio.to_thread(self._root.mkdir, parents=True, exist_ok=True)

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        return await asyncio.to_thread(self._read, self._entry_path(key))

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry atomically."""
        await asyncio.to_thread(
            self._write, self._entry_path(key), entry.model_dump_json(indent=2)
        )

    async def delete(self, key: str) -> bool:
        """Remove a cache entry."""
        return await asyncio.to_thread(self._unlink, self._entry_path(key))

    async def list_keys(self) -> list[str]:
        return await asyncio.to_thread(
            lambda: sorted(path.stem for path in self._entry_files())
        )

    async def list_entries(self) -> list[CacheEntry]:
        """List all readable cached entries."""

        def _collect() -> list[CacheEntry]:
            entries: list[CacheEntry] = []
            for path in self._entry_files():
                entry = self._read(path)
                if entry is not None:
                    entries.append(entry)
            return entries

        return await asyncio.to_thread(_collect)

    async def usage(self) -> StoreUsage:
        def _measure() -> StoreUsage:
            files = self._entry_files()
            return StoreUsage(
                files=len(files),
                size_bytes=sum(path.stat().st_size for path in files),
            )

        return await asyncio.to_thread(_measure)

    async def clear(self) -> int:
        def _remove_all() -> int:
            removed = 0
            for path in self._entry_files():
                if self._unlink(path):
                    removed += 1
            return removed

        return await asyncio.to_thread(_remove_all)

    # --- File helpers (run in worker threads) ---

    def _entry_files(self) -> list[Path]:
        if not self._root.is_dir():
            return []
        return [path for path in self._root.glob(f"*{_SUFFIX}") if path.is_file()]

    def _read(self, path: Path) -> CacheEntry | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(**data)
        except (json.JSONDecodeError, ValidationError, TypeError, UnicodeDecodeError) as e:
            logger.warning("Unreadable cache record %s: %s", path.name, e)
            return None

    def _write(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem[:16]}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}{_SUFFIX}"
