# tests/unit/cache/test_unit_cache_factory.py — v2
"""Tests for cache/cache_factory.py and the BaseCacheStore contract."""

from __future__ import annotations

from pathlib import Path

import pytest

from aicommit.cache.base_cache_store import BaseCacheStore
from aicommit.cache.cache_factory import create_cache_store, create_diff_cache
from aicommit.cache.diff_cache import DiffCache
from aicommit.cache.json_store import JsonCacheStore


class TestBaseCacheStore:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseCacheStore()  # type: ignore[abstract]

    def test_has_required_methods(self):
        for method in ["get", "put", "delete", "list_keys", "list_entries", "usage", "clear"]:
            assert hasattr(BaseCacheStore, method)


class TestCreateCacheStore:
    def test_json_backend(self, settings, tmp_path: Path):
        store = create_cache_store(settings)
        assert isinstance(store, JsonCacheStore)
        assert store.root == tmp_path / "cache"

    def test_default_without_settings(self):
        store = create_cache_store()
        assert isinstance(store, JsonCacheStore)
        assert store.root == Path("~/.ai-commit-generator/cache").expanduser()

    def test_none_backend(self, settings_factory):
        assert create_cache_store(settings_factory(cache_backend="none")) is None

    def test_unsupported_backend(self, settings):
        bad = settings.model_copy(update={"cache_backend": "redis"})
        with pytest.raises(ValueError, match="Unsupported"):
            create_cache_store(bad)


class TestCreateDiffCache:
    def test_wired_to_store(self, settings):
        cache = create_diff_cache(settings)
        assert isinstance(cache, DiffCache)
        assert isinstance(cache.store, JsonCacheStore)

    def test_memory_only(self, settings_factory):
        cache = create_diff_cache(settings_factory(cache_backend="none"))
        assert cache.store is None
