# tests/unit/config/test_unit_settings.py — v2
"""Tests for config/settings.py — defaults, env loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from aicommit.config.settings import ConfigurationError, Settings, load_settings


class TestDefaults:
    def test_size_defaults(self):
        s = Settings(_env_file=None)
        assert s.max_chunk_size == 4000
        assert s.max_diff_lines == 1000
        assert s.max_line_length == 500
        assert s.chunk_threshold_ratio == 1.25
        assert s.chunking_strategy == "structural"

    def test_cache_defaults(self):
        s = Settings(_env_file=None)
        assert s.cache_enabled is True
        assert s.cache_backend == "json"
        assert s.cache_root == Path("~/.ai-commit-generator/cache")
        assert s.cache_ttl_seconds == 86_400
        assert s.cache_max_age_seconds == 86_400
        assert s.max_cache_entries == 500
        assert s.cache_lookup_mode == "validated"
        assert s.similarity_threshold == 0.7
        assert s.diff_preview_limit == 2000

    def test_logging_defaults(self):
        s = Settings(_env_file=None)
        assert s.log_level == "INFO"
        assert s.log_format == "text"
        assert s.log_file is None


class TestEnvLoading:
    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("MAX_CHUNK_SIZE", "2500")
        monkeypatch.setenv("CACHE_BACKEND", "none")
        monkeypatch.setenv("CACHE_LOOKUP_MODE", "fast")
        s = Settings(_env_file=None)
        assert s.max_chunk_size == 2500
        assert s.cache_backend == "none"
        assert s.cache_lookup_mode == "fast"

    def test_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("MAX_DIFF_LINES=250\nUNKNOWN_KEY=ignored\n", encoding="utf-8")
        s = Settings(_env_file=env_file)
        assert s.max_diff_lines == 250

    def test_load_settings_overrides(self):
        s = load_settings(_env_file=None, max_chunk_size=1234)
        assert s.max_chunk_size == 1234


class TestValidation:
    def test_non_positive_size(self):
        with pytest.raises(ValidationError, match="max_chunk_size must be > 0"):
            Settings(_env_file=None, max_chunk_size=0)

    def test_similarity_threshold_range(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, similarity_threshold=1.5)

    def test_invalid_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_backend="redis")

    def test_threshold_ratio(self):
        with pytest.raises(ConfigurationError, match="CHUNK_THRESHOLD_RATIO"):
            Settings(_env_file=None, chunk_threshold_ratio=0.5)

    def test_line_length_above_truncation_prefix(self):
        with pytest.raises(ConfigurationError, match="MAX_LINE_LENGTH"):
            Settings(_env_file=None, max_line_length=200)

    def test_errors_joined(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, cache_ttl_seconds=-1, cache_io_timeout_s=0)
        message = str(exc_info.value)
        assert "non-negative" in message
        assert "CACHE_IO_TIMEOUT_S" in message
        assert "; " in message

    def test_zero_ttl_allowed(self):
        s = Settings(_env_file=None, cache_ttl_seconds=0, cache_max_age_days=0)
        assert s.cache_max_age_seconds == 0
