# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for diff size limits, cache tiers and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Longest prefix kept by the line truncation rules in chunking.line_processor.
_LONGEST_TRUNCATION_PREFIX = 300


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Diff size management ===
    max_chunk_size: int = 4000
    max_diff_lines: int = 1000
    max_line_length: int = 500
    chunk_threshold_ratio: float = 1.25
    chunking_strategy: Literal["structural", "line"] = "structural"

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["json", "none"] = "json"
    cache_root: Path = Path("~/.ai-commit-generator/cache")
    cache_ttl_seconds: int = 86_400
    cache_max_age_days: float = 1.0
    max_cache_entries: int = 500
    memory_cache_max_entries: int = 256
    cache_io_timeout_s: float = 5.0
    cache_lookup_mode: Literal["validated", "fast"] = "validated"
    similarity_threshold: float = 0.7
    diff_preview_limit: int = 2000

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator(
        "max_chunk_size",
        "max_diff_lines",
        "max_cache_entries",
        "memory_cache_max_entries",
        "diff_preview_limit",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        """Sizes and counts must be strictly positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("similarity_threshold")
    @classmethod
    def validate_similarity_threshold(cls, v: float) -> float:  # noqa: N805
        if not 0.0 <= v <= 1.0:
            raise ValueError("similarity_threshold must be within [0, 1]")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.chunk_threshold_ratio < 1.0:
            errors.append("CHUNK_THRESHOLD_RATIO must be >= 1.0")

        if self.max_line_length <= _LONGEST_TRUNCATION_PREFIX:
            errors.append(
                f"MAX_LINE_LENGTH must be > {_LONGEST_TRUNCATION_PREFIX}"
            )

        if self.cache_ttl_seconds < 0 or self.cache_max_age_days < 0:
            errors.append("Cache TTL and max age must be non-negative")

        if self.cache_io_timeout_s <= 0:
            errors.append("CACHE_IO_TIMEOUT_S must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_max_age_seconds(self) -> float:
        """Persistent-tier max age expressed in seconds."""
        return self.cache_max_age_days * 86_400


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-invocation config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
