# src/cache/models.py — v2
"""Cache domain models: DiffFingerprint, CacheEntry, CacheStats."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class DiffFingerprint(BaseModel):
    """All identifiers derived from one diff."""

    exact_key: str
    semantic: str
    structural: str
    quick_hash: int


class CacheEntry(BaseModel):
    """Stored commit messages for one exact diff key."""

    key: str
    messages: list[str]
    created_at: datetime
    semantic_fingerprint: str
    structural_fingerprint: str
    quick_hash: int = 0
    diff_preview: str = ""

    def matches(self, fingerprint: DiffFingerprint) -> bool:
        """True when the stored validation fingerprints match the query."""
        return (
            self.semantic_fingerprint == fingerprint.semantic
            and self.structural_fingerprint == fingerprint.structural
        )


class MemoryTierStats(BaseModel):
    keys: int = 0
    hits: int = 0
    misses: int = 0
    hit_rate: float = 0.0


class PersistentTierStats(BaseModel):
    files: int = 0
    size_bytes: int = 0
    size_mb: float = 0.0


class CacheStats(BaseModel):
    """Point-in-time snapshot of both cache tiers."""

    memory: MemoryTierStats = Field(default_factory=MemoryTierStats)
    persistent: PersistentTierStats = Field(default_factory=PersistentTierStats)


class StoreUsage(BaseModel):
    """Disk footprint reported by a persistent backend."""

    files: int = 0
    size_bytes: int = 0
