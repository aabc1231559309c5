# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ChunkContext = Literal["initial", "middle", "final"]
PrepareStrategy = Literal["full", "truncated", "chunked"]


# === DIFF ANALYSIS ===


class DiffAnnotations(BaseModel):
    """Best-effort description of what a piece of diff touches."""

    files: list[str] = Field(default_factory=list)
    functions: list[str] = Field(default_factory=list)
    classes: list[str] = Field(default_factory=list)
    components: list[str] = Field(default_factory=list)
    api_routes: list[str] = Field(default_factory=list)
    has_significant_changes: bool = False


class FileChangeSummary(BaseModel):
    """Line counts for one file of a diff."""

    path: str
    additions: int = 0
    deletions: int = 0


class DiffSummary(BaseModel):
    """Per-file and total line counts of a diff."""

    files: list[FileChangeSummary] = Field(default_factory=list)
    additions: int = 0
    deletions: int = 0

    @property
    def file_count(self) -> int:
        return len(self.files)


# === DIFF UNITS ===


class DiffUnit(BaseModel):
    """Contiguous piece of diff text handed to a provider or the cache."""

    content: str
    length: int
    chunk_index: int | None = None
    total_chunks: int | None = None
    chunk_context: ChunkContext | None = None
    annotations: DiffAnnotations | None = None

    @classmethod
    def from_text(cls, content: str, **kwargs: object) -> DiffUnit:
        """Build a unit, deriving its length from the content."""
        return cls(content=content, length=len(content), **kwargs)  # type: ignore[arg-type]

    @property
    def is_chunk(self) -> bool:
        return self.chunk_index is not None


class PreparedDiff(BaseModel):
    """Outcome of sizing a diff: one unit, or an ordered list of chunks."""

    strategy: PrepareStrategy
    units: list[DiffUnit]
    original_size: int
    processed_size: int
    estimated_tokens: int
    truncated: bool = False
    reasoning: str = ""

    @property
    def is_chunked(self) -> bool:
        return len(self.units) > 1

    @property
    def content(self) -> str:
        """Text of the single unit; chunked results join their units."""
        if len(self.units) == 1:
            return self.units[0].content
        return "\n".join(unit.content for unit in self.units)
