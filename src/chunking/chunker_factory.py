# src/chunking/chunker_factory.py — v2
"""Factory for chunker instantiation from settings."""

from __future__ import annotations

from aicommit.chunking.base_chunker import BaseChunker
from aicommit.config.settings import Settings


def create_chunker(settings: Settings | None = None) -> BaseChunker:
    """Instantiate the configured chunker.

    Args:
        settings: Application settings. Defaults to structural strategy.

    Returns:
        Configured BaseChunker implementation.
    """
    strategy = "structural" if settings is None else settings.chunking_strategy

    if strategy == "line":
        from aicommit.chunking.line_chunker import LineChunker
        return LineChunker(settings=settings)

    # Default: structural
    from aicommit.chunking.structural_chunker import StructuralChunker
    return StructuralChunker(settings=settings)
