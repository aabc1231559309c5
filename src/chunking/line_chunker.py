# src/chunking/line_chunker.py — v1
"""Line chunking: greedy packing of whole lines, ignoring diff structure."""

from __future__ import annotations

from aicommit.chunking.base_chunker import BaseChunker, pack_lines
from aicommit.config.settings import Settings


class LineChunker(BaseChunker):
    """Chunk diffs by packing consecutive lines up to the budget."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings

    @property
    def strategy_name(self) -> str:
        return "line"

    def split(self, text: str, max_size: int) -> list[str]:
        if len(text) <= max_size:
            return [text]
        return pack_lines(text.split("\n"), max_size)
