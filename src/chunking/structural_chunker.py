# src/chunking/structural_chunker.py — v2
"""Structural diff chunking: split at file boundaries, then hunks, then lines.

Whole file sections are packed together while they fit. A section larger
than the budget is split at its ``@@`` hunk headers, and a hunk larger than
the budget falls back to line packing.
"""

from __future__ import annotations

from typing import Callable

from aicommit.chunking.base_chunker import BaseChunker, pack_lines
from aicommit.config.settings import Settings


def _is_file_boundary(line: str) -> bool:
    return line.startswith("diff --git")


def _is_hunk_boundary(line: str) -> bool:
    return line.startswith("@@")


def group_lines(lines: list[str], is_boundary: Callable[[str], bool]) -> list[list[str]]:
    """Group lines so each boundary line starts a new group."""
    groups: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if is_boundary(line) and current:
            groups.append(current)
            current = []
        current.append(line)
    if current:
        groups.append(current)
    return groups


class StructuralChunker(BaseChunker):
    """Chunk diffs along file and hunk boundaries."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings

    @property
    def strategy_name(self) -> str:
        return "structural"

    def split(self, text: str, max_size: int) -> list[str]:
        """Split a diff into pieces of at most ``max_size`` characters."""
        if len(text) <= max_size:
            return [text]
        groups = group_lines(text.split("\n"), _is_file_boundary)
        return self._pack_groups(groups, max_size, split_hunks=True)

    def _pack_groups(
        self, groups: list[list[str]], max_size: int, split_hunks: bool
    ) -> list[str]:
        chunks: list[str] = []
        current: list[str] = []
        current_len = 0

        for group in groups:
            block = "\n".join(group)
            if len(block) > max_size:
                if current:
                    chunks.append("\n".join(current))
                    current, current_len = [], 0
                if split_hunks:
                    hunks = group_lines(group, _is_hunk_boundary)
                    chunks.extend(self._pack_groups(hunks, max_size, split_hunks=False))
                else:
                    chunks.extend(pack_lines(group, max_size))
                continue

            added = len(block) + (1 if current else 0)
            if current and current_len + added > max_size:
                chunks.append("\n".join(current))
                current, current_len = [block], len(block)
            else:
                current.append(block)
                current_len += added

        if current:
            chunks.append("\n".join(current))
        return chunks
