# src/chunking/base_chunker.py — v2
"""Abstract diff chunker interface and shared packing helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseChunker(ABC):
    """Unified interface for diff chunking strategies."""

    @property
    @abstractmethod
    def strategy_name(self) -> str:
        """Strategy identifier (e.g., 'structural', 'line')."""

    @abstractmethod
    def split(self, text: str, max_size: int) -> list[str]:
        """Split text into pieces of at most ``max_size`` characters."""


def hard_split(text: str, size: int) -> list[str]:
    """Fixed-size character segments; the last-resort fallback."""
    if size <= 0:
        raise ValueError("size must be > 0")
    return [text[i : i + size] for i in range(0, len(text), size)] or [""]


def pack_lines(lines: list[str], max_size: int) -> list[str]:
    """Greedily pack lines into newline-joined chunks of at most ``max_size``.

    A line longer than ``max_size`` closes the current chunk and is
    hard-split into its own segments.
    """
    chunks: list[str] = []
    current: list[str] = []
    current_len = 0

    for line in lines:
        if len(line) > max_size:
            if current:
                chunks.append("\n".join(current))
                current, current_len = [], 0
            chunks.extend(hard_split(line, max_size))
            continue

        added = len(line) + (1 if current else 0)
        if current and current_len + added > max_size:
            chunks.append("\n".join(current))
            current, current_len = [line], len(line)
        else:
            current.append(line)
            current_len += added

    if current:
        chunks.append("\n".join(current))
    return chunks
