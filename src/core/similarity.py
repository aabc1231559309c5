# src/core/similarity.py — v3
"""Set similarity used for near-miss cache lookups."""

from __future__ import annotations

from typing import Iterable


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    """Jaccard index of two collections, compared as sets.

    Two empty collections have nothing in common and score 0.0.
    """
    set_a = set(a)
    set_b = set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
