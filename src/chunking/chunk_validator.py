# src/chunking/chunk_validator.py — v2
"""Diff unit validation.

Validates:
- Sequential chunk_index and consistent total_chunks
- chunk_context tags (initial / middle / final)
- Unit size within the budget
"""

from __future__ import annotations

from dataclasses import dataclass, field

from aicommit.core.models import ChunkContext, DiffUnit


@dataclass
class ValidationResult:
    """Result of unit validation."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def expected_context(index: int, total: int) -> ChunkContext:
    """Position tag of a chunk; a lone chunk is final."""
    if index == total - 1:
        return "final"
    if index == 0:
        return "initial"
    return "middle"


def validate_units(units: list[DiffUnit], max_size: int) -> ValidationResult:
    """Validate an ordered list of diff units.

    Args:
        units: Units as returned by DiffSizeManager.prepare.
        max_size: Per-unit character budget.

    Returns:
        ValidationResult with errors and warnings.
    """
    result = ValidationResult()

    if not units:
        result.warnings.append("Empty unit list")
        return result

    total = len(units)
    chunked = total > 1

    for i, unit in enumerate(units):
        label = f"unit {i}"

        if unit.length != len(unit.content):
            result.valid = False
            result.errors.append(
                f"{label}: length {unit.length} != content length {len(unit.content)}"
            )

        if unit.length > max_size:
            result.valid = False
            result.errors.append(f"{label} exceeds max size: {unit.length} > {max_size}")

        if not unit.content:
            result.warnings.append(f"{label} is empty")

        if not chunked:
            continue

        if unit.chunk_index != i:
            result.valid = False
            result.errors.append(f"{label}: chunk_index {unit.chunk_index} != {i}")
        if unit.total_chunks != total:
            result.valid = False
            result.errors.append(f"{label}: total_chunks {unit.total_chunks} != {total}")
        context = expected_context(i, total)
        if unit.chunk_context != context:
            result.warnings.append(
                f"{label}: chunk_context {unit.chunk_context!r}, expected {context!r}"
            )

    return result
