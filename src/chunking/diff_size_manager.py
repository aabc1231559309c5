# src/chunking/diff_size_manager.py — v1
"""Keep diffs within a character budget before they reach a provider.

Policy, in order:
  1. A diff within ``max_chunk_size`` is returned untouched.
  2. Binary notices and over-long lines are collapsed; past
     ``max_diff_lines`` lines are selected by priority (headers, changes,
     context). Lossy steps append the truncation marker.
  3. A result within the budget becomes a single unit. A result at most
     ``chunk_threshold_ratio`` times the budget is trimmed to fit by
     character budget. Anything larger is split into chunks.
"""

from __future__ import annotations

import logging
import math

from aicommit.analysis.diff_annotator import annotate_diff
from aicommit.chunking.base_chunker import BaseChunker, hard_split
from aicommit.chunking.chunk_validator import expected_context, validate_units
from aicommit.chunking.chunker_factory import create_chunker
from aicommit.chunking.line_processor import (
    TRUNCATION_MARKER,
    preprocess_lines,
    select_lines,
    with_marker,
)
from aicommit.config.settings import Settings
from aicommit.core.models import DiffUnit, PreparedDiff, PrepareStrategy

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 3.5


def estimate_tokens(text: str) -> int:
    """Rough token estimate for code-heavy text."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class DiffSizeManager:
    """Decide between passing a diff whole, truncating it, or chunking it."""

    def __init__(
        self,
        settings: Settings | None = None,
        chunker: BaseChunker | None = None,
    ) -> None:
        s = settings
        self._max_size = 4000 if s is None else s.max_chunk_size
        self._max_lines = 1000 if s is None else s.max_diff_lines
        self._max_line_length = 500 if s is None else s.max_line_length
        self._threshold_ratio = 1.25 if s is None else s.chunk_threshold_ratio
        self._chunker = chunker or create_chunker(settings)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def chunker(self) -> BaseChunker:
        return self._chunker

    def prepare(self, diff_text: str, max_size: int | None = None) -> PreparedDiff:
        """Size a diff for downstream use.

        Args:
            diff_text: Unified diff text.
            max_size: Per-unit character budget; defaults to ``max_chunk_size``.

        Returns:
            PreparedDiff holding one unit or an ordered list of chunks.

        Raises:
            TypeError: If diff_text is not a string.
            ValueError: If max_size is not positive.
        """
        if not isinstance(diff_text, str):
            raise TypeError(f"diff_text must be str, got {type(diff_text).__name__}")
        limit = self._max_size if max_size is None else max_size
        if limit <= 0:
            raise ValueError("max_size must be > 0")

        if len(diff_text) <= limit:
            return self._single(
                diff_text, diff_text, "full",
                reasoning="Diff fits within the size budget",
            )

        try:
            return self._prepare_oversized(diff_text, limit)
        except Exception as e:
            logger.warning("Diff preparation failed, splitting by characters: %s", e)
            return self._chunked(diff_text, hard_split(diff_text, limit), limit, truncated=False)

    def _prepare_oversized(self, diff_text: str, limit: int) -> PreparedDiff:
        lines, altered = preprocess_lines(diff_text, self._max_line_length)

        dropped = False
        if len(lines) > self._max_lines:
            lines, dropped = select_lines(lines, self._max_lines, cost=lambda _: 1)

        lossy = altered or dropped
        text = "\n".join(lines)
        if lossy:
            text = with_marker(text)

        if len(text) <= limit:
            return self._single(
                diff_text, text, "truncated" if lossy else "full",
                reasoning="Long lines or excess lines trimmed to fit",
            )

        if len(text) <= limit * self._threshold_ratio:
            budget = limit - len(TRUNCATION_MARKER)
            if budget > 0:
                kept, _ = select_lines(lines, budget, cost=lambda line: len(line) + 1)
                if kept:
                    return self._single(
                        diff_text, with_marker("\n".join(kept)), "truncated",
                        reasoning=(
                            f"Diff slightly over budget ({len(text)} > {limit} chars), "
                            "trimmed by line priority"
                        ),
                    )

        pieces = self._chunker.split(text, limit)
        return self._chunked(diff_text, pieces, limit, truncated=lossy)

    def _single(
        self, original: str, text: str, strategy: PrepareStrategy, reasoning: str
    ) -> PreparedDiff:
        truncated = strategy == "truncated"
        if truncated:
            logger.debug("Diff truncated from %d to %d chars", len(original), len(text))
        return PreparedDiff(
            strategy=strategy,
            units=[DiffUnit.from_text(text)],
            original_size=len(original),
            processed_size=len(text),
            estimated_tokens=estimate_tokens(text),
            truncated=truncated,
            reasoning=reasoning,
        )

    def _chunked(
        self, original: str, pieces: list[str], limit: int, truncated: bool
    ) -> PreparedDiff:
        total = len(pieces)
        units = [
            DiffUnit.from_text(
                piece,
                chunk_index=i,
                total_chunks=total,
                chunk_context=expected_context(i, total),
                annotations=annotate_diff(piece),
            )
            for i, piece in enumerate(pieces)
        ]

        validation = validate_units(units, limit)
        for error in validation.errors:
            logger.error("Chunk validation: %s", error)
        for warning in validation.warnings:
            logger.debug("Chunk validation: %s", warning)

        processed = sum(unit.length for unit in units)
        logger.info(
            "Diff of %d chars split into %d chunks (%s strategy)",
            len(original), total, self._chunker.strategy_name,
        )
        return PreparedDiff(
            strategy="chunked",
            units=units,
            original_size=len(original),
            processed_size=processed,
            estimated_tokens=sum(estimate_tokens(unit.content) for unit in units),
            truncated=truncated,
            reasoning=f"Diff too large ({len(original)} chars), chunked into {total} parts",
        )
