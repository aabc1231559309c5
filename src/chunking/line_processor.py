# src/chunking/line_processor.py — v1
"""Line-level diff preprocessing: classification, truncation, selection.

Lines fall into three buckets, in decreasing priority:
headers (file and hunk markers), changes (+/- lines) and context.
"""

from __future__ import annotations

import re
from typing import Callable, Literal

LineKind = Literal["header", "change", "context"]

TRUNCATION_MARKER = "... (diff truncated for size)"
BINARY_MARKER = "[Binary file modified]"

HEADER_PREFIXES = ("diff --git", "index ", "---", "+++", "@@")

# Prefix kept for each kind of over-long line, and the suffix that replaces the rest.
IMPORT_PREFIX = 200
DECLARATION_PREFIX = 250
GENERIC_PREFIX = 300
IMPORT_SUFFIX = "... [import statement truncated]"
DECLARATION_SUFFIX = "... [function/class truncated]"
GENERIC_SUFFIX = "... [Long line truncated]"

_BINARY_LINE = re.compile(r"^Binary files? .* differ$")
_IMPORT_LINE = re.compile(r"\b(?:import|require)\b")
_DECLARATION_LINE = re.compile(r"\b(?:function|class|def)\b")

_PRIORITY: tuple[LineKind, ...] = ("header", "change", "context")


def classify_line(line: str) -> LineKind:
    """Bucket a diff line. Header look-alikes win over +/- changes."""
    if line.startswith(HEADER_PREFIXES):
        return "header"
    if line.startswith(("+", "-")):
        return "change"
    return "context"


def truncate_line(line: str, max_line_length: int = 500) -> str:
    """Shorten a line longer than ``max_line_length``, tagging what was cut."""
    if len(line) <= max_line_length:
        return line
    if _IMPORT_LINE.search(line):
        return line[:IMPORT_PREFIX] + IMPORT_SUFFIX
    if _DECLARATION_LINE.search(line):
        return line[:DECLARATION_PREFIX] + DECLARATION_SUFFIX
    return line[:GENERIC_PREFIX] + GENERIC_SUFFIX


def preprocess_lines(diff_text: str, max_line_length: int = 500) -> tuple[list[str], bool]:
    """Split a diff into lines, collapsing binary notices and long lines.

    Returns:
        The processed lines and whether any content was altered.
    """
    lines: list[str] = []
    altered = False
    for line in diff_text.split("\n"):
        if _BINARY_LINE.match(line):
            processed = BINARY_MARKER
        else:
            processed = truncate_line(line, max_line_length)
        if processed != line:
            altered = True
        lines.append(processed)
    return lines, altered


def select_lines(
    lines: list[str],
    budget: int,
    cost: Callable[[str], int],
) -> tuple[list[str], bool]:
    """Keep the highest-priority lines that fit ``budget``.

    Buckets are filled in priority order. Headers are taken one by one, and a
    header that does not fit is skipped so later, shorter headers still get
    the budget. Changes and context are filled from their first line onward
    until the next line no longer fits, so trailing context is dropped first,
    then trailing changes. Kept lines are returned in their original order.

    Returns:
        The kept lines and whether anything was dropped.
    """
    buckets: dict[LineKind, list[int]] = {kind: [] for kind in _PRIORITY}
    for index, line in enumerate(lines):
        buckets[classify_line(line)].append(index)

    keep: set[int] = set()
    used = 0
    for kind in _PRIORITY:
        for index in buckets[kind]:
            line_cost = cost(lines[index])
            if used + line_cost > budget:
                if kind == "header":
                    continue
                break
            keep.add(index)
            used += line_cost

    kept = [line for index, line in enumerate(lines) if index in keep]
    return kept, len(kept) < len(lines)


def with_marker(text: str) -> str:
    """Append the truncation marker line."""
    if not text:
        return TRUNCATION_MARKER
    return f"{text}\n{TRUNCATION_MARKER}"
