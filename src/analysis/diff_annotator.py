# src/analysis/diff_annotator.py — v1
"""Heuristic diff annotation: touched files, functions, classes, routes.

Regex based and deliberately fuzzy. Results only enrich prompt context, so
every entry point tolerates arbitrary input and returns empty results
rather than raising.
"""

from __future__ import annotations

import logging
import re

from aicommit.core.models import DiffAnnotations, DiffSummary, FileChangeSummary

logger = logging.getLogger(__name__)

MAX_FILES = 5
MAX_SYMBOLS = 3

_HEADER_PREFIXES = ("diff --git", "index ", "---", "+++", "@@")

_FILE_PATTERNS = [
    re.compile(r"^diff --git a/.+? b/(.+)$"),
    re.compile(r"^\+\+\+ b/(.+)$"),
]

_FUNCTION_PATTERNS = [
    re.compile(r"\bfunction\s+(\w+)\s*\("),
    re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?\([^)]*\)\s*=>"),
    re.compile(r"^\s*(?:async\s+)?def\s+(\w+)\s*\("),
    re.compile(r"^\s*func\s+(?:\([^)]*\)\s*)?(\w+)\s*\("),
    re.compile(r"^\s*(?:pub\s+)?fn\s+(\w+)"),
]

_CLASS_PATTERNS = [
    re.compile(r"\bclass\s+(\w+)"),
    re.compile(r"\binterface\s+(\w+)"),
    re.compile(r"^\s*(?:pub\s+)?struct\s+(\w+)"),
]

_COMPONENT_PATTERNS = [
    re.compile(r"\bfunction\s+([A-Z]\w*)\s*\([^)]*\)\s*\{"),
    re.compile(
        r"\bconst\s+([A-Z]\w*)\s*=\s*(?:React\.)?(?:forwardRef\s*\()?\([^)]*\)\s*=>"
    ),
]

_ROUTE_PATTERNS = [
    re.compile(
        r"\b(?:app|router|api|server)\.(get|post|put|patch|delete)\(\s*['\"]([^'\"]+)['\"]",
        re.IGNORECASE,
    ),
    re.compile(
        r"@\w+\.(get|post|put|patch|delete|route)\(\s*['\"]([^'\"]+)['\"]",
        re.IGNORECASE,
    ),
]


def annotate_diff(diff_text: str) -> DiffAnnotations:
    """Describe what a diff (or chunk of one) touches.

    Args:
        diff_text: Unified diff text.

    Returns:
        DiffAnnotations; empty when nothing is recognized or input is invalid.
    """
    if not isinstance(diff_text, str) or not diff_text:
        return DiffAnnotations()

    try:
        lines = diff_text.split("\n")
        code_lines = [_strip_marker(line) for line in lines if not line.startswith(_HEADER_PREFIXES)]

        functions = _collect(code_lines, _FUNCTION_PATTERNS, MAX_SYMBOLS)
        classes = _collect(code_lines, _CLASS_PATTERNS, MAX_SYMBOLS)
        components = _collect(code_lines, _COMPONENT_PATTERNS, MAX_SYMBOLS)
        api_routes = _collect_routes(code_lines)

        return DiffAnnotations(
            files=_collect(lines, _FILE_PATTERNS, MAX_FILES),
            functions=functions,
            classes=classes,
            components=components,
            api_routes=api_routes,
            has_significant_changes=bool(functions or classes or components or api_routes),
        )
    except Exception as e:
        logger.warning("Diff annotation failed: %s", e)
        return DiffAnnotations()


def summarize_diff(diff_text: str) -> DiffSummary:
    """Count added and removed lines per file."""
    if not isinstance(diff_text, str) or not diff_text:
        return DiffSummary()

    files: list[FileChangeSummary] = []
    current: FileChangeSummary | None = None

    for line in diff_text.split("\n"):
        match = _FILE_PATTERNS[0].match(line)
        if match:
            current = FileChangeSummary(path=match.group(1).strip())
            files.append(current)
            continue
        if current is None:
            continue
        if line.startswith("+") and not line.startswith("+++"):
            current.additions += 1
        elif line.startswith("-") and not line.startswith("---"):
            current.deletions += 1

    return DiffSummary(
        files=files,
        additions=sum(f.additions for f in files),
        deletions=sum(f.deletions for f in files),
    )


def _strip_marker(line: str) -> str:
    """Drop the leading +/-/space diff marker."""
    if line[:1] in ("+", "-", " "):
        return line[1:]
    return line


def _collect(lines: list[str], patterns: list[re.Pattern[str]], limit: int) -> list[str]:
    """First ``limit`` distinct names captured by any pattern, in diff order."""
    found: list[str] = []
    for line in lines:
        for pattern in patterns:
            match = pattern.search(line)
            if match is None:
                continue
            name = match.group(1).strip()
            if name and name not in found:
                found.append(name)
                if len(found) >= limit:
                    return found
            break
    return found


def _collect_routes(lines: list[str]) -> list[str]:
    routes: list[str] = []
    for line in lines:
        for pattern in _ROUTE_PATTERNS:
            match = pattern.search(line)
            if match is None:
                continue
            route = f"{match.group(1).upper()} {match.group(2)}"
            if route not in routes:
                routes.append(route)
            break
        if len(routes) >= MAX_FILES:
            break
    return routes
