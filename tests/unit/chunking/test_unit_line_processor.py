# tests/unit/chunking/test_unit_line_processor.py — v1
"""Tests for chunking/line_processor.py — classification, truncation, selection."""

from __future__ import annotations

from aicommit.chunking.line_processor import (
    BINARY_MARKER,
    DECLARATION_SUFFIX,
    GENERIC_SUFFIX,
    IMPORT_SUFFIX,
    TRUNCATION_MARKER,
    classify_line,
    preprocess_lines,
    select_lines,
    truncate_line,
    with_marker,
)


class TestClassifyLine:
    def test_headers(self):
        for line in ("diff --git a/x b/x", "index 123..456", "--- a/x", "+++ b/x", "@@ -1 +1 @@"):
            assert classify_line(line) == "header"

    def test_changes(self):
        assert classify_line("+added") == "change"
        assert classify_line("-removed") == "change"

    def test_context(self):
        assert classify_line(" unchanged") == "context"
        assert classify_line("") == "context"


class TestTruncateLine:
    def test_short_line_unchanged(self):
        assert truncate_line("+short", 500) == "+short"

    def test_import_line(self):
        line = "+import { " + "a, " * 300 + "} from 'lib'"
        result = truncate_line(line, 500)
        assert result == line[:200] + IMPORT_SUFFIX

    def test_declaration_line(self):
        line = "+def handler(" + "arg, " * 200 + "):"
        result = truncate_line(line, 500)
        assert result == line[:250] + DECLARATION_SUFFIX

    def test_generic_line(self):
        line = "+" + "x" * 700
        assert truncate_line(line, 500) == line[:300] + GENERIC_SUFFIX


class TestPreprocessLines:
    def test_untouched(self):
        lines, altered = preprocess_lines("+a\n-b\n c")
        assert lines == ["+a", "-b", " c"]
        assert altered is False

    def test_binary_notice_collapsed(self):
        lines, altered = preprocess_lines("Binary files a/logo.png and b/logo.png differ")
        assert lines == [BINARY_MARKER]
        assert altered is True

    def test_long_line_flags_altered(self):
        lines, altered = preprocess_lines("+" + "y" * 600, max_line_length=500)
        assert lines[0].endswith(GENERIC_SUFFIX)
        assert altered is True


class TestSelectLines:
    LINES = ["diff --git a/x b/x", " ctx1", "+add1", " ctx2", "+add2"]

    def test_priority_then_original_order(self):
        kept, dropped = select_lines(self.LINES, 3, cost=lambda _: 1)
        assert kept == ["diff --git a/x b/x", "+add1", "+add2"]
        assert dropped is True

    def test_everything_fits(self):
        kept, dropped = select_lines(self.LINES, 10, cost=lambda _: 1)
        assert kept == self.LINES
        assert dropped is False

    def test_bucket_filled_as_prefix(self):
        kept, _ = select_lines(["+" + "a" * 10, "+b"], 5, cost=len)
        assert kept == []

    def test_oversized_header_skipped_not_others(self):
        lines = ["diff --git a/" + "x" * 40 + " b/x", "@@ -1 +1 @@", "+c"]
        kept, dropped = select_lines(lines, 20, cost=lambda line: len(line) + 1)
        assert kept == ["@@ -1 +1 @@", "+c"]
        assert dropped is True

    def test_later_headers_kept_before_changes(self):
        lines = ["diff --git a/long b/long", "+a", "+++ b/y", "+b"]
        kept, _ = select_lines(lines, 3, cost=lambda line: 1 if len(line) < 10 else 5)
        assert kept == ["+a", "+++ b/y", "+b"]

    def test_context_dropped_before_changes(self):
        kept, _ = select_lines(self.LINES, 4, cost=lambda _: 1)
        assert kept == ["diff --git a/x b/x", " ctx1", "+add1", "+add2"]


class TestWithMarker:
    def test_appends_line(self):
        assert with_marker("text") == f"text\n{TRUNCATION_MARKER}"

    def test_empty(self):
        assert with_marker("") == TRUNCATION_MARKER
