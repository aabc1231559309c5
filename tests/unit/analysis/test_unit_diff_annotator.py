# tests/unit/analysis/test_unit_diff_annotator.py — v1
"""Tests for analysis/diff_annotator.py — best-effort diff annotation."""

from __future__ import annotations

import pytest

from aicommit.analysis.diff_annotator import MAX_SYMBOLS, annotate_diff, summarize_diff


class TestAnnotateDiff:
    def test_javascript(self, sample_diff):
        ann = annotate_diff(sample_diff)
        assert ann.files == ["src/auth.js"]
        assert ann.functions == ["login"]
        assert ann.api_routes == ["POST /api/login"]
        assert ann.has_significant_changes is True

    def test_python(self, second_diff):
        ann = annotate_diff(second_diff)
        assert ann.files == ["src/models/user.py"]
        assert "display_name" in ann.functions
        assert ann.has_significant_changes is True

    def test_classes_and_components(self):
        diff = "\n".join([
            "+class SessionStore extends Base {",
            "+interface TokenPayload {",
            "+const LoginForm = (props) => {",
            "+function Header() {",
        ])
        ann = annotate_diff(diff)
        assert ann.classes == ["SessionStore", "TokenPayload"]
        assert ann.components == ["LoginForm", "Header"]

    def test_go_and_rust(self):
        diff = "+func (s *Server) Start(ctx context.Context) error {\n+pub fn parse_config(path: &str) {"
        assert annotate_diff(diff).functions == ["Start", "parse_config"]

    def test_decorator_route(self):
        ann = annotate_diff('+@router.get("/users/{id}")')
        assert ann.api_routes == ["GET /users/{id}"]

    def test_symbol_limit(self):
        diff = "\n".join(f"+def handler_{i}(event):" for i in range(10))
        assert len(annotate_diff(diff).functions) == MAX_SYMBOLS

    def test_no_significant_changes(self):
        ann = annotate_diff("+++ b/README.md\n+Some prose about the project")
        assert ann.files == ["README.md"]
        assert ann.has_significant_changes is False

    @pytest.mark.parametrize("value", ["", None, 42, b"+def x(): pass"])
    def test_arbitrary_input_does_not_raise(self, value):
        ann = annotate_diff(value)  # type: ignore[arg-type]
        assert ann.files == []
        assert ann.has_significant_changes is False


class TestSummarizeDiff:
    def test_counts_per_file(self, sample_diff, second_diff):
        summary = summarize_diff(sample_diff + second_diff)
        assert summary.file_count == 2
        auth, user = summary.files
        assert (auth.path, auth.additions, auth.deletions) == ("src/auth.js", 5, 2)
        assert (user.path, user.additions, user.deletions) == ("src/models/user.py", 4, 0)
        assert summary.additions == 9
        assert summary.deletions == 2

    def test_lines_before_first_header_ignored(self):
        assert summarize_diff("+orphan line").file_count == 0

    def test_empty(self):
        assert summarize_diff("").additions == 0
