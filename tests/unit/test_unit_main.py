# tests/unit/test_unit_main.py — v2
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

import io
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from aicommit.main import DiffSourceError, _build_parser, main, read_diff


@pytest.fixture
def env(monkeypatch, tmp_path: Path) -> Path:
    """Point the CLI at an isolated cache and working directory."""
    monkeypatch.chdir(tmp_path)
    cache_root = tmp_path / "cache"
    monkeypatch.setenv("CACHE_ROOT", str(cache_root))
    return cache_root


@pytest.fixture
def diff_file(tmp_path: Path, sample_diff: str) -> Path:
    path = tmp_path / "change.diff"
    path.write_text(sample_diff, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_prepare_defaults(self):
        args = _build_parser().parse_args(["prepare"])
        assert args.command == "prepare"
        assert args.file == "-"
        assert args.staged is False
        assert args.max_size is None

    def test_prepare_options(self):
        args = _build_parser().parse_args(["prepare", "x.diff", "--max-size", "800", "--json"])
        assert args.file == "x.diff"
        assert args.max_size == 800
        assert args.json is True

    def test_cache_set_messages(self):
        args = _build_parser().parse_args(["cache", "set", "--staged", "-m", "a", "-m", "b"])
        assert args.cache_command == "set"
        assert args.staged is True
        assert args.messages == ["a", "b"]

    def test_cache_requires_subcommand(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["cache"])


# ---------------------------------------------------------------------------
# Diff sources
# ---------------------------------------------------------------------------

class TestReadDiff:
    def test_file(self, diff_file, sample_diff):
        assert read_diff(str(diff_file)) == sample_diff

    def test_missing_file(self, tmp_path):
        with pytest.raises(DiffSourceError, match="File not found"):
            read_diff(str(tmp_path / "absent.diff"))

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("+stdin line"))
        assert read_diff("-") == "+stdin line"

    def test_staged(self):
        completed = subprocess.CompletedProcess(["git"], 0, stdout="+staged", stderr="")
        with patch("aicommit.main.subprocess.run", return_value=completed) as run:
            assert read_diff("-", staged=True) == "+staged"
        assert run.call_args.args[0] == ["git", "diff", "--cached"]

    def test_staged_git_failure(self):
        error = subprocess.CalledProcessError(128, ["git"], stderr="not a git repository\n")
        with patch("aicommit.main.subprocess.run", side_effect=error):
            with pytest.raises(DiffSourceError, match="not a git repository"):
                read_diff("-", staged=True)

    def test_git_missing(self):
        with patch("aicommit.main.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(DiffSourceError, match="git executable not found"):
                read_diff("-", staged=True)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestMain:
    def test_no_command_prints_help(self, env, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_prepare(self, env, diff_file, capsys):
        assert main(["prepare", str(diff_file)]) == 0
        out = capsys.readouterr().out
        assert "Strategy:   full" in out

    def test_prepare_chunked_json(self, env, tmp_path, large_diff, capsys):
        path = tmp_path / "large.diff"
        path.write_text(large_diff, encoding="utf-8")
        assert main(["prepare", str(path), "--max-size", "1000", "--json"]) == 0
        out = capsys.readouterr().out
        assert '"strategy": "chunked"' in out

    def test_fingerprint(self, env, diff_file, capsys):
        assert main(["fingerprint", str(diff_file)]) == 0
        out = capsys.readouterr().out
        assert "Exact key:" in out
        assert "Files:       1 (+5 -2)" in out

    def test_cache_roundtrip(self, env, diff_file, capsys):
        assert main(["cache", "get", str(diff_file)]) == 1
        assert main(["cache", "set", str(diff_file), "-m", "feat(auth): hash passwords"]) == 0
        assert main(["cache", "get", str(diff_file)]) == 0
        out = capsys.readouterr().out
        assert "feat(auth): hash passwords" in out
        assert any(env.glob("*.json"))

    def test_cache_stats_clear_cleanup(self, env, diff_file, capsys):
        main(["cache", "set", str(diff_file), "-m", "feat: x"])
        assert main(["cache", "stats"]) == 0
        assert "Files:      1" in capsys.readouterr().out
        assert main(["cache", "cleanup"]) == 0
        assert "Removed 0 cache entries" in capsys.readouterr().out
        assert main(["cache", "clear"]) == 0
        assert not any(env.glob("*.json"))

    def test_cache_similar_across_invocations(self, env, tmp_path, diff_file, sample_diff, capsys):
        near = tmp_path / "near.diff"
        near.write_text(sample_diff.replace("handleLogin", "handleSignIn"), encoding="utf-8")

        assert main(["cache", "similar", str(near)]) == 1
        assert "No cached messages" in capsys.readouterr().out

        assert main(["cache", "set", str(diff_file), "-m", "feat: login"]) == 0
        capsys.readouterr()
        assert main(["cache", "similar", str(near)]) == 0
        assert "feat: login" in capsys.readouterr().out

    def test_cache_get_fast_across_invocations(self, env, diff_file, capsys):
        assert main(["cache", "set", str(diff_file), "-m", "feat: login"]) == 0
        capsys.readouterr()
        assert main(["cache", "get", "--fast", str(diff_file)]) == 0
        assert "feat: login" in capsys.readouterr().out

    def test_missing_file_exit_code(self, env, tmp_path):
        assert main(["prepare", str(tmp_path / "absent.diff")]) == 1

    def test_configuration_error(self, env, monkeypatch, capsys):
        monkeypatch.setenv("CHUNK_THRESHOLD_RATIO", "0.5")
        assert main(["prepare"]) == 2
        assert "Configuration error" in capsys.readouterr().err
