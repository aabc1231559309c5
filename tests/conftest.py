# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides sample diffs, isolated settings, a controllable clock and temp
cache directories. No network or git access; file I/O stays under tmp_path.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from aicommit.config.settings import Settings


SAMPLE_DIFF = """diff --git a/src/auth.js b/src/auth.js
index 3b18e51..a9c2f4d 100644
--- a/src/auth.js
+++ b/src/auth.js
@@ -1,6 +1,9 @@
 const express = require('express');
-function login(user) {
-  return check(user.password);
+function login(user, options) {
+  const hashed = hashPassword(user.password);
+  return verifyCredentials(user.name, hashed, options);
 }
+
+app.post('/api/login', handleLogin);
"""

SECOND_FILE_DIFF = """diff --git a/src/models/user.py b/src/models/user.py
index 1111111..2222222 100644
--- a/src/models/user.py
+++ b/src/models/user.py
@@ -10,4 +10,8 @@ class User:
     name: str
+    email: str
+
+    def display_name(self):
+        return self.name.title()
"""


class FakeClock:
    """Manually advanced time source for expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(**overrides) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, **overrides)


def make_large_diff(files: int = 5, lines_per_file: int = 60) -> str:
    """Multi-file diff with distinct, meaningful changed lines."""
    parts: list[str] = []
    for f in range(files):
        parts.append(f"diff --git a/pkg/module_{f}.py b/pkg/module_{f}.py")
        parts.append("index 0000000..1111111 100644")
        parts.append(f"--- a/pkg/module_{f}.py")
        parts.append(f"+++ b/pkg/module_{f}.py")
        parts.append(f"@@ -1,{lines_per_file} +1,{lines_per_file} @@")
        for i in range(lines_per_file):
            if i % 3 == 0:
                parts.append(f" context_line_{f}_{i} = compute_value({i})")
            else:
                parts.append(f"+added_value_{f}_{i} = transform_input({i}, {f})")
    return "\n".join(parts)


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_diff() -> str:
    return SAMPLE_DIFF


@pytest.fixture
def second_diff() -> str:
    return SECOND_FILE_DIFF


@pytest.fixture
def large_diff() -> str:
    return make_large_diff()


# === FIXTURES: Configuration and time ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Default settings with the cache rooted in a temp directory."""
    return make_settings(cache_root=tmp_path / "cache")


@pytest.fixture
def settings_factory(tmp_path: Path):
    """Build settings with overrides; the cache defaults to a temp directory."""

    def _factory(**overrides) -> Settings:
        overrides.setdefault("cache_root", tmp_path / "cache")
        return make_settings(**overrides)

    return _factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    path = tmp_path / "cache"
    path.mkdir()
    return path
