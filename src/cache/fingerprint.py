# src/cache/fingerprint.py — v3
"""Diff fingerprinting: exact key, semantic and structural fingerprints.

- exact key: SHA-256 over the raw diff, the primary cache key.
- semantic: digest of the meaningful changed lines only, so comment-only
  or trivial edits and renamed files do not change it.
- structural: digest of the sorted set of touched file paths.

None of these functions raise; on internal failure they log and return the
digest of the empty string.
"""

from __future__ import annotations

import hashlib
import logging
import re

from aicommit.cache.models import DiffFingerprint

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 16
MIN_MEANINGFUL_CHARS = 5

_COMMENT_PREFIXES = ("//", "/*", "*", "#")
_FILE_HEADER = re.compile(r"^\+\+\+ b/(.+)$")
_GIT_HEADER = re.compile(r"^diff --git a/(.+?) b/(.+)$")

# Largest prime below 2**32.
_QUICK_HASH_MOD = 4_294_967_291
_QUICK_HASH_BASE = 31


def _short_digest(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]  # noqa: S324


EMPTY_FINGERPRINT = _short_digest("")


def exact_key(diff_text: str) -> str:
    """SHA-256 hex digest of the raw diff text."""
    try:
        return hashlib.sha256((diff_text or "").encode("utf-8")).hexdigest()
    except Exception as e:
        logger.warning("Exact key computation failed: %s", e)
        return hashlib.sha256(b"").hexdigest()


def extract_code_changes(diff_text: str) -> list[str]:
    """Trimmed content of the meaningful added/removed lines.

    File header lines (``+++``/``---``), comment-only lines and lines with
    fewer than five characters are skipped.
    """
    if not diff_text:
        return []

    changes: list[str] = []
    for line in diff_text.split("\n"):
        if not line.startswith(("+", "-")) or line.startswith(("+++", "---")):
            continue
        content = line[1:].strip()
        if len(content) < MIN_MEANINGFUL_CHARS:
            continue
        if content.startswith(_COMMENT_PREFIXES):
            continue
        changes.append(content)
    return changes


def semantic_fingerprint(diff_text: str) -> str:
    """Digest of the meaningful code-change lines (16 hex chars)."""
    try:
        return _short_digest("\n".join(extract_code_changes(diff_text)))
    except Exception as e:
        logger.warning("Semantic fingerprint failed: %s", e)
        return EMPTY_FINGERPRINT


def extract_file_paths(diff_text: str) -> list[str]:
    """Sorted, de-duplicated file paths found in diff headers."""
    if not diff_text:
        return []

    paths: set[str] = set()
    for line in diff_text.split("\n"):
        match = _FILE_HEADER.match(line)
        if match:
            paths.add(match.group(1).strip())
            continue
        match = _GIT_HEADER.match(line)
        if match:
            paths.add(match.group(2).strip())
    return sorted(paths)


def structural_fingerprint(diff_text: str) -> str:
    """Digest of the touched file paths (16 hex chars)."""
    try:
        return _short_digest(",".join(extract_file_paths(diff_text)))
    except Exception as e:
        logger.warning("Structural fingerprint failed: %s", e)
        return EMPTY_FINGERPRINT


def quick_hash(text: str) -> int:
    """Cheap polynomial hash in the 32-bit range.

    Only for in-memory similarity bucketing, never for cache correctness.
    """
    value = 0
    for char in text or "":
        value = (value * _QUICK_HASH_BASE + ord(char)) % _QUICK_HASH_MOD
    return value


def validate_similarity(diff_a: str | None, diff_b: str | None) -> bool:
    """True iff both diffs share the same semantic fingerprint."""
    if not isinstance(diff_a, str) or not isinstance(diff_b, str):
        logger.warning(
            "Similarity check skipped: expected two diff strings, got %s and %s",
            type(diff_a).__name__, type(diff_b).__name__,
        )
        return False
    return semantic_fingerprint(diff_a) == semantic_fingerprint(diff_b)


def compute_fingerprint(diff_text: str) -> DiffFingerprint:
    """Compute every identifier of a diff in one pass."""
    try:
        changes = extract_code_changes(diff_text)
    except Exception as e:
        logger.warning("Code change extraction failed: %s", e)
        changes = []
    return DiffFingerprint(
        exact_key=exact_key(diff_text),
        semantic=semantic_fingerprint(diff_text),
        structural=structural_fingerprint(diff_text),
        quick_hash=quick_hash("\n".join(changes)),
    )
