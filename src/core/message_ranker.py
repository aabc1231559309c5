# src/core/message_ranker.py — v1
"""Score and select commit message candidates.

Used when a chunked diff produced one message list per unit and the caller
needs a single short list back.
"""

from __future__ import annotations

import re

_CONVENTIONAL = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|perf|ci|build|revert)(\(.+\))?!?:"
)
_IMPERATIVE = re.compile(
    r"^(Add|Fix|Remove|Update|Create|Refactor|Improve|Change|Modify)\b"
)
_GENERIC_TERMS = [
    re.compile(r"\bchanges?\b", re.IGNORECASE),
    re.compile(r"\bupdates?\b", re.IGNORECASE),
    re.compile(r"\bfixes?\b", re.IGNORECASE),
    re.compile(r"\bstuff\b", re.IGNORECASE),
    re.compile(r"\bthings?\b", re.IGNORECASE),
    re.compile(r"\bvarious\b", re.IGNORECASE),
]
_SPECIFIC_TERMS = [
    re.compile(r"\b[A-Z][a-zA-Z]*\b"),
    re.compile(r"\b\w+\(\)"),
    re.compile(r"\b(import|export|require|module|component|hook|middleware)\b", re.IGNORECASE),
]

GENERIC_PENALTY = 8


def score_commit_message(message: str) -> int:
    """Heuristic quality score; higher is better, never negative."""
    score = 0

    if _CONVENTIONAL.match(message):
        score += 15

    length = len(message)
    if 15 <= length <= 72:
        score += 10
    elif 10 <= length <= 100:
        score += 5

    if not message.strip().endswith("."):
        score += 2

    if _IMPERATIVE.match(message):
        score += 5

    penalty = sum(GENERIC_PENALTY for pattern in _GENERIC_TERMS if pattern.search(message))
    score = max(0, score - penalty)

    score += sum(3 for pattern in _SPECIFIC_TERMS if pattern.search(message))
    return score


def select_best_messages(messages: list[str], count: int = 3) -> list[str]:
    """Best ``count`` distinct messages; ties keep their original order."""
    unique: list[str] = []
    seen: set[str] = set()
    for message in messages:
        cleaned = message.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            unique.append(cleaned)

    ranked = sorted(
        enumerate(unique),
        key=lambda item: (-score_commit_message(item[1]), item[0]),
    )
    return [message for _, message in ranked[:count]]
