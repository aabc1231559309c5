# src/main.py — v2
"""CLI entry point: prepare, fingerprint and cache commands.

Usage:
    aicommit prepare [FILE|-] [--staged] [--max-size N] [--json]
    aicommit fingerprint [FILE|-] [--staged]
    aicommit cache get|similar [FILE|-] [--staged]
    aicommit cache set [FILE|-] -m MESSAGE [-m MESSAGE ...]
    aicommit cache stats|clear|cleanup
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import subprocess
import sys
from pathlib import Path

from aicommit.version import __version__

logger = logging.getLogger(__name__)


class DiffSourceError(Exception):
    """The diff could not be read from the requested source."""


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from aicommit.config.settings import ConfigurationError, load_settings
    from aicommit.logging.logger import setup_logging_from_settings

    try:
        settings = load_settings()
    except (ConfigurationError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging_from_settings(settings, level="DEBUG" if args.verbose else None)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except DiffSourceError as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="aicommit",
        description=f"aicommit v{__version__}: diff preparation and commit message cache",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- prepare ---
    p_prepare = subparsers.add_parser(
        "prepare", help="Truncate or chunk a diff to the size budget",
    )
    _add_diff_source(p_prepare)
    p_prepare.add_argument(
        "--max-size", type=int, default=None,
        help="Per-unit character budget (default: MAX_CHUNK_SIZE)",
    )
    p_prepare.add_argument(
        "--json", action="store_true", help="Print the result as JSON",
    )
    p_prepare.set_defaults(func=_cmd_prepare)

    # --- fingerprint ---
    p_fingerprint = subparsers.add_parser(
        "fingerprint", help="Show the cache identifiers of a diff",
    )
    _add_diff_source(p_fingerprint)
    p_fingerprint.set_defaults(func=_cmd_fingerprint)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or maintain the cache")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)

    p_get = cache_sub.add_parser("get", help="Look up cached messages for a diff")
    _add_diff_source(p_get)
    p_get.add_argument(
        "--fast", action="store_true",
        help="Memory-only lookup without fingerprint validation",
    )
    p_get.set_defaults(func=_cmd_cache_get)

    p_similar = cache_sub.add_parser("similar", help="Near-miss lookup for a diff")
    _add_diff_source(p_similar)
    p_similar.set_defaults(func=_cmd_cache_similar)

    p_set = cache_sub.add_parser("set", help="Store messages for a diff")
    _add_diff_source(p_set)
    p_set.add_argument(
        "-m", "--message", dest="messages", action="append", required=True,
        help="Commit message (repeatable)",
    )
    p_set.set_defaults(func=_cmd_cache_set)

    cache_sub.add_parser("stats", help="Show cache statistics").set_defaults(
        func=_cmd_cache_stats
    )
    cache_sub.add_parser("clear", help="Remove every cache entry").set_defaults(
        func=_cmd_cache_clear
    )
    cache_sub.add_parser("cleanup", help="Remove expired and excess entries").set_defaults(
        func=_cmd_cache_cleanup
    )

    return parser


def _add_diff_source(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "file", nargs="?", default="-",
        help="Diff file, or '-' for stdin (default)",
    )
    parser.add_argument(
        "--staged", action="store_true",
        help="Read the staged diff with 'git diff --cached'",
    )


def read_diff(file: str, staged: bool = False) -> str:
    """Read diff text from git, stdin or a file."""
    if staged:
        try:
            completed = subprocess.run(
                ["git", "diff", "--cached"],
                capture_output=True, text=True, check=True,
            )
        except FileNotFoundError as exc:
            raise DiffSourceError("git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            raise DiffSourceError(f"git diff failed: {exc.stderr.strip()}") from exc
        return completed.stdout

    if file == "-":
        return sys.stdin.read()

    path = Path(file)
    if not path.is_file():
        raise DiffSourceError(f"File not found: {path}")
    return path.read_text(encoding="utf-8", errors="replace")


async def _cmd_prepare(args: argparse.Namespace, settings) -> int:
    """Size a diff and print the resulting units."""
    from aicommit.chunking.diff_size_manager import DiffSizeManager

    diff = read_diff(args.file, args.staged)
    prepared = DiffSizeManager(settings=settings).prepare(diff, args.max_size)

    if args.json:
        print(prepared.model_dump_json(indent=2))
        return 0

    print(f"Strategy:   {prepared.strategy}")
    print(f"Size:       {prepared.original_size} -> {prepared.processed_size} chars")
    print(f"Tokens:     ~{prepared.estimated_tokens}")
    print(f"Reasoning:  {prepared.reasoning}")
    for unit in prepared.units:
        if unit.chunk_index is None:
            continue
        files = ", ".join(unit.annotations.files) if unit.annotations else ""
        print(
            f"  [{unit.chunk_index + 1}/{unit.total_chunks}] {unit.chunk_context:<7} "
            f"{unit.length:>6} chars  {files}"
        )
    return 0


async def _cmd_fingerprint(args: argparse.Namespace, settings) -> int:
    """Print exact, semantic and structural fingerprints."""
    from aicommit.analysis.diff_annotator import summarize_diff
    from aicommit.cache.fingerprint import compute_fingerprint

    diff = read_diff(args.file, args.staged)
    fingerprint = compute_fingerprint(diff)
    summary = summarize_diff(diff)

    print(f"Exact key:   {fingerprint.exact_key}")
    print(f"Semantic:    {fingerprint.semantic}")
    print(f"Structural:  {fingerprint.structural}")
    print(
        f"Files:       {summary.file_count} "
        f"(+{summary.additions} -{summary.deletions})"
    )
    return 0


async def _cmd_cache_get(args: argparse.Namespace, settings) -> int:
    from aicommit.api.facade import open_commit_cache

    diff = read_diff(args.file, args.staged)
    async with open_commit_cache(settings) as cache:
        messages = await cache.get(diff, fast=args.fast or None)
    return _print_messages(messages)


async def _cmd_cache_similar(args: argparse.Namespace, settings) -> int:
    from aicommit.api.facade import open_commit_cache

    diff = read_diff(args.file, args.staged)
    async with open_commit_cache(settings) as cache:
        messages = await cache.find_similar(diff)
    return _print_messages(messages)


async def _cmd_cache_set(args: argparse.Namespace, settings) -> int:
    from aicommit.api.facade import open_commit_cache

    diff = read_diff(args.file, args.staged)
    async with open_commit_cache(settings) as cache:
        await cache.set(diff, args.messages)
    print(f"Stored {len(args.messages)} message(s)")
    return 0


async def _cmd_cache_stats(args: argparse.Namespace, settings) -> int:
    from aicommit.api.facade import open_commit_cache

    async with open_commit_cache(settings) as cache:
        stats = await cache.get_stats()

    print("Memory tier:")
    print(f"  Keys:       {stats.memory.keys}")
    print(f"  Hit rate:   {stats.memory.hit_rate:.1f}%")
    print("Persistent tier:")
    print(f"  Files:      {stats.persistent.files}")
    print(f"  Size:       {stats.persistent.size_mb:.2f} MB")
    return 0


async def _cmd_cache_clear(args: argparse.Namespace, settings) -> int:
    from aicommit.api.facade import open_commit_cache

    async with open_commit_cache(settings) as cache:
        await cache.clear()
    print("Cache cleared")
    return 0


async def _cmd_cache_cleanup(args: argparse.Namespace, settings) -> int:
    from aicommit.api.facade import open_commit_cache

    async with open_commit_cache(settings) as cache:
        removed = await cache.cleanup()
    print(f"Removed {removed} cache entr{'y' if removed == 1 else 'ies'}")
    return 0


def _print_messages(messages: list[str] | None) -> int:
    if messages is None:
        print("No cached messages")
        return 1
    for message in messages:
        print(message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
