# src/logging/logger.py — v2
"""Logger setup with JSON and text formatters.

Modules log through ``logging.getLogger(__name__)``; everything lives under
the ``aicommit`` logger, which ``setup_logging`` configures.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from aicommit.logging.context import get_context

if TYPE_CHECKING:
    from aicommit.config.settings import Settings

ROOT_LOGGER = "aicommit"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the cache operation context."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context_dict = get_context().as_dict()
        if context_dict:
            log_entry["context"] = context_dict

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for terminal use."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            datetime.now().strftime("%H:%M:%S"),
            f"[{record.levelname}]",
            record.name,
        ]
        if ctx.operation:
            parts.append(f"<{ctx.operation}>")
        if ctx.cache_key:
            parts.append(f"key={ctx.cache_key}")
        parts.append(f"- {record.getMessage()}")
        return " ".join(parts)


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the aicommit root logger."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> logging.Logger:
    """Configure the aicommit root logger.

    Console output goes to stderr so stdout stays usable for command output.
    Calling it again replaces the previous handlers.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JsonFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from aicommit.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            log_file, rotation=rotation, retention=retention
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


def setup_logging_from_settings(
    settings: Settings, level: str | None = None
) -> logging.Logger:
    """Configure logging from Settings, optionally overriding the level."""
    return setup_logging(
        level=level or settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
