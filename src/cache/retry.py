# src/cache/retry.py — v2
"""Retry policy with exponential backoff for persistent-tier I/O.

Only transient error classes (busy resource, timeout) are retried.
Permanent failures such as permission denied or a missing path fail fast.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

_BUSY_ERRNOS = frozenset(
    {errno.EBUSY, errno.EAGAIN, errno.EWOULDBLOCK, errno.EINTR, errno.EDEADLK}
)
_TIMEOUT_ERRNOS = frozenset({errno.ETIMEDOUT})
_PERMANENT_ERRNOS = frozenset(
    {
        errno.EACCES,
        errno.EPERM,
        errno.ENOENT,
        errno.ENOTDIR,
        errno.EISDIR,
        errno.EINVAL,
        errno.ENAMETOOLONG,
        errno.EROFS,
        errno.ENOSPC,
    }
)


class StorageRetryExhausted(Exception):
    """A storage operation failed and will not be retried further."""

    def __init__(
        self, operation: str, error_type: str, attempts: int, last_error: BaseException
    ):
        self.operation = operation
        self.error_type = error_type
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Storage operation '{operation}' failed after {attempts} attempt(s) "
            f"({error_type}): {last_error}"
        )


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration for a specific error type."""

    max_retries: int
    base_delay_s: float
    backoff_factor: float = 2.0
    jitter: bool = True


DEFAULT_RETRY_CONFIGS: dict[str, RetryConfig] = {
    "busy": RetryConfig(max_retries=3, base_delay_s=0.05),
    "timeout": RetryConfig(max_retries=2, base_delay_s=0.1),
}


def classify_error(error: BaseException) -> str:
    """Classify an exception into busy, timeout, permanent or unknown."""
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return "timeout"
    if isinstance(error, (PermissionError, FileNotFoundError, IsADirectoryError)):
        return "permanent"
    if isinstance(error, OSError) and error.errno is not None:
        if error.errno in _BUSY_ERRNOS:
            return "busy"
        if error.errno in _TIMEOUT_ERRNOS:
            return "timeout"
        if error.errno in _PERMANENT_ERRNOS:
            return "permanent"
    if isinstance(error, (ValueError, TypeError)):
        return "permanent"
    return "unknown"


def error_code(error: BaseException) -> str:
    """Short code for log lines: errno name when available, else type name."""
    if isinstance(error, StorageRetryExhausted):
        return error_code(error.last_error)
    if isinstance(error, OSError) and error.errno is not None:
        return errno.errorcode.get(error.errno, str(error.errno))
    return type(error).__name__


def _compute_delay(config: RetryConfig, attempt: int) -> float:
    """Compute delay for a given attempt (0-based)."""
    delay = config.base_delay_s * (config.backoff_factor ** attempt)
    if config.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    operation: str = "unknown",
    timeout_s: float | None = None,
    retry_configs: dict[str, RetryConfig] | None = None,
    **kwargs: Any,
) -> Any:
    """Run an async storage call with per-attempt timeout and retries.

    Raises:
        StorageRetryExhausted: On a non-retryable error or once retries run out.
    """
    configs = DEFAULT_RETRY_CONFIGS if retry_configs is None else retry_configs
    attempts = 0

    while True:
        try:
            if timeout_s is None:
                return await fn(*args, **kwargs)
            return await asyncio.wait_for(fn(*args, **kwargs), timeout=timeout_s)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error_type = classify_error(e)
            attempts += 1
            config = configs.get(error_type)

            if config is None or attempts > config.max_retries:
                raise StorageRetryExhausted(operation, error_type, attempts, e) from e

            delay = _compute_delay(config, attempts - 1)
            logger.warning(
                "Storage '%s' - %s (attempt %d/%d), retrying in %.2fs",
                operation, error_type, attempts, config.max_retries, delay,
            )
            await asyncio.sleep(delay)
