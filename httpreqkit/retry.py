"""Rollback retry policy helpers."""

from __future__ import annotations

from datetime import timedelta

__all__ = [
    "DEFAULT_WAIT_TIMEOUT",
    "should_retry",
    "rollback_enabled",
    "retries_limit_reached",
    "wait_timeout",
    "get_rollback_retries_limit",
]

DEFAULT_WAIT_TIMEOUT = timedelta(minutes=5)


def should_retry(rollback_retries_limit: int | None, status_failed: int) -> bool:
    """Retry when rollback is enabled and at least one failure was recorded."""
    return rollback_enabled(rollback_retries_limit) and status_failed != 0


def rollback_enabled(rollback_retries_limit: int | None) -> bool:
    """Rollback is enabled when a retries limit is set."""
    return rollback_retries_limit is not None


def retries_limit_reached(status_failed: int, rollback_retries_limit: int) -> bool:
    """Return True once the failure count reaches the limit."""
    return status_failed >= rollback_retries_limit


def wait_timeout(timeout: timedelta | None) -> timedelta:
    """Return ``timeout``, or the default of five minutes."""
    return timeout if timeout is not None else DEFAULT_WAIT_TIMEOUT


def get_rollback_retries_limit(rollback_retries_limit: int | None) -> int:
    """Return the retries limit, defaulting to 1."""
    return 1 if rollback_retries_limit is None else rollback_retries_limit