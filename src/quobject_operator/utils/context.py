"""Context propagation utilities for correlation IDs and reconcile deadlines."""

from __future__ import annotations

import contextvars
import time
from contextlib import contextmanager
from typing import Any, Iterator

from .errors import DeadlineExceeded

# Context variable for storing correlation ID
correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# Monotonic timestamp after which backend and store calls must not start
deadline: contextvars.ContextVar[float | None] = contextvars.ContextVar(
    "reconcile_deadline", default=None
)


def set_correlation_id(corr_id: str) -> None:
    """Set the correlation ID in the current context.

    Args:
        corr_id: Correlation ID to set
    """
    correlation_id.set(corr_id)


def get_correlation_id() -> str | None:
    """Get the correlation ID from the current context.

    Returns:
        Correlation ID if set, None otherwise
    """
    return correlation_id.get()


@contextmanager
def with_correlation_id(corr_id: str) -> Iterator[str]:
    """Context manager to set a correlation ID for the duration of a block.

    Args:
        corr_id: Correlation ID to use

    Yields:
        The correlation ID
    """
    token = correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        correlation_id.reset(token)


def get_context_dict(additional: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get a dictionary of context values.

    Args:
        additional: Additional key-value pairs to include

    Returns:
        Dictionary with context values including correlation_id
    """
    ctx = {}

    corr_id = get_correlation_id()
    if corr_id:
        ctx["correlation_id"] = corr_id

    if additional:
        ctx.update(additional)

    return ctx


@contextmanager
def reconcile_deadline(timeout: float | None) -> Iterator[float | None]:
    """Bound the current reconcile pass to ``timeout`` seconds.

    A timeout of ``None`` or ``0`` disables the deadline. Nested deadlines
    keep the earlier of the two expiry times.

    Yields:
        The absolute monotonic expiry time, or None
    """
    expires_at = None
    if timeout:
        expires_at = time.monotonic() + timeout
        outer = deadline.get()
        if outer is not None:
            expires_at = min(expires_at, outer)
    token = deadline.set(expires_at)
    try:
        yield expires_at
    finally:
        deadline.reset(token)


def remaining_time() -> float | None:
    """Seconds left before the current deadline, or None without one."""
    expires_at = deadline.get()
    if expires_at is None:
        return None
    return expires_at - time.monotonic()


def check_deadline(operation: str) -> None:
    """Refuse to start ``operation`` once the current deadline has passed.

    Raises:
        DeadlineExceeded: If the deadline has expired
    """
    left = remaining_time()
    if left is not None and left <= 0:
        raise DeadlineExceeded(f"Reconcile deadline exceeded before {operation}")
