"""Reconciliation pass context: deadline and correlation ID propagation."""

from __future__ import annotations

import contextvars
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from .errors import DeadlineExceeded

# Context variable for storing correlation ID
correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


@dataclass
class PassContext:
    """Deadline shared by every outbound call of one reconciliation pass.

    Every call into the cluster or the platform asks the context for its
    remaining time, so a stuck call can only stall its own pass.
    """

    deadline: float
    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])

    @classmethod
    def with_timeout(cls, timeout: float) -> "PassContext":
        """Create a context expiring timeout seconds from now."""
        return cls(deadline=time.monotonic() + timeout)

    def remaining(self) -> float:
        """Get the remaining time in seconds.

        Raises:
            DeadlineExceeded: If the deadline has passed
        """
        left = self.deadline - time.monotonic()
        if left <= 0:
            raise DeadlineExceeded("reconciliation pass deadline exceeded")
        return left

    def check(self) -> None:
        """Raise DeadlineExceeded if the deadline has passed."""
        self.remaining()


@contextmanager
def sync_pass(timeout: float) -> Iterator[PassContext]:
    """Open a reconciliation pass bound to a deadline.

    Args:
        timeout: Pass duration in seconds

    Yields:
        The pass context, whose correlation ID is also set for logging
    """
    ctx = PassContext.with_timeout(timeout)
    token = correlation_id.set(ctx.correlation_id)
    try:
        yield ctx
    finally:
        correlation_id.reset(token)


def get_correlation_id() -> str | None:
    """Get the correlation ID from the current context."""
    return correlation_id.get()


def get_context_dict(additional: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get a dictionary of context values.

    Args:
        additional: Additional key-value pairs to include

    Returns:
        Dictionary with context values including correlation_id
    """
    ctx: dict[str, Any] = {}

    corr_id = get_correlation_id()
    if corr_id:
        ctx["correlation_id"] = corr_id

    if additional:
        ctx.update(additional)

    return ctx
