"""Waiting on Azure long-running operations.

The SDK poller owns the polling interval, retry and backoff. This module
only decides how long the caller is willing to wait: it waits on the poller
in short slices and checks the caller's OperationContext between slices, so
a cancel() or an expired deadline ends the wait promptly instead of blocking
until ARM reports a terminal state.

Cancelling ends the wait, not the remote operation.

Public API:
    OperationContext: Cancellation event + optional overall deadline
    wait_for_completion: Wait on an LROPoller under an OperationContext
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from azprovision.exceptions import OperationCancelledError, OperationTimeoutError

logger = logging.getLogger(__name__)

# Upper bound on a single poller.wait() slice
DEFAULT_CHECK_INTERVAL = 1.0


@dataclass
class OperationContext:
    """Caller-side cancellation and deadline for one orchestration.

    Example:
        >>> ctx = OperationContext(timeout=600)
        >>> ctx.cancelled
        False
        >>> ctx.cancel()
        >>> ctx.cancelled
        True
    """

    timeout: float | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event)
    _deadline: float | None = field(init=False, default=None, repr=False)

    def __post_init__(self):
        if self.timeout is not None:
            if self.timeout <= 0:
                raise ValueError(f"timeout must be positive, got {self.timeout}")
            self._deadline = time.monotonic() + self.timeout

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self, operation: str) -> None:
        """Raise if the caller cancelled or the deadline passed.

        Raises:
            OperationCancelledError: cancel() was called
            OperationTimeoutError: The deadline expired
        """
        if self.cancelled:
            raise OperationCancelledError(f"{operation} cancelled by caller")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise OperationTimeoutError(f"{operation} timed out after {self.timeout}s")


def wait_for_completion(
    poller: Any,
    operation: str,
    context: OperationContext | None = None,
    check_interval: float = DEFAULT_CHECK_INTERVAL,
) -> Any:
    """Wait for a long-running operation and return its result.

    Args:
        poller: azure.core.polling.LROPoller (or anything with done/wait/result)
        operation: Human-readable operation name for messages
        context: Optional caller context; None waits until the poller finishes
        check_interval: Longest single wait slice in seconds

    Returns:
        The poller's final resource

    Raises:
        OperationCancelledError: Caller cancelled during the wait
        OperationTimeoutError: Caller deadline expired during the wait
        Exception: Whatever the poller raised, unchanged
    """
    if context is None:
        return poller.result()

    logger.debug(f"Waiting for {operation} to complete")
    while not poller.done():
        context.check(operation)
        slice_seconds = check_interval
        remaining = context.remaining()
        if remaining is not None:
            slice_seconds = min(slice_seconds, remaining)
        poller.wait(timeout=slice_seconds)

    return poller.result()


__all__ = ["DEFAULT_CHECK_INTERVAL", "OperationContext", "wait_for_completion"]
