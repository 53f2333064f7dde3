"""Cooperative cancellation shared between the resolver and its workers."""

from __future__ import annotations

import threading
import time
from typing import Optional


class ScanAbortedError(Exception):
    """Raised when a scan is cancelled or exceeds its deadline."""


class CancelToken:
    """Thread-safe cancellation flag with an optional deadline.

    Workers call :meth:`raise_if_cancelled` at safe points; the deadline is
    measured on the monotonic clock from construction.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self.reason = "scan cancelled"

    def cancel(self, reason: str = "scan cancelled") -> None:
        """Request cancellation; idempotent."""
        if not self._event.is_set():
            self.reason = reason
        self._event.set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("scan deadline exceeded")
            return True
        return False

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled():
            raise ScanAbortedError(self.reason)
