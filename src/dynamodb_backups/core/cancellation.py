"""
Run-wide deadline and cancellation shared by every task of a run.
"""

import threading
import time
from typing import Callable, Optional

from dynamodb_backups.exceptions import TaskCancelledError, TaskTimeoutError


class CancellationToken:
    """
    Deadline plus explicit cancel flag, passed to every task of a run.

    Tasks check the token before each store call; waiters use
    ``remaining()`` as their timeout. A token without a timeout never
    expires but can still be cancelled.
    """

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._event = threading.Event()
        self.timeout_seconds = timeout_seconds
        self.deadline = None if timeout_seconds is None else clock() + timeout_seconds

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    @property
    def expired(self) -> bool:
        return self.deadline is not None and self._clock() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise TaskTimeoutError or TaskCancelledError when the run is over."""
        if self.expired:
            raise TaskTimeoutError(
                f"Run deadline of {self.timeout_seconds}s exceeded"
            )
        if self._event.is_set():
            raise TaskCancelledError("Run was cancelled")
