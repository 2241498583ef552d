"""Cancellation tokens checked by chains and state machines between steps."""
import threading
import time
from typing import Callable, Optional


class CancellationToken:
    """
    Thread-safe, one-way cancellation flag.

    Any thread may call ``cancel``; the dispatch that owns the token only
    looks at it between handler steps.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None
        self._lock = threading.Lock()

    @classmethod
    def never(cls) -> "CancellationToken":
        """Token that is never cancelled unless someone calls cancel()."""
        return cls()

    def cancel(self, reason: str = "cancelled by caller") -> None:
        with self._lock:
            if not self._event.is_set():
                self._reason = reason
                self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or ``timeout`` elapses."""
        return self._event.wait(timeout)


class Deadline(CancellationToken):
    """Cancellation token that fires once a monotonic deadline has passed."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        if seconds <= 0:
            raise ValueError("Deadline must be positive")
        super().__init__()
        self._clock = clock
        self._seconds = seconds
        self._expires_at = clock() + seconds

    @property
    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    @property
    def is_cancelled(self) -> bool:
        if not self._event.is_set() and self._clock() >= self._expires_at:
            self.cancel(f"deadline of {self._seconds:g}s exceeded")
        return self._event.is_set()
