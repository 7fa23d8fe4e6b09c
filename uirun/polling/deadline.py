"""Deadline bookkeeping for bounded waits."""

import time
from typing import Callable, Optional


class Deadline:
    """Tracks elapsed and remaining time against a fixed timeout."""

    def __init__(
        self,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize deadline.

        Args:
            timeout: Timeout in seconds.
            clock: Monotonic clock returning seconds. Default: time.monotonic.
        """
        self.timeout = timeout
        self._clock = clock
        self._start_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        """Seconds elapsed since start."""
        if self._start_time is None:
            return 0.0
        return self._clock() - self._start_time

    @property
    def remaining(self) -> float:
        """Seconds remaining before timeout."""
        return max(0.0, self.timeout - self.elapsed)

    @property
    def is_expired(self) -> bool:
        """Whether the timeout has expired."""
        return self.elapsed >= self.timeout

    def start(self) -> "Deadline":
        """Start the timer."""
        self._start_time = self._clock()
        return self

    def reset(self) -> None:
        """Restart the timer from now."""
        self._start_time = self._clock()
