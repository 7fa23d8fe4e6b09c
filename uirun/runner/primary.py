"""Primary execution contexts.

The primary context is the host's single-threaded context that owns UI
state. The coordinator only needs two things from it: a thread-safe way to
schedule a callback on it, and a way to tell whether the calling code is
already running on it.
"""

import asyncio
import logging
import queue
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PrimaryContext(ABC):
    """The host's primary (UI) execution context."""

    @abstractmethod
    def call_soon(self, callback: Callable, *args) -> None:
        """Schedule callback(*args) on the primary context. Thread-safe."""

    @abstractmethod
    def is_current(self) -> bool:
        """Whether the caller is running on the primary context."""


class EventLoopContext(PrimaryContext):
    """An asyncio event loop acting as the primary context."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def call_soon(self, callback: Callable, *args) -> None:
        self.loop.call_soon_threadsafe(callback, *args)

    def is_current(self) -> bool:
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False


class QueueContext(PrimaryContext):
    """A main queue drained by the thread that created it.

    Useful for hosts without an event loop, and for tests: the owning thread
    calls process_events() or run_until() to service scheduled callbacks.
    """

    def __init__(self):
        self._owner = threading.get_ident()
        self._queue: "queue.Queue[tuple]" = queue.Queue()

    def call_soon(self, callback: Callable, *args) -> None:
        self._queue.put((callback, args))

    def is_current(self) -> bool:
        return threading.get_ident() == self._owner

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def process_events(self, timeout: float = 0.0) -> int:
        """Run queued callbacks.

        Waits up to timeout seconds for the first callback, then runs
        everything already queued without waiting further.

        Returns:
            Number of callbacks run.
        """
        self._check_owner()
        count = 0
        block = timeout > 0
        while True:
            try:
                callback, args = self._queue.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                return count
            block = False
            callback(*args)
            count += 1

    def run_until(self, predicate: Callable[[], bool], timeout: float = 10.0) -> bool:
        """Service callbacks until predicate() holds or timeout passes.

        Returns:
            Whether the predicate held.
        """
        self._check_owner()
        deadline = time.monotonic() + timeout
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self.process_events(timeout=min(remaining, 0.05))
        return True

    def _check_owner(self) -> None:
        if not self.is_current():
            raise RuntimeError("QueueContext can only be drained by the thread that created it")
