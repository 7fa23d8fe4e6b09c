"""Bounded-timeout readiness polling.

Every operation that waits on an external condition (an element becoming
tappable, a view finishing its animation) goes through ReadinessPoller:
the predicate is re-evaluated every DEFAULT_POLL_INTERVAL seconds until it
holds or the timeout runs out.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Union

from ..errors import PollTimeoutError, PredicateError, WrongContextError
from .deadline import Deadline

logger = logging.getLogger(__name__)

# Default wait, in seconds, for calls that don't pass a timeout
DEFAULT_TIMEOUT = 5.0

# Time between predicate evaluations, in seconds
DEFAULT_POLL_INTERVAL = 0.05

Predicate = Callable[[], object]
TimeoutSource = Union[float, Callable[[], float]]


class ReadinessPoller:
    """Re-evaluates a predicate until it holds or a timeout expires.

    The total wait is bounded by the timeout plus at most one polling
    interval. A predicate that never holds raises PollTimeoutError; a
    predicate that raises aborts the wait with PredicateError, so callers
    can tell "never became true" from "became erroneous".
    """

    def __init__(
        self,
        default_timeout: TimeoutSource = DEFAULT_TIMEOUT,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        primary=None,
    ):
        """Initialize poller.

        Args:
            default_timeout: Timeout used when a call passes none. Either a
                number of seconds or a zero-argument callable returning one,
                read at call time.
            interval: Seconds between predicate evaluations.
            clock: Monotonic clock. Default: time.monotonic.
            sleep: Blocking sleep used between evaluations.
            primary: Primary execution context. Synchronous waits on it
                raise WrongContextError instead of blocking it.
        """
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        self._default_timeout = default_timeout
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._primary = primary

    @property
    def default_timeout(self) -> float:
        if callable(self._default_timeout):
            return float(self._default_timeout())
        return float(self._default_timeout)

    def wait_until(
        self,
        predicate: Predicate,
        timeout: Optional[float] = None,
        description: Optional[str] = None,
    ) -> float:
        """Block until predicate() is truthy.

        Args:
            predicate: Side-effect free callable, evaluated repeatedly.
            timeout: Seconds to wait. None = the default timeout.
            description: Human readable condition name for errors and logs.

        Returns:
            Seconds elapsed until the predicate held.

        Raises:
            PollTimeoutError: If the predicate never held within timeout.
            PredicateError: If the predicate raised.
            WrongContextError: If called on the primary context.
        """
        if self._primary is not None and self._primary.is_current():
            raise WrongContextError(
                "Blocking waits are not allowed on the primary context; "
                "use wait_until_async()"
            )

        deadline = self._deadline(timeout)
        while True:
            if self._evaluate(predicate, description):
                return deadline.elapsed
            if deadline.is_expired:
                raise self._timeout_error(deadline, description)
            self._sleep(min(self.interval, deadline.remaining))

    def poll(
        self,
        predicate: Predicate,
        timeout: Optional[float] = None,
        description: Optional[str] = None,
    ) -> bool:
        """Like wait_until(), but return False on timeout instead of raising."""
        try:
            self.wait_until(predicate, timeout=timeout, description=description)
        except PollTimeoutError:
            return False
        return True

    async def wait_until_async(
        self,
        predicate: Predicate,
        timeout: Optional[float] = None,
        description: Optional[str] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> float:
        """Coroutine variant of wait_until() that yields between evaluations.

        Safe to await on the primary context: the event loop keeps running
        while the condition is pending.
        """
        sleep = sleep or asyncio.sleep
        deadline = self._deadline(timeout)
        while True:
            if self._evaluate(predicate, description):
                return deadline.elapsed
            if deadline.is_expired:
                raise self._timeout_error(deadline, description)
            await sleep(min(self.interval, deadline.remaining))

    def _deadline(self, timeout: Optional[float]) -> Deadline:
        if timeout is None:
            timeout = self.default_timeout
        return Deadline(timeout, clock=self._clock).start()

    def _evaluate(self, predicate: Predicate, description: Optional[str]) -> bool:
        try:
            return bool(predicate())
        except Exception as e:
            raise PredicateError(description, e) from e

    def _timeout_error(
        self, deadline: Deadline, description: Optional[str]
    ) -> PollTimeoutError:
        elapsed = deadline.elapsed
        logger.debug(
            "Gave up waiting for %s after %.3fs",
            description or "condition",
            elapsed,
        )
        return PollTimeoutError(deadline.timeout, elapsed, description)
