"""Error types raised by the run coordinator and its collaborators."""

from typing import Optional


class UIRunError(Exception):
    """Base class for all uirun errors."""


class SchedulingConflictError(UIRunError, RuntimeError):
    """A run was requested while another run is still active."""

    def __init__(self, active_state):
        self.active_state = active_state
        super().__init__(
            f"Cannot start a run while another run is {active_state.value}"
        )


class ConfigurationLockedError(UIRunError, RuntimeError):
    """Coordinator configuration was changed while a run is active."""

    def __init__(self, setting: str, active_state):
        self.setting = setting
        self.active_state = active_state
        super().__init__(
            f"Cannot change '{setting}' while a run is {active_state.value}"
        )


class PollTimeoutError(UIRunError, TimeoutError):
    """A polled condition never became true within its timeout."""

    def __init__(
        self,
        timeout: float,
        elapsed: float,
        description: Optional[str] = None,
    ):
        self.timeout = timeout
        self.elapsed = elapsed
        self.description = description
        what = description or "condition"
        super().__init__(
            f"{what} did not become true within {timeout:.2f}s "
            f"(waited {elapsed:.2f}s)"
        )


class PredicateError(UIRunError, RuntimeError):
    """A polled predicate raised instead of answering."""

    def __init__(self, description: Optional[str], error: BaseException):
        self.description = description
        self.error = error
        what = description or "condition"
        super().__init__(
            f"Evaluating {what} raised {type(error).__name__}: {error}"
        )


class WrongContextError(UIRunError, RuntimeError):
    """A blocking wait was attempted on the primary context."""


class UnitFailure(UIRunError, AssertionError):
    """One or more test methods of a unit failed."""

    def __init__(self, unit_name: str, failures: dict):
        self.unit_name = unit_name
        self.failures = failures
        names = ", ".join(failures)
        super().__init__(f"{unit_name}: {len(failures)} failed ({names})")


class BridgeError(UIRunError, ConnectionError):
    """The host driver could not be signaled."""
