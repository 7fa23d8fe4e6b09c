"""uirun - coordinates UI test runs inside a host application."""

from .config import BuildMode, CoordinatorConfig, load_config
from .elements import UIElement
from .errors import (
    BridgeError,
    ConfigurationLockedError,
    PollTimeoutError,
    PredicateError,
    SchedulingConflictError,
    UIRunError,
    UnitFailure,
    WrongContextError,
)
from .polling import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, ReadinessPoller
from .runner import QueueContext, EventLoopContext, RunContext, RunCoordinator, RunReport, RunState
from .units import TestCase, TestUnit

__version__ = "0.1.0"

__all__ = [
    "BridgeError",
    "BuildMode",
    "ConfigurationLockedError",
    "CoordinatorConfig",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_TIMEOUT",
    "EventLoopContext",
    "PollTimeoutError",
    "PredicateError",
    "QueueContext",
    "ReadinessPoller",
    "RunContext",
    "RunCoordinator",
    "RunReport",
    "RunState",
    "SchedulingConflictError",
    "TestCase",
    "TestUnit",
    "UIElement",
    "UIRunError",
    "UnitFailure",
    "WrongContextError",
    "load_config",
]
