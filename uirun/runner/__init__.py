"""Runner module - run coordination."""

from .coordinator import RunContext, RunCoordinator
from .primary import EventLoopContext, PrimaryContext, QueueContext
from .result_collector import ResultCollector, RunReport, UnitOutcome
from .state import RunState

__all__ = [
    "EventLoopContext",
    "PrimaryContext",
    "QueueContext",
    "ResultCollector",
    "RunContext",
    "RunCoordinator",
    "RunReport",
    "RunState",
    "UnitOutcome",
]
