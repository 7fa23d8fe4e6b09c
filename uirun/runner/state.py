"""Run states and the transitions allowed between them."""

from enum import Enum


class RunState(str, Enum):
    """Lifecycle of a run."""
    IDLE = "idle"
    AWAITING_DEBUG_ACK = "awaiting_debug_ack"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        """Whether a run holds the single-flight slot in this state."""
        return self in ACTIVE_STATES


ACTIVE_STATES = frozenset({
    RunState.AWAITING_DEBUG_ACK,
    RunState.SCHEDULED,
    RunState.RUNNING,
})

TRANSITIONS = {
    RunState.IDLE: {RunState.AWAITING_DEBUG_ACK, RunState.SCHEDULED},
    RunState.AWAITING_DEBUG_ACK: {RunState.SCHEDULED},
    RunState.SCHEDULED: {RunState.RUNNING},
    RunState.RUNNING: {RunState.COMPLETED},
    RunState.COMPLETED: {RunState.IDLE},
}


def can_transition(current: RunState, target: RunState) -> bool:
    return target in TRANSITIONS[current]
