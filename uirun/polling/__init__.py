"""Polling module - bounded waits on external conditions."""

from .deadline import Deadline
from .poller import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, ReadinessPoller

__all__ = [
    "Deadline",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_TIMEOUT",
    "ReadinessPoller",
]
