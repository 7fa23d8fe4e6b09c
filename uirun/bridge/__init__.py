"""Bridge module - signaling the host automation driver."""

from typing import Optional

from .base import HostDriverBridge, LoggingBridge, RecordingBridge
from .http_bridge import HttpDriverBridge, RetryPolicy, default_retry_policy, no_retry_policy


def create_bridge(driver_url: Optional[str] = None) -> HostDriverBridge:
    """HTTP bridge when a driver URL is configured, logging bridge otherwise."""
    if driver_url:
        return HttpDriverBridge(driver_url)
    return LoggingBridge()


__all__ = [
    "HostDriverBridge",
    "HttpDriverBridge",
    "LoggingBridge",
    "RecordingBridge",
    "RetryPolicy",
    "create_bridge",
    "default_retry_policy",
    "no_retry_policy",
]
