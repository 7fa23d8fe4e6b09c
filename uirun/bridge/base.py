"""Host driver bridge interface.

The host automation driver keeps issuing commands until it is told the run
is over. The coordinator signals it exactly once per completed run, after
the completion callback.
"""

import logging
import threading
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class HostDriverBridge(ABC):
    """One-way channel to the host automation driver."""

    @abstractmethod
    def signal_finished(self, report) -> None:
        """Tell the driver testing has finished.

        Args:
            report: RunReport of the run that just completed.
        """

    def close(self) -> None:
        pass


class LoggingBridge(HostDriverBridge):
    """Bridge for hosts whose driver watches the log."""

    def signal_finished(self, report) -> None:
        logger.info(
            "Testing finished: run %d, %d/%d unit(s) passed",
            report.run_id,
            report.passed_count,
            report.total_count,
        )


class RecordingBridge(HostDriverBridge):
    """Keeps every signal in memory. Used for embedding and tests."""

    def __init__(self):
        self.signals: list = []
        self._signaled = threading.Event()

    def signal_finished(self, report) -> None:
        self.signals.append(report)
        self._signaled.set()

    @property
    def count(self) -> int:
        return len(self.signals)

    def wait(self, timeout: float = None) -> bool:
        """Block until at least one signal arrived."""
        return self._signaled.wait(timeout)
