"""Interface elements as seen by tests.

How an element is matched against the accessibility hierarchy is up to
the host integration. This module only adds the waiting behavior: before
a test interacts with an element, it waits (up to the run's default
timeout) for the element to become valid and tappable.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .polling.poller import ReadinessPoller

logger = logging.getLogger(__name__)


class UIElement(ABC):
    """A matched (or not yet matched) interface element."""

    def __init__(self, poller: ReadinessPoller, description: Optional[str] = None):
        """Initialize element.

        Args:
            poller: Poller of the active run (RunContext.poller).
            description: Name used in timeout messages.
        """
        self.poller = poller
        self.description = description or type(self).__name__

    @abstractmethod
    def is_valid(self) -> bool:
        """Whether the element currently matches something on screen."""

    @abstractmethod
    def is_visible(self) -> bool:
        """Whether the matched object is visible."""

    @abstractmethod
    def _tap(self) -> None:
        """Perform the tap on the matched object."""

    def is_tappable(self) -> bool:
        return self.is_valid() and self.is_visible()

    def wait_until_valid(self, timeout: Optional[float] = None) -> float:
        """Wait for the element to match.

        Raises:
            PollTimeoutError: If the element never became valid.
        """
        return self.poller.wait_until(
            self.is_valid, timeout=timeout, description=f"{self.description} to be valid"
        )

    def wait_until_tappable(self, timeout: Optional[float] = None) -> float:
        """Wait for the element to become tappable.

        Raises:
            PollTimeoutError: If the element never became tappable.
        """
        return self.poller.wait_until(
            self.is_tappable, timeout=timeout, description=f"{self.description} to be tappable"
        )

    def tap(self, timeout: Optional[float] = None) -> None:
        """Wait until tappable, then tap."""
        self.wait_until_tappable(timeout)
        logger.debug("Tapping %s", self.description)
        self._tap()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description!r}>"
