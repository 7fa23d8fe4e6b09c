"""HTTP bridge to a host automation driver.

Implements the driver protocol:
- POST /driver/finish  - testing finished, stop issuing commands
- GET  /driver/status  - health check
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from ..errors import BridgeError
from .base import HostDriverBridge

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """How often, and how patiently, to retry a driver request.

    Delays grow by backoff_factor from initial_delay and are capped at
    max_delay.
    """
    max_retries: int = 3
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 5.0

    def get_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number attempt (0-based)."""
        return min(self.initial_delay * self.backoff_factor ** attempt, self.max_delay)

    def allows_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries


def default_retry_policy() -> RetryPolicy:
    return RetryPolicy()


def no_retry_policy() -> RetryPolicy:
    """Give up on the first failed driver request."""
    return RetryPolicy(max_retries=0)


class HttpDriverBridge(HostDriverBridge):
    """Signals a driver that listens for HTTP requests."""

    def __init__(
        self,
        base_url: str,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize HTTP bridge.

        Args:
            base_url: Base URL of the driver (e.g., http://127.0.0.1:51330).
            retry_policy: Retry policy for failed requests.
            request_timeout: Request timeout in seconds.
            sleep: Sleep used between retries.
        """
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_timeout = request_timeout
        self._sleep = sleep
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def signal_finished(self, report) -> None:
        """POST /driver/finish with the run summary.

        Raises:
            BridgeError: If the driver can't be reached after all retries.
        """
        payload = self.build_payload(report)
        try:
            self._request_with_retry(
                "POST",
                f"{self.base_url}/driver/finish",
                json=payload,
                timeout=self.request_timeout,
            )
        except requests.RequestException as e:
            raise BridgeError(f"Failed to signal driver at {self.base_url}: {e}") from e
        logger.info("Signaled driver at %s (run %d)", self.base_url, report.run_id)

    def build_payload(self, report) -> dict[str, Any]:
        return {
            "event": "finished",
            "run_id": report.run_id,
            "passed": report.passed_count,
            "failed": report.failed_count,
            "total": report.total_count,
            "duration_ms": report.duration_ms,
        }

    def health_check(self) -> bool:
        """Whether the driver responds at all."""
        try:
            response = self._session.get(f"{self.base_url}/driver/status", timeout=5)
            return response.status_code < 500
        except (requests.ConnectionError, requests.Timeout):
            return False

    def _request_with_retry(self, method: str, url: str, **kwargs) -> requests.Response:
        """Execute a request, retrying on connection errors, timeouts and 5xx."""
        for attempt in range(self.retry_policy.max_retries + 1):
            retries_left = self.retry_policy.allows_retry(attempt)
            try:
                response = self._session.request(method, url, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as e:
                if not retries_left:
                    raise
                logger.debug("Driver request failed (%s), retrying", e)
            else:
                if response.status_code < 500 or not retries_left:
                    response.raise_for_status()
                    return response
                logger.debug("Driver answered %d, retrying", response.status_code)

            self._sleep(self.retry_policy.get_delay(attempt))

        raise RuntimeError("Request failed with no error captured")

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
