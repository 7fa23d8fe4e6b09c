"""Result collector for test runs.

Collects the outcome of each unit as the background worker executes it.
"""

import time
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class UnitOutcome:
    """Outcome of a single unit execution."""
    name: str
    passed: bool
    duration_ms: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None
    traceback: Optional[str] = None

    @property
    def status(self) -> str:
        return "passed" if self.passed else "failed"


@dataclass
class RunReport:
    """Aggregated outcomes of one run."""
    run_id: int
    requested_count: int = 0
    outcomes: list[UnitOutcome] = field(default_factory=list)
    started_at: str = ""
    duration_ms: int = 0

    @property
    def all_passed(self) -> bool:
        return all(o.passed for o in self.outcomes)

    @property
    def passed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.passed)

    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @property
    def skipped_count(self) -> int:
        """Units requested but left out by platform or focus filtering."""
        return max(0, self.requested_count - self.total_count)

    def executed_names(self) -> list[str]:
        return [o.name for o in self.outcomes]


class ResultCollector:
    """Builds a RunReport one unit at a time."""

    def __init__(self, run_id: int, requested_count: int = 0):
        self.report = RunReport(run_id=run_id, requested_count=requested_count)
        self._start: Optional[float] = None

    def start(self) -> None:
        """Mark the start of execution."""
        self._start = time.monotonic()
        self.report.started_at = datetime.now(timezone.utc).isoformat()

    def add_success(self, name: str, duration_ms: int) -> UnitOutcome:
        outcome = UnitOutcome(name=name, passed=True, duration_ms=duration_ms)
        self.report.outcomes.append(outcome)
        return outcome

    def add_failure(self, name: str, error: BaseException, duration_ms: int) -> UnitOutcome:
        outcome = UnitOutcome(
            name=name,
            passed=False,
            duration_ms=duration_ms,
            error=str(error) or type(error).__name__,
            error_type=type(error).__name__,
            traceback="".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
        )
        self.report.outcomes.append(outcome)
        return outcome

    def finish(self) -> RunReport:
        """Stamp the total duration and return the report."""
        if self._start is not None:
            self.report.duration_ms = int((time.monotonic() - self._start) * 1000)
        return self.report
