"""JSON report generator for test runs."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..runner.result_collector import RunReport


class JsonReporter:
    """Generates JSON reports from run reports."""

    def generate(
        self,
        report: RunReport,
        error: Optional[str] = None,
        include_tracebacks: bool = False,
    ) -> dict[str, Any]:
        """Generate a JSON-ready report.

        Args:
            report: Outcomes of the run.
            error: Error that kept the run from completing, if any.
            include_tracebacks: Include full tracebacks of failed units.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        all_passed = report.all_passed and error is None

        units = []
        for outcome in report.outcomes:
            entry = {
                "name": outcome.name,
                "status": outcome.status,
                "duration_ms": outcome.duration_ms,
                "error": outcome.error,
                "error_type": outcome.error_type,
            }
            if include_tracebacks and outcome.traceback:
                entry["traceback"] = outcome.traceback
            units.append(entry)

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "run_id": report.run_id,
            "started_at": report.started_at,
            "status": "passed" if all_passed else "failed",
            "summary": {
                "total": report.total_count,
                "passed": report.passed_count,
                "failed": report.failed_count,
                "skipped": report.skipped_count,
                "duration_ms": report.duration_ms,
            },
            "units": units,
            "error": error,
        }

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def generate_flow_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate the CLI's one-line JSON result.

        {
            "success": bool,
            "command": "run",
            "data": { ... },
            "message": str
        }
        """
        summary = report["summary"]
        all_passed = report["status"] == "passed"

        data: dict[str, Any] = {
            "run_id": report["run_id"],
            "total_tests": summary["total"],
            "passed": summary["passed"],
            "failed": summary["failed"],
            "skipped": summary["skipped"],
            "duration_ms": summary["duration_ms"],
            "failures": [
                {"name": u["name"], "error": u["error"]}
                for u in report["units"]
                if u["status"] == "failed"
            ],
        }

        if report_path:
            data["report_path"] = report_path

        if not all_passed and report.get("error"):
            message = f"Run failed: {report['error']}"
        elif not all_passed:
            message = f"{summary['failed']} of {summary['total']} units failed"
        elif summary["total"] == 0:
            message = "No units selected to run"
        else:
            message = "All tests passed"

        return {
            "success": all_passed,
            "command": "run",
            "data": data,
            "message": message,
        }
