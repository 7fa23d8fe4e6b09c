"""CLI entry point for uirun.

    uirun <tests.py | package.module> [options]

Prints a single JSON result line on stdout; logs go to stderr.
"""

import asyncio
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

import click

from .config import CoordinatorConfig, load_config, validate_config
from .log import configure_logging
from .reporting.json_reporter import JsonReporter
from .runner.coordinator import RunCoordinator
from .runner.primary import EventLoopContext
from .units.discovery import load_units
from .units.platform import PLATFORM_ENV_VAR

logger = logging.getLogger(__name__)


@click.command()
@click.argument("target")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="YAML configuration file.")
@click.option("--timeout", type=float, help="Default wait timeout in seconds (default: 5).")
@click.option("--build-mode", type=click.Choice(["debug", "release"], case_sensitive=False),
              help="Build configuration of the host (default: $UIRUN_BUILD_MODE or release).")
@click.option("--wait-for-debugger", is_flag=True, help="Wait for a debugger before testing (debug builds only).")
@click.option("--driver-url", help="Base URL of the host automation driver.")
@click.option("--platform", help="Override the current platform name.")
@click.option("--save-report", "save_report_flag", is_flag=True, help="Save the JSON report to a file.")
@click.option("--report-dir", type=click.Path(file_okay=False, path_type=Path), help="Directory for saved reports.")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Also write logs to this file.")
@click.option("--pretty", is_flag=True, help="Pretty print the JSON result.")
def main(
    target: str,
    config_path: Optional[Path],
    timeout: Optional[float],
    build_mode: Optional[str],
    wait_for_debugger: bool,
    driver_url: Optional[str],
    platform: Optional[str],
    save_report_flag: bool,
    report_dir: Optional[Path],
    log_level: Optional[str],
    log_file: Optional[Path],
    pretty: bool,
):
    """Run the test units defined in TARGET."""
    try:
        config = load_config(config_path) if config_path else CoordinatorConfig()
        config = config.merged(
            default_timeout=timeout,
            build_mode=build_mode,
            should_wait_for_debugger=True if wait_for_debugger else None,
            driver_url=driver_url,
            save_report=True if save_report_flag else None,
            report_dir=report_dir,
            log_level=log_level.upper() if log_level else None,
        )
    except (OSError, ValueError) as e:
        output_error(f"Failed to load config: {e}")
        sys.exit(1)

    configure_logging(config.log_level, log_file=log_file)

    validation = validate_config(config)
    if not validation.valid:
        output_error(f"Invalid config: {validation}")
        sys.exit(1)
    for warning in validation.warnings:
        logger.warning("%s: %s", warning.path, warning.message)

    if platform:
        os.environ[PLATFORM_ENV_VAR] = platform

    try:
        units = load_units(target)
    except Exception as e:
        output_error(f"Failed to load tests from {target}: {e}")
        sys.exit(1)

    start_time = time.time()
    reporter = JsonReporter()

    try:
        report = asyncio.run(run_units(units, config))
    except KeyboardInterrupt:
        duration_ms = int((time.time() - start_time) * 1000)
        output_error("Run interrupted by user", duration_ms=duration_ms)
        sys.exit(130)

    json_report = reporter.generate(report)

    report_path = None
    if config.save_report:
        report_path = save_report(reporter, json_report, config.report_dir)

    flow_output = reporter.generate_flow_output(json_report, report_path)
    print(json.dumps(flow_output, ensure_ascii=False, indent=2 if pretty else None))

    if not flow_output["success"]:
        sys.exit(1)


async def run_units(units: list, config: CoordinatorConfig):
    """Run units through the shared coordinator on this event loop."""
    loop = asyncio.get_running_loop()

    def debug_prompt(acknowledge):
        prompt = loop.run_in_executor(None, _prompt_for_debugger, acknowledge)
        prompt.add_done_callback(_log_prompt_failure)

    coordinator = RunCoordinator.shared(
        config,
        primary=EventLoopContext(loop),
        debug_prompt=debug_prompt,
    )
    try:
        return await asyncio.wrap_future(coordinator.run(units))
    finally:
        coordinator.shutdown()


def _log_prompt_failure(prompt: asyncio.Future) -> None:
    if prompt.cancelled():
        return
    error = prompt.exception()
    if error is not None:
        logger.error(
            "Debugger prompt failed; the run stays waiting for acknowledge_debugger()",
            exc_info=error,
        )


def _prompt_for_debugger(acknowledge) -> None:
    click.pause(
        info=(
            f"Attach a debugger to process {os.getpid()}, "
            "then press any key to start testing..."
        ),
        err=True,
    )
    acknowledge()


def save_report(reporter: JsonReporter, report: dict, report_dir: Optional[Path]) -> Optional[str]:
    """Save the report; a failure to save never fails the run."""
    try:
        path = (report_dir or Path(".")) / f"uirun_report_{report['run_id']}.json"
        saved_path = reporter.save(report, path)
        logger.info("Report saved: %s", saved_path)
        return str(saved_path)
    except OSError as e:
        logger.warning("Failed to save report: %s", e)
        return None


def output_error(message: str, **extra):
    """Output an error as the JSON result line."""
    output = {
        "success": False,
        "command": "run",
        "data": extra or None,
        "message": message,
    }
    print(json.dumps(output, ensure_ascii=False))


if __name__ == "__main__":
    main()
