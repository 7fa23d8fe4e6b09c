"""Run coordinator - drives test runs.

A run goes through:
1. Filter units (platform, then focus)
2. Optionally wait for a debugger acknowledgment (debug builds only)
3. Schedule the run set on the background worker
4. Execute units one at a time, isolating failures per unit
5. Hop back to the primary context, call the completion callback
6. Signal the host driver bridge
7. Return to idle

Only one run may be active at a time. A run requested while another is
active is rejected with SchedulingConflictError.
"""

import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Iterable, Optional

from ..bridge import HostDriverBridge, create_bridge
from ..config import BuildMode, CoordinatorConfig
from ..errors import ConfigurationLockedError, SchedulingConflictError, WrongContextError
from ..polling.poller import ReadinessPoller
from ..units.filtering import normalize_units, select_units
from .primary import PrimaryContext, QueueContext
from .result_collector import ResultCollector, RunReport
from .state import RunState, can_transition

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[], None]
DebugPrompt = Callable[[Callable[[], bool]], None]

# Outcome name for a failure raised while preparing a run, outside any unit.
RUN_SETUP_NAME = "<run setup>"


@dataclass
class RunContext:
    """Handle passed to every unit of a run."""
    run_id: int
    coordinator: "RunCoordinator"
    poller: ReadinessPoller
    default_timeout: float


@dataclass
class _Run:
    run_id: int
    units: list
    requested_count: int
    future: Future = field(default_factory=Future)


def _log_debug_prompt(acknowledge: Callable[[], bool]) -> None:
    logger.warning(
        "Waiting to start testing. Attach a debugger to process %d, "
        "then call acknowledge_debugger() on the coordinator.",
        os.getpid(),
    )


class RunCoordinator:
    """Coordinates test runs between the primary context and a worker thread.

    The coordinator owns the run state, the default timeout every poller of
    a run falls back to, and the debugger gate. Use shared() for the
    process-wide instance; construct directly when embedding or testing.
    """

    _shared: ClassVar[Optional["RunCoordinator"]] = None
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        config: Optional[CoordinatorConfig] = None,
        primary: Optional[PrimaryContext] = None,
        bridge: Optional[HostDriverBridge] = None,
        debug_prompt: Optional[DebugPrompt] = None,
    ):
        """Initialize run coordinator.

        Args:
            config: Coordinator configuration. Default: CoordinatorConfig().
            primary: Primary execution context. Default: a QueueContext owned
                by the constructing thread.
            bridge: Host driver bridge. Default: from config.driver_url.
            debug_prompt: Called on the primary context with an acknowledge
                callable when a run waits for a debugger. Default: log a
                warning.
        """
        self._config = config or CoordinatorConfig()
        self._primary = primary or QueueContext()
        self._bridge = bridge or create_bridge(self._config.driver_url)
        self._debug_prompt = debug_prompt or _log_debug_prompt

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._state = RunState.IDLE
        self._run: Optional[_Run] = None
        self._pending_completion: Optional[CompletionCallback] = None
        self._run_count = 0
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="uirun-tests")

    @classmethod
    def shared(cls, config: Optional[CoordinatorConfig] = None, **kwargs) -> "RunCoordinator":
        """Return the process-wide coordinator, creating it on first call.

        Raises:
            RuntimeError: If construction arguments are passed after the
                coordinator was created.
        """
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls(config, **kwargs)
            elif config is not None or kwargs:
                raise RuntimeError("The shared coordinator has already been created")
            return cls._shared

    @classmethod
    def reset_shared(cls) -> None:
        """Drop the process-wide coordinator. Intended for tests."""
        with cls._shared_lock:
            if cls._shared is not None:
                cls._shared.shutdown(wait=False)
            cls._shared = None

    # -- configuration --------------------------------------------------

    @property
    def config(self) -> CoordinatorConfig:
        return self._config

    @property
    def primary(self) -> PrimaryContext:
        return self._primary

    @property
    def bridge(self) -> HostDriverBridge:
        return self._bridge

    @property
    def build_mode(self) -> BuildMode:
        return self._config.build_mode

    @property
    def default_timeout(self) -> float:
        """Timeout, in seconds, for waits that don't specify their own."""
        return self._config.default_timeout

    @default_timeout.setter
    def default_timeout(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"Default timeout must be positive, got {value}")
        with self._lock:
            self._check_unlocked("default_timeout")
            self._config.default_timeout = float(value)

    @property
    def should_wait_for_debugger(self) -> bool:
        """Whether runs wait for acknowledge_debugger() before starting.

        Only honored in debug builds.
        """
        return self._config.should_wait_for_debugger

    @should_wait_for_debugger.setter
    def should_wait_for_debugger(self, value: bool) -> None:
        with self._lock:
            self._check_unlocked("should_wait_for_debugger")
            self._config.should_wait_for_debugger = bool(value)

    # -- state ----------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def pending_completion(self) -> Optional[CompletionCallback]:
        return self._pending_completion

    def is_running(self) -> bool:
        """Whether a run currently holds the single-flight slot."""
        return self._state.is_active

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block a non-primary thread until no run is in progress.

        Raises:
            WrongContextError: If called on the primary context, which must
                stay free to finish the run.
        """
        if self._primary.is_current():
            raise WrongContextError("wait_until_idle() would block the primary context")
        with self._idle:
            return self._idle.wait_for(lambda: self._state is RunState.IDLE, timeout)

    # -- running --------------------------------------------------------

    def run(
        self,
        tests: Iterable,
        completion: Optional[CompletionCallback] = None,
    ) -> "Future[RunReport]":
        """Request a run of tests. Returns immediately.

        Args:
            tests: Set or sequence of test units.
            completion: Optional callback, invoked on the primary context
                once every unit has finished, before the driver is signaled.

        Returns:
            Future resolved with the RunReport once the run is back to idle.

        Raises:
            SchedulingConflictError: If another run is in progress.
            TypeError: If tests is not a collection of units.
        """
        units = normalize_units(tests)

        with self._lock:
            if self._state is not RunState.IDLE:
                logger.warning("Rejected run request: a run is %s", self._state.value)
                raise SchedulingConflictError(self._state)

            run_set = select_units(units)
            self._run_count += 1
            run = _Run(run_id=self._run_count, units=run_set, requested_count=len(units))
            run.future.set_running_or_notify_cancel()
            self._run = run
            self._pending_completion = completion

            logger.info(
                "Run %d requested: %d unit(s), %d selected",
                run.run_id,
                len(units),
                len(run_set),
            )

            if self._config.debug_gate_enabled:
                self._set_state(RunState.AWAITING_DEBUG_ACK)
            elif self._config.should_wait_for_debugger:
                logger.debug("Ignoring should_wait_for_debugger in a %s build", self.build_mode.value)

            if self._state is RunState.AWAITING_DEBUG_ACK:
                self._primary.call_soon(self._prompt_for_debugger)
            else:
                self._schedule(run)

        return run.future

    def run_set(self, tests: Iterable, completion: Optional[CompletionCallback] = None):
        """Request a run of an unordered set of units. See run()."""
        return self.run(set(tests), completion)

    def run_array(self, tests: Iterable, completion: Optional[CompletionCallback] = None):
        """Request a run of an ordered sequence of units. See run()."""
        return self.run(list(tests), completion)

    def acknowledge_debugger(self) -> bool:
        """Let a run waiting for a debugger proceed. Callable from any thread.

        Returns:
            Whether a waiting run was released.
        """
        with self._lock:
            if self._state is not RunState.AWAITING_DEBUG_ACK:
                return False
            logger.info("Debugger acknowledged, starting run %d", self._run.run_id)
            self._schedule(self._run)
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker thread once the current run (if any) is done."""
        self._executor.shutdown(wait=wait)
        self._bridge.close()

    # -- internals ------------------------------------------------------

    def _schedule(self, run: _Run) -> None:
        self._set_state(RunState.SCHEDULED)
        try:
            self._executor.submit(self._execute, run)
        except RuntimeError:
            self._run = None
            self._pending_completion = None
            self._state = RunState.IDLE
            raise

    def _prompt_for_debugger(self) -> None:
        try:
            self._debug_prompt(self.acknowledge_debugger)
        except Exception:
            logger.exception("Debugger prompt failed; the run stays waiting for acknowledge_debugger()")

    def _execute(self, run: _Run) -> None:
        """Execute the run set. Runs on the worker thread.

        The run always reaches COMPLETED and hops to the primary context,
        even when setting up the run fails before any unit starts.
        """
        with self._lock:
            self._set_state(RunState.RUNNING)

        collector = ResultCollector(run.run_id, run.requested_count)
        collector.start()

        try:
            context = RunContext(
                run_id=run.run_id,
                coordinator=self,
                poller=ReadinessPoller(
                    default_timeout=self._config.default_timeout,
                    interval=self._config.poll_interval,
                    primary=self._primary,
                ),
                default_timeout=self._config.default_timeout,
            )
            for unit in run.units:
                self._run_unit(unit, context, collector)
        except BaseException as e:
            logger.exception("Run %d aborted: %s", run.run_id, e)
            collector.add_failure(RUN_SETUP_NAME, e, 0)
        finally:
            report = collector.finish()
            logger.info(
                "Run %d finished: %d/%d passed in %dms",
                run.run_id,
                report.passed_count,
                report.total_count,
                report.duration_ms,
            )

            with self._lock:
                self._set_state(RunState.COMPLETED)
            self._primary.call_soon(self._finish, run, report)

    def _run_unit(self, unit, context: RunContext, collector: ResultCollector) -> None:
        name = getattr(unit, "name", type(unit).__name__)
        logger.debug("Running %s", name)
        start = time.monotonic()

        try:
            unit.run(context)
        except BaseException as e:
            # pytest.fail/skip, SystemExit and KeyboardInterrupt count as
            # this unit's failure; the rest of the run set still executes.
            duration_ms = int((time.monotonic() - start) * 1000)
            logger.error("%s failed: %s: %s", name, type(e).__name__, e)
            collector.add_failure(name, e, duration_ms)
        else:
            duration_ms = int((time.monotonic() - start) * 1000)
            collector.add_success(name, duration_ms)

    def _finish(self, run: _Run, report: RunReport) -> None:
        """Complete a run. Runs on the primary context."""
        completion, self._pending_completion = self._pending_completion, None

        if completion is not None:
            try:
                completion()
            except Exception:
                logger.exception("Completion callback of run %d raised", run.run_id)

        try:
            self._bridge.signal_finished(report)
        except Exception:
            logger.exception("Failed to signal the host driver for run %d", run.run_id)

        with self._idle:
            self._run = None
            self._set_state(RunState.IDLE)
            self._idle.notify_all()

        run.future.set_result(report)

    def _set_state(self, target: RunState) -> None:
        if not can_transition(self._state, target):
            raise RuntimeError(f"Invalid run state transition {self._state.value} -> {target.value}")
        logger.debug("Run state %s -> %s", self._state.value, target.value)
        self._state = target

    def _check_unlocked(self, setting: str) -> None:
        if self._state.is_active:
            raise ConfigurationLockedError(setting, self._state)
