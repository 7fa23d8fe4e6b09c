"""Test unit contract.

The coordinator only ever calls three things on a unit:
supports_current_platform(), is_focused() and run(context). Anything that
implements them can be scheduled, however it is built internally.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import UnitFailure
from .platform import current_platform

logger = logging.getLogger(__name__)

FOCUS_PREFIX = "focus_"
TEST_PREFIX = "test_"


class TestUnit(ABC):
    """A unit of UI test work scheduled by the run coordinator.

    Attributes:
        platforms: Platform names this unit supports. Empty = all.
        focused: Class-level focus flag.
    """

    # Keep pytest from collecting this class and its subclasses
    __test__ = False

    platforms: tuple = ()
    focused: bool = False

    @property
    def name(self) -> str:
        return type(self).__name__

    def supports_current_platform(self) -> bool:
        """Whether this unit can run on the current platform."""
        if not self.platforms:
            return True
        return current_platform() in {p.lower() for p in self.platforms}

    def is_focused(self) -> bool:
        """Whether this unit should run to the exclusion of unfocused ones."""
        return bool(self.focused)

    @abstractmethod
    def run(self, context) -> None:
        """Execute the unit.

        Args:
            context: RunContext for the active run.

        Raises:
            BaseException: Any failure. The coordinator records it against
                this unit and moves on to the next one.
        """

    def __repr__(self) -> str:
        return f"<{self.name}>"


class TestCase(TestUnit):
    """A unit made of test methods.

    Methods named ``test_*`` are test methods; prefixing one with
    ``focus_`` (``focus_test_login``) focuses it and the whole unit. A class
    whose name starts with ``Focus`` is focused as well. When any method is
    focused, only focused methods run.

    Hooks, all optional:
        set_up() / tear_down(): once around all test methods.
        set_up_test(name) / tear_down_test(name): around each test method.
    """

    def __init__(self):
        self.context = None

    def is_focused(self) -> bool:
        if super().is_focused() or self.name.startswith("Focus"):
            return True
        return any(n.startswith(FOCUS_PREFIX) for n in self._test_method_names())

    def selected_test_methods(self) -> list[str]:
        """Names of the test methods that will run, in definition order."""
        names = self._test_method_names()
        focused = [n for n in names if n.startswith(FOCUS_PREFIX)]
        return focused or names

    def set_up(self) -> None:
        pass

    def tear_down(self) -> None:
        pass

    def set_up_test(self, name: str) -> None:
        pass

    def tear_down_test(self, name: str) -> None:
        pass

    def run(self, context) -> None:
        self.context = context
        failures: dict[str, BaseException] = {}

        try:
            self.set_up()
            for method_name in self.selected_test_methods():
                error = self._run_test_method(method_name)
                if error is not None:
                    failures[method_name] = error
        finally:
            self.tear_down()
            self.context = None

        if failures:
            raise UnitFailure(self.name, failures)

    def wait_until(self, predicate, timeout: Optional[float] = None, description=None):
        """Wait on the run's poller. See ReadinessPoller.wait_until()."""
        return self.context.poller.wait_until(
            predicate, timeout=timeout, description=description
        )

    def _run_test_method(self, method_name: str) -> Optional[BaseException]:
        try:
            self.set_up_test(method_name)
            try:
                getattr(self, method_name)()
            finally:
                self.tear_down_test(method_name)
        except Exception as e:
            logger.warning("%s.%s failed: %s", self.name, method_name, e)
            return e
        logger.debug("%s.%s passed", self.name, method_name)
        return None

    def _test_method_names(self) -> list[str]:
        names = []
        # Walk the MRO base-first so inherited tests keep definition order
        for klass in reversed(type(self).__mro__):
            for attr, value in vars(klass).items():
                if attr in names or not inspect.isfunction(value):
                    continue
                if attr.startswith(TEST_PREFIX) or attr.startswith(FOCUS_PREFIX + TEST_PREFIX):
                    names.append(attr)
        return names
