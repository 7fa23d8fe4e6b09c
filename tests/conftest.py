import threading

import pytest

from uirun.bridge import RecordingBridge
from uirun.config import BUILD_MODE_ENV_VAR, BuildMode, CoordinatorConfig
from uirun.runner import QueueContext, RunCoordinator
from uirun.units import TestUnit
from uirun.units.platform import PLATFORM_ENV_VAR


class FakeUnit(TestUnit):
    """Unit with fixed predicates that records when it runs."""

    def __init__(self, name, supported=True, focused=False, action=None, log=None):
        self._name = name
        self.supported = supported
        self.focus = focused
        self.action = action
        self.log = log if log is not None else []
        self.threads = []

    @property
    def name(self):
        return self._name

    def supports_current_platform(self):
        return self.supported

    def is_focused(self):
        return self.focus

    def run(self, context):
        self.threads.append(threading.get_ident())
        self.log.append(self.name)
        if self.action is not None:
            self.action(context)


class FakeClock:
    """Monotonic clock advanced only by its own sleep()."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

    async def async_sleep(self, seconds):
        self.sleep(seconds)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(BUILD_MODE_ENV_VAR, raising=False)
    monkeypatch.delenv(PLATFORM_ENV_VAR, raising=False)
    yield
    RunCoordinator.reset_shared()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def primary():
    return QueueContext()


@pytest.fixture
def bridge():
    return RecordingBridge()


@pytest.fixture
def make_coordinator(primary, bridge):
    created = []

    def factory(build_mode=BuildMode.RELEASE, bridge=bridge, debug_prompt=None, **config_kwargs):
        config = CoordinatorConfig(build_mode=build_mode, **config_kwargs)
        coordinator = RunCoordinator(
            config,
            primary=primary,
            bridge=bridge,
            debug_prompt=debug_prompt,
        )
        created.append(coordinator)
        return coordinator

    yield factory

    for coordinator in created:
        coordinator.shutdown(wait=True)
