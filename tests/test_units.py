import textwrap
from types import SimpleNamespace

import pytest

from uirun.errors import UnitFailure
from uirun.units import TestCase, current_platform, load_units, normalize_units, select_units
from uirun.units.platform import PLATFORM_ENV_VAR

from conftest import FakeUnit


def names(units):
    return [u.name for u in units]


def test_normalize_accepts_sets_and_sequences():
    a, b = FakeUnit("a"), FakeUnit("b")

    assert sorted(names(normalize_units({a, b}))) == ["a", "b"]
    assert sorted(names(normalize_units(frozenset({a, b})))) == ["a", "b"]
    assert names(normalize_units([a, b, a])) == ["a", "b", "a"]
    assert names(normalize_units((b, a))) == ["b", "a"]
    assert names(normalize_units(u for u in [a])) == ["a"]


@pytest.mark.parametrize("bad", [FakeUnit("solo"), "tests", 42])
def test_normalize_rejects_non_collections(bad):
    with pytest.raises(TypeError):
        normalize_units(bad)


def test_unsupported_units_dropped():
    units = [FakeUnit("ok"), FakeUnit("other-os", supported=False)]
    assert names(select_units(units)) == ["ok"]


def test_no_focus_keeps_all_supported():
    units = [FakeUnit("a"), FakeUnit("b")]
    assert names(select_units(units)) == ["a", "b"]


def test_focus_is_exclusive():
    units = [FakeUnit("a"), FakeUnit("b", focused=True), FakeUnit("c", focused=True)]
    assert names(select_units(units)) == ["b", "c"]


def test_platform_filter_applies_before_focus():
    units = [
        FakeUnit("focused-unsupported", supported=False, focused=True),
        FakeUnit("plain"),
    ]
    assert names(select_units(units)) == ["plain"]


def test_empty_selection():
    assert select_units([]) == []
    assert select_units([FakeUnit("x", supported=False)]) == []


def test_current_platform_override(monkeypatch):
    monkeypatch.setenv(PLATFORM_ENV_VAR, "Tablet")
    assert current_platform() == "tablet"


def test_current_platform_default(monkeypatch):
    monkeypatch.setattr("uirun.units.platform.sys.platform", "linux2")
    assert current_platform() == "linux"


class LoginTest(TestCase):
    platforms = ("tablet", "phone")

    def __init__(self):
        super().__init__()
        self.calls = []

    def set_up(self):
        self.calls.append("set_up")

    def tear_down(self):
        self.calls.append("tear_down")

    def set_up_test(self, name):
        self.calls.append(f"before {name}")

    def tear_down_test(self, name):
        self.calls.append(f"after {name}")

    def test_shows_form(self):
        self.calls.append("shows_form")

    def test_rejects_bad_password(self):
        self.calls.append("rejects_bad_password")
        raise AssertionError("no error banner")

    def test_signs_in(self):
        self.calls.append("signs_in")


class CheckoutTest(TestCase):
    def test_cart(self):
        self.ran = ["cart"]

    def focus_test_pay(self):
        self.ran = ["pay"]


class FocusSettingsTest(TestCase):
    def test_toggle(self):
        pass


def test_test_case_platform_support(monkeypatch):
    monkeypatch.setenv(PLATFORM_ENV_VAR, "phone")
    assert LoginTest().supports_current_platform()

    monkeypatch.setenv(PLATFORM_ENV_VAR, "desktop")
    assert not LoginTest().supports_current_platform()
    assert CheckoutTest().supports_current_platform()


def test_test_case_runs_every_method_and_collects_failures():
    unit = LoginTest()

    with pytest.raises(UnitFailure) as exc_info:
        unit.run(SimpleNamespace(poller=None))

    assert unit.calls == [
        "set_up",
        "before test_shows_form", "shows_form", "after test_shows_form",
        "before test_rejects_bad_password", "rejects_bad_password", "after test_rejects_bad_password",
        "before test_signs_in", "signs_in", "after test_signs_in",
        "tear_down",
    ]
    assert list(exc_info.value.failures) == ["test_rejects_bad_password"]
    assert isinstance(exc_info.value, AssertionError)
    assert unit.context is None


def test_tear_down_runs_when_set_up_fails():
    class BrokenSetUpTest(LoginTest):
        def set_up(self):
            self.calls.append("set_up")
            raise RuntimeError("simulator not booted")

    unit = BrokenSetUpTest()

    with pytest.raises(RuntimeError, match="simulator not booted"):
        unit.run(SimpleNamespace(poller=None))

    assert unit.calls == ["set_up", "tear_down"]
    assert unit.context is None


def test_focused_method_focuses_unit_and_runs_alone():
    unit = CheckoutTest()

    assert unit.is_focused()
    assert unit.selected_test_methods() == ["focus_test_pay"]
    unit.run(SimpleNamespace(poller=None))
    assert unit.ran == ["pay"]


def test_focus_prefixed_class_is_focused():
    assert FocusSettingsTest().is_focused()
    assert not LoginTest().is_focused()


def test_load_units_from_file(tmp_path):
    path = tmp_path / "ui_units.py"
    path.write_text(textwrap.dedent("""
        from abc import abstractmethod
        from uirun import TestCase, TestUnit

        class ZetaTest(TestCase):
            def test_one(self):
                pass

        class AbstractBase(TestUnit):
            @abstractmethod
            def helper(self):
                pass

        class AlphaUnit(TestUnit):
            def run(self, context):
                pass

        class NotAUnit:
            pass
    """))

    units = load_units(path)

    assert [type(u).__name__ for u in units] == ["ZetaTest", "AlphaUnit"]


def test_load_units_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_units(tmp_path / "missing.py")


def test_load_units_wrong_suffix(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("")
    with pytest.raises(ValueError):
        load_units(path)


def test_load_units_from_module_name():
    assert load_units("uirun.units.base") == []
