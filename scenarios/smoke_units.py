"""Smoke units for a headless run of the coordinator.

    uirun scenarios/smoke_units.py --timeout 2

The "screen" is a dict of element names to the monotonic time at which
they appear, standing in for a real accessibility hierarchy.
"""

import time

from uirun import TestCase, UIElement

_SCREEN_OPENED = time.monotonic()
_APPEARS_AFTER = {
    "Sign In": 0.1,
    "Welcome": 0.3,
}
_TAPPED: list[str] = []


class ScreenElement(UIElement):
    def __init__(self, poller, label):
        super().__init__(poller, description=f"'{label}' button")
        self.label = label

    def is_valid(self) -> bool:
        delay = _APPEARS_AFTER.get(self.label)
        return delay is not None and time.monotonic() - _SCREEN_OPENED >= delay

    def is_visible(self) -> bool:
        return True

    def _tap(self) -> None:
        _TAPPED.append(self.label)


class SignInTest(TestCase):
    def element(self, label):
        return ScreenElement(self.context.poller, label)

    def test_sign_in_button_becomes_tappable(self):
        self.element("Sign In").tap()
        assert "Sign In" in _TAPPED

    def test_welcome_appears(self):
        self.element("Welcome").wait_until_valid()


class DesktopOnlyTest(TestCase):
    platforms = ("darwin", "win32")

    def test_menu_bar(self):
        pass
