"""Run set selection: platform filtering, then focus filtering."""

import logging
from collections.abc import Iterable

from .base import TestUnit

logger = logging.getLogger(__name__)


def normalize_units(tests: Iterable) -> list:
    """Turn a set or a sequence of units into a list.

    Sets keep their (arbitrary) iteration order; sequences keep their order
    and their duplicates.

    Raises:
        TypeError: If tests is a single unit, a string, or not iterable.
    """
    if isinstance(tests, (TestUnit, str, bytes)) or not isinstance(tests, Iterable):
        raise TypeError(
            f"Expected a set or sequence of test units, got {type(tests).__name__}"
        )
    return list(tests)


def select_units(units: Iterable) -> list:
    """Pick the units a run will execute.

    Units that don't support the current platform are dropped first. Then,
    if any remaining unit is focused, only the focused units are kept.
    """
    supported = [u for u in units if u.supports_current_platform()]
    focused = [u for u in supported if u.is_focused()]

    if focused:
        logger.info(
            "Running %d focused of %d supported unit(s)", len(focused), len(supported)
        )
        return focused
    return supported
