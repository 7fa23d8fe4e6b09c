"""Units module - the test unit contract and run set selection."""

from .base import TestCase, TestUnit
from .discovery import load_units, units_in_module
from .filtering import normalize_units, select_units
from .platform import current_platform

__all__ = [
    "TestCase",
    "TestUnit",
    "current_platform",
    "load_units",
    "normalize_units",
    "select_units",
    "units_in_module",
]
