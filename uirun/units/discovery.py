"""Loading test units from Python files and modules."""

import importlib
import importlib.util
import inspect
import sys
from pathlib import Path
from types import ModuleType
from typing import Union

from .base import TestCase, TestUnit


def load_units(target: Union[str, Path]) -> list:
    """Instantiate every concrete TestUnit subclass defined in target.

    Args:
        target: Path to a .py file, or a dotted module name.

    Returns:
        One instance per unit class, in definition order.

    Raises:
        FileNotFoundError: If target looks like a path that doesn't exist.
        ValueError: If a path target isn't a .py file.
        ImportError: If the module can't be imported.
    """
    module = _import_target(target)
    return units_in_module(module)


def units_in_module(module: ModuleType) -> list:
    """Instantiate the unit classes defined (not imported) in module."""
    units = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ != module.__name__:
            continue
        if not issubclass(obj, TestUnit) or obj in (TestUnit, TestCase):
            continue
        if inspect.isabstract(obj):
            continue
        units.append(obj)

    units.sort(key=_definition_line)
    return [cls() for cls in units]


def _definition_line(cls) -> int:
    try:
        return inspect.getsourcelines(cls)[1]
    except (OSError, TypeError):
        return 0


def _import_target(target: Union[str, Path]) -> ModuleType:
    text = str(target)
    looks_like_path = isinstance(target, Path) or text.endswith(".py") or "/" in text or "\\" in text

    if not looks_like_path:
        return importlib.import_module(text)

    file_path = Path(target)
    if not file_path.exists():
        raise FileNotFoundError(f"Test file not found: {file_path}")
    if file_path.suffix != ".py":
        raise ValueError(f"Expected a .py file, got: {file_path.suffix}")

    module_name = f"uirun_units_{file_path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load tests from {file_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module
