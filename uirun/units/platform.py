"""Current platform resolution for test units."""

import os
import sys

PLATFORM_ENV_VAR = "UIRUN_PLATFORM"

_SYS_PLATFORM_ALIASES = {
    "linux2": "linux",
    "cygwin": "win32",
    "msys": "win32",
}


def current_platform() -> str:
    """Name of the platform tests are running on.

    Checked in order:
    1. UIRUN_PLATFORM environment variable (lets a host app report e.g. "tablet")
    2. sys.platform, normalized
    """
    override = os.environ.get(PLATFORM_ENV_VAR, "").strip()
    if override:
        return override.lower()
    return _SYS_PLATFORM_ALIASES.get(sys.platform, sys.platform)
