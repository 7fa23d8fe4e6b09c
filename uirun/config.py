"""Coordinator configuration.

Configuration comes from a YAML file, the environment and CLI options, in
increasing order of precedence:

    default_timeout: 5.0
    should_wait_for_debugger: false
    build_mode: debug
    driver_url: http://127.0.0.1:51330
"""

import os
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlparse

import yaml

from .polling.poller import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT

BUILD_MODE_ENV_VAR = "UIRUN_BUILD_MODE"


class BuildMode(str, Enum):
    """Build configuration the host was built in."""
    DEBUG = "debug"
    RELEASE = "release"

    @classmethod
    def resolve(cls, value: Union["BuildMode", str, None] = None) -> "BuildMode":
        """Resolve a build mode from a value, UIRUN_BUILD_MODE, or the default.

        Raises:
            ValueError: If the value names no build mode.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            value = os.environ.get(BUILD_MODE_ENV_VAR) or cls.RELEASE.value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid build mode '{value}'. Must be one of: {valid}") from None


@dataclass
class CoordinatorConfig:
    """Configuration for the run coordinator and the CLI."""
    default_timeout: float = DEFAULT_TIMEOUT
    should_wait_for_debugger: bool = False
    build_mode: BuildMode = field(default_factory=BuildMode.resolve)
    poll_interval: float = DEFAULT_POLL_INTERVAL
    driver_url: Optional[str] = None
    save_report: bool = False
    report_dir: Optional[Path] = None
    log_level: str = "INFO"

    def __post_init__(self):
        self.build_mode = BuildMode.resolve(self.build_mode)
        if self.report_dir is not None:
            self.report_dir = Path(self.report_dir)
        self.log_level = str(self.log_level).upper()

    @property
    def debug_gate_enabled(self) -> bool:
        """Whether runs should wait for a debugger acknowledgment."""
        return self.should_wait_for_debugger and self.build_mode is BuildMode.DEBUG

    def merged(self, **overrides: Any) -> "CoordinatorConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass
class ValidationError:
    """A single configuration problem."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({len(self.warnings)} warnings)"
            return msg
        return "; ".join(f"{e.path}: {e.message}" for e in self.errors)


def load_config(file_path: Union[str, Path]) -> CoordinatorConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file isn't YAML, isn't a mapping, or holds bad values.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return CoordinatorConfig()

    return parse_config_data(data, source=str(file_path))


def parse_config_data(data: dict, source: str = "<inline>") -> CoordinatorConfig:
    """Build a config from an already loaded mapping. Unknown keys are ignored."""
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__} in {source}")

    known = {f.name for f in fields(CoordinatorConfig)}
    try:
        return CoordinatorConfig(**{k: v for k, v in data.items() if k in known})
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid config in {source}: {e}") from e


def validate_config(config: CoordinatorConfig) -> ValidationResult:
    """Check a config for values the coordinator would reject."""
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if not isinstance(config.default_timeout, (int, float)) or config.default_timeout <= 0:
        errors.append(ValidationError(
            path="default_timeout",
            message=f"Timeout must be a positive number, got {config.default_timeout!r}.",
        ))

    if not isinstance(config.poll_interval, (int, float)) or config.poll_interval <= 0:
        errors.append(ValidationError(
            path="poll_interval",
            message=f"Poll interval must be a positive number, got {config.poll_interval!r}.",
        ))
    elif isinstance(config.default_timeout, (int, float)) and config.poll_interval > config.default_timeout:
        warnings.append(ValidationError(
            path="poll_interval",
            message="Poll interval is longer than the default timeout.",
            severity="warning",
        ))

    if config.driver_url:
        parsed = urlparse(config.driver_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(ValidationError(
                path="driver_url",
                message=f"Invalid driver URL '{config.driver_url}'. Expected http(s)://host:port.",
            ))

    if config.should_wait_for_debugger and config.build_mode is BuildMode.RELEASE:
        warnings.append(ValidationError(
            path="should_wait_for_debugger",
            message="Ignored in release builds.",
            severity="warning",
        ))

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
