"""Logging setup for the uirun CLI and host integrations."""

import logging
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "uirun"
LOG_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"

_HANDLERS: list[logging.Handler] = []


def configure_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Attach key-value formatted handlers to the uirun logger.

    Calling it again replaces the handlers it installed before.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False

    for handler in _HANDLERS:
        logger.removeHandler(handler)
        handler.close()
    _HANDLERS.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _HANDLERS.append(handler)

    return logger
