"""
Notification Sink - Routing of user-visible diagnostics.

Components never print. Every diagnostic goes through a LogSink, a plain
callable taking (message, severity). The default sink forwards to the
standard logging module under the "nvcore" logger.
"""

import logging
from collections.abc import Callable
from enum import IntEnum


class Severity(IntEnum):
    """Diagnostic severity, valued as the matching logging level."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR


LogSink = Callable[[str, Severity], None]

LOGGER_NAME = "nvcore"

_LEVEL_NAMES = {
    "debug": Severity.DEBUG,
    "info": Severity.INFO,
    "warn": Severity.WARN,
    "error": Severity.ERROR,
}


def logging_sink(message: str, severity: Severity = Severity.INFO) -> None:
    """
    Default sink: forward a diagnostic to the "nvcore" logger.

    Args:
        message: Diagnostic text
        severity: Severity of the diagnostic
    """
    logging.getLogger(LOGGER_NAME).log(int(severity), message)


def parse_level(name: str) -> Severity:
    """
    Convert a level name (debug, info, warn, error) into a Severity.

    Raises:
        ValueError: If the name is not a known level
    """
    try:
        return _LEVEL_NAMES[name.lower()]
    except (KeyError, AttributeError) as e:
        raise ValueError(
            f"Unknown log level {name!r}. Expected one of {sorted(_LEVEL_NAMES)}"
        ) from e


def level_names() -> list[str]:
    return list(_LEVEL_NAMES)


def configure_logging(level: str) -> None:
    """Set the "nvcore" logger threshold from a level name."""
    logging.getLogger(LOGGER_NAME).setLevel(int(parse_level(level)))
