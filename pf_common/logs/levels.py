"""Log levels accepted on the command line and their stdlib equivalents."""

from __future__ import annotations

import logging
from enum import Enum


TRACE_LEVEL = 5
SILENT_LEVEL = logging.CRITICAL + 10

logging.addLevelName(TRACE_LEVEL, "TRACE")


class LogLevel(str, Enum):
    """Ordered verbosity levels: none < trace < debug < info < warn < error < fatal."""

    NONE = "none"
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"

    def to_logging_level(self) -> int:
        return _STDLIB_LEVELS[self]

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        """Parse a level name; ``warning`` is accepted as an alias of ``warn``."""
        normalized = value.strip().lower()
        if normalized == "warning":
            return cls.WARN
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(level.value for level in _ORDER)
            raise ValueError(
                f"invalid log level '{value}': supported levels are {choices}."
            ) from None


_ORDER = (
    LogLevel.NONE,
    LogLevel.TRACE,
    LogLevel.DEBUG,
    LogLevel.INFO,
    LogLevel.WARN,
    LogLevel.ERROR,
    LogLevel.FATAL,
)

_STDLIB_LEVELS = {
    # "none" sits above every real level so nothing passes the output filter.
    LogLevel.NONE: SILENT_LEVEL,
    LogLevel.TRACE: TRACE_LEVEL,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}

DEFAULT_LOG_LEVEL = LogLevel.WARN
