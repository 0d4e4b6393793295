"""Logging facility shared by every pyfacter component."""

from .core import (
    ErrorTrackingHandler,
    colorization_enabled,
    colorize,
    error_logged,
    get_level,
    is_enabled,
    set_colorization,
    set_level,
    setup_logging,
    shutdown_logging,
)
from .levels import DEFAULT_LOG_LEVEL, TRACE_LEVEL, LogLevel

__all__ = [
    "DEFAULT_LOG_LEVEL",
    "ErrorTrackingHandler",
    "LogLevel",
    "TRACE_LEVEL",
    "colorization_enabled",
    "colorize",
    "error_logged",
    "get_level",
    "is_enabled",
    "set_colorization",
    "set_level",
    "setup_logging",
    "shutdown_logging",
]
