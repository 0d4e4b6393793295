"""Process-wide logging facility built on stdlib logging and structlog.

The root logger stays open down to TRACE so that every error is recorded by
the tracking handler, even when the visible level hides it. Verbosity is
enforced on the output handlers instead.
"""

from __future__ import annotations

import locale
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import TextIO

import structlog
from rich.console import Console

from pf_common.config.env import parse_bool_env
from pf_common.errors import LocaleSetupError
from pf_common.logs.levels import DEFAULT_LOG_LEVEL, TRACE_LEVEL, LogLevel


LEVEL_STYLES = {
    LogLevel.TRACE: "dim",
    LogLevel.DEBUG: "cyan",
    LogLevel.INFO: "green",
    LogLevel.WARN: "yellow",
    LogLevel.ERROR: "red",
    LogLevel.FATAL: "bold red",
}


class ErrorTrackingHandler(logging.Handler):
    """Counts records at ERROR or above; never writes anything."""

    def __init__(self) -> None:
        super().__init__(level=logging.ERROR)
        self.count = 0

    def emit(self, record: logging.LogRecord) -> None:
        self.count += 1


@dataclass
class _LoggingState:
    stream: TextIO | None = None
    level: LogLevel = DEFAULT_LOG_LEVEL
    colors: bool | None = None
    json: bool = False
    output_handlers: list[logging.Handler] = field(default_factory=list)
    tracker: ErrorTrackingHandler | None = None


_STATE = _LoggingState()


def setup_logging(
    stream: TextIO | None = None,
    *,
    log_file: str | None = None,
    json: bool | None = None,
) -> None:
    """Initialize the locale and install handlers on the root logger.

    Raises LocaleSetupError when the environment's locale cannot be applied.
    Calling this again replaces the handlers installed by a previous call and
    resets the error flag.
    """
    _init_locale()

    resolved_json = parse_bool_env(os.environ.get("PYFACTER_LOG_JSON"))
    resolved_json = bool(resolved_json) if json is None else json
    resolved_log_file = log_file or os.environ.get("PYFACTER_LOG_FILE")

    root_logger = logging.getLogger()
    _remove_installed_handlers(root_logger)

    _STATE.stream = stream or sys.stderr
    _STATE.level = DEFAULT_LOG_LEVEL
    _STATE.colors = None
    _STATE.json = resolved_json

    stream_handler = logging.StreamHandler(_STATE.stream)
    handlers: list[logging.Handler] = [stream_handler]
    if resolved_log_file:
        handlers.append(logging.FileHandler(resolved_log_file))
    for handler in handlers:
        handler.setLevel(_STATE.level.to_logging_level())
    _STATE.output_handlers = handlers
    _apply_formatters()

    _STATE.tracker = ErrorTrackingHandler()
    root_logger.setLevel(TRACE_LEVEL)
    for handler in [*handlers, _STATE.tracker]:
        root_logger.addHandler(handler)
    _configure_structlog()


def shutdown_logging() -> None:
    """Remove the handlers installed by ``setup_logging`` and reset state."""
    _remove_installed_handlers(logging.getLogger())
    _STATE.stream = None
    _STATE.level = DEFAULT_LOG_LEVEL
    _STATE.colors = None
    _STATE.json = False


def set_level(level: LogLevel) -> None:
    """Set the visible logging level for every installed output handler."""
    _STATE.level = level
    for handler in _STATE.output_handlers:
        handler.setLevel(level.to_logging_level())


def get_level() -> LogLevel:
    return _STATE.level


def is_enabled(level: LogLevel) -> bool:
    """Return True when a message at ``level`` would be written."""
    if level is LogLevel.NONE:
        return False
    return level.to_logging_level() >= _STATE.level.to_logging_level()


def error_logged() -> bool:
    """Return True once any ERROR or FATAL record has been logged."""
    return bool(_STATE.tracker and _STATE.tracker.count)


def set_colorization(enabled: bool | None) -> None:
    """Force colors on or off; None restores the terminal-based default."""
    _STATE.colors = enabled
    _apply_formatters()


def colorization_enabled() -> bool:
    if _STATE.colors is not None:
        return _STATE.colors
    stream = _STATE.stream or sys.stderr
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def colorize(stream: TextIO, text: str, level: LogLevel | None = None) -> None:
    """Write ``text`` to ``stream``, styled for ``level`` when colors are enabled."""
    enabled = colorization_enabled()
    console = Console(
        file=stream,
        force_terminal=enabled,
        no_color=not enabled,
        highlight=False,
        soft_wrap=True,
    )
    style = LEVEL_STYLES.get(level) if (enabled and level) else None
    console.print(text, style=style, markup=False, end="")


def _init_locale() -> None:
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as exc:
        raise LocaleSetupError(str(exc), cause=exc) from exc


def _remove_installed_handlers(root_logger: logging.Logger) -> None:
    installed = list(_STATE.output_handlers)
    if _STATE.tracker is not None:
        installed.append(_STATE.tracker)
    for handler in installed:
        root_logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    _STATE.output_handlers = []
    _STATE.tracker = None


def _apply_formatters() -> None:
    for handler in _STATE.output_handlers:
        # Files never get ANSI sequences.
        colors = colorization_enabled() and not isinstance(handler, logging.FileHandler)
        handler.setFormatter(_make_structlog_formatter(_STATE.json, colors))


def _make_structlog_formatter(
    as_json: bool, colors: bool
) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor
    if as_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=pre_chain,
    )


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
