"""Logging bootstrap: one effective level, applied before anything else logs."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from pf_cli.options import ParsedOptions
from pf_common.logs import (
    DEFAULT_LOG_LEVEL,
    LogLevel,
    is_enabled,
    set_colorization,
    set_level,
)


logger = logging.getLogger(__name__)


def resolve_log_level(options: ParsedOptions) -> LogLevel:
    """Pick the level from --log-level, --debug or --verbose, defaulting to warn.

    Validation guarantees at most one of them is present.
    """
    level = options.log_level or DEFAULT_LOG_LEVEL
    if options.debug:
        level = LogLevel.DEBUG
    elif options.verbose:
        level = LogLevel.INFO
    return level


def apply_colorization(options: ParsedOptions) -> None:
    if options.color:
        set_colorization(True)
    elif options.no_color:
        set_colorization(False)


def bootstrap_logging(options: ParsedOptions) -> LogLevel:
    apply_colorization(options)
    level = resolve_log_level(options)
    set_level(level)
    return level


def log_command_line(argv: Sequence[str]) -> None:
    if not is_enabled(LogLevel.INFO):
        return
    logger.info("executed with command line: %s.", " ".join(argv))


def log_queries(queries: Iterable[str]) -> None:
    if not is_enabled(LogLevel.INFO):
        return
    ordered = sorted(query for query in queries if query)
    if not ordered:
        logger.info("resolving all facts.")
        return
    logger.info("requested queries: %s.", " ".join(ordered))
