"""Resolved command-line options and the rules that forbid combining some of them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pf_cli.schema import Arity, option_spec
from pf_common.errors import OptionConflictError
from pf_common.logs import LogLevel


@dataclass(frozen=True)
class ParsedOptions:
    """Options after syntactic parsing.

    ``log_level`` is None when the option was not given, which is how an
    explicit ``--log-level`` is told apart from the default.
    """

    color: bool = False
    no_color: bool = False
    custom_dir: tuple[str, ...] = ()
    external_dir: tuple[str, ...] = ()
    debug: bool = False
    verbose: bool = False
    log_level: Optional[LogLevel] = None
    no_custom_facts: bool = False
    no_external_facts: bool = False
    no_ruby: bool = False
    puppet: bool = False
    trace: bool = False
    json: bool = False
    yaml: bool = False
    show_legacy: bool = False
    help: bool = False
    version: bool = False
    query: tuple[str, ...] = ()

    def is_set(self, name: str) -> bool:
        """Return True when option ``name`` (long form) was supplied."""
        spec = option_spec(name)
        value = getattr(self, spec.dest)
        if spec.arity is Arity.MULTIPLE:
            return bool(value)
        if spec.arity is Arity.SINGLE:
            return value is not None
        return bool(value)


# Checked in this order; the first violation is reported.
PAIRWISE_CONFLICTS: tuple[tuple[str, str], ...] = (
    ("color", "no-color"),
    ("json", "yaml"),
    ("no-external-facts", "external-dir"),
    ("no-custom-facts", "custom-dir"),
)
VERBOSITY_OPTIONS = ("debug", "verbose", "log-level")
SCRIPTING_CONFLICTS: tuple[tuple[str, str], ...] = (
    ("no-ruby", "custom-dir"),
    ("puppet", "no-custom-facts"),
    ("puppet", "no-ruby"),
)


def _conflict(first: str, second: str) -> OptionConflictError:
    return OptionConflictError(
        f"{first} and {second} options conflict: please specify only one.",
        context={"options": [first, second]},
    )


def validate_options(options: ParsedOptions) -> None:
    """Raise OptionConflictError for the first pair of options that cannot be combined."""
    for first, second in PAIRWISE_CONFLICTS:
        if options.is_set(first) and options.is_set(second):
            raise _conflict(first, second)

    supplied = [name for name in VERBOSITY_OPTIONS if options.is_set(name)]
    if len(supplied) > 1:
        raise OptionConflictError(
            "debug, verbose, and log-level options conflict: please specify only one.",
            context={"options": supplied},
        )

    for first, second in SCRIPTING_CONFLICTS:
        if options.is_set(first) and options.is_set(second):
            raise _conflict(first, second)
