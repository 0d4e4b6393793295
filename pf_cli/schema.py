"""Declarations of every command-line option facter understands."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pf_common.logs import LogLevel


class Arity(str, Enum):
    FLAG = "flag"
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class OptionSpec:
    name: str
    help: str
    short: Optional[str] = None
    arity: Arity = Arity.FLAG
    default: Any = None
    metavar: Optional[str] = None

    @property
    def flags(self) -> tuple[str, ...]:
        names = [f"--{self.name}"]
        if self.short:
            names.append(f"-{self.short}")
        return tuple(names)

    @property
    def dest(self) -> str:
        return self.name.replace("-", "_")


LOG_LEVEL_CHOICES = tuple(level.value for level in LogLevel)

# Keep sorted alphabetically; this is also the order shown by --help.
VISIBLE_OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec("color", "Enables color output."),
    OptionSpec(
        "custom-dir",
        "A directory to use for custom facts.",
        arity=Arity.MULTIPLE,
        metavar="DIR",
    ),
    OptionSpec("debug", "Enable debug output.", short="d"),
    OptionSpec(
        "external-dir",
        "A directory to use for external facts.",
        arity=Arity.MULTIPLE,
        metavar="DIR",
    ),
    OptionSpec("help", "Print this help message.", short="h"),
    OptionSpec("json", "Output in JSON format.", short="j"),
    OptionSpec(
        "log-level",
        "Set logging level.\nSupported levels are: " + ", ".join(LOG_LEVEL_CHOICES[:-1])
        + f", and {LOG_LEVEL_CHOICES[-1]}.",
        short="l",
        arity=Arity.SINGLE,
        default=LogLevel.WARN.value,
        metavar="LEVEL",
    ),
    OptionSpec("no-color", "Disables color output."),
    OptionSpec("no-custom-facts", "Disables custom facts."),
    OptionSpec("no-external-facts", "Disables external facts."),
    OptionSpec(
        "no-ruby",
        "Disables loading the custom fact runtime, facts requiring it, and custom facts.",
    ),
    OptionSpec(
        "puppet",
        "(Deprecated: use `puppet facts` instead) Load the Puppet libraries, thus "
        "allowing Facter to load Puppet-specific facts.",
        short="p",
    ),
    OptionSpec("show-legacy", "Show legacy facts when querying all facts."),
    OptionSpec("trace", "Enable backtraces for custom facts."),
    OptionSpec("verbose", "Enable verbose (info) output."),
    OptionSpec("version", "Print the version and exit.", short="v"),
    OptionSpec("yaml", "Output in YAML format.", short="y"),
)

# Positional queries: collected into "query" without limit.
HIDDEN_OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec("query", "", arity=Arity.MULTIPLE, default=()),
)

_BY_NAME = {spec.name: spec for spec in VISIBLE_OPTIONS + HIDDEN_OPTIONS}


def option_spec(name: str) -> OptionSpec:
    """Look up an option declaration by its long name."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(f"unknown option '{name}'") from None
