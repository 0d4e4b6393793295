"""Scoped lifetime of the custom fact scripting subsystem."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Protocol, Sequence

from pf_cli.options import ParsedOptions

if TYPE_CHECKING:
    from pf_facts.collection import FactCollection


logger = logging.getLogger(__name__)


class ScriptingSubsystem(Protocol):
    def initialize(self, include_stack_trace: bool = False) -> bool: ...

    def uninitialize(self) -> None: ...

    def load_custom_facts(
        self,
        collection: FactCollection,
        legacy_mode: bool = False,
        directories: Sequence[str] = (),
    ) -> int: ...


@dataclass(frozen=True)
class SubsystemHandle:
    """Whether the scripting subsystem is active for this run."""

    active: bool

    def __bool__(self) -> bool:
        return self.active


@contextmanager
def scripting_session(
    options: ParsedOptions, subsystem: ScriptingSubsystem
) -> Iterator[SubsystemHandle]:
    """Initialize the subsystem unless disabled; tear it down on every exit path.

    Teardown only happens when initialization succeeded.
    """
    if options.no_ruby:
        logger.debug("custom fact runtime disabled by the no-ruby option.")
        yield SubsystemHandle(active=False)
        return

    active = bool(subsystem.initialize(options.trace))
    try:
        yield SubsystemHandle(active=active)
    finally:
        if active:
            subsystem.uninitialize()
