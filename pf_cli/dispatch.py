"""Fact assembly in its fixed source order, and rendering."""

from __future__ import annotations

from typing import Iterable, Optional, TextIO

from pf_cli.lifecycle import ScriptingSubsystem, SubsystemHandle
from pf_cli.options import ParsedOptions
from pf_facts import FactCollection, OutputFormat


def assemble_facts(
    options: ParsedOptions,
    handle: SubsystemHandle,
    subsystem: ScriptingSubsystem,
    collection: Optional[FactCollection] = None,
) -> FactCollection:
    """Add facts in the order: built-in, external, environment, custom.

    Later sources replace earlier ones on a name collision, so the order must
    not change.
    """
    facts = collection if collection is not None else FactCollection()
    facts.add_default_facts(handle.active)

    if not options.no_external_facts:
        facts.add_external_facts(list(options.external_dir))

    facts.add_environment_facts()

    if handle.active and not options.no_custom_facts:
        subsystem.load_custom_facts(facts, options.puppet, list(options.custom_dir))
    return facts


def select_output_format(options: ParsedOptions) -> OutputFormat:
    if options.json:
        return OutputFormat.JSON
    if options.yaml:
        return OutputFormat.YAML
    return OutputFormat.HASH


def render_facts(
    facts: FactCollection,
    fmt: OutputFormat,
    queries: Iterable[str],
    show_legacy: bool,
    stream: TextIO,
) -> None:
    facts.write(stream, fmt, queries, show_legacy)
    stream.write("\n")
    stream.flush()
