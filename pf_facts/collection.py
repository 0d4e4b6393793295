"""The fact collection: the engine the command line drives."""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable, Iterator, Mapping, Sequence, TextIO

from pf_common.config.env import prefixed_env
from pf_common.errors import ExternalFactError, error_to_payload
from pf_facts import external, resolvers
from pf_facts.output import format_facts
from pf_facts.types import Fact, OutputFormat


logger = logging.getLogger(__name__)

ENVIRONMENT_PREFIX = "FACTER_"


class FactCollection:
    """Named facts, addressable by dot-path queries.

    Later additions replace earlier ones with the same name, so the order in
    which sources are added decides which one wins.
    """

    def __init__(self) -> None:
        self._facts: dict[str, Fact] = {}

    def add(self, name: str, value: Any, *, legacy: bool = False, source: str = "builtin") -> None:
        """Add or replace a fact; a None value removes it."""
        key = name.strip().lower()
        if not key:
            return
        if value is None:
            self._facts.pop(key, None)
            return
        self._facts[key] = Fact(name=key, value=value, legacy=legacy, source=source)

    def get(self, name: str) -> Any:
        fact = self._facts.get(name.lower())
        return None if fact is None else fact.value

    def fact(self, name: str) -> Fact | None:
        return self._facts.get(name.lower())

    def names(self) -> list[str]:
        return sorted(self._facts)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._facts

    def __len__(self) -> int:
        return len(self._facts)

    def __iter__(self) -> Iterator[Fact]:
        return iter(self._facts[name] for name in self.names())

    def query(self, path: str) -> Any:
        """Resolve a dot-path query such as ``os.release.major`` or ``processors.models.0``.

        An exact fact name wins over descending into structured values, so
        custom facts with dots in their names stay reachable.
        """
        if path.lower() in self._facts:
            return self._facts[path.lower()].value
        head, _, rest = path.partition(".")
        value = self.get(head)
        if not rest:
            return value
        for segment in rest.split("."):
            value = _descend(value, segment)
            if value is None:
                return None
        return value

    def to_dict(self, *, show_legacy: bool = False) -> dict[str, Any]:
        return {
            fact.name: fact.value
            for fact in self
            if show_legacy or not fact.legacy
        }

    def add_default_facts(self, include_scripting: bool) -> None:
        """Resolve the built-in facts, plus scripting facts when that runtime is active."""
        for resolver in resolvers.default_resolvers(include_scripting):
            try:
                resolver(self)
            except Exception as exc:
                logger.warning(
                    "resolver %s failed: %s", getattr(resolver, "__name__", resolver), exc
                )

    def add_external_facts(self, directories: Sequence[str] | None = None) -> None:
        """Load external facts; no directories means the default search path."""
        explicit = bool(directories)
        search = list(directories) if explicit else external.default_directories()
        for directory in search:
            for path in external.iter_fact_files(directory, explicit=explicit):
                try:
                    loaded = external.load_fact_file(path)
                except ExternalFactError as exc:
                    logger.error("%s", exc, extra=error_to_payload(exc))
                    continue
                for name, value in loaded.items():
                    logger.debug("fact \"%s\" has resolved from external fact %s.", name, path)
                    self.add(name, value, source="external")

    def add_environment_facts(self, environ: Mapping[str, str] | None = None) -> None:
        """Add a fact for every ``FACTER_<name>`` environment variable."""
        source = dict(os.environ if environ is None else environ)
        for name, value in sorted(prefixed_env(ENVIRONMENT_PREFIX, source).items()):
            logger.debug(
                "setting fact \"%s\" based on the value of environment variable \"%s%s\".",
                name.lower(),
                ENVIRONMENT_PREFIX,
                name,
            )
            self.add(name, value, source="environment")

    def write(
        self,
        stream: TextIO,
        fmt: OutputFormat,
        queries: Iterable[str] = (),
        show_legacy: bool = False,
    ) -> None:
        """Write the requested facts to ``stream`` without a trailing newline.

        ``show_legacy`` only matters when no queries are given; explicitly
        queried legacy facts are always shown.
        """
        ordered = sorted(set(queries))
        if not ordered:
            stream.write(format_facts(self.to_dict(show_legacy=show_legacy), fmt))
            return
        results = {query: self.query(query) for query in ordered}
        bare_value = fmt is OutputFormat.HASH and len(ordered) == 1
        stream.write(format_facts(results, fmt, bare_value=bare_value))


def _descend(value: Any, segment: str) -> Any:
    if isinstance(value, Mapping):
        if segment in value:
            return value[segment]
        lowered = {str(key).lower(): item for key, item in value.items()}
        return lowered.get(segment.lower())
    if isinstance(value, (list, tuple)):
        try:
            index = int(segment)
        except ValueError:
            return None
        if 0 <= index < len(value):
            return value[index]
    return None
