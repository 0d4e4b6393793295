"""Registry handed to custom fact modules.

A custom fact module receives a ``CustomFactRegistry`` and declares facts on
it::

    def register(facts):
        facts.add("role", "webserver", confine={"kernel": "Linux"})

        @facts.fact("os_pretty", weight=10)
        def _pretty():
            return f"{facts.value('os.name')} {facts.value('os.release.full')}"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping

from pydantic import ValidationError

from pf_common.errors import CustomFactError
from pf_scripting.models import CustomFact

if TYPE_CHECKING:
    from pf_facts.collection import FactCollection


logger = logging.getLogger(__name__)


class CustomFactRegistry:
    def __init__(
        self,
        collection: FactCollection,
        *,
        legacy_mode: bool = False,
        trace: bool = False,
    ) -> None:
        self._collection = collection
        self._definitions: dict[str, list[CustomFact]] = {}
        self.legacy_mode = legacy_mode
        self.trace = trace
        self.source = ""

    def add(
        self,
        name: str,
        value: Any = None,
        *,
        resolve: Callable[[], Any] | None = None,
        weight: int = 0,
        confine: Mapping[str, Any] | None = None,
    ) -> CustomFact:
        """Declare a resolution for ``name``."""
        try:
            definition = CustomFact(
                name=name,
                value=value,
                resolver=resolve,
                weight=weight,
                confine=dict(confine or {}),
                source=self.source,
            )
        except ValidationError as exc:
            raise CustomFactError(
                f"invalid custom fact \"{name}\": {exc.errors()[0]['msg']}",
                context={"name": name, "source": self.source},
                cause=exc,
            ) from exc
        self._definitions.setdefault(definition.name, []).append(definition)
        return definition

    def fact(
        self,
        name: str,
        *,
        weight: int = 0,
        confine: Mapping[str, Any] | None = None,
    ) -> Callable[[Callable[[], Any]], Callable[[], Any]]:
        """Decorator form of ``add`` for resolver functions."""

        def decorator(func: Callable[[], Any]) -> Callable[[], Any]:
            self.add(name, resolve=func, weight=weight, confine=confine)
            return func

        return decorator

    def extend(self, definitions: Iterable[CustomFact | Mapping[str, Any]]) -> None:
        for definition in definitions:
            if isinstance(definition, CustomFact):
                if not definition.source:
                    definition = definition.model_copy(update={"source": self.source})
                self._definitions.setdefault(definition.name, []).append(definition)
                continue
            data = dict(definition)
            self.add(
                data.pop("name", ""),
                data.pop("value", None),
                resolve=data.pop("resolver", None),
                weight=data.pop("weight", 0),
                confine=data.pop("confine", None),
            )

    def value(self, query: str) -> Any:
        """Read a fact already in the collection (built-in, external or custom)."""
        return self._collection.query(query)

    def definitions(self, name: str) -> list[CustomFact]:
        return list(self._definitions.get(name.lower(), ()))

    def __len__(self) -> int:
        return len(self._definitions)

    def resolve(self) -> int:
        """Resolve every declared fact into the collection; returns how many resolved."""
        resolved = 0
        for name, candidates in self._definitions.items():
            ordered = sorted(candidates, key=lambda item: item.weight, reverse=True)
            for definition in ordered:
                try:
                    if not self._confines_match(definition):
                        continue
                    value = definition.compute()
                except Exception as exc:
                    logger.error(
                        "error while resolving custom fact \"%s\": %s",
                        name,
                        exc,
                        exc_info=self.trace,
                    )
                    continue
                if value is None:
                    continue
                self._collection.add(name, value, source="custom")
                resolved += 1
                break
        return resolved

    def _confines_match(self, definition: CustomFact) -> bool:
        for query, expected in definition.confine.items():
            if not _matches(self._collection.query(query), expected):
                logger.debug(
                    "custom fact \"%s\" from %s confined out by %s.",
                    definition.name,
                    definition.source or "<unknown>",
                    query,
                )
                return False
        return True


def _matches(actual: Any, expected: Any) -> bool:
    if callable(expected):
        return bool(expected(actual))
    if isinstance(expected, (list, tuple, set, frozenset)):
        return any(_matches(actual, item) for item in expected)
    if actual is None:
        return expected is None
    return str(actual).lower() == str(expected).lower()
