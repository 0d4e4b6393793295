"""Lifecycle of the custom fact runtime.

The runtime is process-wide: ``initialize`` creates it, ``load_custom_facts``
uses it and ``uninitialize`` releases every module it loaded.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Sequence

from pf_common.discovery import discover_entrypoints, load_entrypoint
from pf_common.errors import ScriptingError
from pf_scripting.api import CustomFactRegistry
from pf_scripting.loader import load_facts_from_dir, search_directories

if TYPE_CHECKING:
    from pf_facts.collection import FactCollection


logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "pyfacter.custom_facts"


@dataclass
class ScriptingRuntime:
    trace: bool = False
    providers: dict[str, Callable[[CustomFactRegistry], Any]] = field(default_factory=dict)
    loaded_modules: list[str] = field(default_factory=list)
    loaded_paths: set[Path] = field(default_factory=set)


_RUNTIME: ScriptingRuntime | None = None


def _create_runtime(trace: bool) -> ScriptingRuntime:
    runtime = ScriptingRuntime(trace=trace)

    def consume(name: str, provider: Any) -> None:
        if not callable(provider):
            logger.warning("Ignoring custom fact provider %s: it is not callable.", name)
            return
        runtime.providers[name] = provider

    for entry_point in discover_entrypoints(ENTRYPOINT_GROUP):
        load_entrypoint(entry_point, consume)
    return runtime


def initialize(include_stack_trace: bool = False) -> bool:
    """Start the runtime; returns False when it is unavailable for this run."""
    global _RUNTIME
    if _RUNTIME is not None:
        _RUNTIME.trace = include_stack_trace
        return True
    try:
        _RUNTIME = _create_runtime(include_stack_trace)
    except Exception as exc:
        logger.warning(
            "could not initialize the custom fact runtime: %s; custom facts will not be available.",
            exc,
        )
        return False
    logger.debug(
        "custom fact runtime initialized with %d provider(s).", len(_RUNTIME.providers)
    )
    return True


def uninitialize() -> None:
    """Drop the runtime and every custom fact module it loaded."""
    global _RUNTIME
    if _RUNTIME is None:
        return
    for name in _RUNTIME.loaded_modules:
        sys.modules.pop(name, None)
    logger.debug("custom fact runtime shut down.")
    _RUNTIME = None


def is_initialized() -> bool:
    return _RUNTIME is not None


def load_custom_facts(
    collection: FactCollection,
    legacy_mode: bool = False,
    directories: Sequence[str] = (),
) -> int:
    """Load custom facts into ``collection``; returns how many resolved."""
    if _RUNTIME is None:
        raise ScriptingError("the custom fact runtime is not initialized")
    runtime = _RUNTIME
    if legacy_mode:
        logger.warning(
            "the puppet option is deprecated: use `puppet facts` instead."
        )

    registry = CustomFactRegistry(
        collection, legacy_mode=legacy_mode, trace=runtime.trace
    )
    for name, provider in runtime.providers.items():
        registry.source = f"entry point {name}"
        try:
            provider(registry)
        except Exception as exc:
            logger.error(
                "error while loading custom facts from provider %s: %s",
                name,
                exc,
                exc_info=runtime.trace,
            )
    registry.source = ""

    for directory in directories:
        if not Path(directory).expanduser().is_dir():
            logger.warning("custom facts directory \"%s\" does not exist.", directory)
    for root in search_directories(directories, legacy_mode=legacy_mode):
        logger.debug("searching \"%s\" for custom facts.", root)
        runtime.loaded_modules.extend(
            load_facts_from_dir(root, registry, loaded_paths=runtime.loaded_paths)
        )
    return registry.resolve()
