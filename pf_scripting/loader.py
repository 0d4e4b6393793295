"""Filesystem discovery of custom fact modules."""

from __future__ import annotations

import importlib.util
import itertools
import logging
import os
import sys
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from pf_common.config.env import parse_path_list_env
from pf_common.errors import CustomFactError
from pf_scripting.api import CustomFactRegistry


logger = logging.getLogger(__name__)

MODULE_PREFIX = "pf_custom_fact"
PUPPET_SYSTEM_FACT_DIR = "/opt/puppetlabs/puppet/cache/lib/facter"
PUPPET_USER_FACT_DIR = "~/.puppetlabs/opt/puppet/cache/lib/facter"

_module_counter = itertools.count()


def search_directories(
    directories: Iterable[str],
    *,
    legacy_mode: bool = False,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    """Return the custom fact search path, de-duplicated, in lookup order.

    Order: explicit directories, ``FACTERLIB`` entries, ``facter/`` under each
    ``sys.path`` entry, then Puppet's plugin-sync directory in legacy mode.
    """
    env = os.environ if environ is None else environ
    candidates: list[Path] = [Path(entry).expanduser() for entry in directories]
    candidates.extend(Path(entry).expanduser() for entry in parse_path_list_env(env.get("FACTERLIB")))
    candidates.extend(Path(entry) / "facter" for entry in sys.path if entry)
    if legacy_mode:
        is_root = hasattr(os, "geteuid") and os.geteuid() == 0
        puppet_dir = PUPPET_SYSTEM_FACT_DIR if is_root else PUPPET_USER_FACT_DIR
        candidates.append(Path(puppet_dir).expanduser())

    seen: set[Path] = set()
    ordered: list[Path] = []
    for candidate in candidates:
        resolved = candidate.resolve()
        if resolved in seen or not resolved.is_dir():
            continue
        seen.add(resolved)
        ordered.append(resolved)
    return ordered


def load_facts_from_dir(
    root: Path,
    registry: CustomFactRegistry,
    *,
    loaded_paths: set[Path] | None = None,
) -> list[str]:
    """Load every top-level ``*.py`` custom fact module under ``root``.

    Returns the names under which the modules were placed in ``sys.modules``.
    """
    loaded_paths = set() if loaded_paths is None else loaded_paths
    names: list[str] = []
    for path in sorted(root.glob("*.py")):
        if path.name.startswith("_"):
            continue
        resolved = path.resolve()
        if resolved in loaded_paths:
            continue
        loaded_paths.add(resolved)
        module_name = load_fact_module(path, registry)
        if module_name:
            names.append(module_name)
    return names


def load_fact_module(
    path: Path,
    registry: CustomFactRegistry,
    module_name: Optional[str] = None,
) -> Optional[str]:
    """Execute one custom fact file and register what it exports."""
    name = module_name or f"{MODULE_PREFIX}_{next(_module_counter)}_{path.stem}"
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        logger.warning("Cannot load custom facts from %s: not a python module.", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    logger.debug("loading custom facts from %s.", path)
    try:
        spec.loader.exec_module(module)
        register_from_module(module, registry, source=str(path))
    except Exception as exc:
        sys.modules.pop(name, None)
        logger.error(
            "error while processing \"%s\" for custom facts: %s",
            path,
            exc,
            exc_info=registry.trace,
        )
        return None
    return name


def register_from_module(
    module: Any,
    registry: CustomFactRegistry,
    source: str,
) -> None:
    """Register ``register(registry)`` / ``FACTS`` / ``get_facts()`` exports from a module."""
    registry.source = source
    try:
        if callable(getattr(module, "register", None)):
            module.register(registry)
            return
        if callable(getattr(module, "get_facts", None)):
            registry.extend(module.get_facts())
            return
        if hasattr(module, "FACTS"):
            registry.extend(module.FACTS)
            return
    finally:
        registry.source = ""
    raise CustomFactError(
        "module exports none of register(), get_facts() or FACTS",
        context={"source": source},
    )
