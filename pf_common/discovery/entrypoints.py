"""Entry-point discovery helpers for custom-fact providers."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Any, Callable


logger = logging.getLogger(__name__)


def discover_entrypoints(group: str) -> list[importlib.metadata.EntryPoint]:
    """Return the entry points of ``group`` sorted by name, without importing them."""
    try:
        found = importlib.metadata.entry_points().select(group=group)
    except Exception as exc:
        logger.debug("Failed to read entry points for group %s: %s", group, exc)
        return []
    unique: dict[str, importlib.metadata.EntryPoint] = {}
    for entry_point in found:
        unique.setdefault(entry_point.name, entry_point)
    return [unique[name] for name in sorted(unique)]


def load_entrypoint(
    entry_point: importlib.metadata.EntryPoint,
    consume: Callable[[str, Any], None],
) -> bool:
    """Import ``entry_point`` and pass ``(name, object)`` to ``consume``.

    Returns False when the provider could not be imported; the failure is
    logged and never raised.
    """
    try:
        loaded = entry_point.load()
    except ImportError as exc:
        logger.debug(
            "Skipping custom fact provider %s due to missing dependency: %s",
            entry_point.name,
            exc,
        )
        return False
    except Exception as exc:
        logger.warning("Failed to load custom fact provider %s: %s", entry_point.name, exc)
        return False
    consume(entry_point.name, loaded)
    return True
