"""Entry-point discovery helpers."""

from .entrypoints import discover_entrypoints, load_entrypoint

__all__ = ["discover_entrypoints", "load_entrypoint"]
