"""Environment variable parsing utilities."""

from __future__ import annotations

import os


def parse_bool_env(value: str | None) -> bool | None:
    """Parse a boolean from an environment variable string.

    Returns True for "1", "true", "yes", "on" (case-insensitive).
    Returns None if value is None.
    """
    if value is None:
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_path_list_env(value: str | None) -> list[str]:
    """Split a PATH-style variable into its non-empty entries.

    Example: "/opt/facts:/srv/facts" -> ["/opt/facts", "/srv/facts"]
    Returns an empty list if value is None or empty.
    """
    if not value:
        return []
    return [entry.strip() for entry in value.split(os.pathsep) if entry.strip()]


def prefixed_env(prefix: str, environ: dict[str, str] | None = None) -> dict[str, str]:
    """Return variables starting with ``prefix`` (case-insensitive), prefix removed."""
    source = os.environ if environ is None else environ
    upper = prefix.upper()
    found: dict[str, str] = {}
    for key, value in source.items():
        if len(key) <= len(prefix) or not key.upper().startswith(upper):
            continue
        found[key[len(prefix):]] = value
    return found
