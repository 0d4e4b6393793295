"""Serializers for the hash, JSON and YAML output formats."""

from __future__ import annotations

import json
from typing import Any, Mapping

import yaml

from pf_facts.types import OutputFormat


INDENT = "  "


def format_facts(
    data: Mapping[str, Any], fmt: OutputFormat, *, bare_value: bool = False
) -> str:
    """Serialize ``data`` without a trailing newline.

    ``bare_value`` is used for a single query in hash format: only the value
    of the sole entry is printed.
    """
    if fmt is OutputFormat.JSON:
        return json.dumps(data, indent=2, sort_keys=True, default=str)
    if fmt is OutputFormat.YAML:
        return _format_yaml(data)
    if bare_value:
        (value,) = data.values()
        return _format_hash_value(value, 0, top_level=True)
    return _format_hash_top(data)


def _format_yaml(data: Mapping[str, Any]) -> str:
    if not data:
        return ""
    rendered = yaml.safe_dump(
        _plain(data), default_flow_style=False, sort_keys=True, allow_unicode=True
    )
    return rendered.rstrip("\n")


def _plain(value: Any) -> Any:
    # safe_dump refuses arbitrary objects; mirror json.dumps(default=str).
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def _format_hash_top(data: Mapping[str, Any]) -> str:
    lines = []
    for key in sorted(data):
        lines.append(f"{key} => {_format_hash_value(data[key], 0, top_level=True)}")
    return "\n".join(lines)


def _format_hash_value(value: Any, depth: int, *, top_level: bool = False) -> str:
    if value is None:
        return "" if top_level else "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value if top_level else json.dumps(value)
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        pad = INDENT * (depth + 1)
        entries = [
            f"{pad}{key} => {_format_hash_value(value[key], depth + 1)}"
            for key in sorted(value, key=str)
        ]
        return "{\n" + ",\n".join(entries) + f"\n{INDENT * depth}}}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        pad = INDENT * (depth + 1)
        entries = [f"{pad}{_format_hash_value(item, depth + 1)}" for item in value]
        return "[\n" + ",\n".join(entries) + f"\n{INDENT * depth}]"
    return json.dumps(str(value))
