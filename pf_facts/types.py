"""Dataclasses and enums describing collected facts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class OutputFormat(str, Enum):
    HASH = "hash"
    JSON = "json"
    YAML = "yaml"


@dataclass(frozen=True)
class Fact:
    name: str
    value: Any
    legacy: bool = False
    source: str = "builtin"
