"""Normalization of positional fact queries."""

from __future__ import annotations

import re
from typing import Iterable


SEPARATOR = "."
_REPEATED_SEPARATORS = re.compile(r"\.{2,}")


def _is_trimmed(char: str) -> bool:
    return char == SEPARATOR or char.isspace()


def canonicalize_query(raw: str) -> str:
    """Trim separators and whitespace from both ends, then collapse adjacent separators.

    ``"  .foo..bar. "`` becomes ``"foo.bar"``; ``"..."`` becomes ``""``.
    Whitespace inside the query is left alone.
    """
    start, end = 0, len(raw)
    while start < end and _is_trimmed(raw[start]):
        start += 1
    while end > start and _is_trimmed(raw[end - 1]):
        end -= 1
    return _REPEATED_SEPARATORS.sub(SEPARATOR, raw[start:end])


def build_query_set(raw_queries: Iterable[str]) -> set[str]:
    """Canonicalize queries, dropping empty ones; an empty result means all facts."""
    queries: set[str] = set()
    for raw in raw_queries:
        query = canonicalize_query(raw)
        if query:
            queries.add(query)
    return queries
