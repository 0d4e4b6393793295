"""Tests for entry-point discovery helpers."""

from __future__ import annotations

import importlib.metadata

import pytest

from pf_common.discovery.entrypoints import discover_entrypoints, load_entrypoint


pytestmark = pytest.mark.unit_common


def test_discover_entrypoints_handles_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def raise_error():
        raise RuntimeError("boom")

    monkeypatch.setattr(importlib.metadata, "entry_points", raise_error)

    assert discover_entrypoints("pyfacter.custom_facts") == []


def test_discover_entrypoints_sorted_and_unique(monkeypatch: pytest.MonkeyPatch) -> None:
    group = "pyfacter.custom_facts"
    entries = [
        importlib.metadata.EntryPoint(name="zeta", value="z.mod:register", group=group),
        importlib.metadata.EntryPoint(name="alpha", value="a.mod:register", group=group),
        importlib.metadata.EntryPoint(name="alpha", value="dup.mod:register", group=group),
    ]

    class FakeEntries:
        def select(self, group: str):
            assert group == "pyfacter.custom_facts"
            return entries

    monkeypatch.setattr(importlib.metadata, "entry_points", lambda: FakeEntries())

    result = discover_entrypoints(group)
    assert [entry.name for entry in result] == ["alpha", "zeta"]
    assert result[0].value == "a.mod:register"


def test_load_entrypoint_reports_import_failure() -> None:
    entry = importlib.metadata.EntryPoint(
        name="missing", value="pf_no_such_module:register", group="pyfacter.custom_facts"
    )
    consumed: list[str] = []

    assert load_entrypoint(entry, lambda name, obj: consumed.append(name)) is False
    assert consumed == []


def test_load_entrypoint_consumes_object() -> None:
    entry = importlib.metadata.EntryPoint(
        name="json", value="json:dumps", group="pyfacter.custom_facts"
    )
    consumed: dict[str, object] = {}

    assert load_entrypoint(entry, consumed.__setitem__) is True
    assert callable(consumed["json"])
