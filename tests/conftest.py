from __future__ import annotations

from collections import defaultdict
from typing import Any, Sequence

import pytest
from rich.console import Console
from rich.table import Table

import pf_scripting
from pf_common.logs import shutdown_logging
from pf_facts import external, resolvers


KNOWN_MARKERS = {"unit_cli", "unit_common", "unit_facts", "unit_scripting"}


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """Print pass/fail counts per marker at the end of the session."""
    _ = (exitstatus, config)
    marker_stats = defaultdict(lambda: {"passed": 0, "failed": 0, "skipped": 0, "total": 0})

    for outcome in ["passed", "failed", "skipped"]:
        for report in terminalreporter.stats.get(outcome, []):
            if report.when == "call" or (report.when == "setup" and report.outcome == "skipped"):
                for marker in KNOWN_MARKERS:
                    if marker in report.keywords:
                        marker_stats[marker][outcome] += 1
                        marker_stats[marker]["total"] += 1

    if not marker_stats:
        return

    table = Table(title="Test Statistics by Marker", show_header=True, header_style="bold magenta")
    table.add_column("Marker", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Passed", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="yellow")
    for marker in sorted(marker_stats):
        stats = marker_stats[marker]
        table.add_row(
            marker,
            str(stats["total"]),
            str(stats["passed"]),
            str(stats["failed"]),
            str(stats["skipped"]),
        )

    console = Console()
    console.print("\n")
    console.print(table)


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch: pytest.MonkeyPatch):
    """Keep locale, logging handlers and the custom fact runtime per-test."""
    monkeypatch.setenv("LC_ALL", "C")
    monkeypatch.delenv("FACTERLIB", raising=False)
    monkeypatch.delenv("PYFACTER_LOG_FILE", raising=False)
    monkeypatch.delenv("PYFACTER_LOG_JSON", raising=False)
    yield
    pf_scripting.uninitialize()
    shutdown_logging()


def _stub_kernel(facts) -> None:
    facts.add("kernel", "Linux")
    facts.add("kernelrelease", "6.1.0-13-amd64")


def _stub_os(facts) -> None:
    facts.add(
        "os",
        {"name": "Debian", "family": "Debian", "release": {"full": "12.2", "major": "12"}},
    )
    facts.add("operatingsystem", "Debian", legacy=True)


def _stub_networking(facts) -> None:
    facts.add("networking", {"hostname": "web01", "ip": "10.0.0.5"})
    facts.add("hostname", "web01", legacy=True)


@pytest.fixture
def stub_host(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace host probing with fixed facts and skip default external dirs."""
    monkeypatch.setattr(
        resolvers, "DEFAULT_RESOLVERS", (_stub_kernel, _stub_os, _stub_networking)
    )
    monkeypatch.setattr(external, "default_directories", lambda: [])


class FakeSubsystem:
    """Records calls the CLI makes to the scripting subsystem."""

    def __init__(self, init_result: bool = True) -> None:
        self.init_result = init_result
        self.calls: list[tuple[Any, ...]] = []

    def initialize(self, include_stack_trace: bool = False) -> bool:
        self.calls.append(("initialize", include_stack_trace))
        return self.init_result

    def uninitialize(self) -> None:
        self.calls.append(("uninitialize",))

    def load_custom_facts(
        self,
        collection,
        legacy_mode: bool = False,
        directories: Sequence[str] = (),
    ) -> int:
        self.calls.append(("load_custom_facts", legacy_mode, tuple(directories)))
        collection.add("role", "webserver", source="custom")
        return 1

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_subsystem() -> FakeSubsystem:
    return FakeSubsystem()


@pytest.fixture
def failing_subsystem() -> FakeSubsystem:
    return FakeSubsystem(init_result=False)
