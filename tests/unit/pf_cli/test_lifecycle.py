"""Tests for the scripting subsystem session."""

from __future__ import annotations

import pytest

from pf_cli.lifecycle import SubsystemHandle, scripting_session
from pf_cli.options import ParsedOptions


pytestmark = pytest.mark.unit_cli


def test_active_session_is_torn_down_once(fake_subsystem) -> None:
    with scripting_session(ParsedOptions(trace=True), fake_subsystem) as handle:
        assert handle.active
        assert fake_subsystem.calls == [("initialize", True)]

    assert fake_subsystem.calls == [("initialize", True), ("uninitialize",)]


def test_teardown_runs_when_body_raises(fake_subsystem) -> None:
    with pytest.raises(RuntimeError):
        with scripting_session(ParsedOptions(), fake_subsystem):
            raise RuntimeError("collection blew up")

    assert fake_subsystem.names() == ["initialize", "uninitialize"]


def test_teardown_runs_on_early_return(fake_subsystem) -> None:
    def body() -> str:
        with scripting_session(ParsedOptions(), fake_subsystem):
            return "early"

    assert body() == "early"
    assert fake_subsystem.names() == ["initialize", "uninitialize"]


def test_failed_initialization_skips_teardown(failing_subsystem) -> None:
    with scripting_session(ParsedOptions(), failing_subsystem) as handle:
        assert not handle

    assert failing_subsystem.names() == ["initialize"]


def test_disabled_subsystem_is_never_touched(fake_subsystem) -> None:
    with scripting_session(ParsedOptions(no_ruby=True), fake_subsystem) as handle:
        assert handle == SubsystemHandle(active=False)

    assert fake_subsystem.calls == []
