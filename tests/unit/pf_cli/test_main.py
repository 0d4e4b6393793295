"""End-to-end CLI behavior through pf_cli.main.main."""

from __future__ import annotations

import json
import locale

import pytest
import typer
import yaml

from pf_cli import main as cli_main
from pf_cli.main import EXIT_FAILURE, EXIT_LOCALE_ERROR, EXIT_SUCCESS, USAGE_ERRORS, app, main
from pf_cli.schema import HIDDEN_OPTIONS, VISIBLE_OPTIONS
from pf_common.version import __version__


pytestmark = [pytest.mark.unit_cli, pytest.mark.usefixtures("stub_host")]


@pytest.mark.parametrize("flag", ["--help", "-h"])
def test_help_exits_zero_without_side_effects(flag, fake_subsystem, capsys) -> None:
    code = main([flag, "--json", "kernel"], subsystem=fake_subsystem)

    out, err = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert out.startswith("Synopsis\n========")
    assert "--log-level [ -l ] LEVEL (=warn)" in out
    assert "facter networking.ip" in out
    assert err == ""
    assert fake_subsystem.calls == []


def test_help_wins_over_conflicts(fake_subsystem, capsys) -> None:
    code = main(["--help", "--json", "--yaml"], subsystem=fake_subsystem)

    assert code == EXIT_SUCCESS
    assert "Synopsis" in capsys.readouterr().out


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        (["--json", "--yaml"], "json and yaml options conflict"),
        (["-j", "-y", "kernel"], "json and yaml options conflict"),
        (["--debug", "--log-level", "info"], "debug, verbose, and log-level options conflict"),
        (["--puppet", "--no-ruby"], "puppet and no-ruby options conflict"),
        (["--puppet", "--no-custom-facts"], "puppet and no-custom-facts options conflict"),
        (
            ["--no-external-facts", "--external-dir", "/srv/facts"],
            "no-external-facts and external-dir options conflict",
        ),
        (["--color", "--no-color"], "color and no-color options conflict"),
    ],
)
def test_conflicts_print_error_then_help(argv, message, fake_subsystem, capsys) -> None:
    code = main(argv, subsystem=fake_subsystem)

    out, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert err.startswith(f"error: {message}: please specify only one.\n\n")
    assert out.startswith("Synopsis")
    assert fake_subsystem.calls == []


@pytest.mark.parametrize(
    ("argv", "fragment"),
    [
        (["--bogus"], "--bogus"),
        (["--log-level", "loud"], "loud"),
        (["--custom-dir"], "--custom-dir"),
    ],
)
def test_parse_errors_follow_error_then_help(argv, fragment, fake_subsystem, capsys) -> None:
    code = main(argv, subsystem=fake_subsystem)

    out, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert err.startswith("error: ")
    assert fragment in err
    assert "Synopsis" in out
    assert fake_subsystem.calls == []


def test_usage_errors_include_typer_exceptions() -> None:
    typer_exception = getattr(typer, "TyperException", None)
    if typer_exception is not None:
        assert typer_exception in USAGE_ERRORS


def test_usage_error_outside_click_hierarchy(fake_subsystem, monkeypatch, capsys) -> None:
    class VendoredNoSuchOption(Exception):
        def format_message(self) -> str:
            return "No such option: --bogus"

    def raise_vendored(*_args, **_kwargs):
        raise VendoredNoSuchOption()

    monkeypatch.setattr(cli_main, "USAGE_ERRORS", USAGE_ERRORS + (VendoredNoSuchOption,))
    monkeypatch.setattr(cli_main, "app", raise_vendored)

    code = main(["--bogus"], subsystem=fake_subsystem)

    out, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert err.startswith("error: No such option: --bogus\n\n")
    assert out.startswith("Synopsis")


def test_command_declares_exactly_the_schema_options() -> None:
    command = typer.main.get_command(app)
    options = [param for param in command.params if param.param_type_name == "option"]
    arguments = [param for param in command.params if param.param_type_name == "argument"]

    declared = sorted(tuple(param.opts) for param in options)
    expected = sorted(spec.flags for spec in VISIBLE_OPTIONS)
    assert declared == expected
    assert all(not param.secondary_opts for param in options)
    assert [param.name for param in arguments] == [spec.name for spec in HIDDEN_OPTIONS]


@pytest.mark.parametrize("level", ["warning", "WARN", "Error"])
def test_log_level_names_are_case_insensitive(level, fake_subsystem, capsys) -> None:
    code = main(["--log-level", level, "kernel"], subsystem=fake_subsystem)

    assert code == EXIT_SUCCESS
    assert capsys.readouterr().out == "Linux\n"


def test_version(fake_subsystem, capsys) -> None:
    code = main(["-v"], subsystem=fake_subsystem)

    assert code == EXIT_SUCCESS
    assert capsys.readouterr().out == f"{__version__}\n"
    assert fake_subsystem.calls == []


def test_version_is_checked_after_validation(fake_subsystem, capsys) -> None:
    code = main(["--version", "--json", "--yaml"], subsystem=fake_subsystem)

    assert code == EXIT_FAILURE
    assert "json and yaml" in capsys.readouterr().err


def test_json_queries(fake_subsystem, capsys) -> None:
    code = main(["--json", " kernel.", "os..family", "kernel"], subsystem=fake_subsystem)

    out, _ = capsys.readouterr()
    assert code == EXIT_SUCCESS
    assert json.loads(out) == {"kernel": "Linux", "os.family": "Debian"}
    assert fake_subsystem.names() == ["initialize", "load_custom_facts", "uninitialize"]


def test_single_query_prints_bare_value(fake_subsystem, capsys) -> None:
    code = main(["networking.ip"], subsystem=fake_subsystem)

    assert code == EXIT_SUCCESS
    assert capsys.readouterr().out == "10.0.0.5\n"


def test_yaml_all_facts_hide_legacy_by_default(fake_subsystem, capsys) -> None:
    code = main(["--yaml"], subsystem=fake_subsystem)

    data = yaml.safe_load(capsys.readouterr().out)
    assert code == EXIT_SUCCESS
    assert data["kernel"] == "Linux"
    assert data["role"] == "webserver"
    assert "hostname" not in data


def test_show_legacy_in_all_facts_mode(fake_subsystem, capsys) -> None:
    main(["--json", "--show-legacy"], subsystem=fake_subsystem)

    data = json.loads(capsys.readouterr().out)
    assert data["hostname"] == "web01"
    assert data["operatingsystem"] == "Debian"


def test_no_ruby_never_touches_subsystem(fake_subsystem, capsys) -> None:
    code = main(["--json", "--no-ruby"], subsystem=fake_subsystem)

    data = json.loads(capsys.readouterr().out)
    assert code == EXIT_SUCCESS
    assert fake_subsystem.calls == []
    assert "role" not in data


def test_failed_subsystem_skips_custom_facts_and_teardown(failing_subsystem, capsys) -> None:
    code = main(["--json", "--trace"], subsystem=failing_subsystem)

    data = json.loads(capsys.readouterr().out)
    assert code == EXIT_SUCCESS
    assert failing_subsystem.calls == [("initialize", True)]
    assert "role" not in data


def test_custom_dirs_and_puppet_passed_through(fake_subsystem, tmp_path, capsys) -> None:
    main(["--puppet", "--custom-dir", str(tmp_path), "--json"], subsystem=fake_subsystem)

    assert ("load_custom_facts", True, (str(tmp_path),)) in fake_subsystem.calls


def test_environment_and_external_facts(fake_subsystem, tmp_path, monkeypatch, capsys) -> None:
    (tmp_path / "site.yaml").write_text("datacenter: ams1\nkernel: External\n")
    monkeypatch.setenv("FACTER_kernel", "FromEnv")

    code = main(["--json", "--external-dir", str(tmp_path)], subsystem=fake_subsystem)

    data = json.loads(capsys.readouterr().out)
    assert code == EXIT_SUCCESS
    assert data["datacenter"] == "ams1"
    assert data["kernel"] == "FromEnv"


def test_unhandled_exception_is_fatal_but_tears_down(fake_subsystem, monkeypatch, capsys) -> None:
    def explode(*_args, **_kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(fake_subsystem, "load_custom_facts", explode)

    code = main(["--json"], subsystem=fake_subsystem)

    _, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert "unhandled exception: boom" in err
    assert fake_subsystem.names() == ["initialize", "uninitialize"]


def test_logged_error_fails_the_run(fake_subsystem, tmp_path, capsys) -> None:
    (tmp_path / "broken.json").write_text("{not json")

    code = main(["--json", "--external-dir", str(tmp_path)], subsystem=fake_subsystem)

    out, err = capsys.readouterr()
    assert code == EXIT_FAILURE
    assert json.loads(out)["kernel"] == "Linux"
    assert "broken.json" in err


def test_broken_custom_fact_does_not_hide_other_facts(tmp_path, capsys) -> None:
    (tmp_path / "site.py").write_text(
        "def register(facts):\n"
        "    facts.add('good', 'yes')\n"
        "    facts.add('bad', 'x', confine={'kernel': lambda v: 1 / 0})\n"
    )

    code = main(["--json", "--custom-dir", str(tmp_path)])

    out, err = capsys.readouterr()
    data = json.loads(out)
    assert code == EXIT_FAILURE
    assert data["good"] == "yes"
    assert data["kernel"] == "Linux"
    assert "bad" not in data
    assert "division by zero" in err
    assert "unhandled exception" not in err


def test_verbose_logs_command_line(fake_subsystem, capsys) -> None:
    main(["--verbose", "kernel"], subsystem=fake_subsystem)

    err = capsys.readouterr().err
    assert "executed with command line: --verbose kernel." in err
    assert "requested queries: kernel." in err


def test_log_level_none_silences_output(fake_subsystem, tmp_path, capsys) -> None:
    (tmp_path / "broken.json").write_text("{not json")

    code = main(
        ["-l", "none", "--external-dir", str(tmp_path), "kernel"],
        subsystem=fake_subsystem,
    )

    out, err = capsys.readouterr()
    assert out == "Linux\n"
    assert err == ""
    assert code == EXIT_FAILURE


def test_locale_failure_exits_with_distinct_code(fake_subsystem, monkeypatch, capsys) -> None:
    def broken_setlocale(*_args, **_kwargs):
        raise locale.Error("unsupported locale setting")

    monkeypatch.setattr(locale, "setlocale", broken_setlocale)

    code = main(["--json"], subsystem=fake_subsystem)

    assert code == EXIT_LOCALE_ERROR
    assert "failed to initialize logging system due to a locale error" in capsys.readouterr().err
    assert fake_subsystem.calls == []
