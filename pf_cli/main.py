"""
Command-line interface for pyfacter.

Parses and validates options, bootstraps logging, scopes the custom fact
runtime, and writes the requested facts in the selected format.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, List, Optional, TextIO

import click
import typer

import pf_scripting
from pf_cli.bootstrap import bootstrap_logging, log_command_line, log_queries
from pf_cli.dispatch import assemble_facts, render_facts, select_output_format
from pf_cli.help import render_help
from pf_cli.lifecycle import ScriptingSubsystem, scripting_session
from pf_cli.options import ParsedOptions, validate_options
from pf_cli.queries import build_query_set
from pf_cli.schema import option_spec
from pf_common.errors import LocaleSetupError, OptionConflictError
from pf_common.logs import LogLevel, colorize, error_logged, setup_logging
from pf_common.version import __version__


logger = logging.getLogger(__name__)

PROG_NAME = "facter"
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
# Distinct from EXIT_FAILURE: logging could not even start.
EXIT_LOCALE_ERROR = 2

# typer releases that vendor click raise their own exception hierarchy.
USAGE_ERRORS: tuple[type[Exception], ...] = (click.ClickException,) + tuple(
    exc for exc in (getattr(typer, "TyperException", None),) if exc is not None
)


@dataclass
class Invocation:
    """What the command needs beyond its options."""

    argv: List[str] = field(default_factory=lambda: sys.argv[1:])
    subsystem: ScriptingSubsystem = pf_scripting
    stdout: Optional[TextIO] = None


def _option(name: str, default: Any = None, **kwargs: Any) -> Any:
    """A typer option declared from its schema entry."""
    spec = option_spec(name)
    return typer.Option(
        default,
        *spec.flags,
        help=spec.help,
        metavar=spec.metavar,
        show_default=False,
        **kwargs,
    )


def _parse_log_level(value: Optional[str]) -> Optional[LogLevel]:
    if value is None:
        return None
    try:
        return LogLevel.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


app = typer.Typer(
    help="Collect and display facts about the system.",
    add_completion=False,
    pretty_exceptions_enable=False,
    context_settings={"help_option_names": []},
)


@app.command()
def facter(
    ctx: typer.Context,
    query: Optional[List[str]] = typer.Argument(None, show_default=False),
    color: bool = _option("color", False),
    custom_dir: Optional[List[str]] = _option("custom-dir"),
    debug: bool = _option("debug", False),
    external_dir: Optional[List[str]] = _option("external-dir"),
    show_help: bool = _option("help", False),
    json: bool = _option("json", False),
    log_level: Optional[str] = _option("log-level", callback=_parse_log_level),
    no_color: bool = _option("no-color", False),
    no_custom_facts: bool = _option("no-custom-facts", False),
    no_external_facts: bool = _option("no-external-facts", False),
    no_ruby: bool = _option("no-ruby", False),
    puppet: bool = _option("puppet", False),
    show_legacy: bool = _option("show-legacy", False),
    trace: bool = _option("trace", False),
    verbose: bool = _option("verbose", False),
    version: bool = _option("version", False),
    yaml: bool = _option("yaml", False),
) -> int:
    """Collect and display facts about the system."""
    options = ParsedOptions(
        color=color,
        no_color=no_color,
        custom_dir=tuple(custom_dir or ()),
        external_dir=tuple(external_dir or ()),
        debug=debug,
        verbose=verbose,
        log_level=log_level,
        no_custom_facts=no_custom_facts,
        no_external_facts=no_external_facts,
        no_ruby=no_ruby,
        puppet=puppet,
        trace=trace,
        json=json,
        yaml=yaml,
        show_legacy=show_legacy,
        help=show_help,
        version=version,
        query=tuple(query or ()),
    )
    if options.help:
        typer.echo(render_help(PROG_NAME))
        return EXIT_SUCCESS

    validate_options(options)

    if options.version:
        typer.echo(__version__)
        return EXIT_SUCCESS

    invocation = ctx.obj if isinstance(ctx.obj, Invocation) else Invocation()
    return execute(
        options,
        invocation.argv,
        invocation.subsystem,
        stream=invocation.stdout,
    )


def execute(
    options: ParsedOptions,
    argv: List[str],
    subsystem: ScriptingSubsystem,
    *,
    stream: Optional[TextIO] = None,
) -> int:
    """Run a validated invocation; the exit code reflects whether an error was logged."""
    out = stream if stream is not None else sys.stdout
    try:
        bootstrap_logging(options)
        log_command_line(argv)
        with scripting_session(options, subsystem) as handle:
            queries = build_query_set(options.query)
            log_queries(queries)
            facts = assemble_facts(options, handle, subsystem)
            render_facts(
                facts,
                select_output_format(options),
                queries,
                options.show_legacy,
                out,
            )
    except Exception as exc:
        logger.critical("unhandled exception: %s", exc)
    return EXIT_FAILURE if error_logged() else EXIT_SUCCESS


def report_usage_error(message: str) -> None:
    """Print a parse/validation error to stderr, then the help text to stdout."""
    colorize(sys.stderr, f"error: {message}\n\n", LogLevel.ERROR)
    sys.stderr.flush()
    typer.echo(render_help(PROG_NAME))


def _usage_message(exc: Exception) -> str:
    format_message = getattr(exc, "format_message", None)
    return format_message() if callable(format_message) else str(exc)


def main(
    argv: Optional[List[str]] = None,
    *,
    subsystem: Optional[ScriptingSubsystem] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Entry point returning the process exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        setup_logging(sys.stderr)
    except LocaleSetupError as exc:
        typer.echo(
            f"failed to initialize logging system due to a locale error: {exc}\n",
            err=True,
        )
        return EXIT_LOCALE_ERROR

    invocation = Invocation(
        argv=args,
        subsystem=subsystem if subsystem is not None else pf_scripting,
        stdout=stdout,
    )
    try:
        result = app(
            args=args,
            prog_name=PROG_NAME,
            standalone_mode=False,
            obj=invocation,
        )
    except USAGE_ERRORS as exc:
        report_usage_error(_usage_message(exc))
        return EXIT_FAILURE
    except OptionConflictError as exc:
        report_usage_error(str(exc))
        return EXIT_FAILURE
    return result if isinstance(result, int) else EXIT_SUCCESS


def run() -> None:
    """Console script entrypoint."""
    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover
    run()
