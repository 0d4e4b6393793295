"""Command-line interface for pyfacter."""

from pf_cli.main import app, run

__all__ = ["app", "run"]
