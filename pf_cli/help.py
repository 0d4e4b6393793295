"""Usage text rendered from the option schema."""

from __future__ import annotations

import textwrap
from typing import Sequence

from pf_cli.schema import VISIBLE_OPTIONS, Arity, OptionSpec


HELP_COLUMN = 28
HELP_WIDTH = 80


def _heading(title: str) -> str:
    return f"{title}\n{'=' * len(title)}\n"


def _option_label(spec: OptionSpec) -> str:
    label = f"--{spec.name}"
    if spec.short:
        label += f" [ -{spec.short} ]"
    if spec.arity is not Arity.FLAG:
        label += f" {spec.metavar or 'arg'}"
        if spec.default is not None:
            label += f" (={spec.default})"
    return label


def format_options(specs: Sequence[OptionSpec] = VISIBLE_OPTIONS) -> str:
    """Two-column option listing: label, then wrapped help text."""
    lines: list[str] = []
    width = HELP_WIDTH - HELP_COLUMN
    for spec in specs:
        label = f"  {_option_label(spec)}"
        wrapped: list[str] = []
        for paragraph in spec.help.splitlines():
            wrapped.extend(textwrap.wrap(paragraph, width) or [""])
        if len(label) >= HELP_COLUMN:
            lines.append(label)
            lines.extend(" " * HELP_COLUMN + text for text in wrapped)
            continue
        lines.append(label.ljust(HELP_COLUMN) + wrapped[0])
        lines.extend(" " * HELP_COLUMN + text for text in wrapped[1:])
    return "\n".join(lines)


def render_help(prog_name: str = "facter") -> str:
    return "\n".join(
        [
            _heading("Synopsis"),
            "Collect and display facts about the system.\n",
            _heading("Usage"),
            f"  {prog_name} [options] [query] [query] [...]\n",
            _heading("Options"),
            format_options() + "\n",
            _heading("Description"),
            "Collect and display facts about the current system.  The library behind\n"
            f"{prog_name} is easy to extend, making {prog_name} an easy way to collect information\n"
            "about a system.\n",
            "If no queries are given, then all facts will be returned.\n",
            _heading("Example Queries"),
            f"  {prog_name} kernel",
            f"  {prog_name} networking.ip",
            f"  {prog_name} processors.models.0",
        ]
    )
