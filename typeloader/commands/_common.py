"""Helpers shared by CLI commands."""

from __future__ import annotations

import sys
from contextlib import AbstractContextManager
from contextlib import nullcontext

import click

from ..accessors import additional_source
from ..console import err_console
from ..sources import parse_source
from ..utils.error_format import escape_markup
from ..utils.error_format import format_error_chain

source_option = click.option(
    "--source",
    "-s",
    "source_spec",
    metavar="SOURCE",
    help="Additional loader source for this command (directory or file:// URI)",
)


def source_override(source_spec: str | None) -> AbstractContextManager:
    """Scope the --source value as this thread's additional source."""
    if not source_spec:
        return nullcontext()
    try:
        return additional_source(parse_source(source_spec))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--source")


def fail(e: BaseException) -> None:
    """Print an error and its causes, then exit with status 1."""
    first, *causes = format_error_chain(e)
    err_console.print(f"[red]Error:[/red] {escape_markup(first)}")
    for cause in causes:
        err_console.print(f"[dim]  caused by: {escape_markup(cause)}[/dim]")
    sys.exit(1)
