"""Resolution commands: resolve, available, resource, new."""

from __future__ import annotations

import sys

import click

from ..console import console
from ..exceptions import TypeLoaderError
from ..resolver import get_default_resolver
from ..utils.error_format import escape_markup
from ._common import fail
from ._common import source_option
from ._common import source_override


@click.command()
@click.argument("name")
@source_option
def resolve(name: str, source_spec: str | None):
    """Resolve a class name and show which source supplied it.

    Examples:

        \b
        typeloader resolve collections.OrderedDict
        typeloader resolve int
        typeloader resolve plugins.Widget --source ./plugins
    """
    resolver = get_default_resolver()
    with source_override(source_spec):
        try:
            cls, label = resolver.resolve_with_accessor(name)
        except TypeLoaderError as e:
            fail(e)

    qualified = f"{cls.__module__}.{cls.__qualname__}"
    console.print(f"[green]✓[/green] {escape_markup(name)} -> {escape_markup(qualified)}")
    console.print(f"[dim]Resolved by: {label}[/dim]")


@click.command()
@click.argument("name")
@source_option
def available(name: str, source_spec: str | None):
    """Check whether a class name resolves (exit status 0 or 1)."""
    with source_override(source_spec):
        found = get_default_resolver().is_available(name)

    if found:
        console.print(f"[green]✓[/green] {escape_markup(name)} is available")
        return
    console.print(f"[yellow]✗[/yellow] {escape_markup(name)} is not available")
    sys.exit(1)


@click.command()
@click.argument("name")
@source_option
@click.option("--show", is_flag=True, help="Write the resource content to stdout")
def resource(name: str, source_spec: str | None, show: bool):
    """Look up a slash-delimited resource, e.g. mypkg/data/config.yaml."""
    with source_override(source_spec):
        stream = get_default_resolver().get_resource_as_stream(name)

    if stream is None:
        console.print(f"[yellow]Resource not found:[/yellow] {escape_markup(name)}")
        sys.exit(1)

    with stream:
        data = stream.read()

    if show:
        click.echo(data.decode("utf-8", errors="replace"), nl=False)
        return
    console.print(f"[green]✓[/green] {escape_markup(name)} ({len(data)} bytes)")


@click.command()
@click.argument("name")
@click.argument("args", nargs=-1)
@source_option
def new(name: str, args: tuple[str, ...], source_spec: str | None):
    """Construct a class by name; ARGS are passed as strings."""
    resolver = get_default_resolver()
    with source_override(source_spec):
        try:
            instance = resolver.new_instance(name, *args)
        except TypeLoaderError as e:
            fail(e)

    console.print(escape_markup(repr(instance)))
