"""Method discovery command."""

from __future__ import annotations

import pkgutil

import click
from rich.table import Table

from ..console import console
from ..exceptions import TypeLoaderError
from ..methods import Marker
from ..methods import get_annotated_methods
from ..resolver import get_default_resolver
from ..utils.error_format import escape_markup
from ._common import fail
from ._common import source_option
from ._common import source_override


def _load_marker(spec: str) -> Marker:
    try:
        marker = pkgutil.resolve_name(spec)
    except (ImportError, AttributeError, ValueError) as e:
        raise click.BadParameter(f"Cannot import marker {spec!r}: {e}", param_hint="--marker")
    if not isinstance(marker, Marker):
        raise click.BadParameter(f"{spec!r} is a {type(marker).__name__}, not a Marker", param_hint="--marker")
    return marker


@click.command()
@click.argument("name")
@click.option("--marker", "-m", "marker_spec", metavar="DOTTED", help="Only list methods with this Marker")
@source_option
def methods(name: str, marker_spec: str | None, source_spec: str | None):
    """List methods declared across a class hierarchy, most-derived first."""
    marker = _load_marker(marker_spec) if marker_spec else None

    with source_override(source_spec):
        try:
            cls = get_default_resolver().for_name(name)
        except TypeLoaderError as e:
            fail(e)

    handles = get_annotated_methods(cls, marker)
    if not handles:
        console.print(f"[yellow]No methods found on {escape_markup(name)}[/yellow]")
        return

    table = Table(title=f"Methods of {cls.__qualname__}", show_header=True, header_style="bold cyan")
    table.add_column("Declared on", style="green")
    table.add_column("Method")
    table.add_column("Markers", style="dim")
    for handle in handles:
        table.add_row(
            escape_markup(handle.owner.__qualname__),
            escape_markup(handle.name),
            ", ".join(m.name for m in handle.markers),
        )
    console.print(table)
