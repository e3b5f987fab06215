"""typeloader command line interface."""

import logging

import click

from .commands.methods import methods as methods_cmd
from .commands.resolve import available as available_cmd
from .commands.resolve import new as new_cmd
from .commands.resolve import resolve as resolve_cmd
from .commands.resolve import resource as resource_cmd
from .logging_setup import init_console_logging
from .logging_setup import init_json_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="typeloader")
@click.option("--verbose", "-v", count=True, help="Show resolution logs (-v debug, -vv trace)")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write JSONL logs to this file")
def cli(verbose: int, log_file: str | None):
    """typeloader - resolve classes and resources across loader sources."""
    level = {0: "WARNING", 1: "DEBUG"}.get(verbose, "TRACE")
    init_console_logging(level)
    if log_file:
        init_json_logging(log_file, level)
    logger.debug(f"Logging at {level}")


# Register commands
cli.add_command(resolve_cmd)
cli.add_command(available_cmd)
cli.add_command(resource_cmd)
cli.add_command(new_cmd)
cli.add_command(methods_cmd)


def main():
    cli()


if __name__ == "__main__":
    main()
