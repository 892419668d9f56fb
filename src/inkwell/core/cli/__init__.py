"""Inkwell CLI — entry point for init and entry commands."""

from pathlib import Path

import click

from inkwell import __version__

from .common import CONFIG_PATH, CliState


@click.group()
@click.version_option(version=__version__, package_name="inkwell")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Config file (default: {CONFIG_PATH}).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_file: Path | None, verbose: bool) -> None:
    """Inkwell — one diary entry per day."""
    ctx.obj = CliState(config_file=config_file or CONFIG_PATH, verbose=verbose)


# Register subcommands
from .entries_cmd import delete, list_entries, show, today, write  # noqa: E402
from .init_cmd import init  # noqa: E402

main.add_command(init)
main.add_command(list_entries)
main.add_command(show)
main.add_command(write)
main.add_command(delete)
main.add_command(today)
