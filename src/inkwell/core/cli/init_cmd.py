"""inkwell init — write a starter config file."""

from __future__ import annotations

import asyncio

import click
import yaml

from inkwell.core.exceptions import ConfigurationError, StorageUnavailable
from inkwell.core.utils.file_io import safe_write
from inkwell.journal import FileEntryStore

from .common import CliState, load_config


@click.command()
@click.option("--diary-dir", default=None, help="Where entries are stored (default: ~/.inkwell/diary).")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_obj
def init(state: CliState, diary_dir: str | None, force: bool) -> None:
    """Set up inkwell: create the config file and diary directory."""
    try:
        from rich.console import Console
        from rich.panel import Panel
    except ImportError:
        raise click.ClickException("Install rich: pip install rich")

    config_path = state.config_file
    if config_path.exists() and not force:
        raise click.ClickException(f"{config_path} already exists. Use --force to overwrite.")

    try:
        config = load_config(state)
    except ConfigurationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    if diary_dir:
        config.set("diary.dir", diary_dir)

    safe_write(str(config_path), yaml.safe_dump(config.sections(), default_flow_style=False, sort_keys=False))
    click.echo(f"Wrote {config_path}")

    store = FileEntryStore(config.get("diary.dir"), extension=config.get("diary.extension", ".html"))
    try:
        asyncio.run(store.ensure_directory())
    except StorageUnavailable as e:
        raise click.ClickException(str(e)) from e

    console = Console()
    console.print(
        Panel(
            f"Diary entries will live in {store.diary_dir}\n"
            f"Auto-save every {config.get('autosave.interval_seconds')}s while the editor has focus.\n\n"
            "Next: inkwell today",
            title="Inkwell is ready",
        )
    )
