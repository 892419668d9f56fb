"""Entry commands: list, show, write, delete, today."""

from __future__ import annotations

import json
import sys

import click

from inkwell.journal import DateKey, DiaryEngine

from .common import DATE, CliState, load_settings, run_with_engine


def _format_date(date: DateKey) -> str:
    d = date.to_date()
    return f"{date}  {d.strftime('%a, %b')} {d.day}, {d.year}"


@click.command("list")
@click.option("-s", "--search", "query", default=None, help="Only entries containing this text (case-insensitive).")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_entries(state: CliState, query: str | None, as_json: bool) -> None:
    """List diary entries, most recent first."""
    settings = load_settings(state)

    async def action(engine: DiaryEngine) -> list[DateKey]:
        return await engine.list_dates(query)

    dates = run_with_engine(settings, action)

    if as_json:
        click.echo(json.dumps([str(d) for d in dates], indent=2))
        return
    if not dates:
        click.echo("No entries found." if query else "No entries yet.")
        return
    for date in dates:
        click.echo(_format_date(date))


@click.command()
@click.argument("date", type=DATE)
@click.pass_obj
def show(state: CliState, date: DateKey) -> None:
    """Print the entry for DATE (YYYY-MM-DD or 'today')."""
    settings = load_settings(state)

    async def action(engine: DiaryEngine) -> str | None:
        if not await engine.store.exists(date):
            return None
        if not await engine.open_date(date):
            raise click.ClickException(f"Could not read entry {date}")
        return engine.session.buffer

    content = run_with_engine(settings, action)
    if content is None:
        raise click.ClickException(f"No entry for {date}")
    click.echo(content)


@click.command()
@click.argument("date", type=DATE)
@click.option("-t", "--text", default=None, help="Entry content. Read from stdin when omitted.")
@click.pass_obj
def write(state: CliState, date: DateKey, text: str | None) -> None:
    """Replace the entry for DATE with new content."""
    settings = load_settings(state)
    content = text if text is not None else sys.stdin.read()

    async def action(engine: DiaryEngine) -> bool:
        if not await engine.open_date(date):
            return False
        engine.edit_buffer(content)
        return await engine.save_now()

    if not run_with_engine(settings, action):
        sys.exit(1)
    click.echo(f"Saved entry {date}")


@click.command()
@click.argument("date", type=DATE)
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def delete(state: CliState, date: DateKey, yes: bool) -> None:
    """Delete the entry for DATE. This cannot be undone."""
    settings = load_settings(state)
    if not yes:
        click.confirm(f"Delete entry for {date}?", abort=True)

    async def action(engine: DiaryEngine) -> bool:
        return await engine.request_delete(date)

    if not run_with_engine(settings, action):
        sys.exit(1)
    click.echo(f"Deleted entry {date}")


@click.command()
@click.pass_obj
def today(state: CliState) -> None:
    """Create today's entry if needed and print its path."""
    settings = load_settings(state)

    async def action(engine: DiaryEngine) -> str | None:
        if not await engine.new_entry_today():
            return None
        return str(engine.store.path_for(DateKey.today()))

    path = run_with_engine(settings, action)
    if path is None:
        sys.exit(1)
    click.echo(path)
