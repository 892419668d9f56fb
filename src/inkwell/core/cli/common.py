"""Shared setup logic for CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import click

from inkwell.core.events import ERROR_OCCURRED, Event
from inkwell.core.exceptions import ConfigurationError, DecodeSkipped, StorageUnavailable
from inkwell.core.utils.logging import setup_logging
from inkwell.journal import DateKey, DiaryEngine, DiarySettings

INKWELL_DIR = Path.home() / ".inkwell"
CONFIG_PATH = INKWELL_DIR / "config.yaml"

T = TypeVar("T")


@dataclass
class CliState:
    """Options given to the top-level group."""

    config_file: Path
    verbose: bool = False


def load_config(state: CliState):
    """Load config from the selected config file (missing file = defaults)."""
    from inkwell.core.config import Config

    return Config(config_file=str(state.config_file), data_dir=str(INKWELL_DIR))


def load_settings(state: CliState) -> DiarySettings:
    """Build DiarySettings and configure logging for this invocation."""
    try:
        settings = DiarySettings.from_config(load_config(state))
    except ConfigurationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    setup_logging(level="DEBUG" if state.verbose else settings.log_level, log_file=settings.log_file)
    return settings


class DateParamType(click.ParamType):
    """Click parameter accepting ``YYYY-MM-DD`` or ``today``."""

    name = "date"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> DateKey:
        if isinstance(value, DateKey):
            return value
        if value == "today":
            return DateKey.today()
        try:
            return DateKey.parse(value)
        except DecodeSkipped:
            self.fail(f"{value!r} is not a date in YYYY-MM-DD form", param, ctx)


DATE = DateParamType()


def _echo_error(event: Event) -> None:
    click.echo(f"Error: {event.payload['message']}: {event.payload['cause']}", err=True)


def run_with_engine(settings: DiarySettings, action: Callable[[DiaryEngine], Awaitable[T]]) -> T:
    """Start an engine, run *action* against it, and shut it down."""

    async def _main() -> T:
        engine = DiaryEngine.from_settings(settings)
        engine.bus.on(ERROR_OCCURRED, _echo_error)
        try:
            await engine.start(open_initial=False)
        except StorageUnavailable as e:
            raise click.ClickException(str(e)) from e
        try:
            return await action(engine)
        finally:
            await engine.shutdown()

    return asyncio.run(_main())
