"""Configuration dataclasses for the diary engine.

These are pure data containers with sensible defaults. Build them from a
:class:`~inkwell.core.config.Config` (YAML file + env vars) with
:meth:`DiarySettings.from_config`, or pass constructor args directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from inkwell.core.exceptions import ConfigurationError

from .autosave import DEFAULT_INTERVAL_SECONDS

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigurationError(f"{key} must be a boolean, got {value!r}")


def _as_interval(key: str, value: Any) -> float:
    try:
        interval = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number of seconds, got {value!r}") from None
    if interval <= 0:
        raise ConfigurationError(f"{key} must be positive, got {interval}")
    return interval


@dataclass
class DiarySettings:
    """Settings for the diary store and auto-save loop.

    Attributes:
        diary_dir: Directory holding one file per dated entry.
        extension: File extension for entries, including the dot.
        autosave_interval: Seconds between auto-save ticks while focused.
        flush_on_leave: Save dirty edits on blur, date switch and close
            instead of waiting for the next tick.
        log_level: Minimum loguru level.
        log_file: Optional rotating log file path.
    """

    diary_dir: str = field(default_factory=lambda: os.path.expanduser(os.path.join("~", ".inkwell", "diary")))
    extension: str = ".html"
    autosave_interval: float = DEFAULT_INTERVAL_SECONDS
    flush_on_leave: bool = False
    log_level: str = "WARNING"
    log_file: str | None = None

    def __post_init__(self):
        if not self.extension.startswith(".") or len(self.extension) < 2:
            raise ConfigurationError(f"diary.extension must start with a dot, got {self.extension!r}")
        if self.autosave_interval <= 0:
            raise ConfigurationError(f"autosave.interval_seconds must be positive, got {self.autosave_interval}")

    @classmethod
    def from_config(cls, config: Any) -> DiarySettings:
        """Read settings from a Config-like object with dot-notation ``get``."""
        defaults = cls()
        diary_dir = config.get("diary.dir") or defaults.diary_dir
        return cls(
            diary_dir=os.path.expanduser(str(diary_dir)),
            extension=str(config.get("diary.extension", defaults.extension)),
            autosave_interval=_as_interval(
                "autosave.interval_seconds", config.get("autosave.interval_seconds", defaults.autosave_interval)
            ),
            flush_on_leave=_as_bool("autosave.flush_on_leave", config.get("autosave.flush_on_leave", False)),
            log_level=str(config.get("logging.level", defaults.log_level)).upper(),
            log_file=config.get("logging.file") or None,
        )
