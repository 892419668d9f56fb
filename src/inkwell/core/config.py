"""
Layered configuration for inkwell.

Values are merged from three layers, later layers winning:
    1. Built-in defaults rooted at the data directory (~/.inkwell)
    2. The config file (YAML or JSON), if it exists
    3. Environment variables, INKWELL_SECTION__KEY

Usage:
    config = Config(config_file="~/.inkwell/config.yaml")

    config.get("diary.dir")                     # dot-notation access
    config.get("autosave.interval_seconds")     # 5.0 unless overridden
"""

import copy
import json
import os
from typing import Any

import yaml

from inkwell.core.exceptions import ConfigurationError

ENV_PREFIX = "INKWELL_"
DATA_DIR_NAME = ".inkwell"

# Sections written by ``inkwell init``; ``paths`` is derived, not user-facing.
USER_SECTIONS = ("diary", "autosave", "logging")


def default_config(data_dir: str) -> dict[str, Any]:
    """Defaults for a diary living under *data_dir*."""
    return {
        "paths": {
            "data_dir": data_dir,
        },
        "diary": {
            "dir": os.path.join(data_dir, "diary"),
            "extension": ".html",
        },
        "autosave": {
            "interval_seconds": 5.0,
            "flush_on_leave": False,
        },
        "logging": {
            "level": "WARNING",
            "file": "",
        },
    }


class Config:
    """
    Merged view over defaults, the config file and the environment.

    Env vars nest on double underscores:
    INKWELL_DIARY__DIR=/tmp/diary -> config["diary"]["dir"] = "/tmp/diary".
    Env values stay strings; typed access goes through
    :class:`inkwell.journal.config.DiarySettings`.
    """

    def __init__(
        self,
        config_file: str | None = None,
        data_dir: str | None = None,
        env_prefix: str = ENV_PREFIX,
    ):
        """
        Args:
            config_file: YAML or JSON file. A missing file means defaults only.
            data_dir: Root for default paths. Defaults to ~/.inkwell.
            env_prefix: Prefix for environment overrides; empty disables them.

        Raises:
            ConfigurationError: The config file exists but cannot be parsed.
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.data_dir = os.path.expanduser(data_dir or os.path.join("~", DATA_DIR_NAME))
        self.env_prefix = env_prefix or ""

        self.config_data = default_config(self.data_dir)
        if self.config_file and os.path.exists(self.config_file):
            _merge(self.config_data, self._read_file(self.config_file))
        if self.env_prefix:
            _merge(self.config_data, self._read_env())

    @staticmethod
    def _read_file(path: str) -> dict[str, Any]:
        ext = os.path.splitext(path)[1].lower()
        try:
            with open(path) as f:
                if ext == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load config file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must hold a mapping, got {type(data).__name__}")
        return data

    def _read_env(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.env_prefix):
                continue
            parts = env_key[len(self.env_prefix) :].lower().split("__")
            current = overrides
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = env_value
        return overrides

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a value by dot-notation path.

        Args:
            key_path: e.g. "diary.dir", "autosave.interval_seconds"
            default: Returned when the key is not found.
        """
        current: Any = self.config_data
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        """Set a value by dot-notation path, replacing non-dict intermediates."""
        parts = key_path.split(".")
        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def sections(self, names: tuple[str, ...] = USER_SECTIONS) -> dict[str, Any]:
        """Copy of the named top-level sections, ready to dump as YAML."""
        return {name: copy.deepcopy(self.config_data.get(name, {})) for name in names}


def _merge(target: dict, source: dict) -> None:
    """Recursively merge *source* into *target*; scalars in *source* win."""
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _merge(target[key], value)
        else:
            target[key] = value
