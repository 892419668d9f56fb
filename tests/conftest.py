"""Shared test fixtures for inkwell."""

import os
import tempfile

import pytest


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file pointing at a scratch diary."""
    import yaml

    config_data = {
        "diary": {
            "dir": os.path.join(tmp_dir, "diary"),
            "extension": ".html",
        },
        "autosave": {
            "interval_seconds": 2,
        },
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture(autouse=True)
def _clear_inkwell_env(monkeypatch):
    """Keep a developer's INKWELL_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("INKWELL_"):
            monkeypatch.delenv(key)
