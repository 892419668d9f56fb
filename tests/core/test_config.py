"""Tests for inkwell.core.config."""

import json
import os

import pytest
import yaml

from inkwell.core.config import Config
from inkwell.core.exceptions import ConfigurationError


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.get("paths.data_dir").endswith(".inkwell")
        assert config.get("diary.extension") == ".html"
        assert config.get("autosave.interval_seconds") == 5.0
        assert config.get("autosave.flush_on_leave") is False

    def test_custom_data_dir(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("paths.data_dir") == tmp_dir
        assert config.get("diary.dir") == os.path.join(tmp_dir, "diary")

    def test_yaml_config_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"diary": {"dir": "/srv/diary"}, "autosave": {"interval_seconds": 10}}, f)

        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("diary.dir") == "/srv/diary"
        assert config.get("autosave.interval_seconds") == 10
        # Untouched siblings keep their defaults
        assert config.get("diary.extension") == ".html"

    def test_json_config_file(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.json")
        with open(config_path, "w") as f:
            json.dump({"logging": {"level": "DEBUG"}}, f)

        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("logging.level") == "DEBUG"

    def test_missing_config_file_uses_defaults(self, tmp_dir):
        config = Config(config_file=os.path.join(tmp_dir, "nope.yaml"), data_dir=tmp_dir)
        assert config.get("diary.extension") == ".html"

    def test_env_overrides_file(self, tmp_dir, monkeypatch):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump({"diary": {"dir": "/from/file"}}, f)

        monkeypatch.setenv("INKWELL_DIARY__DIR", "/from/env")
        config = Config(config_file=config_path, data_dir=tmp_dir)
        assert config.get("diary.dir") == "/from/env"

    def test_custom_env_prefix(self, monkeypatch, tmp_dir):
        monkeypatch.setenv("MYDIARY_AUTOSAVE__FLUSH_ON_LEAVE", "true")
        config = Config(env_prefix="MYDIARY_", data_dir=tmp_dir)
        assert config.get("autosave.flush_on_leave") == "true"

    def test_get_missing_key(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        assert config.get("nonexistent.key") is None
        assert config.get("nonexistent.key", "fallback") == "fallback"

    def test_set(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        config.set("diary.dir", "/elsewhere")
        config.set("new.nested.key", 1)
        assert config.get("diary.dir") == "/elsewhere"
        assert config.get("new.nested.key") == 1

    def test_sections_are_copies(self, tmp_dir):
        config = Config(data_dir=tmp_dir)
        sections = config.sections()
        assert list(sections) == ["diary", "autosave", "logging"]

        sections["diary"]["dir"] = "/changed"
        assert config.get("diary.dir") == os.path.join(tmp_dir, "diary")


class TestBrokenConfigFiles:
    def test_invalid_yaml(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            f.write("diary: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Cannot load"):
            Config(config_file=config_path, data_dir=tmp_dir)

    def test_invalid_json(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.json")
        with open(config_path, "w") as f:
            f.write("{not json")

        with pytest.raises(ConfigurationError):
            Config(config_file=config_path, data_dir=tmp_dir)

    def test_non_mapping_root(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        with open(config_path, "w") as f:
            yaml.dump(["a", "b"], f)

        with pytest.raises(ConfigurationError, match="mapping"):
            Config(config_file=config_path, data_dir=tmp_dir)

    def test_empty_file_means_defaults(self, tmp_dir):
        config_path = os.path.join(tmp_dir, "config.yaml")
        open(config_path, "w").close()
        assert Config(config_file=config_path, data_dir=tmp_dir).get("diary.extension") == ".html"
