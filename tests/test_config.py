"""Tests for the configuration module."""

import json
import os
from pathlib import Path
from unittest import mock

from screencaster.config import (
    DEFAULT_CONFIG,
    get_config_dir,
    get_config_path,
    load_config,
)


class TestGetConfigDir:
    """Tests for get_config_dir."""

    @mock.patch.dict(os.environ, {"XDG_CONFIG_HOME": "/home/test/.config"})
    def test_xdg(self):
        result = get_config_dir()
        assert result == Path("/home/test/.config/screencaster")

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_no_xdg(self):
        result = get_config_dir()
        assert result == Path.home() / ".config" / "screencaster"

    def test_config_path_is_json(self):
        assert get_config_path().name == "config.json"


class TestLoadConfig:
    """Tests for loading configuration."""

    def test_load_defaults(self, tmp_path):
        """When no config file exists, defaults are returned."""
        with mock.patch("screencaster.config.get_config_path", return_value=tmp_path / "nonexistent.json"):
            config = load_config()
        assert config == DEFAULT_CONFIG

    def test_load_returns_copy(self, tmp_path):
        with mock.patch("screencaster.config.get_config_path", return_value=tmp_path / "nonexistent.json"):
            config = load_config()
        config["framerate"] = 1
        assert DEFAULT_CONFIG["framerate"] == 30

    def test_load_user_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"stop_notifier": "tray"}))
        with mock.patch("screencaster.config.get_config_path", return_value=config_file):
            loaded = load_config()
        assert loaded["stop_notifier"] == "tray"

    def test_load_corrupt_file(self, tmp_path):
        """Corrupt JSON falls back to defaults."""
        config_file = tmp_path / "config.json"
        config_file.write_text("NOT VALID JSON {{{")
        with mock.patch("screencaster.config.get_config_path", return_value=config_file):
            config = load_config()
        assert config == DEFAULT_CONFIG

    def test_load_non_object_json(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("[1, 2, 3]")
        with mock.patch("screencaster.config.get_config_path", return_value=config_file):
            config = load_config()
        assert config == DEFAULT_CONFIG

    def test_partial_config_merges_with_defaults(self, tmp_path):
        """A partial config file is merged with defaults."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"framerate": 60}))
        with mock.patch("screencaster.config.get_config_path", return_value=config_file):
            config = load_config()
        assert config["framerate"] == 60
        assert config["bayer_scale"] == DEFAULT_CONFIG["bayer_scale"]
