"""Configuration management for screencaster."""

import json
import os
from pathlib import Path
from typing import Any

DEFAULT_CONFIG = {
    "framerate": 30,
    "cursor": False,
    "start_delay": 1.0,
    "stop_notifier": "yad",
    "stop_timeout": 10,
    "backup_suffix": ".screencaster.bak",
    "dither_method": "bayer",
    "bayer_scale": 5,
    "optimize_level": 3,
}


def get_config_dir() -> Path:
    """Return the config directory (XDG, since screencaster needs X11)."""
    xdg = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg) / "screencaster"


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from disk, falling back to defaults.

    Values are not checked here; the command line validates them before
    they are used.
    """
    config = dict(DEFAULT_CONFIG)
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)
            if isinstance(user_config, dict):
                config.update(user_config)
        except (json.JSONDecodeError, OSError):
            pass
    return config
