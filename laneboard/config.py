"""
FILE: laneboard/config.py
PURPOSE: Runtime configuration loaded from YAML and environment
EXPORTS:
  - Settings (dataclass)
  - get_settings() -> Settings
DEPENDENCIES:
  - yaml (config file parsing)
  - dataclasses, os, pathlib (stdlib)
NOTES:
  - Defaults < <data_dir>/config.yaml < environment variables
  - LANEBOARD_HOME moves the whole data directory (database + config)
  - Unknown keys in the YAML file are ignored
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .core.constants import DEFAULT_LANE_COLOR, REFRESH_INTERVAL_SECONDS


DEFAULT_HOME = Path.home() / ".laneboard"
CONFIG_FILENAME = "config.yaml"


@dataclass
class Settings:
    """Runtime settings for the board engine, CLI and REPL."""

    data_dir: str = str(DEFAULT_HOME)
    db_name: str = "laneboard.db"
    refresh_interval: float = REFRESH_INTERVAL_SECONDS
    log_level: str = "WARNING"
    default_lane_color: str = DEFAULT_LANE_COLOR

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def db_path(self) -> Path:
        return self.data_path / self.db_name

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML (if present), then apply env overrides."""
        home = Path(os.environ.get("LANEBOARD_HOME", str(DEFAULT_HOME))).expanduser()
        cfg_path = Path(path) if path else home / CONFIG_FILENAME

        data = {}
        if cfg_path.exists():
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in data.items() if k in known})

        if "LANEBOARD_HOME" in os.environ or "data_dir" not in data:
            settings.data_dir = str(home)
        if "LANEBOARD_REFRESH_SECONDS" in os.environ:
            settings.refresh_interval = float(os.environ["LANEBOARD_REFRESH_SECONDS"])
        if "LANEBOARD_LOG_LEVEL" in os.environ:
            settings.log_level = os.environ["LANEBOARD_LOG_LEVEL"].upper()

        return settings


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
