"""hospm configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_STORAGE_KEY = "hospital-project-manager-data"


@dataclass
class Config:
    """hospm configuration."""

    home: Path = field(default_factory=lambda: Path.home() / ".hospm")
    storage_key: str = DEFAULT_STORAGE_KEY
    log_level: str = "WARNING"
    export_basename: str = "hospital-project"
    json_indent: int = 2
    wal_mode: bool = True

    @classmethod
    def load(cls, home: Path | None = None) -> Config:
        """Load config from defaults, env vars, then YAML file."""
        config = cls()

        if home:
            config.home = home

        env_home = os.environ.get("HOSPM_HOME")
        if env_home:
            config.home = Path(env_home)

        env_log = os.environ.get("HOSPM_LOG_LEVEL")
        if env_log:
            config.log_level = env_log

        config_file = config.home / "config.yaml"
        if config_file.exists():
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
            for key, value in data.items():
                if hasattr(config, key):
                    expected_type = type(getattr(config, key))
                    if expected_type is bool and isinstance(value, str):
                        setattr(config, key, value.lower() in ("1", "true", "yes"))
                    elif issubclass(expected_type, Path):
                        setattr(config, key, Path(value))
                    else:
                        setattr(config, key, expected_type(value))

        return config

    @property
    def db_path(self) -> Path:
        return self.home / "hospm.db"

    def save(self) -> None:
        """Save current config to YAML."""
        self.home.mkdir(parents=True, exist_ok=True)
        config_file = self.home / "config.yaml"
        data = {
            "storage_key": self.storage_key,
            "log_level": self.log_level,
            "export_basename": self.export_basename,
            "json_indent": self.json_indent,
            "wal_mode": self.wal_mode,
        }
        with open(config_file, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
