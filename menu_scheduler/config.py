"""Configuration loading (JSON or YAML) for the menu scheduler."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

import yaml

DATA_DIR_ENV = "MENU_SCHEDULER_DATA_DIR"


@dataclass
class StorageConfig:
    data_dir: str = "data"
    menu_items_file: str = "menu_items.json"
    notices_file: str = "notices.json"
    admin_users_file: str = "admin_users.json"
    menu_presets_file: str = "menu_presets.json"
    menu_schedules_file: str = "menu_schedules.json"

    def filenames(self) -> Dict[str, str]:
        """File names keyed by collection name, as EntityStore expects."""
        return {
            "menu_items": self.menu_items_file,
            "notices": self.notices_file,
            "admin_users": self.admin_users_file,
            "menu_presets": self.menu_presets_file,
            "menu_schedules": self.menu_schedules_file,
        }


@dataclass
class EngineConfig:
    tick_interval_seconds: float = 60.0


@dataclass
class AdminConfig:
    default_username: str = "admin"
    default_password: str = "admin123"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class SchedulerConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _section(cls, data: Dict[str, Any] | None, name: str):
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    allowed = {f.name for f in fields(cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in config section '{name}': {sorted(unknown)}")
    return cls(**data)


def config_from_dict(raw: Dict[str, Any]) -> SchedulerConfig:
    unknown = set(raw) - {"storage", "engine", "admin", "logging"}
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")
    cfg = SchedulerConfig(
        storage=_section(StorageConfig, raw.get("storage"), "storage"),
        engine=_section(EngineConfig, raw.get("engine"), "engine"),
        admin=_section(AdminConfig, raw.get("admin"), "admin"),
        logging=_section(LoggingConfig, raw.get("logging"), "logging"),
    )
    if float(cfg.engine.tick_interval_seconds) <= 0:
        raise ValueError("engine.tick_interval_seconds must be greater than zero")
    return cfg


def load_config(path: str | Path | None = None) -> SchedulerConfig:
    """
    Load configuration from a JSON or YAML file.

    Args:
        path: Config file; .yaml/.yml is parsed as YAML, anything else as
            JSON. None returns the defaults.

    The MENU_SCHEDULER_DATA_DIR environment variable overrides
    storage.data_dir.
    """
    raw: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            raw = yaml.safe_load(text) or {}
        else:
            raw = json.loads(text) if text.strip() else {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

    cfg = config_from_dict(raw)
    data_dir = os.getenv(DATA_DIR_ENV)
    if data_dir:
        cfg.storage.data_dir = data_dir
    return cfg
