import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from sticker_habits.errors import ConfigError
from sticker_habits.libuniversal import ConfigKey, Paths, app_base_dir
from sticker_habits.storage import generate_key

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 60
DEFAULT_BACKUPS = 2

def default_cfg() -> Dict[str, Any]:
    return {
        ConfigKey.STORAGE_FILE.value: Paths.STORAGE_FILE.value,
        ConfigKey.KEY.value: generate_key(),
        ConfigKey.BACKUPS.value: DEFAULT_BACKUPS,
        ConfigKey.TICK_SECONDS.value: DEFAULT_TICK_SECONDS,
        ConfigKey.CATALOG_FILE.value: None,
        ConfigKey.LOG_LEVEL.value: "INFO",
    }

@dataclass
class Settings:
    storage_path: str
    key: str
    backups: int = DEFAULT_BACKUPS
    tick_seconds: int = DEFAULT_TICK_SECONDS
    catalog_path: Optional[str] = None
    log_level: str = "INFO"

def _resolve(base: str, path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    if os.path.isabs(path):
        return path
    return os.path.join(base, path)

def _optional_str(cfg: Dict[str, Any], key: ConfigKey) -> Optional[str]:
    value = cfg.get(key.value)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"'{key.value}' must be a string, got {value!r}")
    return value

def _log_level(cfg: Dict[str, Any]) -> str:
    level = str(cfg.get(ConfigKey.LOG_LEVEL.value, "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"'{ConfigKey.LOG_LEVEL.value}' is not a logging level: {level!r}")
    return level

def _positive_int(cfg: Dict[str, Any], key: ConfigKey, default: int, minimum: int) -> int:
    value = cfg.get(key.value, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigError(f"'{key.value}' must be an integer >= {minimum}, got {value!r}")
    return value

def get_config(cfg_path: Optional[str] = None) -> Dict[str, Any]:
    if cfg_path is None:
        cfg_path = os.path.join(app_base_dir(), Paths.CONFIG_FILE.value)

    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except FileNotFoundError:
        # If config file doesn't exist, create it with default settings
        cfg = default_cfg()
        try:
            directory = os.path.dirname(cfg_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(cfg_path, "w", encoding="utf-8") as yaml_file:
                yaml.safe_dump(cfg, yaml_file, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Could not create config file at {cfg_path}: {e}") from e
        logger.info("Config file was not found and has been created at %s", cfg_path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error decoding YAML from config file: {e}") from e

    if not isinstance(cfg, dict):
        raise ConfigError(f"Config file {cfg_path} must contain a mapping.")
    return cfg

def load_settings(cfg_path: Optional[str] = None) -> Settings:
    if cfg_path is None:
        cfg_path = os.path.join(app_base_dir(), Paths.CONFIG_FILE.value)
    cfg = get_config(cfg_path)
    base = os.path.dirname(os.path.abspath(cfg_path))

    key = cfg.get(ConfigKey.KEY.value)
    if not key or not isinstance(key, str):
        raise ConfigError(f"'{ConfigKey.KEY.value}' is missing from {cfg_path}")

    return Settings(
        storage_path=_resolve(base, _optional_str(cfg, ConfigKey.STORAGE_FILE) or Paths.STORAGE_FILE.value),
        key=key,
        backups=_positive_int(cfg, ConfigKey.BACKUPS, DEFAULT_BACKUPS, 0),
        tick_seconds=_positive_int(cfg, ConfigKey.TICK_SECONDS, DEFAULT_TICK_SECONDS, 1),
        catalog_path=_resolve(base, _optional_str(cfg, ConfigKey.CATALOG_FILE)),
        log_level=_log_level(cfg),
    )
