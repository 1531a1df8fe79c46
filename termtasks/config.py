"""YAML configuration for termtasks."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.termtasks.yaml")
DEFAULT_DATA_DIR = ".termtasks"
DEFAULT_PROJECT = "inbox"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    pass


@dataclass
class Config:
    data_dir: str = DEFAULT_DATA_DIR
    default_project: str = DEFAULT_PROJECT
    status_timeout: float = 1.5
    log_level: str = "ERROR"
    log_file: Optional[str] = None
    style: Dict[str, str] = field(default_factory=dict)

    @property
    def log_path(self) -> str:
        return self.log_file or os.path.join(self.data_dir, "termtasks.log")


def _parse(raw: dict) -> Config:
    cfg = Config()
    if "data_dir" in raw:
        if not isinstance(raw["data_dir"], str) or not raw["data_dir"].strip():
            raise ConfigError("Config: 'data_dir' must be a non-empty string.")
        cfg.data_dir = os.path.expanduser(raw["data_dir"].strip())
    if "default_project" in raw:
        name = raw["default_project"]
        if not isinstance(name, str) or not name.strip() or os.sep in name:
            raise ConfigError("Config: 'default_project' must be a plain project id.")
        cfg.default_project = name.strip()
    if "status_timeout" in raw:
        try:
            timeout = float(raw["status_timeout"])
        except (TypeError, ValueError):
            raise ConfigError("Config: 'status_timeout' must be a number of seconds.") from None
        if timeout <= 0:
            raise ConfigError("Config: 'status_timeout' must be positive.")
        cfg.status_timeout = timeout
    if "log_level" in raw:
        level = str(raw["log_level"]).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"Config: unknown log_level {raw['log_level']!r}.")
        cfg.log_level = level
    if raw.get("log_file"):
        cfg.log_file = os.path.expanduser(str(raw["log_file"]))
    style = raw.get("style")
    if style is not None:
        if not isinstance(style, dict):
            raise ConfigError("Config: 'style' must be a mapping of class name to style string.")
        cfg.style = {str(k): str(v) for k, v in style.items()}
    return cfg


def load_config(path: Optional[str] = None) -> Config:
    """Load config from ``path``, $TERMTASKS_CONFIG or the default location.

    An explicitly requested file must exist; the default one is optional.
    $TERMTASKS_DIR overrides ``data_dir``.
    """
    explicit = path or os.environ.get("TERMTASKS_CONFIG")
    target = explicit or DEFAULT_CONFIG_PATH
    raw: dict = {}
    if os.path.isfile(target):
        try:
            with open(target, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config: cannot parse {target}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Config: {target} must contain a mapping.")
    elif explicit:
        raise ConfigError(f"Config: file not found: {target}")
    cfg = _parse(raw)
    env_dir = os.environ.get("TERMTASKS_DIR")
    if env_dir:
        cfg.data_dir = os.path.expanduser(env_dir)
    return cfg
