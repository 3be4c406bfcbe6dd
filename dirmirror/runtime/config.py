"""Persistent JSON config helpers.

Stores the watcher's coalescing window, the symlink policy, and log level.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .notify import DEFAULT_COALESCE_SECONDS

APP_NAME = "dirmirror"
CONFIG_FILENAME = "config.json"
CONFIG_ENV_VAR = "DIRMIRROR_CONFIG"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """Effective settings after validating the persisted config."""

    coalesce_seconds: float = DEFAULT_COALESCE_SECONDS
    follow_symlinks: bool = False
    log_level: str = DEFAULT_LOG_LEVEL


def _config_path() -> Path:
    """Return the env-var override when set, else the module config path."""
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(_config_path().read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored to keep runtime behavior non-fatal when
    config cannot be written.
    """
    config_path = _config_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _coerce_positive_float(value: object, default: float) -> float:
    """Accept ints/floats above zero; booleans and everything else fall back."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value <= 0:
        return default
    return float(value)


def _coerce_log_level(value: object) -> str:
    if not isinstance(value, str):
        return DEFAULT_LOG_LEVEL
    normalized = value.strip().upper()
    return normalized if normalized in LOG_LEVELS else DEFAULT_LOG_LEVEL


def load_settings() -> Settings:
    """Load settings, replacing each invalid value with its default."""
    data = load_config()
    follow_symlinks = data.get("follow_symlinks")
    return Settings(
        coalesce_seconds=_coerce_positive_float(data.get("coalesce_seconds"), DEFAULT_COALESCE_SECONDS),
        follow_symlinks=follow_symlinks if isinstance(follow_symlinks, bool) else False,
        log_level=_coerce_log_level(data.get("log_level")),
    )


def save_coalesce_seconds(seconds: float) -> None:
    """Persist the coalescing window; non-positive values are ignored."""
    if isinstance(seconds, bool) or seconds <= 0:
        return
    config = load_config()
    config["coalesce_seconds"] = float(seconds)
    save_config(config)


def save_follow_symlinks(follow_symlinks: bool) -> None:
    config = load_config()
    config["follow_symlinks"] = bool(follow_symlinks)
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "CONFIG_ENV_VAR",
    "LOG_LEVELS",
    "Settings",
    "load_config",
    "save_config",
    "load_settings",
    "save_coalesce_seconds",
    "save_follow_symlinks",
]
