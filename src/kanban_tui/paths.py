"""Platform-aware path helpers for kanban-tui storage."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

APP_DIR_NAME = "kanban_tui"


def get_config_dir() -> Path:
    """Get the config directory (config.json, themes/)."""
    override = os.environ.get("KANBAN_TUI_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(user_config_dir(APP_DIR_NAME))


def get_data_dir() -> Path:
    """Get the data directory (log exports, cloud session)."""
    override = os.environ.get("KANBAN_TUI_DATA_DIR")
    if override:
        return Path(override)
    return Path(user_data_dir(APP_DIR_NAME))


def get_default_save_dir() -> Path:
    """Default save directory; falls back to the OS temporary directory."""
    override = os.environ.get("KANBAN_TUI_SAVE_DIR")
    if override:
        return Path(override)
    return Path(tempfile.gettempdir()) / APP_DIR_NAME


def get_config_path() -> Path:
    """Get the path to the main config file."""
    return get_config_dir() / "config.json"


def get_themes_dir() -> Path:
    """Get the directory holding user theme files."""
    return get_config_dir() / "themes"


def get_session_path() -> Path:
    """Get the path of the stored cloud session token."""
    return get_data_dir() / "cloud_session.json"


def get_debug_log_path() -> Path:
    """Get the path to the debug log export file."""
    return get_data_dir() / "debug.log"


def ensure_directories() -> None:
    """Create all necessary directories if they don't exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_themes_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
