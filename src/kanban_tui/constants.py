"""UI labels, sentinels and file names."""

from __future__ import annotations

APP_TITLE = "Kanban TUI"

FIELD_NOT_SET = "Not Set"
NO_CARDS_MESSAGE = "No cards found"
NO_BOARDS_MESSAGE = "No boards found, press the new board key to create one"

SAVE_FILE_PREFIX = "kanban"
SAVE_FILE_REGEX = rf"^{SAVE_FILE_PREFIX}_\d{{2}}-\d{{2}}-\d{{4}}_v\d+(\.json)?$"
THEME_FILE_SUFFIX = ".json"

CARD_NAME_MAX_DISPLAY = 40
BOARD_NAME_MAX_DISPLAY = 30

SCROLL_BAR_CHAR = "█"
SCROLL_TRACK_CHAR = "│"

__all__ = [
    "APP_TITLE",
    "BOARD_NAME_MAX_DISPLAY",
    "CARD_NAME_MAX_DISPLAY",
    "FIELD_NOT_SET",
    "NO_BOARDS_MESSAGE",
    "NO_CARDS_MESSAGE",
    "SAVE_FILE_PREFIX",
    "SAVE_FILE_REGEX",
    "SCROLL_BAR_CHAR",
    "SCROLL_TRACK_CHAR",
    "THEME_FILE_SUFFIX",
]
