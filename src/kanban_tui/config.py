"""Configuration loader for kanban-tui."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
    field_validator,
    model_validator,
)

from kanban_tui.atomic import atomic_write, atomic_write_async
from kanban_tui.core.dates import DateTimeFormat
from kanban_tui.core.enums import CalendarFormat, View
from kanban_tui.core.keybindings import KeyBindings
from kanban_tui.errors import ConfigMalformedError, KanbanError
from kanban_tui.limits import (
    DEFAULT_BOARDS_TO_SHOW,
    DEFAULT_CARDS_TO_SHOW,
    DEFAULT_WARNING_DELTA_DAYS,
    MAX_BOARDS_TO_SHOW,
    MAX_CARDS_TO_SHOW,
    MAX_TICK_RATE_MS,
    MAX_WARNING_DELTA_DAYS,
    MIN_TICK_RATE_MS,
    TICK_RATE_MS,
)
from kanban_tui.paths import ensure_directories, get_config_path, get_default_save_dir

logger = logging.getLogger(__name__)


def _default_keybindings() -> dict[str, list[str]]:
    return KeyBindings.defaults().to_mapping()


class AppConfig(BaseModel):
    """Root configuration model, persisted as config.json."""

    model_config = ConfigDict(extra="ignore")

    save_directory: Path = Field(default_factory=get_default_save_dir)
    default_ui_mode: View = Field(default=View.TITLE_BODY_HELP_LOG)
    date_format: DateTimeFormat = Field(default=DateTimeFormat.DAY_MONTH_YEAR_TIME)
    date_picker_calendar_format: CalendarFormat = Field(default=CalendarFormat.SUNDAY_FIRST)
    no_of_boards_to_show: int = Field(default=DEFAULT_BOARDS_TO_SHOW, ge=1, le=MAX_BOARDS_TO_SHOW)
    no_of_cards_to_show: int = Field(default=DEFAULT_CARDS_TO_SHOW, ge=1, le=MAX_CARDS_TO_SHOW)
    warning_delta: int = Field(
        default=DEFAULT_WARNING_DELTA_DAYS,
        ge=0,
        le=MAX_WARNING_DELTA_DAYS,
        description="Days before the due date a card is styled as a warning",
    )
    tickrate: int = Field(default=TICK_RATE_MS, ge=MIN_TICK_RATE_MS, le=MAX_TICK_RATE_MS)
    disable_animations: bool = False
    enable_mouse_support: bool = True
    show_line_numbers: bool = True
    auto_login: bool = True
    always_load_last_save: bool = True
    save_on_exit: bool = True
    disable_scroll_bar: bool = False
    debug_mode: bool = False
    default_theme: str = "Default"
    keybindings: dict[str, list[str]] = Field(default_factory=_default_keybindings)

    _bindings: KeyBindings = PrivateAttr(default_factory=KeyBindings.defaults)

    @field_validator("default_ui_mode")
    @classmethod
    def validate_default_ui_mode(cls, value: View) -> View:
        if not value.is_board_view:
            raise ValueError(f"{value.label} cannot be used as the default view")
        return value

    @field_validator("default_theme")
    @classmethod
    def validate_default_theme(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Theme name cannot be empty")
        return value.strip()

    @model_validator(mode="after")
    def build_keybindings(self) -> AppConfig:
        try:
            self._bindings = KeyBindings.from_mapping(self.keybindings)
        except KanbanError as exc:
            raise ValueError(exc.message) from exc
        self.keybindings = self._bindings.to_mapping()
        return self

    @property
    def bindings(self) -> KeyBindings:
        return self._bindings

    def with_bindings(self, bindings: KeyBindings) -> AppConfig:
        return self.with_values(keybindings=bindings.to_mapping())

    def with_values(self, **changes: Any) -> AppConfig:
        """Validated copy with `changes` applied; raises pydantic ValidationError."""
        data = self.model_dump(mode="json")
        data.update(changes)
        return type(self).model_validate(data)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def load(cls, config_path: Path | None = None) -> AppConfig:
        """Load configuration from JSON, falling back to defaults."""
        return load_config(config_path).config

    def save(self, path: Path | None = None) -> None:
        atomic_write(path or get_config_path(), self.to_json())

    async def save_async(self, path: Path | None = None) -> None:
        await atomic_write_async(path or get_config_path(), self.to_json())


@dataclass(slots=True)
class LoadedConfig:
    config: AppConfig
    error: ConfigMalformedError | None = None


def load_config(config_path: Path | None = None) -> LoadedConfig:
    """Read config.json; a missing file is created and a malformed one replaced once."""
    ensure_directories()
    path = config_path or get_config_path()
    if not path.exists():
        config = AppConfig()
        config.save(path)
        logger.info("Created default config at %s", path)
        return LoadedConfig(config)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Config root must be an object")
        return LoadedConfig(AppConfig.model_validate(data))
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Config file %s is malformed, writing defaults: %s", path, exc)
        config = AppConfig()
        config.save(path)
        return LoadedConfig(
            config, ConfigMalformedError("Config file was malformed and has been reset to defaults")
        )


class ConfigFieldKind(StrEnum):
    TOGGLE = "toggle"
    TEXT = "text"
    VIEW = "view"
    DATE_FORMAT = "date_format"
    CALENDAR = "calendar"
    THEME = "theme"
    KEYBINDINGS = "keybindings"


class ConfigField(StrEnum):
    """Rows of the Config view in display order; values are JSON keys."""

    SAVE_DIRECTORY = "save_directory"
    DEFAULT_UI_MODE = "default_ui_mode"
    DATE_FORMAT = "date_format"
    NO_OF_BOARDS_TO_SHOW = "no_of_boards_to_show"
    NO_OF_CARDS_TO_SHOW = "no_of_cards_to_show"
    WARNING_DELTA = "warning_delta"
    TICKRATE = "tickrate"
    DISABLE_ANIMATIONS = "disable_animations"
    ENABLE_MOUSE_SUPPORT = "enable_mouse_support"
    SHOW_LINE_NUMBERS = "show_line_numbers"
    AUTO_LOGIN = "auto_login"
    ALWAYS_LOAD_LAST_SAVE = "always_load_last_save"
    SAVE_ON_EXIT = "save_on_exit"
    DISABLE_SCROLL_BAR = "disable_scroll_bar"
    DATE_PICKER_CALENDAR_FORMAT = "date_picker_calendar_format"
    DEFAULT_THEME = "default_theme"
    KEYBINDINGS = "keybindings"

    @property
    def label(self) -> str:
        return _FIELD_META[self][0]

    @property
    def kind(self) -> ConfigFieldKind:
        return _FIELD_META[self][1]

    def display_value(self, config: AppConfig) -> str:
        value = getattr(config, self.value)
        match self.kind:
            case ConfigFieldKind.KEYBINDINGS:
                return "Press Accept to edit"
            case ConfigFieldKind.VIEW:
                return value.label
            case ConfigFieldKind.DATE_FORMAT:
                return value.human_readable
            case ConfigFieldKind.TOGGLE:
                return "true" if value else "false"
            case _:
                return str(value)


_FIELD_META: dict[ConfigField, tuple[str, ConfigFieldKind]] = {
    ConfigField.SAVE_DIRECTORY: ("Save Directory", ConfigFieldKind.TEXT),
    ConfigField.DEFAULT_UI_MODE: ("Select Default View", ConfigFieldKind.VIEW),
    ConfigField.DATE_FORMAT: ("Date Format", ConfigFieldKind.DATE_FORMAT),
    ConfigField.NO_OF_BOARDS_TO_SHOW: ("Number of Boards to Show", ConfigFieldKind.TEXT),
    ConfigField.NO_OF_CARDS_TO_SHOW: ("Number of Cards to Show", ConfigFieldKind.TEXT),
    ConfigField.WARNING_DELTA: ("Number of Days to Warn Before Due Date", ConfigFieldKind.TEXT),
    ConfigField.TICKRATE: ("Tickrate", ConfigFieldKind.TEXT),
    ConfigField.DISABLE_ANIMATIONS: ("Disable Animations", ConfigFieldKind.TOGGLE),
    ConfigField.ENABLE_MOUSE_SUPPORT: ("Enable Mouse Support", ConfigFieldKind.TOGGLE),
    ConfigField.SHOW_LINE_NUMBERS: ("Show Line Numbers", ConfigFieldKind.TOGGLE),
    ConfigField.AUTO_LOGIN: ("Auto Login", ConfigFieldKind.TOGGLE),
    ConfigField.ALWAYS_LOAD_LAST_SAVE: ("Always Load Last Save", ConfigFieldKind.TOGGLE),
    ConfigField.SAVE_ON_EXIT: ("Save on Exit", ConfigFieldKind.TOGGLE),
    ConfigField.DISABLE_SCROLL_BAR: ("Disable Scroll Bar", ConfigFieldKind.TOGGLE),
    ConfigField.DATE_PICKER_CALENDAR_FORMAT: ("Calendar Format", ConfigFieldKind.CALENDAR),
    ConfigField.DEFAULT_THEME: ("Default Theme", ConfigFieldKind.THEME),
    ConfigField.KEYBINDINGS: ("Edit Keybindings", ConfigFieldKind.KEYBINDINGS),
}
