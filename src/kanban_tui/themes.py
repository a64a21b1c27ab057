"""Theme palettes: built-in themes, user theme files and the Textual theme bridge."""

from __future__ import annotations

import json
import logging
import re
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationError, field_validator
from rich.color import Color, ColorParseError, ColorTriplet
from rich.style import Style
from textual.theme import Theme as TextualTheme

from kanban_tui.atomic import atomic_write
from kanban_tui.constants import THEME_FILE_SUFFIX
from kanban_tui.paths import get_themes_dir

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

MODIFIER_OPTIONS: tuple[str, ...] = (
    "bold",
    "dim",
    "italic",
    "underline",
    "blink",
    "reverse",
    "strike",
)

COLOR_OPTIONS: tuple[str, ...] = (
    "default",
    "black",
    "red",
    "green",
    "yellow",
    "blue",
    "magenta",
    "cyan",
    "white",
    "bright_black",
    "bright_red",
    "bright_green",
    "bright_yellow",
    "bright_blue",
    "bright_magenta",
    "bright_cyan",
    "bright_white",
    "grey50",
    "Custom Hex",
)

_HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class ThemeRole(StrEnum):
    GENERAL = "general"
    LIST_SELECT = "list_select"
    CARD_DUE_DEFAULT = "card_due_default"
    CARD_DUE_WARNING = "card_due_warning"
    CARD_DUE_OVERDUE = "card_due_overdue"
    CARD_STATUS_ACTIVE = "card_status_active"
    CARD_STATUS_COMPLETED = "card_status_completed"
    CARD_STATUS_STALE = "card_status_stale"
    CARD_PRIORITY_LOW = "card_priority_low"
    CARD_PRIORITY_MEDIUM = "card_priority_medium"
    CARD_PRIORITY_HIGH = "card_priority_high"
    KEYBOARD_FOCUS = "keyboard_focus"
    MOUSE_FOCUS = "mouse_focus"
    HELP_KEY = "help_key"
    HELP_TEXT = "help_text"
    ERROR_TEXT = "error_text"
    INACTIVE_TEXT = "inactive_text"
    PROGRESS_BAR = "progress_bar"
    LOG_ERROR = "log_error"
    LOG_WARN = "log_warn"
    LOG_INFO = "log_info"
    LOG_DEBUG = "log_debug"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


def is_hex_color(value: str) -> bool:
    return bool(_HEX_RE.match(value.strip()))


class ThemeStyle(BaseModel):
    fg: str | None = None
    bg: str | None = None
    modifiers: list[str] = Field(default_factory=list)

    @field_validator("fg", "bg")
    @classmethod
    def validate_color(cls, value: str | None) -> str | None:
        if value is None or value == "default":
            return None
        try:
            Color.parse(value)
        except ColorParseError as exc:
            raise ValueError(f"Invalid color {value!r}") from exc
        return value

    @field_validator("modifiers")
    @classmethod
    def validate_modifiers(cls, value: list[str]) -> list[str]:
        unknown = [modifier for modifier in value if modifier not in MODIFIER_OPTIONS]
        if unknown:
            raise ValueError(f"Unknown modifiers: {', '.join(unknown)}")
        return list(dict.fromkeys(value))

    def to_rich(self) -> Style:
        return Style(
            color=self.fg,
            bgcolor=self.bg,
            **{modifier: True for modifier in self.modifiers},
        )


def _s(fg: str | None = None, bg: str | None = None, *modifiers: str) -> ThemeStyle:
    return ThemeStyle(fg=fg, bg=bg, modifiers=list(modifiers))


class Theme(BaseModel):
    """Named palette with one style per semantic role."""

    name: str
    general: ThemeStyle = Field(default_factory=lambda: _s("white", "black"))
    list_select: ThemeStyle = Field(default_factory=lambda: _s("black", "cyan"))
    card_due_default: ThemeStyle = Field(default_factory=ThemeStyle)
    card_due_warning: ThemeStyle = Field(default_factory=lambda: _s("yellow"))
    card_due_overdue: ThemeStyle = Field(default_factory=lambda: _s("red", None, "bold"))
    card_status_active: ThemeStyle = Field(default_factory=lambda: _s("cyan"))
    card_status_completed: ThemeStyle = Field(default_factory=lambda: _s("green"))
    card_status_stale: ThemeStyle = Field(default_factory=lambda: _s("bright_black"))
    card_priority_low: ThemeStyle = Field(default_factory=lambda: _s("green"))
    card_priority_medium: ThemeStyle = Field(default_factory=lambda: _s("yellow"))
    card_priority_high: ThemeStyle = Field(default_factory=lambda: _s("red"))
    keyboard_focus: ThemeStyle = Field(default_factory=lambda: _s("cyan", None, "bold"))
    mouse_focus: ThemeStyle = Field(default_factory=lambda: _s("magenta", None, "bold"))
    help_key: ThemeStyle = Field(default_factory=lambda: _s("cyan"))
    help_text: ThemeStyle = Field(default_factory=lambda: _s("white"))
    error_text: ThemeStyle = Field(default_factory=lambda: _s("red"))
    inactive_text: ThemeStyle = Field(default_factory=lambda: _s("bright_black"))
    progress_bar: ThemeStyle = Field(default_factory=lambda: _s("green"))
    log_error: ThemeStyle = Field(default_factory=lambda: _s("#ff5f5f"))
    log_warn: ThemeStyle = Field(default_factory=lambda: _s("#ffff5f"))
    log_info: ThemeStyle = Field(default_factory=lambda: _s("#5fffff"))
    log_debug: ThemeStyle = Field(default_factory=lambda: _s("#5fff5f"))

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Theme name cannot be empty")
        return value.strip()

    def role(self, role: ThemeRole) -> ThemeStyle:
        return getattr(self, role.value)

    def style(self, role: ThemeRole) -> Style:
        return self.role(role).to_rich()

    def with_role(self, role: ThemeRole, style: ThemeStyle) -> Theme:
        return self.model_copy(update={role.value: style})

    def triplet(self, role: ThemeRole, background: bool = False) -> ColorTriplet | None:
        """Truecolor value of a role's fg (or bg), used by toast fades."""
        themed = self.role(role)
        value = themed.bg if background else themed.fg
        if value is None:
            return None
        return Color.parse(value).get_truecolor()

    def background_triplet(self) -> ColorTriplet:
        return self.triplet(ThemeRole.GENERAL, background=True) or ColorTriplet(0, 0, 0)

    def to_textual_theme(self) -> TextualTheme:
        def hex_of(role: ThemeRole, background: bool = False, fallback: str = "#808080") -> str:
            triplet = self.triplet(role, background)
            return triplet.hex if triplet is not None else fallback

        return TextualTheme(
            name=f"kanban-{slugify(self.name)}",
            primary=hex_of(ThemeRole.KEYBOARD_FOCUS, fallback="#00afaf"),
            secondary=hex_of(ThemeRole.HELP_KEY, fallback="#00afaf"),
            accent=hex_of(ThemeRole.MOUSE_FOCUS, fallback="#af00af"),
            foreground=hex_of(ThemeRole.GENERAL, fallback="#d0d0d0"),
            background=hex_of(ThemeRole.GENERAL, background=True, fallback="#000000"),
            warning=hex_of(ThemeRole.LOG_WARN),
            error=hex_of(ThemeRole.LOG_ERROR),
            success=hex_of(ThemeRole.LOG_DEBUG),
            dark=self.name != "Light",
        )

    def to_file_json(self) -> str:
        return self.model_dump_json(indent=2, exclude_none=True)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_") or "theme"


def _palette(
    name: str,
    fg: str,
    bg: str,
    accent: str,
    muted: str,
    red: str,
    yellow: str,
    green: str,
    alt: str,
) -> Theme:
    return Theme(
        name=name,
        general=_s(fg, bg),
        list_select=_s(bg, accent),
        card_due_default=_s(fg),
        card_due_warning=_s(yellow),
        card_due_overdue=_s(red, None, "bold"),
        card_status_active=_s(accent),
        card_status_completed=_s(green),
        card_status_stale=_s(muted),
        card_priority_low=_s(green),
        card_priority_medium=_s(yellow),
        card_priority_high=_s(red),
        keyboard_focus=_s(accent, None, "bold"),
        mouse_focus=_s(alt, None, "bold"),
        help_key=_s(accent),
        help_text=_s(fg),
        error_text=_s(red),
        inactive_text=_s(muted),
        progress_bar=_s(green),
        log_error=_s(red),
        log_warn=_s(yellow),
        log_info=_s(accent),
        log_debug=_s(green),
    )


# fg, bg, accent, muted, red, yellow, green, alt
_PALETTES: dict[str, tuple[str, ...]] = {
    "Light": (
        "#1c1c1c", "#f5f5f5", "#005f87", "#8a8a8a", "#af0000", "#af8700", "#008700", "#875faf"
    ),
    "Midnight Blue": (
        "#d0d0ff", "#0b1030", "#5f87ff", "#5f5f87", "#ff5f5f", "#ffd75f", "#5fd787", "#af87ff"
    ),
    "Slate": (
        "#d0d0d0", "#303030", "#87afd7", "#6c6c6c", "#d75f5f", "#d7af5f", "#87af87", "#d787af"
    ),
    "Metro": (
        "#ffffff", "#1e1e1e", "#00a2ed", "#767676", "#e81123", "#fff100", "#16c60c", "#b4009e"
    ),
    "Matrix": (
        "#00ff41", "#000000", "#00ff41", "#006400", "#ff0000", "#adff2f", "#008f11", "#39ff14"
    ),
    "Cyberpunk": (
        "#fcee0c", "#0d0221", "#00f0ff", "#54478c", "#ff003c", "#fcee0c", "#39ff14", "#ff00a0"
    ),
    "Dracula": (
        "#f8f8f2", "#282a36", "#bd93f9", "#6272a4", "#ff5555", "#f1fa8c", "#50fa7b", "#ff79c6"
    ),
}

BUILTIN_THEMES: tuple[Theme, ...] = (
    Theme(name="Default"),
    *(_palette(name, *colors) for name, colors in _PALETTES.items()),
)


def load_user_themes(themes_dir: Path | None = None) -> list[Theme]:
    """Read every theme file; invalid files are logged and skipped."""
    directory = themes_dir or get_themes_dir()
    if not directory.is_dir():
        return []
    themes: list[Theme] = []
    for path in sorted(directory.glob(f"*{THEME_FILE_SUFFIX}")):
        try:
            themes.append(Theme.model_validate(json.loads(path.read_text(encoding="utf-8"))))
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Skipping invalid theme file %s: %s", path.name, exc)
    return themes


def all_themes(themes_dir: Path | None = None) -> list[Theme]:
    """Built-ins followed by user themes; a user theme replaces a built-in of the same name."""
    by_name = {theme.name: theme for theme in BUILTIN_THEMES}
    for theme in load_user_themes(themes_dir):
        by_name[theme.name] = theme
    return list(by_name.values())


def find_theme(themes: list[Theme], name: str) -> Theme:
    for theme in themes:
        if theme.name == name:
            return theme
    return BUILTIN_THEMES[0]


def save_theme(theme: Theme, themes_dir: Path | None = None) -> Path:
    directory = themes_dir or get_themes_dir()
    path = directory / f"{slugify(theme.name)}{THEME_FILE_SUFFIX}"
    atomic_write(path, theme.to_file_json())
    logger.info("Saved theme '%s' to %s", theme.name, path)
    return path
