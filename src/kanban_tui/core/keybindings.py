"""Keys, actions and the keybinding resolver.

A `KeyBindings` map is total over `Action` and is never allowed to bind one key to
two actions; every constructor path runs the conflict check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from kanban_tui.core.enums import InputStatus
from kanban_tui.errors import InputValidationError, KeybindingConflictError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)


_NAMED_KEYS: dict[str, str] = {
    "enter": "Enter",
    "tab": "Tab",
    "backtab": "BackTab",
    "esc": "Esc",
    "escape": "Esc",
    "backspace": "Backspace",
    "delete": "Delete",
    "del": "Delete",
    "insert": "Ins",
    "ins": "Ins",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "page_up": "PageUp",
    "pagedown": "PageDown",
    "page_down": "PageDown",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "space": " ",
    **{f"f{number}": f"F{number}" for number in range(1, 13)},
}


@dataclass(frozen=True, slots=True)
class Key:
    """A named key or a (possibly modified) character.

    Shifted characters are stored as the shifted character itself ("D", not Shift+d);
    the shift flag only applies to named keys (Shift+Up).
    """

    code: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False

    @classmethod
    def parse(cls, text: str) -> Key:
        """Parse display strings ("Ctrl+c", "Shift+Up") and Textual key names ("ctrl+c")."""
        if text in ("+", " "):
            return cls(text)
        parts = text.split("+")
        if text.endswith("++"):
            parts = [*parts[:-2], "+"]
        name, modifiers = parts[-1], {part.lower() for part in parts[:-1]}
        unknown = modifiers - {"ctrl", "alt", "shift", "meta"}
        if unknown or not name:
            raise ValueError(f"Invalid key: {text!r}")
        ctrl = "ctrl" in modifiers
        alt = "alt" in modifiers or "meta" in modifiers
        shift = "shift" in modifiers

        named = _NAMED_KEYS.get(name.lower()) if len(name) > 1 else None
        if named is not None:
            if named == "Tab" and shift:
                return cls("BackTab", ctrl=ctrl, alt=alt)
            if named == " ":
                return cls(" ", ctrl=ctrl, alt=alt)
            return cls(named, ctrl=ctrl, alt=alt, shift=shift)
        if len(name) != 1:
            raise ValueError(f"Invalid key: {text!r}")
        if shift:
            return cls(name.upper(), ctrl=ctrl, alt=alt)
        return cls(name, ctrl=ctrl, alt=alt)

    @classmethod
    def char(cls, character: str) -> Key:
        return cls(character)

    @property
    def is_named(self) -> bool:
        return len(self.code) > 1

    @property
    def printable(self) -> str | None:
        """The character this key types into a text buffer, if any."""
        if self.is_named or self.ctrl or self.alt:
            return None
        return self.code

    def __str__(self) -> str:
        modifiers = ((self.ctrl, "Ctrl+"), (self.alt, "Alt+"), (self.shift, "Shift+"))
        prefix = "".join(label for flag, label in modifiers if flag)
        code = "Space" if self.code == " " else self.code
        return f"{prefix}{code}"


class Action(StrEnum):
    """Abstract operations keys resolve to; declaration order is the resolver scan order."""

    QUIT = "quit"
    NEXT_FOCUS = "next_focus"
    PRV_FOCUS = "prv_focus"
    OPEN_CONFIG_MENU = "open_config_menu"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    MOVE_CARD_UP = "move_card_up"
    MOVE_CARD_DOWN = "move_card_down"
    MOVE_CARD_LEFT = "move_card_left"
    MOVE_CARD_RIGHT = "move_card_right"
    TAKE_USER_INPUT = "take_user_input"
    STOP_USER_INPUT = "stop_user_input"
    GO_TO_PREVIOUS_VIEW_OR_CANCEL = "go_to_previous_view_or_cancel"
    ACCEPT = "accept"
    HIDE_UI_ELEMENT = "hide_ui_element"
    SAVE_STATE = "save_state"
    NEW_BOARD = "new_board"
    NEW_CARD = "new_card"
    DELETE = "delete"
    DELETE_BOARD = "delete_board"
    CHANGE_CARD_STATUS_TO_COMPLETED = "change_card_status_to_completed"
    CHANGE_CARD_STATUS_TO_ACTIVE = "change_card_status_to_active"
    CHANGE_CARD_STATUS_TO_STALE = "change_card_status_to_stale"
    CHANGE_CARD_PRIORITY_TO_HIGH = "change_card_priority_to_high"
    CHANGE_CARD_PRIORITY_TO_MEDIUM = "change_card_priority_to_medium"
    CHANGE_CARD_PRIORITY_TO_LOW = "change_card_priority_to_low"
    RESET_UI = "reset_ui"
    GO_TO_MAIN_MENU = "go_to_main_menu"
    TOGGLE_COMMAND_PALETTE = "toggle_command_palette"
    UNDO = "undo"
    REDO = "redo"
    CLEAR_ALL_TOASTS = "clear_all_toasts"

    @property
    def description(self) -> str:
        return _ACTION_DESCRIPTIONS[self]


_ACTION_DESCRIPTIONS: dict[Action, str] = {
    Action.QUIT: "Quit",
    Action.NEXT_FOCUS: "Focus next",
    Action.PRV_FOCUS: "Focus previous",
    Action.OPEN_CONFIG_MENU: "Configure",
    Action.UP: "Go up",
    Action.DOWN: "Go down",
    Action.LEFT: "Go left",
    Action.RIGHT: "Go right",
    Action.MOVE_CARD_UP: "Move card up",
    Action.MOVE_CARD_DOWN: "Move card down",
    Action.MOVE_CARD_LEFT: "Move card left",
    Action.MOVE_CARD_RIGHT: "Move card right",
    Action.TAKE_USER_INPUT: "Enter input mode",
    Action.STOP_USER_INPUT: "Stop input mode",
    Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL: "Go to previous view or cancel",
    Action.ACCEPT: "Accept",
    Action.HIDE_UI_ELEMENT: "Hide focused element",
    Action.SAVE_STATE: "Save state",
    Action.NEW_BOARD: "New board",
    Action.NEW_CARD: "New card",
    Action.DELETE: "Delete focused element",
    Action.DELETE_BOARD: "Delete board",
    Action.CHANGE_CARD_STATUS_TO_COMPLETED: "Change card status to completed",
    Action.CHANGE_CARD_STATUS_TO_ACTIVE: "Change card status to active",
    Action.CHANGE_CARD_STATUS_TO_STALE: "Change card status to stale",
    Action.CHANGE_CARD_PRIORITY_TO_HIGH: "Change card priority to high",
    Action.CHANGE_CARD_PRIORITY_TO_MEDIUM: "Change card priority to medium",
    Action.CHANGE_CARD_PRIORITY_TO_LOW: "Change card priority to low",
    Action.RESET_UI: "Reset UI",
    Action.GO_TO_MAIN_MENU: "Go to main menu",
    Action.TOGGLE_COMMAND_PALETTE: "Open command palette",
    Action.UNDO: "Undo",
    Action.REDO: "Redo",
    Action.CLEAR_ALL_TOASTS: "Clear all toasts",
}

DEFAULT_KEYBINDINGS: dict[Action, tuple[str, ...]] = {
    Action.QUIT: ("Ctrl+c", "q"),
    Action.NEXT_FOCUS: ("Tab",),
    Action.PRV_FOCUS: ("BackTab",),
    Action.OPEN_CONFIG_MENU: ("c",),
    Action.UP: ("Up",),
    Action.DOWN: ("Down",),
    Action.LEFT: ("Left",),
    Action.RIGHT: ("Right",),
    Action.MOVE_CARD_UP: ("Shift+Up",),
    Action.MOVE_CARD_DOWN: ("Shift+Down",),
    Action.MOVE_CARD_LEFT: ("Shift+Left",),
    Action.MOVE_CARD_RIGHT: ("Shift+Right",),
    Action.TAKE_USER_INPUT: ("i",),
    Action.STOP_USER_INPUT: ("Ins",),
    Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL: ("Esc",),
    Action.ACCEPT: ("Enter",),
    Action.HIDE_UI_ELEMENT: ("h",),
    Action.SAVE_STATE: ("Ctrl+s",),
    Action.NEW_BOARD: ("b",),
    Action.NEW_CARD: ("n",),
    Action.DELETE: ("d",),
    Action.DELETE_BOARD: ("D",),
    Action.CHANGE_CARD_STATUS_TO_COMPLETED: ("1",),
    Action.CHANGE_CARD_STATUS_TO_ACTIVE: ("2",),
    Action.CHANGE_CARD_STATUS_TO_STALE: ("3",),
    Action.CHANGE_CARD_PRIORITY_TO_HIGH: ("4",),
    Action.CHANGE_CARD_PRIORITY_TO_MEDIUM: ("5",),
    Action.CHANGE_CARD_PRIORITY_TO_LOW: ("6",),
    Action.RESET_UI: ("r",),
    Action.GO_TO_MAIN_MENU: ("m",),
    Action.TOGGLE_COMMAND_PALETTE: ("Ctrl+p",),
    Action.UNDO: ("Ctrl+z",),
    Action.REDO: ("Ctrl+y",),
    Action.CLEAR_ALL_TOASTS: ("t",),
}


def _dedupe(keys: Iterable[Key]) -> tuple[Key, ...]:
    return tuple(dict.fromkeys(keys))


def find_conflicts(bindings: Mapping[Action, Sequence[Key]]) -> list[str]:
    """Describe every key bound to more than one action."""
    owners: dict[Key, list[Action]] = {}
    for action, keys in bindings.items():
        for key in dict.fromkeys(keys):
            owners.setdefault(key, []).append(action)
    return [
        f"{key} ({', '.join(action.value for action in actions)})"
        for key, actions in owners.items()
        if len(actions) > 1
    ]


@dataclass(frozen=True, slots=True)
class KeyBindings:
    """Total, conflict-free map from Action to an ordered tuple of Keys."""

    bindings: dict[Action, tuple[Key, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        missing = [action for action in Action if not self.bindings.get(action)]
        if missing:
            raise InputValidationError(
                f"Missing keybindings for: {', '.join(action.value for action in missing)}"
            )
        conflicts = find_conflicts(self.bindings)
        if conflicts:
            raise KeybindingConflictError(conflicts)

    @classmethod
    def defaults(cls) -> KeyBindings:
        return cls(
            {
                action: tuple(Key.parse(key) for key in keys)
                for action, keys in DEFAULT_KEYBINDINGS.items()
            }
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Sequence[str]]) -> KeyBindings:
        """Build from a config record, filling missing actions with defaults.

        Unknown action names are ignored; unparseable keys raise ValueError.
        """
        merged = dict(cls.defaults().bindings)
        for name, raw_keys in mapping.items():
            try:
                action = Action(name)
            except ValueError:
                logger.warning("Ignoring keybinding for unknown action %r", name)
                continue
            keys = _dedupe(Key.parse(raw) for raw in raw_keys)
            if keys:
                merged[action] = keys
        return cls({action: merged[action] for action in Action})

    def to_mapping(self) -> dict[str, list[str]]:
        return {action.value: [str(key) for key in keys] for action, keys in self.bindings.items()}

    def keys_for(self, action: Action) -> tuple[Key, ...]:
        return self.bindings[action]

    def label_for(self, action: Action) -> str:
        return ", ".join(str(key) for key in self.bindings[action])

    def resolve(self, key: Key) -> Action | None:
        for action, keys in self.bindings.items():
            if key in keys:
                return action
        return None

    def with_binding(self, action: Action, keys: Iterable[Key]) -> KeyBindings:
        """New map with `action` rebound; raises KeybindingConflictError on overlap."""
        new_keys = _dedupe(keys)
        if not new_keys:
            raise InputValidationError(f"No keys given for {action.value}")
        updated = dict(self.bindings)
        updated[action] = new_keys
        return KeyBindings(updated)

    def items(self) -> Iterator[tuple[Action, tuple[Key, ...]]]:
        return iter(self.bindings.items())


def resolve_key(
    key: Key,
    bindings: KeyBindings,
    input_status: InputStatus,
    passthrough: frozenset[Action] = frozenset(),
) -> Action | None:
    """Resolve a key for the current input mode.

    In UserInput only actions in `passthrough` (stop-input, cancel and similar) resolve;
    every other key belongs to the focused text buffer. KeyBindMode captures raw keys.
    """
    if input_status is InputStatus.KEY_BIND_MODE:
        return None
    action = bindings.resolve(key)
    if input_status is InputStatus.USER_INPUT and action not in passthrough:
        return None
    return action


class CaptureOutcome(StrEnum):
    CAPTURED = "captured"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class KeyBindCapture:
    """Buffers raw keys for one action until Accept commits them."""

    action: Action
    keys: list[Key] = field(default_factory=list)

    def feed(self, key: Key, bindings: KeyBindings) -> tuple[CaptureOutcome, KeyBindings]:
        """Consume one key.

        Accept commits (validating conflicts against `bindings`); cancel with an
        empty buffer abandons the capture; any other key is buffered.
        """
        resolved = bindings.resolve(key)
        if resolved is Action.ACCEPT and self.keys:
            return CaptureOutcome.COMMITTED, bindings.with_binding(self.action, self.keys)
        if resolved is Action.ACCEPT:
            raise InputValidationError("Press the keys to bind, then Accept to save them")
        if resolved is Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL and not self.keys:
            return CaptureOutcome.CANCELLED, bindings
        if key not in self.keys:
            self.keys.append(key)
        return CaptureOutcome.CAPTURED, bindings
