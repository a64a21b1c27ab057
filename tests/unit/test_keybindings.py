"""Tests for keys, the keybinding map and the input-mode aware resolver."""

from __future__ import annotations

import pytest

from kanban_tui.core.enums import InputStatus
from kanban_tui.core.keybindings import (
    Action,
    CaptureOutcome,
    Key,
    KeyBindCapture,
    KeyBindings,
    resolve_key,
)
from kanban_tui.errors import (
    ErrorKind,
    InputValidationError,
    KeybindingConflictError,
    toast_kind_for,
)

pytestmark = pytest.mark.unit


class TestKeyParsing:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("q", Key("q")),
            ("D", Key("D")),
            ("Ctrl+c", Key("c", ctrl=True)),
            ("ctrl+c", Key("c", ctrl=True)),
            ("Shift+Up", Key("Up", shift=True)),
            ("shift+tab", Key("BackTab")),
            ("escape", Key("Esc")),
            ("space", Key(" ")),
            ("alt+x", Key("x", alt=True)),
            ("+", Key("+")),
            ("f5", Key("F5")),
        ],
    )
    def test_parse(self, text: str, expected: Key) -> None:
        assert Key.parse(text) == expected

    @pytest.mark.parametrize("text", ["hyper+x", "Ctrl+", "notakey"])
    def test_parse_rejects_garbage(self, text: str) -> None:
        with pytest.raises(ValueError, match="Invalid key"):
            Key.parse(text)

    def test_display_round_trips_through_parse(self):
        for key in (Key("c", ctrl=True), Key("Up", shift=True), Key(" "), Key("Esc")):
            assert Key.parse(str(key)) == key

    def test_printable(self):
        assert Key("a").printable == "a"
        assert Key("a", ctrl=True).printable is None
        assert Key("Enter").printable is None


class TestKeyBindings:
    def test_defaults_are_total(self):
        bindings = KeyBindings.defaults()
        assert {action for action, _keys in bindings.items()} == set(Action)

    def test_resolve(self):
        bindings = KeyBindings.defaults()
        assert bindings.resolve(Key("c", ctrl=True)) is Action.QUIT
        assert bindings.resolve(Key("q")) is Action.QUIT
        assert bindings.resolve(Key("D")) is Action.DELETE_BOARD
        assert bindings.resolve(Key("z")) is None

    def test_label_lists_all_keys(self):
        assert KeyBindings.defaults().label_for(Action.QUIT) == "Ctrl+c, q"

    def test_from_mapping_fills_missing_and_ignores_unknown(self):
        bindings = KeyBindings.from_mapping({"undo": ["Ctrl+u"], "not_an_action": ["x"]})
        assert bindings.keys_for(Action.UNDO) == (Key("u", ctrl=True),)
        assert bindings.keys_for(Action.REDO) == (Key("y", ctrl=True),)

    def test_from_mapping_conflict(self):
        with pytest.raises(KeybindingConflictError) as exc_info:
            KeyBindings.from_mapping({"undo": ["q"]})
        assert "q (quit, undo)" in exc_info.value.conflicts

    def test_mapping_round_trip(self):
        bindings = KeyBindings.defaults()
        assert KeyBindings.from_mapping(bindings.to_mapping()) == bindings

    def test_with_binding_validates(self):
        bindings = KeyBindings.defaults()
        rebound = bindings.with_binding(Action.UNDO, [Key("u"), Key("u")])
        assert rebound.keys_for(Action.UNDO) == (Key("u"),)
        assert bindings.keys_for(Action.UNDO) == (Key("z", ctrl=True),)
        with pytest.raises(KeybindingConflictError):
            bindings.with_binding(Action.UNDO, [Key("n")])
        with pytest.raises(InputValidationError):
            bindings.with_binding(Action.UNDO, [])


class TestResolveKey:
    passthrough = frozenset({Action.STOP_USER_INPUT, Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL})

    def test_initialized_resolves_everything(self):
        bindings = KeyBindings.defaults()
        assert resolve_key(Key("n"), bindings, InputStatus.INITIALIZED) is Action.NEW_CARD

    def test_user_input_only_passthrough(self):
        bindings = KeyBindings.defaults()
        status = InputStatus.USER_INPUT
        assert resolve_key(Key("n"), bindings, status, self.passthrough) is None
        assert (
            resolve_key(Key("Esc"), bindings, status, self.passthrough)
            is Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL
        )

    def test_key_bind_mode_resolves_nothing(self):
        bindings = KeyBindings.defaults()
        assert resolve_key(Key("Enter"), bindings, InputStatus.KEY_BIND_MODE) is None


class TestKeyBindCapture:
    def test_capture_then_commit(self):
        bindings = KeyBindings.defaults()
        capture = KeyBindCapture(Action.UNDO)
        outcome, _ = capture.feed(Key("u"), bindings)
        assert outcome is CaptureOutcome.CAPTURED
        outcome, _ = capture.feed(Key("u"), bindings)
        assert capture.keys == [Key("u")]

        outcome, updated = capture.feed(Key("Enter"), bindings)
        assert outcome is CaptureOutcome.COMMITTED
        assert updated.keys_for(Action.UNDO) == (Key("u"),)

    def test_cancel_with_empty_buffer(self):
        bindings = KeyBindings.defaults()
        outcome, unchanged = KeyBindCapture(Action.UNDO).feed(Key("Esc"), bindings)
        assert outcome is CaptureOutcome.CANCELLED
        assert unchanged is bindings

    def test_accept_without_keys_is_rejected(self):
        with pytest.raises(InputValidationError):
            KeyBindCapture(Action.UNDO).feed(Key("Enter"), KeyBindings.defaults())

    def test_commit_with_conflict_raises(self):
        capture = KeyBindCapture(Action.UNDO, keys=[Key("q")])
        with pytest.raises(KeybindingConflictError):
            capture.feed(Key("Enter"), KeyBindings.defaults())


class TestErrorKinds:
    @pytest.mark.parametrize(
        ("kind", "toast"),
        [
            (ErrorKind.INPUT_VALIDATION, "Warning"),
            (ErrorKind.RATE_LIMITED, "Warning"),
            (ErrorKind.IO_FAILURE, "Error"),
            (ErrorKind.KEYBINDING_CONFLICT, "Error"),
            (ErrorKind.NOTICE, "Info"),
            (ErrorKind.NOT_FOUND, None),
        ],
    )
    def test_toast_kind_for(self, kind: ErrorKind, toast: str | None) -> None:
        assert toast_kind_for(kind) == toast
