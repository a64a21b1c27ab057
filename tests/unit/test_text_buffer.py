"""Tests for the form field text buffer."""

from __future__ import annotations

import pytest

from kanban_tui.core.keybindings import Key
from kanban_tui.core.text_buffer import CursorMove, TextBuffer

pytestmark = pytest.mark.unit


def _type(buffer: TextBuffer, text: str) -> None:
    for char in text:
        assert buffer.handle_key(Key(char))


class TestEditing:
    def test_typing_and_newlines(self):
        buffer = TextBuffer()
        _type(buffer, "ab")
        buffer.handle_key(Key("Enter"))
        _type(buffer, "c")
        assert buffer.lines == ["ab", "c"]
        assert (buffer.row, buffer.col) == (1, 1)
        assert buffer.text == "ab\nc"

    def test_single_line_ignores_enter(self):
        buffer = TextBuffer(single_line=True)
        _type(buffer, "ab")
        assert not buffer.handle_key(Key("Enter"))
        assert buffer.lines == ["ab"]

    def test_backspace_joins_lines(self):
        buffer = TextBuffer.from_text("ab\ncd")
        buffer.move(CursorMove.HEAD)
        buffer.handle_key(Key("Backspace"))
        assert buffer.lines == ["abcd"]
        assert (buffer.row, buffer.col) == (0, 2)

    def test_delete_at_end_of_line_joins_next(self):
        buffer = TextBuffer.from_text("ab\ncd")
        buffer.move(CursorMove.TOP)
        buffer.move(CursorMove.END)
        buffer.handle_key(Key("Delete"))
        assert buffer.lines == ["abcd"]

    def test_backspace_at_start_is_noop(self):
        buffer = TextBuffer()
        assert not buffer.backspace()
        assert buffer.lines == [""]

    def test_ctrl_w_deletes_word(self):
        buffer = TextBuffer.from_text("hello big world")
        buffer.handle_key(Key("w", ctrl=True))
        assert buffer.text == "hello big "

    def test_ctrl_u_and_ctrl_k(self):
        buffer = TextBuffer.from_text("hello world")
        buffer.col = 5
        buffer.handle_key(Key("k", ctrl=True))
        assert buffer.text == "hello"
        buffer.handle_key(Key("u", ctrl=True))
        assert buffer.text == ""

    def test_unknown_ctrl_key_not_consumed(self):
        assert not TextBuffer().handle_key(Key("q", ctrl=True))

    def test_from_text_single_line_flattens(self):
        buffer = TextBuffer.from_text("a\nb", single_line=True)
        assert buffer.lines == ["a b"]
        assert buffer.col == 3


class TestCursor:
    def test_word_jumps(self):
        buffer = TextBuffer.from_text("one two  three")
        buffer.handle_key(Key("Left", ctrl=True))
        assert buffer.col == 9
        buffer.handle_key(Key("Left", ctrl=True))
        assert buffer.col == 4
        buffer.handle_key(Key("Right", ctrl=True))
        assert buffer.col == 7

    def test_vertical_moves_clamp_column(self):
        buffer = TextBuffer.from_text("long line\nab")
        buffer.move(CursorMove.UP)
        buffer.move(CursorMove.END)
        buffer.move(CursorMove.DOWN)
        assert (buffer.row, buffer.col) == (1, 2)

    def test_forward_wraps_to_next_line(self):
        buffer = TextBuffer.from_text("a\nb")
        buffer.move(CursorMove.TOP)
        buffer.move(CursorMove.FORWARD)
        buffer.move(CursorMove.FORWARD)
        assert (buffer.row, buffer.col) == (1, 0)


class TestSelection:
    def test_shift_arrows_select_and_typing_replaces(self):
        buffer = TextBuffer.from_text("hello")
        buffer.handle_key(Key("Left", shift=True))
        buffer.handle_key(Key("Left", shift=True))
        assert buffer.selection_range() == ((0, 3), (0, 5))
        buffer.handle_key(Key("p"))
        assert buffer.text == "help"

    def test_plain_arrow_clears_selection(self):
        buffer = TextBuffer.from_text("hello")
        buffer.handle_key(Key("Left", shift=True))
        buffer.handle_key(Key("Left"))
        assert buffer.selection_range() is None

    def test_select_all_and_delete(self):
        buffer = TextBuffer.from_text("a\nb\nc")
        buffer.handle_key(Key("l", ctrl=True))
        buffer.handle_key(Key("Backspace"))
        assert buffer.lines == [""]
        assert buffer.is_empty()


class TestDisplay:
    def test_mask(self):
        buffer = TextBuffer.from_text("secret", mask_char="*")
        assert buffer.display_lines() == ["******"]
        assert buffer.text == "secret"

    def test_visible_window_follows_cursor(self):
        buffer = TextBuffer.from_text("\n".join(str(n) for n in range(10)))
        first, lines = buffer.visible_window(3)
        assert first == 7
        assert lines == ["7", "8", "9"]
        buffer.move(CursorMove.TOP)
        first, lines = buffer.visible_window(3)
        assert first == 0

    def test_joined(self):
        assert TextBuffer.from_text(" a \nb ").joined() == "a  b"
