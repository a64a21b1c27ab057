"""Multi-line text buffer used by every form field.

The buffer is the only place outside the action dispatcher that interprets
cursor keys: arrows, Home/End, Backspace/Delete and word jumps with Ctrl.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kanban_tui.core.keybindings import Key


class CursorMove(StrEnum):
    FORWARD = "forward"
    BACK = "back"
    UP = "up"
    DOWN = "down"
    HEAD = "head"
    END = "end"
    WORD_FORWARD = "word_forward"
    WORD_BACK = "word_back"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(slots=True)
class TextBuffer:
    lines: list[str] = field(default_factory=lambda: [""])
    row: int = 0
    col: int = 0
    single_line: bool = False
    mask_char: str | None = None
    placeholder: str = ""
    selection_anchor: tuple[int, int] | None = None
    scroll_top: int = 0

    @classmethod
    def from_text(cls, text: str, single_line: bool = False, **kwargs: object) -> TextBuffer:
        if single_line:
            lines = [text.replace("\n", " ")]
        else:
            lines = text.split("\n") or [""]
        buffer = cls(lines=lines, single_line=single_line, **kwargs)  # type: ignore[arg-type]
        buffer.row = len(buffer.lines) - 1
        buffer.col = len(buffer.lines[-1])
        return buffer

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def joined(self) -> str:
        """All lines joined with a single space (used for single-value fields)."""
        return " ".join(line for line in self.lines).strip()

    def is_empty(self) -> bool:
        return not any(line.strip() for line in self.lines)

    def display_lines(self) -> list[str]:
        if self.mask_char is None:
            return list(self.lines)
        return [self.mask_char * len(line) for line in self.lines]

    def reset(self) -> None:
        self.lines = [""]
        self.row = self.col = 0
        self.selection_anchor = None
        self.scroll_top = 0

    def set_text(self, text: str) -> None:
        self.reset()
        self.insert_str(text)

    def insert_char(self, char: str) -> None:
        if char == "\n":
            self.insert_newline()
            return
        self.delete_selection()
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col] + char + line[self.col :]
        self.col += len(char)

    def insert_str(self, text: str) -> None:
        for index, chunk in enumerate(text.split("\n")):
            if index:
                self.insert_newline()
            if chunk:
                self.delete_selection()
                line = self.lines[self.row]
                self.lines[self.row] = line[: self.col] + chunk + line[self.col :]
                self.col += len(chunk)

    def insert_newline(self) -> None:
        if self.single_line:
            return
        self.delete_selection()
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col]
        self.lines.insert(self.row + 1, line[self.col :])
        self.row += 1
        self.col = 0

    def backspace(self) -> bool:
        if self.delete_selection():
            return True
        if self.col > 0:
            line = self.lines[self.row]
            self.lines[self.row] = line[: self.col - 1] + line[self.col :]
            self.col -= 1
            return True
        if self.row > 0:
            previous = self.lines[self.row - 1]
            self.lines[self.row - 1] = previous + self.lines.pop(self.row)
            self.row -= 1
            self.col = len(previous)
            return True
        return False

    def delete(self) -> bool:
        if self.delete_selection():
            return True
        line = self.lines[self.row]
        if self.col < len(line):
            self.lines[self.row] = line[: self.col] + line[self.col + 1 :]
            return True
        if self.row < len(self.lines) - 1:
            self.lines[self.row] = line + self.lines.pop(self.row + 1)
            return True
        return False

    def delete_word_back(self) -> bool:
        if self.col == 0:
            return self.backspace()
        start = self.col
        self.move(CursorMove.WORD_BACK)
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col] + line[start:]
        return True

    def select_all(self) -> None:
        self.selection_anchor = (0, 0)
        self.row = len(self.lines) - 1
        self.col = len(self.lines[-1])

    def selection_range(self) -> tuple[tuple[int, int], tuple[int, int]] | None:
        if self.selection_anchor is None or self.selection_anchor == (self.row, self.col):
            return None
        ordered = sorted((self.selection_anchor, (self.row, self.col)))
        return ordered[0], ordered[1]

    def delete_selection(self) -> bool:
        span = self.selection_range()
        self.selection_anchor = None
        if span is None:
            return False
        (start_row, start_col), (end_row, end_col) = span
        head = self.lines[start_row][:start_col]
        tail = self.lines[end_row][end_col:]
        self.lines[start_row : end_row + 1] = [head + tail]
        self.row, self.col = start_row, start_col
        return True

    def move(self, movement: CursorMove) -> None:
        line = self.lines[self.row]
        match movement:
            case CursorMove.FORWARD:
                if self.col < len(line):
                    self.col += 1
                elif self.row < len(self.lines) - 1:
                    self.row, self.col = self.row + 1, 0
            case CursorMove.BACK:
                if self.col > 0:
                    self.col -= 1
                elif self.row > 0:
                    self.row -= 1
                    self.col = len(self.lines[self.row])
            case CursorMove.UP:
                if self.row > 0:
                    self.row -= 1
                    self.col = min(self.col, len(self.lines[self.row]))
            case CursorMove.DOWN:
                if self.row < len(self.lines) - 1:
                    self.row += 1
                    self.col = min(self.col, len(self.lines[self.row]))
            case CursorMove.HEAD:
                self.col = 0
            case CursorMove.END:
                self.col = len(line)
            case CursorMove.WORD_FORWARD:
                col = self.col
                while col < len(line) and line[col].isspace():
                    col += 1
                while col < len(line) and not line[col].isspace():
                    col += 1
                self.col = col
            case CursorMove.WORD_BACK:
                col = self.col
                while col > 0 and line[col - 1].isspace():
                    col -= 1
                while col > 0 and not line[col - 1].isspace():
                    col -= 1
                self.col = col
            case CursorMove.TOP:
                self.row, self.col = 0, 0
            case CursorMove.BOTTOM:
                self.row = len(self.lines) - 1
                self.col = len(self.lines[self.row])

    def scroll(self, rows: int, height: int | None = None) -> None:
        limit = max(0, len(self.lines) - (height or 1))
        self.scroll_top = max(0, min(self.scroll_top + rows, limit))

    def visible_window(self, height: int) -> tuple[int, list[str]]:
        """Keep the cursor row in view and return (first row, visible lines)."""
        if self.row < self.scroll_top:
            self.scroll_top = self.row
        elif self.row >= self.scroll_top + height:
            self.scroll_top = self.row - height + 1
        lines = self.display_lines()
        return self.scroll_top, lines[self.scroll_top : self.scroll_top + height]

    def handle_key(self, key: Key) -> bool:
        """Apply an editing key; returns False when the key is not an editing key."""
        character = key.printable
        if character is not None:
            self.insert_char(character)
            return True
        if key.ctrl and not key.is_named:
            return self._handle_ctrl(key.code)
        movement = (_CTRL_MOVES if key.ctrl else _NAMED_MOVES).get(key.code)
        if movement is not None:
            if key.shift and self.selection_anchor is None:
                self.selection_anchor = (self.row, self.col)
            elif not key.shift:
                self.selection_anchor = None
            self.move(movement)
            return True
        match key.code:
            case "Enter":
                if self.single_line:
                    return False
                self.insert_newline()
            case "Backspace":
                self.backspace()
            case "Delete":
                self.delete()
            case _:
                return False
        return True

    def _handle_ctrl(self, code: str) -> bool:
        match code:
            case "a":
                self.move(CursorMove.HEAD)
            case "e":
                self.move(CursorMove.END)
            case "w" | "h":
                self.delete_word_back()
            case "u":
                line = self.lines[self.row]
                self.lines[self.row] = line[self.col :]
                self.col = 0
            case "k":
                line = self.lines[self.row]
                self.lines[self.row] = line[: self.col]
            case "l":
                self.select_all()
            case _:
                return False
        return True


_NAMED_MOVES: dict[str, CursorMove] = {
    "Left": CursorMove.BACK,
    "Right": CursorMove.FORWARD,
    "Up": CursorMove.UP,
    "Down": CursorMove.DOWN,
    "Home": CursorMove.HEAD,
    "End": CursorMove.END,
}

_CTRL_MOVES: dict[str, CursorMove] = {
    "Left": CursorMove.WORD_BACK,
    "Right": CursorMove.WORD_FORWARD,
    "Home": CursorMove.TOP,
    "End": CursorMove.BOTTOM,
}
