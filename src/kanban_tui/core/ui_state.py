"""Layered UI state machine: view, popup stack, focus and input status.

Focus is always drawn from the available-focus set of the rendered mode: the top
popup when the stack is non-empty, otherwise the current view. Every transition
ends with `snap_focus()`, which restores that invariant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from kanban_tui.core.enums import Focus, InputStatus, PopUp, View
from kanban_tui.core.text_buffer import TextBuffer

if TYPE_CHECKING:
    from kanban_tui.core.models import Card, ItemId


class BackResult(StrEnum):
    POPPED = "popped"
    VIEW_RESTORED = "view_restored"
    AT_ROOT = "at_root"


# (status, event) -> status; unknown pairs leave the status unchanged
_INPUT_TRANSITIONS: dict[tuple[InputStatus, str], InputStatus] = {
    (InputStatus.INIT, "initialized"): InputStatus.INITIALIZED,
    (InputStatus.INITIALIZED, "take_input"): InputStatus.USER_INPUT,
    (InputStatus.INITIALIZED, "capture_keys"): InputStatus.KEY_BIND_MODE,
    (InputStatus.USER_INPUT, "stop_input"): InputStatus.INITIALIZED,
    (InputStatus.USER_INPUT, "focus_left_text"): InputStatus.INITIALIZED,
    (InputStatus.USER_INPUT, "capture_keys"): InputStatus.KEY_BIND_MODE,
    (InputStatus.KEY_BIND_MODE, "stop_capture"): InputStatus.INITIALIZED,
    (InputStatus.KEY_BIND_MODE, "take_input"): InputStatus.USER_INPUT,
}


@dataclass(slots=True)
class TextBuffers:
    """Every form field's buffer, owned by the UI state."""

    board_name: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    board_description: TextBuffer = field(default_factory=TextBuffer)
    card_name: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    card_description: TextBuffer = field(default_factory=TextBuffer)
    card_tags: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    card_comments: TextBuffer = field(default_factory=TextBuffer)
    command_palette: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    general_config: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    email_id: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    password: TextBuffer = field(
        default_factory=lambda: TextBuffer(single_line=True, mask_char="•")
    )
    confirm_password: TextBuffer = field(
        default_factory=lambda: TextBuffer(single_line=True, mask_char="•")
    )
    reset_password_link: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    hex_color: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))
    theme_name: TextBuffer = field(default_factory=lambda: TextBuffer(single_line=True))

    def reset_new_board(self) -> None:
        self.board_name.reset()
        self.board_description.reset()

    def reset_new_card(self) -> None:
        self.card_name.reset()
        self.card_description.reset()

    def reset_card_editor(self) -> None:
        for buffer in (self.card_name, self.card_description, self.card_tags, self.card_comments):
            buffer.reset()

    def reset_auth_forms(self) -> None:
        buffers = (self.email_id, self.password, self.confirm_password, self.reset_password_link)
        for buffer in buffers:
            buffer.reset()

    def set_password_visible(self, visible: bool) -> None:
        mask = None if visible else "•"
        self.password.mask_char = mask
        self.confirm_password.mask_char = mask


@dataclass(slots=True)
class ListSelections:
    """Cursor positions of the list-like widgets."""

    main_menu: int = 0
    config: int = 0
    edit_keybindings: int = 0
    load_save: int = 0
    card_status: int = 0
    card_priority: int = 0
    view_selector: int = 0
    date_format: int = 0
    theme: int = 0
    filter_tag: int = 0
    theme_editor: int = 0
    style_fg: int = 0
    style_bg: int = 0
    style_modifier: int = 0
    help: int = 0
    log_offset: int = 0

    @staticmethod
    def step(index: int, length: int, delta: int) -> int:
        """Move a cursor with wraparound inside a list of `length` items."""
        if length <= 0:
            return 0
        return (index + delta) % length


@dataclass(slots=True)
class MouseState:
    position: tuple[int, int] | None = None
    dragged_card: ItemId | None = None
    drag_source_board: ItemId | None = None

    def reset_drag(self) -> None:
        self.dragged_card = None
        self.drag_source_board = None


@dataclass(slots=True)
class UIState:
    view: View = View.MAIN_MENU
    prev_view: View | None = None
    popup_stack: list[PopUp] = field(default_factory=list)
    focus: Focus = Focus.NO_FOCUS
    input_status: InputStatus = InputStatus.INIT
    current_board_id: ItemId | None = None
    current_card_id: ItemId | None = None
    card_being_edited: tuple[ItemId, Card] | None = None
    filter_tags: list[str] = field(default_factory=list)
    is_loading: bool = False
    show_password: bool = False
    buffers: TextBuffers = field(default_factory=TextBuffers)
    lists: ListSelections = field(default_factory=ListSelections)
    mouse: MouseState = field(default_factory=MouseState)
    # (focus, input status) saved on each popup push and restored on pop
    _saved: list[tuple[Focus, InputStatus]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.snap_focus()

    @property
    def top_popup(self) -> PopUp | None:
        return self.popup_stack[-1] if self.popup_stack else None

    def available_focus(self) -> tuple[Focus, ...]:
        top = self.top_popup
        if top is not None:
            return top.available_focus
        return self.view.available_focus

    def focus_is_valid(self) -> bool:
        top = self.top_popup
        if top is not None and not top.available_focus:
            return True
        return self.focus in self.available_focus()

    def transition(self, event: str) -> InputStatus:
        self.input_status = _INPUT_TRANSITIONS.get((self.input_status, event), self.input_status)
        return self.input_status

    def snap_focus(self) -> None:
        """Restore the focus invariant after any transition."""
        targets = self.available_focus()
        top = self.top_popup
        if top is not None and not targets:
            return
        if self.focus not in targets:
            if not targets:
                self.focus = Focus.NO_FOCUS
            elif targets[0] is Focus.TITLE and len(targets) > 1:
                self.focus = targets[1]
            else:
                self.focus = targets[0]
        self._check_input_status()

    def _check_input_status(self) -> None:
        if self.input_status is InputStatus.USER_INPUT and not self.focus.is_text_input:
            self.transition("focus_left_text")

    def set_focus(self, focus: Focus) -> None:
        if focus not in self.available_focus():
            return
        self.focus = focus
        self._check_input_status()

    def next_focus(self) -> Focus:
        targets = self.available_focus()
        if targets:
            self.focus = self.focus.next_in(targets)
            self._check_input_status()
        return self.focus

    def prev_focus(self) -> Focus:
        targets = self.available_focus()
        if targets:
            self.focus = self.focus.prev_in(targets)
            self._check_input_status()
        return self.focus

    def set_view(self, view: View) -> None:
        if view is not self.view:
            self.prev_view = self.view
            self.view = view
        self.snap_focus()

    def push_popup(self, popup: PopUp) -> bool:
        """Push `popup` unless it is already on the stack."""
        if popup in self.popup_stack:
            return False
        self._saved.append((self.focus, self.input_status))
        self.popup_stack.append(popup)
        if self.input_status is InputStatus.USER_INPUT:
            self.transition("stop_input")
        targets = popup.available_focus
        if targets:
            self.focus = targets[0]
        self.snap_focus()
        return True

    def pop_popup(self) -> PopUp | None:
        if not self.popup_stack:
            return None
        popup = self.popup_stack.pop()
        focus, status = self._saved.pop() if self._saved else (self.focus, self.input_status)
        self.focus = focus
        self.input_status = (
            InputStatus.INITIALIZED if status is InputStatus.KEY_BIND_MODE else status
        )
        self.snap_focus()
        return popup

    def clear_popups(self) -> None:
        while self.popup_stack:
            self.pop_popup()

    def take_user_input(self) -> bool:
        if not self.focus.is_text_input:
            return False
        self.transition("take_input")
        return self.input_status is InputStatus.USER_INPUT

    def stop_user_input(self) -> None:
        self.transition("stop_input")

    def go_back(self) -> BackResult:
        if self.popup_stack:
            self.pop_popup()
            return BackResult.POPPED
        if self.view is View.MAIN_MENU:
            return BackResult.AT_ROOT
        target = self.prev_view
        if target is None or target is self.view:
            target = View.MAIN_MENU
        self.set_view(target)
        return BackResult.VIEW_RESTORED

    def select(self, board_id: ItemId | None, card_id: ItemId | None) -> None:
        self.current_board_id = board_id
        self.current_card_id = card_id if board_id is not None else None
