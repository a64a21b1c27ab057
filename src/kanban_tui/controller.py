"""Application state and the action dispatcher.

The controller owns every piece of mutable state. Handlers run synchronously on the
event loop thread; IO is requested by appending to `requests`, which the loop hands
to the worker, and results come back through `apply_io_completion`.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import TYPE_CHECKING

from pydantic import ValidationError

from kanban_tui import commands
from kanban_tui.config import AppConfig, ConfigField, ConfigFieldKind
from kanban_tui.core.dates import DateTimeFormat
from kanban_tui.core.enums import (
    PALETTE_FOCUSES,
    TIME_PICKER_FOCUSES,
    CalendarFormat,
    CardPriority,
    CardStatus,
    Focus,
    InputStatus,
    MainMenuItem,
    NavigationDirection,
    PopUp,
    View,
)
from kanban_tui.core.geometry import Rect
from kanban_tui.core.history import WorkspaceEditor
from kanban_tui.core.keybindings import Action, CaptureOutcome, Key, KeyBindCapture, resolve_key
from kanban_tui.core.models import Card, Workspace
from kanban_tui.core.mouse import MouseAction, MouseEvent
from kanban_tui.core.projection import (
    Viewport,
    filter_projection,
    navigate,
    snap_selection,
    tag_histogram,
)
from kanban_tui.core.ui_state import BackResult, ListSelections, UIState
from kanban_tui.debug_log import clear_log_buffer
from kanban_tui.errors import (
    ErrorKind,
    ForbiddenError,
    InputValidationError,
    IOFailureError,
    KanbanError,
    KeybindingConflictError,
    NotFoundError,
    RateLimitedError,
    toast_kind_for,
)
from kanban_tui.io_worker import (
    AutoSave,
    DeleteCloudSave,
    DeleteLocalSave,
    GetCloudData,
    Initialize,
    InitResult,
    IoCompletion,
    IoRequest,
    ListLocalSaves,
    LoadCloudPreview,
    LoadLocalPreview,
    LoadSaveCloud,
    LoadSaveLocal,
    Login,
    Logout,
    ResetPassword,
    SaveConfig,
    SaveLocalData,
    SaveThemeFile,
    SendResetPasswordEmail,
    SignUp,
    SyncLocalData,
)
from kanban_tui.limits import MIN_TERM_HEIGHT, MIN_TERM_WIDTH, RESET_PASSWORD_LINK_COOLDOWN
from kanban_tui.render.layout import (
    BoardLayout,
    board_view_layout,
    date_field_anchor,
    is_too_small,
)
from kanban_tui.storage.cloud import validate_credentials
from kanban_tui.themes import (
    COLOR_OPTIONS,
    MODIFIER_OPTIONS,
    ThemeRole,
    ThemeStyle,
    all_themes,
    find_theme,
    is_hex_color,
)
from kanban_tui.widgets.date_picker import DateTimePicker
from kanban_tui.widgets.palette import CommandPalette, PaletteCommand
from kanban_tui.widgets.toasts import ToastManager

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from kanban_tui.core.keybindings import KeyBindings
    from kanban_tui.core.models import ItemId
    from kanban_tui.core.projection import BoardSlice, VisibleMap
    from kanban_tui.core.text_buffer import TextBuffer
    from kanban_tui.errors import ConfigMalformedError
    from kanban_tui.storage.cloud import CloudSave, Session
    from kanban_tui.storage.saves import SaveName
    from kanban_tui.themes import Theme

logger = logging.getLogger(__name__)

# Actions that still resolve while a text field owns the keyboard
_INPUT_PASSTHROUGH: frozenset[Action] = frozenset(
    {
        Action.STOP_USER_INPUT,
        Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL,
        Action.NEXT_FOCUS,
        Action.PRV_FOCUS,
        Action.TOGGLE_COMMAND_PALETTE,
    }
)

_FOCUS_BUFFERS: dict[Focus, str] = {
    Focus.NEW_BOARD_NAME: "board_name",
    Focus.NEW_BOARD_DESCRIPTION: "board_description",
    Focus.NEW_CARD_NAME: "card_name",
    Focus.NEW_CARD_DESCRIPTION: "card_description",
    Focus.CARD_NAME: "card_name",
    Focus.CARD_DESCRIPTION: "card_description",
    Focus.CARD_TAGS: "card_tags",
    Focus.CARD_COMMENTS: "card_comments",
    Focus.COMMAND_PALETTE_COMMAND: "command_palette",
    Focus.COMMAND_PALETTE_CARD: "command_palette",
    Focus.COMMAND_PALETTE_BOARD: "command_palette",
    Focus.EDIT_GENERAL_CONFIG: "general_config",
    Focus.EMAIL_ID_FIELD: "email_id",
    Focus.PASSWORD_FIELD: "password",
    Focus.CONFIRM_PASSWORD_FIELD: "confirm_password",
    Focus.RESET_PASSWORD_LINK_FIELD: "reset_password_link",
    Focus.TEXT_INPUT: "hex_color",
    Focus.THEME_NAME: "theme_name",
}

_HIDEABLE_PARTS: dict[Focus, str] = {
    Focus.TITLE: "title",
    Focus.HELP: "help",
    Focus.LOG: "log",
}

_STATUS_ACTIONS: dict[Action, CardStatus] = {
    Action.CHANGE_CARD_STATUS_TO_COMPLETED: CardStatus.COMPLETE,
    Action.CHANGE_CARD_STATUS_TO_ACTIVE: CardStatus.ACTIVE,
    Action.CHANGE_CARD_STATUS_TO_STALE: CardStatus.STALE,
}

_PRIORITY_ACTIONS: dict[Action, CardPriority] = {
    Action.CHANGE_CARD_PRIORITY_TO_HIGH: CardPriority.HIGH,
    Action.CHANGE_CARD_PRIORITY_TO_MEDIUM: CardPriority.MEDIUM,
    Action.CHANGE_CARD_PRIORITY_TO_LOW: CardPriority.LOW,
}

_DIRECTIONS: dict[Action, NavigationDirection] = {
    Action.UP: NavigationDirection.UP,
    Action.DOWN: NavigationDirection.DOWN,
    Action.LEFT: NavigationDirection.LEFT,
    Action.RIGHT: NavigationDirection.RIGHT,
}

_MOVE_DIRECTIONS: dict[Action, NavigationDirection] = {
    Action.MOVE_CARD_UP: NavigationDirection.UP,
    Action.MOVE_CARD_DOWN: NavigationDirection.DOWN,
    Action.MOVE_CARD_LEFT: NavigationDirection.LEFT,
    Action.MOVE_CARD_RIGHT: NavigationDirection.RIGHT,
}


class Controller:
    """Owns the workspace, UI state and widgets; turns input into transitions."""

    def __init__(
        self,
        config: AppConfig,
        *,
        workspace: Workspace | None = None,
        themes: list[Theme] | None = None,
        config_path: Path | None = None,
        themes_dir: Path | None = None,
        session_path: Path | None = None,
        config_error: ConfigMalformedError | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.config_path = config_path
        self.themes_dir = themes_dir
        self.session_path = session_path
        self.config_error = config_error
        self.clock = clock

        self.editor = WorkspaceEditor(workspace if workspace is not None else Workspace())
        self.ui = UIState(view=config.default_ui_mode)
        self.viewport = Viewport()
        self.palette = CommandPalette.for_mode(config.debug_mode)
        self._palette_revision = self.editor.revision
        self.picker = DateTimePicker(calendar_format=config.date_picker_calendar_format)
        self.toasts = ToastManager(animations=not config.disable_animations, clock=clock)
        self.themes: list[Theme] = themes if themes is not None else all_themes(themes_dir)
        self.theme: Theme = find_theme(self.themes, config.default_theme)
        self.toasts.apply_theme(self.theme)

        self.session: Session | None = None
        self.local_saves: list[SaveName] = []
        self.cloud_saves: list[CloudSave] = []
        self.preview: Workspace | None = None
        self.last_save_name: str | None = None
        self.capture: KeyBindCapture | None = None
        self.editing_config_field: ConfigField | None = None
        self.theme_draft: Theme | None = None
        self.tag_options: list[tuple[str, int]] = []
        self.filter_choice: list[str] = []
        self.new_card_due: datetime | None = None
        self.picker_target: Focus | None = None
        self.reset_link_available_at: float = 0.0
        self.debug_panel = config.debug_mode
        self.width = MIN_TERM_WIDTH
        self.height = MIN_TERM_HEIGHT
        self.should_quit = False

        self.requests: list[IoRequest] = []
        self._in_flight = 0
        self._last_card_index = 0
        self.snap_selection()

    # State views

    @property
    def workspace(self) -> Workspace:
        return self.editor.workspace

    @property
    def bindings(self) -> KeyBindings:
        return self.config.bindings

    @property
    def too_small(self) -> bool:
        return is_too_small(self.width, self.height)

    def screen(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def slices(self) -> list[BoardSlice]:
        return filter_projection(self.workspace, self.ui.filter_tags)

    def visible(self) -> VisibleMap:
        return self.viewport.project(
            self.slices(), self.config.no_of_boards_to_show, self.config.no_of_cards_to_show
        )

    def board_layout(self) -> BoardLayout:
        return board_view_layout(
            self.ui.view, self.screen(), self.visible(), self.config.no_of_cards_to_show
        )

    def current_card(self) -> Card | None:
        if self.ui.current_board_id is None or self.ui.current_card_id is None:
            return None
        board = self.workspace.get_board(self.ui.current_board_id)
        return board.get_card(self.ui.current_card_id) if board is not None else None

    def main_menu_items(self) -> tuple[MainMenuItem, ...]:
        return MainMenuItem.available(logged_in=self.session is not None)

    def buffer_for(self, focus: Focus) -> TextBuffer | None:
        name = _FOCUS_BUFFERS.get(focus)
        return getattr(self.ui.buffers, name) if name is not None else None

    def board_view(self) -> View:
        """The board layout to return to from menus and forms."""
        if self.ui.view.is_board_view:
            return self.ui.view
        if self.ui.prev_view is not None and self.ui.prev_view.is_board_view:
            return self.ui.prev_view
        return self.config.default_ui_mode

    # Error funnel

    def _guard[**P](self, handler: Callable[P, object], *args: P.args, **kwargs: P.kwargs) -> None:
        try:
            handler(*args, **kwargs)
        except KanbanError as exc:
            self.report(exc)

    def report(self, error: KanbanError) -> None:
        """Turn a handler error into a toast (or a silent selection snap)."""
        if error.kind is ErrorKind.NOT_FOUND:
            logger.debug("Selection target missing: %s", error.message)
            self.snap_selection()
            return
        if isinstance(error, RateLimitedError):
            self.reset_link_available_at = self.clock() + error.retry_after
        kind = toast_kind_for(error.kind)
        if kind is None:
            return
        match error.kind:
            case ErrorKind.IO_FAILURE | ErrorKind.CONFIG_MALFORMED | ErrorKind.KEYBINDING_CONFLICT:
                logger.error(error.message)
            case ErrorKind.NOTICE:
                logger.info(error.message)
            case _:
                logger.warning(error.message)
        self.toasts.push(kind.title, error.message, kind)

    # Selection

    def select(self, board_id: ItemId | None, card_id: ItemId | None) -> None:
        self.ui.select(board_id, card_id)
        slices = self.slices()
        for board_slice in slices:
            if board_slice.board_id == board_id and card_id in board_slice.card_ids:
                self._last_card_index = board_slice.card_ids.index(card_id)
        self.viewport.scroll_to(
            slices,
            board_id,
            card_id,
            self.config.no_of_boards_to_show,
            self.config.no_of_cards_to_show,
        )

    def snap_selection(self) -> None:
        board_id, card_id = snap_selection(
            self.slices(), self.ui.current_board_id, self.ui.current_card_id, self._last_card_index
        )
        self.select(board_id, card_id)

    def _require_card(self) -> tuple[ItemId, Card]:
        card = self.current_card()
        if card is None or self.ui.current_board_id is None:
            raise ForbiddenError("No card selected")
        return self.ui.current_board_id, card

    # IO requests

    def request(self, request: IoRequest) -> None:
        self.requests.append(request)
        self._in_flight += 1
        self.ui.is_loading = True
        if not request.refresh:
            self.toasts.loading(f"{request.label}...", title=request.label)

    def take_requests(self) -> list[IoRequest]:
        pending, self.requests = self.requests, []
        return pending

    def request_dropped(self, request: IoRequest) -> None:
        """The worker coalesced `request` away; no completion will arrive for it."""
        self._settle(request)

    def _settle(self, request: IoRequest) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        self.ui.is_loading = self._in_flight > 0
        if not request.refresh:
            self.toasts.dismiss_loading(request.label)

    def startup(self) -> None:
        if self.config_error is not None:
            self.report(self.config_error)
        self.request(
            Initialize(
                self.config.save_directory,
                self.config.always_load_last_save,
                self.config.auto_login,
                self.session_path,
            )
        )

    # Input entry points

    def handle_key(self, key: Key) -> None:
        self.ui.mouse.reset_drag()
        status = self.ui.input_status
        if status is InputStatus.INIT:
            if self.bindings.resolve(key) is Action.QUIT:
                self.request_quit()
            return
        if status is InputStatus.KEY_BIND_MODE:
            self._guard(self._capture_key, key)
            return
        if status is InputStatus.USER_INPUT:
            action = resolve_key(key, self.bindings, status, self._passthrough())
            typed = key.printable is not None and action is not Action.STOP_USER_INPUT
            if action is None or typed:
                self._type(key)
                return
        else:
            action = resolve_key(key, self.bindings, status)
            if action is None:
                self._guard(self._unbound_key, key)
                return
        self.handle_action(action)

    def handle_action(self, action: Action) -> None:
        logger.debug("Action %s (view=%s, popup=%s)", action, self.ui.view, self.ui.top_popup)
        self._guard(self._dispatch, action)

    def handle_mouse(self, event: MouseEvent) -> None:
        if not self.config.enable_mouse_support or self.too_small:
            return
        self.ui.mouse.position = (event.x, event.y)
        self._guard(self._mouse, event)

    def handle_mouse_leave(self) -> None:
        if self.ui.mouse.dragged_card is not None:
            logger.debug("Pointer left the terminal, drag cancelled")
        self.ui.mouse.reset_drag()
        self.ui.mouse.position = None

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        if self.picker.is_active:
            self.picker.set_viewport(self.screen())

    def handle_tick(self, at: float | None = None) -> None:
        current = self.clock() if at is None else at
        self.toasts.tick(current)
        if self.picker.is_active:
            self.picker.set_viewport(self.screen())
            closed = self.picker.tick(animations=not self.config.disable_animations, at=current)
            area = self.picker.area()
            if closed:
                self.picker.reset()
            elif area is not None:
                self.picker.set_render_area(area)
        self.refresh_palette()

    # Text input

    def _passthrough(self) -> frozenset[Action]:
        focus = self.ui.focus
        if focus in PALETTE_FOCUSES:
            return _INPUT_PASSTHROUGH | {Action.UP, Action.DOWN, Action.ACCEPT}
        if focus.is_single_line:
            return _INPUT_PASSTHROUGH | {Action.ACCEPT}
        return _INPUT_PASSTHROUGH

    def _type(self, key: Key) -> None:
        buffer = self.buffer_for(self.ui.focus)
        if buffer is None:
            self.ui.stop_user_input()
            return
        buffer.handle_key(key)
        if self.ui.focus in PALETTE_FOCUSES:
            self.refresh_palette()

    def refresh_palette(self) -> None:
        """Re-run the palette search when the query or the workspace changed."""
        if self.ui.top_popup is not PopUp.COMMAND_PALETTE:
            return
        if self._palette_revision != self.editor.revision:
            self._palette_revision = self.editor.revision
            self.palette.reset()
        self.palette.update(self.ui.buffers.command_palette.joined(), self.workspace)

    def _unbound_key(self, key: Key) -> None:
        if self.ui.top_popup is not PopUp.DATE_TIME_PICKER:
            return
        match key.code:
            case "PageUp":
                self.picker.move_years(-1) if key.shift else self.picker.move_months(-1)
            case "PageDown":
                self.picker.move_years(1) if key.shift else self.picker.move_months(1)

    def _capture_key(self, key: Key) -> None:
        capture = self.capture
        if capture is None:
            self.ui.transition("stop_capture")
            return
        try:
            outcome, bindings = capture.feed(key, self.bindings)
        except KeybindingConflictError:
            capture.keys.clear()
            raise
        match outcome:
            case CaptureOutcome.COMMITTED:
                self.update_config(keybindings=bindings.to_mapping())
                self._end_capture()
                self.toasts.info(
                    f"Keybinding for {capture.action.description} updated to "
                    f"{bindings.label_for(capture.action)}"
                )
            case CaptureOutcome.CANCELLED:
                self._end_capture()
            case CaptureOutcome.CAPTURED:
                logger.debug("Captured %s for %s", key, capture.action)

    def _end_capture(self) -> None:
        self.capture = None
        self.ui.transition("stop_capture")
        if self.ui.top_popup is PopUp.EDIT_SPECIFIC_KEY_BINDING:
            self.ui.pop_popup()

    def start_capture(self, action: Action) -> None:
        self.ui.push_popup(PopUp.EDIT_SPECIFIC_KEY_BINDING)
        self.capture = KeyBindCapture(action)
        self.ui.transition("capture_keys")

    # Action dispatch

    def _dispatch(self, action: Action) -> None:
        if action in _DIRECTIONS:
            self._navigate(_DIRECTIONS[action])
            return
        if action in _MOVE_DIRECTIONS:
            self.move_card(_MOVE_DIRECTIONS[action])
            return
        if action in _STATUS_ACTIONS:
            self._set_status_of_current(_STATUS_ACTIONS[action])
            return
        if action in _PRIORITY_ACTIONS:
            self._set_priority_of_current(_PRIORITY_ACTIONS[action])
            return
        match action:
            case Action.QUIT:
                self.request_quit()
            case Action.NEXT_FOCUS:
                self._cycle_focus(forward=True)
            case Action.PRV_FOCUS:
                self._cycle_focus(forward=False)
            case Action.OPEN_CONFIG_MENU:
                if self.ui.top_popup is None:
                    self.show_view(View.CONFIG_MENU)
            case Action.TAKE_USER_INPUT:
                if not self.ui.take_user_input():
                    logger.debug("Focus %s does not take text input", self.ui.focus)
            case Action.STOP_USER_INPUT:
                self.ui.stop_user_input()
            case Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL:
                self.go_back()
            case Action.ACCEPT:
                self._accept()
            case Action.HIDE_UI_ELEMENT:
                self._hide_ui_element()
            case Action.SAVE_STATE:
                self.save_state()
            case Action.NEW_BOARD:
                commands.activate(self, PaletteCommand.NEW_BOARD)
            case Action.NEW_CARD:
                commands.activate(self, PaletteCommand.NEW_CARD)
            case Action.DELETE:
                self._delete()
            case Action.DELETE_BOARD:
                self._delete_board()
            case Action.RESET_UI:
                self.reset_ui()
            case Action.GO_TO_MAIN_MENU:
                self.ui.clear_popups()
                self.show_view(View.MAIN_MENU)
            case Action.TOGGLE_COMMAND_PALETTE:
                self.toggle_palette()
            case Action.UNDO:
                entry = self.editor.undo()
                self.snap_selection()
                self.toasts.info(f"Undo: {entry.label}")
            case Action.REDO:
                entry = self.editor.redo()
                self.snap_selection()
                self.toasts.info(f"Redo: {entry.label}")
            case Action.CLEAR_ALL_TOASTS:
                self.toasts.clear()
                logger.info("Cleared toast messages")

    def _cycle_focus(self, forward: bool) -> None:
        step = self.ui.next_focus if forward else self.ui.prev_focus
        step()
        if self.ui.top_popup is PopUp.DATE_TIME_PICKER and not self.picker.time_picker_active:
            while self.ui.focus in TIME_PICKER_FOCUSES:
                step()

    # Views and popups

    def show_view(self, view: View) -> None:
        self.ui.set_view(view)
        match view:
            case View.LOAD_LOCAL_SAVE:
                self.ui.lists.load_save = 0
                self.preview = None
                self.request(ListLocalSaves(self.config.save_directory))
            case View.LOAD_CLOUD_SAVE:
                self.ui.lists.load_save = 0
                self.preview = None
                if self.session is not None:
                    self.request(GetCloudData(self.session))
            case View.LOGIN | View.SIGN_UP | View.RESET_PASSWORD:
                self.ui.buffers.reset_auth_forms()
            case View.CONFIG_MENU:
                self.ui.lists.config = 0

    def go_back(self) -> BackResult | None:
        top = self.ui.top_popup
        if self.ui.input_status is InputStatus.USER_INPUT and top is not PopUp.COMMAND_PALETTE:
            self.ui.stop_user_input()
            return None
        match top:
            case PopUp.VIEW_CARD:
                if self.card_edit_dirty():
                    self.ui.push_popup(PopUp.CONFIRM_DISCARD_CARD_CHANGES)
                    return None
                self.ui.card_being_edited = None
            case PopUp.COMMAND_PALETTE:
                self.palette.reset()
                self.ui.buffers.command_palette.reset()
            case PopUp.DATE_TIME_PICKER:
                self.picker.close(self.clock())
                self.picker_target = None
            case PopUp.CHANGE_THEME:
                self.apply_theme(find_theme(self.themes, self.config.default_theme))
            case PopUp.EDIT_SPECIFIC_KEY_BINDING:
                self.capture = None
        return self.ui.go_back()

    def toggle_palette(self) -> None:
        if self.ui.top_popup is PopUp.COMMAND_PALETTE:
            self.close_palette()
            return
        if not self.ui.push_popup(PopUp.COMMAND_PALETTE):
            return
        self.ui.buffers.command_palette.reset()
        self.palette.reset()
        self.palette.update("", self.workspace)
        self._palette_revision = self.editor.revision
        self.ui.take_user_input()

    def close_palette(self) -> None:
        if self.ui.top_popup is PopUp.COMMAND_PALETTE:
            self.ui.pop_popup()
        self.palette.reset()
        self.ui.buffers.command_palette.reset()

    def open_selector(self, popup: PopUp, index: int = 0) -> None:
        lists = self.ui.lists
        match popup:
            case PopUp.CARD_STATUS_SELECTOR:
                lists.card_status = index
            case PopUp.CARD_PRIORITY_SELECTOR:
                lists.card_priority = index
            case PopUp.CHANGE_UI_MODE | PopUp.SELECT_DEFAULT_VIEW:
                lists.view_selector = index
            case PopUp.CHANGE_DATE_FORMAT:
                lists.date_format = index
            case PopUp.CHANGE_THEME:
                lists.theme = index
        self.ui.push_popup(popup)

    def reset_ui(self) -> None:
        self.ui.clear_popups()
        self.ui.stop_user_input()
        self.ui.set_view(self.config.default_ui_mode)
        self.ui.filter_tags = []
        self.filter_choice = []
        self.viewport.reset()
        self.snap_selection()
        self.toasts.clear()
        self.toasts.info("UI reset, all toasts cleared")

    def _hide_ui_element(self) -> None:
        view = self.ui.view
        if not view.is_board_view or self.ui.top_popup is not None:
            return
        part = _HIDEABLE_PARTS.get(self.ui.focus)
        if part is None:
            part = next((name for name in ("log", "help", "title") if name in view.parts), None)
        if part is None:
            return
        smaller = view.without(part)
        if smaller is not None:
            self.ui.set_view(smaller)

    # Navigation

    def _step(self, name: str, length: int, delta: int) -> int:
        value = ListSelections.step(getattr(self.ui.lists, name), length, delta)
        setattr(self.ui.lists, name, value)
        return value

    def _navigate(self, direction: NavigationDirection) -> None:
        delta = -1 if direction in (NavigationDirection.UP, NavigationDirection.LEFT) else 1
        top = self.ui.top_popup
        focus = self.ui.focus
        match top:
            case PopUp.COMMAND_PALETTE:
                if direction in (NavigationDirection.UP, NavigationDirection.DOWN):
                    self.palette.move_selection(focus, delta)
            case PopUp.DATE_TIME_PICKER:
                self._navigate_picker(direction, delta)
            case PopUp.CARD_STATUS_SELECTOR:
                self._step("card_status", len(CardStatus), delta)
            case PopUp.CARD_PRIORITY_SELECTOR:
                self._step("card_priority", len(CardPriority), delta)
            case PopUp.CHANGE_UI_MODE | PopUp.SELECT_DEFAULT_VIEW:
                self._step("view_selector", len(View.board_views()), delta)
            case PopUp.CHANGE_DATE_FORMAT:
                self._step("date_format", len(DateTimeFormat), delta)
            case PopUp.CHANGE_THEME:
                index = self._step("theme", len(self.themes), delta)
                self.apply_theme(self.themes[index])
            case PopUp.FILTER_BY_TAG:
                if focus is Focus.FILTER_BY_TAG:
                    self._step("filter_tag", len(self.tag_options), delta)
            case PopUp.EDIT_THEME_STYLE:
                match focus:
                    case Focus.STYLE_EDITOR_FG:
                        self._step("style_fg", len(COLOR_OPTIONS), delta)
                    case Focus.STYLE_EDITOR_BG:
                        self._step("style_bg", len(COLOR_OPTIONS), delta)
                    case Focus.STYLE_EDITOR_MODIFIER:
                        self._step("style_modifier", len(MODIFIER_OPTIONS), delta)
            case None:
                self._navigate_view(direction, delta)

    def _navigate_picker(self, direction: NavigationDirection, delta: int) -> None:
        focus = self.ui.focus
        if focus is Focus.DTP_CALENDAR:
            match direction:
                case NavigationDirection.UP:
                    self.picker.calendar_up()
                case NavigationDirection.DOWN:
                    self.picker.calendar_down()
                case NavigationDirection.LEFT:
                    self.picker.calendar_left()
                case NavigationDirection.RIGHT:
                    self.picker.calendar_right()
        elif focus is not Focus.DTP_TOGGLE_TIME_PICKER:
            self.picker.step_focused(focus, delta)

    def _navigate_view(self, direction: NavigationDirection, delta: int) -> None:
        view = self.ui.view
        focus = self.ui.focus
        vertical = direction in (NavigationDirection.UP, NavigationDirection.DOWN)
        if focus is Focus.LOG and vertical:
            self.ui.lists.log_offset = max(0, self.ui.lists.log_offset - delta)
            return
        if focus in (Focus.HELP, Focus.MAIN_MENU_HELP) and vertical:
            self._step("help", len(Action), delta)
            return
        match view:
            case _ if view.is_board_view:
                if focus is Focus.BODY:
                    board_id, card_id = navigate(
                        self.slices(), self.ui.current_board_id, self.ui.current_card_id, direction
                    )
                    self.select(board_id, card_id)
            case View.MAIN_MENU if focus is Focus.MAIN_MENU and vertical:
                self._step("main_menu", len(self.main_menu_items()), delta)
            case View.CONFIG_MENU if focus is Focus.CONFIG_TABLE and vertical:
                self._step("config", len(ConfigField), delta)
            case View.EDIT_KEYBINDINGS if focus is Focus.EDIT_KEYBINDINGS_TABLE and vertical:
                self._step("edit_keybindings", len(Action), delta)
            case View.LOAD_LOCAL_SAVE | View.LOAD_CLOUD_SAVE if vertical:
                saves = self.local_saves if view is View.LOAD_LOCAL_SAVE else self.cloud_saves
                if saves:
                    self._step("load_save", len(saves), delta)
                    self._request_preview()
            case View.CREATE_THEME if focus is Focus.THEME_EDITOR and vertical:
                self._step("theme_editor", len(ThemeRole), delta)

    # Card operations

    def move_card(self, direction: NavigationDirection) -> None:
        if not self.ui.view.is_board_view or self.ui.top_popup is not None:
            return
        if self.ui.filter_tags:
            raise ForbiddenError("Cannot move cards while a filter is active")
        board_id, card = self._require_card()
        workspace = self.workspace
        board_index = workspace.board_index(board_id)
        if board_index is None:
            raise NotFoundError("Current board not found")
        board = workspace.boards[board_index]
        index = board.card_index(card.id)
        if index is None:
            raise NotFoundError("Could not find current card")
        target_board = board_id
        match direction:
            case NavigationDirection.UP:
                if index == 0:
                    raise InputValidationError(
                        "Cannot move card up, it is already at the top of the board"
                    )
                self.editor.move_card_within(board_id, card.id, index - 1)
            case NavigationDirection.DOWN:
                if index == len(board.cards) - 1:
                    raise InputValidationError(
                        "Cannot move card down, it is already at the bottom of the board"
                    )
                self.editor.move_card_within(board_id, card.id, index + 1)
            case NavigationDirection.LEFT:
                if board_index == 0:
                    raise InputValidationError("Cannot move card left as it is the first board")
                target_board = workspace.boards[board_index - 1].id
                self.editor.move_card_between(card.id, board_id, target_board)
            case NavigationDirection.RIGHT:
                if board_index == len(workspace.boards) - 1:
                    raise InputValidationError("Cannot move card right as it is the last board")
                target_board = workspace.boards[board_index + 1].id
                self.editor.move_card_between(card.id, board_id, target_board)
        self.select(target_board, card.id)

    def _set_status_of_current(self, status: CardStatus) -> None:
        if not self.ui.view.is_board_view:
            raise ForbiddenError("Cannot change card status in this view")
        board_id, card = self._require_card()
        self.editor.set_card_status(board_id, card.id, status)
        self.toasts.info(f'Changed status to "{status}" for card "{card.name}"')

    def _set_priority_of_current(self, priority: CardPriority) -> None:
        if not self.ui.view.is_board_view:
            raise ForbiddenError("Cannot change card priority in this view")
        board_id, card = self._require_card()
        self.editor.set_card_priority(board_id, card.id, priority)
        self.toasts.info(f'Changed priority to "{priority}" for card "{card.name}"')

    def _delete(self) -> None:
        view = self.ui.view
        top = self.ui.top_popup
        if top is PopUp.DATE_TIME_PICKER:
            self._confirm_picker(clear=True)
            return
        if top is not None:
            return
        if view is View.LOAD_LOCAL_SAVE:
            save = self._selected_local_save()
            self.request(DeleteLocalSave(self.config.save_directory / save.file_name))
        elif view is View.LOAD_CLOUD_SAVE:
            cloud_save = self._selected_cloud_save()
            self.request(DeleteCloudSave(self._require_session(), cloud_save.save_id))
        elif view.is_board_view and self.ui.focus is Focus.BODY:
            board_id, card = self._require_card()
            self.editor.remove_card(board_id, card.id)
            self.snap_selection()
            self.toasts.info(f"Deleted card {card.name}")
        elif view.is_board_view and self.ui.focus is Focus.LOG:
            clear_log_buffer()
            self.ui.lists.log_offset = 0

    def _delete_board(self) -> None:
        if not self.ui.view.is_board_view or self.ui.top_popup is not None:
            return
        board_id = self.ui.current_board_id
        if board_id is None:
            raise ForbiddenError("No board selected")
        board = self.editor.remove_board(board_id)
        self.snap_selection()
        self.toasts.info(f"Deleted board {board.name}")

    def open_current_card(self) -> None:
        board_id, card = self._require_card()
        buffers = self.ui.buffers
        buffers.reset_card_editor()
        buffers.card_name.set_text(card.name)
        buffers.card_description.set_text(card.description)
        buffers.card_tags.set_text(", ".join(card.tags))
        buffers.card_comments.set_text("\n".join(card.comments))
        self.ui.card_being_edited = (board_id, card.clone())
        self.ui.push_popup(PopUp.VIEW_CARD)
        logger.info("Editing Card '%s'", card.name)

    def edited_card(self) -> tuple[ItemId, Card]:
        """The card being edited with the form buffers applied."""
        if self.ui.card_being_edited is None:
            raise NotFoundError("No card being edited found")
        board_id, draft = self.ui.card_being_edited
        buffers = self.ui.buffers
        try:
            edited = dataclasses.replace(
                draft,
                name=buffers.card_name.joined(),
                description=buffers.card_description.text.strip(),
                tags=buffers.card_tags.text.split(","),
                comments=[line.strip() for line in buffers.card_comments.lines if line.strip()],
            )
        except ValueError as exc:
            raise InputValidationError(str(exc)) from exc
        return board_id, edited

    def card_edit_dirty(self) -> bool:
        if self.ui.card_being_edited is None:
            return False
        try:
            board_id, edited = self.edited_card()
        except InputValidationError:
            return True
        board = self.workspace.get_board(board_id)
        current = board.get_card(edited.id) if board is not None else None
        return current is None or current.structure() != edited.structure()

    def _submit_card_edit(self) -> None:
        board_id, edited = self.edited_card()
        self.editor.replace_card(board_id, edited)
        self.ui.card_being_edited = None
        while self.ui.top_popup is not None:
            popup = self.ui.pop_popup()
            if popup is PopUp.VIEW_CARD:
                break
        self.select(board_id, edited.id)
        self.toasts.info(f"Changes to Card '{edited.name}' saved")

    def _discard_card_edit(self) -> None:
        self.ui.card_being_edited = None
        self.ui.pop_popup()
        if self.ui.top_popup is PopUp.VIEW_CARD:
            self.ui.pop_popup()

    # Forms

    def start_new_board(self) -> None:
        self.ui.buffers.reset_new_board()
        self.ui.set_view(View.NEW_BOARD)

    def start_new_card(self) -> None:
        self.ui.buffers.reset_new_card()
        self.new_card_due = None
        self.ui.set_view(View.NEW_CARD)

    def _submit_new_board(self) -> None:
        if self.ui.filter_tags:
            raise ForbiddenError("Cannot create a new board while a filter is active")
        buffers = self.ui.buffers
        name = buffers.board_name.joined()
        if not name or self.workspace.has_board_named(name):
            raise InputValidationError("New board name is empty or already exists")
        board = self.editor.add_board(name, buffers.board_description.text)
        buffers.reset_new_board()
        self.ui.set_view(self.board_view())
        self.select(board.id, None)
        self.toasts.info(f"Created board {board.name}")

    def _submit_new_card(self) -> None:
        board_id = self.ui.current_board_id
        board = self.workspace.get_board(board_id) if board_id is not None else None
        if board is None:
            raise ForbiddenError("No board available to add card to")
        buffers = self.ui.buffers
        name = buffers.card_name.joined()
        if not name or board.has_card_named(name):
            raise InputValidationError("New card name is empty or already exists")
        card = self.editor.add_card(
            board.id,
            Card(
                name=name,
                description=buffers.card_description.text.strip(),
                due_date=self.new_card_due,
            ),
        )
        buffers.reset_new_card()
        self.new_card_due = None
        self.ui.set_view(self.board_view())
        self.select(board.id, card.id)
        self.toasts.info(f"Created card {card.name}")

    # Date picker

    def open_picker(self, target: Focus) -> None:
        if target is Focus.NEW_CARD_DUE_DATE:
            initial = self.new_card_due
        else:
            if self.ui.card_being_edited is None:
                raise NotFoundError("No card being edited found")
            initial = self.ui.card_being_edited[1].due_date
        self.picker_target = target
        self.picker.calendar_format = self.config.date_picker_calendar_format
        self.picker.set_viewport(self.screen())
        anchor = date_field_anchor(self.ui.view, self.ui.popup_stack, self.screen())
        self.picker.open(initial, anchor, self.clock())
        self.ui.push_popup(PopUp.DATE_TIME_PICKER)

    def _confirm_picker(self, clear: bool = False) -> None:
        value = None if clear else self.picker.value
        match self.picker_target:
            case Focus.NEW_CARD_DUE_DATE:
                self.new_card_due = value
            case Focus.CARD_DUE_DATE if self.ui.card_being_edited is not None:
                self.ui.card_being_edited[1].due_date = value
        shown = self.config.date_format.format(value)
        self.picker.close(self.clock())
        self.picker_target = None
        if self.ui.top_popup is PopUp.DATE_TIME_PICKER:
            self.ui.pop_popup()
        logger.info("Changed due date to %s", shown)

    # Accept

    def _accept(self) -> None:
        top = self.ui.top_popup
        focus = self.ui.focus
        if self.ui.input_status is InputStatus.USER_INPUT:
            self._accept_in_input(top)
            return
        if top is not None:
            self._accept_popup(top, focus)
            return
        if focus.is_text_input:
            self.ui.take_user_input()
            return
        self._accept_view(self.ui.view, focus)

    def _accept_in_input(self, top: PopUp | None) -> None:
        match top:
            case PopUp.COMMAND_PALETTE:
                self._activate_palette_selection()
            case PopUp.EDIT_GENERAL_CONFIG:
                self._submit_general_config()
            case PopUp.CUSTOM_HEX_COLOR_PROMPT_FG | PopUp.CUSTOM_HEX_COLOR_PROMPT_BG:
                self._submit_hex_color(top)
            case _:
                self.ui.stop_user_input()
                self.ui.next_focus()

    def _activate_palette_selection(self) -> None:
        match self.ui.focus:
            case Focus.COMMAND_PALETTE_COMMAND:
                command = self.palette.selected_command()
                if command is None:
                    return
                self.close_palette()
                commands.activate(self, command)
            case Focus.COMMAND_PALETTE_CARD:
                hit = self.palette.selected_card()
                if hit is None:
                    return
                self.close_palette()
                self.jump_to_card(hit.item_id)
            case Focus.COMMAND_PALETTE_BOARD:
                hit = self.palette.selected_board()
                if hit is None:
                    return
                self.close_palette()
                self.jump_to_board(hit.item_id)

    def _ensure_board_view(self) -> None:
        if not self.ui.view.is_board_view:
            self.ui.set_view(self.board_view())
        self.ui.set_focus(Focus.BODY)

    def jump_to_card(self, card_id: ItemId) -> None:
        found = self.workspace.find_card(card_id)
        if found is None:
            raise NotFoundError("Could not find card to view.")
        board, card = found
        if self.ui.filter_tags and all(card.id not in s.card_ids for s in self.slices()):
            self.clear_filter()
        self._ensure_board_view()
        self.select(board.id, card.id)

    def jump_to_board(self, board_id: ItemId) -> None:
        board = self.workspace.get_board(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        if self.ui.filter_tags and all(s.board_id != board_id for s in self.slices()):
            self.clear_filter()
        self._ensure_board_view()
        first = next(
            (s.card_ids[0] for s in self.slices() if s.board_id == board_id and s.card_ids), None
        )
        self.select(board_id, first)

    def _accept_popup(self, top: PopUp, focus: Focus) -> None:
        lists = self.ui.lists
        match top:
            case PopUp.COMMAND_PALETTE:
                self._activate_palette_selection()
            case PopUp.VIEW_CARD:
                self._accept_view_card(focus)
            case PopUp.CARD_STATUS_SELECTOR:
                status = tuple(CardStatus)[lists.card_status]
                self.ui.pop_popup()
                if self.ui.top_popup is PopUp.VIEW_CARD and self.ui.card_being_edited is not None:
                    self.ui.card_being_edited[1].set_status(status)
                else:
                    self._set_status_of_current(status)
            case PopUp.CARD_PRIORITY_SELECTOR:
                priority = tuple(CardPriority)[lists.card_priority]
                self.ui.pop_popup()
                if self.ui.top_popup is PopUp.VIEW_CARD and self.ui.card_being_edited is not None:
                    self.ui.card_being_edited[1].priority = priority
                else:
                    self._set_priority_of_current(priority)
            case PopUp.CHANGE_UI_MODE:
                view = View.board_views()[lists.view_selector]
                self.ui.pop_popup()
                self.ui.set_view(view)
                logger.info("Set UI mode to %s", view.label)
            case PopUp.SELECT_DEFAULT_VIEW:
                view = View.board_views()[lists.view_selector]
                self.ui.pop_popup()
                self.update_config(default_ui_mode=view)
                self.toasts.info(f"Default view set to {view.label}")
            case PopUp.CHANGE_DATE_FORMAT:
                date_format = tuple(DateTimeFormat)[lists.date_format]
                self.ui.pop_popup()
                self.update_config(date_format=date_format)
                self.toasts.info(f"Date format changed to {date_format.human_readable}")
            case PopUp.CHANGE_THEME:
                theme = self.themes[lists.theme]
                self.ui.pop_popup()
                self.apply_theme(theme)
                self.update_config(default_theme=theme.name)
                self.toasts.info(f'Theme changed to "{theme.name}"')
            case PopUp.EDIT_GENERAL_CONFIG:
                if focus is Focus.SUBMIT_BUTTON:
                    self._submit_general_config()
                else:
                    self.ui.take_user_input()
            case PopUp.EDIT_SPECIFIC_KEY_BINDING:
                if self.capture is not None:
                    self.ui.transition("capture_keys")
            case PopUp.EDIT_THEME_STYLE:
                self._accept_style_editor(focus)
            case PopUp.CUSTOM_HEX_COLOR_PROMPT_FG | PopUp.CUSTOM_HEX_COLOR_PROMPT_BG:
                if focus is Focus.SUBMIT_BUTTON:
                    self._submit_hex_color(top)
                else:
                    self.ui.take_user_input()
            case PopUp.SAVE_THEME_PROMPT:
                self._save_theme_draft(to_file=focus is Focus.SUBMIT_BUTTON)
            case PopUp.CONFIRM_DISCARD_CARD_CHANGES:
                if focus is Focus.SUBMIT_BUTTON:
                    self._discard_card_edit()
                else:
                    self.ui.pop_popup()
            case PopUp.FILTER_BY_TAG:
                self._accept_filter(focus)
            case PopUp.DATE_TIME_PICKER:
                if focus is Focus.DTP_TOGGLE_TIME_PICKER:
                    self.picker.toggle_time_picker(self.clock())
                else:
                    self._confirm_picker()

    def _accept_view_card(self, focus: Focus) -> None:
        if self.ui.card_being_edited is None:
            raise NotFoundError("No card being edited found")
        draft = self.ui.card_being_edited[1]
        match focus:
            case Focus.CARD_DUE_DATE:
                self.open_picker(Focus.CARD_DUE_DATE)
            case Focus.CARD_PRIORITY:
                self.open_selector(
                    PopUp.CARD_PRIORITY_SELECTOR, tuple(CardPriority).index(draft.priority)
                )
            case Focus.CARD_STATUS:
                self.open_selector(
                    PopUp.CARD_STATUS_SELECTOR, tuple(CardStatus).index(draft.status)
                )
            case Focus.SUBMIT_BUTTON:
                self._submit_card_edit()
            case _ if focus.is_text_input:
                self.ui.take_user_input()

    def _accept_filter(self, focus: Focus) -> None:
        if focus is Focus.FILTER_BY_TAG:
            if not self.tag_options:
                return
            tag = self.tag_options[self.ui.lists.filter_tag][0]
            if tag in self.filter_choice:
                self.filter_choice.remove(tag)
                logger.info('Removed tag "%s" from filter', tag)
            else:
                self.filter_choice.append(tag)
                logger.info('Added tag "%s" to filter', tag)
            return
        if not self.filter_choice:
            raise InputValidationError("No tags selected to filter")
        self.ui.filter_tags = list(self.filter_choice)
        self.ui.pop_popup()
        self.viewport.reset()
        self.snap_selection()
        self.toasts.info(f"Filtered by {len(self.ui.filter_tags)} tags")

    def open_filter(self) -> None:
        self.tag_options = tag_histogram(self.workspace)
        if not self.tag_options:
            raise ForbiddenError("No tags found to select")
        self.filter_choice = list(self.ui.filter_tags)
        self.ui.lists.filter_tag = 0
        self.ui.push_popup(PopUp.FILTER_BY_TAG)

    def clear_filter(self) -> None:
        self.ui.filter_tags = []
        self.filter_choice = []
        self.viewport.reset()
        self.snap_selection()
        self.toasts.info("Filter Reset")

    def _accept_view(self, view: View, focus: Focus) -> None:
        match view:
            case _ if view.is_board_view:
                if focus is Focus.BODY and self.current_card() is not None:
                    self.open_current_card()
            case View.MAIN_MENU if focus is Focus.MAIN_MENU:
                self._activate_main_menu()
            case View.CONFIG_MENU:
                self._accept_config_menu(focus)
            case View.EDIT_KEYBINDINGS:
                if focus is Focus.EDIT_KEYBINDINGS_TABLE:
                    self.start_capture(tuple(Action)[self.ui.lists.edit_keybindings])
                elif focus is Focus.SUBMIT_BUTTON:
                    self.update_config(keybindings=AppConfig().keybindings)
                    self.toasts.info("Reset keybindings to default")
            case View.NEW_BOARD if focus is Focus.SUBMIT_BUTTON:
                self._submit_new_board()
            case View.NEW_CARD:
                if focus is Focus.NEW_CARD_DUE_DATE:
                    self.open_picker(Focus.NEW_CARD_DUE_DATE)
                elif focus is Focus.SUBMIT_BUTTON:
                    self._submit_new_card()
            case View.LOAD_LOCAL_SAVE:
                save = self._selected_local_save()
                self.request(LoadSaveLocal(self.config.save_directory / save.file_name))
            case View.LOAD_CLOUD_SAVE:
                cloud_save = self._selected_cloud_save()
                self.request(LoadSaveCloud(self._require_session(), cloud_save.save_id))
            case View.LOGIN | View.SIGN_UP | View.RESET_PASSWORD:
                self._accept_auth_form(view, focus)
            case View.CREATE_THEME:
                self._accept_theme_editor(focus)

    def _activate_main_menu(self) -> None:
        items = self.main_menu_items()
        item = items[self.ui.lists.main_menu % len(items)]
        match item:
            case MainMenuItem.VIEW_BOARDS:
                self.ui.set_view(self.board_view())
            case MainMenuItem.CONFIGURE:
                self.show_view(View.CONFIG_MENU)
            case MainMenuItem.HELP:
                self.show_view(View.HELP_MENU)
            case MainMenuItem.LOAD_SAVE_LOCAL:
                commands.activate(self, PaletteCommand.LOAD_A_SAVE_LOCAL)
            case MainMenuItem.LOAD_SAVE_CLOUD:
                commands.activate(self, PaletteCommand.LOAD_A_SAVE_CLOUD)
            case MainMenuItem.QUIT:
                self.request_quit()

    # Config

    def update_config(self, **changes: object) -> None:
        """Validate, apply and persist config changes."""
        try:
            updated = self.config.with_values(**changes)
        except ValidationError as exc:
            detail = exc.errors()[0]["msg"] if exc.errors() else str(exc)
            raise InputValidationError(f"Could not edit config: {detail}") from exc
        self.config = updated
        self._apply_config()
        self.request(SaveConfig(updated, self.config_path))

    def _apply_config(self) -> None:
        config = self.config
        self.toasts.animations = not config.disable_animations
        self.picker.calendar_format = config.date_picker_calendar_format
        if self.palette.commands != PaletteCommand.available(config.debug_mode):
            self.palette = CommandPalette.for_mode(config.debug_mode)
        self.snap_selection()

    def _accept_config_menu(self, focus: Focus) -> None:
        match focus:
            case Focus.CONFIG_TABLE:
                self._activate_config_field(tuple(ConfigField)[self.ui.lists.config])
            case Focus.SUBMIT_BUTTON:
                defaults = AppConfig().model_dump(mode="json")
                defaults["keybindings"] = self.config.keybindings
                self.update_config(**defaults)
                self.toasts.info("Reset Config to default")
            case Focus.EXTRA_FOCUS:
                self.update_config(**AppConfig().model_dump(mode="json"))
                self.toasts.info("Reset Config and KeyBindings to default")

    def _activate_config_field(self, config_field: ConfigField) -> None:
        current = getattr(self.config, config_field.value)
        match config_field.kind:
            case ConfigFieldKind.TOGGLE:
                self.update_config(**{config_field.value: not current})
                self.toasts.info(f"{config_field.label} set to {not current}")
            case ConfigFieldKind.CALENDAR:
                flipped = (
                    CalendarFormat.MONDAY_FIRST
                    if current is CalendarFormat.SUNDAY_FIRST
                    else CalendarFormat.SUNDAY_FIRST
                )
                self.update_config(**{config_field.value: flipped})
            case ConfigFieldKind.VIEW:
                self.open_selector(PopUp.SELECT_DEFAULT_VIEW, View.board_views().index(current))
            case ConfigFieldKind.DATE_FORMAT:
                self.open_selector(PopUp.CHANGE_DATE_FORMAT, tuple(DateTimeFormat).index(current))
            case ConfigFieldKind.THEME:
                self.open_theme_selector()
            case ConfigFieldKind.KEYBINDINGS:
                self.ui.lists.edit_keybindings = 0
                self.show_view(View.EDIT_KEYBINDINGS)
            case ConfigFieldKind.TEXT:
                self.editing_config_field = config_field
                self.ui.buffers.general_config.set_text(config_field.display_value(self.config))
                self.ui.push_popup(PopUp.EDIT_GENERAL_CONFIG)
                self.ui.take_user_input()

    def _submit_general_config(self) -> None:
        config_field = self.editing_config_field
        if config_field is None:
            raise NotFoundError("No config field is being edited")
        value = self.ui.buffers.general_config.joined()
        self.update_config(**{config_field.value: value})
        self.editing_config_field = None
        self.ui.pop_popup()
        self.toasts.info(f"{config_field.label} set to {config_field.display_value(self.config)}")

    # Themes

    def apply_theme(self, theme: Theme) -> None:
        self.theme = theme
        self.toasts.apply_theme(theme)

    def open_theme_selector(self) -> None:
        names = [theme.name for theme in self.themes]
        index = names.index(self.theme.name) if self.theme.name in names else 0
        self.open_selector(PopUp.CHANGE_THEME, index)

    def start_theme_creation(self) -> None:
        self.theme_draft = self.theme.model_copy()
        self.ui.buffers.theme_name.reset()
        self.ui.lists.theme_editor = 0
        self.show_view(View.CREATE_THEME)

    def _accept_theme_editor(self, focus: Focus) -> None:
        draft = self.theme_draft or self.theme.model_copy()
        self.theme_draft = draft
        match focus:
            case Focus.THEME_EDITOR:
                style = draft.role(tuple(ThemeRole)[self.ui.lists.theme_editor])
                lists = self.ui.lists
                lists.style_fg = COLOR_OPTIONS.index(style.fg) if style.fg in COLOR_OPTIONS else 0
                lists.style_bg = COLOR_OPTIONS.index(style.bg) if style.bg in COLOR_OPTIONS else 0
                lists.style_modifier = 0
                self.ui.push_popup(PopUp.EDIT_THEME_STYLE)
            case Focus.SUBMIT_BUTTON:
                name = self.ui.buffers.theme_name.joined()
                if not name:
                    raise InputValidationError("Theme name cannot be empty")
                if any(theme.name == name for theme in self.themes):
                    raise InputValidationError("Theme name already exists")
                self.theme_draft = draft.model_copy(update={"name": name})
                self.ui.push_popup(PopUp.SAVE_THEME_PROMPT)
            case Focus.EXTRA_FOCUS:
                self.theme_draft = self.theme.model_copy()
                self.toasts.info("Editor reset to default")

    def _set_draft_style(self, **changes: object) -> None:
        if self.theme_draft is None:
            raise NotFoundError("No theme is being edited")
        role = tuple(ThemeRole)[self.ui.lists.theme_editor]
        current = self.theme_draft.role(role)
        values = {"fg": current.fg, "bg": current.bg, "modifiers": list(current.modifiers)}
        values.update(changes)
        try:
            style = ThemeStyle.model_validate(values)
        except ValidationError as exc:
            raise InputValidationError(f"Invalid style for {role.label}") from exc
        self.theme_draft = self.theme_draft.with_role(role, style)

    def _accept_style_editor(self, focus: Focus) -> None:
        lists = self.ui.lists
        match focus:
            case Focus.STYLE_EDITOR_FG | Focus.STYLE_EDITOR_BG:
                index = lists.style_fg if focus is Focus.STYLE_EDITOR_FG else lists.style_bg
                option = COLOR_OPTIONS[index]
                if option == "Custom Hex":
                    prompt = (
                        PopUp.CUSTOM_HEX_COLOR_PROMPT_FG
                        if focus is Focus.STYLE_EDITOR_FG
                        else PopUp.CUSTOM_HEX_COLOR_PROMPT_BG
                    )
                    self.ui.buffers.hex_color.reset()
                    self.ui.push_popup(prompt)
                    self.ui.take_user_input()
                    return
                key = "fg" if focus is Focus.STYLE_EDITOR_FG else "bg"
                self._set_draft_style(**{key: option})
            case Focus.STYLE_EDITOR_MODIFIER:
                if self.theme_draft is None:
                    return
                modifier = MODIFIER_OPTIONS[lists.style_modifier]
                role = tuple(ThemeRole)[lists.theme_editor]
                modifiers = list(self.theme_draft.role(role).modifiers)
                if modifier in modifiers:
                    modifiers.remove(modifier)
                else:
                    modifiers.append(modifier)
                self._set_draft_style(modifiers=modifiers)
            case Focus.SUBMIT_BUTTON:
                self.ui.pop_popup()

    def _submit_hex_color(self, prompt: PopUp) -> None:
        value = self.ui.buffers.hex_color.joined()
        if not is_hex_color(value):
            raise InputValidationError("Invalid hex value")
        key = "fg" if prompt is PopUp.CUSTOM_HEX_COLOR_PROMPT_FG else "bg"
        self._set_draft_style(**{key: value})
        self.ui.pop_popup()

    def _save_theme_draft(self, to_file: bool) -> None:
        draft = self.theme_draft
        if draft is None:
            raise NotFoundError("No theme is being edited")
        self.themes.append(draft)
        self.apply_theme(draft)
        self.ui.pop_popup()
        if to_file:
            self.request(SaveThemeFile(draft, self.themes_dir))
            self.update_config(default_theme=draft.name)
        else:
            self.toasts.info(f"Using theme {draft.name} for this session")
        self.theme_draft = None
        self.ui.buffers.theme_name.reset()
        self.ui.set_view(View.CONFIG_MENU)

    # Saves and cloud

    def _selected_local_save(self) -> SaveName:
        if not self.local_saves:
            raise ForbiddenError("No save files found")
        return self.local_saves[min(self.ui.lists.load_save, len(self.local_saves) - 1)]

    def _selected_cloud_save(self) -> CloudSave:
        if not self.cloud_saves:
            raise ForbiddenError("No cloud saves found")
        return self.cloud_saves[min(self.ui.lists.load_save, len(self.cloud_saves) - 1)]

    def _require_session(self) -> Session:
        if self.session is None:
            raise ForbiddenError("Not logged in")
        return self.session

    def _request_preview(self) -> None:
        if self.ui.view is View.LOAD_LOCAL_SAVE and self.local_saves:
            save = self._selected_local_save()
            self.request(LoadLocalPreview(self.config.save_directory / save.file_name))
        elif self.ui.view is View.LOAD_CLOUD_SAVE and self.cloud_saves and self.session:
            self.request(LoadCloudPreview(self.session, self._selected_cloud_save().save_id))

    def save_state(self) -> None:
        self.request(
            SaveLocalData(
                self.workspace.clone(), self.config.save_directory, self.config.date_format
            )
        )

    def sync_local_data(self) -> None:
        self.request(
            SyncLocalData(self._require_session(), self.workspace.clone(), self.config.date_format)
        )

    def logout(self) -> None:
        self.request(Logout(self._require_session(), self.session_path))

    def request_quit(self) -> None:
        if self.config.save_on_exit and len(self.workspace):
            self.request(
                AutoSave(
                    self.workspace.clone(), self.config.save_directory, self.config.date_format
                )
            )
        self.should_quit = True
        logger.info("Quit requested")

    def _accept_auth_form(self, view: View, focus: Focus) -> None:
        buffers = self.ui.buffers
        email = buffers.email_id.joined()
        password = buffers.password.text
        match focus:
            case Focus.SHOW_HIDE_PASSWORD:
                self.ui.show_password = not self.ui.show_password
                buffers.set_password_visible(self.ui.show_password)
            case Focus.SEND_RESET_PASSWORD_LINK:
                if not email:
                    raise InputValidationError("Email is required")
                remaining = self.reset_link_available_at - self.clock()
                if remaining > 0:
                    raise RateLimitedError(
                        f"Please wait {int(remaining) + 1} seconds before requesting another link",
                        remaining,
                    )
                self.request(SendResetPasswordEmail(email))
            case Focus.SUBMIT_BUTTON if view is View.LOGIN:
                if not email or not password:
                    raise InputValidationError("Email and password are required")
                self.request(Login(email, password, self.session_path))
            case Focus.SUBMIT_BUTTON if view is View.SIGN_UP:
                self._check_new_password(email, password)
                self.request(SignUp(email, password))
            case Focus.SUBMIT_BUTTON if view is View.RESET_PASSWORD:
                link = buffers.reset_password_link.joined()
                if not link:
                    raise InputValidationError("Reset password link is required")
                self._check_new_password(email, password)
                self.request(ResetPassword(email, link, password))

    def _check_new_password(self, email: str, password: str) -> None:
        if password != self.ui.buffers.confirm_password.text:
            raise InputValidationError("Passwords do not match")
        problem = validate_credentials(email, password)
        if problem is not None:
            raise InputValidationError(problem)

    # IO completions

    def apply_io_completion(self, completion: IoCompletion) -> None:
        request = completion.request
        self._settle(request)
        if completion.superseded:
            return
        if isinstance(request, Initialize):
            self.ui.transition("initialized")
        if completion.error is not None:
            self.report(completion.error)
            return
        self._guard(self._apply_result, request, completion.value)
        if completion.message and not request.refresh:
            self.toasts.info(completion.message)

    def _replace_workspace(self, workspace: Workspace) -> None:
        self.editor.replace_workspace(workspace)
        self.ui.filter_tags = []
        self.ui.current_board_id = None
        self.ui.current_card_id = None
        self.viewport.reset()
        self.snap_selection()

    def _clamp_save_selection(self, saves: list[SaveName] | list[CloudSave]) -> None:
        self.ui.lists.load_save = min(self.ui.lists.load_save, max(len(saves) - 1, 0))

    def _apply_result(self, request: IoRequest, value: object) -> None:
        match request:
            case Initialize():
                if not isinstance(value, InitResult):
                    raise IOFailureError("Initialization returned no result")
                if value.workspace is not None:
                    self._replace_workspace(value.workspace)
                    self.last_save_name = value.save_name
                self.session = value.session
            case SaveLocalData() | AutoSave():
                if value is not None:
                    self.last_save_name = value.stem  # type: ignore[attr-defined]
            case ListLocalSaves():
                self.local_saves = list(value)  # type: ignore[call-overload]
                self._clamp_save_selection(self.local_saves)
                self.preview = None
                self._request_preview()
            case GetCloudData():
                self.cloud_saves = list(value)  # type: ignore[call-overload]
                self._clamp_save_selection(self.cloud_saves)
                self.preview = None
                self._request_preview()
            case LoadLocalPreview() | LoadCloudPreview():
                self.preview = value  # type: ignore[assignment]
            case LoadSaveLocal() | LoadSaveCloud():
                if not isinstance(value, Workspace):
                    raise IOFailureError("Loaded save contained no boards")
                self._replace_workspace(value)
                if isinstance(request, LoadSaveLocal):
                    self.last_save_name = request.path.stem
                self.ui.set_view(self.board_view())
            case DeleteLocalSave(path):
                self.local_saves = [
                    save for save in self.local_saves if save.file_name != path.name
                ]
                self._clamp_save_selection(self.local_saves)
                self.preview = None
                self._request_preview()
            case DeleteCloudSave(_session, save_id):
                self.cloud_saves = [save for save in self.cloud_saves if save.save_id != save_id]
                self._clamp_save_selection(self.cloud_saves)
                self.preview = None
                self._request_preview()
            case Login():
                self.session = value  # type: ignore[assignment]
                self.ui.buffers.reset_auth_forms()
                self.show_view(View.MAIN_MENU)
            case Logout():
                self.session = None
                self.cloud_saves = []
                if self.ui.view is View.LOAD_CLOUD_SAVE:
                    self.show_view(View.MAIN_MENU)
            case SignUp():
                self.show_view(View.LOGIN)
            case SendResetPasswordEmail():
                self.reset_link_available_at = self.clock() + RESET_PASSWORD_LINK_COOLDOWN
            case ResetPassword():
                self.show_view(View.LOGIN)

    # Mouse

    def _mouse(self, event: MouseEvent) -> None:
        top = self.ui.top_popup
        scroll = {
            MouseAction.SCROLL_UP: NavigationDirection.UP,
            MouseAction.SCROLL_DOWN: NavigationDirection.DOWN,
        }.get(event.action)
        if top is PopUp.DATE_TIME_PICKER:
            if event.action is MouseAction.DOWN:
                day = self.picker.day_at(event.x, event.y)
                if day is not None:
                    self.picker.select_day(day)
                    self.ui.set_focus(Focus.DTP_CALENDAR)
            elif scroll is not None:
                self.picker.move_months(-1 if scroll is NavigationDirection.UP else 1)
            return
        if top is not None or not self.ui.view.is_board_view:
            if scroll is not None:
                self._navigate(scroll)
            return
        layout = self.board_layout()
        match event.action:
            case MouseAction.DOWN:
                card_box = layout.card_at(event.x, event.y)
                if card_box is not None:
                    self.ui.set_focus(Focus.BODY)
                    self.select(card_box.board_id, card_box.card_id)
                    self.ui.mouse.dragged_card = card_box.card_id
                    self.ui.mouse.drag_source_board = card_box.board_id
                    return
                board_box = layout.board_at(event.x, event.y)
                if board_box is not None:
                    self.ui.set_focus(Focus.BODY)
                    self.ui.select(board_box.board_id, None)
                    self.snap_selection()
            case MouseAction.UP:
                self._drop(layout, event.x, event.y)
            case MouseAction.SCROLL_UP | MouseAction.SCROLL_DOWN if scroll is not None:
                self._navigate(scroll)

    def _drop(self, layout: BoardLayout, x: int, y: int) -> None:
        card_id = self.ui.mouse.dragged_card
        source = self.ui.mouse.drag_source_board
        self.ui.mouse.reset_drag()
        if card_id is None or source is None:
            return
        target = layout.board_at(x, y)
        if target is None:
            logger.debug("Drag released outside any board")
            return
        hovered = layout.card_at(x, y)
        if hovered is not None and hovered.card_id == card_id:
            return
        if self.ui.filter_tags:
            raise ForbiddenError("Cannot move cards while a filter is active")
        target_board = self.workspace.get_board(target.board_id)
        if target_board is None:
            raise NotFoundError("Could not find hovered board")
        position = target_board.card_index(hovered.card_id) if hovered is not None else None
        if target.board_id == source:
            if position is None:
                position = len(target_board.cards) - 1
            self.editor.move_card_within(source, card_id, position)
        else:
            self.editor.move_card_between(card_id, source, target.board_id, position)
        self.select(target.board_id, card_id)
