"""Drawing of every top-level view onto the canvas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.align import Align
from rich.table import Table
from rich.text import Text

from kanban_tui.config import ConfigField
from kanban_tui.constants import (
    APP_TITLE,
    BOARD_NAME_MAX_DISPLAY,
    CARD_NAME_MAX_DISPLAY,
    FIELD_NOT_SET,
    NO_BOARDS_MESSAGE,
    NO_CARDS_MESSAGE,
)
from kanban_tui.core.dates import DueState, due_state, now
from kanban_tui.core.enums import CardPriority, CardStatus, Focus, InputStatus, View
from kanban_tui.core.keybindings import Action
from kanban_tui.limits import MIN_TERM_HEIGHT, MIN_TERM_WIDTH
from kanban_tui.render.layout import (
    FIELD_HEIGHT,
    LOG_HEIGHT,
    TITLE_HEIGHT,
    form_area,
    stack_fields,
)
from kanban_tui.render.widgets import (
    button,
    centered_message,
    help_rows,
    help_text,
    list_panel,
    log_panel,
    panel,
    text_field,
    truncate,
)
from kanban_tui.themes import ThemeRole

if TYPE_CHECKING:
    from rich.console import RenderableType
    from rich.style import Style

    from kanban_tui.controller import Controller
    from kanban_tui.core.geometry import Rect
    from kanban_tui.core.models import Card, Workspace
    from kanban_tui.render.canvas import Canvas
    from kanban_tui.themes import Theme

FIELD_TITLES: dict[Focus, str] = {
    Focus.NEW_BOARD_NAME: "Board Name",
    Focus.NEW_BOARD_DESCRIPTION: "Board Description",
    Focus.NEW_CARD_NAME: "Card Name",
    Focus.NEW_CARD_DESCRIPTION: "Card Description",
    Focus.NEW_CARD_DUE_DATE: "Card Due Date",
    Focus.CARD_NAME: "Name",
    Focus.CARD_DESCRIPTION: "Description",
    Focus.CARD_DUE_DATE: "Due Date",
    Focus.CARD_PRIORITY: "Priority",
    Focus.CARD_STATUS: "Status",
    Focus.CARD_TAGS: "Tags (comma separated)",
    Focus.CARD_COMMENTS: "Comments (one per line)",
    Focus.EMAIL_ID_FIELD: "Email",
    Focus.PASSWORD_FIELD: "Password",
    Focus.CONFIRM_PASSWORD_FIELD: "Confirm Password",
    Focus.RESET_PASSWORD_LINK_FIELD: "Reset Link",
    Focus.THEME_NAME: "Theme Name",
    Focus.EDIT_GENERAL_CONFIG: "New Value",
    Focus.TEXT_INPUT: "Hex Color (#rrggbb)",
}

SUBMIT_LABELS: dict[View, str] = {
    View.NEW_BOARD: "Confirm",
    View.NEW_CARD: "Confirm",
    View.LOGIN: "Login",
    View.SIGN_UP: "Sign Up",
    View.RESET_PASSWORD: "Reset Password",
}

_STATUS_ROLES: dict[CardStatus, ThemeRole] = {
    CardStatus.ACTIVE: ThemeRole.CARD_STATUS_ACTIVE,
    CardStatus.COMPLETE: ThemeRole.CARD_STATUS_COMPLETED,
    CardStatus.STALE: ThemeRole.CARD_STATUS_STALE,
}

_PRIORITY_ROLES: dict[CardPriority, ThemeRole] = {
    CardPriority.LOW: ThemeRole.CARD_PRIORITY_LOW,
    CardPriority.MEDIUM: ThemeRole.CARD_PRIORITY_MEDIUM,
    CardPriority.HIGH: ThemeRole.CARD_PRIORITY_HIGH,
}

_DUE_ROLES: dict[DueState, ThemeRole] = {
    DueState.DEFAULT: ThemeRole.CARD_DUE_DEFAULT,
    DueState.WARNING: ThemeRole.CARD_DUE_WARNING,
    DueState.OVERDUE: ThemeRole.CARD_DUE_OVERDUE,
}


def status_style(theme: Theme, status: CardStatus) -> Style:
    return theme.style(_STATUS_ROLES[status])


def priority_style(theme: Theme, priority: CardPriority) -> Style:
    return theme.style(_PRIORITY_ROLES[priority])


def is_editing(controller: Controller, focus: Focus) -> bool:
    ui = controller.ui
    return ui.focus is focus and ui.input_status is InputStatus.USER_INPUT


def is_hovered(controller: Controller, rect: Rect) -> bool:
    position = controller.ui.mouse.position
    return (
        controller.config.enable_mouse_support
        and position is not None
        and rect.contains(*position)
    )


# Cards and boards


def card_summary(controller: Controller, card: Card) -> Text:
    """Status, priority, due date, tags and description, most important first."""
    theme = controller.theme
    config = controller.config
    text = Text(no_wrap=True, overflow="ellipsis")
    text.append(card.status.value, style=status_style(theme, card.status))
    text.append(" | ", style=theme.style(ThemeRole.INACTIVE_TEXT))
    text.append(f"{card.priority.value} priority", style=priority_style(theme, card.priority))
    if card.due_date is not None:
        state = due_state(card.due_date, now(), config.warning_delta)
        text.append("\nDue: ", style=theme.style(ThemeRole.GENERAL))
        text.append(config.date_format.format(card.due_date), style=theme.style(_DUE_ROLES[state]))
    if card.tags:
        tags = " ".join(f"#{tag}" for tag in card.tags)
        text.append(f"\n{tags}", style=theme.style(ThemeRole.HELP_KEY))
    if card.description:
        text.append("\n" + card.description, style=theme.style(ThemeRole.GENERAL))
    return text


def _title_status(controller: Controller) -> Text:
    theme = controller.theme
    parts: list[str] = []
    if controller.ui.is_loading:
        parts.append("Loading...")
    if controller.ui.filter_tags:
        parts.append("Filter: " + ", ".join(controller.ui.filter_tags))
    if controller.last_save_name:
        parts.append(f"Save: {controller.last_save_name}")
    if controller.session is not None:
        parts.append(f"Logged in as {controller.session.email}")
    text = Text(APP_TITLE, style=theme.style(ThemeRole.KEYBOARD_FOCUS))
    if parts:
        text.append("  " + " | ".join(parts), style=theme.style(ThemeRole.INACTIVE_TEXT))
    return text


def _scroll_hint(hidden_above: int, hidden_below: int) -> str | None:
    hints = []
    if hidden_above:
        hints.append(f"↑ {hidden_above} more")
    if hidden_below:
        hints.append(f"↓ {hidden_below} more")
    return "  ".join(hints) or None


def draw_board_view(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    layout = controller.board_layout()
    body_focused = ui.focus is Focus.BODY

    if layout.title is not None:
        canvas.draw(
            panel(Align.center(_title_status(controller)), theme, focused=ui.focus is Focus.TITLE),
            layout.title,
        )

    slices = {board_slice.board_id: board_slice for board_slice in controller.slices()}
    if not layout.boards:
        message = NO_BOARDS_MESSAGE if not controller.workspace.boards else NO_CARDS_MESSAGE
        canvas.draw(
            panel(centered_message(theme, message), theme, "Boards", focused=body_focused),
            layout.body,
        )

    dragged = ui.mouse.dragged_card
    visible = controller.visible()
    for box in layout.boards:
        board = controller.workspace.get_board(box.board_id)
        if board is None:
            continue
        card_ids = slices[box.board_id].card_ids if box.board_id in slices else ()
        offset = controller.viewport.card_offsets.get(box.board_id, 0)
        shown = len(visible.get(box.board_id, ()))
        hint = _scroll_hint(offset, max(len(card_ids) - offset - shown, 0))
        title = f"{truncate(board.name, BOARD_NAME_MAX_DISPLAY)} ({len(card_ids)})"
        current = board.id == ui.current_board_id
        body: RenderableType = ""
        if not card_ids:
            body = centered_message(theme, NO_CARDS_MESSAGE)
        canvas.draw(
            panel(
                body,
                theme,
                title,
                subtitle=hint,
                focused=current and body_focused,
                hovered=dragged is not None and is_hovered(controller, box.rect),
            ),
            box.rect,
        )

    for card_box in layout.cards:
        board = controller.workspace.get_board(card_box.board_id)
        card = board.get_card(card_box.card_id) if board is not None else None
        if card is None:
            continue
        selected = card.id == ui.current_card_id and card_box.board_id == ui.current_board_id
        canvas.draw(
            panel(
                card_summary(controller, card),
                theme,
                truncate(card.name, CARD_NAME_MAX_DISPLAY),
                focused=selected and body_focused,
                hovered=card.id == dragged or is_hovered(controller, card_box.rect),
                padding=(0, 1),
            ),
            card_box.rect,
        )

    if layout.help is not None:
        canvas.draw(
            panel(
                help_text(theme, controller.bindings),
                theme,
                "Help",
                focused=ui.focus is Focus.HELP,
            ),
            layout.help,
        )
    if layout.log is not None:
        canvas.draw(view_log_panel(controller, layout.log.height), layout.log)


def view_log_panel(controller: Controller, height: int) -> RenderableType:
    ui = controller.ui
    return log_panel(
        controller.theme, height=height, offset=ui.lists.log_offset, focused=ui.focus is Focus.LOG
    )


# Forms


def field_renderable(
    controller: Controller, focus: Focus, rect: Rect, submit_label: str = "Submit"
) -> RenderableType:
    """The widget for one form field."""
    theme = controller.theme
    ui = controller.ui
    focused = ui.focus is focus
    buffer = controller.buffer_for(focus)
    if buffer is not None:
        return text_field(
            theme,
            FIELD_TITLES.get(focus, focus.value),
            buffer,
            height=rect.height,
            width=rect.width,
            focused=focused,
            editing=is_editing(controller, focus),
            line_numbers=controller.config.show_line_numbers and not buffer.single_line,
        )
    draft = ui.card_being_edited[1] if ui.card_being_edited is not None else None
    date_format = controller.config.date_format
    match focus:
        case Focus.NEW_CARD_DUE_DATE:
            value = Text(date_format.format(controller.new_card_due))
            return panel(value, theme, FIELD_TITLES[focus], focused=focused)
        case Focus.CARD_DUE_DATE:
            shown = date_format.format(draft.due_date) if draft is not None else FIELD_NOT_SET
            return panel(Text(shown), theme, FIELD_TITLES[focus], focused=focused)
        case Focus.CARD_PRIORITY if draft is not None:
            value = Text(draft.priority.value, style=priority_style(theme, draft.priority))
            return panel(value, theme, FIELD_TITLES[focus], focused=focused)
        case Focus.CARD_STATUS if draft is not None:
            value = Text(draft.status.value, style=status_style(theme, draft.status))
            return panel(value, theme, FIELD_TITLES[focus], focused=focused)
        case Focus.SHOW_HIDE_PASSWORD:
            mark = "x" if ui.show_password else " "
            return panel(Text(f"[{mark}] Show password"), theme, focused=focused)
        case Focus.SEND_RESET_PASSWORD_LINK:
            remaining = int(controller.reset_link_available_at - controller.clock())
            label = "Send Reset Link" if remaining <= 0 else f"Send Reset Link (wait {remaining}s)"
            return button(theme, label, focused)
        case Focus.SUBMIT_BUTTON:
            return button(theme, submit_label, focused)
        case _:
            return panel("", theme, FIELD_TITLES.get(focus, focus.value), focused=focused)


def draw_form(
    canvas: Canvas,
    controller: Controller,
    area: Rect,
    title: str,
    fields: tuple[Focus, ...],
    submit_label: str = "Submit",
) -> None:
    theme = controller.theme
    canvas.clear(area)
    canvas.draw(panel("", theme, title), area)
    inner = area.inner(1)
    for focus, rect in stack_fields(area, fields).items():
        canvas.draw(field_renderable(controller, focus, rect, submit_label), rect.clip(inner))


def _draw_auth_form(canvas: Canvas, controller: Controller, view: View) -> None:
    area = form_area(controller.screen())
    title = view.label
    if controller.session is not None:
        title = f"{title} (logged in as {controller.session.email})"
    draw_form(canvas, controller, area, title, view.available_focus, SUBMIT_LABELS[view])


# Menus


def _draw_main_menu(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    title, middle, log = controller.screen().split_rows([TITLE_HEIGHT, 0, LOG_HEIGHT])
    menu, help_rect = middle.split_columns(2)
    canvas.draw(panel(Align.center(_title_status(controller)), theme), title)
    items = [item.value for item in controller.main_menu_items()]
    canvas.draw(
        list_panel(
            theme,
            "Main Menu",
            items,
            ui.lists.main_menu % len(items),
            height=menu.height,
            focused=ui.focus is Focus.MAIN_MENU,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        menu,
    )
    help_focused = ui.focus is Focus.MAIN_MENU_HELP
    canvas.draw(
        list_panel(
            theme,
            "Help",
            help_rows(theme, controller.bindings),
            ui.lists.help if help_focused else None,
            height=help_rect.height,
            focused=help_focused,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        help_rect,
    )
    canvas.draw(view_log_panel(controller, log.height), log)


def _draw_config_menu(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    table, buttons = controller.screen().split_rows([0, FIELD_HEIGHT])
    width = max(len(config_field.label) for config_field in ConfigField) + 2
    rows = [
        Text(f"{config_field.label:<{width}}").append(
            config_field.display_value(controller.config), style=theme.style(ThemeRole.HELP_KEY)
        )
        for config_field in ConfigField
    ]
    canvas.draw(
        list_panel(
            theme,
            "Config",
            rows,
            ui.lists.config,
            height=table.height,
            focused=ui.focus is Focus.CONFIG_TABLE,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        table,
    )
    reset, reset_all = buttons.split_columns(2)
    canvas.draw(button(theme, "Reset Config to Default", ui.focus is Focus.SUBMIT_BUTTON), reset)
    canvas.draw(
        button(theme, "Reset Config and KeyBindings to Default", ui.focus is Focus.EXTRA_FOCUS),
        reset_all,
    )


def _draw_edit_keybindings(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    table, buttons = controller.screen().split_rows([0, FIELD_HEIGHT])
    bindings = controller.bindings
    width = max(len(action.description) for action in Action) + 2
    rows = [
        Text(f"{action.description:<{width}}").append(
            bindings.label_for(action), style=theme.style(ThemeRole.HELP_KEY)
        )
        for action in Action
    ]
    canvas.draw(
        list_panel(
            theme,
            "Edit Keybindings",
            rows,
            ui.lists.edit_keybindings,
            height=table.height,
            focused=ui.focus is Focus.EDIT_KEYBINDINGS_TABLE,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        table,
    )
    reset_focused = ui.focus is Focus.SUBMIT_BUTTON
    canvas.draw(button(theme, "Reset Keybindings to Default", reset_focused), buttons)


def _draw_help_menu(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    help_rect, log = controller.screen().split_rows([0, LOG_HEIGHT])
    focused = ui.focus is Focus.HELP
    canvas.draw(
        list_panel(
            theme,
            "Help",
            help_rows(theme, controller.bindings),
            ui.lists.help if focused else None,
            height=help_rect.height,
            focused=focused,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        help_rect,
    )
    canvas.draw(view_log_panel(controller, log.height), log)


# Saves


def preview_text(theme: Theme, workspace: Workspace | None) -> Text:
    if workspace is None:
        return Text("Select a save to preview it", style=theme.style(ThemeRole.INACTIVE_TEXT))
    if not workspace.boards:
        return Text(NO_BOARDS_MESSAGE, style=theme.style(ThemeRole.INACTIVE_TEXT))
    text = Text()
    for index, board in enumerate(workspace):
        if index:
            text.append("\n")
        heading = f"{board.name} ({len(board.cards)} cards)"
        text.append(heading, style=theme.style(ThemeRole.HELP_KEY))
        for card in board.cards:
            text.append(f"\n  {card.name} ", style=theme.style(ThemeRole.GENERAL))
            text.append(card.status.value, style=status_style(theme, card.status))
    return text


def _draw_load_save(canvas: Canvas, controller: Controller, view: View) -> None:
    theme = controller.theme
    ui = controller.ui
    saves, preview = controller.screen().split_columns(2)
    if view is View.LOAD_LOCAL_SAVE:
        labels = [save.stem for save in controller.local_saves]
    else:
        labels = [
            f"{save.name} ({save.created_at:%d-%m-%Y %H:%M})" for save in controller.cloud_saves
        ]
    if labels:
        canvas.draw(
            list_panel(
                theme,
                view.label,
                labels,
                min(ui.lists.load_save, len(labels) - 1),
                height=saves.height,
                focused=ui.focus is Focus.LOAD_SAVE,
                show_scrollbar=not controller.config.disable_scroll_bar,
            ),
            saves,
        )
    else:
        message = "Loading saves..." if ui.is_loading else "No saves found"
        body = centered_message(theme, message)
        canvas.draw(panel(body, theme, view.label, focused=ui.focus is Focus.LOAD_SAVE), saves)
    canvas.draw(panel(preview_text(theme, controller.preview), theme, "Preview"), preview)


# Themes


def style_summary(theme: Theme, role: ThemeRole) -> Text:
    style = theme.role(role)
    text = Text(f"{role.label:<20}")
    text.append(" Sample ", style=style.to_rich())
    modifiers = ", ".join(style.modifiers) or "none"
    text.append(
        f"  fg={style.fg or 'default'} bg={style.bg or 'default'} modifiers={modifiers}",
        style=theme.style(ThemeRole.INACTIVE_TEXT),
    )
    return text


def _draw_create_theme(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    draft = controller.theme_draft or theme
    name_rect, editor, buttons = controller.screen().split_rows([FIELD_HEIGHT, 0, FIELD_HEIGHT])
    canvas.draw(field_renderable(controller, Focus.THEME_NAME, name_rect), name_rect)
    canvas.draw(
        list_panel(
            theme,
            "Theme Editor",
            [style_summary(draft, role) for role in ThemeRole],
            ui.lists.theme_editor,
            height=editor.height,
            focused=ui.focus is Focus.THEME_EDITOR,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        editor,
    )
    save, reset = buttons.split_columns(2)
    canvas.draw(button(theme, "Save Theme", ui.focus is Focus.SUBMIT_BUTTON), save)
    canvas.draw(button(theme, "Reset Editor", ui.focus is Focus.EXTRA_FOCUS), reset)


# Entry points


def draw_too_small(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    message = Text.assemble(
        ("Terminal too small\n", theme.style(ThemeRole.ERROR_TEXT)),
        (f"Current size {controller.width}x{controller.height}, ", theme.style(ThemeRole.GENERAL)),
        (f"need at least {MIN_TERM_WIDTH}x{MIN_TERM_HEIGHT}", theme.style(ThemeRole.GENERAL)),
        justify="center",
    )
    canvas.draw(Align.center(message, vertical="middle"), canvas.bounds)


def draw_view(canvas: Canvas, controller: Controller) -> None:
    view = controller.ui.view
    match view:
        case _ if view.is_board_view:
            draw_board_view(canvas, controller)
        case View.MAIN_MENU:
            _draw_main_menu(canvas, controller)
        case View.CONFIG_MENU:
            _draw_config_menu(canvas, controller)
        case View.EDIT_KEYBINDINGS:
            _draw_edit_keybindings(canvas, controller)
        case View.HELP_MENU:
            _draw_help_menu(canvas, controller)
        case View.LOGS_ONLY:
            canvas.draw(view_log_panel(controller, controller.height), controller.screen())
        case View.NEW_BOARD | View.NEW_CARD:
            draw_form(
                canvas,
                controller,
                form_area(controller.screen()),
                view.label,
                view.available_focus,
                SUBMIT_LABELS[view],
            )
        case View.LOAD_LOCAL_SAVE | View.LOAD_CLOUD_SAVE:
            _draw_load_save(canvas, controller, view)
        case View.LOGIN | View.SIGN_UP | View.RESET_PASSWORD:
            _draw_auth_form(canvas, controller, view)
        case View.CREATE_THEME:
            _draw_create_theme(canvas, controller)


def debug_table(controller: Controller) -> Table:
    ui = controller.ui
    table = Table.grid(padding=(0, 1))
    table.add_column(style=controller.theme.style(ThemeRole.HELP_KEY))
    table.add_column(style=controller.theme.style(ThemeRole.HELP_TEXT))
    rows = (
        ("View", ui.view.value),
        ("Popups", " > ".join(popup.value for popup in ui.popup_stack) or "-"),
        ("Focus", ui.focus.value),
        ("Input", ui.input_status.value),
        ("Board", str(ui.current_board_id) if ui.current_board_id is not None else "-"),
        ("Card", str(ui.current_card_id) if ui.current_card_id is not None else "-"),
        ("Size", f"{controller.width}x{controller.height}"),
        ("Pending IO", str(len(controller.requests))),
        ("Undo/Redo", f"{controller.editor.log.can_undo}/{controller.editor.log.can_redo}"),
        ("Toasts", str(len(controller.toasts))),
    )
    for name, value in rows:
        table.add_row(name, value)
    return table
