"""Popups, the date/time picker and toasts, drawn over the current view."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.align import Align
from rich.color import Color
from rich.panel import Panel
from rich.style import Style
from rich.text import Text

from kanban_tui.core.dates import DateTimeFormat
from kanban_tui.core.enums import CardPriority, CardStatus, Focus, InputStatus, PopUp, View
from kanban_tui.core.geometry import Rect
from kanban_tui.core.keybindings import Action
from kanban_tui.render.layout import (
    FIELD_HEIGHT,
    VIEW_CARD_FIELDS,
    popup_area,
    stack_fields,
)
from kanban_tui.render.views import (
    debug_table,
    field_renderable,
    priority_style,
    status_style,
)
from kanban_tui.render.widgets import (
    border_style,
    button,
    list_panel,
    panel,
    text_field,
)
from kanban_tui.themes import COLOR_OPTIONS, MODIFIER_OPTIONS, ThemeRole
from kanban_tui.widgets.date_picker import CELL_WIDTH, weekday_header

if TYPE_CHECKING:
    from collections.abc import Sequence

    from kanban_tui.controller import Controller
    from kanban_tui.render.canvas import Canvas
    from kanban_tui.widgets.toasts import Toast

TOAST_WIDTH = 40
TOAST_MAX_BODY_LINES = 4

# Selectors


def selector_items(controller: Controller, popup: PopUp) -> tuple[Sequence[str | Text], int]:
    """Rows and highlighted index of a list-only popup."""
    theme = controller.theme
    lists = controller.ui.lists
    match popup:
        case PopUp.CHANGE_UI_MODE | PopUp.SELECT_DEFAULT_VIEW:
            return [view.label for view in View.board_views()], lists.view_selector
        case PopUp.CARD_STATUS_SELECTOR:
            statuses = [
                Text(status.value, style=status_style(theme, status)) for status in CardStatus
            ]
            return statuses, lists.card_status
        case PopUp.CARD_PRIORITY_SELECTOR:
            priorities = [
                Text(priority.value, style=priority_style(theme, priority))
                for priority in CardPriority
            ]
            return priorities, lists.card_priority
        case PopUp.CHANGE_DATE_FORMAT:
            return [fmt.human_readable for fmt in DateTimeFormat], lists.date_format
        case PopUp.CHANGE_THEME:
            return [option.name for option in controller.themes], lists.theme
        case _:
            return [], 0


def _draw_selector(canvas: Canvas, controller: Controller, popup: PopUp) -> None:
    items, selected = selector_items(controller, popup)
    rect = popup_area(controller.screen(), popup, len(items))
    canvas.clear(rect)
    canvas.draw(
        list_panel(
            controller.theme,
            popup.label,
            items,
            selected,
            height=rect.height,
            focused=True,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        rect,
    )


# Card view


def _draw_view_card(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    rect = popup_area(controller.screen(), PopUp.VIEW_CARD)
    title = "Card View"
    if controller.ui.card_being_edited is not None:
        draft = controller.ui.card_being_edited[1]
        title = f"Card View: {draft.name}"
        if controller.card_edit_dirty():
            title += " (modified)"
    canvas.clear(rect)
    canvas.draw(panel("", theme, title), rect)
    inner = rect.inner(1)
    for focus, field_rect in stack_fields(rect, VIEW_CARD_FIELDS).items():
        renderable = field_renderable(controller, focus, field_rect, "Save Changes")
        canvas.draw(renderable, field_rect.clip(inner))


# Command palette


def _draw_palette(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    palette = controller.palette
    rect = popup_area(controller.screen(), PopUp.COMMAND_PALETTE)
    canvas.clear(rect)
    search, commands, results = rect.split_rows([FIELD_HEIGHT, 0, 0])
    cards, boards = results.split_columns(2)
    buffer = ui.buffers.command_palette
    canvas.draw(
        text_field(
            theme,
            "Command Palette",
            buffer,
            height=search.height,
            width=search.width,
            focused=True,
            editing=ui.input_status is InputStatus.USER_INPUT,
        ),
        search,
    )
    show_scrollbar = not controller.config.disable_scroll_bar
    sections: tuple[tuple[Focus, str, Sequence[str | Text], Rect], ...] = (
        (Focus.COMMAND_PALETTE_COMMAND, "Commands", palette.command_labels(), commands),
        (
            Focus.COMMAND_PALETTE_CARD,
            "Cards",
            [hit.label for hit in palette.card_results] or ["No matching cards"],
            cards,
        ),
        (
            Focus.COMMAND_PALETTE_BOARD,
            "Boards",
            [hit.label for hit in palette.board_results] or ["No matching boards"],
            boards,
        ),
    )
    for focus, title, items, area in sections:
        canvas.draw(
            list_panel(
                theme,
                title,
                items,
                palette.selected.get(focus),
                height=area.height,
                focused=ui.focus is focus,
                show_scrollbar=show_scrollbar,
            ),
            area,
        )


# Prompts


def _draw_text_prompt(canvas: Canvas, controller: Controller, popup: PopUp) -> None:
    theme = controller.theme
    ui = controller.ui
    rect = popup_area(controller.screen(), popup)
    canvas.clear(rect)
    title = popup.label
    if popup is PopUp.EDIT_GENERAL_CONFIG and controller.editing_config_field is not None:
        title = f"Edit {controller.editing_config_field.label}"
    canvas.draw(panel("", theme, title, focused=True), rect)
    field_focus = popup.available_focus[0]
    field_rect, button_rect = rect.inner(1).split_rows([FIELD_HEIGHT, FIELD_HEIGHT])
    canvas.draw(field_renderable(controller, field_focus, field_rect), field_rect)
    canvas.draw(button(theme, "Submit", ui.focus is Focus.SUBMIT_BUTTON), button_rect)


def _draw_choice_prompt(
    canvas: Canvas, controller: Controller, popup: PopUp, message: str, labels: tuple[str, str]
) -> None:
    theme = controller.theme
    ui = controller.ui
    rect = popup_area(controller.screen(), popup)
    canvas.clear(rect)
    canvas.draw(panel("", theme, popup.label, focused=True), rect)
    text_rect, buttons = rect.inner(1).split_rows([0, FIELD_HEIGHT])
    canvas.draw(Align.center(Text(message, style=theme.style(ThemeRole.GENERAL))), text_rect)
    first, second = buttons.split_columns(2)
    canvas.draw(button(theme, labels[0], ui.focus is Focus.SUBMIT_BUTTON), first)
    canvas.draw(button(theme, labels[1], ui.focus is Focus.EXTRA_FOCUS), second)


def _draw_key_capture(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    rect = popup_area(controller.screen(), PopUp.EDIT_SPECIFIC_KEY_BINDING)
    canvas.clear(rect)
    capture = controller.capture
    body = Text()
    if capture is not None:
        accept = controller.bindings.label_for(Action.ACCEPT)
        cancel = controller.bindings.label_for(Action.GO_TO_PREVIOUS_VIEW_OR_CANCEL)
        captured = ", ".join(str(key) for key in capture.keys) or "press a key"
        body.append(f"Action: {capture.action.description}\n", style=theme.style(ThemeRole.GENERAL))
        current = controller.bindings.label_for(capture.action)
        body.append(f"Current: {current}\n", style=theme.style(ThemeRole.INACTIVE_TEXT))
        body.append(f"New: {captured}\n", style=theme.style(ThemeRole.HELP_KEY))
        body.append(f"{accept} to save, {cancel} to cancel", style=theme.style(ThemeRole.HELP_TEXT))
    canvas.draw(panel(body, theme, PopUp.EDIT_SPECIFIC_KEY_BINDING.label, focused=True), rect)


# Theme style editor


def _draw_style_editor(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    lists = ui.lists
    role = tuple(ThemeRole)[lists.theme_editor]
    draft = controller.theme_draft or theme
    style = draft.role(role)
    rect = popup_area(controller.screen(), PopUp.EDIT_THEME_STYLE)
    canvas.clear(rect)
    canvas.draw(panel("", theme, f"Edit {role.label}", focused=True), rect)
    columns, buttons = rect.inner(1).split_rows([0, FIELD_HEIGHT])
    fg_rect, bg_rect, modifier_rect = columns.split_columns(3)
    modifiers = [
        f"[{'x' if modifier in style.modifiers else ' '}] {modifier}"
        for modifier in MODIFIER_OPTIONS
    ]
    show_scrollbar = not controller.config.disable_scroll_bar
    sections: tuple[tuple[Focus, str, Sequence[str], int, Rect], ...] = (
        (
            Focus.STYLE_EDITOR_FG,
            f"Foreground ({style.fg or 'default'})",
            COLOR_OPTIONS,
            lists.style_fg,
            fg_rect,
        ),
        (
            Focus.STYLE_EDITOR_BG,
            f"Background ({style.bg or 'default'})",
            COLOR_OPTIONS,
            lists.style_bg,
            bg_rect,
        ),
        (Focus.STYLE_EDITOR_MODIFIER, "Modifiers", modifiers, lists.style_modifier, modifier_rect),
    )
    for focus, title, items, selected, area in sections:
        canvas.draw(
            list_panel(
                theme,
                title,
                items,
                selected,
                height=area.height,
                focused=ui.focus is focus,
                show_scrollbar=show_scrollbar,
            ),
            area,
        )
    canvas.draw(button(theme, "Done", ui.focus is Focus.SUBMIT_BUTTON), buttons)


# Filter


def _draw_filter(canvas: Canvas, controller: Controller) -> None:
    theme = controller.theme
    ui = controller.ui
    rect = popup_area(controller.screen(), PopUp.FILTER_BY_TAG, len(controller.tag_options))
    canvas.clear(rect)
    tags_rect, button_rect = rect.split_rows([0, FIELD_HEIGHT])
    items = [
        f"[{'x' if tag in controller.filter_choice else ' '}] {tag} ({count})"
        for tag, count in controller.tag_options
    ]
    canvas.draw(
        list_panel(
            theme,
            PopUp.FILTER_BY_TAG.label,
            items,
            ui.lists.filter_tag,
            height=tags_rect.height,
            focused=ui.focus is Focus.FILTER_BY_TAG,
            show_scrollbar=not controller.config.disable_scroll_bar,
        ),
        tags_rect,
    )
    canvas.draw(button(theme, "Apply Filter", ui.focus is Focus.SUBMIT_BUTTON), button_rect)


# Date/time picker


def calendar_text(controller: Controller, width: int) -> Text:
    """Header, weekday line, then one line per week with CELL_WIDTH-wide cells."""
    theme = controller.theme
    picker = controller.picker
    focus = controller.ui.focus
    focused_style = theme.style(ThemeRole.KEYBOARD_FOCUS)
    general = theme.style(ThemeRole.GENERAL)
    month, year = picker.header()

    text = Text(no_wrap=True, overflow="crop")
    text.append(" " * max((width - len(month) - len(year) - 1) // 2, 0))
    text.append(month, style=focused_style if focus is Focus.DTP_MONTH else general)
    text.append(" ")
    text.append(year, style=focused_style if focus is Focus.DTP_YEAR else general)
    text.append("\n")
    for name in weekday_header(picker.calendar_format):
        text.append(f"{name:<{CELL_WIDTH}}", style=theme.style(ThemeRole.HELP_KEY))
    for week in picker.grid():
        text.append("\n")
        for cell in week:
            label = f"{cell.day:>2}".ljust(CELL_WIDTH)
            if not cell.in_month:
                text.append(label, style=theme.style(ThemeRole.INACTIVE_TEXT))
            elif cell.selected and focus is Focus.DTP_CALENDAR:
                text.append(label[:-1], style=focused_style + Style(reverse=True))
                text.append(" ", style=general)
            elif cell.selected:
                text.append(label[:-1], style=theme.style(ThemeRole.LIST_SELECT))
                text.append(" ", style=general)
            else:
                text.append(label, style=general)
    toggle_style = focused_style if focus is Focus.DTP_TOGGLE_TIME_PICKER else general
    label = "Hide Time" if picker.time_picker_active else "Show Time"
    text.append("\n\n")
    text.append(f"[{label}]", style=toggle_style)
    text.append("\n")
    text.append(picker.output(controller.config.date_format.with_time()), style=general)
    return text


def time_text(controller: Controller) -> Text:
    theme = controller.theme
    focus = controller.ui.focus
    general = theme.style(ThemeRole.GENERAL)
    text = Text(justify="center", no_wrap=True)
    for index, row in enumerate(controller.picker.time_rows()):
        if index:
            text.append("\n")
        fields = (
            (Focus.DTP_HOUR, row.hour),
            (Focus.DTP_MINUTE, row.minute),
            (Focus.DTP_SECOND, row.second),
        )
        for position, (field_focus, value) in enumerate(fields):
            if position:
                text.append(" : ", style=general)
            if not row.current:
                style = theme.style(ThemeRole.INACTIVE_TEXT)
            elif focus is field_focus:
                style = theme.style(ThemeRole.KEYBOARD_FOCUS) + Style(reverse=True)
            else:
                style = theme.style(ThemeRole.LIST_SELECT)
            text.append(f"{value:02}", style=style)
    return text


def draw_picker(canvas: Canvas, controller: Controller) -> None:
    picker = controller.picker
    area = picker.render_area or picker.area()
    if area is None:
        return
    theme = controller.theme
    focused = controller.ui.top_popup is PopUp.DATE_TIME_PICKER
    date_width = min(picker.date_target_width, area.width)
    date_rect = Rect(area.x, area.y, date_width, area.height)
    canvas.clear(area)
    canvas.draw(
        Panel(
            calendar_text(controller, max(date_width - 2, 0)),
            border_style=border_style(theme, focused),
            style=theme.style(ThemeRole.GENERAL),
            padding=0,
            expand=True,
        ),
        date_rect,
    )
    if area.width > date_width:
        time_rect = Rect(date_rect.right, area.y, area.width - date_width, area.height)
        canvas.draw(panel(time_text(controller), theme, "Time", padding=(0, 0)), time_rect)


# Toasts


def _toast_height(toast: Toast, width: int) -> int:
    inner = max(width - 4, 1)
    lines = sum(max(1, -(-len(line) // inner)) for line in toast.body.splitlines() or [""])
    return min(lines, TOAST_MAX_BODY_LINES) + 2


def draw_toasts(canvas: Canvas, controller: Controller) -> None:
    """Stack visible toasts down the right edge, top first."""
    theme = controller.theme
    width = min(TOAST_WIDTH, max(canvas.width // 3, 20))
    y = 0
    for toast in controller.toasts.visible():
        height = _toast_height(toast, width)
        if y + height > canvas.height:
            break
        color = Style(color=Color.from_triplet(toast.color))
        body = Text(toast.body, style=theme.style(ThemeRole.GENERAL))
        rect = Rect(canvas.width - width, y, width, height)
        canvas.clear(rect)
        canvas.draw(
            Panel(
                body,
                title=Text(toast.title, style=color),
                border_style=color,
                style=theme.style(ThemeRole.GENERAL),
                expand=True,
            ),
            rect,
        )
        y += height


# Entry points


def draw_popup(canvas: Canvas, controller: Controller, popup: PopUp) -> None:
    match popup:
        case PopUp.VIEW_CARD:
            _draw_view_card(canvas, controller)
        case PopUp.COMMAND_PALETTE:
            _draw_palette(canvas, controller)
        case PopUp.EDIT_SPECIFIC_KEY_BINDING:
            _draw_key_capture(canvas, controller)
        case (
            PopUp.EDIT_GENERAL_CONFIG
            | PopUp.CUSTOM_HEX_COLOR_PROMPT_FG
            | PopUp.CUSTOM_HEX_COLOR_PROMPT_BG
        ):
            _draw_text_prompt(canvas, controller, popup)
        case PopUp.SAVE_THEME_PROMPT:
            name = controller.theme_draft.name if controller.theme_draft is not None else "theme"
            _draw_choice_prompt(
                canvas,
                controller,
                popup,
                f"Save {name} to a file and make it the default?",
                ("Save to File", "Use for this Session"),
            )
        case PopUp.CONFIRM_DISCARD_CARD_CHANGES:
            _draw_choice_prompt(
                canvas,
                controller,
                popup,
                "This card has unsaved changes",
                ("Discard Changes", "Keep Editing"),
            )
        case PopUp.EDIT_THEME_STYLE:
            _draw_style_editor(canvas, controller)
        case PopUp.FILTER_BY_TAG:
            _draw_filter(canvas, controller)
        case PopUp.DATE_TIME_PICKER:
            pass
        case _:
            _draw_selector(canvas, controller, popup)


def draw_overlays(canvas: Canvas, controller: Controller) -> None:
    """Popups bottom to top, then the picker, the debug panel and toasts."""
    for popup in controller.ui.popup_stack:
        draw_popup(canvas, controller, popup)
    if controller.picker.is_active:
        draw_picker(canvas, controller)
    if controller.debug_panel:
        rect = Rect(0, max(canvas.height - 14, 0), min(48, canvas.width), min(14, canvas.height))
        canvas.clear(rect)
        canvas.draw(panel(debug_table(controller), controller.theme, "Debug"), rect)
    draw_toasts(canvas, controller)

