"""Rich building blocks shared by views and popups.

Every helper takes the active theme and returns a renderable sized by the canvas
rectangle it is drawn into.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from rich import box
from rich.align import Align
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from kanban_tui import debug_log
from kanban_tui.constants import SCROLL_BAR_CHAR, SCROLL_TRACK_CHAR
from kanban_tui.themes import ThemeRole

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import RenderableType
    from rich.style import Style

    from kanban_tui.core.keybindings import KeyBindings
    from kanban_tui.core.text_buffer import TextBuffer
    from kanban_tui.themes import Theme

_LOG_ROLES: dict[str, ThemeRole] = {
    "ERROR": ThemeRole.LOG_ERROR,
    "CRITICAL": ThemeRole.LOG_ERROR,
    "WARNING": ThemeRole.LOG_WARN,
    "INFO": ThemeRole.LOG_INFO,
    "DEBUG": ThemeRole.LOG_DEBUG,
}

# ---------------------------------------------------------------------------
# Borders and panels
# ---------------------------------------------------------------------------


def border_style(theme: Theme, focused: bool = False, hovered: bool = False) -> Style:
    if focused:
        return theme.style(ThemeRole.KEYBOARD_FOCUS)
    if hovered:
        return theme.style(ThemeRole.MOUSE_FOCUS)
    return theme.style(ThemeRole.GENERAL)


def panel(
    body: RenderableType,
    theme: Theme,
    title: str | Text | None = None,
    *,
    focused: bool = False,
    hovered: bool = False,
    subtitle: str | Text | None = None,
    padding: tuple[int, int] = (0, 1),
) -> Panel:
    return Panel(
        body,
        title=title,
        subtitle=subtitle,
        box=box.ROUNDED,
        border_style=border_style(theme, focused, hovered),
        style=theme.style(ThemeRole.GENERAL),
        padding=padding,
        expand=True,
    )


def button(theme: Theme, label: str, focused: bool) -> Panel:
    style = theme.style(ThemeRole.KEYBOARD_FOCUS) if focused else theme.style(ThemeRole.GENERAL)
    return panel(Align.center(Text(label, style=style)), theme, focused=focused)


def centered_message(theme: Theme, message: str) -> Align:
    text = Text(message, style=theme.style(ThemeRole.INACTIVE_TEXT))
    return Align.center(text, vertical="middle")


def truncate(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return value[: max(limit - 3, 0)] + "..."


# ---------------------------------------------------------------------------
# Text fields
# ---------------------------------------------------------------------------


def _field_line(
    theme: Theme, line: str, row: int, buffer: TextBuffer, editing: bool, start: int
) -> Text:
    text = Text(line[start:], style=theme.style(ThemeRole.GENERAL), no_wrap=True, overflow="crop")
    selection = buffer.selection_range() if editing else None
    if selection is not None:
        (first_row, first_col), (last_row, last_col) = selection
        if first_row <= row <= last_row:
            begin = first_col if row == first_row else 0
            end = last_col if row == last_row else len(line)
            if end > start:
                text.stylize(theme.style(ThemeRole.LIST_SELECT), max(begin - start, 0), end - start)
    if editing and row == buffer.row:
        column = buffer.col - start
        if column >= len(text.plain):
            text.append(" ")
        text.stylize("reverse", column, column + 1)
    return text


def text_field(
    theme: Theme,
    title: str,
    buffer: TextBuffer,
    *,
    height: int,
    width: int,
    focused: bool,
    editing: bool,
    line_numbers: bool = False,
) -> Panel:
    """A bordered text input; the cursor is drawn while `editing`."""
    inner_height = max(height - 2, 1)
    inner_width = max(width - 4, 1)
    if buffer.is_empty() and not editing:
        placeholder = buffer.placeholder or ""
        body: RenderableType = Text(placeholder, style=theme.style(ThemeRole.INACTIVE_TEXT))
        return panel(body, theme, title, focused=focused)

    first_row, lines = buffer.visible_window(inner_height)
    gutter = len(str(len(buffer.lines))) + 1 if line_numbers else 0
    start = max(0, buffer.col - (inner_width - gutter) + 1) if editing else 0
    rendered = Text(no_wrap=True, overflow="crop")
    for index, line in enumerate(lines):
        row = first_row + index
        if index:
            rendered.append("\n")
        if line_numbers:
            rendered.append(f"{row + 1:>{gutter - 1}} ", style=theme.style(ThemeRole.INACTIVE_TEXT))
        rendered.append_text(_field_line(theme, line, row, buffer, editing, start))
    title_text = f"{title} (editing)" if editing else title
    return panel(rendered, theme, title_text, focused=focused)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def scrollbar(total: int, first: int, visible: int) -> list[str]:
    """One character per visible row: a thumb over a track."""
    if visible <= 0:
        return []
    if total <= visible:
        return [" "] * visible
    thumb = max(1, visible * visible // total)
    position = first * (visible - thumb) // max(total - visible, 1)
    return [
        SCROLL_BAR_CHAR if position <= row < position + thumb else SCROLL_TRACK_CHAR
        for row in range(visible)
    ]


def window_start(selected: int, total: int, visible: int) -> int:
    if total <= visible or visible <= 0:
        return 0
    return max(0, min(selected - visible + 1, total - visible)) if selected >= visible else 0


def list_body(
    theme: Theme,
    items: Sequence[str | Text],
    selected: int | None,
    *,
    visible: int,
    show_scrollbar: bool = True,
    highlight: bool = True,
) -> RenderableType:
    """Windowed item list keeping `selected` on screen."""
    total = len(items)
    first = window_start(selected or 0, total, visible)
    shown = items[first : first + visible]
    bars = scrollbar(total, first, len(shown)) if show_scrollbar else []
    grid = Table.grid(expand=True)
    grid.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
    if bars:
        grid.add_column(width=1)
    for index, item in enumerate(shown):
        is_selected = highlight and selected is not None and first + index == selected
        label = item.copy() if isinstance(item, Text) else Text(item)
        label.no_wrap = True
        if is_selected:
            label = Text("> ").append_text(label)
            label.stylize(theme.style(ThemeRole.LIST_SELECT))
        else:
            label = Text("  ").append_text(label)
        if bars:
            grid.add_row(label, Text(bars[index], style=theme.style(ThemeRole.INACTIVE_TEXT)))
        else:
            grid.add_row(label)
    return grid


def list_panel(
    theme: Theme,
    title: str,
    items: Sequence[str | Text],
    selected: int | None,
    *,
    height: int,
    focused: bool,
    show_scrollbar: bool = True,
) -> Panel:
    body = list_body(
        theme, items, selected, visible=max(height - 2, 0), show_scrollbar=show_scrollbar
    )
    return panel(body, theme, title, focused=focused)


# ---------------------------------------------------------------------------
# Help and log
# ---------------------------------------------------------------------------


def help_text(theme: Theme, bindings: KeyBindings) -> Text:
    """Flowing `keys: description` pairs for the compact help panel."""
    text = Text()
    for index, (action, _keys) in enumerate(bindings.items()):
        if index:
            text.append("  ")
        text.append(bindings.label_for(action), style=theme.style(ThemeRole.HELP_KEY))
        text.append(f": {action.description}", style=theme.style(ThemeRole.HELP_TEXT))
    return text


def help_rows(theme: Theme, bindings: KeyBindings) -> list[Text]:
    width = max((len(bindings.label_for(action)) for action, _ in bindings.items()), default=0)
    rows: list[Text] = []
    for action, _keys in bindings.items():
        label = f"{bindings.label_for(action):<{width}}  "
        row = Text(label, style=theme.style(ThemeRole.HELP_KEY))
        row.append(action.description, style=theme.style(ThemeRole.HELP_TEXT))
        rows.append(row)
    return rows


def log_lines(theme: Theme, count: int, offset: int = 0) -> Text:
    """The newest `count` log records, `offset` records back from the tail."""
    entries = debug_log.tail(count + offset)[: max(count, 0)]
    text = Text(no_wrap=True, overflow="ellipsis")
    for index, entry in enumerate(entries):
        if index:
            text.append("\n")
        stamp = datetime.fromtimestamp(entry.timestamp).strftime("%H:%M:%S")
        role = _LOG_ROLES.get(entry.group, ThemeRole.LOG_INFO)
        text.append(f"{stamp} ", style=theme.style(ThemeRole.INACTIVE_TEXT))
        text.append(f"[{entry.group}] {entry.message}", style=theme.style(role))
    return text


def log_panel(theme: Theme, *, height: int, offset: int, focused: bool) -> Panel:
    title = "Log" if offset == 0 else f"Log (scrolled back {offset})"
    return panel(log_lines(theme, max(height - 2, 0), offset), theme, title, focused=focused)
