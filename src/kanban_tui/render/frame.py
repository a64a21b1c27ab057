"""The whole screen as one rich renderable."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.segment import Segment

from kanban_tui.render.canvas import Canvas
from kanban_tui.render.popups import draw_overlays
from kanban_tui.render.views import draw_too_small, draw_view
from kanban_tui.themes import ThemeRole

if TYPE_CHECKING:
    from rich.console import Console, ConsoleOptions, RenderResult

    from kanban_tui.controller import Controller


def compose(controller: Controller, console: Console, width: int, height: int) -> Canvas:
    """Draw the current state: the view, then popups, picker, debug panel and toasts."""
    canvas = Canvas(console, width, height, controller.theme.style(ThemeRole.GENERAL))
    if controller.too_small:
        draw_too_small(canvas, controller)
        return canvas
    draw_view(canvas, controller)
    draw_overlays(canvas, controller)
    return canvas


class Frame:
    """Renders the controller state at the size the controller was last told about."""

    def __init__(self, controller: Controller) -> None:
        self.controller = controller

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = min(options.max_width, self.controller.width)
        height = min(options.height or self.controller.height, self.controller.height)
        canvas = compose(self.controller, console, width, height)
        new_line = Segment.line()
        for line in canvas.rows():
            yield from line
            yield new_line
