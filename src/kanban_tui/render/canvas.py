"""Cell-addressed compositor over rich segments.

Renderables are rendered into rectangles and spliced into a grid of segment lines,
so later draws (popups, the picker, toasts) overwrite earlier ones.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.segment import Segment

from kanban_tui.core.geometry import Rect

if TYPE_CHECKING:
    from rich.console import Console, RenderableType
    from rich.style import Style


class Canvas:
    def __init__(self, console: Console, width: int, height: int, style: Style) -> None:
        self.console = console
        self.width = width
        self.height = height
        self.style = style
        self.bounds = Rect(0, 0, width, height)
        self.lines: list[list[Segment]] = [self._blank(width) for _ in range(height)]

    def _blank(self, width: int) -> list[Segment]:
        return [Segment(" " * width, self.style)] if width > 0 else []

    def draw(self, renderable: RenderableType, rect: Rect) -> None:
        area = rect.clip(self.bounds)
        if area.area == 0:
            return
        options = self.console.options.update_dimensions(area.width, area.height)
        rendered = self.console.render_lines(renderable, options, style=self.style, pad=True)
        for offset, segments in enumerate(rendered[: area.height]):
            self._splice(area.y + offset, area.x, area.width, segments)

    def clear(self, rect: Rect) -> None:
        area = rect.clip(self.bounds)
        for row in range(area.y, area.bottom):
            self._splice(row, area.x, area.width, self._blank(area.width))

    def _splice(self, row: int, x: int, width: int, segments: list[Segment]) -> None:
        left, _, right = Segment.divide(self.lines[row], [x, x + width, self.width])
        self.lines[row] = [*left, *segments, *right]

    def rows(self) -> list[list[Segment]]:
        return self.lines
