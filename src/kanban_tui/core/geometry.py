"""Terminal-cell rectangles shared by the layout, the picker and mouse hit-testing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def inner(self, margin: int = 1) -> Rect:
        return Rect(
            self.x + margin,
            self.y + margin,
            max(self.width - 2 * margin, 0),
            max(self.height - 2 * margin, 0),
        )

    def clip(self, bounds: Rect) -> Rect:
        """Intersection with `bounds`; zero-sized when they do not overlap."""
        x = max(self.x, bounds.x)
        y = max(self.y, bounds.y)
        right = min(self.right, bounds.right)
        bottom = min(self.bottom, bounds.bottom)
        return Rect(x, y, max(right - x, 0), max(bottom - y, 0))

    def split_rows(self, heights: list[int]) -> list[Rect]:
        """Stack rows top to bottom; a height of 0 takes the remaining space."""
        fixed = sum(heights)
        flexible = heights.count(0)
        remaining = max(self.height - fixed, 0)
        rects: list[Rect] = []
        y = self.y
        seen = 0
        for height in heights:
            if height == 0:
                seen += 1
                share = remaining // flexible
                height = remaining - share * (flexible - 1) if seen == flexible else share
            rects.append(Rect(self.x, y, self.width, height))
            y += height
        return rects

    def split_columns(self, count: int) -> list[Rect]:
        """Equal-width columns; the last one absorbs the remainder."""
        if count <= 0:
            return []
        width = self.width // count
        rects = [Rect(self.x + width * index, self.y, width, self.height) for index in range(count)]
        last = rects[-1]
        rects[-1] = Rect(last.x, last.y, self.right - last.x, last.height)
        return rects

    def centered(self, width: int, height: int) -> Rect:
        width = min(width, self.width)
        height = min(height, self.height)
        return Rect(
            self.x + (self.width - width) // 2,
            self.y + (self.height - height) // 2,
            width,
            height,
        )


def correct_anchor(
    anchor: tuple[int, int], width: int, height: int, viewport: Rect
) -> tuple[int, int]:
    """Slide a `width`x`height` box anchored at `anchor` until it lies inside `viewport`.

    Coordinates saturate at the viewport origin when the box is larger than the viewport.
    """
    x, y = anchor
    x = max(viewport.x, min(x, viewport.right - width))
    y = max(viewport.y, min(y, viewport.bottom - height))
    return x, y
