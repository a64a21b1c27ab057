"""Surface-independent mouse events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class MouseAction(StrEnum):
    DOWN = "down"
    UP = "up"
    MOVE = "move"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"


@dataclass(frozen=True, slots=True)
class MouseEvent:
    action: MouseAction
    x: int
    y: int
    button: int = 1
