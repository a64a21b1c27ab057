"""Screen geometry shared by the frame renderer and mouse hit-testing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kanban_tui.core.enums import MULTI_LINE_FOCUSES, Focus, PopUp, View
from kanban_tui.core.geometry import Rect
from kanban_tui.limits import MIN_TERM_HEIGHT, MIN_TERM_WIDTH

if TYPE_CHECKING:
    from collections.abc import Sequence

    from kanban_tui.core.models import ItemId
    from kanban_tui.core.projection import VisibleMap

TITLE_HEIGHT = 3
HELP_HEIGHT = 6
LOG_HEIGHT = 8
FIELD_HEIGHT = 3
MULTI_LINE_FIELD_HEIGHT = 6
MIN_CARD_HEIGHT = 3


def is_too_small(width: int, height: int) -> bool:
    return width < MIN_TERM_WIDTH or height < MIN_TERM_HEIGHT


@dataclass(frozen=True, slots=True)
class BoardBox:
    board_id: ItemId
    rect: Rect


@dataclass(frozen=True, slots=True)
class CardBox:
    board_id: ItemId
    card_id: ItemId
    rect: Rect


@dataclass(slots=True)
class BoardLayout:
    body: Rect
    title: Rect | None = None
    help: Rect | None = None
    log: Rect | None = None
    boards: list[BoardBox] = field(default_factory=list)
    cards: list[CardBox] = field(default_factory=list)

    def board_at(self, x: int, y: int) -> BoardBox | None:
        for box in self.boards:
            if box.rect.contains(x, y):
                return box
        return None

    def card_at(self, x: int, y: int) -> CardBox | None:
        for box in self.cards:
            if box.rect.contains(x, y):
                return box
        return None


def board_view_layout(
    view: View, area: Rect, visible: VisibleMap, cards_to_show: int
) -> BoardLayout:
    parts = view.parts
    heights: list[int] = []
    if "title" in parts:
        heights.append(TITLE_HEIGHT)
    heights.append(0)
    if "help" in parts:
        heights.append(HELP_HEIGHT)
    if "log" in parts:
        heights.append(LOG_HEIGHT)
    rows = iter(area.split_rows(heights))

    title = next(rows) if "title" in parts else None
    body = next(rows)
    help_rect = next(rows) if "help" in parts else None
    log_rect = next(rows) if "log" in parts else None
    layout = BoardLayout(body=body, title=title, help=help_rect, log=log_rect)

    board_ids = list(visible)
    for column, board_id in zip(body.split_columns(len(board_ids)), board_ids, strict=True):
        layout.boards.append(BoardBox(board_id, column))
        inner = column.inner(1)
        card_height = max(inner.height // max(cards_to_show, 1), MIN_CARD_HEIGHT)
        for index, card_id in enumerate(visible[board_id]):
            top = inner.y + index * card_height
            if top + card_height > inner.bottom:
                break
            layout.cards.append(
                CardBox(board_id, card_id, Rect(inner.x, top, inner.width, card_height))
            )
    return layout


def form_area(area: Rect) -> Rect:
    return area.centered(max(area.width * 3 // 5, 60), area.height - 2)


def stack_fields(area: Rect, fields: Sequence[Focus]) -> dict[Focus, Rect]:
    """Lay form fields top to bottom inside a bordered `area`.

    Multi-line fields shrink towards a single line when the area is too short.
    """
    inner = area.inner(1)
    multi = sum(1 for focus in fields if focus in MULTI_LINE_FOCUSES)
    single_total = (len(fields) - multi) * FIELD_HEIGHT
    multi_height = MULTI_LINE_FIELD_HEIGHT
    if multi and single_total + multi * multi_height > inner.height:
        multi_height = max(FIELD_HEIGHT, (inner.height - single_total) // multi)
    rects: dict[Focus, Rect] = {}
    y = inner.y
    for focus in fields:
        height = multi_height if focus in MULTI_LINE_FOCUSES else FIELD_HEIGHT
        rects[focus] = Rect(inner.x, y, inner.width, height)
        y += height
    return rects


def popup_area(area: Rect, popup: PopUp, rows: int = 0) -> Rect:
    """Where `popup` is drawn; list popups size themselves to `rows` items."""
    match popup:
        case PopUp.VIEW_CARD:
            return area.centered(area.width * 4 // 5, area.height * 9 // 10)
        case PopUp.COMMAND_PALETTE:
            return area.centered(area.width * 3 // 5, area.height * 7 // 10)
        case PopUp.EDIT_THEME_STYLE:
            return area.centered(area.width * 3 // 5, area.height * 3 // 5)
        case PopUp.FILTER_BY_TAG:
            return area.centered(area.width // 2, min(area.height - 4, rows + 2 + FIELD_HEIGHT))
        case (
            PopUp.EDIT_GENERAL_CONFIG
            | PopUp.CUSTOM_HEX_COLOR_PROMPT_FG
            | PopUp.CUSTOM_HEX_COLOR_PROMPT_BG
        ):
            return area.centered(area.width // 2, FIELD_HEIGHT * 2 + 2)
        case PopUp.SAVE_THEME_PROMPT | PopUp.CONFIRM_DISCARD_CARD_CHANGES:
            return area.centered(area.width // 2, FIELD_HEIGHT * 2 + 2)
        case PopUp.EDIT_SPECIFIC_KEY_BINDING:
            return area.centered(area.width // 2, 7)
        case _:
            return area.centered(max(area.width // 3, 30), min(area.height - 4, rows + 2))


VIEW_CARD_FIELDS: tuple[Focus, ...] = (
    Focus.CARD_NAME,
    Focus.CARD_DESCRIPTION,
    Focus.CARD_DUE_DATE,
    Focus.CARD_PRIORITY,
    Focus.CARD_STATUS,
    Focus.CARD_TAGS,
    Focus.CARD_COMMENTS,
    Focus.SUBMIT_BUTTON,
)


def date_field_anchor(view: View, popups: Sequence[PopUp], area: Rect) -> tuple[int, int] | None:
    """Top-left corner just below the due-date field the picker opens from."""
    if PopUp.VIEW_CARD in popups:
        fields = stack_fields(popup_area(area, PopUp.VIEW_CARD), VIEW_CARD_FIELDS)
        rect = fields[Focus.CARD_DUE_DATE]
    elif view is View.NEW_CARD:
        fields = stack_fields(form_area(area), View.NEW_CARD.available_focus)
        rect = fields[Focus.NEW_CARD_DUE_DATE]
    else:
        return None
    return rect.x, rect.bottom
