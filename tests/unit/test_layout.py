"""Tests for board and form geometry."""

from __future__ import annotations

import pytest

from kanban_tui.core.enums import Focus, PopUp, View
from kanban_tui.core.geometry import Rect
from kanban_tui.render.layout import (
    board_view_layout,
    date_field_anchor,
    is_too_small,
    popup_area,
    stack_fields,
)

pytestmark = pytest.mark.unit

B1, B2 = (0, 1), (0, 2)
C1, C2 = (1, 1), (1, 2)
AREA = Rect(0, 0, 120, 40)


class TestBoardLayout:
    def test_panels_stack_around_flexible_body(self):
        layout = board_view_layout(View.TITLE_BODY_HELP_LOG, AREA, {B1: (C1, C2), B2: ()}, 4)
        assert layout.title == Rect(0, 0, 120, 3)
        assert layout.body == Rect(0, 3, 120, 23)
        assert layout.help == Rect(0, 26, 120, 6)
        assert layout.log == Rect(0, 32, 120, 8)

    def test_zen_body_fills_area(self):
        layout = board_view_layout(View.ZEN, AREA, {}, 4)
        assert layout.body == AREA
        assert layout.title is None
        assert layout.boards == []

    def test_hit_testing(self):
        layout = board_view_layout(View.TITLE_BODY_HELP_LOG, AREA, {B1: (C1, C2), B2: ()}, 4)
        assert layout.board_at(70, 10).board_id == B2
        assert layout.card_at(10, 5).card_id == C1
        assert layout.card_at(10, 9).card_id == C2
        assert layout.card_at(10, 14) is None
        assert layout.board_at(10, 1) is None

    def test_cards_beyond_body_are_dropped(self):
        cards = tuple((2, index) for index in range(6))
        layout = board_view_layout(View.TITLE_BODY_HELP_LOG, AREA, {B1: cards}, 4)
        assert [box.card_id for box in layout.cards] == list(cards[:4])


class TestForms:
    fields = (Focus.NEW_BOARD_NAME, Focus.NEW_BOARD_DESCRIPTION, Focus.SUBMIT_BUTTON)

    def test_stack_fields(self):
        rects = stack_fields(Rect(0, 0, 60, 20), self.fields)
        assert [rects[focus].y for focus in self.fields] == [1, 4, 10]
        assert rects[Focus.NEW_BOARD_DESCRIPTION].height == 6
        assert rects[Focus.SUBMIT_BUTTON].width == 58

    def test_multi_line_fields_shrink(self):
        rects = stack_fields(Rect(0, 0, 60, 12), self.fields)
        assert rects[Focus.NEW_BOARD_DESCRIPTION].height == 4

    def test_date_anchor_below_view_card_due_date(self):
        area = Rect(0, 0, 100, 50)
        assert date_field_anchor(View.ZEN, [PopUp.VIEW_CARD], area) == (11, 15)
        assert date_field_anchor(View.ZEN, [], area) is None


class TestPopups:
    def test_palette_is_centred(self):
        assert popup_area(Rect(0, 0, 100, 40), PopUp.COMMAND_PALETTE) == Rect(20, 6, 60, 28)

    def test_list_popup_sizes_to_rows(self):
        assert popup_area(Rect(0, 0, 100, 40), PopUp.CHANGE_THEME, rows=5) == Rect(33, 16, 33, 7)


@pytest.mark.parametrize(
    ("width", "height", "expected"),
    [(109, 30, True), (110, 29, True), (110, 30, False), (200, 60, False)],
)
def test_is_too_small(width: int, height: int, expected: bool) -> None:
    assert is_too_small(width, height) is expected
