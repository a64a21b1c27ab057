"""Tests for the canvas compositor and full-frame rendering."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import pytest
from rich.console import Console
from rich.segment import Segment
from rich.style import Style
from rich.text import Text

from kanban_tui.core.enums import PopUp, View
from kanban_tui.core.geometry import Rect
from kanban_tui.render.canvas import Canvas
from kanban_tui.render.frame import Frame, compose
from tests.helpers import press, ready, type_text

if TYPE_CHECKING:
    from kanban_tui.controller import Controller

pytestmark = pytest.mark.unit


def _console(width: int = 160, height: int = 48) -> Console:
    return Console(width=width, height=height, file=io.StringIO(), color_system=None, record=True)


def _lines(canvas: Canvas) -> list[str]:
    return ["".join(segment.text for segment in row) for row in canvas.rows()]


def _screen(controller: Controller) -> str:
    canvas = compose(controller, _console(), controller.width, controller.height)
    assert len(canvas.rows()) == controller.height
    assert all(Segment.get_line_length(row) == controller.width for row in canvas.rows())
    return "\n".join(_lines(canvas))


class TestCanvas:
    def test_blank_grid(self):
        canvas = Canvas(_console(10, 3), 10, 3, Style())
        assert _lines(canvas) == [" " * 10] * 3

    def test_later_draws_overwrite(self):
        canvas = Canvas(_console(10, 2), 10, 2, Style())
        canvas.draw(Text("abcdef"), Rect(0, 0, 6, 1))
        canvas.draw(Text("X"), Rect(2, 0, 1, 1))
        assert _lines(canvas)[0] == "abXdef    "

    def test_draw_clips_to_bounds(self):
        canvas = Canvas(_console(5, 1), 5, 1, Style())
        canvas.draw(Text("abcdefgh"), Rect(3, 0, 8, 1))
        assert _lines(canvas) == ["   ab"]

    def test_clear(self):
        canvas = Canvas(_console(4, 1), 4, 1, Style())
        canvas.draw(Text("abcd"), Rect(0, 0, 4, 1))
        canvas.clear(Rect(1, 0, 2, 1))
        assert _lines(canvas) == ["a  d"]


class TestBoardView:
    def test_boards_and_cards_drawn(self, controller: Controller):
        ready(controller)
        screen = _screen(controller)
        assert "Todo (3)" in screen
        assert "Done (1)" in screen
        assert "Write docs" in screen
        assert "#bug" in screen
        assert "Help" in screen

    def test_too_small(self, controller: Controller):
        controller.resize(80, 20)
        screen = _screen(controller)
        assert "Terminal too small" in screen
        assert "Todo (3)" not in screen

    def test_frame_prints_through_console(self, controller: Controller):
        ready(controller)
        console = _console()
        console.print(Frame(controller))
        assert "Todo (3)" in console.export_text()


class TestOverlays:
    def test_card_view(self, controller: Controller):
        ready(controller)
        press(controller, "Enter")
        assert controller.ui.top_popup is PopUp.VIEW_CARD
        assert "Write docs" in _screen(controller)

    def test_palette(self, controller: Controller):
        ready(controller)
        press(controller, "Ctrl+p")
        type_text(controller, "filter")
        assert PopUp.COMMAND_PALETTE in controller.ui.popup_stack
        assert "filter" in _screen(controller)

    def test_date_picker(self, controller: Controller):
        ready(controller)
        press(controller, "Down", "Enter", "Tab", "Tab", "Enter")
        assert controller.ui.top_popup is PopUp.DATE_TIME_PICKER
        _screen(controller)

    def test_filter_popup(self, controller: Controller):
        ready(controller)
        press(controller, "Ctrl+p")
        type_text(controller, "filter by")
        press(controller, "Enter")
        assert controller.ui.top_popup is PopUp.FILTER_BY_TAG
        assert "docs" in _screen(controller)

    def test_toasts_and_debug_panel(self, controller: Controller):
        ready(controller)
        controller.toasts.clear()
        controller.toasts.info("Saved ok")
        controller.debug_panel = True
        screen = _screen(controller)
        assert "Saved ok" in screen
        assert "Debug" in screen


class TestMenus:
    def test_main_menu(self, controller: Controller):
        ready(controller)
        press(controller, "m")
        assert controller.ui.view is View.MAIN_MENU
        _screen(controller)

    def test_config_menu(self, controller: Controller):
        ready(controller)
        press(controller, "c")
        assert controller.ui.view is View.CONFIG_MENU
        _screen(controller)
