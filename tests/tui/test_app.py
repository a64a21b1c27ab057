"""Textual app tests: key translation and a short pilot-driven session."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from textual import events

from kanban_tui.app import BoardCanvas, KanbanApp, translate_key
from kanban_tui.core.enums import InputStatus, View
from kanban_tui.core.keybindings import Key
from tests.helpers import wait_until

if TYPE_CHECKING:
    from kanban_tui.controller import Controller

pytestmark = pytest.mark.tui


class TestTranslateKey:
    @pytest.mark.parametrize(
        ("name", "character", "expected"),
        [
            ("a", "a", Key("a")),
            ("D", "D", Key("D")),
            ("down", None, Key("Down")),
            ("shift+up", None, Key("Up", shift=True)),
            ("ctrl+p", None, Key("p", ctrl=True)),
            ("shift+tab", None, Key("BackTab")),
            ("f13", None, None),
        ],
    )
    def test_translation(self, name: str, character: str | None, expected: Key | None) -> None:
        assert translate_key(events.Key(name, character)) == expected


class TestSession:
    async def test_keys_reach_controller_and_quit_exits(self, controller: Controller):
        app = KanbanApp(controller)
        async with app.run_test(size=(160, 48)) as pilot:
            await wait_until(
                lambda: controller.ui.input_status is InputStatus.INITIALIZED,
                description="initialization",
            )
            assert isinstance(app.focused, BoardCanvas)

            await pilot.press("down")
            await wait_until(
                lambda: controller.current_card().name == "Fix bug",
                description="selection to move",
            )

            await pilot.press("m")
            await wait_until(
                lambda: controller.ui.view is View.MAIN_MENU,
                description="main menu",
            )

            await pilot.press("q")
            await wait_until(lambda: controller.should_quit, description="quit")
            await wait_until(lambda: not app.event_loop.running, description="loop to stop")

    async def test_registers_controller_themes(self, controller: Controller):
        app = KanbanApp(controller)
        async with app.run_test(size=(160, 48)) as pilot:
            assert app.theme == controller.theme.to_textual_theme().name
            await pilot.press("q")
            await wait_until(lambda: not app.event_loop.running, description="loop to stop")
