"""Textual surface: forwards terminal input to the event loop and paints frames."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from textual import events
from textual.app import App
from textual.screen import Screen
from textual.widget import Widget

from kanban_tui.core.keybindings import Key
from kanban_tui.core.mouse import MouseAction, MouseEvent
from kanban_tui.debug_log import setup_debug_logging
from kanban_tui.event_loop import EventLoop, KeyPressed, MouseInput, MouseLeft, Resized
from kanban_tui.render.frame import Frame

if TYPE_CHECKING:
    from textual.app import ComposeResult
    from textual.binding import BindingType

    from kanban_tui.controller import Controller
    from kanban_tui.storage.cloud import CloudClient


def translate_key(event: events.Key) -> Key | None:
    """Map a Textual key event onto a `Key`; unknown names are ignored."""
    if event.is_printable and event.character:
        return Key.char(event.character)
    try:
        return Key.parse(event.key)
    except ValueError:
        return None


class BoardCanvas(Widget, can_focus=True):
    """One widget covering the terminal; the controller draws everything inside it."""

    DEFAULT_CSS = """
    BoardCanvas {
        width: 1fr;
        height: 1fr;
    }
    """

    def __init__(self, event_loop: EventLoop) -> None:
        super().__init__()
        self.event_loop = event_loop

    def render(self) -> Frame:
        return Frame(self.event_loop.controller)

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        key = translate_key(event)
        if key is not None:
            self.event_loop.post(KeyPressed(key))

    def on_resize(self, event: events.Resize) -> None:
        self.event_loop.post(Resized(event.size.width, event.size.height))

    def _post_mouse(self, action: MouseAction, event: events.MouseEvent) -> None:
        self.event_loop.post(MouseInput(MouseEvent(action, event.x, event.y, event.button)))

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self._post_mouse(MouseAction.DOWN, event)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        self._post_mouse(MouseAction.UP, event)

    def on_mouse_move(self, event: events.MouseMove) -> None:
        self._post_mouse(MouseAction.MOVE, event)

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self._post_mouse(MouseAction.SCROLL_UP, event)

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self._post_mouse(MouseAction.SCROLL_DOWN, event)

    def on_leave(self, event: events.Leave) -> None:
        self.event_loop.post(MouseLeft())


class BoardScreen(Screen[None], inherit_bindings=False):
    def __init__(self, event_loop: EventLoop) -> None:
        super().__init__()
        self.event_loop = event_loop

    def compose(self) -> ComposeResult:
        yield BoardCanvas(self.event_loop)


class KanbanApp(App[None], inherit_bindings=False):
    """kanban-tui application."""

    TITLE = "kanban-tui"
    ENABLE_COMMAND_PALETTE = False
    BINDINGS: ClassVar[list[BindingType]] = []

    def __init__(self, controller: Controller, cloud: CloudClient | None = None) -> None:
        super().__init__()
        self.controller = controller
        self.event_loop = EventLoop(controller, cloud=cloud, on_frame=self._on_frame)
        for theme in controller.themes:
            self.register_theme(theme.to_textual_theme())
        self.theme = controller.theme.to_textual_theme().name
        self._painted_theme = controller.theme.name

    async def on_mount(self) -> None:
        setup_debug_logging()
        await self.push_screen(BoardScreen(self.event_loop))
        self.log("Event loop starting", themes=len(self.controller.themes))
        self.run_worker(self._drive(), name="event-loop", exclusive=True)

    async def _drive(self) -> None:
        await self.event_loop.run()
        self.log("Event loop finished")
        self.exit()

    def _on_frame(self, controller: Controller) -> None:
        if controller.theme.name != self._painted_theme:
            self._painted_theme = controller.theme.name
            textual_theme = controller.theme.to_textual_theme()
            self.register_theme(textual_theme)
            self.theme = textual_theme.name
        if isinstance(self.screen, BoardScreen):
            self.screen.query_one(BoardCanvas).refresh()
