"""Tests for the event loop: dispatch, request hand-off and shutdown drain."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from kanban_tui.core.enums import Focus, InputStatus, ToastKind
from kanban_tui.core.keybindings import Key
from kanban_tui.event_loop import EventLoop, KeyPressed, MouseLeft, Resized, Tick
from kanban_tui.io_worker import ListLocalSaves
from tests.helpers import ready

if TYPE_CHECKING:
    from pathlib import Path

    from kanban_tui.controller import Controller

pytestmark = pytest.mark.integration


class TestDispatch:
    def test_routes_events_to_controller(self, controller: Controller):
        ready(controller)
        loop = EventLoop(controller)
        loop.dispatch(Resized(100, 40))
        assert (controller.width, controller.height) == (100, 40)

        loop.dispatch(KeyPressed(Key("Tab")))
        assert controller.ui.focus is Focus.HELP

        controller.toasts.push("Info", "short", ToastKind.INFO, duration=1.0, now=0.0)
        loop.dispatch(Tick(5.0))
        assert len(controller.toasts) == 0

        loop.dispatch(MouseLeft())
        assert controller.ui.mouse.position is None

    def test_tick_interval_follows_config(self, controller: Controller):
        loop = EventLoop(controller)
        assert loop.tick_interval == pytest.approx(controller.config.tickrate / 1000)

    def test_dropped_duplicate_settles_loading(self, controller: Controller, save_dir: Path):
        ready(controller)
        loop = EventLoop(controller)
        controller.request(ListLocalSaves(save_dir))
        controller.request(ListLocalSaves(save_dir))
        loop.flush_requests()
        assert loop.worker.pending == (ListLocalSaves(save_dir),)
        assert controller.ui.is_loading
        assert controller.requests == []


class TestRun:
    async def test_quit_drains_worker_before_returning(
        self, controller: Controller, save_dir: Path
    ):
        frames: list[InputStatus] = []
        loop = EventLoop(controller, on_frame=lambda ctrl: frames.append(ctrl.ui.input_status))
        loop.post(KeyPressed(Key("q")))

        await loop.run()

        assert not loop.running
        assert controller.should_quit
        assert frames
        assert controller.ui.input_status is InputStatus.INITIALIZED
        assert not controller.ui.is_loading
        assert len(list(save_dir.glob("kanban_*.json"))) == 1
        assert controller.last_save_name is not None
