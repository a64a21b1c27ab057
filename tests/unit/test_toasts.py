"""Tests for the toast queue and its fade envelope."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from rich.color import ColorTriplet

from kanban_tui.core.enums import ToastKind
from kanban_tui.limits import TOAST_DEFAULT_DURATION, TOAST_ERROR_DURATION
from kanban_tui.widgets.toasts import ToastManager, default_duration, lerp_color

if TYPE_CHECKING:
    from tests.conftest import FakeClock

pytestmark = pytest.mark.unit

BLACK = ColorTriplet(0, 0, 0)
WHITE = ColorTriplet(200, 100, 50)


class TestEnvelope:
    def test_default_durations(self):
        assert default_duration(ToastKind.INFO) == TOAST_DEFAULT_DURATION
        assert default_duration(ToastKind.WARNING) == TOAST_DEFAULT_DURATION
        assert default_duration(ToastKind.ERROR) == TOAST_ERROR_DURATION
        assert default_duration(ToastKind.LOADING) > TOAST_ERROR_DURATION

    def test_lerp_clamps_ratio(self):
        assert lerp_color(BLACK, WHITE, 0.5) == ColorTriplet(100, 50, 25)
        assert lerp_color(BLACK, WHITE, 2.0) == WHITE
        assert lerp_color(BLACK, WHITE, -1.0) == BLACK

    @pytest.mark.parametrize(
        ("elapsed", "ratio"),
        [(0.0, 0.0), (0.1, 0.5), (1.0, 1.0), (2.8, 0.5), (3.0, 0.0)],
    )
    def test_fade_ratio(self, elapsed: float, ratio: float) -> None:
        toast = ToastManager().push("t", "b", ToastKind.INFO, duration=3.0, now=0.0)
        assert toast.fade_ratio(elapsed) == pytest.approx(ratio)


class TestManager:
    def test_push_starts_at_background_when_animated(self):
        manager = ToastManager(colors={kind: WHITE for kind in ToastKind})
        toast = manager.push("Info", "hello", ToastKind.INFO, now=0.0)
        assert toast.color == BLACK
        manager.tick(now=1.0)
        assert toast.color == WHITE

    def test_push_without_animations_uses_base_colour(self):
        manager = ToastManager(animations=False, colors={kind: WHITE for kind in ToastKind})
        toast = manager.push("Info", "hello", ToastKind.INFO, now=0.0)
        assert toast.color == WHITE

    def test_tick_drops_expired(self):
        manager = ToastManager()
        manager.push("Info", "short", ToastKind.INFO, duration=1.0, now=0.0)
        manager.push("Error", "long", ToastKind.ERROR, now=0.0)
        manager.tick(now=1.0)
        assert [toast.body for toast in manager.toasts] == ["long"]
        manager.tick(now=TOAST_ERROR_DURATION)
        assert len(manager) == 0

    def test_injected_clock_drives_fade_and_expiry(self, clock: FakeClock):
        manager = ToastManager(colors={kind: WHITE for kind in ToastKind}, clock=clock)
        toast = manager.info("hello")
        assert toast.start == clock()
        manager.tick()
        assert toast.color == BLACK

        clock.advance(1.0)
        manager.tick()
        assert toast.color == WHITE

        clock.advance(TOAST_DEFAULT_DURATION)
        manager.tick()
        assert len(manager) == 0

    def test_helpers_default_titles(self):
        manager = ToastManager()
        assert manager.info("a").title == "Info"
        assert manager.warning("b").title == "Warning"
        assert manager.error("c", title="Save failed").title == "Save failed"
        assert manager.loading("d").kind is ToastKind.LOADING

    def test_dismiss_loading_by_title(self):
        manager = ToastManager()
        manager.loading("saving", title="Save")
        manager.loading("syncing", title="Sync")
        manager.info("note")
        manager.dismiss_loading("Save")
        assert [toast.title for toast in manager.toasts] == ["Sync", "Info"]
        manager.dismiss_loading()
        assert [toast.title for toast in manager.toasts] == ["Info"]

    def test_clear(self):
        manager = ToastManager()
        manager.info("a")
        manager.clear()
        assert len(manager) == 0


class TestVisible:
    def test_loading_leaves_a_slot_for_regular(self):
        manager = ToastManager(max_visible=3)
        for index in range(3):
            manager.loading(f"load {index}")
        manager.info("note")
        shown = manager.visible()
        assert [toast.body for toast in shown] == ["load 0", "load 1", "note"]

    def test_leftover_slots_go_to_loading(self):
        manager = ToastManager(max_visible=3)
        manager.loading("load 0")
        manager.loading("load 1")
        manager.loading("load 2")
        assert [toast.body for toast in manager.visible()] == ["load 0", "load 1", "load 2"]

    def test_regular_capped(self):
        manager = ToastManager(max_visible=2)
        for index in range(4):
            manager.info(f"note {index}")
        assert [toast.body for toast in manager.visible()] == ["note 0", "note 1"]

    def test_zero_slots(self):
        manager = ToastManager(max_visible=0)
        manager.info("a")
        assert manager.visible() == []
