"""Tests for the view/popup/focus state machine."""

from __future__ import annotations

import pytest
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule

from kanban_tui.core.enums import Focus, InputStatus, PopUp, View
from kanban_tui.core.ui_state import BackResult, ListSelections, UIState

pytestmark = pytest.mark.unit


class TestFocus:
    def test_initial_focus_skips_title(self):
        state = UIState(view=View.TITLE_BODY_HELP_LOG)
        assert state.focus is Focus.BODY

    def test_cycle_wraps(self):
        state = UIState(view=View.BODY_HELP)
        assert state.next_focus() is Focus.HELP
        assert state.next_focus() is Focus.BODY
        assert state.prev_focus() is Focus.HELP

    def test_set_focus_ignores_unavailable_targets(self):
        state = UIState(view=View.ZEN)
        state.set_focus(Focus.LOG)
        assert state.focus is Focus.BODY

    def test_view_change_snaps_focus(self):
        state = UIState(view=View.TITLE_BODY_LOG)
        state.set_focus(Focus.LOG)
        state.set_view(View.ZEN)
        assert state.focus is Focus.BODY
        assert state.prev_view is View.TITLE_BODY_LOG


class TestInputStatus:
    def test_take_input_only_on_text_fields(self):
        state = UIState(view=View.NEW_BOARD, input_status=InputStatus.INITIALIZED)
        assert state.take_user_input()
        state.set_focus(Focus.SUBMIT_BUTTON)
        assert state.input_status is InputStatus.INITIALIZED
        assert not state.take_user_input()

    def test_unknown_transition_is_ignored(self):
        state = UIState(input_status=InputStatus.INIT)
        assert state.transition("take_input") is InputStatus.INIT
        assert state.transition("initialized") is InputStatus.INITIALIZED


class TestPopups:
    def test_push_saves_and_pop_restores_focus(self):
        state = UIState(view=View.BODY_HELP, input_status=InputStatus.INITIALIZED)
        state.set_focus(Focus.HELP)
        assert state.push_popup(PopUp.COMMAND_PALETTE)
        assert state.focus is Focus.COMMAND_PALETTE_COMMAND

        assert state.pop_popup() is PopUp.COMMAND_PALETTE
        assert state.focus is Focus.HELP

    def test_push_duplicate_rejected(self):
        state = UIState(view=View.ZEN)
        assert state.push_popup(PopUp.CHANGE_THEME)
        assert not state.push_popup(PopUp.CHANGE_THEME)
        assert state.popup_stack == [PopUp.CHANGE_THEME]

    def test_push_stops_user_input_and_pop_restores_it(self):
        state = UIState(view=View.NEW_CARD, input_status=InputStatus.INITIALIZED)
        state.take_user_input()
        state.push_popup(PopUp.DATE_TIME_PICKER)
        assert state.input_status is InputStatus.INITIALIZED
        state.pop_popup()
        assert state.input_status is InputStatus.USER_INPUT
        assert state.focus is Focus.NEW_CARD_NAME

    def test_focusless_popup_keeps_focus(self):
        state = UIState(view=View.BODY_HELP)
        state.set_focus(Focus.HELP)
        state.push_popup(PopUp.CHANGE_UI_MODE)
        assert state.focus_is_valid()
        assert state.focus is Focus.HELP


class TestGoBack:
    def test_pops_before_changing_view(self):
        state = UIState(view=View.MAIN_MENU)
        state.set_view(View.CONFIG_MENU)
        state.push_popup(PopUp.CHANGE_DATE_FORMAT)
        assert state.go_back() is BackResult.POPPED
        assert state.go_back() is BackResult.VIEW_RESTORED
        assert state.view is View.MAIN_MENU
        assert state.go_back() is BackResult.AT_ROOT

    def test_without_previous_view_returns_to_main_menu(self):
        state = UIState(view=View.ZEN)
        assert state.go_back() is BackResult.VIEW_RESTORED
        assert state.view is View.MAIN_MENU


class TestListSelections:
    @pytest.mark.parametrize(
        ("index", "length", "delta", "expected"),
        [(0, 3, -1, 2), (2, 3, 1, 0), (1, 3, 1, 2), (5, 0, 1, 0)],
    )
    def test_step_wraps(self, index: int, length: int, delta: int, expected: int) -> None:
        assert ListSelections.step(index, length, delta) == expected


class FocusInvariantMachine(RuleBasedStateMachine):
    """Focus stays inside the rendered mode's focus set across any transition."""

    def __init__(self) -> None:
        super().__init__()
        self.state = UIState(view=View.TITLE_BODY_HELP_LOG, input_status=InputStatus.INITIALIZED)

    @rule(view=st.sampled_from(list(View)))
    def set_view(self, view: View) -> None:
        self.state.set_view(view)

    @rule(popup=st.sampled_from(list(PopUp)))
    def push(self, popup: PopUp) -> None:
        self.state.push_popup(popup)

    @rule()
    def pop(self) -> None:
        self.state.pop_popup()

    @rule()
    def next_focus(self) -> None:
        self.state.next_focus()

    @rule()
    def prev_focus(self) -> None:
        self.state.prev_focus()

    @rule(focus=st.sampled_from(list(Focus)))
    def set_focus(self, focus: Focus) -> None:
        self.state.set_focus(focus)

    @rule()
    def take_input(self) -> None:
        self.state.take_user_input()

    @rule()
    def go_back(self) -> None:
        self.state.go_back()

    @invariant()
    def focus_is_available(self) -> None:
        assert self.state.focus_is_valid()

    @invariant()
    def user_input_only_on_text_fields(self) -> None:
        if self.state.input_status is InputStatus.USER_INPUT:
            assert self.state.focus.is_text_input

    @invariant()
    def popups_unique(self) -> None:
        assert len(self.state.popup_stack) == len(set(self.state.popup_stack))


TestFocusInvariant = FocusInvariantMachine.TestCase
