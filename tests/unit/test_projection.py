"""Tests for tag filtering, the visible window and selection movement."""

from __future__ import annotations

import pytest

from kanban_tui.core.enums import NavigationDirection
from kanban_tui.core.models import Board, Card, Workspace
from kanban_tui.core.projection import (
    BoardSlice,
    Viewport,
    filter_projection,
    full_projection,
    navigate,
    snap_selection,
    tag_histogram,
)

pytestmark = pytest.mark.unit


def _ids(count: int) -> tuple[tuple[int, int], ...]:
    return tuple((0, index) for index in range(count))


class TestTagFilter:
    def test_histogram_is_case_folded_and_sorted(self, workspace: Workspace):
        assert tag_histogram(workspace) == [("docs", 2), ("bug", 1), ("writing", 1)]

    def test_empty_filter_is_full_projection(self, workspace: Workspace):
        assert filter_projection(workspace, []) == full_projection(workspace)

    def test_filter_keeps_matching_cards_and_drops_empty_boards(self, workspace: Workspace):
        slices = filter_projection(workspace, ["BUG"])
        todo = workspace.boards[0]
        assert slices == [BoardSlice(todo.id, (todo.cards[1].id,))]

    def test_filter_matches_any_tag(self, workspace: Workspace):
        slices = filter_projection(workspace, ["bug", "docs"])
        assert [len(board_slice.card_ids) for board_slice in slices] == [2, 1]

    def test_filter_preserves_card_order(self):
        cards = [Card(name=f"c{index}", tags=["t"]) for index in range(4)]
        workspace = Workspace(boards=[Board(name="b", cards=cards)])
        (board_slice,) = filter_projection(workspace, ["t"])
        assert board_slice.card_ids == tuple(card.id for card in cards)


class TestViewport:
    def test_project_windows_boards_and_cards(self):
        slices = [BoardSlice((1, index), _ids(6)) for index in range(5)]
        viewport = Viewport(board_offset=1)
        visible = viewport.project(slices, boards=3, cards=2)
        assert list(visible) == [(1, 1), (1, 2), (1, 3)]
        assert all(cards == _ids(2) for cards in visible.values())

    def test_offsets_clamped_after_shrink(self):
        slices = [BoardSlice((1, 0), _ids(3))]
        viewport = Viewport(board_offset=4, card_offsets={(1, 0): 5, (9, 9): 1})
        viewport.project(slices, boards=2, cards=2)
        assert viewport.board_offset == 0
        assert viewport.card_offsets == {(1, 0): 1}

    def test_scroll_to_moves_minimally(self):
        slices = [BoardSlice((1, index), _ids(10)) for index in range(6)]
        viewport = Viewport()
        viewport.scroll_to(slices, (1, 4), (0, 7), boards=3, cards=4)
        assert viewport.board_offset == 2
        assert viewport.card_offsets[(1, 4)] == 4

        viewport.scroll_to(slices, (1, 3), None, boards=3, cards=4)
        assert viewport.board_offset == 2

        viewport.scroll_to(slices, (1, 0), None, boards=3, cards=4)
        assert viewport.board_offset == 0


class TestSelection:
    @pytest.fixture
    def slices(self) -> list[BoardSlice]:
        return [
            BoardSlice((1, 0), _ids(3)),
            BoardSlice((1, 1), ()),
            BoardSlice((1, 2), _ids(1)),
        ]

    def test_snap_keeps_valid_selection(self, slices: list[BoardSlice]):
        assert snap_selection(slices, (1, 0), (0, 2)) == ((1, 0), (0, 2))

    def test_snap_missing_card_uses_previous_index(self, slices: list[BoardSlice]):
        assert snap_selection(slices, (1, 0), (5, 5), previous_card_index=9) == ((1, 0), (0, 2))

    def test_snap_missing_board_falls_back_to_first(self, slices: list[BoardSlice]):
        assert snap_selection(slices, (7, 7), None) == ((1, 0), (0, 0))

    def test_snap_empty(self):
        assert snap_selection([], (1, 0), (0, 0)) == (None, None)

    @pytest.mark.parametrize(
        ("start", "direction", "expected"),
        [
            (((1, 0), (0, 1)), NavigationDirection.UP, ((1, 0), (0, 0))),
            (((1, 0), (0, 0)), NavigationDirection.UP, ((1, 0), (0, 0))),
            (((1, 0), (0, 2)), NavigationDirection.DOWN, ((1, 0), (0, 2))),
            (((1, 0), (0, 2)), NavigationDirection.RIGHT, ((1, 1), None)),
            (((1, 0), (0, 0)), NavigationDirection.LEFT, ((1, 0), (0, 0))),
            (((1, 2), (0, 0)), NavigationDirection.RIGHT, ((1, 2), (0, 0))),
        ],
    )
    def test_navigate(
        self,
        slices: list[BoardSlice],
        start: tuple[tuple[int, int], tuple[int, int]],
        direction: NavigationDirection,
        expected: tuple[tuple[int, int], tuple[int, int] | None],
    ) -> None:
        assert navigate(slices, *start, direction) == expected

    def test_navigate_clamps_card_index_in_target_board(self, slices: list[BoardSlice]):
        assert navigate(slices, (1, 1), None, NavigationDirection.RIGHT) == ((1, 2), (0, 0))
