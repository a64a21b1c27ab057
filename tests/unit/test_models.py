"""Tests for the board/card data model."""

from __future__ import annotations

from datetime import datetime

import pytest

from kanban_tui.core.enums import CardPriority, CardStatus
from kanban_tui.core.models import Board, Card, Workspace, clean_tags, id_to_str, new_id

pytestmark = pytest.mark.unit


class TestIds:
    def test_new_ids_are_unique_halves(self):
        first, second = new_id(), new_id()
        assert first != second
        assert all(0 <= half < 2**64 for half in first)

    def test_id_to_str_is_a_uuid(self):
        assert id_to_str((0, 1)) == "00000000-0000-0000-0000-000000000001"


class TestCleanTags:
    @pytest.mark.parametrize(
        ("tags", "expected"),
        [
            (["a", "b"], ["a", "b"]),
            ([" a ", "", "  "], ["a"]),
            (["Docs", "docs", "DOCS"], ["Docs"]),
            ([], []),
        ],
    )
    def test_clean_tags(self, tags: list[str], expected: list[str]) -> None:
        assert clean_tags(tags) == expected


class TestCard:
    def test_defaults(self):
        card = Card(name="  Task  ")
        assert card.name == "Task"
        assert card.status is CardStatus.ACTIVE
        assert card.priority is CardPriority.LOW
        assert card.due_date is None
        assert card.completed is None
        assert card.modified == card.created

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            Card(name="   ")

    def test_modified_never_before_created(self):
        created = datetime(2024, 5, 1, 10, 0, 0)
        card = Card(name="x", created=created, modified=datetime(2024, 4, 1))
        assert card.modified == created

    def test_completed_card_gets_completion_stamp(self):
        created = datetime(2024, 5, 1, 10, 0, 0)
        card = Card(name="x", status=CardStatus.COMPLETE, created=created)
        assert card.completed == created

    def test_set_status_tracks_completion(self):
        created = datetime(2024, 5, 1, 10, 0, 0)
        card = Card(name="x", created=created)
        later = datetime(2024, 5, 2, 10, 0, 0)

        card.set_status(CardStatus.COMPLETE, later)
        assert card.completed == later
        assert card.modified == later

        card.set_status(CardStatus.STALE, later)
        assert card.completed is None

    def test_touch_clamps_to_created(self):
        created = datetime(2024, 5, 1, 10, 0, 0)
        card = Card(name="x", created=created)
        card.touch(datetime(2020, 1, 1))
        assert card.modified == created

    def test_structure_ignores_timestamps(self):
        card = Card(name="x", created=datetime(2024, 5, 1))
        copy = card.clone()
        copy.touch(datetime(2024, 6, 1))
        assert copy.structure() == card.structure()
        copy.description = "changed"
        assert copy.structure() != card.structure()


class TestBoardAndWorkspace:
    def test_duplicate_card_ids_rejected(self):
        card = Card(name="x")
        with pytest.raises(ValueError, match="duplicate card ids"):
            Board(name="b", cards=[card, card.clone()])

    def test_duplicate_board_ids_rejected(self):
        board = Board(name="b")
        with pytest.raises(ValueError, match="duplicate board ids"):
            Workspace(boards=[board, board.clone()])

    def test_lookup_helpers(self, workspace: Workspace):
        todo = workspace.boards[0]
        card = todo.cards[1]
        assert workspace.get_board(todo.id) is todo
        assert workspace.board_index(todo.id) == 0
        assert workspace.find_card(card.id) == (todo, card)
        assert todo.card_index(card.id) == 1
        assert workspace.find_card(new_id()) is None

    def test_name_checks(self, workspace: Workspace):
        todo = workspace.boards[0]
        assert workspace.has_board_named(" Todo ")
        assert not workspace.has_board_named("todo")
        assert todo.has_card_named("Fix bug")
        assert not todo.has_card_named("Fix bug", exclude=todo.cards[1].id)

    def test_all_cards_in_order(self, workspace: Workspace):
        names = [card.name for _board, card in workspace.all_cards()]
        assert names == ["Write docs", "Fix bug", "Review", "Release"]

    def test_clone_is_deep(self, workspace: Workspace):
        copy = workspace.clone()
        copy.boards[0].cards[0].tags.append("extra")
        assert "extra" not in workspace.boards[0].cards[0].tags
        assert len(copy) == len(workspace) == 2
