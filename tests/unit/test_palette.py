"""Tests for command palette search and ranking."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kanban_tui.core.enums import Focus
from kanban_tui.core.models import Board, Card, Workspace
from kanban_tui.widgets.palette import (
    NO_COMMANDS_FOUND,
    CommandPalette,
    MatchField,
    PaletteCommand,
    rank,
    search_boards,
    search_cards,
    search_commands,
)

pytestmark = pytest.mark.unit

SEARCH_ALPHABET = "abxy "
names = st.text(alphabet=SEARCH_ALPHABET, min_size=1, max_size=6).filter(str.strip)


@st.composite
def workspaces(draw: st.DrawFn) -> Workspace:
    boards = []
    for board_name in draw(st.lists(names, min_size=1, max_size=4)):
        card_names = draw(st.lists(names, max_size=8))
        boards.append(Board(name=board_name, cards=[Card(name=name) for name in card_names]))
    return Workspace(boards=boards)


class TestCommands:
    def test_debug_menu_only_in_debug_mode(self):
        assert PaletteCommand.DEBUG_MENU not in PaletteCommand.available(debug_mode=False)
        assert PaletteCommand.DEBUG_MENU in PaletteCommand.available(debug_mode=True)

    def test_available_sorted_by_display_name(self):
        names = [command.value for command in PaletteCommand.available(debug_mode=True)]
        assert names == sorted(names)

    def test_empty_query_returns_everything(self):
        commands = PaletteCommand.available(debug_mode=False)
        assert search_commands(commands, "") == list(commands)

    def test_prefix_matches_rank_first(self):
        commands = PaletteCommand.available(debug_mode=False)
        assert search_commands(commands, "LO") == [
            PaletteCommand.LOAD_A_SAVE_CLOUD,
            PaletteCommand.LOAD_A_SAVE_LOCAL,
            PaletteCommand.LOGIN,
            PaletteCommand.LOGOUT,
            PaletteCommand.SYNC_LOCAL_DATA,
        ]

    def test_rank_keeps_registration_order_within_bucket(self):
        entries = [("abc", 1), ("xab", 2), ("abd", 3), ("yab", 4)]
        assert rank(entries, "ab") == [1, 3, 2, 4]

    @given(
        prefix=st.text(alphabet="abcdeghilmnoprstuvy ", max_size=4),
        extension=st.text(alphabet="abcdeghilmnoprstuvy ", min_size=1, max_size=3),
    )
    def test_longer_query_never_adds_results(self, prefix: str, extension: str) -> None:
        commands = PaletteCommand.available(debug_mode=True)
        narrower = set(search_commands(commands, prefix + extension))
        assert narrower <= set(search_commands(commands, prefix))


class TestCardSearch:
    @given(
        workspace=workspaces(),
        prefix=st.text(alphabet=SEARCH_ALPHABET, min_size=2, max_size=4),
        extension=st.text(alphabet=SEARCH_ALPHABET, min_size=1, max_size=3),
    )
    def test_longer_query_never_adds_results(
        self, workspace: Workspace, prefix: str, extension: str
    ) -> None:
        narrower = {hit.item_id for hit in search_cards(workspace, prefix + extension)}
        assert narrower <= {hit.item_id for hit in search_cards(workspace, prefix)}

    def test_results_are_not_truncated(self) -> None:
        board = Board(name="Many", cards=[Card(name=f"xab{index:02d}") for index in range(60)])
        workspace = Workspace(boards=[board])
        wide = {hit.item_id for hit in search_cards(workspace, "ab")}
        narrow = {hit.item_id for hit in search_cards(workspace, "ab5")}
        assert len(wide) == 60
        assert len(narrow) == 10
        assert narrow <= wide

    def test_short_query_finds_nothing(self, workspace: Workspace) -> None:
        assert search_cards(workspace, "r") == []

    def test_name_matches(self, workspace: Workspace) -> None:
        hits = search_cards(workspace, "re")
        assert [hit.name for hit in hits] == ["Review", "Release"]
        assert {hit.matched_in for hit in hits} == {MatchField.NAME}

    def test_description_match_label(self, workspace: Workspace) -> None:
        hits = search_cards(workspace, "PR")
        assert [hit.label for hit in hits] == ["Review - Matched in Description"]

    def test_first_matching_field_wins(self, workspace: Workspace) -> None:
        hits = search_cards(workspace, "doc")
        assert [(hit.name, hit.matched_in) for hit in hits] == [
            ("Write docs", MatchField.NAME),
            ("Release", MatchField.TAGS),
        ]

    def test_comments_are_searched(self, workspace: Workspace) -> None:
        _board, card = next(workspace.all_cards())
        card.comments.append("needs a second pair of eyes")
        hits = search_cards(workspace, "pair")
        assert [(hit.item_id, hit.matched_in) for hit in hits] == [
            (card.id, MatchField.COMMENTS)
        ]


class TestBoardSearch:
    @given(
        workspace=workspaces(),
        prefix=st.text(alphabet=SEARCH_ALPHABET, min_size=2, max_size=4),
        extension=st.text(alphabet=SEARCH_ALPHABET, min_size=1, max_size=3),
    )
    def test_longer_query_never_adds_results(
        self, workspace: Workspace, prefix: str, extension: str
    ) -> None:
        narrower = {hit.item_id for hit in search_boards(workspace, prefix + extension)}
        assert narrower <= {hit.item_id for hit in search_boards(workspace, prefix)}

    def test_prefix_first(self, workspace: Workspace) -> None:
        assert [hit.name for hit in search_boards(workspace, "do")] == ["Done", "Todo"]

    def test_description(self, workspace: Workspace) -> None:
        hits = search_boards(workspace, "things")
        assert [(hit.name, hit.matched_in) for hit in hits] == [("Todo", MatchField.DESCRIPTION)]


class TestPalette:
    def test_update_only_when_query_changes(self, workspace: Workspace) -> None:
        palette = CommandPalette.for_mode(debug_mode=False)
        assert palette.update("LO", workspace)
        assert not palette.update("lo", workspace)
        assert palette.selected_command() is PaletteCommand.LOAD_A_SAVE_CLOUD

    def test_whitespace_is_part_of_the_query(self, workspace: Workspace) -> None:
        palette = CommandPalette.for_mode(debug_mode=False)
        palette.update("board", workspace)
        assert palette.command_results == [PaletteCommand.NEW_BOARD]
        palette.update("board ", workspace)
        assert palette.command_results == []
        palette.update("new ", workspace)
        assert palette.command_results == [PaletteCommand.NEW_BOARD, PaletteCommand.NEW_CARD]

    def test_selection_wraps(self, workspace: Workspace) -> None:
        palette = CommandPalette.for_mode(debug_mode=False)
        palette.update("lo", workspace)
        palette.move_selection(Focus.COMMAND_PALETTE_COMMAND, -1)
        assert palette.selected_command() is PaletteCommand.SYNC_LOCAL_DATA
        palette.move_selection(Focus.COMMAND_PALETTE_COMMAND, 1)
        assert palette.selected_command() is PaletteCommand.LOAD_A_SAVE_CLOUD

    def test_empty_result_lists_have_no_selection(self, workspace: Workspace) -> None:
        palette = CommandPalette.for_mode(debug_mode=False)
        palette.update("lo", workspace)
        palette.move_selection(Focus.COMMAND_PALETTE_CARD, 1)
        assert palette.selected_card() is None

    def test_card_selection(self, workspace: Workspace) -> None:
        palette = CommandPalette.for_mode(debug_mode=False)
        palette.update("re", workspace)
        palette.move_selection(Focus.COMMAND_PALETTE_CARD, -1)
        hit = palette.selected_card()
        assert hit is not None
        assert hit.name == "Release"

    def test_no_commands_label(self, workspace: Workspace) -> None:
        palette = CommandPalette.for_mode(debug_mode=False)
        palette.update("zzzz", workspace)
        assert palette.command_labels() == [NO_COMMANDS_FOUND]
        assert palette.selected_command() is None

    def test_reset(self, workspace: Workspace) -> None:
        palette = CommandPalette.for_mode(debug_mode=False)
        palette.update("re", workspace)
        palette.reset()
        assert palette.last_search is None
        assert palette.card_results == []
        assert palette.update("re", workspace)
