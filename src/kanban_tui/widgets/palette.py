"""Command palette: ranked live search over commands, cards and boards."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from kanban_tui.core.enums import Focus
from kanban_tui.core.ui_state import ListSelections
from kanban_tui.limits import PALETTE_MIN_QUERY_LENGTH

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from kanban_tui.core.models import ItemId, Workspace

logger = logging.getLogger(__name__)


class PaletteCommand(StrEnum):
    """Palette commands; values are the display names."""

    CHANGE_CURRENT_CARD_STATUS = "Change Current Card Status"
    CHANGE_CURRENT_CARD_PRIORITY = "Change Current Card Priority"
    CHANGE_DATE_FORMAT = "Change Date Format"
    CHANGE_THEME = "Change Theme"
    CHANGE_UI_MODE = "Change UI Mode"
    CLEAR_FILTER = "Clear Filter"
    CONFIG_MENU = "Configure"
    CREATE_A_THEME = "Create a Theme"
    DEBUG_MENU = "Toggle Debug Panel"
    FILTER_BY_TAG = "Filter by Tag"
    HELP_MENU = "Open Help Menu"
    LOAD_A_SAVE_CLOUD = "Load a Save (Cloud)"
    LOAD_A_SAVE_LOCAL = "Load a Save (Local)"
    LOGIN = "Login"
    LOGOUT = "Logout"
    MAIN_MENU = "Open Main Menu"
    NEW_BOARD = "New Board"
    NEW_CARD = "New Card"
    QUIT = "Quit"
    RESET_PASSWORD = "Reset Password"
    RESET_UI = "Reset UI"
    SAVE_KANBAN_STATE = "Save Kanban State"
    SIGN_UP = "Sign Up"
    SYNC_LOCAL_DATA = "Sync Local Data"

    @classmethod
    def available(cls, debug_mode: bool) -> tuple[PaletteCommand, ...]:
        """Registration order: sorted by display name, debug panel only in debug mode."""
        commands = sorted(cls, key=lambda command: command.value)
        return tuple(
            command for command in commands if debug_mode or command is not cls.DEBUG_MENU
        )


NO_COMMANDS_FOUND = "No Commands Found"


class MatchField(StrEnum):
    NAME = "Name"
    DESCRIPTION = "Description"
    TAGS = "Tags"
    COMMENTS = "Comments"


@dataclass(frozen=True, slots=True)
class SearchHit:
    item_id: ItemId
    name: str
    matched_in: MatchField

    @property
    def label(self) -> str:
        return f"{self.name} - Matched in {self.matched_in.value}"


def rank(entries: Iterable[tuple[str, object]], query: str) -> list[object]:
    """Two-bucket ranking: names starting with `query`, then names containing it.

    `entries` are (lower-cased name, payload) pairs in registration order;
    entries that match neither bucket must already have been filtered out.
    """
    leading: list[object] = []
    trailing: list[object] = []
    for name, payload in entries:
        (leading if name.startswith(query) else trailing).append(payload)
    return leading + trailing


def _first_match(
    query: str, fields: Sequence[tuple[MatchField, Iterable[str]]]
) -> MatchField | None:
    for match_field, values in fields:
        if any(query in value.lower() for value in values):
            return match_field
    return None


def search_commands(commands: Sequence[PaletteCommand], query: str) -> list[PaletteCommand]:
    needle = query.lower()
    if not needle:
        return list(commands)
    matches = [
        (command.value.lower(), command)
        for command in commands
        if needle in command.value.lower()
    ]
    return rank(matches, needle)  # type: ignore[return-value]


def search_cards(workspace: Workspace, query: str) -> list[SearchHit]:
    needle = query.lower()
    if len(needle) < PALETTE_MIN_QUERY_LENGTH:
        return []
    matches: list[tuple[str, SearchHit]] = []
    for _board, card in workspace.all_cards():
        matched = _first_match(
            needle,
            (
                (MatchField.NAME, (card.name,)),
                (MatchField.DESCRIPTION, (card.description,)),
                (MatchField.TAGS, card.tags),
                (MatchField.COMMENTS, card.comments),
            ),
        )
        if matched is not None:
            matches.append((card.name.lower(), SearchHit(card.id, card.name, matched)))
    return rank(matches, needle)  # type: ignore[return-value]


def search_boards(workspace: Workspace, query: str) -> list[SearchHit]:
    needle = query.lower()
    if len(needle) < PALETTE_MIN_QUERY_LENGTH:
        return []
    matches: list[tuple[str, SearchHit]] = []
    for board in workspace:
        matched = _first_match(
            needle,
            ((MatchField.NAME, (board.name,)), (MatchField.DESCRIPTION, (board.description,))),
        )
        if matched is not None:
            matches.append((board.name.lower(), SearchHit(board.id, board.name, matched)))
    return rank(matches, needle)  # type: ignore[return-value]


@dataclass(slots=True)
class CommandPalette:
    commands: tuple[PaletteCommand, ...] = field(
        default_factory=lambda: PaletteCommand.available(debug_mode=False)
    )
    last_search: str | None = None
    command_results: list[PaletteCommand] = field(default_factory=list)
    card_results: list[SearchHit] = field(default_factory=list)
    board_results: list[SearchHit] = field(default_factory=list)
    selected: dict[Focus, int] = field(default_factory=dict)

    @classmethod
    def for_mode(cls, debug_mode: bool) -> CommandPalette:
        return cls(commands=PaletteCommand.available(debug_mode))

    def reset(self) -> None:
        self.last_search = None
        self.command_results = []
        self.card_results = []
        self.board_results = []
        self.selected.clear()

    def update(self, query: str, workspace: Workspace) -> bool:
        """Recompute results when `query` changed since the last search."""
        normalised = query.lower()
        if normalised == self.last_search:
            return False
        self.command_results = search_commands(self.commands, normalised)
        self.card_results = search_cards(workspace, normalised)
        self.board_results = search_boards(workspace, normalised)
        self.last_search = normalised
        self.selected = {Focus.COMMAND_PALETTE_COMMAND: 0}
        logger.debug(
            "Palette search %r: %d commands, %d cards, %d boards",
            normalised,
            len(self.command_results),
            len(self.card_results),
            len(self.board_results),
        )
        return True

    def _length(self, focus: Focus) -> int:
        match focus:
            case Focus.COMMAND_PALETTE_COMMAND:
                return len(self.command_results)
            case Focus.COMMAND_PALETTE_CARD:
                return len(self.card_results)
            case Focus.COMMAND_PALETTE_BOARD:
                return len(self.board_results)
            case _:
                return 0

    def move_selection(self, focus: Focus, delta: int) -> None:
        length = self._length(focus)
        if length == 0:
            self.selected.pop(focus, None)
            return
        current = self.selected.get(focus)
        if current is None:
            self.selected[focus] = 0 if delta >= 0 else length - 1
        else:
            self.selected[focus] = ListSelections.step(current, length, delta)

    def selected_command(self) -> PaletteCommand | None:
        index = self.selected.get(Focus.COMMAND_PALETTE_COMMAND)
        if index is None or index >= len(self.command_results):
            return None
        return self.command_results[index]

    def selected_card(self) -> SearchHit | None:
        index = self.selected.get(Focus.COMMAND_PALETTE_CARD)
        if index is None or index >= len(self.card_results):
            return None
        return self.card_results[index]

    def selected_board(self) -> SearchHit | None:
        index = self.selected.get(Focus.COMMAND_PALETTE_BOARD)
        if index is None or index >= len(self.board_results):
            return None
        return self.board_results[index]

    def command_labels(self) -> list[str]:
        if not self.command_results:
            return [NO_COMMANDS_FOUND]
        return [command.value for command in self.command_results]
