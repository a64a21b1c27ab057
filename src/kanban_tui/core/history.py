"""Undo log of forward/inverse delta pairs and the single workspace mutation funnel.

Every user-visible change to the workspace goes through `WorkspaceEditor`, which
validates the request, builds a delta together with its inverse, applies it and
records the pair. Deltas hold plain values (ids, positions, card/board copies),
never references into the live model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from kanban_tui.core.dates import now
from kanban_tui.core.enums import CardPriority, CardStatus
from kanban_tui.core.models import Board, Card, ItemId, Workspace, clean_tags, validate_name
from kanban_tui.errors import HistoryExhausted, InputValidationError, NotFoundError
from kanban_tui.limits import MAX_UNDO_ENTRIES

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class CardField(StrEnum):
    NAME = "name"
    DESCRIPTION = "description"
    DUE_DATE = "due_date"
    TAGS = "tags"
    COMMENTS = "comments"


class BoardField(StrEnum):
    NAME = "name"
    DESCRIPTION = "description"


class Delta(Protocol):
    def apply(self, workspace: Workspace, when: datetime) -> None: ...

    def inverse(self) -> Delta: ...


def _board(workspace: Workspace, board_id: ItemId) -> Board:
    board = workspace.get_board(board_id)
    if board is None:
        raise NotFoundError("Board not found")
    return board


def _card(workspace: Workspace, board_id: ItemId, card_id: ItemId) -> Card:
    card = _board(workspace, board_id).get_card(card_id)
    if card is None:
        raise NotFoundError("Card not found")
    return card


@dataclass(frozen=True, slots=True)
class AddBoard:
    board: Board
    position: int

    def apply(self, workspace: Workspace, when: datetime) -> None:
        workspace.boards.insert(self.position, self.board.clone())

    def inverse(self) -> Delta:
        return RemoveBoard(self.board, self.position)


@dataclass(frozen=True, slots=True)
class RemoveBoard:
    board: Board
    position: int

    def apply(self, workspace: Workspace, when: datetime) -> None:
        if workspace.boards[self.position].id != self.board.id:
            raise NotFoundError("Board not found at the recorded position")
        del workspace.boards[self.position]

    def inverse(self) -> Delta:
        return AddBoard(self.board, self.position)


@dataclass(frozen=True, slots=True)
class AddCard:
    board_id: ItemId
    card: Card
    position: int

    def apply(self, workspace: Workspace, when: datetime) -> None:
        card = self.card.clone()
        card.touch(when)
        _board(workspace, self.board_id).cards.insert(self.position, card)

    def inverse(self) -> Delta:
        return RemoveCard(self.board_id, self.card, self.position)


@dataclass(frozen=True, slots=True)
class RemoveCard:
    board_id: ItemId
    card: Card
    position: int

    def apply(self, workspace: Workspace, when: datetime) -> None:
        cards = _board(workspace, self.board_id).cards
        if cards[self.position].id != self.card.id:
            raise NotFoundError("Card not found at the recorded position")
        del cards[self.position]

    def inverse(self) -> Delta:
        return AddCard(self.board_id, self.card, self.position)


@dataclass(frozen=True, slots=True)
class MoveCardWithinBoard:
    board_id: ItemId
    from_position: int
    to_position: int

    def apply(self, workspace: Workspace, when: datetime) -> None:
        cards = _board(workspace, self.board_id).cards
        card = cards.pop(self.from_position)
        cards.insert(self.to_position, card)
        card.touch(when)

    def inverse(self) -> Delta:
        return MoveCardWithinBoard(self.board_id, self.to_position, self.from_position)


@dataclass(frozen=True, slots=True)
class MoveCardBetweenBoards:
    card_id: ItemId
    source_board_id: ItemId
    source_position: int
    target_board_id: ItemId
    target_position: int

    def apply(self, workspace: Workspace, when: datetime) -> None:
        source = _board(workspace, self.source_board_id).cards
        target = _board(workspace, self.target_board_id).cards
        if source[self.source_position].id != self.card_id:
            raise NotFoundError("Card not found at the recorded position")
        card = source.pop(self.source_position)
        target.insert(self.target_position, card)
        card.touch(when)

    def inverse(self) -> Delta:
        return MoveCardBetweenBoards(
            self.card_id,
            self.target_board_id,
            self.target_position,
            self.source_board_id,
            self.source_position,
        )


@dataclass(frozen=True, slots=True)
class SetCardField:
    board_id: ItemId
    card_id: ItemId
    attribute: CardField
    old: object
    new: object

    def apply(self, workspace: Workspace, when: datetime) -> None:
        card = _card(workspace, self.board_id, self.card_id)
        value = list(self.new) if isinstance(self.new, tuple) else self.new
        setattr(card, self.attribute.value, value)
        card.touch(when)

    def inverse(self) -> Delta:
        return SetCardField(self.board_id, self.card_id, self.attribute, self.new, self.old)


@dataclass(frozen=True, slots=True)
class SetCardStatus:
    board_id: ItemId
    card_id: ItemId
    old: CardStatus
    new: CardStatus
    old_completed: datetime | None = None

    def apply(self, workspace: Workspace, when: datetime) -> None:
        card = _card(workspace, self.board_id, self.card_id)
        card.set_status(self.new, when)
        if self.new is CardStatus.COMPLETE and self.old_completed is not None:
            card.completed = self.old_completed

    def inverse(self) -> Delta:
        return SetCardStatus(self.board_id, self.card_id, self.new, self.old, self.old_completed)


@dataclass(frozen=True, slots=True)
class SetCardPriority:
    board_id: ItemId
    card_id: ItemId
    old: CardPriority
    new: CardPriority

    def apply(self, workspace: Workspace, when: datetime) -> None:
        card = _card(workspace, self.board_id, self.card_id)
        card.priority = self.new
        card.touch(when)

    def inverse(self) -> Delta:
        return SetCardPriority(self.board_id, self.card_id, self.new, self.old)


@dataclass(frozen=True, slots=True)
class SetBoardField:
    board_id: ItemId
    attribute: BoardField
    old: str
    new: str

    def apply(self, workspace: Workspace, when: datetime) -> None:
        setattr(_board(workspace, self.board_id), self.attribute.value, self.new)

    def inverse(self) -> Delta:
        return SetBoardField(self.board_id, self.attribute, self.new, self.old)


@dataclass(frozen=True, slots=True)
class ReplaceCard:
    """Whole-card edit committed from the card view."""

    board_id: ItemId
    before: Card
    after: Card

    def apply(self, workspace: Workspace, when: datetime) -> None:
        board = _board(workspace, self.board_id)
        index = board.card_index(self.before.id)
        if index is None:
            raise NotFoundError("Card not found")
        card = self.after.clone()
        card.touch(when)
        board.cards[index] = card

    def inverse(self) -> Delta:
        return ReplaceCard(self.board_id, self.after, self.before)


@dataclass(slots=True)
class HistoryEntry:
    label: str
    forward: Delta
    backward: Delta


@dataclass(slots=True)
class UndoLog:
    """Append-only list of entries with a head pointer at the last applied entry."""

    entries: list[HistoryEntry] = field(default_factory=list)
    head: int = -1
    max_entries: int = MAX_UNDO_ENTRIES

    @property
    def can_undo(self) -> bool:
        return self.head >= 0

    @property
    def can_redo(self) -> bool:
        return self.head < len(self.entries) - 1

    def record(self, entry: HistoryEntry) -> None:
        del self.entries[self.head + 1 :]
        self.entries.append(entry)
        if len(self.entries) > self.max_entries:
            del self.entries[0]
        self.head = len(self.entries) - 1

    def undo(self, workspace: Workspace, when: datetime | None = None) -> HistoryEntry:
        if not self.can_undo:
            raise HistoryExhausted("No more actions to undo")
        entry = self.entries[self.head]
        entry.backward.apply(workspace, when or now())
        self.head -= 1
        return entry

    def redo(self, workspace: Workspace, when: datetime | None = None) -> HistoryEntry:
        if not self.can_redo:
            raise HistoryExhausted("No more actions to redo")
        entry = self.entries[self.head + 1]
        entry.forward.apply(workspace, when or now())
        self.head += 1
        return entry

    def clear(self) -> None:
        self.entries.clear()
        self.head = -1


class WorkspaceEditor:
    """Validates, applies and records every workspace mutation."""

    def __init__(self, workspace: Workspace, log: UndoLog | None = None) -> None:
        self.workspace = workspace
        self.log = log if log is not None else UndoLog()
        self.revision = 0

    def _commit(self, label: str, delta: Delta) -> None:
        delta.apply(self.workspace, now())
        self.log.record(HistoryEntry(label=label, forward=delta, backward=delta.inverse()))
        self.revision += 1
        logger.debug("Recorded history entry: %s", label)

    def _board(self, board_id: ItemId) -> Board:
        return _board(self.workspace, board_id)

    def _card(self, board_id: ItemId, card_id: ItemId) -> Card:
        return _card(self.workspace, board_id, card_id)

    @staticmethod
    def _checked_position(position: int | None, length: int) -> int:
        if position is None:
            return length
        if not 0 <= position <= length:
            raise InputValidationError(f"Position {position} is out of range")
        return position

    def replace_workspace(self, workspace: Workspace) -> None:
        """Swap in a loaded workspace; history never spans two workspaces."""
        self.workspace = workspace
        self.log.clear()
        self.revision += 1

    def add_board(self, name: str, description: str = "", position: int | None = None) -> Board:
        try:
            board = Board(name=name, description=description.strip())
        except ValueError as exc:
            raise InputValidationError(str(exc)) from exc
        if self.workspace.has_board_named(board.name):
            raise InputValidationError(f"Board '{board.name}' already exists")
        pos = self._checked_position(position, len(self.workspace.boards))
        self._commit(f"Created board '{board.name}'", AddBoard(board.clone(), pos))
        return self.workspace.boards[pos]

    def remove_board(self, board_id: ItemId) -> Board:
        position = self.workspace.board_index(board_id)
        if position is None:
            raise NotFoundError("Board not found")
        board = self.workspace.boards[position].clone()
        self._commit(f"Deleted board '{board.name}'", RemoveBoard(board, position))
        return board

    def add_card(self, board_id: ItemId, card: Card, position: int | None = None) -> Card:
        board = self._board(board_id)
        if board.has_card_named(card.name):
            raise InputValidationError(f"Card '{card.name}' already exists in '{board.name}'")
        if board.get_card(card.id) is not None:
            raise InputValidationError("Card id already present in board")
        pos = self._checked_position(position, len(board.cards))
        self._commit(f"Created card '{card.name}'", AddCard(board_id, card.clone(), pos))
        return board.cards[pos]

    def remove_card(self, board_id: ItemId, card_id: ItemId) -> Card:
        board = self._board(board_id)
        position = board.card_index(card_id)
        if position is None:
            raise NotFoundError("Card not found")
        card = board.cards[position].clone()
        self._commit(f"Deleted card '{card.name}'", RemoveCard(board_id, card, position))
        return card

    def move_card_within(self, board_id: ItemId, card_id: ItemId, to_position: int) -> int:
        board = self._board(board_id)
        from_position = board.card_index(card_id)
        if from_position is None:
            raise NotFoundError("Card not found")
        if not 0 <= to_position < len(board.cards):
            raise InputValidationError(f"Position {to_position} is out of range")
        if from_position == to_position:
            return to_position
        name = board.cards[from_position].name
        self._commit(
            f"Moved card '{name}' within '{board.name}'",
            MoveCardWithinBoard(board_id, from_position, to_position),
        )
        return to_position

    def move_card_between(
        self,
        card_id: ItemId,
        source_board_id: ItemId,
        target_board_id: ItemId,
        target_position: int | None = None,
    ) -> int:
        source = self._board(source_board_id)
        target = self._board(target_board_id)
        source_position = source.card_index(card_id)
        if source_position is None:
            raise NotFoundError("Card not found")
        if source_board_id == target_board_id:
            raise InputValidationError("Source and target boards are the same")
        card = source.cards[source_position]
        if target.has_card_named(card.name):
            raise InputValidationError(f"Card '{card.name}' already exists in '{target.name}'")
        pos = self._checked_position(target_position, len(target.cards))
        self._commit(
            f"Moved card '{card.name}' to '{target.name}'",
            MoveCardBetweenBoards(card_id, source_board_id, source_position, target_board_id, pos),
        )
        return pos

    def set_card_field(
        self, board_id: ItemId, card_id: ItemId, card_field: CardField, value: object
    ) -> None:
        card = self._card(board_id, card_id)
        old = getattr(card, card_field.value)
        new = self._normalise_card_value(card_field, value)
        if isinstance(old, list):
            old = tuple(old)
        if old == new:
            return
        self._commit(
            f"Changed {card_field.value.replace('_', ' ')} of card '{card.name}'",
            SetCardField(board_id, card_id, card_field, old, new),
        )

    @staticmethod
    def _normalise_card_value(card_field: CardField, value: object) -> object:
        match card_field:
            case CardField.NAME:
                try:
                    return validate_name(str(value), "Card")
                except ValueError as exc:
                    raise InputValidationError(str(exc)) from exc
            case CardField.TAGS:
                return tuple(clean_tags(value))  # type: ignore[arg-type]
            case CardField.COMMENTS:
                comments = [str(comment) for comment in value]  # type: ignore[attr-defined]
                return tuple(comment for comment in comments if comment.strip())
            case CardField.DUE_DATE:
                if value is not None and not isinstance(value, datetime):
                    raise InputValidationError("Due date must be a timestamp")
                return value
            case _:
                return str(value)

    def set_card_status(self, board_id: ItemId, card_id: ItemId, status: CardStatus) -> Card:
        card = self._card(board_id, card_id)
        if card.status is status:
            return card
        self._commit(
            f"Changed status to \"{status}\" for card \"{card.name}\"",
            SetCardStatus(board_id, card_id, card.status, status, card.completed),
        )
        return card

    def set_card_priority(self, board_id: ItemId, card_id: ItemId, priority: CardPriority) -> Card:
        card = self._card(board_id, card_id)
        if card.priority is priority:
            return card
        self._commit(
            f"Changed priority to \"{priority}\" for card \"{card.name}\"",
            SetCardPriority(board_id, card_id, card.priority, priority),
        )
        return card

    def set_board_field(self, board_id: ItemId, board_field: BoardField, value: str) -> None:
        board = self._board(board_id)
        new = value.strip()
        if board_field is BoardField.NAME:
            try:
                new = validate_name(value, "Board")
            except ValueError as exc:
                raise InputValidationError(str(exc)) from exc
            if new != board.name and self.workspace.has_board_named(new):
                raise InputValidationError(f"Board '{new}' already exists")
        old = getattr(board, board_field.value)
        if old == new:
            return
        self._commit(
            f"Changed {board_field.value} of board '{board.name}'",
            SetBoardField(board_id, board_field, old, new),
        )

    def replace_card(self, board_id: ItemId, edited: Card) -> Card:
        board = self._board(board_id)
        current = board.get_card(edited.id)
        if current is None:
            raise NotFoundError("Card not found")
        if board.has_card_named(edited.name, exclude=edited.id):
            raise InputValidationError(f"Card '{edited.name}' already exists in '{board.name}'")
        if current.structure() == edited.structure():
            return current
        self._commit(
            f"Edited card '{edited.name}'",
            ReplaceCard(board_id, current.clone(), edited.clone()),
        )
        result = board.get_card(edited.id)
        if result is None:
            raise NotFoundError("Card not found")
        return result

    def undo(self) -> HistoryEntry:
        entry = self.log.undo(self.workspace)
        self.revision += 1
        logger.info("Undo: %s", entry.label)
        return entry

    def redo(self) -> HistoryEntry:
        entry = self.log.redo(self.workspace)
        self.revision += 1
        logger.info("Redo: %s", entry.label)
        return entry

    def history_labels(self) -> Sequence[str]:
        return [entry.label for entry in self.log.entries]
