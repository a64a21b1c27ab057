"""Boards, cards and the workspace that owns them."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kanban_tui.core.dates import now
from kanban_tui.core.enums import CardPriority, CardStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from datetime import datetime


type ItemId = tuple[int, int]
"""128-bit identifier split into (high, low) 64-bit halves."""

_LOW_MASK = (1 << 64) - 1


def new_id() -> ItemId:
    value = uuid.uuid4().int
    return (value >> 64, value & _LOW_MASK)


def id_to_str(item_id: ItemId) -> str:
    return str(uuid.UUID(int=(item_id[0] << 64) | item_id[1]))


def clean_tags(tags: Iterable[str]) -> list[str]:
    """Strip tags, drop empty ones and case-insensitive duplicates (first spelling wins)."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for tag in tags:
        text = tag.strip()
        folded = text.casefold()
        if not text or folded in seen:
            continue
        seen.add(folded)
        cleaned.append(text)
    return cleaned


def validate_name(name: str, what: str) -> str:
    text = name.strip()
    if not text:
        raise ValueError(f"{what} name cannot be empty")
    return text


@dataclass(slots=True)
class Card:
    """A single work item."""

    name: str
    description: str = ""
    status: CardStatus = CardStatus.ACTIVE
    priority: CardPriority = CardPriority.LOW
    due_date: datetime | None = None
    tags: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    created: datetime = field(default_factory=now)
    modified: datetime | None = None
    completed: datetime | None = None
    id: ItemId = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.name = validate_name(self.name, "Card")
        self.tags = clean_tags(self.tags)
        if self.modified is None or self.modified < self.created:
            self.modified = self.created
        if self.status is CardStatus.COMPLETE and self.completed is None:
            self.completed = self.modified
        elif self.status is not CardStatus.COMPLETE:
            self.completed = None

    def touch(self, when: datetime | None = None) -> None:
        stamp = when or now()
        self.modified = max(stamp, self.created)

    def set_status(self, status: CardStatus, when: datetime | None = None) -> None:
        self.status = status
        self.touch(when)
        self.completed = self.modified if status is CardStatus.COMPLETE else None

    def tag_set(self) -> frozenset[str]:
        return frozenset(tag.casefold() for tag in self.tags)

    def clone(self) -> Card:
        return copy.deepcopy(self)

    def structure(self) -> tuple[object, ...]:
        """Comparable content with timestamps excluded."""
        return (
            self.id,
            self.name,
            self.description,
            self.status,
            self.priority,
            self.due_date,
            tuple(self.tags),
            tuple(self.comments),
        )


@dataclass(slots=True)
class Board:
    """An ordered group of cards."""

    name: str
    description: str = ""
    cards: list[Card] = field(default_factory=list)
    id: ItemId = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.name = validate_name(self.name, "Board")
        ids = [card.id for card in self.cards]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Board '{self.name}' contains duplicate card ids")

    def card_index(self, card_id: ItemId) -> int | None:
        for index, card in enumerate(self.cards):
            if card.id == card_id:
                return index
        return None

    def get_card(self, card_id: ItemId) -> Card | None:
        index = self.card_index(card_id)
        return None if index is None else self.cards[index]

    def has_card_named(self, name: str, exclude: ItemId | None = None) -> bool:
        target = name.strip()
        return any(card.name == target and card.id != exclude for card in self.cards)

    def clone(self) -> Board:
        return copy.deepcopy(self)

    def structure(self) -> tuple[object, ...]:
        return (
            self.id,
            self.name,
            self.description,
            tuple(card.structure() for card in self.cards),
        )


@dataclass(slots=True)
class Workspace:
    """Ordered boards; the authoritative state every mutation goes through."""

    boards: list[Board] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError when ids collide."""
        board_ids = [board.id for board in self.boards]
        if len(board_ids) != len(set(board_ids)):
            raise ValueError("Workspace contains duplicate board ids")
        for board in self.boards:
            card_ids = [card.id for card in board.cards]
            if len(card_ids) != len(set(card_ids)):
                raise ValueError(f"Board '{board.name}' contains duplicate card ids")

    def __len__(self) -> int:
        return len(self.boards)

    def __iter__(self) -> Iterator[Board]:
        return iter(self.boards)

    def board_index(self, board_id: ItemId) -> int | None:
        for index, board in enumerate(self.boards):
            if board.id == board_id:
                return index
        return None

    def get_board(self, board_id: ItemId) -> Board | None:
        index = self.board_index(board_id)
        return None if index is None else self.boards[index]

    def find_card(self, card_id: ItemId) -> tuple[Board, Card] | None:
        for board in self.boards:
            card = board.get_card(card_id)
            if card is not None:
                return board, card
        return None

    def has_board_named(self, name: str) -> bool:
        target = name.strip()
        return any(board.name == target for board in self.boards)

    def all_cards(self) -> Iterator[tuple[Board, Card]]:
        for board in self.boards:
            for card in board.cards:
                yield board, card

    def clone(self) -> Workspace:
        return copy.deepcopy(self)

    def structure(self) -> tuple[object, ...]:
        return tuple(board.structure() for board in self.boards)
