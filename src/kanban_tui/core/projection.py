"""Id-only projections over the workspace: tag filter, visible window and selection moves."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kanban_tui.core.enums import NavigationDirection

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from kanban_tui.core.models import ItemId, Workspace


@dataclass(frozen=True, slots=True)
class BoardSlice:
    """A board id with the ordered card ids that survive a projection."""

    board_id: ItemId
    card_ids: tuple[ItemId, ...]


type VisibleMap = dict[ItemId, tuple[ItemId, ...]]


def full_projection(workspace: Workspace) -> list[BoardSlice]:
    return [
        BoardSlice(board.id, tuple(card.id for card in board.cards)) for board in workspace.boards
    ]


def tag_histogram(workspace: Workspace) -> list[tuple[str, int]]:
    """Case-folded tag counts, sorted by count descending then name."""
    counts: Counter[str] = Counter()
    for _board, card in workspace.all_cards():
        counts.update(tag.casefold() for tag in card.tags)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def filter_projection(workspace: Workspace, tags: Iterable[str]) -> list[BoardSlice]:
    """Boards holding at least one card tagged with any of `tags` (case-folded).

    An empty tag set yields the unfiltered workspace.
    """
    wanted = {tag.casefold() for tag in tags}
    if not wanted:
        return full_projection(workspace)
    slices: list[BoardSlice] = []
    for board in workspace.boards:
        card_ids = tuple(card.id for card in board.cards if card.tag_set() & wanted)
        if card_ids:
            slices.append(BoardSlice(board.id, card_ids))
    return slices


@dataclass(slots=True)
class Viewport:
    """Scroll offsets of the visible window: one for boards, one per board for cards."""

    board_offset: int = 0
    card_offsets: dict[ItemId, int] = field(default_factory=dict)

    def reset(self) -> None:
        self.board_offset = 0
        self.card_offsets.clear()

    def project(self, slices: Sequence[BoardSlice], boards: int, cards: int) -> VisibleMap:
        self._clamp(slices, boards, cards)
        visible: VisibleMap = {}
        for board_slice in slices[self.board_offset : self.board_offset + boards]:
            offset = self.card_offsets.get(board_slice.board_id, 0)
            visible[board_slice.board_id] = board_slice.card_ids[offset : offset + cards]
        return visible

    def scroll_to(
        self,
        slices: Sequence[BoardSlice],
        board_id: ItemId | None,
        card_id: ItemId | None,
        boards: int,
        cards: int,
    ) -> None:
        """Shift offsets the minimum amount so the given board/card fall inside the window."""
        board_index = _slice_index(slices, board_id)
        if board_index is None:
            return
        if board_index < self.board_offset:
            self.board_offset = board_index
        elif board_index >= self.board_offset + boards:
            self.board_offset = board_index - boards + 1
        if card_id is None:
            return
        card_ids = slices[board_index].card_ids
        if card_id not in card_ids:
            return
        card_index = card_ids.index(card_id)
        offset = self.card_offsets.get(slices[board_index].board_id, 0)
        if card_index < offset:
            offset = card_index
        elif card_index >= offset + cards:
            offset = card_index - cards + 1
        self.card_offsets[slices[board_index].board_id] = offset

    def _clamp(self, slices: Sequence[BoardSlice], boards: int, cards: int) -> None:
        self.board_offset = max(0, min(self.board_offset, max(0, len(slices) - boards)))
        present = {board_slice.board_id: board_slice for board_slice in slices}
        for board_id in list(self.card_offsets):
            board_slice = present.get(board_id)
            if board_slice is None:
                del self.card_offsets[board_id]
                continue
            limit = max(0, len(board_slice.card_ids) - cards)
            self.card_offsets[board_id] = max(0, min(self.card_offsets[board_id], limit))


def _slice_index(slices: Sequence[BoardSlice], board_id: ItemId | None) -> int | None:
    if board_id is None:
        return None
    for index, board_slice in enumerate(slices):
        if board_slice.board_id == board_id:
            return index
    return None


def snap_selection(
    slices: Sequence[BoardSlice],
    board_id: ItemId | None,
    card_id: ItemId | None,
    previous_card_index: int = 0,
) -> tuple[ItemId | None, ItemId | None]:
    """Return a valid (board, card) selection closest to the requested one.

    Missing boards fall back to the first board; missing cards fall back to the
    card now at `previous_card_index` (clamped), or None for empty boards.
    """
    if not slices:
        return None, None
    index = _slice_index(slices, board_id)
    board_slice = slices[index if index is not None else 0]
    if not board_slice.card_ids:
        return board_slice.board_id, None
    if card_id in board_slice.card_ids:
        return board_slice.board_id, card_id
    clamped = max(0, min(previous_card_index, len(board_slice.card_ids) - 1))
    return board_slice.board_id, board_slice.card_ids[clamped]


def navigate(
    slices: Sequence[BoardSlice],
    board_id: ItemId | None,
    card_id: ItemId | None,
    direction: NavigationDirection,
) -> tuple[ItemId | None, ItemId | None]:
    """Move the selection one step; edges are sticky (no wraparound)."""
    board_id, card_id = snap_selection(slices, board_id, card_id)
    board_index = _slice_index(slices, board_id)
    if board_index is None:
        return None, None
    card_ids = slices[board_index].card_ids
    card_index = card_ids.index(card_id) if card_id in card_ids else 0

    match direction:
        case NavigationDirection.UP:
            if card_ids:
                return board_id, card_ids[max(0, card_index - 1)]
            return board_id, None
        case NavigationDirection.DOWN:
            if card_ids:
                return board_id, card_ids[min(len(card_ids) - 1, card_index + 1)]
            return board_id, None
        case NavigationDirection.LEFT:
            target_index = max(0, board_index - 1)
        case NavigationDirection.RIGHT:
            target_index = min(len(slices) - 1, board_index + 1)

    target = slices[target_index]
    if not target.card_ids:
        return target.board_id, None
    return target.board_id, target.card_ids[min(card_index, len(target.card_ids) - 1)]
