"""Save-file codec, naming and listing.

Save files are named ``kanban_<DD-MM-YYYY>_v<N>.json``; ``N`` increases within a
date. Writes take a file lock in the save directory so two instances never pick
the same version.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from filelock import FileLock, Timeout
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from kanban_tui.atomic import atomic_write_async, read_text_async
from kanban_tui.constants import FIELD_NOT_SET, SAVE_FILE_PREFIX, SAVE_FILE_REGEX
from kanban_tui.core.dates import DateTimeFormat, now, parse_date_time
from kanban_tui.core.enums import CardPriority, CardStatus
from kanban_tui.core.models import Board, Card, Workspace
from kanban_tui.errors import IOFailureError
from kanban_tui.version import get_app_version

logger = logging.getLogger(__name__)

SAVE_NAME_RE = re.compile(SAVE_FILE_REGEX)
SAVE_FILE_EXTENSION = ".json"
LOCK_FILE_NAME = ".kanban_tui.lock"
LOCK_TIMEOUT_SECONDS = 5.0
_ID_LIMIT = 1 << 64


def _check_id(value: tuple[int, int]) -> tuple[int, int]:
    if not all(0 <= half < _ID_LIMIT for half in value):
        raise ValueError("id halves must be unsigned 64-bit integers")
    return value


class CardRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: tuple[int, int]
    name: str
    description: str = ""
    status: CardStatus = CardStatus.ACTIVE
    priority: CardPriority = CardPriority.LOW
    due_date: str = FIELD_NOT_SET
    created: str
    modified: str
    completed: str = FIELD_NOT_SET
    tags: list[str] = Field(default_factory=list)
    comments: list[str] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: tuple[int, int]) -> tuple[int, int]:
        return _check_id(value)


class BoardRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: tuple[int, int]
    name: str
    description: str = ""
    cards: list[CardRecord] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: tuple[int, int]) -> tuple[int, int]:
        return _check_id(value)


class SaveRecord(BaseModel):
    """Root object of a save file."""

    model_config = ConfigDict(extra="ignore")

    kanban_version: str
    export_date: str
    exported_at: datetime | None = None
    date_format: DateTimeFormat = DateTimeFormat.DAY_MONTH_YEAR_TIME
    boards: list[BoardRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def reject_duplicate_ids(self) -> SaveRecord:
        board_ids: set[tuple[int, int]] = set()
        card_ids: set[tuple[int, int]] = set()
        for board in self.boards:
            if board.id in board_ids:
                raise ValueError(f"Duplicate board id {board.id}")
            board_ids.add(board.id)
            for card in board.cards:
                if card.id in card_ids:
                    raise ValueError(f"Duplicate card id {card.id}")
                card_ids.add(card.id)
        return self


def _card_record(card: Card, fmt: DateTimeFormat) -> CardRecord:
    return CardRecord(
        id=card.id,
        name=card.name,
        description=card.description,
        status=card.status,
        priority=card.priority,
        due_date=fmt.format(card.due_date),
        created=fmt.format(card.created),
        modified=fmt.format(card.modified),
        completed=fmt.format(card.completed),
        tags=list(card.tags),
        comments=list(card.comments),
    )


def to_record(workspace: Workspace, date_format: DateTimeFormat) -> SaveRecord:
    fmt = date_format.with_time()
    exported = now()
    return SaveRecord(
        kanban_version=get_app_version(),
        export_date=exported.strftime("%d-%m-%Y %H:%M:%S"),
        exported_at=exported,
        date_format=fmt,
        boards=[
            BoardRecord(
                id=board.id,
                name=board.name,
                description=board.description,
                cards=[_card_record(card, fmt) for card in board.cards],
            )
            for board in workspace
        ],
    )


def _required_stamp(value: str, fmt: DateTimeFormat, what: str) -> datetime:
    parsed = parse_date_time(value, fmt)
    if parsed is None:
        raise ValueError(f"Card {what} timestamp is missing")
    return parsed


def from_record(record: SaveRecord) -> Workspace:
    """Rebuild the workspace; raises ValueError on any invalid field."""
    fmt = record.date_format
    boards: list[Board] = []
    for board_record in record.boards:
        cards = [
            Card(
                name=card.name,
                description=card.description,
                status=card.status,
                priority=card.priority,
                due_date=parse_date_time(card.due_date, fmt),
                tags=list(card.tags),
                comments=list(card.comments),
                created=_required_stamp(card.created, fmt, "created"),
                modified=_required_stamp(card.modified, fmt, "modified"),
                completed=parse_date_time(card.completed, fmt),
                id=card.id,
            )
            for card in board_record.cards
        ]
        boards.append(
            Board(
                name=board_record.name,
                description=board_record.description,
                cards=cards,
                id=board_record.id,
            )
        )
    return Workspace(boards)


def serialize(workspace: Workspace, date_format: DateTimeFormat) -> str:
    return to_record(workspace, date_format).model_dump_json(indent=2)


def parse(text: str) -> Workspace:
    """Decode a save file; raises ValueError (including pydantic ValidationError)."""
    return from_record(SaveRecord.model_validate_json(text))


@dataclass(frozen=True, slots=True, order=True)
class SaveName:
    """A save file name, ordered by (date, version)."""

    day: date
    version: int
    file_name: str

    @property
    def stem(self) -> str:
        return self.file_name.removesuffix(SAVE_FILE_EXTENSION)


def parse_save_name(file_name: str) -> SaveName | None:
    if not SAVE_NAME_RE.match(file_name):
        return None
    stem = file_name.removesuffix(SAVE_FILE_EXTENSION)
    _prefix, day_text, version_text = stem.split("_")
    try:
        day = datetime.strptime(day_text, "%d-%m-%Y").date()
    except ValueError:
        return None
    return SaveName(day, int(version_text.removeprefix("v")), file_name)


def format_save_name(day: date, version: int) -> str:
    return f"{SAVE_FILE_PREFIX}_{day.strftime('%d-%m-%Y')}_v{version}{SAVE_FILE_EXTENSION}"


def list_saves(directory: Path) -> list[SaveName]:
    """Save files in `directory`, oldest first; a missing directory has none."""
    if not directory.is_dir():
        return []
    names = (parse_save_name(path.name) for path in directory.iterdir() if path.is_file())
    return sorted(name for name in names if name is not None)


def next_save_name(directory: Path, day: date | None = None) -> str:
    today = day or date.today()
    versions = [name.version for name in list_saves(directory) if name.day == today]
    return format_save_name(today, max(versions, default=0) + 1)


def cloud_save_name(moment: datetime | None = None) -> str:
    stamp = moment or now()
    return f"{SAVE_FILE_PREFIX}_{stamp.strftime('%d-%m-%Y_%H-%M-%S')}"


def latest_save(directory: Path) -> SaveName | None:
    saves = list_saves(directory)
    return saves[-1] if saves else None


def _read_latest_sync(directory: Path) -> Workspace | None:
    latest = latest_save(directory)
    if latest is None:
        return None
    return parse((directory / latest.file_name).read_text(encoding="utf-8"))


def save_required(workspace: Workspace, directory: Path) -> bool:
    """False when the latest save holds exactly this workspace."""
    try:
        saved = _read_latest_sync(directory)
    except (OSError, ValueError) as exc:
        logger.debug("Latest save unreadable, a new save is required: %s", exc)
        return True
    if saved is None:
        return len(workspace) > 0
    return saved.structure() != workspace.structure()


async def write_save(
    directory: Path,
    workspace: Workspace,
    date_format: DateTimeFormat,
    day: date | None = None,
) -> Path:
    """Write the next versioned save for `day` and return its path."""
    content = serialize(workspace, date_format)
    directory.mkdir(parents=True, exist_ok=True)
    lock = FileLock(str(directory / LOCK_FILE_NAME), thread_local=False)
    try:
        await asyncio.to_thread(lock.acquire, timeout=LOCK_TIMEOUT_SECONDS)
    except Timeout as exc:
        raise IOFailureError("Save directory is locked by another instance") from exc
    try:
        path = directory / next_save_name(directory, day)
        await atomic_write_async(path, content)
    finally:
        lock.release()
    logger.info("Saved %d boards to %s", len(workspace), path)
    return path


async def read_save(path: Path) -> Workspace:
    try:
        text = await read_text_async(path)
    except OSError as exc:
        raise IOFailureError(f"Could not read {path.name}: {exc}") from exc
    try:
        return parse(text)
    except (ValidationError, ValueError) as exc:
        raise IOFailureError(f"{path.name} is not a valid save file") from exc


async def delete_save(path: Path) -> None:
    if parse_save_name(path.name) is None:
        raise IOFailureError(f"{path.name} is not a save file")
    try:
        await asyncio.to_thread(path.unlink)
    except OSError as exc:
        raise IOFailureError(f"Could not delete {path.name}: {exc}") from exc
    logger.info("Deleted save %s", path.name)
