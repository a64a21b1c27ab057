"""Save file codec, naming and versioned writes."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from kanban_tui.core.dates import DateTimeFormat
from kanban_tui.core.models import Workspace
from kanban_tui.errors import IOFailureError
from kanban_tui.storage.saves import (
    SaveName,
    cloud_save_name,
    delete_save,
    format_save_name,
    latest_save,
    list_saves,
    next_save_name,
    parse,
    parse_save_name,
    read_save,
    save_required,
    serialize,
    write_save,
)

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.integration

MARCH_5 = date(2024, 3, 5)


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_text("{}")


class TestNames:
    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("kanban_05-03-2024_v2.json", (MARCH_5, 2)),
            ("kanban_05-03-2024_v12", (MARCH_5, 12)),
            ("kanban_31-02-2024_v1.json", None),
            ("kanban_5-3-2024_v1.json", None),
            ("notes.json", None),
        ],
    )
    def test_parse_save_name(self, file_name: str, expected: tuple[date, int] | None) -> None:
        parsed = parse_save_name(file_name)
        if expected is None:
            assert parsed is None
        else:
            assert parsed is not None
            assert (parsed.day, parsed.version) == expected

    def test_format_save_name(self):
        assert format_save_name(MARCH_5, 3) == "kanban_05-03-2024_v3.json"
        assert SaveName(MARCH_5, 3, "kanban_05-03-2024_v3.json").stem == "kanban_05-03-2024_v3"

    def test_cloud_save_name(self):
        moment = datetime(2024, 3, 5, 8, 9, 10)
        assert cloud_save_name(moment) == "kanban_05-03-2024_08-09-10"

    def test_list_orders_by_date_then_version(self, save_dir: Path) -> None:
        _touch(
            save_dir,
            "kanban_05-03-2024_v10.json",
            "kanban_05-03-2024_v2.json",
            "kanban_28-02-2024_v7.json",
            "readme.txt",
        )
        assert [name.file_name for name in list_saves(save_dir)] == [
            "kanban_28-02-2024_v7.json",
            "kanban_05-03-2024_v2.json",
            "kanban_05-03-2024_v10.json",
        ]
        latest = latest_save(save_dir)
        assert latest is not None
        assert latest.version == 10

    def test_next_save_name(self, save_dir: Path) -> None:
        assert next_save_name(save_dir, MARCH_5) == "kanban_05-03-2024_v1.json"
        _touch(save_dir, "kanban_05-03-2024_v1.json", "kanban_05-03-2024_v4.json")
        assert next_save_name(save_dir, MARCH_5) == "kanban_05-03-2024_v5.json"
        assert next_save_name(save_dir, date(2024, 3, 6)) == "kanban_06-03-2024_v1.json"

    def test_missing_directory_has_no_saves(self, tmp_path: Path) -> None:
        assert list_saves(tmp_path / "absent") == []
        assert latest_save(tmp_path / "absent") is None


class TestCodec:
    def test_round_trip_keeps_content_and_timestamps(self, workspace: Workspace) -> None:
        restored = parse(serialize(workspace, DateTimeFormat.DAY_MONTH_YEAR))
        assert restored.structure() == workspace.structure()
        original = [card for _board, card in workspace.all_cards()]
        loaded = [card for _board, card in restored.all_cards()]
        assert [card.created for card in loaded] == [card.created for card in original]
        assert [card.completed for card in loaded] == [card.completed for card in original]

    def test_timed_format_is_always_written(self, workspace: Workspace) -> None:
        data = json.loads(serialize(workspace, DateTimeFormat.YEAR_MONTH_DAY))
        assert data["date_format"] == DateTimeFormat.YEAR_MONTH_DAY_TIME.value
        first_card = data["boards"][0]["cards"][0]
        assert first_card["created"] == "2024/01/10-09:00:00"
        assert first_card["due_date"] == "Not Set"

    def test_duplicate_ids_rejected(self, workspace: Workspace) -> None:
        data = json.loads(serialize(workspace, DateTimeFormat.DAY_MONTH_YEAR))
        cards = data["boards"][0]["cards"]
        cards[1]["id"] = cards[0]["id"]
        with pytest.raises(ValueError, match="Duplicate card id"):
            parse(json.dumps(data))

    def test_id_halves_must_fit_64_bits(self, workspace: Workspace) -> None:
        data = json.loads(serialize(workspace, DateTimeFormat.DAY_MONTH_YEAR))
        data["boards"][0]["id"] = [1 << 64, 0]
        with pytest.raises(ValidationError):
            parse(json.dumps(data))

    def test_missing_created_rejected(self, workspace: Workspace) -> None:
        data = json.loads(serialize(workspace, DateTimeFormat.DAY_MONTH_YEAR))
        data["boards"][0]["cards"][0]["created"] = "Not Set"
        with pytest.raises(ValueError, match="created"):
            parse(json.dumps(data))


class TestSaveFiles:
    async def test_write_save_versions_within_a_day(
        self, save_dir: Path, workspace: Workspace
    ) -> None:
        first = await write_save(save_dir, workspace, DateTimeFormat.DAY_MONTH_YEAR, MARCH_5)
        second = await write_save(save_dir, workspace, DateTimeFormat.DAY_MONTH_YEAR, MARCH_5)
        assert first.name == "kanban_05-03-2024_v1.json"
        assert second.name == "kanban_05-03-2024_v2.json"
        restored = await read_save(second)
        assert restored.structure() == workspace.structure()

    async def test_read_invalid_save(self, save_dir: Path) -> None:
        path = save_dir / "kanban_05-03-2024_v1.json"
        path.write_text('{"boards": 3}')
        with pytest.raises(IOFailureError, match="not a valid save file"):
            await read_save(path)
        with pytest.raises(IOFailureError, match="Could not read"):
            await read_save(save_dir / "kanban_05-03-2024_v9.json")

    async def test_save_required(self, save_dir: Path, workspace: Workspace) -> None:
        assert not save_required(Workspace(), save_dir)
        assert save_required(workspace, save_dir)
        await write_save(save_dir, workspace, DateTimeFormat.DAY_MONTH_YEAR)
        assert not save_required(workspace, save_dir)
        workspace.boards[0].cards[0].name = "Write better docs"
        assert save_required(workspace, save_dir)

    async def test_delete_save(self, save_dir: Path, workspace: Workspace) -> None:
        path = await write_save(save_dir, workspace, DateTimeFormat.DAY_MONTH_YEAR)
        await delete_save(path)
        assert not path.exists()
        other = save_dir / "notes.json"
        other.write_text("{}")
        with pytest.raises(IOFailureError):
            await delete_save(other)
        assert other.exists()
