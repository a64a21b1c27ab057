"""Tests for atomic file writes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from kanban_tui.atomic import atomic_write, atomic_write_async, read_text_async

if TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

pytestmark = pytest.mark.integration


class TestAtomicWrite:
    def test_creates_parents_and_replaces(self, tmp_path: Path):
        target = tmp_path / "nested" / "config.json"
        atomic_write(target, "first")
        atomic_write(target, "second")
        assert target.read_text(encoding="utf-8") == "second"
        assert [path.name for path in target.parent.iterdir()] == ["config.json"]

    def test_failure_leaves_original_and_no_temp(self, tmp_path: Path, mocker: MockerFixture):
        target = tmp_path / "config.json"
        atomic_write(target, "original")
        mocker.patch("pathlib.Path.replace", side_effect=OSError("boom"))
        with pytest.raises(OSError, match="boom"):
            atomic_write(target, "new")
        assert target.read_text(encoding="utf-8") == "original"
        assert [path.name for path in tmp_path.iterdir()] == ["config.json"]


class TestAtomicWriteAsync:
    async def test_round_trip(self, tmp_path: Path):
        target = tmp_path / "saves" / "kanban_01-01-2024_v1.json"
        await atomic_write_async(target, '{"boards": []}')
        assert await read_text_async(target) == '{"boards": []}'
        assert [path.name for path in target.parent.iterdir()] == [target.name]
