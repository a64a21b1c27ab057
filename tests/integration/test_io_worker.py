"""Tests for the background IO worker: queueing rules and request execution."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from kanban_tui.core.dates import DateTimeFormat
from kanban_tui.errors import IOFailureError
from kanban_tui.io_worker import (
    AutoSave,
    DeleteLocalSave,
    Initialize,
    InitResult,
    IoCompletion,
    IoWorker,
    ListLocalSaves,
    LoadSaveLocal,
    Login,
    SaveLocalData,
    SyncLocalData,
)
from kanban_tui.storage.cloud import InMemoryCloudClient, Session, load_session, save_session

if TYPE_CHECKING:
    from pathlib import Path

    from kanban_tui.core.models import Workspace

pytestmark = pytest.mark.integration

EMAIL = "ada@example.com"
PASSWORD = "correcthorse"
FORMAT = DateTimeFormat.DAY_MONTH_YEAR_TIME


def _collecting() -> tuple[IoWorker, list[IoCompletion]]:
    posted: list[IoCompletion] = []
    return IoWorker(posted.append), posted


class TestQueue:
    def test_equal_requests_are_deduplicated(self, save_dir: Path):
        worker, _posted = _collecting()
        request = DeleteLocalSave(save_dir / "kanban_01-01-2024_v1.json")
        assert worker.submit(request)
        assert not worker.submit(request)
        assert worker.pending == (request,)
        assert worker.busy

    def test_refresh_request_supersedes_pending_one(self, tmp_path: Path):
        worker, posted = _collecting()
        first = ListLocalSaves(tmp_path / "a")
        second = ListLocalSaves(tmp_path / "b")
        worker.submit(first)
        worker.submit(second)
        assert worker.pending == (second,)
        assert len(posted) == 1
        assert posted[0].request == first
        assert posted[0].superseded

    def test_non_refresh_requests_queue_in_order(self, save_dir: Path, workspace: Workspace):
        worker, posted = _collecting()
        first = SaveLocalData(workspace, save_dir, FORMAT)
        second = DeleteLocalSave(save_dir / "kanban_01-01-2024_v1.json")
        worker.submit(first)
        worker.submit(second)
        assert worker.pending == (first, second)
        assert posted == []

    async def test_closed_worker_rejects(self, save_dir: Path):
        worker, _posted = _collecting()
        await worker.stop()
        assert worker.closed
        assert not worker.submit(ListLocalSaves(save_dir))

    async def test_loop_flushes_pending_on_stop(self, save_dir: Path, workspace: Workspace):
        worker, posted = _collecting()
        worker.start()
        worker.submit(SaveLocalData(workspace, save_dir, FORMAT))
        worker.submit(ListLocalSaves(save_dir))
        await worker.stop()
        assert [type(completion.request) for completion in posted] == [
            SaveLocalData,
            ListLocalSaves,
        ]
        assert all(completion.ok for completion in posted)
        assert len(posted[1].value) == 1
        assert not worker.busy


class TestLocalRequests:
    async def test_save_then_autosave_without_changes(self, save_dir: Path, workspace: Workspace):
        worker, _posted = _collecting()
        saved = await worker.run(SaveLocalData(workspace, save_dir, FORMAT))
        assert saved.ok
        assert saved.value.exists()
        assert saved.message == f"Saved to {saved.value.name}"

        unchanged = await worker.run(AutoSave(workspace.clone(), save_dir, FORMAT))
        assert unchanged.value is None
        assert unchanged.message == "No changes to save"

    async def test_autosave_writes_when_changed(self, save_dir: Path, workspace: Workspace):
        worker, _posted = _collecting()
        await worker.run(SaveLocalData(workspace, save_dir, FORMAT))
        changed = workspace.clone()
        changed.boards.pop()
        completion = await worker.run(AutoSave(changed, save_dir, FORMAT))
        assert completion.value is not None
        assert completion.value.name.endswith("_v2.json")

    async def test_listing_is_newest_first(self, save_dir: Path, workspace: Workspace):
        worker, _posted = _collecting()
        await worker.run(SaveLocalData(workspace, save_dir, FORMAT))
        await worker.run(SaveLocalData(workspace, save_dir, FORMAT))
        listed = (await worker.run(ListLocalSaves(save_dir))).value
        assert [save.version for save in listed] == [2, 1]

    async def test_load_round_trip(self, save_dir: Path, workspace: Workspace):
        worker, _posted = _collecting()
        path = (await worker.run(SaveLocalData(workspace, save_dir, FORMAT))).value
        loaded = await worker.run(LoadSaveLocal(path))
        assert loaded.value.structure() == workspace.structure()
        assert loaded.message == f"Loaded {path.name}"

    async def test_invalid_file_becomes_error(self, save_dir: Path):
        worker, _posted = _collecting()
        path = save_dir / "kanban_01-01-2024_v1.json"
        path.write_text("{broken", encoding="utf-8")
        completion = await worker.run(LoadSaveLocal(path))
        assert not completion.ok
        assert isinstance(completion.error, IOFailureError)
        assert completion.value is None

    async def test_delete(self, save_dir: Path, workspace: Workspace):
        worker, _posted = _collecting()
        path = (await worker.run(SaveLocalData(workspace, save_dir, FORMAT))).value
        completion = await worker.run(DeleteLocalSave(path))
        assert completion.ok
        assert not path.exists()


class TestCloudRequests:
    async def test_without_client_fails(self, tmp_path: Path):
        worker, _posted = _collecting()
        completion = await worker.run(Login(EMAIL, PASSWORD, tmp_path / "session.json"))
        assert completion.error is not None
        assert completion.error.message == "Cloud sync is not available"

    async def test_login_persists_session(self, tmp_path: Path):
        cloud = InMemoryCloudClient()
        await cloud.signup(EMAIL, PASSWORD)
        worker = IoWorker(lambda _completion: None, cloud)
        session_path = tmp_path / "session.json"
        completion = await worker.run(Login(EMAIL, PASSWORD, session_path))
        assert isinstance(completion.value, Session)
        assert completion.message == f"Logged in as {EMAIL}"
        assert load_session(session_path) == completion.value

    async def test_sync_uploads_snapshot(self, workspace: Workspace):
        cloud = InMemoryCloudClient()
        await cloud.signup(EMAIL, PASSWORD)
        session = (await cloud.login(EMAIL, PASSWORD)).value
        worker = IoWorker(lambda _completion: None, cloud)
        completion = await worker.run(SyncLocalData(session, workspace, FORMAT))
        assert completion.ok
        assert completion.message.startswith("Synced as kanban_")


class TestInitialize:
    async def test_loads_last_save_and_refreshes_session(
        self, save_dir: Path, workspace: Workspace, tmp_path: Path
    ):
        cloud = InMemoryCloudClient()
        await cloud.signup(EMAIL, PASSWORD)
        session = (await cloud.login(EMAIL, PASSWORD)).value
        session_path = tmp_path / "session.json"
        save_session(session, session_path)
        worker = IoWorker(lambda _completion: None, cloud)
        await worker.run(SaveLocalData(workspace, save_dir, FORMAT))

        completion = await worker.run(Initialize(save_dir, True, True, session_path))
        result = completion.value
        assert isinstance(result, InitResult)
        assert result.workspace is not None
        assert result.workspace.structure() == workspace.structure()
        assert result.session == session
        assert completion.message == f"Loaded {result.save_name}, Logged in as {EMAIL}"

    async def test_stale_session_is_cleared(self, save_dir: Path, tmp_path: Path):
        session_path = tmp_path / "session.json"
        save_session(Session(user_id="u", email=EMAIL, access_token="stale"), session_path)
        worker = IoWorker(lambda _completion: None, InMemoryCloudClient())
        completion = await worker.run(Initialize(save_dir, True, True, session_path))
        assert completion.value == InitResult(None, None, None)
        assert not session_path.exists()

    async def test_flags_off(self, save_dir: Path, workspace: Workspace):
        worker, _posted = _collecting()
        await worker.run(SaveLocalData(workspace, save_dir, FORMAT))
        completion = await worker.run(Initialize(save_dir, False, False))
        assert completion.value == InitResult(None, None, None)
        assert completion.message == ""
