"""Asynchronous IO worker: saves, loads and cloud calls off the UI loop.

Requests are frozen values carrying everything the worker needs; callers pass
workspace clones. Completions are posted back through a
callback; the worker never raises across that boundary.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from pydantic import ValidationError

from kanban_tui.errors import IOFailureError, KanbanError, RateLimitedError
from kanban_tui.limits import SHUTDOWN_TIMEOUT
from kanban_tui.storage import saves
from kanban_tui.storage.cloud import (
    Failed,
    Ok,
    RateLimited,
    clear_session,
    load_session,
    save_session,
)
from kanban_tui.themes import save_theme

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from kanban_tui.config import AppConfig
    from kanban_tui.core.dates import DateTimeFormat
    from kanban_tui.core.models import Workspace
    from kanban_tui.storage.cloud import CloudClient, CloudResult, Session
    from kanban_tui.themes import Theme

logger = logging.getLogger(__name__)


class IoRequest:
    """Base for worker requests.

    `refresh` requests coalesce: a newer request of the same type replaces a
    pending one. Equal requests are always deduplicated.
    """

    refresh: ClassVar[bool] = False
    label: ClassVar[str] = "IO"


@dataclass(frozen=True, slots=True)
class Initialize(IoRequest):
    save_directory: Path
    load_last_save: bool
    auto_login: bool
    session_path: Path | None = None
    label: ClassVar[str] = "Initializing"


@dataclass(frozen=True, slots=True)
class SaveLocalData(IoRequest):
    workspace: Workspace
    save_directory: Path
    date_format: DateTimeFormat
    label: ClassVar[str] = "Saving"


@dataclass(frozen=True, slots=True)
class AutoSave(IoRequest):
    """Save only when the workspace differs from the latest save."""

    workspace: Workspace
    save_directory: Path
    date_format: DateTimeFormat
    label: ClassVar[str] = "Auto saving"


@dataclass(frozen=True, slots=True)
class ListLocalSaves(IoRequest):
    save_directory: Path
    refresh: ClassVar[bool] = True
    label: ClassVar[str] = "Listing saves"


@dataclass(frozen=True, slots=True)
class LoadSaveLocal(IoRequest):
    path: Path
    label: ClassVar[str] = "Loading save"


@dataclass(frozen=True, slots=True)
class LoadLocalPreview(IoRequest):
    path: Path
    refresh: ClassVar[bool] = True
    label: ClassVar[str] = "Loading preview"


@dataclass(frozen=True, slots=True)
class DeleteLocalSave(IoRequest):
    path: Path
    label: ClassVar[str] = "Deleting save"


@dataclass(frozen=True, slots=True)
class Login(IoRequest):
    email: str
    password: str = field(repr=False)
    session_path: Path | None = None
    label: ClassVar[str] = "Logging in"


@dataclass(frozen=True, slots=True)
class Logout(IoRequest):
    session: Session
    session_path: Path | None = None
    label: ClassVar[str] = "Logging out"


@dataclass(frozen=True, slots=True)
class SignUp(IoRequest):
    email: str
    password: str = field(repr=False)
    label: ClassVar[str] = "Signing up"


@dataclass(frozen=True, slots=True)
class SendResetPasswordEmail(IoRequest):
    email: str
    label: ClassVar[str] = "Sending reset link"


@dataclass(frozen=True, slots=True)
class ResetPassword(IoRequest):
    email: str
    reset_link: str
    password: str = field(repr=False)
    label: ClassVar[str] = "Resetting password"


@dataclass(frozen=True, slots=True)
class SyncLocalData(IoRequest):
    session: Session
    workspace: Workspace
    date_format: DateTimeFormat
    label: ClassVar[str] = "Syncing"


@dataclass(frozen=True, slots=True)
class GetCloudData(IoRequest):
    session: Session
    refresh: ClassVar[bool] = True
    label: ClassVar[str] = "Fetching cloud saves"


@dataclass(frozen=True, slots=True)
class LoadSaveCloud(IoRequest):
    session: Session
    save_id: int
    label: ClassVar[str] = "Loading cloud save"


@dataclass(frozen=True, slots=True)
class LoadCloudPreview(IoRequest):
    session: Session
    save_id: int
    refresh: ClassVar[bool] = True
    label: ClassVar[str] = "Loading cloud preview"


@dataclass(frozen=True, slots=True)
class DeleteCloudSave(IoRequest):
    session: Session
    save_id: int
    label: ClassVar[str] = "Deleting cloud save"


@dataclass(frozen=True, slots=True)
class SaveConfig(IoRequest):
    config: AppConfig
    path: Path | None = None
    refresh: ClassVar[bool] = True
    label: ClassVar[str] = "Saving config"


@dataclass(frozen=True, slots=True)
class SaveThemeFile(IoRequest):
    theme: Theme
    themes_dir: Path | None = None
    label: ClassVar[str] = "Saving theme"


@dataclass(frozen=True, slots=True)
class InitResult:
    workspace: Workspace | None
    save_name: str | None
    session: Session | None


@dataclass(frozen=True, slots=True)
class IoCompletion:
    request: IoRequest
    value: object = None
    message: str = ""
    error: KanbanError | None = None
    superseded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def _unwrap[T](result: CloudResult[T]) -> T:
    match result:
        case Ok(value):
            return value
        case RateLimited(message, retry_after):
            raise RateLimitedError(message, retry_after)
        case Failed(message):
            raise IOFailureError(message)
    raise IOFailureError(f"Unexpected cloud result {result!r}")


class IoWorker:
    """Single sibling task that runs IO requests one at a time."""

    def __init__(
        self,
        post: Callable[[IoCompletion], None],
        cloud: CloudClient | None = None,
    ) -> None:
        self._post = post
        self._cloud = cloud
        self._pending: list[IoRequest] = []
        self._wakeup = asyncio.Event()
        self._closed = False
        self._busy = False
        self._task: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def busy(self) -> bool:
        return self._busy or bool(self._pending)

    @property
    def pending(self) -> tuple[IoRequest, ...]:
        return tuple(self._pending)

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._worker_loop(), name="kanban-io-worker")
        logger.info("IO worker started")

    def submit(self, request: IoRequest) -> bool:
        """Queue `request`; returns False when it was dropped as a duplicate or after close."""
        if self._closed:
            logger.debug("IO worker closed, dropping %s", type(request).__name__)
            return False
        if request in self._pending:
            logger.debug("Deduplicated %s", type(request).__name__)
            return False
        if request.refresh:
            for item in [item for item in self._pending if type(item) is type(request)]:
                self._pending.remove(item)
                self._post(IoCompletion(item, superseded=True))
        self._pending.append(request)
        self._wakeup.set()
        return True

    async def stop(self, timeout: float = SHUTDOWN_TIMEOUT) -> None:
        """Close the worker; pending requests are flushed before the task ends."""
        self._closed = True
        self._wakeup.set()
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._task, timeout=timeout)
        except TimeoutError:
            logger.warning("IO worker did not finish within %.1fs, cancelling", timeout)
            self._task.cancel()
        self._task = None

    async def _worker_loop(self) -> None:
        while True:
            if not self._pending:
                if self._closed:
                    break
                self._wakeup.clear()
                await self._wakeup.wait()
                continue
            request = self._pending.pop(0)
            self._busy = True
            try:
                self._post(await self.run(request))
            except asyncio.CancelledError:
                logger.info("IO worker cancelled")
                raise
            finally:
                self._busy = False
        logger.info("IO worker stopped")

    async def run(self, request: IoRequest) -> IoCompletion:
        """Execute one request and wrap the outcome; failures become error payloads."""
        try:
            value, message = await self._dispatch(request)
        except KanbanError as exc:
            logger.warning("%s failed: %s", request.label, exc.message)
            return IoCompletion(request, error=exc)
        except (OSError, ValidationError, ValueError) as exc:
            logger.error("%s failed: %s", request.label, exc)
            return IoCompletion(request, error=IOFailureError(f"{request.label} failed: {exc}"))
        return IoCompletion(request, value=value, message=message)

    def _client(self) -> CloudClient:
        if self._cloud is None:
            raise IOFailureError("Cloud sync is not available")
        return self._cloud

    async def _dispatch(self, request: IoRequest) -> tuple[object, str]:
        match request:
            case Initialize():
                return await self._initialize(request)
            case SaveLocalData(workspace, directory, date_format):
                path = await saves.write_save(directory, workspace, date_format)
                return path, f"Saved to {path.name}"
            case AutoSave(workspace, directory, date_format):
                required = await asyncio.to_thread(saves.save_required, workspace, directory)
                if not required:
                    return None, "No changes to save"
                path = await saves.write_save(directory, workspace, date_format)
                return path, f"Saved to {path.name}"
            case ListLocalSaves(directory):
                listed = await asyncio.to_thread(saves.list_saves, directory)
                return list(reversed(listed)), ""
            case LoadSaveLocal(path):
                return await saves.read_save(path), f"Loaded {path.name}"
            case LoadLocalPreview(path):
                return await saves.read_save(path), ""
            case DeleteLocalSave(path):
                await saves.delete_save(path)
                return path, f"Deleted {path.name}"
            case Login(email, password, session_path):
                session = _unwrap(await self._client().login(email, password))
                await asyncio.to_thread(save_session, session, session_path)
                return session, f"Logged in as {session.email}"
            case Logout(session, session_path):
                message = _unwrap(await self._client().logout(session))
                await asyncio.to_thread(clear_session, session_path)
                return None, message
            case SignUp(email, password):
                return None, _unwrap(await self._client().signup(email, password))
            case SendResetPasswordEmail(email):
                return None, _unwrap(await self._client().send_reset_link(email))
            case ResetPassword(email, reset_link, password):
                return None, _unwrap(
                    await self._client().reset_password(email, reset_link, password)
                )
            case SyncLocalData(session, workspace, date_format):
                snapshot = saves.serialize(workspace, date_format)
                name = saves.cloud_save_name()
                synced = _unwrap(await self._client().sync(session, name, snapshot))
                return synced, f"Synced as {synced.name}"
            case GetCloudData(session):
                listed = _unwrap(await self._client().list_saves(session))
                return sorted(listed, key=lambda save: save.save_id, reverse=True), ""
            case LoadSaveCloud(session, save_id) | LoadCloudPreview(session, save_id):
                save = _unwrap(await self._client().fetch_save(session, save_id))
                workspace = saves.parse(save.content)
                loaded = isinstance(request, LoadSaveCloud)
                message = f"Loaded cloud save {save.name}" if loaded else ""
                return workspace, message
            case DeleteCloudSave(session, save_id):
                deleted = _unwrap(await self._client().delete_save(session, save_id))
                return deleted, f"Deleted cloud save {deleted}"
            case SaveConfig(config, path):
                await config.save_async(path)
                return None, ""
            case SaveThemeFile(theme, themes_dir):
                path = await asyncio.to_thread(save_theme, theme, themes_dir)
                return path, f"Saved theme {theme.name}"
        raise IOFailureError(f"Unknown IO request {type(request).__name__}")

    async def _initialize(self, request: Initialize) -> tuple[InitResult, str]:
        workspace: Workspace | None = None
        save_name: str | None = None
        messages: list[str] = []
        if request.load_last_save:
            latest = await asyncio.to_thread(saves.latest_save, request.save_directory)
            if latest is not None:
                workspace = await saves.read_save(request.save_directory / latest.file_name)
                save_name = latest.stem
                messages.append(f"Loaded {latest.stem}")
        session: Session | None = None
        if request.auto_login and self._cloud is not None:
            stored = await asyncio.to_thread(load_session, request.session_path)
            if stored is not None:
                try:
                    session = _unwrap(await self._cloud.refresh(stored))
                    messages.append(f"Logged in as {session.email}")
                except KanbanError as exc:
                    logger.info("Auto login skipped: %s", exc.message)
                    await asyncio.to_thread(clear_session, request.session_path)
        return InitResult(workspace, save_name, session), ", ".join(messages)
