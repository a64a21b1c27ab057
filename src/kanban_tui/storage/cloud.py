"""Cloud client interface, result variants and an in-memory implementation."""

from __future__ import annotations

import hashlib
import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ValidationError

from kanban_tui.atomic import atomic_write
from kanban_tui.core.dates import now
from kanban_tui.limits import MIN_PASSWORD_LENGTH, RESET_PASSWORD_LINK_COOLDOWN
from kanban_tui.paths import get_session_path

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Failed:
    message: str


@dataclass(frozen=True, slots=True)
class RateLimited:
    message: str
    retry_after: float


type CloudResult[T] = Ok[T] | Failed | RateLimited


class Session(BaseModel):
    """Authenticated session; persisted for auto-login."""

    user_id: str
    email: str
    access_token: str


@dataclass(frozen=True, slots=True)
class CloudSave:
    save_id: int
    name: str
    created_at: datetime
    content: str


class CloudClient(Protocol):
    """Asynchronous request/response interface to the sync service."""

    async def login(self, email: str, password: str) -> CloudResult[Session]: ...

    async def signup(self, email: str, password: str) -> CloudResult[str]: ...

    async def send_reset_link(self, email: str) -> CloudResult[str]: ...

    async def reset_password(
        self, email: str, reset_link: str, new_password: str
    ) -> CloudResult[str]: ...

    async def sync(self, session: Session, name: str, snapshot: str) -> CloudResult[CloudSave]: ...

    async def list_saves(self, session: Session) -> CloudResult[list[CloudSave]]: ...

    async def fetch_save(self, session: Session, save_id: int) -> CloudResult[CloudSave]: ...

    async def delete_save(self, session: Session, save_id: int) -> CloudResult[int]: ...

    async def refresh(self, session: Session) -> CloudResult[Session]: ...

    async def logout(self, session: Session) -> CloudResult[str]: ...


def validate_credentials(email: str, password: str) -> str | None:
    """Problem with the credentials, if any."""
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        return "Invalid email address"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def _hash_password(salt: str, password: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode()).hexdigest()


@dataclass(slots=True)
class _Account:
    user_id: str
    salt: str
    password_hash: str
    saves: list[CloudSave] = field(default_factory=list)


@dataclass(slots=True)
class InMemoryCloudClient:
    """Process-local sync service.

    The reset-link cooldown lives only in memory; it is forgotten on restart.
    """

    clock: Callable[[], float] = time.monotonic
    reset_cooldown: float = RESET_PASSWORD_LINK_COOLDOWN
    _accounts: dict[str, _Account] = field(default_factory=dict)
    _tokens: dict[str, str] = field(default_factory=dict)
    _reset_links: dict[str, str] = field(default_factory=dict)
    _reset_sent_at: dict[str, float] = field(default_factory=dict)
    _next_save_id: int = 1

    def _account_for(self, session: Session) -> _Account | None:
        email = self._tokens.get(session.access_token)
        if email is None or email != session.email:
            return None
        return self._accounts.get(email)

    async def login(self, email: str, password: str) -> CloudResult[Session]:
        account = self._accounts.get(email.lower())
        if account is None or _hash_password(account.salt, password) != account.password_hash:
            return Failed("Invalid email or password")
        token = secrets.token_urlsafe(24)
        self._tokens[token] = email.lower()
        logger.info("Logged in as %s", email)
        return Ok(Session(user_id=account.user_id, email=email.lower(), access_token=token))

    async def signup(self, email: str, password: str) -> CloudResult[str]:
        problem = validate_credentials(email, password)
        if problem is not None:
            return Failed(problem)
        key = email.lower()
        if key in self._accounts:
            return Failed("An account with this email already exists")
        salt = secrets.token_hex(8)
        self._accounts[key] = _Account(
            user_id=secrets.token_hex(8), salt=salt, password_hash=_hash_password(salt, password)
        )
        return Ok("Sign up successful, you can now log in")

    async def send_reset_link(self, email: str) -> CloudResult[str]:
        key = email.lower()
        current = self.clock()
        sent_at = self._reset_sent_at.get(key)
        if sent_at is not None and current - sent_at < self.reset_cooldown:
            retry_after = self.reset_cooldown - (current - sent_at)
            return RateLimited(
                f"Please wait {int(retry_after) + 1} seconds before requesting another link",
                retry_after,
            )
        if key not in self._accounts:
            return Failed("No account found for this email")
        self._reset_sent_at[key] = current
        self._reset_links[key] = secrets.token_urlsafe(16)
        return Ok("Reset password link sent, check your email")

    def issued_reset_link(self, email: str) -> str | None:
        """The last link "emailed" to `email`."""
        return self._reset_links.get(email.lower())

    async def reset_password(
        self, email: str, reset_link: str, new_password: str
    ) -> CloudResult[str]:
        key = email.lower()
        if self._reset_links.get(key) != reset_link.strip():
            return Failed("Invalid reset password link")
        problem = validate_credentials(email, new_password)
        if problem is not None:
            return Failed(problem)
        account = self._accounts[key]
        account.password_hash = _hash_password(account.salt, new_password)
        del self._reset_links[key]
        return Ok("Password reset successful")

    async def sync(self, session: Session, name: str, snapshot: str) -> CloudResult[CloudSave]:
        account = self._account_for(session)
        if account is None:
            return Failed("Not logged in")
        save = CloudSave(self._next_save_id, name, now(), snapshot)
        self._next_save_id += 1
        account.saves.append(save)
        return Ok(save)

    async def list_saves(self, session: Session) -> CloudResult[list[CloudSave]]:
        account = self._account_for(session)
        if account is None:
            return Failed("Not logged in")
        return Ok(list(account.saves))

    async def fetch_save(self, session: Session, save_id: int) -> CloudResult[CloudSave]:
        account = self._account_for(session)
        if account is None:
            return Failed("Not logged in")
        for save in account.saves:
            if save.save_id == save_id:
                return Ok(save)
        return Failed(f"Cloud save {save_id} not found")

    async def delete_save(self, session: Session, save_id: int) -> CloudResult[int]:
        account = self._account_for(session)
        if account is None:
            return Failed("Not logged in")
        remaining = [save for save in account.saves if save.save_id != save_id]
        if len(remaining) == len(account.saves):
            return Failed(f"Cloud save {save_id} not found")
        account.saves = remaining
        return Ok(save_id)

    async def refresh(self, session: Session) -> CloudResult[Session]:
        if self._account_for(session) is None:
            return Failed("Session expired, please log in again")
        return Ok(session)

    async def logout(self, session: Session) -> CloudResult[str]:
        self._tokens.pop(session.access_token, None)
        return Ok("Logged out")


def load_session(path: Path | None = None) -> Session | None:
    target = path or get_session_path()
    if not target.exists():
        return None
    try:
        return Session.model_validate_json(target.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        logger.warning("Ignoring unreadable session file: %s", exc)
        return None


def save_session(session: Session, path: Path | None = None) -> None:
    atomic_write(path or get_session_path(), session.model_dump_json())


def clear_session(path: Path | None = None) -> None:
    (path or get_session_path()).unlink(missing_ok=True)
