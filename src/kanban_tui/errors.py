"""Typed error kinds raised by handlers and converted to toasts by the controller."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

from kanban_tui.core.enums import ToastKind

if TYPE_CHECKING:
    from collections.abc import Iterable


class ErrorKind(StrEnum):
    INPUT_VALIDATION = "InputValidation"
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    IO_FAILURE = "IOFailure"
    RATE_LIMITED = "RateLimited"
    CONFIG_MALFORMED = "ConfigMalformed"
    KEYBINDING_CONFLICT = "KeybindingConflict"
    NOTICE = "Notice"


class KanbanError(Exception):
    """Base class for every error the core surfaces to the user."""

    kind: ClassVar[ErrorKind] = ErrorKind.IO_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputValidationError(KanbanError):
    kind = ErrorKind.INPUT_VALIDATION


class NotFoundError(KanbanError):
    kind = ErrorKind.NOT_FOUND


class ForbiddenError(KanbanError):
    kind = ErrorKind.FORBIDDEN


class IOFailureError(KanbanError):
    kind = ErrorKind.IO_FAILURE


class RateLimitedError(KanbanError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, retry_after: float) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class ConfigMalformedError(KanbanError):
    kind = ErrorKind.CONFIG_MALFORMED


class KeybindingConflictError(KanbanError):
    kind = ErrorKind.KEYBINDING_CONFLICT

    def __init__(self, conflicts: Iterable[str]) -> None:
        self.conflicts = tuple(conflicts)
        super().__init__(f"Overlapped keybinds found: {', '.join(self.conflicts)}")


class HistoryExhausted(KanbanError):
    """Undo/redo attempted past either end of the log."""

    kind = ErrorKind.NOTICE


_TOAST_KIND_BY_ERROR: dict[ErrorKind, ToastKind] = {
    ErrorKind.INPUT_VALIDATION: ToastKind.WARNING,
    ErrorKind.FORBIDDEN: ToastKind.WARNING,
    ErrorKind.RATE_LIMITED: ToastKind.WARNING,
    ErrorKind.IO_FAILURE: ToastKind.ERROR,
    ErrorKind.CONFIG_MALFORMED: ToastKind.ERROR,
    ErrorKind.KEYBINDING_CONFLICT: ToastKind.ERROR,
    ErrorKind.NOTICE: ToastKind.INFO,
}


def toast_kind_for(kind: ErrorKind) -> ToastKind | None:
    """Toast severity for an error kind; None means log only (NotFound)."""
    return _TOAST_KIND_BY_ERROR.get(kind)
