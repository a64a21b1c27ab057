"""Tests for error kinds and the toast severity they map to."""

from __future__ import annotations

import pytest

from kanban_tui.core.enums import ToastKind
from kanban_tui.errors import (
    ConfigMalformedError,
    ErrorKind,
    ForbiddenError,
    HistoryExhausted,
    InputValidationError,
    IOFailureError,
    KanbanError,
    KeybindingConflictError,
    NotFoundError,
    RateLimitedError,
    toast_kind_for,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("error", "toast"),
    [
        (InputValidationError("bad name"), ToastKind.WARNING),
        (ForbiddenError("log in first"), ToastKind.WARNING),
        (RateLimitedError("slow down", retry_after=30.0), ToastKind.WARNING),
        (IOFailureError("disk full"), ToastKind.ERROR),
        (ConfigMalformedError("reset"), ToastKind.ERROR),
        (KeybindingConflictError(["q (quit, delete)"]), ToastKind.ERROR),
        (HistoryExhausted("Nothing to undo"), ToastKind.INFO),
        (NotFoundError("card gone"), None),
    ],
)
def test_toast_kind(error: KanbanError, toast: ToastKind | None) -> None:
    assert isinstance(error, KanbanError)
    assert toast_kind_for(error.kind) is toast


def test_every_kind_is_mapped_or_log_only() -> None:
    unmapped = [kind for kind in ErrorKind if toast_kind_for(kind) is None]
    assert unmapped == [ErrorKind.NOT_FOUND]


def test_payloads() -> None:
    limited = RateLimitedError("slow down", retry_after=12.5)
    assert limited.retry_after == 12.5
    assert limited.message == str(limited) == "slow down"

    conflict = KeybindingConflictError(["q (quit, delete)", "x (undo, redo)"])
    assert conflict.conflicts == ("q (quit, delete)", "x (undo, redo)")
    assert conflict.message == "Overlapped keybinds found: q (quit, delete), x (undo, redo)"
