"""Timed toast notifications with a fade-in / hold / fade-out colour envelope.

Colours are computed from the clock time elapsed since the toast started, so
missed ticks never distort the fade.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.color import ColorTriplet

from kanban_tui.core.enums import ToastKind
from kanban_tui.limits import (
    MAX_TOASTS_TO_DISPLAY,
    TOAST_DEFAULT_DURATION,
    TOAST_ERROR_DURATION,
    TOAST_FADE_IN,
    TOAST_FADE_OUT,
    TOAST_LOADING_DURATION,
)
from kanban_tui.themes import ThemeRole

if TYPE_CHECKING:
    from collections.abc import Callable

    from kanban_tui.themes import Theme

_KIND_ROLES: dict[ToastKind, ThemeRole] = {
    ToastKind.ERROR: ThemeRole.LOG_ERROR,
    ToastKind.WARNING: ThemeRole.LOG_WARN,
    ToastKind.INFO: ThemeRole.LOG_INFO,
    ToastKind.LOADING: ThemeRole.LOG_DEBUG,
}

_FALLBACK_COLORS: dict[ToastKind, ColorTriplet] = {
    ToastKind.ERROR: ColorTriplet(255, 95, 95),
    ToastKind.WARNING: ColorTriplet(255, 255, 95),
    ToastKind.INFO: ColorTriplet(95, 255, 255),
    ToastKind.LOADING: ColorTriplet(95, 255, 95),
}


def default_duration(kind: ToastKind) -> float:
    if kind is ToastKind.ERROR:
        return TOAST_ERROR_DURATION
    if kind is ToastKind.LOADING:
        return TOAST_LOADING_DURATION
    return TOAST_DEFAULT_DURATION


def lerp_color(start: ColorTriplet, end: ColorTriplet, ratio: float) -> ColorTriplet:
    ratio = max(0.0, min(1.0, ratio))
    return ColorTriplet(
        round(start.red + (end.red - start.red) * ratio),
        round(start.green + (end.green - start.green) * ratio),
        round(start.blue + (end.blue - start.blue) * ratio),
    )


@dataclass(slots=True)
class Toast:
    title: str
    body: str
    kind: ToastKind
    start: float
    duration: float
    base_color: ColorTriplet
    color: ColorTriplet

    def expired(self, now: float) -> bool:
        return now - self.start >= self.duration

    def fade_ratio(self, now: float) -> float:
        """0.0 at the background colour, 1.0 at the base colour."""
        elapsed = now - self.start
        remaining = self.duration - elapsed
        if elapsed < TOAST_FADE_IN:
            return elapsed / TOAST_FADE_IN
        if remaining < TOAST_FADE_OUT:
            return max(0.0, remaining / TOAST_FADE_OUT)
        return 1.0


@dataclass(slots=True)
class ToastManager:
    background: ColorTriplet = field(default_factory=lambda: ColorTriplet(0, 0, 0))
    animations: bool = True
    max_visible: int = MAX_TOASTS_TO_DISPLAY
    toasts: list[Toast] = field(default_factory=list)
    colors: dict[ToastKind, ColorTriplet] = field(
        default_factory=lambda: dict(_FALLBACK_COLORS)
    )
    clock: Callable[[], float] = time.monotonic

    def apply_theme(self, theme: Theme) -> None:
        self.background = theme.background_triplet()
        for kind, role in _KIND_ROLES.items():
            self.colors[kind] = theme.triplet(role) or _FALLBACK_COLORS[kind]
        for toast in self.toasts:
            toast.base_color = self.colors[toast.kind]

    def push(
        self,
        title: str,
        body: str,
        kind: ToastKind,
        duration: float | None = None,
        now: float | None = None,
    ) -> Toast:
        started = self.clock() if now is None else now
        base = self.colors[kind]
        toast = Toast(
            title=title,
            body=body,
            kind=kind,
            start=started,
            duration=default_duration(kind) if duration is None else duration,
            base_color=base,
            color=base if not self.animations else self.background,
        )
        self.toasts.append(toast)
        return toast

    def info(self, body: str, title: str | None = None) -> Toast:
        return self.push(title or ToastKind.INFO.title, body, ToastKind.INFO)

    def warning(self, body: str, title: str | None = None) -> Toast:
        return self.push(title or ToastKind.WARNING.title, body, ToastKind.WARNING)

    def error(self, body: str, title: str | None = None) -> Toast:
        return self.push(title or ToastKind.ERROR.title, body, ToastKind.ERROR)

    def loading(self, body: str, title: str | None = None) -> Toast:
        return self.push(title or ToastKind.LOADING.title, body, ToastKind.LOADING)

    def dismiss_loading(self, title: str | None = None) -> None:
        """Drop loading toasts, optionally only those with `title`."""
        self.toasts = [
            toast
            for toast in self.toasts
            if toast.kind is not ToastKind.LOADING or (title is not None and toast.title != title)
        ]

    def tick(self, now: float | None = None) -> None:
        current = self.clock() if now is None else now
        self.toasts = [toast for toast in self.toasts if not toast.expired(current)]
        for toast in self.toasts:
            if self.animations:
                ratio = toast.fade_ratio(current)
                toast.color = lerp_color(self.background, toast.base_color, ratio)
            else:
                toast.color = toast.base_color

    def visible(self) -> list[Toast]:
        """Toasts to draw, top-right first.

        Loading toasts take up to N-1 slots, the rest go to regular toasts, each
        group oldest first.
        """
        if self.max_visible <= 0:
            return []
        loading = [toast for toast in self.toasts if toast.kind is ToastKind.LOADING]
        regular = [toast for toast in self.toasts if toast.kind is not ToastKind.LOADING]
        loading_slots = min(len(loading), max(self.max_visible - 1, 0))
        shown = loading[:loading_slots]
        shown.extend(regular[: self.max_visible - len(shown)])
        if len(shown) < self.max_visible:
            shown.extend(loading[loading_slots : loading_slots + self.max_visible - len(shown)])
        return shown

    def clear(self) -> None:
        self.toasts.clear()

    def __len__(self) -> int:
        return len(self.toasts)
