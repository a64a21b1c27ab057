"""Date/time picker: calendar grid plus an hour/minute/second column.

The calendar animates its height and the time column its width. Both animations
read elapsed wall-clock time from one stored start instant.
"""

from __future__ import annotations

import calendar
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from kanban_tui.constants import FIELD_NOT_SET
from kanban_tui.core.dates import add_months, add_years, days_in_month, now
from kanban_tui.core.enums import CalendarFormat, Focus
from kanban_tui.core.geometry import Rect, correct_anchor
from kanban_tui.limits import (
    DATE_TIME_PICKER_ANIM_DURATION,
    MIN_DATE_PICKER_HEIGHT,
    MIN_DATE_PICKER_WIDTH,
    TIME_PICKER_WIDTH,
)

if TYPE_CHECKING:
    from kanban_tui.core.dates import DateTimeFormat

logger = logging.getLogger(__name__)

CELL_WIDTH = 3
# Border, month/year header and weekday line above the first grid row
GRID_TOP = 3
GRID_LEFT = 1

_SUNDAY_FIRST_HEADER = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")
_MONDAY_FIRST_HEADER = ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su")


class AnimState(StrEnum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"

    def completed(self) -> AnimState:
        match self:
            case AnimState.OPENING:
                return AnimState.OPEN
            case AnimState.CLOSING:
                return AnimState.CLOSED
            case _:
                return self


@dataclass(frozen=True, slots=True)
class CalendarCell:
    day: int
    in_month: bool
    selected: bool


@dataclass(frozen=True, slots=True)
class TimeRow:
    hour: int
    minute: int
    second: int
    current: bool


def weekday_header(calendar_format: CalendarFormat) -> tuple[str, ...]:
    if calendar_format is CalendarFormat.MONDAY_FIRST:
        return _MONDAY_FIRST_HEADER
    return _SUNDAY_FIRST_HEADER


def leading_blanks(year: int, month: int, calendar_format: CalendarFormat) -> int:
    """Grid slots before day 1 of the month."""
    weekday = calendar.weekday(year, month, 1)  # Monday == 0
    if calendar_format is CalendarFormat.MONDAY_FIRST:
        return weekday
    return (weekday + 1) % 7


def month_grid(selected: datetime, calendar_format: CalendarFormat) -> list[list[CalendarCell]]:
    """Weeks of the selected month padded with previous/next month days."""
    year, month = selected.year, selected.month
    blanks = leading_blanks(year, month, calendar_format)
    previous = add_months(selected.replace(day=1), -1)
    previous_days = days_in_month(previous.year, previous.month)
    current_days = days_in_month(year, month)

    cells = [
        CalendarCell(previous_days - blanks + offset + 1, in_month=False, selected=False)
        for offset in range(blanks)
    ]
    cells.extend(
        CalendarCell(day, in_month=True, selected=day == selected.day)
        for day in range(1, current_days + 1)
    )
    trailing = (-len(cells)) % 7
    cells.extend(
        CalendarCell(day, in_month=False, selected=False) for day in range(1, trailing + 1)
    )
    return [cells[index : index + 7] for index in range(0, len(cells), 7)]


def _wrap(value: int, modulo: int) -> int:
    return value % modulo


@dataclass(slots=True)
class DateTimePicker:
    calendar_format: CalendarFormat = CalendarFormat.SUNDAY_FIRST
    selected: datetime | None = None
    anchor: tuple[int, int] | None = None
    viewport: Rect | None = None
    corrected_anchor: tuple[int, int] | None = None
    render_area: Rect | None = None
    date_state: AnimState = AnimState.CLOSED
    time_state: AnimState = AnimState.CLOSED
    time_picker_active: bool = False
    widget_height: int = MIN_DATE_PICKER_HEIGHT
    widget_width: int = MIN_DATE_PICKER_WIDTH
    anim_start: float = 0.0
    _correction_key: tuple[object, ...] | None = None
    _hit_map: list[tuple[Rect, int]] = field(default_factory=list)
    _hit_key: tuple[object, ...] | None = None

    # Lifecycle

    def open(
        self,
        selected: datetime | None,
        anchor: tuple[int, int] | None = None,
        at: float | None = None,
    ) -> None:
        self.selected = selected
        if anchor is not None:
            self.anchor = anchor
        if self.date_state in (AnimState.CLOSED, AnimState.CLOSING):
            self.time_picker_active = False
            self.time_state = AnimState.CLOSED
            self.date_state = AnimState.OPENING
            self.anim_start = time.monotonic() if at is None else at

    def close(self, at: float | None = None) -> None:
        if self.date_state in (AnimState.OPEN, AnimState.OPENING):
            self.time_picker_active = False
            self.time_state = AnimState.CLOSED
            self.date_state = AnimState.CLOSING
            self.anim_start = time.monotonic() if at is None else at

    @property
    def is_active(self) -> bool:
        return self.date_state is not AnimState.CLOSED

    def reset(self) -> None:
        self.selected = None
        self.anchor = None
        self.corrected_anchor = None
        self.viewport = None
        self.render_area = None
        self.date_state = AnimState.CLOSED
        self.time_state = AnimState.CLOSED
        self.time_picker_active = False
        self.widget_height = MIN_DATE_PICKER_HEIGHT
        self.widget_width = MIN_DATE_PICKER_WIDTH
        self._correction_key = None
        self._hit_map = []
        self._hit_key = None
        logger.debug("Date time picker reset")

    def open_time_picker(self, at: float | None = None) -> None:
        if not self.time_picker_active:
            self.time_picker_active = True
            self.time_state = AnimState.OPENING
            self.anim_start = time.monotonic() if at is None else at

    def close_time_picker(self, at: float | None = None) -> None:
        if self.time_picker_active:
            self.time_picker_active = False
            self.time_state = AnimState.CLOSING
            self.anim_start = time.monotonic() if at is None else at

    def toggle_time_picker(self, at: float | None = None) -> None:
        if self.time_picker_active:
            self.close_time_picker(at)
        else:
            self.open_time_picker(at)

    # Navigation

    @property
    def value(self) -> datetime:
        return self.selected if self.selected is not None else now()

    def move_days(self, days: int) -> None:
        self.move_seconds(days * 86400)

    def move_seconds(self, seconds: int) -> None:
        try:
            self.selected = self.value + timedelta(seconds=seconds)
        except OverflowError:
            logger.debug("Selected date cannot move by %d seconds", seconds)
            self.selected = self.value

    def move_months(self, months: int) -> None:
        self.selected = add_months(self.value, months)

    def move_years(self, years: int) -> None:
        shifted = add_years(self.value, years)
        if shifted == self.value and years:
            logger.debug("Could not shift the selected date by %d years", years)
        self.selected = shifted

    def calendar_up(self) -> None:
        self.move_days(-7)

    def calendar_down(self) -> None:
        self.move_days(7)

    def calendar_left(self) -> None:
        self.move_days(-1)

    def calendar_right(self) -> None:
        self.move_days(1)

    def step_focused(self, focus: Focus, delta: int) -> None:
        """Apply a +1/-1 step to whichever sub-field `focus` names."""
        match focus:
            case Focus.DTP_MONTH:
                self.move_months(delta)
            case Focus.DTP_YEAR:
                self.move_years(delta)
            case Focus.DTP_HOUR:
                self.move_seconds(3600 * delta)
            case Focus.DTP_MINUTE:
                self.move_seconds(60 * delta)
            case Focus.DTP_SECOND:
                self.move_seconds(delta)
            case _:
                self.move_days(delta)

    def select_day(self, day: int) -> None:
        """Snap the day of the month, preserving the time of day."""
        base = self.value
        if not 1 <= day <= days_in_month(base.year, base.month):
            logger.debug("Day %d is outside %d-%02d", day, base.year, base.month)
            return
        self.selected = base.replace(day=day)

    # Layout

    def grid(self) -> list[list[CalendarCell]]:
        return month_grid(self.value, self.calendar_format)

    def header(self) -> tuple[str, str]:
        value = self.value
        return calendar.month_name[value.month], str(value.year)

    @property
    def date_target_height(self) -> int:
        # weekday line + weeks, plus the header and the spacer below it
        return MIN_DATE_PICKER_HEIGHT + len(self.grid()) + 1 + 2

    @property
    def date_target_width(self) -> int:
        month, year = self.header()
        return max(len(month) + 3 + len(year) + 3, MIN_DATE_PICKER_WIDTH)

    @property
    def target_width(self) -> int:
        extra = TIME_PICKER_WIDTH if self.time_picker_active else 0
        return self.date_target_width + extra

    def time_rows(self) -> list[TimeRow]:
        """Neighbouring values around the current time, wrapped per field."""
        value = self.value
        available = max(self.date_target_height - 6, 0)
        before = available // 2
        after = before + available % 2
        rows: list[TimeRow] = []
        for offset in range(-before, after + 1):
            rows.append(
                TimeRow(
                    _wrap(value.hour + offset, 24),
                    _wrap(value.minute + offset, 60),
                    _wrap(value.second + offset, 60),
                    current=offset == 0,
                )
            )
        return rows

    # Frame update

    def _progress(self, at: float) -> float:
        if DATE_TIME_PICKER_ANIM_DURATION <= 0:
            return 1.0
        return (at - self.anim_start) / DATE_TIME_PICKER_ANIM_DURATION

    def tick(self, animations: bool = True, at: float | None = None) -> bool:
        """Advance both animations; True once the calendar has finished closing."""
        current = time.monotonic() if at is None else at
        progress = self._progress(current)
        target_height = self.date_target_height
        date_width = self.date_target_width

        if self.date_state in (AnimState.OPENING, AnimState.CLOSING):
            opening = self.date_state is AnimState.OPENING
            if not animations or progress >= 1.0:
                self.date_state = self.date_state.completed()
                self.widget_height = target_height if opening else MIN_DATE_PICKER_HEIGHT
            else:
                span = target_height - MIN_DATE_PICKER_HEIGHT
                grown = int(span * progress)
                self.widget_height = (
                    MIN_DATE_PICKER_HEIGHT + grown if opening else target_height - grown
                )
        elif self.date_state is AnimState.OPEN:
            self.widget_height = target_height

        if self.time_state in (AnimState.OPENING, AnimState.CLOSING):
            opening = self.time_state is AnimState.OPENING
            if not animations or progress >= 1.0:
                self.time_state = self.time_state.completed()
                self.widget_width = date_width + (TIME_PICKER_WIDTH if opening else 0)
            else:
                grown = int(TIME_PICKER_WIDTH * progress)
                self.widget_width = date_width + (grown if opening else TIME_PICKER_WIDTH - grown)
        elif self.time_state is AnimState.OPEN:
            self.widget_width = date_width + TIME_PICKER_WIDTH
        else:
            self.widget_width = date_width

        self.correct()
        self.refresh_hit_map()
        return self.date_state is AnimState.CLOSED

    def set_viewport(self, viewport: Rect) -> None:
        self.viewport = viewport
        self.correct()

    def correct(self) -> tuple[int, int] | None:
        """Re-anchor when the anchor, viewport or target size changed."""
        if self.anchor is None or self.viewport is None:
            return self.corrected_anchor
        key = (self.anchor, self.viewport, self.target_width, self.date_target_height)
        if key != self._correction_key:
            self.corrected_anchor = correct_anchor(
                self.anchor, self.target_width, self.date_target_height, self.viewport
            )
            self._correction_key = key
        return self.corrected_anchor

    def area(self) -> Rect | None:
        """Where the widget is drawn this frame."""
        anchor = self.corrected_anchor or self.anchor
        if anchor is None:
            return None
        return Rect(anchor[0], anchor[1], self.widget_width, self.widget_height)

    # Mouse

    def set_render_area(self, area: Rect) -> None:
        self.render_area = area
        self.refresh_hit_map()

    def refresh_hit_map(self) -> None:
        if self.render_area is None:
            return
        value = self.value
        key = (value.year, value.month, self.render_area, self.calendar_format)
        if key == self._hit_key:
            return
        blanks = leading_blanks(value.year, value.month, self.calendar_format)
        origin_x = self.render_area.x + GRID_LEFT
        origin_y = self.render_area.y + GRID_TOP
        self._hit_map = []
        for day in range(1, days_in_month(value.year, value.month) + 1):
            slot = blanks + day - 1
            row, column = divmod(slot, 7)
            self._hit_map.append(
                (Rect(origin_x + column * CELL_WIDTH, origin_y + row, CELL_WIDTH, 1), day)
            )
        self._hit_key = key

    def hit_map(self) -> list[tuple[Rect, int]]:
        return list(self._hit_map)

    def day_at(self, x: int, y: int) -> int | None:
        for rect, day in self._hit_map:
            if rect.contains(x, y):
                return day
        return None

    # Output

    def output(self, date_format: DateTimeFormat) -> str:
        if self.selected is None:
            return FIELD_NOT_SET
        return date_format.format(self.selected)
