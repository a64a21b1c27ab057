"""Date-time formats, parsing helpers and due-date classification."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from enum import StrEnum

from kanban_tui.constants import FIELD_NOT_SET


class DateTimeFormat(StrEnum):
    """User-selectable formats for every timestamp shown or saved."""

    DAY_MONTH_YEAR = "DayMonthYear"
    DAY_MONTH_YEAR_TIME = "DayMonthYearTime"
    MONTH_DAY_YEAR = "MonthDayYear"
    MONTH_DAY_YEAR_TIME = "MonthDayYearTime"
    YEAR_MONTH_DAY = "YearMonthDay"
    YEAR_MONTH_DAY_TIME = "YearMonthDayTime"

    @property
    def parser_string(self) -> str:
        return _PARSER_STRINGS[self]

    @property
    def human_readable(self) -> str:
        return _HUMAN_READABLE[self]

    @property
    def has_time(self) -> bool:
        return self.value.endswith("Time")

    def with_time(self) -> DateTimeFormat:
        if self.has_time:
            return self
        return DateTimeFormat(f"{self.value}Time")

    def without_time(self) -> DateTimeFormat:
        if not self.has_time:
            return self
        return DateTimeFormat(self.value.removesuffix("Time"))

    def format(self, value: datetime | None) -> str:
        if value is None:
            return FIELD_NOT_SET
        return value.strftime(self.parser_string)


_PARSER_STRINGS: dict[DateTimeFormat, str] = {
    DateTimeFormat.DAY_MONTH_YEAR: "%d/%m/%Y",
    DateTimeFormat.DAY_MONTH_YEAR_TIME: "%d/%m/%Y-%H:%M:%S",
    DateTimeFormat.MONTH_DAY_YEAR: "%m/%d/%Y",
    DateTimeFormat.MONTH_DAY_YEAR_TIME: "%m/%d/%Y-%H:%M:%S",
    DateTimeFormat.YEAR_MONTH_DAY: "%Y/%m/%d",
    DateTimeFormat.YEAR_MONTH_DAY_TIME: "%Y/%m/%d-%H:%M:%S",
}

_HUMAN_READABLE: dict[DateTimeFormat, str] = {
    DateTimeFormat.DAY_MONTH_YEAR: "DD/MM/YYYY",
    DateTimeFormat.DAY_MONTH_YEAR_TIME: "DD/MM/YYYY-HH:MM:SS",
    DateTimeFormat.MONTH_DAY_YEAR: "MM/DD/YYYY",
    DateTimeFormat.MONTH_DAY_YEAR_TIME: "MM/DD/YYYY-HH:MM:SS",
    DateTimeFormat.YEAR_MONTH_DAY: "YYYY/MM/DD",
    DateTimeFormat.YEAR_MONTH_DAY_TIME: "YYYY/MM/DD-HH:MM:SS",
}

# Timed formats first so "%d/%m/%Y" never swallows a timed value's date part
_DETECTION_ORDER: tuple[DateTimeFormat, ...] = (
    DateTimeFormat.DAY_MONTH_YEAR_TIME,
    DateTimeFormat.MONTH_DAY_YEAR_TIME,
    DateTimeFormat.YEAR_MONTH_DAY_TIME,
    DateTimeFormat.DAY_MONTH_YEAR,
    DateTimeFormat.MONTH_DAY_YEAR,
    DateTimeFormat.YEAR_MONTH_DAY,
)


class DueState(StrEnum):
    DEFAULT = "default"
    WARNING = "warning"
    OVERDUE = "overdue"


def now() -> datetime:
    """Local wall-clock time truncated to whole seconds."""
    return datetime.now().replace(microsecond=0)


def detect_format(value: str, preferred: DateTimeFormat | None = None) -> DateTimeFormat | None:
    """Find the first format that parses `value`, trying `preferred` first."""
    text = value.strip()
    candidates = _DETECTION_ORDER
    if preferred is not None:
        candidates = (preferred.with_time(), preferred.without_time(), *_DETECTION_ORDER)
    for fmt in candidates:
        try:
            datetime.strptime(text, fmt.parser_string)
        except ValueError:
            continue
        return fmt
    return None


def parse_date_time(value: str, preferred: DateTimeFormat | None = None) -> datetime | None:
    """Parse a timestamp in any known format.

    Returns None for the "not set" sentinel or an empty string; raises ValueError
    when the text matches no known format.
    """
    text = value.strip()
    if not text or text == FIELD_NOT_SET:
        return None
    fmt = detect_format(text, preferred)
    if fmt is None:
        formats = ", ".join(f.human_readable for f in DateTimeFormat)
        raise ValueError(f"Invalid date format '{text}'. Please use any of the following {formats}")
    return datetime.strptime(text, fmt.parser_string)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month length."""
    total = value.year * 12 + (value.month - 1) + months
    year, month_index = divmod(total, 12)
    if not 1 <= year <= 9999:
        return value
    month = month_index + 1
    return value.replace(year=year, month=month, day=min(value.day, days_in_month(year, month)))


def add_years(value: datetime, years: int) -> datetime:
    """Shift by whole years keeping month/day; an invalid target (Feb 29) keeps the value."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value


def due_state(due: datetime | None, today: date | datetime, warning_delta: int) -> DueState:
    """Classify a due date relative to `today`."""
    if due is None:
        return DueState.DEFAULT
    today_date = today.date() if isinstance(today, datetime) else today
    remaining = (due.date() - today_date).days
    if remaining < 0:
        return DueState.OVERDUE
    if remaining <= warning_delta:
        return DueState.WARNING
    return DueState.DEFAULT
