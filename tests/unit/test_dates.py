"""Tests for date-time formats and due-date classification."""

from __future__ import annotations

from datetime import date, datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kanban_tui.constants import FIELD_NOT_SET
from kanban_tui.core.dates import (
    DateTimeFormat,
    DueState,
    add_months,
    add_years,
    detect_format,
    due_state,
    parse_date_time,
)

pytestmark = pytest.mark.unit


class TestDateTimeFormat:
    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [
            (DateTimeFormat.DAY_MONTH_YEAR, "05/03/2024"),
            (DateTimeFormat.DAY_MONTH_YEAR_TIME, "05/03/2024-14:30:00"),
            (DateTimeFormat.MONTH_DAY_YEAR, "03/05/2024"),
            (DateTimeFormat.YEAR_MONTH_DAY_TIME, "2024/03/05-14:30:00"),
        ],
    )
    def test_format(self, fmt: DateTimeFormat, expected: str) -> None:
        assert fmt.format(datetime(2024, 3, 5, 14, 30)) == expected

    def test_format_none_is_not_set(self):
        assert DateTimeFormat.YEAR_MONTH_DAY.format(None) == FIELD_NOT_SET

    def test_time_toggles(self):
        assert DateTimeFormat.MONTH_DAY_YEAR.with_time() is DateTimeFormat.MONTH_DAY_YEAR_TIME
        assert DateTimeFormat.MONTH_DAY_YEAR_TIME.without_time() is DateTimeFormat.MONTH_DAY_YEAR
        assert DateTimeFormat.YEAR_MONTH_DAY_TIME.has_time
        assert not DateTimeFormat.YEAR_MONTH_DAY.has_time


class TestParsing:
    def test_detect_prefers_given_format_for_ambiguous_dates(self):
        text = "03/05/2024"
        assert detect_format(text) is DateTimeFormat.DAY_MONTH_YEAR
        assert (
            detect_format(text, DateTimeFormat.MONTH_DAY_YEAR_TIME)
            is DateTimeFormat.MONTH_DAY_YEAR
        )

    def test_timed_value_detected_as_timed(self):
        assert detect_format("2024/03/05-10:11:12") is DateTimeFormat.YEAR_MONTH_DAY_TIME

    @pytest.mark.parametrize("text", ["", "   ", FIELD_NOT_SET])
    def test_not_set_values(self, text: str) -> None:
        assert parse_date_time(text) is None

    def test_invalid_value_lists_formats(self):
        with pytest.raises(ValueError, match="DD/MM/YYYY"):
            parse_date_time("next tuesday")

    @given(
        st.datetimes(min_value=datetime(1900, 1, 1), max_value=datetime(2200, 12, 31)),
        st.sampled_from([fmt for fmt in DateTimeFormat if fmt.has_time]),
    )
    def test_timed_formats_parse_their_own_output(
        self, value: datetime, fmt: DateTimeFormat
    ) -> None:
        value = value.replace(microsecond=0)
        assert parse_date_time(fmt.format(value), fmt) == value


class TestCalendarArithmetic:
    def test_add_months_clamps_day(self):
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
        assert add_months(datetime(2023, 1, 31), 1) == datetime(2023, 2, 28)

    def test_add_months_crosses_years(self):
        assert add_months(datetime(2024, 12, 15), 1) == datetime(2025, 1, 15)
        assert add_months(datetime(2024, 1, 15), -1) == datetime(2023, 12, 15)

    def test_add_months_out_of_range_keeps_value(self):
        value = datetime(9999, 12, 1)
        assert add_months(value, 1) == value

    def test_add_years_leap_day_keeps_value(self):
        leap = datetime(2024, 2, 29)
        assert add_years(leap, 1) == leap
        assert add_years(leap, 4) == datetime(2028, 2, 29)


class TestDueState:
    today = date(2024, 6, 10)

    @pytest.mark.parametrize(
        ("due", "expected"),
        [
            (None, DueState.DEFAULT),
            (datetime(2024, 6, 9, 23, 59), DueState.OVERDUE),
            (datetime(2024, 6, 10, 0, 0), DueState.WARNING),
            (datetime(2024, 6, 13, 12, 0), DueState.WARNING),
            (datetime(2024, 6, 14, 0, 0), DueState.DEFAULT),
        ],
    )
    def test_due_state(self, due: datetime | None, expected: DueState) -> None:
        assert due_state(due, self.today, warning_delta=3) is expected

    def test_accepts_datetime_today(self):
        assert due_state(datetime(2024, 6, 10), datetime(2024, 6, 10, 18), 0) is DueState.WARNING
