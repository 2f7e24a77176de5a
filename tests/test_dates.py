"""Tests for calendar utilities."""

from datetime import date

import pytest

from billtracker.models.bill import BillFrequency
from billtracker.utils.dates import (
    current_month,
    date_range_filter,
    days_until_due,
    is_due_soon,
    is_overdue,
    last_n_months,
    month_name,
    month_range,
    next_due_date,
    parse_year_month,
    year_range,
)

TODAY = date(2024, 3, 15)


class TestDueDates:
    """Tests for overdue and due-soon checks."""

    def test_overdue_is_strictly_before_today(self):
        assert is_overdue(date(2024, 3, 14), today=TODAY) is True
        assert is_overdue(TODAY, today=TODAY) is False
        assert is_overdue(date(2024, 3, 16), today=TODAY) is False

    def test_due_soon_window_is_inclusive(self):
        assert is_due_soon(TODAY, today=TODAY) is True
        assert is_due_soon(date(2024, 3, 22), today=TODAY) is True
        assert is_due_soon(date(2024, 3, 23), today=TODAY) is False
        assert is_due_soon(date(2024, 3, 14), today=TODAY) is False

    def test_due_soon_custom_window(self):
        assert is_due_soon(date(2024, 3, 18), window_days=3, today=TODAY) is True
        assert is_due_soon(date(2024, 3, 19), window_days=3, today=TODAY) is False

    def test_days_until_due(self):
        assert days_until_due(date(2024, 3, 20), today=TODAY) == 5
        assert days_until_due(TODAY, today=TODAY) == 0
        assert days_until_due(date(2024, 3, 10), today=TODAY) == -5


class TestNextDueDate:
    """Tests for advancing a due date by one billing period."""

    def test_monthly(self):
        assert next_due_date(date(2024, 3, 15), BillFrequency.MONTHLY) == date(2024, 4, 15)

    def test_monthly_clamps_to_month_end_in_leap_year(self):
        assert next_due_date(date(2024, 1, 31), BillFrequency.MONTHLY) == date(2024, 2, 29)

    def test_monthly_clamps_to_month_end(self):
        assert next_due_date(date(2023, 1, 31), BillFrequency.MONTHLY) == date(2023, 2, 28)

    def test_quarterly_crosses_year(self):
        assert next_due_date(date(2024, 11, 30), BillFrequency.QUARTERLY) == date(2025, 2, 28)

    def test_semi_annual(self):
        assert next_due_date(date(2024, 8, 31), BillFrequency.SEMI_ANNUAL) == date(2025, 2, 28)

    def test_annual_from_leap_day(self):
        assert next_due_date(date(2024, 2, 29), BillFrequency.ANNUAL) == date(2025, 2, 28)

    def test_accepts_string_frequency(self):
        assert next_due_date(date(2024, 3, 1), "quarterly") == date(2024, 6, 1)

    def test_unknown_frequency_raises(self):
        with pytest.raises(ValueError, match="Unknown bill frequency"):
            next_due_date(date(2024, 3, 1), "weekly")


class TestMonths:
    """Tests for year-month helpers."""

    def test_current_month(self):
        assert current_month(TODAY) == "2024-03"

    def test_parse_year_month(self):
        assert parse_year_month("2024-03") == (2024, 3)

    @pytest.mark.parametrize("value", ["2024", "2024-13", "March 2024", ""])
    def test_parse_year_month_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_year_month(value)

    def test_month_range_leap_february(self):
        start, end = month_range("2024-02")
        assert start == date(2024, 2, 1)
        assert end == date(2024, 2, 29)

    def test_last_n_months_most_recent_first(self):
        assert last_n_months(6, today=TODAY) == [
            "2024-03", "2024-02", "2024-01", "2023-12", "2023-11", "2023-10",
        ]

    def test_last_n_months_from_month_end(self):
        assert last_n_months(2, today=date(2024, 3, 31)) == ["2024-03", "2024-02"]

    def test_last_n_months_non_positive(self):
        assert last_n_months(0, today=TODAY) == []

    def test_month_name(self):
        assert month_name("2026-10") == "October 2026"

    def test_year_range(self):
        assert year_range(2024) == (date(2024, 1, 1), date(2024, 12, 31))


class TestDateRangeFilter:
    """Tests for list filter windows."""

    def test_today(self):
        assert date_range_filter("today", today=TODAY) == (TODAY, TODAY)

    def test_week(self):
        assert date_range_filter("week", today=TODAY).start == date(2024, 3, 8)

    def test_month(self):
        assert date_range_filter("month", today=TODAY).start == date(2024, 2, 14)

    def test_year(self):
        assert date_range_filter("year", today=TODAY).start == date(2023, 3, 15)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            date_range_filter("decade", today=TODAY)
