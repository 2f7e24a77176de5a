"""
Date and Period Utilities

Pure calendar math used by status derivation and analytics.

DESIGN DECISION: Every function that depends on "today" accepts an
optional `today` argument. Production code lets it default to
`date.today()`; tests pass a fixed date so results never depend on
when the suite runs.

All comparisons are at day granularity. Dates never carry a time
component in this system.
"""

import calendar
from datetime import date, timedelta
from typing import NamedTuple, Optional

from dateutil.relativedelta import relativedelta


# Month step for each bill frequency (keyed by the enum's string value)
FREQUENCY_MONTHS: dict[str, int] = {
    "monthly": 1,
    "quarterly": 3,
    "semi-annual": 6,
    "annual": 12,
}


class MonthRange(NamedTuple):
    """First and last calendar day of a month, both inclusive."""
    start: date
    end: date


def _today(today: Optional[date]) -> date:
    return today if today is not None else date.today()


def is_overdue(due_date: date, today: Optional[date] = None) -> bool:
    """True iff the due date is strictly before today."""
    return due_date < _today(today)


def is_due_soon(
    due_date: date,
    window_days: int = 7,
    today: Optional[date] = None,
) -> bool:
    """
    True iff the due date falls within [today, today + window_days].

    Both ends of the window are inclusive.
    """
    start = _today(today)
    end = start + timedelta(days=window_days)
    return start <= due_date <= end


def days_until_due(due_date: date, today: Optional[date] = None) -> int:
    """Days until the due date. Negative means overdue, 0 means due today."""
    return (due_date - _today(today)).days


def next_due_date(due_date: date, frequency) -> date:
    """
    Advance a due date by one billing period.

    Month arithmetic clamps to the last valid day of the target month,
    so Jan 31 + 1 month is Feb 28 (or Feb 29 in a leap year).
    Annual bills advance by one calendar year rather than 365 days.

    Args:
        due_date: The current due date
        frequency: A BillFrequency or its string value

    Raises:
        ValueError: If the frequency is unknown
    """
    key = getattr(frequency, "value", frequency)
    if key not in FREQUENCY_MONTHS:
        raise ValueError(f"Unknown bill frequency: {frequency!r}")

    if key == "annual":
        return due_date + relativedelta(years=1)
    return due_date + relativedelta(months=FREQUENCY_MONTHS[key])


def current_month(today: Optional[date] = None) -> str:
    """Current month in YYYY-MM format."""
    return _today(today).strftime("%Y-%m")


def parse_year_month(year_month: str) -> tuple[int, int]:
    """
    Split a YYYY-MM string into (year, month).

    Raises:
        ValueError: If the string is not a valid year-month
    """
    try:
        year_str, month_str = year_month.split("-")
        year, month = int(year_str), int(month_str)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid year-month: {year_month!r}")

    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in year-month: {year_month!r}")
    return year, month


def month_range(year_month: str) -> MonthRange:
    """First and last calendar day of the given YYYY-MM month."""
    year, month = parse_year_month(year_month)
    last_day = calendar.monthrange(year, month)[1]
    return MonthRange(date(year, month, 1), date(year, month, last_day))


def last_n_months(n: int, today: Optional[date] = None) -> list[str]:
    """
    The last n months in YYYY-MM format, most recent first.

    Starts at the current month and walks backward n-1 further months.
    """
    anchor = _today(today).replace(day=1)
    return [
        (anchor - relativedelta(months=offset)).strftime("%Y-%m")
        for offset in range(max(n, 0))
    ]


def month_name(year_month: str) -> str:
    """Human-readable month, e.g. '2026-10' -> 'October 2026'."""
    year, month = parse_year_month(year_month)
    return f"{calendar.month_name[month]} {year}"


def year_range(year: int) -> MonthRange:
    """January 1st to December 31st of a calendar year."""
    return MonthRange(date(year, 1, 1), date(year, 12, 31))


def date_range_filter(kind: str, today: Optional[date] = None) -> MonthRange:
    """
    Date window ending today for list filters.

    Args:
        kind: One of 'today', 'week', 'month', 'year'

    Raises:
        ValueError: If kind is not recognised
    """
    end = _today(today)
    if kind == "today":
        start = end
    elif kind == "week":
        start = end - timedelta(days=7)
    elif kind == "month":
        start = end - timedelta(days=30)
    elif kind == "year":
        start = end - relativedelta(years=1)
    else:
        raise ValueError(f"Unknown date range filter: {kind!r}")
    return MonthRange(start, end)
