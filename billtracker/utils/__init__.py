"""Calendar and money helpers shared by models and analytics."""

from billtracker.utils.dates import (
    MonthRange,
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
from billtracker.utils.money import (
    ZERO,
    calculate_average,
    calculate_percentage,
    calculate_total,
    is_valid_amount,
    parse_currency,
    percentage_change,
    round_to_cents,
    to_valid_amount,
)

__all__ = [
    # Dates
    "MonthRange",
    "current_month",
    "date_range_filter",
    "days_until_due",
    "is_due_soon",
    "is_overdue",
    "last_n_months",
    "month_name",
    "month_range",
    "next_due_date",
    "parse_year_month",
    "year_range",
    # Money
    "ZERO",
    "calculate_average",
    "calculate_percentage",
    "calculate_total",
    "is_valid_amount",
    "parse_currency",
    "percentage_change",
    "round_to_cents",
    "to_valid_amount",
]
