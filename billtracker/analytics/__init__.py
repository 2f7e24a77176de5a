"""
Analytics Package

Status derivation, dashboard summaries and spending analytics.
Everything here is a pure function of its inputs.
"""

from billtracker.analytics.engine import BillAnalytics
from billtracker.analytics.status import (
    derive_status,
    normalize_bill,
    normalize_bills,
    remaining_balance,
    total_paid,
)
from billtracker.analytics.summary import (
    filter_bills,
    get_overdue_bills,
    get_upcoming_bills,
    group_by_status,
    search_bills,
    summarize,
)

__all__ = [
    "BillAnalytics",
    "derive_status",
    "filter_bills",
    "get_overdue_bills",
    "get_upcoming_bills",
    "group_by_status",
    "normalize_bill",
    "normalize_bills",
    "remaining_balance",
    "search_bills",
    "summarize",
    "total_paid",
]
