"""
Summary Aggregation

Dashboard totals and the list views built on them (upcoming, overdue,
search, filter). Every function takes a status-normalized bill list and
returns a fresh result; nothing is cached between calls.
"""

from datetime import date
from typing import Iterable, Optional

from billtracker.models.analytics import BillSummary
from billtracker.models.bill import Bill, BillCategory, BillStatus
from billtracker.utils.dates import is_due_soon, is_overdue
from billtracker.utils.money import calculate_total


def summarize(
    bills: list[Bill],
    today: Optional[date] = None,
    due_soon_days: int = 7,
) -> BillSummary:
    """
    Roll up a bill collection into dashboard totals.

    Bucket semantics:
    - paid_amount: full amount of bills with status paid
    - pending_amount: full amount of bills with status pending
      (partial bills are NOT included)
    - overdue_amount: full amount of bills with status overdue
    - upcoming_count: bills due within the window that are not paid
    """
    def amount_where(status: BillStatus):
        return calculate_total(b.amount for b in bills if b.status == status)

    upcoming = get_upcoming_bills(bills, days=due_soon_days, today=today)

    return BillSummary(
        total_bills=len(bills),
        total_amount=calculate_total(b.amount for b in bills),
        paid_amount=amount_where(BillStatus.PAID),
        pending_amount=amount_where(BillStatus.PENDING),
        overdue_amount=amount_where(BillStatus.OVERDUE),
        upcoming_count=len(upcoming),
        overdue_count=sum(1 for b in bills if b.status == BillStatus.OVERDUE),
    )


def get_upcoming_bills(
    bills: list[Bill],
    days: int = 7,
    today: Optional[date] = None,
) -> list[Bill]:
    """Unpaid bills due within the next `days` days, soonest first."""
    upcoming = [
        b for b in bills
        if is_due_soon(b.due_date, window_days=days, today=today)
        and b.status != BillStatus.PAID
    ]
    return sorted(upcoming, key=lambda b: b.due_date)


def get_overdue_bills(bills: list[Bill]) -> list[Bill]:
    """Bills whose status is overdue, oldest due date first."""
    overdue = [b for b in bills if b.status == BillStatus.OVERDUE]
    return sorted(overdue, key=lambda b: b.due_date)


def search_bills(bills: list[Bill], query: str) -> list[Bill]:
    """
    Case-insensitive match on name, category or notes.

    A blank query returns every bill.
    """
    needle = query.strip().lower()
    if not needle:
        return list(bills)

    return [
        b for b in bills
        if needle in b.name.lower()
        or needle in b.category.value
        or (b.notes and needle in b.notes.lower())
    ]


def filter_bills(
    bills: list[Bill],
    statuses: Optional[Iterable[BillStatus]] = None,
    categories: Optional[Iterable[BillCategory]] = None,
    due_soon: bool = False,
    overdue: bool = False,
    today: Optional[date] = None,
    due_soon_days: int = 7,
) -> list[Bill]:
    """
    Filter bills by status, category and due-date conditions.

    Empty or missing status/category collections do not filter.
    """
    status_set = set(statuses or ())
    category_set = set(categories or ())

    result = []
    for bill in bills:
        if status_set and bill.status not in status_set:
            continue
        if category_set and bill.category not in category_set:
            continue
        if due_soon and not is_due_soon(
            bill.due_date, window_days=due_soon_days, today=today
        ):
            continue
        if overdue and not is_overdue(bill.due_date, today=today):
            continue
        result.append(bill)
    return result


def group_by_status(bills: list[Bill]) -> dict[BillStatus, list[Bill]]:
    """Bills grouped under every status (empty lists included)."""
    groups: dict[BillStatus, list[Bill]] = {status: [] for status in BillStatus}
    for bill in bills:
        groups[bill.status].append(bill)
    return groups
