"""
Status Derivation

A bill's status is a pure function of its amount, its payment history
and its due date relative to today:

    total paid >= amount   -> paid     (exact equality counts as paid)
    total paid >  0        -> partial
    due date before today  -> overdue
    otherwise              -> pending

Normalization returns fresh copies; input bills are never mutated.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from billtracker.models.bill import Bill, BillStatus
from billtracker.utils.dates import is_overdue
from billtracker.utils.money import ZERO, calculate_total


def total_paid(bill: Bill) -> Decimal:
    """Sum of all payments recorded against the bill."""
    return calculate_total(p.amount for p in bill.payment_history)


def remaining_balance(bill: Bill) -> Decimal:
    """Amount still owed, never negative."""
    return max(ZERO, bill.amount - total_paid(bill))


def derive_status(bill: Bill, today: Optional[date] = None) -> BillStatus:
    paid = total_paid(bill)
    if paid >= bill.amount:
        return BillStatus.PAID
    if paid > 0:
        return BillStatus.PARTIAL
    if is_overdue(bill.due_date, today=today):
        return BillStatus.OVERDUE
    return BillStatus.PENDING


def normalize_bill(bill: Bill, today: Optional[date] = None) -> Bill:
    """Copy of the bill carrying its freshly derived status."""
    return bill.model_copy(update={"status": derive_status(bill, today=today)})


def normalize_bills(
    bills: Iterable[Bill],
    today: Optional[date] = None,
) -> list[Bill]:
    return [normalize_bill(bill, today=today) for bill in bills]
