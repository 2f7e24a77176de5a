"""
Derived-View Models

Results produced by the summary aggregator and the analytics engine.
These are never persisted; they are recomputed from the current snapshot
on every call and handed to the presentation layer.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import Field, PlainSerializer

from billtracker.models.bill import BillCategory, CamelModel, Money, PaymentMethod

Percent = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class BillSummary(CamelModel):
    """
    Dashboard totals for a bill collection.

    NOTE: paid + pending + overdue is NOT a partition of total_amount.
    Partially paid bills contribute to none of the three buckets.
    """

    total_bills: int = 0
    total_amount: Money = Decimal("0.00")
    paid_amount: Money = Decimal("0.00")
    pending_amount: Money = Decimal("0.00")
    overdue_amount: Money = Decimal("0.00")
    upcoming_count: int = 0
    overdue_count: int = 0


class CategorySummary(CamelModel):
    """Per-category spending figures."""

    category: BillCategory
    total_amount: Money = Decimal("0.00")
    bill_count: int = 0
    paid_amount: Money = Decimal("0.00")
    pending_amount: Money = Decimal("0.00")


class MonthlyAnalytics(CamelModel):
    """Spending aggregated over one calendar month of payments."""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    total_spent: Money = Decimal("0.00")
    total_bills: int = Field(0, description="Distinct bills paid in the month")
    category_breakdown: list[CategorySummary] = Field(default_factory=list)
    average_per_bill: Money = Decimal("0.00")


class SpendingTrend(CamelModel):
    """Month-over-month change in spending."""

    change: Money = Decimal("0.00")
    percentage_change: Percent = Decimal("0.00")
    is_increasing: bool = False


class TopCategory(CategorySummary):
    """A category annotated with its share of paid spending."""

    percentage: int = 0


class SpendingByStatus(CamelModel):
    """
    Outstanding and settled amounts by status.

    pending is the remaining balance of pending/partial bills, while
    overdue is the full amount of overdue bills.
    """

    paid: Money = Decimal("0.00")
    pending: Money = Decimal("0.00")
    overdue: Money = Decimal("0.00")


class PaymentMethodStats(CamelModel):
    """Usage statistics for one payment method."""

    method: PaymentMethod
    count: int
    total_amount: Money
    average_amount: Money


class YearlySummary(CamelModel):
    """Current-year spending and a simple projection."""

    total_spent: Money = Decimal("0.00")
    average_monthly: Money = Decimal("0.00")
    projected_yearly: Money = Decimal("0.00")
    months_completed: int = 0


class MonthlySpendingPoint(CamelModel):
    month: str
    amount: Money
    bills: int


class CategorySlice(CamelModel):
    name: BillCategory
    value: Money
    percentage: int


class StatusSlice(CamelModel):
    name: str
    value: Money


class ChartData(CamelModel):
    """Display-ready series. Pure projection of other views."""

    monthly_spending: list[MonthlySpendingPoint] = Field(default_factory=list)
    category_pie: list[CategorySlice] = Field(default_factory=list)
    status_breakdown: list[StatusSlice] = Field(default_factory=list)
