"""
Spending Analytics Engine

DESIGN DECISION: Analytics are DETERMINISTIC projections of one snapshot.
A BillAnalytics instance is built from:
- the status-normalized bill list, and
- the full payment-record store (queried by date range and bill id).

Every view is a cached_property, so each is computed at most once per
snapshot and views that build on each other (top categories on the
category breakdown, spending trend on the monthly trends) share work.
A changed snapshot needs a new BillAnalytics; nothing is cached globally.

GUARANTEES:
- Never raises on empty or sparse data; aggregates degrade to zero/empty
- The monthly trend series always has exactly `trend_months` entries,
  index 0 being the current month
- All money values are rounded to cents
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from functools import cached_property
from typing import Optional, Sequence

from billtracker.analytics.status import remaining_balance, total_paid
from billtracker.config import AnalyticsSettings, get_settings
from billtracker.models.analytics import (
    CategorySlice,
    CategorySummary,
    ChartData,
    MonthlyAnalytics,
    MonthlySpendingPoint,
    PaymentMethodStats,
    SpendingByStatus,
    SpendingTrend,
    StatusSlice,
    TopCategory,
    YearlySummary,
)
from billtracker.models.bill import Bill, BillCategory, BillStatus, PaymentRecord
from billtracker.utils.dates import (
    current_month,
    last_n_months,
    month_name,
    month_range,
    year_range,
)
from billtracker.utils.money import (
    ZERO,
    calculate_average,
    calculate_percentage,
    calculate_total,
    percentage_change,
    round_to_cents,
)


class BillAnalytics:
    """
    Spending analytics over one snapshot of bills and payments.

    Usage:
        analytics = BillAnalytics(bills, payments)
        analytics.monthly_trends[0].total_spent   # spent this month
        analytics.to_dict()                        # every view, JSON-ready
    """

    def __init__(
        self,
        bills: Sequence[Bill],
        payments: Sequence[PaymentRecord],
        today: Optional[date] = None,
        settings: Optional[AnalyticsSettings] = None,
    ):
        self._bills = list(bills)
        self._payments = list(payments)
        self._today = today or date.today()
        self._settings = settings or get_settings().analytics

    @property
    def today(self) -> date:
        return self._today

    # ------------------------------------------------------------------
    # Payment store queries
    # ------------------------------------------------------------------

    def payments_between(self, start: date, end: date) -> list[PaymentRecord]:
        """Payments with paid_date in [start, end], in recording order."""
        return [p for p in self._payments if start <= p.paid_date <= end]

    @cached_property
    def _bills_by_id(self) -> dict[str, Bill]:
        return {bill.id: bill for bill in self._bills}

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @cached_property
    def current_month_spending(self) -> Decimal:
        """Total paid so far in the current calendar month."""
        start, end = month_range(current_month(self._today))
        return calculate_total(p.amount for p in self.payments_between(start, end))

    @cached_property
    def category_breakdown(self) -> list[CategorySummary]:
        """
        Per-category totals for the current month, largest total first.

        paid_amount only counts payments made this month, while
        pending_amount is each bill's outstanding balance across its
        entire payment history.
        """
        start, end = month_range(current_month(self._today))
        paid_this_month: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for payment in self.payments_between(start, end):
            paid_this_month[payment.bill_id] += payment.amount

        totals: dict[BillCategory, dict] = {}
        for bill in self._bills:
            entry = totals.setdefault(bill.category, {
                "total_amount": ZERO,
                "bill_count": 0,
                "paid_amount": ZERO,
                "pending_amount": ZERO,
            })
            entry["total_amount"] += bill.amount
            entry["bill_count"] += 1
            entry["paid_amount"] += paid_this_month.get(bill.id, ZERO)
            entry["pending_amount"] += remaining_balance(bill)

        breakdown = [
            CategorySummary(category=category, **entry)
            for category, entry in totals.items()
            if entry["bill_count"] > 0
        ]
        breakdown.sort(key=lambda c: c.total_amount, reverse=True)
        return breakdown

    def _month_analytics(self, year_month: str) -> MonthlyAnalytics:
        start, end = month_range(year_month)
        payments = self.payments_between(start, end)

        total_spent = calculate_total(p.amount for p in payments)
        total_bills = len({p.bill_id for p in payments})
        average = round_to_cents(total_spent / total_bills) if total_bills else ZERO

        amounts: dict[BillCategory, Decimal] = {}
        counts: dict[BillCategory, int] = {}
        for payment in payments:
            bill = self._bills_by_id.get(payment.bill_id)
            if bill is None:
                continue
            amounts[bill.category] = amounts.get(bill.category, ZERO) + payment.amount
            counts[bill.category] = counts.get(bill.category, 0) + 1

        categories = [
            CategorySummary(
                category=category,
                total_amount=amount,
                bill_count=counts[category],
                paid_amount=amount,
                pending_amount=ZERO,
            )
            for category, amount in amounts.items()
        ]
        categories.sort(key=lambda c: c.total_amount, reverse=True)

        return MonthlyAnalytics(
            month=year_month,
            total_spent=total_spent,
            total_bills=total_bills,
            category_breakdown=categories,
            average_per_bill=average,
        )

    @cached_property
    def monthly_trends(self) -> list[MonthlyAnalytics]:
        """
        Spending for each of the last `trend_months` months.

        Index 0 is the current month, index 1 the month before, and so on.
        Months without payments are present with zero totals.
        """
        months = last_n_months(self._settings.trend_months, today=self._today)
        return [self._month_analytics(month) for month in months]

    @cached_property
    def spending_trend(self) -> SpendingTrend:
        """Change from the previous month to the current month."""
        trends = self.monthly_trends
        if len(trends) < 2:
            return SpendingTrend()

        current = trends[0].total_spent
        previous = trends[1].total_spent
        change = current - previous
        return SpendingTrend(
            change=change,
            percentage_change=percentage_change(current, previous),
            is_increasing=change > 0,
        )

    @cached_property
    def top_categories(self) -> list[TopCategory]:
        """
        Categories with the most paid this month, with their share.

        Ties keep the category breakdown's order.
        """
        breakdown = self.category_breakdown
        paid_total = calculate_total(c.paid_amount for c in breakdown)
        ranked = sorted(breakdown, key=lambda c: c.paid_amount, reverse=True)

        return [
            TopCategory(
                **summary.model_dump(),
                percentage=calculate_percentage(summary.paid_amount, paid_total),
            )
            for summary in ranked[:self._settings.top_categories_limit]
        ]

    @cached_property
    def average_monthly_spending(self) -> Decimal:
        return calculate_average(m.total_spent for m in self.monthly_trends)

    @cached_property
    def spending_by_status(self) -> SpendingByStatus:
        """
        Paid, outstanding and overdue amounts.

        pending uses the remaining balance of pending and partial bills;
        overdue uses the full bill amount.
        """
        paid = calculate_total(
            b.amount for b in self._bills if b.status == BillStatus.PAID
        )
        pending = calculate_total(
            b.amount - total_paid(b)
            for b in self._bills
            if b.status in (BillStatus.PENDING, BillStatus.PARTIAL)
        )
        overdue = calculate_total(
            b.amount for b in self._bills if b.status == BillStatus.OVERDUE
        )
        return SpendingByStatus(paid=paid, pending=pending, overdue=overdue)

    @cached_property
    def payment_method_analysis(self) -> list[PaymentMethodStats]:
        """Usage of each payment method across all payments, ever."""
        counts: dict = {}
        totals: dict = {}
        for payment in self._payments:
            method = payment.payment_method
            counts[method] = counts.get(method, 0) + 1
            totals[method] = totals.get(method, ZERO) + payment.amount

        stats = [
            PaymentMethodStats(
                method=method,
                count=counts[method],
                total_amount=totals[method],
                average_amount=round_to_cents(totals[method] / counts[method]),
            )
            for method in counts
        ]
        stats.sort(key=lambda s: s.total_amount, reverse=True)
        return stats

    @cached_property
    def yearly_summary(self) -> YearlySummary:
        """Current-year spending and a 12-month projection."""
        year = self._today.year
        start, end = year_range(year)
        total_spent = calculate_total(
            p.amount for p in self.payments_between(start, end)
        )

        this_year = [
            m.total_spent for m in self.monthly_trends
            if m.month.startswith(f"{year}-")
        ]
        if not this_year:
            return YearlySummary(total_spent=total_spent)

        mean = calculate_total(this_year) / len(this_year)
        return YearlySummary(
            total_spent=total_spent,
            average_monthly=round_to_cents(mean),
            projected_yearly=round_to_cents(mean * 12),
            months_completed=len(this_year),
        )

    @cached_property
    def chart_data(self) -> ChartData:
        """Display-ready series; a pure projection of other views."""
        by_status = self.spending_by_status
        return ChartData(
            monthly_spending=[
                MonthlySpendingPoint(
                    month=month_name(m.month),
                    amount=m.total_spent,
                    bills=m.total_bills,
                )
                for m in self.monthly_trends
            ],
            category_pie=[
                CategorySlice(
                    name=c.category,
                    value=c.paid_amount,
                    percentage=c.percentage,
                )
                for c in self.top_categories
            ],
            status_breakdown=[
                StatusSlice(name="Paid", value=by_status.paid),
                StatusSlice(name="Pending", value=by_status.pending),
                StatusSlice(name="Overdue", value=by_status.overdue),
            ],
        )

    def to_dict(self) -> dict:
        """Every view as JSON-ready data with camelCase keys throughout."""
        def dump(item):
            return item.model_dump(mode="json", by_alias=True)

        def dump_list(items):
            return [dump(item) for item in items]

        return {
            "currentMonthSpending": float(self.current_month_spending),
            "categoryBreakdown": dump_list(self.category_breakdown),
            "monthlyTrends": dump_list(self.monthly_trends),
            "spendingTrends": dump(self.spending_trend),
            "topCategories": dump_list(self.top_categories),
            "averageMonthlySpending": float(self.average_monthly_spending),
            "spendingByStatus": dump(self.spending_by_status),
            "paymentMethodAnalysis": dump_list(self.payment_method_analysis),
            "yearlySummary": dump(self.yearly_summary),
            "chartData": dump(self.chart_data),
        }
