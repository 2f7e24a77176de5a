"""Tests for the spending analytics engine."""

from datetime import date
from decimal import Decimal

import pytest

from billtracker.analytics.engine import BillAnalytics
from billtracker.analytics.status import normalize_bills
from billtracker.config import AnalyticsSettings
from billtracker.models.bill import BillCategory, BillStatus, PaymentMethod
from tests.conftest import TODAY, make_bill, make_payment, with_payments


def build(bills, payments, settings=None):
    """Attach payments to their bills and normalize, like the ledger does."""
    attached = [
        with_payments(bill, *[p for p in payments if p.bill_id == bill.id])
        for bill in bills
    ]
    return BillAnalytics(
        normalize_bills(attached, today=TODAY),
        payments,
        today=TODAY,
        settings=settings or AnalyticsSettings(),
    )


@pytest.fixture
def history():
    """Three months of payments across two categories."""
    power = make_bill(name="Power", amount=Decimal("50"))
    gas = make_bill(name="Gas", amount=Decimal("70"))
    rent = make_bill(name="Rent", amount=Decimal("1000"), category=BillCategory.RENT,
                     due_date=date(2024, 3, 1))

    payments = [
        make_payment(power, Decimal("90"), paid_date=date(2024, 1, 10)),
        make_payment(gas, Decimal("100"), paid_date=date(2024, 2, 10),
                     method=PaymentMethod.BANK_TRANSFER),
        make_payment(power, Decimal("50"), paid_date=date(2024, 3, 2)),
        make_payment(rent, Decimal("1000"), paid_date=date(2024, 3, 1),
                     method=PaymentMethod.BANK_TRANSFER),
    ]
    return [power, gas, rent], payments


class TestEmptyData:
    """Analytics never raise on empty input."""

    def test_trend_series_has_configured_length(self):
        analytics = build([], [])
        assert len(analytics.monthly_trends) == 6
        assert all(m.total_spent == Decimal("0.00") for m in analytics.monthly_trends)

    def test_trend_is_flat(self):
        trend = build([], []).spending_trend
        assert trend.change == Decimal("0.00")
        assert trend.percentage_change == Decimal("0.00")
        assert trend.is_increasing is False

    def test_empty_views(self):
        analytics = build([], [])
        assert analytics.current_month_spending == Decimal("0.00")
        assert analytics.category_breakdown == []
        assert analytics.top_categories == []
        assert analytics.payment_method_analysis == []
        assert analytics.average_monthly_spending == Decimal("0.00")
        assert analytics.yearly_summary.total_spent == Decimal("0.00")

    def test_to_dict_on_empty(self):
        data = build([], []).to_dict()
        assert data["currentMonthSpending"] == 0.0
        assert len(data["monthlyTrends"]) == 6


class TestCategoryBreakdown:
    def test_utilities_example(self):
        """Two utility bills, one paid this month."""
        power = make_bill(name="Power", amount=Decimal("50"))
        gas = make_bill(name="Gas", amount=Decimal("70"))
        payments = [make_payment(power, Decimal("50"))]

        breakdown = build([power, gas], payments).category_breakdown
        assert len(breakdown) == 1
        utilities = breakdown[0]
        assert utilities.category == BillCategory.UTILITIES
        assert utilities.total_amount == Decimal("120.00")
        assert utilities.bill_count == 2
        assert utilities.paid_amount == Decimal("50.00")
        assert utilities.pending_amount == Decimal("70.00")

    def test_paid_counts_only_current_month(self, history):
        bills, payments = history
        breakdown = build(bills, payments).category_breakdown
        utilities = next(c for c in breakdown if c.category == BillCategory.UTILITIES)
        assert utilities.paid_amount == Decimal("50.00")

    def test_sorted_by_total_descending(self, history):
        bills, payments = history
        breakdown = build(bills, payments).category_breakdown
        assert [c.category for c in breakdown] == [BillCategory.RENT, BillCategory.UTILITIES]


class TestTrends:
    def test_index_zero_is_current_month(self, history):
        bills, payments = history
        trends = build(bills, payments).monthly_trends
        assert [m.month for m in trends] == [
            "2024-03", "2024-02", "2024-01", "2023-12", "2023-11", "2023-10",
        ]
        assert trends[0].total_spent == Decimal("1050.00")
        assert trends[1].total_spent == Decimal("100.00")
        assert trends[2].total_spent == Decimal("90.00")

    def test_month_details(self, history):
        bills, payments = history
        march = build(bills, payments).monthly_trends[0]
        assert march.total_bills == 2
        assert march.average_per_bill == Decimal("525.00")
        assert [c.category for c in march.category_breakdown] == [
            BillCategory.RENT, BillCategory.UTILITIES,
        ]

    def test_spending_trend(self):
        bill = make_bill()
        payments = [
            make_payment(bill, Decimal("100"), paid_date=date(2024, 2, 5)),
            make_payment(bill, Decimal("120"), paid_date=date(2024, 3, 5)),
        ]
        trend = build([bill], payments).spending_trend
        assert trend.change == Decimal("20.00")
        assert trend.percentage_change == Decimal("20.00")
        assert trend.is_increasing is True

    def test_spending_trend_from_empty_month(self):
        bill = make_bill()
        payments = [make_payment(bill, Decimal("80"), paid_date=date(2024, 3, 5))]
        trend = build([bill], payments).spending_trend
        assert trend.change == Decimal("80.00")
        assert trend.percentage_change == Decimal("0.00")
        assert trend.is_increasing is True

    def test_configured_trend_length(self):
        analytics = build([], [], settings=AnalyticsSettings(trend_months=12))
        assert len(analytics.monthly_trends) == 12

    def test_average_monthly_spending(self, history):
        bills, payments = history
        # (1050 + 100 + 90) / 6
        assert build(bills, payments).average_monthly_spending == Decimal("206.67")


class TestTopCategories:
    def test_ranked_by_paid_with_percentages(self, history):
        bills, payments = history
        top = build(bills, payments).top_categories
        assert [c.category for c in top] == [BillCategory.RENT, BillCategory.UTILITIES]
        assert [c.percentage for c in top] == [95, 5]

    def test_limit(self, history):
        bills, payments = history
        analytics = build(bills, payments, settings=AnalyticsSettings(top_categories_limit=1))
        assert len(analytics.top_categories) == 1

    def test_nothing_paid_gives_zero_percent(self):
        top = build([make_bill()], []).top_categories
        assert top[0].percentage == 0


class TestSpendingByStatus:
    def test_pending_uses_remaining_balance(self):
        partial = make_bill(amount=Decimal("100"))
        pending = make_bill(amount=Decimal("30"), due_date=date(2024, 3, 30))
        overdue = make_bill(amount=Decimal("45"), due_date=date(2024, 3, 1))
        paid = make_bill(amount=Decimal("20"))
        payments = [
            make_payment(partial, Decimal("40")),
            make_payment(paid, Decimal("20")),
        ]

        analytics = build([partial, pending, overdue, paid], payments)
        statuses = [b.status for b in analytics._bills]
        assert statuses == [
            BillStatus.PARTIAL, BillStatus.PENDING, BillStatus.OVERDUE, BillStatus.PAID,
        ]

        by_status = analytics.spending_by_status
        assert by_status.pending == Decimal("90.00")
        assert by_status.overdue == Decimal("45.00")
        assert by_status.paid == Decimal("20.00")


class TestPaymentMethods:
    def test_grouped_and_sorted_by_total(self, history):
        bills, payments = history
        stats = build(bills, payments).payment_method_analysis
        assert [s.method for s in stats] == [
            PaymentMethod.BANK_TRANSFER, PaymentMethod.CREDIT_CARD,
        ]
        transfer = stats[0]
        assert transfer.count == 2
        assert transfer.total_amount == Decimal("1100.00")
        assert transfer.average_amount == Decimal("550.00")


class TestYearlySummary:
    def test_projection_from_current_year_months(self, history):
        bills, payments = history
        yearly = build(bills, payments).yearly_summary
        assert yearly.total_spent == Decimal("1240.00")
        assert yearly.months_completed == 3
        assert yearly.average_monthly == Decimal("413.33")
        assert yearly.projected_yearly == Decimal("4960.00")


class TestChartData:
    def test_series(self, history):
        bills, payments = history
        charts = build(bills, payments).chart_data
        assert charts.monthly_spending[0].month == "March 2024"
        assert charts.monthly_spending[0].amount == Decimal("1050.00")
        assert charts.category_pie[0].name == BillCategory.RENT
        assert [s.name for s in charts.status_breakdown] == ["Paid", "Pending", "Overdue"]

    def test_to_dict_is_json_ready(self, history):
        bills, payments = history
        data = build(bills, payments).to_dict()
        assert data["currentMonthSpending"] == 1050.0
        assert data["spendingTrends"]["isIncreasing"] is True
        assert data["topCategories"][0]["category"] == "rent"
        assert data["chartData"]["monthlySpending"][0]["amount"] == 1050.0
        assert data["topCategories"][0]["paidAmount"] == 1000.0
        assert data["yearlySummary"]["monthsCompleted"] == 3
        assert data["monthlyTrends"][0]["averagePerBill"] == 525.0
