"""
Shared fixtures for Bill Tracker tests.

Every test runs against a fixed "today" so results never depend on when
the suite runs.
"""

from datetime import date
from decimal import Decimal

import pytest

from billtracker.audit import AuditLogger
from billtracker.config import AnalyticsSettings, AppSettings, StorageSettings
from billtracker.ledger import BillLedger
from billtracker.models.bill import (
    Bill,
    BillCategory,
    BillFrequency,
    PaymentMethod,
    PaymentRecord,
)
from billtracker.services.storage import InMemoryAuditStorage, InMemoryBillStorage

TODAY = date(2024, 3, 15)


def make_bill(**overrides) -> Bill:
    """Bill with sensible defaults; any field can be overridden."""
    fields = {
        "name": "Electricity",
        "amount": Decimal("100.00"),
        "due_date": date(2024, 3, 20),
        "category": BillCategory.UTILITIES,
        "frequency": BillFrequency.MONTHLY,
    }
    fields.update(overrides)
    return Bill(**fields)


def make_payment(
    bill: Bill,
    amount,
    paid_date: date = TODAY,
    method: PaymentMethod = PaymentMethod.CREDIT_CARD,
) -> PaymentRecord:
    return PaymentRecord(
        bill_id=bill.id,
        amount=amount,
        paid_date=paid_date,
        payment_method=method,
    )


def with_payments(bill: Bill, *payments: PaymentRecord) -> Bill:
    """Copy of the bill carrying the given payment history."""
    return bill.model_copy(update={"payment_history": list(payments)})


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings(due_soon_days=7, trend_months=6, top_categories_limit=5)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(max_bill_amount=1000000.0, future_date_tolerance_days=7)


@pytest.fixture
def storage_settings(tmp_path) -> StorageSettings:
    return StorageSettings(data_dir=tmp_path / "data")


@pytest.fixture
def bill_storage() -> InMemoryBillStorage:
    return InMemoryBillStorage()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def ledger(bill_storage, audit_logger) -> BillLedger:
    ledger = BillLedger(bill_storage, audit_logger=audit_logger, clock=lambda: TODAY)
    ledger.load()
    return ledger
