"""
Bill Ledger

This module ties together storage, status derivation, analytics and
auditing, and defines the single write path for bills and payments.

DESIGN DECISION: The ledger enforces the boundaries:
- The payment store is the only source of truth for payments; each bill's
  payment_history is rebuilt from it after every load and every write
- Status is re-derived at every read, never trusted from storage
- Every mutation goes through _commit, which either persists the whole new
  snapshot or leaves the previous one in place and re-raises
- Every mutation is audited
"""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import structlog

from billtracker import backup
from billtracker.analytics import (
    BillAnalytics,
    filter_bills,
    get_overdue_bills,
    get_upcoming_bills,
    group_by_status,
    normalize_bills,
    search_bills,
    summarize,
    total_paid,
)
from billtracker.audit import AuditLogger, configure_logging
from billtracker.config import Settings, get_settings
from billtracker.errors import DataImportError, NotFoundError
from billtracker.models.analytics import BillSummary
from billtracker.models.bill import (
    Bill,
    BillCategory,
    BillFrequency,
    BillStatus,
    ImportResult,
    PaymentMethod,
    PaymentRecord,
)
from billtracker.services.storage import (
    BillStorageInterface,
    InMemoryAuditStorage,
    InMemoryBillStorage,
    JsonFileAuditStorage,
    JsonFileBillStorage,
    StorageError,
    StorageInfo,
)
from billtracker.utils.dates import next_due_date
from billtracker.validation import BackupValidator

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset({
    "name", "amount", "due_date", "category", "frequency", "notes",
})


class BillLedger:
    """
    In-memory snapshot of bills and payments backed by a store.

    Flow for every mutation:
    1. Build the new bill and payment lists
    2. Commit both to storage (rollback on failure)
    3. Rebuild payment histories and statuses
    4. Audit
    """

    def __init__(
        self,
        storage: BillStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        settings = settings or get_settings()
        self._analytics_settings = settings.analytics
        self._app_settings = settings.app
        self._clock = clock or date.today

        self._bills: list[Bill] = []
        self._payments: list[PaymentRecord] = []

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def _today(self) -> date:
        return self._clock()

    def _materialize(
        self,
        bills: Iterable[Bill],
        payments: list[PaymentRecord],
    ) -> list[Bill]:
        """Attach each bill's payments (in recording order) and derive status."""
        history: dict[str, list[PaymentRecord]] = defaultdict(list)
        for payment in payments:
            history[payment.bill_id].append(payment)

        with_history = [
            bill.model_copy(update={"payment_history": list(history.get(bill.id, []))})
            for bill in bills
        ]
        return normalize_bills(with_history, today=self._today())

    def _snapshot(self) -> list[Bill]:
        # Re-derive so a long-lived ledger notices bills becoming overdue
        return normalize_bills(self._bills, today=self._today())

    def load(self) -> list[Bill]:
        """Read bills and payments from storage and normalize them."""
        bills = self._storage.get_bills()
        payments = self._storage.get_payments()

        self._payments = list(payments)
        self._bills = self._materialize(bills, self._payments)

        logger.info(
            "bills_loaded",
            bill_count=len(self._bills),
            payment_count=len(self._payments),
        )
        return self.bills

    @property
    def bills(self) -> list[Bill]:
        return [bill.model_copy(deep=True) for bill in self._snapshot()]

    @property
    def payments(self) -> list[PaymentRecord]:
        return [payment.model_copy() for payment in self._payments]

    def get_bill(self, bill_id: str) -> Bill:
        """
        Raises:
            NotFoundError: If no bill has this id
        """
        for bill in self._snapshot():
            if bill.id == bill_id:
                return bill.model_copy(deep=True)
        raise NotFoundError("bill", bill_id)

    def get_payments_for_bill(self, bill_id: str) -> list[PaymentRecord]:
        self.get_bill(bill_id)
        return [p.model_copy() for p in self._payments if p.bill_id == bill_id]

    # ------------------------------------------------------------------
    # Single write path
    # ------------------------------------------------------------------

    def _commit(
        self,
        bills: list[Bill],
        payments: list[PaymentRecord],
        operation: str,
    ) -> None:
        """
        Persist a new snapshot.

        On StorageError the in-memory snapshot is left untouched, the
        previous snapshot is written back to storage, and the error is
        re-raised.
        """
        normalized = self._materialize(bills, payments)
        try:
            self._storage.save_bills(normalized)
            self._storage.save_payments(payments)
        except StorageError as e:
            logger.error("storage_write_failed", operation=operation, error=str(e))
            self._restore_storage(operation)
            self._audit.log_storage_failed(operation, str(e))
            raise

        self._bills = normalized
        self._payments = list(payments)

    def _restore_storage(self, operation: str) -> None:
        try:
            self._storage.save_bills(self._bills)
            self._storage.save_payments(self._payments)
        except StorageError as restore_error:
            logger.error(
                "storage_restore_failed",
                operation=operation,
                error=str(restore_error),
            )
            self._audit.log_error(
                error_type="storage_restore_failed",
                error_message=str(restore_error),
                details={"operation": operation},
            )

    def _index_of(self, bill_id: str) -> int:
        for index, bill in enumerate(self._bills):
            if bill.id == bill_id:
                return index
        raise NotFoundError("bill", bill_id)

    # ------------------------------------------------------------------
    # Bills
    # ------------------------------------------------------------------

    def add_bill(
        self,
        name: str,
        amount: Union[Decimal, float, int, str],
        due_date: date,
        category: BillCategory = BillCategory.OTHER,
        frequency: BillFrequency = BillFrequency.MONTHLY,
        notes: Optional[str] = None,
    ) -> Bill:
        """
        Create a new pending bill with an empty payment history.

        Raises:
            pydantic.ValidationError: If the input is not a valid bill
            StorageError: If the write fails (nothing is added)
        """
        now = datetime.utcnow()
        bill = Bill(
            name=name,
            amount=amount,
            due_date=due_date,
            category=category,
            frequency=frequency,
            notes=notes,
            status=BillStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        self._commit(self._bills + [bill], self._payments, "add_bill")
        self._audit.log_bill_created(bill.id, bill.name, str(bill.amount))
        return self.get_bill(bill.id)

    def update_bill(self, bill_id: str, **changes) -> Bill:
        """
        Update editable fields of a bill and bump updated_at.

        Raises:
            NotFoundError: If the bill doesn't exist
            ValueError: If a non-editable field (id, status, payment
                        history, timestamps) is passed
        """
        rejected = sorted(set(changes) - UPDATABLE_FIELDS)
        if rejected:
            raise ValueError(f"Cannot update field(s): {', '.join(rejected)}")

        index = self._index_of(bill_id)
        data = self._bills[index].model_dump(exclude={"payment_history"})
        data.update(changes)
        data["updated_at"] = datetime.utcnow()
        updated = Bill.model_validate(data)

        bills = list(self._bills)
        bills[index] = updated
        self._commit(bills, self._payments, "update_bill")
        self._audit.log_bill_updated(bill_id, sorted(changes))
        return self.get_bill(bill_id)

    def delete_bill(self, bill_id: str) -> None:
        """
        Delete a bill and every payment recorded against it.

        Raises:
            NotFoundError: If the bill doesn't exist
        """
        self._index_of(bill_id)

        bills = [b for b in self._bills if b.id != bill_id]
        payments = [p for p in self._payments if p.bill_id != bill_id]
        removed = len(self._payments) - len(payments)

        self._commit(bills, payments, "delete_bill")
        self._audit.log_bill_deleted(bill_id, removed)

    def generate_next_bill(self, bill_id: str) -> Bill:
        """
        Create the next occurrence of a recurring bill.

        The copy keeps name, amount, category, frequency and notes, is due
        one period after the source bill, and starts pending and unpaid.
        """
        source = self.get_bill(bill_id)
        next_bill = self.add_bill(
            name=source.name,
            amount=source.amount,
            due_date=next_due_date(source.due_date, source.frequency),
            category=source.category,
            frequency=source.frequency,
            notes=source.notes,
        )
        self._audit.log_next_bill_generated(
            source_bill_id=bill_id,
            new_bill_id=next_bill.id,
            due_date=next_bill.due_date.isoformat(),
        )
        return next_bill

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def add_payment(
        self,
        bill_id: str,
        amount: Union[Decimal, float, int, str],
        paid_date: Optional[date] = None,
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        notes: Optional[str] = None,
    ) -> PaymentRecord:
        """
        Record a payment against a bill.

        The payment is appended to the payment store; the bill's history
        and status follow from it.

        Raises:
            NotFoundError: If the bill doesn't exist
            pydantic.ValidationError: If the payment is invalid
        """
        index = self._index_of(bill_id)
        payment = PaymentRecord(
            bill_id=bill_id,
            amount=amount,
            paid_date=paid_date or self._today(),
            payment_method=payment_method,
            notes=notes,
        )

        bills = list(self._bills)
        bills[index] = bills[index].model_copy(update={"updated_at": datetime.utcnow()})
        self._commit(bills, self._payments + [payment], "add_payment")

        self._audit.log_payment_recorded(
            payment_id=payment.id,
            bill_id=bill_id,
            amount=str(payment.amount),
            method=payment.payment_method.value,
        )
        return payment

    def mark_as_paid(
        self,
        bill_id: str,
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
    ) -> Optional[PaymentRecord]:
        """
        Pay off whatever remains on a bill, dated today.

        Returns the new payment, or None if nothing was owed.
        """
        bill = self.get_bill(bill_id)
        remaining = bill.amount - total_paid(bill)
        if remaining <= 0:
            return None
        return self.add_payment(
            bill_id,
            remaining,
            paid_date=self._today(),
            payment_method=payment_method,
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def summary(self) -> BillSummary:
        return summarize(
            self._snapshot(),
            today=self._today(),
            due_soon_days=self._analytics_settings.due_soon_days,
        )

    def upcoming_bills(self, days: Optional[int] = None) -> list[Bill]:
        window = self._analytics_settings.due_soon_days if days is None else days
        return get_upcoming_bills(self._snapshot(), days=window, today=self._today())

    def overdue_bills(self) -> list[Bill]:
        return get_overdue_bills(self._snapshot())

    def search(self, query: str) -> list[Bill]:
        return search_bills(self._snapshot(), query)

    def filter(
        self,
        statuses: Optional[Iterable[BillStatus]] = None,
        categories: Optional[Iterable[BillCategory]] = None,
        due_soon: bool = False,
        overdue: bool = False,
    ) -> list[Bill]:
        return filter_bills(
            self._snapshot(),
            statuses=statuses,
            categories=categories,
            due_soon=due_soon,
            overdue=overdue,
            today=self._today(),
            due_soon_days=self._analytics_settings.due_soon_days,
        )

    def bills_by_status(self) -> dict[BillStatus, list[Bill]]:
        return group_by_status(self._snapshot())

    def analytics(self) -> BillAnalytics:
        """Analytics over the current snapshot."""
        return BillAnalytics(
            self._snapshot(),
            self._payments,
            today=self._today(),
            settings=self._analytics_settings,
        )

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    def export_data(self) -> str:
        """Export the current snapshot as a JSON backup."""
        document = backup.export_data(self._snapshot(), self._payments)
        self._audit.log_data_exported(len(self._bills), len(self._payments))
        return document

    def import_data(self, text: str) -> ImportResult:
        """
        Replace all bills and payments with the contents of a backup.

        On any failure the existing data is left unchanged.

        Raises:
            DataImportError: If the backup is malformed or fails validation
            StorageError: If writing the imported data fails
        """
        try:
            payload = backup.parse_backup(text)
        except DataImportError as e:
            self._audit.log_data_import_failed(str(e), e.issues)
            raise

        validator = BackupValidator(self._app_settings, today=self._today())
        result = validator.validate(payload)
        if not result.is_valid:
            issues = [issue.model_dump(mode="json") for issue in result.issues]
            message = f"Invalid data: {result.error_count} error(s) found"
            self._audit.log_data_import_failed(message, issues)
            raise DataImportError(message, issues=issues)

        for warning in result.warnings:
            logger.warning("import_warning", warning=warning)

        self._commit(payload.bills, payload.payments, "import_data")
        self._audit.log_data_imported(len(payload.bills), len(payload.payments))

        return ImportResult(
            bills_imported=len(payload.bills),
            payments_imported=len(payload.payments),
            message=(
                f"Successfully imported {len(payload.bills)} bills "
                f"and {len(payload.payments)} payments"
            ),
            warnings=result.warnings,
        )

    def clear_all_data(self) -> None:
        """
        Remove every bill and payment from storage and memory.

        A failed clear restores the previous snapshot to storage and re-raises.
        """
        try:
            self._storage.clear()
        except StorageError as e:
            logger.error("storage_write_failed", operation="clear_all_data", error=str(e))
            self._restore_storage("clear_all_data")
            self._audit.log_storage_failed("clear_all_data", str(e))
            raise
        self._bills = []
        self._payments = []
        self._audit.log_data_cleared()

    def storage_info(self) -> StorageInfo:
        return self._storage.get_storage_info()


def create_app_components(
    data_dir: Optional[Union[str, Path]] = None,
    use_storage: bool = True,
) -> BillLedger:
    """
    Factory function to wire storage, audit logging and the ledger.

    Args:
        data_dir: Overrides the configured storage directory
        use_storage: Whether to use the JSON file store.
                    Set to False for in-memory operation (tests, demos).

    Returns:
        A loaded BillLedger
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    if use_storage:
        storage_settings = settings.storage
        if data_dir is not None:
            storage_settings = storage_settings.model_copy(
                update={"data_dir": Path(data_dir)}
            )
        bill_storage = JsonFileBillStorage(storage_settings)
        audit_logger = AuditLogger(JsonFileAuditStorage(storage_settings))
    else:
        bill_storage = InMemoryBillStorage()
        audit_logger = AuditLogger(InMemoryAuditStorage())

    ledger = BillLedger(bill_storage, audit_logger=audit_logger, settings=settings)
    ledger.load()
    return ledger
