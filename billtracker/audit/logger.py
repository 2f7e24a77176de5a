"""
Audit Logger

DESIGN DECISION: Every mutation of bills and payments is logged.
This provides:
1. Complete traceability
2. Debugging capability when a storage write fails
3. A history the user can inspect after imports and clears

The audit logger:
- Always logs locally through structlog
- Persists to an audit store when one is configured
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

import logging
from typing import Optional

import structlog

from billtracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from billtracker.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the standard library at `level`."""
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("billtracker").setLevel(level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit store (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("billtracker.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except (OSError, StorageError) as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=event.event_id,
                )
                return False

        return True

    def log_bill_created(self, bill_id: str, name: str, amount: str) -> None:
        self.log(AuditEventBuilder.bill_created(bill_id, name, amount))

    def log_bill_updated(self, bill_id: str, changed_fields: list[str]) -> None:
        self.log(AuditEventBuilder.bill_updated(bill_id, changed_fields))

    def log_bill_deleted(self, bill_id: str, payments_removed: int) -> None:
        self.log(AuditEventBuilder.bill_deleted(bill_id, payments_removed))

    def log_next_bill_generated(
        self,
        source_bill_id: str,
        new_bill_id: str,
        due_date: str,
    ) -> None:
        self.log(AuditEventBuilder.next_bill_generated(
            source_bill_id=source_bill_id,
            new_bill_id=new_bill_id,
            due_date=due_date,
        ))

    def log_payment_recorded(
        self,
        payment_id: str,
        bill_id: str,
        amount: str,
        method: str,
    ) -> None:
        self.log(AuditEventBuilder.payment_recorded(
            payment_id=payment_id,
            bill_id=bill_id,
            amount=amount,
            method=method,
        ))

    def log_data_exported(self, bill_count: int, payment_count: int) -> None:
        self.log(AuditEventBuilder.data_exported(bill_count, payment_count))

    def log_data_imported(self, bill_count: int, payment_count: int) -> None:
        self.log(AuditEventBuilder.data_imported(bill_count, payment_count))

    def log_data_import_failed(self, reason: str, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.data_import_failed(reason, issues))

    def log_data_cleared(self) -> None:
        self.log(AuditEventBuilder.data_cleared())

    def log_storage_failed(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_failed(operation, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
