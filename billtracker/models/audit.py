"""
Audit Models for Bill Tracker

Every mutation of the bill/payment data is logged for audit purposes.
This provides:
1. Traceability of every change to bills and payments
2. Debugging information when a storage write fails
3. Ability to reconstruct history after an import or clear

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Bills
    BILL_CREATED = "bill_created"
    BILL_UPDATED = "bill_updated"
    BILL_DELETED = "bill_deleted"
    NEXT_BILL_GENERATED = "next_bill_generated"

    # Payments
    PAYMENT_RECORDED = "payment_recorded"

    # Backup / restore
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    DATA_IMPORT_FAILED = "data_import_failed"
    DATA_CLEARED = "data_cleared"

    # System events
    STORAGE_FAILED = "storage_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: str = Field(
        default_factory=lambda: uuid4().hex,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'payment', 'backup')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_json_line(self) -> str:
        """Serialize as one line of a JSON-lines audit file."""
        return json.dumps(self.model_dump(mode="json"), sort_keys=True)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.bill_created(bill_id, name, amount)
        event = AuditEventBuilder.storage_failed("save_bills", str(err))
    """

    @staticmethod
    def bill_created(bill_id: str, name: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_CREATED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill created: {name} - {amount}",
            details={"name": name, "amount": amount},
        )

    @staticmethod
    def bill_updated(bill_id: str, changed_fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_UPDATED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill updated: {', '.join(changed_fields) or 'no fields'}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def bill_deleted(bill_id: str, payments_removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_DELETED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill deleted with {payments_removed} payments",
            details={"payments_removed": payments_removed},
        )

    @staticmethod
    def next_bill_generated(
        source_bill_id: str,
        new_bill_id: str,
        due_date: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NEXT_BILL_GENERATED,
            entity_type="bill",
            entity_id=new_bill_id,
            description=f"Next occurrence generated, due {due_date}",
            details={"source_bill_id": source_bill_id, "due_date": due_date},
        )

    @staticmethod
    def payment_recorded(
        payment_id: str,
        bill_id: str,
        amount: str,
        method: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_RECORDED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment of {amount} recorded via {method}",
            details={"bill_id": bill_id, "amount": amount, "method": method},
        )

    @staticmethod
    def data_exported(bill_count: int, payment_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            entity_type="backup",
            description=f"Exported {bill_count} bills and {payment_count} payments",
            details={"bills": bill_count, "payments": payment_count},
        )

    @staticmethod
    def data_imported(bill_count: int, payment_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            entity_type="backup",
            description=f"Imported {bill_count} bills and {payment_count} payments",
            details={"bills": bill_count, "payments": payment_count},
        )

    @staticmethod
    def data_import_failed(reason: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            description="Import rejected; existing data left unchanged",
            error_message=reason,
            details={"issues": issues},
        )

    @staticmethod
    def data_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            description="All bills and payments cleared",
        )

    @staticmethod
    def storage_failed(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Storage write failed during {operation}; rolled back",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
