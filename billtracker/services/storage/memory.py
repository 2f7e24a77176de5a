"""
In-Memory Storage Implementation

Keeps encoded documents in a dict, exactly as the file store keeps them
on disk. Reads therefore always return fresh model instances, and the
capacity limit behaves the same way as in the file store.

Used by tests and by create_app_components(use_storage=False).
"""

from typing import Optional

from billtracker.models.audit import AuditEvent
from billtracker.models.bill import Bill, PaymentRecord
from billtracker.services.storage.documents import (
    decode_bills,
    decode_payments,
    document_size,
    encode_bills,
    encode_payments,
)
from billtracker.services.storage.interface import (
    AuditStorageInterface,
    BillStorageInterface,
    StorageCapacityError,
    StorageError,
    StorageInfo,
)

BILLS_KEY = "bills"
PAYMENTS_KEY = "payments"


class InMemoryBillStorage(BillStorageInterface):
    """
    Dict-backed bill storage.

    Args:
        capacity_bytes: Simulated capacity limit
        fail_writes: When True every write raises StorageError
                     (lets tests exercise the rollback path)
    """

    def __init__(
        self,
        capacity_bytes: int = 5 * 1024 * 1024,
        fail_writes: bool = False,
    ):
        self._documents: dict[str, str] = {}
        self.capacity_bytes = capacity_bytes
        self.fail_writes = fail_writes

    def _write(self, key: str, document: str, label: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Failed to save {label}: storage unavailable")

        other = sum(
            document_size(doc) for k, doc in self._documents.items() if k != key
        )
        if other + document_size(document) > self.capacity_bytes:
            raise StorageCapacityError(
                f"Failed to save {label}. Storage might be full."
            )
        self._documents[key] = document

    def get_bills(self) -> list[Bill]:
        return decode_bills(self._documents.get(BILLS_KEY, ""), BILLS_KEY)

    def save_bills(self, bills: list[Bill]) -> None:
        self._write(BILLS_KEY, encode_bills(bills), "bills")

    def get_payments(self) -> list[PaymentRecord]:
        return decode_payments(self._documents.get(PAYMENTS_KEY, ""), PAYMENTS_KEY)

    def save_payments(self, payments: list[PaymentRecord]) -> None:
        self._write(PAYMENTS_KEY, encode_payments(payments), "payments")

    def clear(self) -> None:
        self._documents.clear()

    def get_storage_info(self) -> StorageInfo:
        used = sum(document_size(doc) for doc in self._documents.values())
        return StorageInfo(
            used=used,
            total=self.capacity_bytes,
            available=self.capacity_bytes - used,
        )


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit log."""

    def __init__(self, events: Optional[list[AuditEvent]] = None):
        self.events: list[AuditEvent] = list(events or [])

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self.events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self.events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
