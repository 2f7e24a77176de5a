"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep a JSON-file store for real use
2. Use in-memory storage for testing
3. Swap in another key-value backend later
4. Keep business logic decoupled from storage implementation

The interface mirrors a simple key-value store: whole collections are
read and written at once. Payments are the single source of truth;
bills are stored without relying on their embedded payment history.
"""

from abc import ABC, abstractmethod
from datetime import date

from pydantic import BaseModel, Field

from billtracker.errors import BillTrackerError
from billtracker.models.audit import AuditEvent
from billtracker.models.bill import Bill, PaymentRecord


class StorageInfo(BaseModel):
    """Approximate storage usage in bytes."""

    used: int = Field(ge=0)
    total: int = Field(ge=0)
    available: int


class BillStorageInterface(ABC):
    """
    Abstract interface for bill and payment storage.

    Any storage implementation must implement these methods.
    Write methods raise StorageError on failure; the caller is
    responsible for rolling back its in-memory state.
    """

    @abstractmethod
    def get_bills(self) -> list[Bill]:
        """Return all stored bills in insertion order."""
        pass

    @abstractmethod
    def save_bills(self, bills: list[Bill]) -> None:
        """
        Replace the stored bill collection.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_payments(self) -> list[PaymentRecord]:
        """Return all payment records in recording order."""
        pass

    @abstractmethod
    def save_payments(self, payments: list[PaymentRecord]) -> None:
        """
        Replace the stored payment collection.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all bills and payments."""
        pass

    @abstractmethod
    def get_storage_info(self) -> StorageInfo:
        """Report approximate usage against capacity."""
        pass

    def get_payments_by_date_range(
        self,
        start: date,
        end: date,
    ) -> list[PaymentRecord]:
        """
        Payments whose paid_date falls within [start, end] inclusive.

        Args:
            start: First day of the range
            end: Last day of the range

        Returns:
            Matching payments in recording order
        """
        return [p for p in self.get_payments() if start <= p.paid_date <= end]

    def get_payments_by_bill_id(self, bill_id: str) -> list[PaymentRecord]:
        """Payments recorded against one bill, in recording order."""
        return [p for p in self.get_payments() if p.bill_id == bill_id]


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """All events for one entity, in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(BillTrackerError):
    """Base exception for storage operations."""
    pass


class StorageCapacityError(StorageError):
    """The write would exceed the store's capacity."""
    pass
