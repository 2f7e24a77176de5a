"""
Error Types

Propagation policy:
- NotFoundError and DataImportError go straight to the caller; the
  presentation layer decides how to word them for the user.
- StorageError is raised by the storage layer. The ledger rolls back to
  its previous snapshot and then re-raises it.
"""

from typing import Optional


class BillTrackerError(Exception):
    """Base exception for all Bill Tracker errors."""
    pass


class NotFoundError(BillTrackerError):
    """Operated on a bill or payment id that doesn't exist."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type.capitalize()} not found: {entity_id}")


class DataImportError(BillTrackerError):
    """
    Backup payload was rejected.

    Attributes:
        issues: Validation issues (as dicts) that caused the rejection
    """

    def __init__(self, message: str, issues: Optional[list[dict]] = None):
        self.issues = issues or []
        super().__init__(message)
