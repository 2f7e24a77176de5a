"""Tests for the audit logger."""

from billtracker.audit import AuditLogger
from billtracker.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from billtracker.services.storage import AuditStorageInterface, StorageError


class BrokenAuditStorage(AuditStorageInterface):
    """Audit store whose every write fails."""

    def append_event(self, event):
        raise StorageError("audit store offline")

    def get_events_by_entity(self, entity_type, entity_id):
        return []

    def get_recent_events(self, limit=100):
        return []


class TestAuditLogger:
    def test_persists_events(self, audit_logger, audit_storage):
        audit_logger.log_bill_created("b1", "Power", "50.00")
        audit_logger.log_payment_recorded("p1", "b1", "50.00", "cash")

        assert [e.event_type for e in audit_storage.events] == [
            AuditEventType.BILL_CREATED, AuditEventType.PAYMENT_RECORDED,
        ]
        assert audit_storage.events[1].entity_type == "payment"

    def test_without_storage_only_logs_locally(self):
        logger = AuditLogger()
        assert logger.storage is None
        logger.log_data_cleared()

    def test_storage_failure_does_not_raise(self):
        logger = AuditLogger(BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.data_cleared()) is False

    def test_error_helpers(self, audit_logger, audit_storage):
        audit_logger.log_storage_failed("add_bill", "disk full")
        audit_logger.log_error("storage_restore_failed", "disk full", {"operation": "add_bill"})

        failed, error = audit_storage.events
        assert failed.severity == AuditSeverity.ERROR
        assert error.event_type == AuditEventType.SYSTEM_ERROR
        assert error.details == {"operation": "add_bill"}

    def test_backup_helpers(self, audit_logger, audit_storage):
        audit_logger.log_data_exported(2, 1)
        audit_logger.log_data_imported(2, 1)
        audit_logger.log_data_import_failed("Invalid JSON format", [])

        exported, imported, failed = audit_storage.events
        assert exported.details == {"bills": 2, "payments": 1}
        assert imported.event_type == AuditEventType.DATA_IMPORTED
        assert failed.error_message == "Invalid JSON format"

    def test_recent_events_newest_first(self, audit_logger, audit_storage):
        audit_logger.log_bill_updated("b1", ["name"])
        audit_logger.log_bill_deleted("b1", 3)

        recent = audit_storage.get_recent_events(limit=1)
        assert len(recent) == 1
