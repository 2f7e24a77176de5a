"""
JSON File Storage Implementation

DESIGN DECISION: A directory of JSON documents is used as the local
key-value store because:
1. No database setup required
2. Users can inspect or back up their data with ordinary tools
3. The document format is the same one used by exported backups

TRADEOFFS:
- Whole collections are rewritten on every save (fine for personal use)
- No transactions across keys (the ledger rolls back on failure instead)
- Capacity is capped to keep documents small

Each write goes to a temporary file first and is moved into place with
os.replace, so a crash never leaves a half-written document behind.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from billtracker.config import StorageSettings, get_settings
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

logger = structlog.get_logger(__name__)


class JsonFileStore:
    """
    Low-level key-value store over a directory of files.

    Handles atomic writes and provides retry logic for transient I/O errors.
    """

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str, suffix: str = ".json") -> Path:
        return self._data_dir / f"{key}{suffix}"

    def read(self, key: str) -> str:
        """Read a document; a missing or unreadable file reads as empty."""
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except OSError as e:
            logger.error("document_read_failed", key=key, path=str(path), error=str(e))
            return ""

    def size(self, key: str) -> int:
        return document_size(self.read(key))

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def write(self, key: str, document: str) -> None:
        """Atomically replace a document."""
        self._data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self._data_dir, prefix=f".{key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(document)
            os.replace(tmp_path, self.path_for(key))
        except OSError:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def append_line(self, key: str, line: str) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        with self.path_for(key, ".jsonl").open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


class JsonFileBillStorage(BillStorageInterface):
    """
    File-backed implementation of bill storage.

    Bills and payments live in two documents, named by the configured keys.
    """

    def __init__(
        self,
        settings: Optional[StorageSettings] = None,
        store: Optional[JsonFileStore] = None,
    ):
        self._settings = settings or get_settings().storage
        self._store = store or JsonFileStore(self._settings.data_dir)

    def _write(self, key: str, other_key: str, document: str, label: str) -> None:
        projected = document_size(document) + self._store.size(other_key)
        if projected > self._settings.capacity_bytes:
            logger.warning(
                "storage_capacity_exceeded",
                key=key,
                projected_bytes=projected,
                capacity_bytes=self._settings.capacity_bytes,
            )
            raise StorageCapacityError(
                f"Failed to save {label}. Storage might be full."
            )
        try:
            self._store.write(key, document)
        except OSError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to save {label}: {e}")

    def get_bills(self) -> list[Bill]:
        key = self._settings.bills_key
        return decode_bills(self._store.read(key), key)

    def save_bills(self, bills: list[Bill]) -> None:
        self._write(
            self._settings.bills_key,
            self._settings.payments_key,
            encode_bills(bills),
            "bills",
        )

    def get_payments(self) -> list[PaymentRecord]:
        key = self._settings.payments_key
        return decode_payments(self._store.read(key), key)

    def save_payments(self, payments: list[PaymentRecord]) -> None:
        self._write(
            self._settings.payments_key,
            self._settings.bills_key,
            encode_payments(payments),
            "payments",
        )

    def clear(self) -> None:
        # Payments first, so a partial clear never leaves orphaned payments
        try:
            self._store.remove(self._settings.payments_key)
            self._store.remove(self._settings.bills_key)
        except OSError as e:
            raise StorageError(f"Failed to clear data: {e}")

    def get_storage_info(self) -> StorageInfo:
        used = (
            self._store.size(self._settings.bills_key)
            + self._store.size(self._settings.payments_key)
        )
        total = self._settings.capacity_bytes
        return StorageInfo(used=used, total=total, available=total - used)


class JsonFileAuditStorage(AuditStorageInterface):
    """
    Append-only JSON-lines audit log.

    One event per line; lines that fail to parse are skipped on read.
    """

    def __init__(
        self,
        settings: Optional[StorageSettings] = None,
        store: Optional[JsonFileStore] = None,
    ):
        self._settings = settings or get_settings().storage
        self._store = store or JsonFileStore(self._settings.data_dir)

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._store.append_line(self._settings.audit_key, event.to_json_line())
            return True
        except OSError as e:
            # Audit logging must not break the main flow
            logger.warning(
                "audit_write_failed",
                event_id=event.event_id,
                error=str(e),
            )
            return False

    def _read_events(self) -> list[AuditEvent]:
        path = self._store.path_for(self._settings.audit_key, ".jsonl")
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in lines:
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValidationError:
                continue
        return events

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._read_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._read_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
