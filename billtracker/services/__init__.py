"""Services package."""

from billtracker.services.storage import (
    AuditStorageInterface,
    BillStorageInterface,
    InMemoryAuditStorage,
    InMemoryBillStorage,
    JsonFileAuditStorage,
    JsonFileBillStorage,
    JsonFileStore,
    NotFoundError,
    StorageCapacityError,
    StorageError,
    StorageInfo,
)

__all__ = [
    "AuditStorageInterface",
    "BillStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryBillStorage",
    "JsonFileAuditStorage",
    "JsonFileBillStorage",
    "JsonFileStore",
    "NotFoundError",
    "StorageCapacityError",
    "StorageError",
    "StorageInfo",
]
