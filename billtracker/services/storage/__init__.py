"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a JSON-file key-value store and an in-memory store,
both behind the same swappable interface.
"""

from billtracker.errors import NotFoundError
from billtracker.services.storage.interface import (
    AuditStorageInterface,
    BillStorageInterface,
    StorageCapacityError,
    StorageError,
    StorageInfo,
)
from billtracker.services.storage.json_file import (
    JsonFileAuditStorage,
    JsonFileBillStorage,
    JsonFileStore,
)
from billtracker.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBillStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BillStorageInterface",
    "StorageInfo",
    # Exceptions
    "NotFoundError",
    "StorageCapacityError",
    "StorageError",
    # JSON file implementation
    "JsonFileAuditStorage",
    "JsonFileBillStorage",
    "JsonFileStore",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBillStorage",
]
