"""
Storage Services Package

Provides abstract interfaces and concrete implementations for persisting
ledger snapshots and the audit trail. JSON files are the default backend,
but the ledger only sees the interfaces.
"""

from bizledger.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    NotFoundError,
    SnapshotStorageInterface,
    StorageError,
)
from bizledger.services.storage.json_file import (
    JsonFileSnapshotStorage,
    JsonLinesAuditStorage,
)
from bizledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SnapshotStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # JSON file implementation
    "JsonFileSnapshotStorage",
    "JsonLinesAuditStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemorySnapshotStorage",
]
