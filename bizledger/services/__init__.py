"""Services package."""

from bizledger.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    InMemoryAuditStorage,
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    JsonLinesAuditStorage,
    NotFoundError,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "InMemoryAuditStorage",
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "JsonLinesAuditStorage",
    "NotFoundError",
    "SnapshotStorageInterface",
    "StorageError",
]
