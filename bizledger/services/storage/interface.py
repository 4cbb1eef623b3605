"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file for a real database later
2. Use in-memory storage for testing
3. Keep the ledger core decoupled from storage implementation

The ledger persists whole snapshots, not individual records. A snapshot
is small (a small business has thousands of transactions, not millions)
and writing it whole keeps every save consistent.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from bizledger.models.audit import AuditEvent
from bizledger.models.ledger import LedgerSnapshot


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for ledger snapshot storage.

    Any storage implementation (JSON file, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        """
        Load the last saved snapshot.

        Returns:
            The snapshot if one was saved, None otherwise

        Raises:
            StorageError: If a snapshot exists but cannot be read
        """
        pass

    @abstractmethod
    def save_snapshot(self, snapshot: LedgerSnapshot) -> bool:
        """
        Persist a snapshot, replacing the previous one.

        Args:
            snapshot: The committed ledger state

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the saved snapshot, if any."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one project deletion).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'project', 'partner')
            entity_id: The entity's ID as a string

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
