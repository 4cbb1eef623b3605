"""
In-memory storage implementations.

Used by tests and by callers that do not need durability. The snapshot
store keeps the serialized JSON rather than the object, so a load always
goes through the same validation as the file backend.
"""

import threading
from typing import Optional
from uuid import UUID

from bizledger.models.audit import AuditEvent
from bizledger.models.ledger import LedgerSnapshot
from bizledger.services.storage.interface import (
    AuditStorageInterface,
    SnapshotStorageInterface,
)


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Keeps the last saved snapshot as a JSON string."""

    def __init__(self, initial: Optional[LedgerSnapshot] = None):
        self._payload: Optional[str] = None
        self.save_count = 0
        if initial is not None:
            self._payload = initial.model_dump_json()

    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        if self._payload is None:
            return None
        return LedgerSnapshot.model_validate_json(self._payload)

    def save_snapshot(self, snapshot: LedgerSnapshot) -> bool:
        self._payload = snapshot.model_dump_json()
        self.save_count += 1
        return True

    def clear(self) -> None:
        self._payload = None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []
        self._lock = threading.Lock()

    @property
    def events(self) -> list[AuditEvent]:
        with self._lock:
            return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self.events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
