"""
JSON File Storage Implementation

Persists the ledger snapshot as a single pretty-printed JSON document and
the audit trail as JSON lines, both under the configured data directory.

DESIGN DECISION: Snapshot writes go to a temporary file in the same
directory which then replaces the real file. A crash mid-write leaves the
previous snapshot intact instead of a truncated one.
"""

import os
import tempfile
import threading
from pathlib import Path
from typing import Optional
from uuid import UUID

from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bizledger.config import get_settings
from bizledger.models.audit import AuditEvent
from bizledger.models.ledger import LedgerSnapshot
from bizledger.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    SnapshotStorageInterface,
    StorageError,
)


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConnectionError(f"Cannot create data directory {path}: {e}") from e


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """
    Snapshot storage backed by one JSON file.

    Writes are retried with exponential backoff; `backoff=0` disables the
    waits (useful in tests).
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        retry_attempts: Optional[int] = None,
        backoff: float = 1.0,
    ):
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.snapshot_path
        attempts = retry_attempts or settings.retry_attempts

        self._write = retry(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=backoff, min=2 * backoff, max=10 * backoff),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )(self._write_atomic)

    @property
    def path(self) -> Path:
        return self._path

    def _write_atomic(self, payload: str) -> None:
        directory = self._path.parent
        _ensure_dir(directory)
        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load_snapshot(self) -> Optional[LedgerSnapshot]:
        """Load the snapshot file, or None when it was never written."""
        if not self._path.exists():
            return None
        try:
            raw = self._path.read_text(encoding="utf-8")
            return LedgerSnapshot.model_validate_json(raw)
        except (OSError, ValidationError) as e:
            raise StorageError(f"Failed to load snapshot from {self._path}: {e}") from e

    def save_snapshot(self, snapshot: LedgerSnapshot) -> bool:
        """Write the snapshot atomically."""
        payload = snapshot.model_dump_json(indent=2)
        try:
            self._write(payload)
        except OSError as e:
            raise StorageError(f"Failed to save snapshot to {self._path}: {e}") from e
        return True

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove snapshot {self._path}: {e}") from e


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit storage: one JSON document per line.

    Queries read the whole file; audit volume for one business is small.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else get_settings().storage.audit_path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append_event(self, event: AuditEvent) -> bool:
        line = event.model_dump_json()
        with self._lock:
            _ensure_dir(self._path.parent)
            try:
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as e:
                raise StorageError(f"Failed to append audit event: {e}") from e
        return True

    def _read_all(self) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        try:
            with self._lock, self._path.open(encoding="utf-8") as handle:
                lines = [line for line in handle if line.strip()]
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}") from e
        return [AuditEvent.model_validate_json(line) for line in lines]

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._read_all() if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._read_all()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._read_all()
        events.reverse()
        return events[:limit]
