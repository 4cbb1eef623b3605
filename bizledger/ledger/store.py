"""
Ledger Store

Holds the single published LedgerSnapshot and serializes writers.

DESIGN DECISION: Copy-on-write. A mutation works on a deep copy of the
published state and the copy replaces it only when the mutation returns
without raising. Readers grab the published reference without locking;
since a published snapshot is never modified afterwards, a reader can
never observe half of a mutation.

Callers must treat snapshots returned by `current()` as read-only.
Use `snapshot()` for a private, mutable copy.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from bizledger.audit.logger import get_logger
from bizledger.models.ledger import LedgerSnapshot


Listener = Callable[[LedgerSnapshot], None]

logger = get_logger(__name__)


class NoChange(Exception):
    """Raised inside `LedgerStore.transaction` to discard the working copy quietly."""
    pass


class LedgerStore:
    """Single-writer container for the ledger state."""

    def __init__(self, initial: LedgerSnapshot):
        self._lock = threading.RLock()
        self._state = initial.model_copy(deep=True)
        self._listeners: list[Listener] = []
        self._version = 0

    @property
    def version(self) -> int:
        """Number of commits since the store was created."""
        return self._version

    def current(self) -> LedgerSnapshot:
        """The published state. Read-only."""
        return self._state

    def snapshot(self) -> LedgerSnapshot:
        """A deep copy of the published state."""
        return self._state.model_copy(deep=True)

    @contextmanager
    def transaction(self) -> Iterator[LedgerSnapshot]:
        """
        Run a mutation against a working copy.

        The working copy is published when the block exits normally and
        discarded when it raises. Raising NoChange discards it without
        propagating. Listeners are notified after publishing, each with a
        private copy.
        """
        with self._lock:
            working = self._state.model_copy(deep=True)
            try:
                yield working
            except NoChange:
                return
            self._publish(working)

    def replace(self, snapshot: LedgerSnapshot) -> None:
        """Publish a whole new state (restore or reset)."""
        with self._lock:
            self._publish(snapshot.model_copy(deep=True))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns a callable that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: LedgerSnapshot) -> None:
        self._state = state
        self._version += 1
        for listener in list(self._listeners):
            try:
                # Each listener gets its own copy; the published state stays untouched
                listener(state.model_copy(deep=True))
            except Exception:
                # The commit already happened; one bad listener must not hide it
                logger.exception(
                    "ledger_listener_failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    version=self._version,
                )
