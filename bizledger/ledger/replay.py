"""
Replay and integrity checks.

The running totals in a snapshot are a cache over the transaction log.
`replay_totals` recomputes them from scratch; `verify_invariants`
compares the two.
"""

from typing import Iterable

from bizledger.ledger.applier import shift_totals
from bizledger.ledger.errors import InvariantViolationError
from bizledger.models.ledger import Aggregates, LedgerSnapshot, Transaction


def replay_totals(transactions: Iterable[Transaction]) -> Aggregates:
    """Fold a transaction log into aggregates, starting from zero."""
    totals = Aggregates()
    for transaction in transactions:
        shift_totals(totals, transaction)
    return totals


def find_mismatches(snapshot: LedgerSnapshot) -> dict[str, dict[str, str]]:
    replayed = replay_totals(snapshot.transactions)
    mismatches = {}
    for field in Aggregates.model_fields:
        cached = getattr(snapshot.totals, field)
        expected = getattr(replayed, field)
        if cached != expected:
            mismatches[field] = {"cached": str(cached), "replayed": str(expected)}
    return mismatches


def verify_invariants(snapshot: LedgerSnapshot) -> None:
    """Raise InvariantViolationError if the cached totals disagree with the log."""
    mismatches = find_mismatches(snapshot)
    if mismatches:
        raise InvariantViolationError(
            "Cached aggregates diverge from transaction log: "
            + ", ".join(sorted(mismatches)),
            mismatches,
        )
