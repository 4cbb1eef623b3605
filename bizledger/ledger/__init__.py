"""
Ledger core package.

The store, the transaction applier and the project and partner
sub-ledgers. Nothing here validates caller input; that happens in
bizledger.validation before a mutation starts.
"""

from bizledger.ledger.applier import EFFECTS, TransactionApplier, shift_totals
from bizledger.ledger.defaults import default_snapshot
from bizledger.ledger.errors import (
    InvalidAmountError,
    InvalidInputError,
    InvariantViolationError,
    LedgerError,
)
from bizledger.ledger.partners import PartnerLedger
from bizledger.ledger.projects import (
    ProjectDeletion,
    ProjectLedger,
    custom_id_prefix,
    generate_custom_id,
)
from bizledger.ledger.replay import find_mismatches, replay_totals, verify_invariants
from bizledger.ledger.store import LedgerStore, NoChange

__all__ = [
    # Core
    "EFFECTS",
    "LedgerStore",
    "NoChange",
    "PartnerLedger",
    "ProjectDeletion",
    "ProjectLedger",
    "TransactionApplier",
    "custom_id_prefix",
    "default_snapshot",
    "generate_custom_id",
    "shift_totals",
    # Replay
    "find_mismatches",
    "replay_totals",
    "verify_invariants",
    # Exceptions
    "InvalidAmountError",
    "InvalidInputError",
    "InvariantViolationError",
    "LedgerError",
]
