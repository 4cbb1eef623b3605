"""
Ledger exceptions.

Validation errors are raised at the call boundary, before any state is
touched. Missing referents (unknown transaction, project or partner) are
NOT exceptions: the ledger logs them and signals them through return
values.
"""


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class InvalidInputError(LedgerError, ValueError):
    """Malformed payload, bad period filter, bad percentage or unsupported type."""
    pass


class InvalidAmountError(InvalidInputError):
    """Negative, non-numeric, NaN or infinite amount."""
    pass


class InvariantViolationError(LedgerError):
    """
    Cached aggregates diverge from a replay of the transaction log.

    This indicates a bug in the applier and is never recovered from.
    """

    def __init__(self, message: str, mismatches: dict):
        super().__init__(message)
        self.mismatches = mismatches
