"""
Transaction Applier

Applies a transaction to a working LedgerSnapshot and reverses it again.

DESIGN DECISION: The balance effect of each transaction type lives in ONE
table (`EFFECTS`). Applying adds the effect, reversing subtracts it, and
replay folds it over the log. There is no second copy of the arithmetic
that could drift.

Effects per type (sign of each aggregate):

    type             balance  income  expenses  investment_outflow
    project_income      +        +
    income              +        +
    fixed_cost          -                 +
    variable_cost       -                 +
    expense             -                 +
    investment          -                            +
    withdrawal          -

The applier only mutates the snapshot it is handed. Atomicity comes from
the store, which hands out a working copy.
"""

from typing import Optional
from uuid import UUID

from bizledger.audit.logger import get_logger
from bizledger.ledger.errors import InvalidInputError
from bizledger.models.ledger import (
    Aggregates,
    ApplyResult,
    FixedCost,
    Investment,
    LedgerSnapshot,
    PaymentEntry,
    Transaction,
    TransactionType,
    VariableCost,
    Withdrawal,
)


logger = get_logger(__name__)


# Sign of the effect on (balance, income, expenses, investment_outflow)
EFFECTS: dict[TransactionType, tuple[int, int, int, int]] = {
    TransactionType.PROJECT_INCOME: (1, 1, 0, 0),
    TransactionType.INCOME: (1, 1, 0, 0),
    TransactionType.FIXED_COST: (-1, 0, 1, 0),
    TransactionType.VARIABLE_COST: (-1, 0, 1, 0),
    TransactionType.EXPENSE: (-1, 0, 1, 0),
    TransactionType.INVESTMENT: (-1, 0, 0, 1),
    TransactionType.WITHDRAWAL: (-1, 0, 0, 0),
}


def shift_totals(totals: Aggregates, transaction: Transaction, direction: int = 1) -> None:
    """Add (direction=1) or remove (direction=-1) a transaction's effect."""
    balance, income, expenses, outflow = EFFECTS[transaction.type]
    amount = transaction.amount * direction
    totals.balance += amount * balance
    totals.income += amount * income
    totals.expenses += amount * expenses
    totals.investment_outflow += amount * outflow


class TransactionApplier:
    """
    Applies and reverses transactions on a working snapshot.

    Withdrawals are not accepted by `apply`; they belong to a partner and
    go through `apply_withdrawal`.
    """

    def apply(self, state: LedgerSnapshot, transaction: Transaction) -> ApplyResult:
        if transaction.type == TransactionType.WITHDRAWAL:
            raise InvalidInputError(
                "Withdrawals must be recorded against a partner, not applied directly"
            )
        self._prepend(state, transaction)

        result = ApplyResult(transaction=transaction)
        kind = transaction.type

        if kind == TransactionType.PROJECT_INCOME:
            result.project_found = self._add_project_payment(state, transaction)
        elif kind == TransactionType.FIXED_COST:
            cost = FixedCost.from_transaction(transaction)
            state.fixed_costs.append(cost)
            result.catalog_updated = self._grow_services(state, cost.category)
        elif kind == TransactionType.VARIABLE_COST:
            state.variable_costs.append(VariableCost.from_transaction(transaction))
        elif kind == TransactionType.INVESTMENT:
            state.investments.append(Investment.from_transaction(transaction))

        shift_totals(state.totals, transaction)
        return result

    def apply_withdrawal(self, state: LedgerSnapshot, transaction: Transaction) -> bool:
        """
        Record a partner withdrawal. Returns False when the partner is gone.

        The balance is decremented either way; the money left the business.
        """
        if transaction.type != TransactionType.WITHDRAWAL:
            raise InvalidInputError(f"Expected a withdrawal, got {transaction.type.value}")
        self._prepend(state, transaction)

        partner = (
            state.find_partner(transaction.partner_id)
            if transaction.partner_id is not None else None
        )
        if partner is not None:
            partner.withdrawals.append(Withdrawal(
                amount=transaction.amount,
                date=transaction.date,
                transaction_id=transaction.id,
            ))
        else:
            logger.warning(
                "withdrawal_partner_missing",
                transaction_id=str(transaction.id),
                partner_id=transaction.partner_id,
            )

        shift_totals(state.totals, transaction)
        return partner is not None

    def reverse(self, state: LedgerSnapshot, transaction_id: UUID) -> Optional[Transaction]:
        """
        Remove a transaction from the log and undo its effect.

        Returns the removed transaction, or None when the id is unknown
        (a no-op). Reversing project income never deletes the project.
        """
        transaction = state.find_transaction(transaction_id)
        if transaction is None:
            logger.warning("reverse_unknown_transaction", transaction_id=str(transaction_id))
            return None

        state.transactions = [t for t in state.transactions if t.id != transaction_id]
        self._purge_records(state, transaction)
        shift_totals(state.totals, transaction, direction=-1)
        return transaction

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _prepend(state: LedgerSnapshot, transaction: Transaction) -> None:
        if state.find_transaction(transaction.id) is not None:
            raise InvalidInputError(f"Transaction {transaction.id} is already recorded")
        state.transactions.insert(0, transaction)

    @staticmethod
    def _add_project_payment(state: LedgerSnapshot, transaction: Transaction) -> bool:
        project = (
            state.find_project(transaction.project_id)
            if transaction.project_id is not None else None
        )
        if project is None:
            # Income is still recognized; only the sub-ledger entry is lost
            logger.warning(
                "project_income_project_missing",
                transaction_id=str(transaction.id),
                project_id=transaction.project_id,
            )
            return False

        project.history.append(PaymentEntry(
            date=transaction.date,
            amount=transaction.amount,
            note=transaction.description,
            transaction_id=transaction.id,
        ))
        return True

    @staticmethod
    def _grow_services(state: LedgerSnapshot, category: Optional[str]) -> bool:
        if not category or category in state.catalogs.services:
            return False
        state.catalogs.services.append(category)
        logger.info("services_catalog_grown", category=category)
        return True

    @staticmethod
    def _purge_records(state: LedgerSnapshot, transaction: Transaction) -> None:
        kind = transaction.type
        tid = transaction.id

        if kind == TransactionType.PROJECT_INCOME:
            for project in state.projects:
                project.history = [e for e in project.history if e.transaction_id != tid]
        elif kind == TransactionType.WITHDRAWAL:
            for partner in state.partners:
                partner.withdrawals = [w for w in partner.withdrawals if w.transaction_id != tid]
        elif kind == TransactionType.FIXED_COST:
            state.fixed_costs = [c for c in state.fixed_costs if c.id != tid]
        elif kind == TransactionType.VARIABLE_COST:
            state.variable_costs = [c for c in state.variable_costs if c.id != tid]
        elif kind == TransactionType.INVESTMENT:
            state.investments = [i for i in state.investments if i.id != tid]

