"""
Partner Ledger

Partner collection, profit-share percentages, withdrawals and the
automatic deduction percentages.

DESIGN DECISION: Percentages are stored exactly as entered. They are
not normalized to sum to 100 and withdrawals are not capped at a
partner's available share; the allocator reports both conditions.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from bizledger.ledger.applier import TransactionApplier
from bizledger.models.ledger import (
    LedgerSnapshot,
    Partner,
    Transaction,
    TransactionType,
)


class PartnerLedger:
    """Partner operations on a working snapshot."""

    def __init__(self, applier: TransactionApplier):
        self._applier = applier

    def add_withdrawal(
        self,
        state: LedgerSnapshot,
        partner_id: int,
        amount: Decimal,
        date: dt.date,
        description: Optional[str] = None,
    ) -> tuple[Transaction, bool]:
        """
        Book a withdrawal. Returns the transaction and whether the partner exists.
        """
        partner = state.find_partner(partner_id)
        if description is None:
            name = partner.name if partner is not None else f"#{partner_id}"
            description = f"Withdrawal: {name}"

        transaction = Transaction(
            type=TransactionType.WITHDRAWAL,
            amount=amount,
            date=date,
            partner_id=partner_id,
            description=description,
        )
        found = self._applier.apply_withdrawal(state, transaction)
        return transaction, found

    def set_percentage(
        self,
        state: LedgerSnapshot,
        partner_id: int,
        percentage: float,
    ) -> Optional[float]:
        """Overwrite a partner's share; returns the old value or None if missing."""
        partner = state.find_partner(partner_id)
        if partner is None:
            return None
        old = partner.percentage
        partner.percentage = percentage
        return old

    def add(self, state: LedgerSnapshot, name: str, percentage: float = 0.0) -> Partner:
        partner = Partner(id=state.next_partner_id, name=name, percentage=percentage)
        state.next_partner_id += 1
        state.partners.append(partner)
        return partner

    def remove(self, state: LedgerSnapshot, partner_id: int) -> Optional[Partner]:
        """
        Drop a partner. Their withdrawal transactions stay in the log and
        keep their balance effect; only the per-partner view disappears.
        """
        partner = state.find_partner(partner_id)
        if partner is None:
            return None
        state.partners = [p for p in state.partners if p.id != partner_id]
        return partner

    @staticmethod
    def update_config(
        state: LedgerSnapshot,
        emergency_fund_percentage: Optional[float] = None,
        reinvestment_percentage: Optional[float] = None,
    ) -> dict[str, float]:
        """Apply the given deduction percentages; returns what actually changed."""
        changes = {}
        if (
            emergency_fund_percentage is not None
            and emergency_fund_percentage != state.config.emergency_fund_percentage
        ):
            state.config.emergency_fund_percentage = emergency_fund_percentage
            changes["emergency_fund_percentage"] = emergency_fund_percentage
        if (
            reinvestment_percentage is not None
            and reinvestment_percentage != state.config.reinvestment_percentage
        ):
            state.config.reinvestment_percentage = reinvestment_percentage
            changes["reinvestment_percentage"] = reinvestment_percentage
        return changes
