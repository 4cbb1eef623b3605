"""
Fund & Partner Allocator

Turns an operating result into automatic deductions, and a net profit
into per-partner shares.
"""

from decimal import Decimal

from bizledger.audit.logger import get_logger
from bizledger.models.ledger import ZERO, FinancialConfig, LedgerSnapshot
from bizledger.models.reports import (
    Deductions,
    PartnerAllocation,
    PartnerAllocationReport,
    PeriodFilter,
)


logger = get_logger(__name__)

HUNDRED = Decimal("100")


def percent_of(amount: Decimal, percentage: float) -> Decimal:
    """amount × percentage / 100, with the percentage taken at its printed value."""
    return amount * Decimal(str(percentage)) / HUNDRED


def compute_deductions(operating_result: Decimal, config: FinancialConfig) -> Deductions:
    """
    Emergency-fund and reinvestment deductions.

    Only a positive operating result is taxed; a loss yields zero
    deductions, never negative ones.
    """
    base = max(ZERO, operating_result)
    return Deductions(
        base=base,
        emergency_fund=percent_of(base, config.emergency_fund_percentage),
        reinvestment=percent_of(base, config.reinvestment_percentage),
    )


def partner_allocations(
    snapshot: LedgerSnapshot,
    period: PeriodFilter,
    net_profit: Decimal,
) -> PartnerAllocationReport:
    """
    Each partner's share of a period's net profit, minus what they took out
    in that period. `net_profit` comes from report_stats for the same period.

    `available` is not clamped at zero. A percentage total other than
    100 is reported and logged, never corrected.
    """
    allocations = []
    for partner in snapshot.partners:
        share = percent_of(net_profit, partner.percentage)
        withdrawn = sum(
            (w.amount for w in partner.withdrawals if period.matches(w.date)),
            ZERO,
        )
        allocations.append(PartnerAllocation(
            partner_id=partner.id,
            name=partner.name,
            percentage=partner.percentage,
            share=share,
            withdrawn=withdrawn,
            available=share - withdrawn,
        ))

    percentage_total = round(sum(p.percentage for p in snapshot.partners), 6)
    balanced = percentage_total == 100.0
    if snapshot.partners and not balanced:
        logger.warning(
            "partner_percentages_unbalanced",
            percentage_total=percentage_total,
            partners=len(snapshot.partners),
        )

    return PartnerAllocationReport(
        net_profit=net_profit,
        allocations=allocations,
        percentage_total=percentage_total,
        percentages_balanced=balanced,
    )
