"""
Period Aggregator

Derives financial statements from the raw records of a snapshot.

DESIGN DECISION: Period figures are ALWAYS recomputed from the records
(project payment histories, cost and investment collections, partner
withdrawals). The cached running totals are only used by the lifetime
view, which is what the dashboard's "current state" shows.

Income for a period is project payments plus income transactions that
are not tied to a project. Generic `expense` transactions move the
balance but are not part of the cost figures; they have no collection
to be read from.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from bizledger.models.ledger import ZERO, LedgerSnapshot, TransactionType
from bizledger.models.reports import (
    CostBreakdown,
    LifetimeStats,
    MonthlyStats,
    PeriodFilter,
    ProjectSummary,
    ReportStats,
)
from bizledger.reports.allocator import compute_deductions


UNCATEGORIZED = "Uncategorized"


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def period_income(snapshot: LedgerSnapshot, period: PeriodFilter) -> Decimal:
    project_income = _total(
        entry.amount
        for project in snapshot.projects
        for entry in project.history
        if period.matches(entry.date)
    )
    generic_income = _total(
        t.amount
        for t in snapshot.transactions
        if t.type == TransactionType.INCOME
        and t.project_id is None
        and period.matches(t.date)
    )
    return project_income + generic_income


def report_stats(
    snapshot: LedgerSnapshot,
    period: Optional[PeriodFilter] = None,
) -> ReportStats:
    """Figures for a period. PeriodFilter() (the default) spans every dated record."""
    period = period or PeriodFilter()

    income = period_income(snapshot, period)
    fixed = _total(c.amount for c in snapshot.fixed_costs if period.matches(c.effective_date))
    variable = _total(c.amount for c in snapshot.variable_costs if period.matches(c.date))
    investments = _total(i.amount for i in snapshot.investments if period.matches(i.date))

    operating_result = income - (fixed + variable)
    deductions = compute_deductions(operating_result, snapshot.config)
    net_profit = (
        operating_result
        - deductions.emergency_fund
        - deductions.reinvestment
        - investments
    )

    withdrawals = _total(
        w.amount
        for partner in snapshot.partners
        for w in partner.withdrawals
        if period.matches(w.date)
    )

    return ReportStats(
        income=income,
        expenses=fixed + variable,
        fixed_costs=fixed,
        variable_costs=variable,
        investments=investments,
        operating_result=operating_result,
        net_profit=net_profit,
        emergency_fund_deduction=deductions.emergency_fund,
        reinvestment_deduction=deductions.reinvestment,
        withdrawals=withdrawals,
    )


def financial_stats(snapshot: LedgerSnapshot) -> LifetimeStats:
    """All-time figures: cached income against the full cost collections."""
    income = snapshot.totals.income
    fixed = _total(c.amount for c in snapshot.fixed_costs)
    variable = _total(c.amount for c in snapshot.variable_costs)
    investments = _total(i.amount for i in snapshot.investments)

    operating_result = income - (fixed + variable)
    deductions = compute_deductions(operating_result, snapshot.config)

    return LifetimeStats(
        total_income=income,
        total_fixed_costs=fixed,
        total_variable_costs=variable,
        total_investments=investments,
        total_expenses=fixed + variable,
        operating_result=operating_result,
        emergency_fund_deduction=deductions.emergency_fund,
        reinvestment_deduction=deductions.reinvestment,
        net_profit=(
            operating_result
            - deductions.emergency_fund
            - deductions.reinvestment
            - investments
        ),
        balance=snapshot.totals.balance,
        investment_outflow=snapshot.totals.investment_outflow,
        emergency_fund_total=snapshot.totals.investment_outflow + deductions.emergency_fund,
    )


def monthly_breakdown(snapshot: LedgerSnapshot, year: int) -> list[MonthlyStats]:
    """Twelve monthly reports for a year, January first."""
    return [
        MonthlyStats(
            year=year,
            month=month,
            stats=report_stats(snapshot, PeriodFilter(month=month, year=year)),
        )
        for month in range(12)
    ]


def cost_breakdown(
    snapshot: LedgerSnapshot,
    period: Optional[PeriodFilter] = None,
) -> CostBreakdown:
    """Fixed and variable costs of a period, totalled per category."""
    period = period or PeriodFilter()

    fixed: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for cost in snapshot.fixed_costs:
        if period.matches(cost.effective_date):
            fixed[cost.category or UNCATEGORIZED] += cost.amount

    variable: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for cost in snapshot.variable_costs:
        if period.matches(cost.date):
            variable[cost.category or UNCATEGORIZED] += cost.amount

    return CostBreakdown(
        fixed_by_category=dict(fixed),
        variable_by_category=dict(variable),
    )


def project_summaries(snapshot: LedgerSnapshot) -> list[ProjectSummary]:
    """Payment progress of every project, in store order (newest first)."""
    summaries = []
    for project in snapshot.projects:
        paid = project.paid_total
        summaries.append(ProjectSummary(
            id=project.id,
            custom_id=project.custom_id,
            name=project.name,
            status=project.status,
            agreed_amount=project.agreed_amount,
            paid=paid,
            pending=project.agreed_amount - paid,
            payment_count=len(project.history),
        ))
    return summaries
