"""Reporting package: period statements, lifetime stats and allocations."""

from bizledger.reports.allocator import (
    compute_deductions,
    partner_allocations,
    percent_of,
)
from bizledger.reports.period import (
    cost_breakdown,
    financial_stats,
    monthly_breakdown,
    period_income,
    project_summaries,
    report_stats,
)

__all__ = [
    "compute_deductions",
    "cost_breakdown",
    "financial_stats",
    "monthly_breakdown",
    "partner_allocations",
    "percent_of",
    "period_income",
    "project_summaries",
    "report_stats",
]
