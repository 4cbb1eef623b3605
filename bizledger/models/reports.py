"""
Report Models for bizledger

These are the shapes handed to report consumers (dashboards, PDF and
CSV exporters). Field names and numeric semantics are a contract:

- Amounts are plain Decimals, no currency symbol or formatting
- Percentages are 0-100 floats
- `model_dump(by_alias=True)` yields the camelCase names used by the
  exporters (e.g. `netProfit`, `emergencyFundDeduction`)
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bizledger.models.ledger import ZERO, FixedCost


class ExportModel(BaseModel):
    """Base for report models exported with camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# PERIOD FILTER
# =============================================================================

class PeriodFilter(BaseModel):
    """
    Optional (month, year) predicate used to scope aggregation.

    `month` is 0-indexed (0 = January). An absent axis matches
    everything on that axis, so PeriodFilter() matches every dated record
    and PeriodFilter(month=0) matches January of any year.
    """
    model_config = ConfigDict(frozen=True)

    month: Optional[int] = Field(default=None, ge=0, le=11)
    year: Optional[int] = Field(default=None, ge=1, le=9999)

    def matches(self, value: Optional[dt.date]) -> bool:
        # Undated records never belong to a period
        if value is None:
            return False
        if self.year is not None and value.year != self.year:
            return False
        if self.month is not None and value.month - 1 != self.month:
            return False
        return True

    def describe(self) -> str:
        if self.month is None and self.year is None:
            return "all time"
        if self.month is None:
            return str(self.year)
        label = dt.date(2000, self.month + 1, 1).strftime("%B")
        return f"{label} {self.year}" if self.year is not None else f"{label} (any year)"


# =============================================================================
# STATISTICS
# =============================================================================

class Deductions(ExportModel):
    """Automatic deductions computed from an operating result."""

    base: Decimal = ZERO
    emergency_fund: Decimal = ZERO
    reinvestment: Decimal = ZERO


class ReportStats(ExportModel):
    """
    Figures for a period, recomputed from raw records.

    Never read from cached running totals, so the same snapshot and the
    same filter always produce the same numbers.
    """

    income: Decimal = ZERO
    expenses: Decimal = ZERO
    fixed_costs: Decimal = ZERO
    variable_costs: Decimal = ZERO
    investments: Decimal = ZERO
    operating_result: Decimal = ZERO
    net_profit: Decimal = ZERO
    emergency_fund_deduction: Decimal = ZERO
    reinvestment_deduction: Decimal = ZERO
    withdrawals: Decimal = ZERO


class LifetimeStats(ExportModel):
    """
    All-time figures for the "current state" dashboard.

    Uses the cached income total and sums the full cost and investment
    collections. `investment_outflow` is the running investment
    accumulator and is reported next to, not merged with, the
    emergency fund deduction. `emergency_fund_total` is the combined
    dashboard figure: accumulator plus deduction.
    """

    total_income: Decimal = ZERO
    total_fixed_costs: Decimal = ZERO
    total_variable_costs: Decimal = ZERO
    total_investments: Decimal = ZERO
    total_expenses: Decimal = ZERO
    operating_result: Decimal = ZERO
    emergency_fund_deduction: Decimal = ZERO
    reinvestment_deduction: Decimal = ZERO
    net_profit: Decimal = ZERO
    balance: Decimal = ZERO
    investment_outflow: Decimal = ZERO
    emergency_fund_total: Decimal = ZERO


class MonthlyStats(ExportModel):
    """ReportStats for one month of a yearly breakdown."""

    year: int
    month: int = Field(..., ge=0, le=11)
    stats: ReportStats


class CostBreakdown(ExportModel):
    """Costs of a period totalled per category."""

    fixed_by_category: dict[str, Decimal] = Field(default_factory=dict)
    variable_by_category: dict[str, Decimal] = Field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return (
            sum(self.fixed_by_category.values(), ZERO)
            + sum(self.variable_by_category.values(), ZERO)
        )


# =============================================================================
# PARTNERS AND PROJECTS
# =============================================================================

class PartnerAllocation(ExportModel):
    """
    A partner's slice of net profit for a period.

    `available` is share minus withdrawals and can go negative: the
    ledger does not stop a partner from withdrawing more than their share.
    """

    partner_id: int
    name: str
    percentage: float
    share: Decimal
    withdrawn: Decimal
    available: Decimal


class PartnerAllocationReport(ExportModel):
    """Per-partner allocations plus percentage diagnostics."""

    net_profit: Decimal
    allocations: list[PartnerAllocation] = Field(default_factory=list)
    percentage_total: float = 0.0
    percentages_balanced: bool = False

    @property
    def total_share(self) -> Decimal:
        return sum((a.share for a in self.allocations), ZERO)

    @property
    def total_available(self) -> Decimal:
        return sum((a.available for a in self.allocations), ZERO)


class ProjectSummary(ExportModel):
    """Payment progress of a project."""

    id: int
    custom_id: str
    name: str
    status: str
    agreed_amount: Decimal
    paid: Decimal
    pending: Decimal
    payment_count: int = Field(ge=0)


# =============================================================================
# DUE DATES
# =============================================================================

class DueFixedCost(ExportModel):
    """A fixed cost together with its next due date."""

    cost: FixedCost
    due_date: dt.date
