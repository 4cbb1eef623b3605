"""Projections package: schedule-based views that do not affect balances."""

from bizledger.projections.due_dates import (
    next_due_date,
    occurs_in_period,
    upcoming_fixed_costs,
)

__all__ = ["next_due_date", "occurs_in_period", "upcoming_fixed_costs"]
