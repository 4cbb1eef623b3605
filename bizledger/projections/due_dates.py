"""
Due-date projection for recurring fixed costs.

Reads fixed-cost records only and never touches balances. The ledger
books a fixed cost once, on its date; this module answers "when is it
due next" for reminders and monthly cash-flow views.
"""

import calendar
import datetime as dt
from typing import Iterable, Optional

from bizledger.models.ledger import FixedCost
from bizledger.models.reports import DueFixedCost


def _on_day(year: int, month: int, day: int) -> dt.date:
    """The given day of a month, clamped to the month's length (31 -> 28 in Feb)."""
    last = calendar.monthrange(year, month)[1]
    return dt.date(year, month, min(day, last))


def _add_months(value: dt.date, months: int, day: int) -> dt.date:
    index = value.year * 12 + (value.month - 1) + months
    return _on_day(index // 12, index % 12 + 1, day)


def next_due_date(cost: FixedCost, reference: dt.date) -> Optional[dt.date]:
    """
    First due date on or after `reference`.

    The schedule starts at `start_date` (or the reference itself when the
    cost has none) and repeats every 1, 3 or 12 months on `payment_day`.
    Returns None when that date falls after `end_date`.
    """
    start = cost.start_date or reference
    day = cost.payment_day or start.day
    step = cost.frequency.step_months

    due = _on_day(start.year, start.month, day)
    if due < start:
        due = _add_months(due, step, day)

    while due < reference:
        due = _add_months(due, step, day)

    if cost.end_date and due > cost.end_date:
        return None
    return due


def occurs_in_period(cost: FixedCost, year: int, month_index: int) -> bool:
    """Whether a fixed cost falls due in a month (month_index is 0-based)."""
    month = month_index + 1
    period_start = dt.date(year, month, 1)
    period_end = _on_day(year, month, 31)

    # A mid-month start can push the first due date into the next month
    due = next_due_date(cost, period_start)
    return due is not None and period_start <= due <= period_end


def upcoming_fixed_costs(
    costs: Iterable[FixedCost],
    reference: dt.date,
    within_days: int,
) -> list[DueFixedCost]:
    """Fixed costs due between `reference` and `reference + within_days`, soonest first."""
    horizon = reference + dt.timedelta(days=within_days)
    upcoming = []
    for cost in costs:
        due = next_due_date(cost, reference)
        if due is not None and due <= horizon:
            upcoming.append(DueFixedCost(cost=cost, due_date=due))
    upcoming.sort(key=lambda item: item.due_date)
    return upcoming
