"""
Tests for bizledger models

Test strategy:
1. Unit tests for the pydantic models (construction-time validation)
2. Ledger-level tests run against in-memory storage
3. No files outside pytest's tmp_path
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from bizledger.models.ledger import (
    Catalogs,
    FixedCost,
    Frequency,
    LedgerSnapshot,
    PaymentEntry,
    Project,
    Transaction,
    TransactionType,
)
from bizledger.models.reports import (
    CostBreakdown,
    PeriodFilter,
    ReportStats,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test a basic income transaction."""
        t = Transaction(
            type=TransactionType.INCOME,
            amount=Decimal("250.50"),
            date=date(2026, 2, 1),
            description="  Consulting  ",
        )
        assert t.amount == Decimal("250.50")
        assert t.description == "Consulting"
        assert t.effective_date == date(2026, 2, 1)

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(type=TransactionType.EXPENSE, amount=Decimal("-1"), date=date(2026, 1, 1))

    def test_transaction_requires_date(self):
        """Test that a transaction without a date is rejected."""
        with pytest.raises(ValueError, match="date is required"):
            Transaction(type=TransactionType.INCOME, amount=Decimal("10"))

    def test_fixed_cost_accepts_payment_date(self):
        """Test that fixed costs may carry payment_date instead of date."""
        t = Transaction(
            type=TransactionType.FIXED_COST,
            amount=Decimal("30"),
            payment_date=date(2026, 3, 5),
        )
        assert t.date is None
        assert t.effective_date == date(2026, 3, 5)

    def test_payment_date_only_counts_for_fixed_costs(self):
        """Test that payment_date does not stand in for date on other types."""
        with pytest.raises(ValueError):
            Transaction(
                type=TransactionType.VARIABLE_COST,
                amount=Decimal("30"),
                payment_date=date(2026, 3, 5),
            )

    def test_end_date_before_start_date_rejected(self):
        """Test recurrence window validation."""
        with pytest.raises(ValueError, match="End date"):
            Transaction(
                type=TransactionType.FIXED_COST,
                amount=Decimal("30"),
                date=date(2026, 3, 5),
                start_date=date(2026, 3, 1),
                end_date=date(2026, 2, 1),
            )

    def test_transaction_is_frozen(self):
        """Test that a recorded transaction cannot be edited in place."""
        t = Transaction(type=TransactionType.INCOME, amount=Decimal("1"), date=date(2026, 1, 1))
        with pytest.raises(ValidationError):
            t.amount = Decimal("2")

    def test_payment_day_range(self):
        """Test that payment_day must be a day of the month."""
        with pytest.raises(ValueError):
            Transaction(
                type=TransactionType.FIXED_COST,
                amount=Decimal("1"),
                date=date(2026, 1, 1),
                payment_day=32,
            )


class TestRecordModels:
    """Tests for projects, costs and the snapshot."""

    def test_project_paid_total(self):
        """Test that paid_total sums the payment history."""
        project = Project(
            id=1,
            custom_id="NCW0001",
            name="Shop site",
            type="Web",
            agreed_amount=Decimal("5000"),
            history=[
                PaymentEntry(date=date(2026, 1, 1), amount=Decimal("2000"), transaction_id=uuid4()),
                PaymentEntry(date=date(2026, 2, 1), amount=Decimal("1500"), transaction_id=uuid4()),
            ],
        )
        assert project.paid_total == Decimal("3500")
        assert project.status == "Lead"

    def test_fixed_cost_from_transaction_normalizes_date(self):
        """Test that payment_date is copied onto date for fixed cost records."""
        t = Transaction(
            type=TransactionType.FIXED_COST,
            amount=Decimal("12"),
            payment_date=date(2026, 4, 10),
            category="Hosting",
        )
        cost = FixedCost.from_transaction(t)
        assert cost.id == t.id
        assert cost.date == date(2026, 4, 10)
        assert cost.frequency == Frequency.MONTHLY

    def test_frequency_steps(self):
        """Test recurrence step lengths."""
        assert Frequency.MONTHLY.step_months == 1
        assert Frequency.QUARTERLY.step_months == 3
        assert Frequency.ANNUAL.step_months == 12

    def test_catalog_defaults_are_independent(self):
        """Test that each Catalogs instance gets its own lists."""
        a, b = Catalogs(), Catalogs()
        a.services.append("Coworking")
        assert "Coworking" not in b.services
        assert "Web" in a.project_types

    def test_snapshot_json_round_trip(self):
        """Test that a snapshot survives JSON serialization."""
        t = Transaction(type=TransactionType.INCOME, amount=Decimal("99.99"), date=date(2026, 1, 2))
        snapshot = LedgerSnapshot(transactions=[t])
        snapshot.totals.income = Decimal("99.99")

        restored = LedgerSnapshot.model_validate_json(snapshot.model_dump_json())
        assert restored == snapshot
        assert restored.find_transaction(t.id) == t


class TestReportModels:
    """Tests for report models and the period filter."""

    def test_period_filter_month_is_zero_indexed(self):
        """Test that month 0 is January."""
        january = PeriodFilter(month=0, year=2026)
        assert january.matches(date(2026, 1, 31))
        assert not january.matches(date(2026, 2, 1))

    def test_period_filter_partial_axes(self):
        """Test that unset axes match everything."""
        assert PeriodFilter().matches(date(1999, 7, 7))
        assert PeriodFilter(month=2).matches(date(2020, 3, 1))
        assert PeriodFilter(year=2026).matches(date(2026, 12, 31))

    def test_period_filter_never_matches_undated(self):
        """Test that records without a date are excluded."""
        assert not PeriodFilter().matches(None)

    def test_period_filter_rejects_bad_month(self):
        """Test month range validation."""
        with pytest.raises(ValueError):
            PeriodFilter(month=12)

    def test_period_filter_describe(self):
        """Test human-readable period labels."""
        assert PeriodFilter().describe() == "all time"
        assert PeriodFilter(year=2026).describe() == "2026"
        assert PeriodFilter(month=0, year=2026).describe() == "January 2026"

    def test_report_stats_camel_case_export(self):
        """Test that exports use camelCase keys."""
        exported = ReportStats(net_profit=Decimal("10")).model_dump(by_alias=True)
        assert exported["netProfit"] == Decimal("10")
        assert "emergencyFundDeduction" in exported

    def test_cost_breakdown_total(self):
        """Test CostBreakdown.total."""
        breakdown = CostBreakdown(
            fixed_by_category={"Hosting": Decimal("10")},
            variable_by_category={"Plugin": Decimal("5.5")},
        )
        assert breakdown.total == Decimal("15.5")
