"""Tests for period reports, lifetime stats and partner allocations."""

import pytest
from datetime import date
from decimal import Decimal

from bizledger.ledger import InvalidInputError
from bizledger.models.ledger import FinancialConfig
from bizledger.reports import compute_deductions


@pytest.fixture
def no_deductions(ledger):
    """A ledger with both automatic deductions switched off."""
    ledger.update_financial_config(emergency_fund_percentage=0, reinvestment_percentage=0)
    return ledger


def income(ledger, amount, on):
    ledger.apply({"type": "income", "amount": amount, "date": on})


class TestPeriodReports:
    """Tests for report_stats over different periods."""

    def test_month_and_year_partition(self, ledger):
        """Test that January is a subset of the year."""
        income(ledger, 1000, date(2026, 1, 20))
        income(ledger, 500, date(2026, 3, 2))
        income(ledger, 700, date(2025, 1, 20))

        assert ledger.report_stats(0, 2026).income == Decimal("1000")
        assert ledger.report_stats(None, 2026).income == Decimal("1500")
        assert ledger.report_stats(0, None).income == Decimal("1700")
        assert ledger.report_stats().income == Decimal("2200")

    def test_project_payments_count_as_income(self, ledger):
        """Test that income reads the project payment histories."""
        project = ledger.create_project("Shop", "Web")
        ledger.apply({
            "type": "project_income", "amount": 400,
            "date": date(2026, 2, 1), "project_id": project.id,
        })

        assert ledger.report_stats(1, 2026).income == Decimal("400")

    def test_generic_income_tagged_with_project_is_excluded(self, ledger):
        """Test that only untagged generic income is counted."""
        income(ledger, 100, date(2026, 1, 1))
        ledger.apply({"type": "income", "amount": 50, "date": date(2026, 1, 1), "project_id": 77})

        assert ledger.report_stats(0, 2026).income == Decimal("100")

    def test_full_statement(self, ledger):
        """Test costs, deductions and net profit together."""
        income(ledger, 2000, date(2026, 4, 1))
        ledger.apply({"type": "fixed_cost", "amount": 300, "date": date(2026, 4, 2), "category": "Hosting"})
        ledger.apply({"type": "variable_cost", "amount": 200, "date": date(2026, 4, 3)})
        ledger.apply({"type": "investment", "amount": 100, "date": date(2026, 4, 4)})
        ledger.update_financial_config(reinvestment_percentage=10)

        stats = ledger.report_stats(3, 2026)

        assert stats.expenses == Decimal("500")
        assert stats.operating_result == Decimal("1500")
        assert stats.emergency_fund_deduction == Decimal("225")
        assert stats.reinvestment_deduction == Decimal("150")
        assert stats.investments == Decimal("100")
        assert stats.net_profit == Decimal("1025")

    def test_generic_expense_not_in_cost_figures(self, ledger):
        """Test that an expense moves the balance but not the statement."""
        ledger.apply({"type": "expense", "amount": 60, "date": date(2026, 1, 1)})

        assert ledger.report_stats().expenses == Decimal("0")
        assert ledger.current.totals.balance == Decimal("-60")

    def test_period_withdrawals(self, ledger):
        """Test that withdrawals are scoped to the period."""
        ledger.add_withdrawal(1, 40, date(2026, 1, 5))
        ledger.add_withdrawal(2, 60, date(2026, 2, 5))

        assert ledger.report_stats(0, 2026).withdrawals == Decimal("40")
        assert ledger.report_stats(None, 2026).withdrawals == Decimal("100")

    @pytest.mark.parametrize("month, year", [(12, 2026), (-1, 2026), ("1", 2026), (0, "2026"), (True, None)])
    def test_bad_period_rejected(self, ledger, month, year):
        """Test period validation."""
        with pytest.raises(InvalidInputError):
            ledger.report_stats(month, year)


class TestDeductions:
    """Tests for compute_deductions."""

    def test_positive_result(self):
        """Test percentages applied to a profit."""
        config = FinancialConfig(emergency_fund_percentage=15, reinvestment_percentage=5)
        deductions = compute_deductions(Decimal("1000"), config)

        assert deductions.emergency_fund == Decimal("150")
        assert deductions.reinvestment == Decimal("50")

    def test_loss_yields_zero(self):
        """Test that a loss is never deducted from."""
        deductions = compute_deductions(Decimal("-500"), FinancialConfig())

        assert deductions.base == Decimal("0")
        assert deductions.emergency_fund == Decimal("0")
        assert deductions.reinvestment == Decimal("0")

    def test_loss_statement(self, ledger):
        """Test that net profit on a loss is the loss minus investments."""
        ledger.apply({"type": "variable_cost", "amount": 300, "date": date(2026, 1, 1)})
        ledger.apply({"type": "investment", "amount": 50, "date": date(2026, 1, 1)})

        stats = ledger.report_stats(0, 2026)
        assert stats.emergency_fund_deduction == Decimal("0")
        assert stats.net_profit == Decimal("-350")


class TestLifetimeAndBreakdowns:
    """Tests for financial_stats, monthly_breakdown and cost_breakdown."""

    def test_financial_stats(self, ledger):
        """Test all-time figures and the running accumulators."""
        income(ledger, 1000, date(2025, 6, 1))
        ledger.apply({"type": "fixed_cost", "amount": 100, "date": date(2026, 1, 1)})
        ledger.apply({"type": "investment", "amount": 250, "date": date(2026, 1, 1)})
        ledger.add_withdrawal(1, 30, date(2026, 1, 1))

        stats = ledger.financial_stats()

        assert stats.total_income == Decimal("1000")
        assert stats.total_expenses == Decimal("100")
        assert stats.operating_result == Decimal("900")
        assert stats.emergency_fund_deduction == Decimal("135")
        assert stats.net_profit == Decimal("515")
        assert stats.balance == Decimal("620")
        assert stats.investment_outflow == Decimal("250")
        assert stats.emergency_fund_total == Decimal("385")

    def test_monthly_breakdown_sums_to_year(self, ledger):
        """Test that the twelve months add up to the yearly income."""
        income(ledger, 100, date(2026, 1, 1))
        income(ledger, 200, date(2026, 6, 30))
        income(ledger, 300, date(2026, 12, 31))
        income(ledger, 999, date(2027, 1, 1))

        months = ledger.monthly_breakdown(2026)

        assert [m.month for m in months] == list(range(12))
        assert months[5].stats.income == Decimal("200")
        total = sum((m.stats.income for m in months), Decimal("0"))
        assert total == ledger.report_stats(None, 2026).income

    def test_cost_breakdown_by_category(self, ledger):
        """Test per-category totals and the uncategorized bucket."""
        ledger.apply({"type": "fixed_cost", "amount": 10, "date": date(2026, 1, 1), "category": "Hosting"})
        ledger.apply({"type": "fixed_cost", "amount": 15, "date": date(2026, 1, 9), "category": "Hosting"})
        ledger.apply({"type": "variable_cost", "amount": 7, "date": date(2026, 1, 2)})
        ledger.apply({"type": "variable_cost", "amount": 99, "date": date(2026, 2, 2), "category": "Plugin"})

        breakdown = ledger.cost_breakdown(0, 2026)

        assert breakdown.fixed_by_category == {"Hosting": Decimal("25")}
        assert breakdown.variable_by_category == {"Uncategorized": Decimal("7")}
        assert breakdown.total == Decimal("32")


class TestPartnerAllocations:
    """Tests for per-partner profit shares."""

    def test_even_split(self, no_deductions):
        """Test that two 50% partners each get half."""
        income(no_deductions, 1000, date(2026, 1, 1))

        report = no_deductions.partner_allocations(0, 2026)

        assert report.net_profit == Decimal("1000")
        assert [a.share for a in report.allocations] == [Decimal("500"), Decimal("500")]
        assert report.percentages_balanced is True
        assert report.percentage_total == 100.0

    def test_withdrawal_reduces_available(self, no_deductions):
        """Test available = share - withdrawals in the period."""
        income(no_deductions, 1000, date(2026, 1, 1))
        no_deductions.add_withdrawal(1, 200, date(2026, 1, 10))
        no_deductions.add_withdrawal(1, 999, date(2026, 2, 10))

        first = no_deductions.partner_allocations(0, 2026).allocations[0]

        assert first.withdrawn == Decimal("200")
        assert first.available == Decimal("300")

    def test_overdraw_goes_negative(self, no_deductions):
        """Test that available is not clamped at zero."""
        income(no_deductions, 1000, date(2026, 1, 1))
        no_deductions.add_withdrawal(2, 800, date(2026, 1, 10))

        second = no_deductions.partner_allocations(0, 2026).allocations[1]

        assert second.available == Decimal("-300")

    def test_unbalanced_percentages_are_reported(self, no_deductions):
        """Test that a total other than 100 is flagged, not corrected."""
        no_deductions.set_partner_percentage(1, 70)
        income(no_deductions, 1000, date(2026, 1, 1))

        report = no_deductions.partner_allocations(0, 2026)

        assert report.percentage_total == 120.0
        assert report.percentages_balanced is False
        assert report.total_share == Decimal("1200")

    def test_fractional_split_is_balanced(self, ledger):
        """Test that float noise in a 33.33/33.33/33.34 split still counts as 100."""
        ledger.add_partner("Partner 3", 0)
        ledger.set_partner_percentage(1, 33.33)
        ledger.set_partner_percentage(2, 33.33)
        ledger.set_partner_percentage(3, 33.34)

        report = ledger.partner_allocations()

        assert report.percentage_total == 100.0
        assert report.percentages_balanced is True
