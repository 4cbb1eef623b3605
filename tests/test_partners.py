"""Tests for partners, withdrawals and deduction settings."""

import pytest
from datetime import date
from decimal import Decimal

from bizledger.ledger import InvalidAmountError, InvalidInputError
from bizledger.models.audit import AuditEventType
from bizledger.models.ledger import TransactionType


class TestDefaults:
    """Tests for the seeded partner setup."""

    def test_two_partners_split_evenly(self, ledger):
        """Test the default partners and percentages."""
        partners = ledger.current.partners
        assert [p.name for p in partners] == ["Partner 1", "Partner 2"]
        assert [p.percentage for p in partners] == [50.0, 50.0]

    def test_default_deduction_percentages(self, ledger):
        """Test the default financial configuration."""
        config = ledger.current.config
        assert config.emergency_fund_percentage == 15.0
        assert config.reinvestment_percentage == 0.0


class TestWithdrawals:
    """Tests for add_withdrawal."""

    def test_withdrawal_reduces_balance(self, ledger):
        """Test the balance effect and the partner entry."""
        t = ledger.add_withdrawal(1, "200", date(2026, 3, 1))

        assert t.type == TransactionType.WITHDRAWAL
        assert t.description == "Withdrawal: Partner 1"
        assert ledger.current.totals.balance == Decimal("-200")
        withdrawal = ledger.current.find_partner(1).withdrawals[0]
        assert withdrawal.amount == Decimal("200")
        assert withdrawal.transaction_id == t.id

    def test_withdrawal_accepts_iso_date(self, ledger):
        """Test that ISO strings are accepted for the date."""
        t = ledger.add_withdrawal(2, 10, "2026-04-30", description="Fuel")
        assert t.date == date(2026, 4, 30)
        assert t.description == "Fuel"

    def test_withdrawal_for_missing_partner_degrades(self, ledger, audit_storage):
        """Test that the balance still drops when the partner is unknown."""
        ledger.add_withdrawal(99, 50, date(2026, 3, 1))

        assert ledger.current.totals.balance == Decimal("-50")
        types = [e.event_type for e in audit_storage.events]
        assert AuditEventType.PARTNER_NOT_FOUND in types
        assert AuditEventType.WITHDRAWAL_RECORDED in types

    def test_withdrawal_can_be_reversed(self, ledger):
        """Test that a withdrawal is reversible like any transaction."""
        t = ledger.add_withdrawal(1, 80, date(2026, 3, 1))
        assert ledger.reverse(t.id) is True

        assert ledger.current.totals.balance == Decimal("0")
        assert ledger.current.find_partner(1).withdrawals == []

    @pytest.mark.parametrize("amount", [-1, "abc", None, float("nan")])
    def test_withdrawal_rejects_bad_amounts(self, ledger, amount):
        """Test amount validation on the withdrawal path."""
        with pytest.raises(InvalidAmountError):
            ledger.add_withdrawal(1, amount, date(2026, 3, 1))
        assert ledger.current.transactions == []

    def test_withdrawal_rejects_bad_date(self, ledger):
        """Test date validation on the withdrawal path."""
        with pytest.raises(InvalidInputError):
            ledger.add_withdrawal(1, 10, "31/12/2026")


class TestPartnerCollection:
    """Tests for partner management."""

    def test_set_percentage_is_not_normalized(self, ledger):
        """Test that other partners keep their share."""
        assert ledger.set_partner_percentage(1, 70) is True

        assert [p.percentage for p in ledger.current.partners] == [70.0, 50.0]

    @pytest.mark.parametrize("value", [-0.1, 100.5, "x"])
    def test_set_percentage_range(self, ledger, value):
        """Test that percentages must be within 0-100."""
        with pytest.raises(InvalidInputError):
            ledger.set_partner_percentage(1, value)

    def test_set_percentage_missing_partner(self, ledger):
        """Test that an unknown partner is a no-op."""
        assert ledger.set_partner_percentage(5, 10) is False

    def test_add_partner(self, ledger):
        """Test that new partners get the next id and zero share by default."""
        partner = ledger.add_partner("Partner 3")

        assert partner.id == 3
        assert partner.percentage == 0.0
        assert ledger.current.partners[-1] == partner

    def test_returned_partner_is_detached(self, ledger):
        """Test that editing a returned partner does not reach the ledger."""
        partner = ledger.add_partner("Carol", 10)

        partner.percentage = 99.0

        assert ledger.current.find_partner(partner.id).percentage == 10.0

    def test_remove_partner_keeps_transactions(self, ledger):
        """Test that removing a partner leaves the log and balance alone."""
        t = ledger.add_withdrawal(2, 30, date(2026, 1, 1))

        assert ledger.remove_partner(2) is True
        assert ledger.current.find_partner(2) is None
        assert ledger.current.find_transaction(t.id) is not None
        assert ledger.current.totals.balance == Decimal("-30")
        ledger.verify_integrity()

    def test_remove_missing_partner(self, ledger):
        """Test removing an unknown partner."""
        assert ledger.remove_partner(9) is False


class TestFinancialConfig:
    """Tests for update_financial_config."""

    def test_update_both_percentages(self, ledger, audit_storage):
        """Test changing the deduction percentages."""
        config = ledger.update_financial_config(
            emergency_fund_percentage=10,
            reinvestment_percentage=5,
        )
        assert config.emergency_fund_percentage == 10.0
        assert config.reinvestment_percentage == 5.0
        event = audit_storage.get_recent_events(1)[0]
        assert event.event_type == AuditEventType.FINANCIAL_CONFIG_UPDATED

    def test_partial_update(self, ledger):
        """Test that omitted percentages are left unchanged."""
        config = ledger.update_financial_config(reinvestment_percentage=20)
        assert config.emergency_fund_percentage == 15.0
        assert config.reinvestment_percentage == 20.0

    def test_returned_config_is_detached(self, ledger):
        """Test that the returned config is this call's result and a private copy."""
        config = ledger.update_financial_config(emergency_fund_percentage=12)
        config.emergency_fund_percentage = 80.0

        assert ledger.current.config.emergency_fund_percentage == 12.0

    def test_unchanged_config_is_returned(self, ledger):
        """Test that a no-op update still returns the current config."""
        version = ledger.version
        config = ledger.update_financial_config(emergency_fund_percentage=15)

        assert config.emergency_fund_percentage == 15.0
        assert ledger.version == version

    def test_update_rejects_out_of_range(self, ledger):
        """Test range validation."""
        with pytest.raises(InvalidInputError):
            ledger.update_financial_config(emergency_fund_percentage=101)
        assert ledger.current.config.emergency_fund_percentage == 15.0
