"""Tests for audit events and the audit logger."""

import pytest
from datetime import date, timezone

from bizledger.audit import AuditLogger, create_correlation_id
from bizledger.ledger import InvalidAmountError
from bizledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from bizledger.services.storage import InMemoryAuditStorage, StorageError


class FailingAuditStorage(InMemoryAuditStorage):
    def append_event(self, event):
        raise StorageError("audit sink down")


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test creating an audit event."""
        event = AuditEvent(
            event_type=AuditEventType.LEDGER_RESET,
            description="Ledger reset",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo == timezone.utc
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to a structured log dict."""
        correlation_id = create_correlation_id()
        event = AuditEventBuilder.project_deleted(3, "NCW0003", "3500", 2)
        event.correlation_id = correlation_id

        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "project_deleted"
        assert log_dict["severity"] == "warning"
        assert log_dict["entity_id"] == "3"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_builder_severities(self):
        """Test that failures carry a raised severity."""
        assert AuditEventBuilder.snapshot_save_failed("x").severity == AuditSeverity.ERROR
        assert AuditEventBuilder.validation_failed("apply", "x").severity == AuditSeverity.WARNING
        assert AuditEventBuilder.invariant_violation({}).severity == AuditSeverity.CRITICAL

    def test_project_not_found_without_id(self):
        """Test that a missing project id leaves entity_id empty."""
        event = AuditEventBuilder.project_not_found(None, "apply")
        assert event.entity_id is None


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_log_persists_event(self):
        """Test that events reach the storage."""
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)

        audit.log_partner_added(3, "Partner 3")

        assert storage.events[0].event_type == AuditEventType.PARTNER_ADDED
        assert audit.storage is storage

    def test_log_without_storage(self):
        """Test that a logger without storage still succeeds."""
        event = AuditEventBuilder.ledger_reset(0)
        assert AuditLogger().log(event) is True

    def test_storage_failure_is_not_raised(self):
        """Test that a broken audit sink returns False instead of raising."""
        audit = AuditLogger(FailingAuditStorage())
        assert audit.log(AuditEventBuilder.ledger_reset(0)) is False


class TestLedgerAuditTrail:
    """Tests for the events emitted by ledger operations."""

    def test_apply_is_audited(self, ledger, audit_storage):
        """Test the applied event for a transaction."""
        result = ledger.apply({"type": "income", "amount": 10, "date": date(2026, 1, 1)})

        events = audit_storage.get_events_by_entity("transaction", str(result.transaction.id))
        assert [e.event_type for e in events] == [AuditEventType.TRANSACTION_APPLIED]
        assert events[0].details["amount"] == "10"

    def test_catalog_growth_is_audited(self, ledger, audit_storage):
        """Test that an auto-grown catalog produces its own event."""
        ledger.apply({"type": "fixed_cost", "amount": 5, "date": date(2026, 1, 1), "category": "Coworking"})

        events = audit_storage.get_events_by_entity("catalog", "services")
        assert events[0].event_type == AuditEventType.CATALOG_UPDATED

    def test_missing_project_is_audited(self, ledger, audit_storage):
        """Test that project income for a missing project leaves a trace."""
        ledger.apply({"type": "project_income", "amount": 5, "date": date(2026, 1, 1), "project_id": 404})

        events = audit_storage.get_events_by_entity("project", "404")
        assert events[0].event_type == AuditEventType.PROJECT_NOT_FOUND

    def test_unknown_reversal_is_audited(self, ledger, audit_storage):
        """Test the not-found event for reversal."""
        assert ledger.reverse(create_correlation_id()) is False
        assert audit_storage.get_recent_events(1)[0].event_type == AuditEventType.TRANSACTION_NOT_FOUND

    def test_validation_failure_is_audited(self, ledger, audit_storage):
        """Test that rejected input leaves a validation event."""
        with pytest.raises(InvalidAmountError):
            ledger.apply({"type": "income", "amount": -5, "date": date(2026, 1, 1)})

        event = audit_storage.get_recent_events(1)[0]
        assert event.event_type == AuditEventType.VALIDATION_FAILED
        assert event.details["operation"] == "apply"
        assert "negative" in event.error_message

    def test_project_deletion_is_correlated(self, ledger, audit_storage):
        """Test that project deletion carries a correlation id."""
        project = ledger.create_project("Shop", "Web")
        ledger.delete_project(project.id)

        event = audit_storage.get_recent_events(1)[0]
        assert event.event_type == AuditEventType.PROJECT_DELETED
        assert event.correlation_id is not None
        assert audit_storage.get_events_by_correlation_id(event.correlation_id) == [event]

    def test_reset_is_audited(self, ledger, audit_storage):
        """Test that a reset keeps the audit trail and records itself."""
        ledger.apply({"type": "income", "amount": 10, "date": date(2026, 1, 1)})
        ledger.reset_all()

        events = audit_storage.events
        assert events[0].event_type == AuditEventType.TRANSACTION_APPLIED
        assert events[-1].event_type == AuditEventType.LEDGER_RESET
        assert events[-1].details["discarded_transactions"] == 1
