"""
Audit Models for bizledger

Every mutation of the ledger is logged for audit purposes.
This provides:
1. Traceability of who-changed-what beyond the transaction log itself
2. Debugging information when a stale reference degrades an operation
3. A record of destructive actions (project deletion, full reset)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them,
not even when the ledger is reset.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutation entry point of the ledger has its own event type.
    """
    # Transactions
    TRANSACTION_APPLIED = "transaction_applied"
    TRANSACTION_REVERSED = "transaction_reversed"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    CATALOG_UPDATED = "catalog_updated"

    # Projects
    PROJECT_CREATED = "project_created"
    PROJECT_STATUS_CHANGED = "project_status_changed"
    PROJECT_DELETED = "project_deleted"
    PROJECT_NOT_FOUND = "project_not_found"

    # Partners
    PARTNER_ADDED = "partner_added"
    PARTNER_REMOVED = "partner_removed"
    PARTNER_PERCENTAGE_UPDATED = "partner_percentage_updated"
    PARTNER_NOT_FOUND = "partner_not_found"
    WITHDRAWAL_RECORDED = "withdrawal_recorded"

    # Configuration
    FINANCIAL_CONFIG_UPDATED = "financial_config_updated"

    # Store lifecycle
    LEDGER_RESTORED = "ledger_restored"
    LEDGER_RESET = "ledger_reset"
    SNAPSHOT_SAVE_FAILED = "snapshot_save_failed"

    # System events
    VALIDATION_FAILED = "validation_failed"
    INVARIANT_VIOLATION = "invariant_violation"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'project', 'partner')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a project and its purged transactions)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_applied(transaction_id, "fixed_cost", "120.00")
        event = AuditEventBuilder.project_deleted(project_id, "NCW0001", "3500.00", 2)
    """

    @staticmethod
    def transaction_applied(
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_APPLIED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Transaction applied: {transaction_type} {amount}",
            details={
                "transaction_type": transaction_type,
                "amount": amount,
                **(details or {}),
            },
        )

    @staticmethod
    def transaction_reversed(
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REVERSED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Transaction reversed: {transaction_type} {amount}",
            details={
                "transaction_type": transaction_type,
                "amount": amount,
            },
        )

    @staticmethod
    def transaction_not_found(transaction_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description="Reversal requested for unknown transaction; ignored",
        )

    @staticmethod
    def catalog_updated(catalog: str, value: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATALOG_UPDATED,
            entity_type="catalog",
            entity_id=catalog,
            description=f"Catalog '{catalog}' gained '{value}'",
            details={"value": value},
        )

    @staticmethod
    def project_created(project_id: int, custom_id: str, project_type: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECT_CREATED,
            entity_type="project",
            entity_id=str(project_id),
            description=f"Project created: {custom_id}",
            details={
                "custom_id": custom_id,
                "project_type": project_type,
            },
        )

    @staticmethod
    def project_status_changed(
        project_id: int,
        old_status: str,
        new_status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECT_STATUS_CHANGED,
            entity_type="project",
            entity_id=str(project_id),
            description=f"Project status changed: {old_status} -> {new_status}",
            details={
                "old_status": old_status,
                "new_status": new_status,
            },
        )

    @staticmethod
    def project_deleted(
        project_id: int,
        custom_id: str,
        reversed_income: str,
        purged_transactions: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECT_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="project",
            entity_id=str(project_id),
            description=f"Project {custom_id} deleted; {purged_transactions} transactions purged",
            details={
                "custom_id": custom_id,
                "reversed_income": reversed_income,
                "purged_transactions": purged_transactions,
            },
        )

    @staticmethod
    def project_not_found(project_id: Optional[int], operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECT_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="project",
            entity_id=str(project_id) if project_id is not None else None,
            description=f"Project not found during {operation}",
            details={"operation": operation},
        )

    @staticmethod
    def partner_added(partner_id: int, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTNER_ADDED,
            entity_type="partner",
            entity_id=str(partner_id),
            description=f"Partner added: {name}",
        )

    @staticmethod
    def partner_removed(partner_id: int, name: str, dropped_withdrawals: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTNER_REMOVED,
            severity=AuditSeverity.WARNING,
            entity_type="partner",
            entity_id=str(partner_id),
            description=f"Partner removed: {name}",
            details={"dropped_withdrawals": dropped_withdrawals},
        )

    @staticmethod
    def partner_percentage_updated(
        partner_id: int,
        old_percentage: float,
        new_percentage: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTNER_PERCENTAGE_UPDATED,
            entity_type="partner",
            entity_id=str(partner_id),
            description=f"Partner percentage changed: {old_percentage} -> {new_percentage}",
            details={
                "old_percentage": old_percentage,
                "new_percentage": new_percentage,
            },
        )

    @staticmethod
    def partner_not_found(partner_id: int, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTNER_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="partner",
            entity_id=str(partner_id),
            description=f"Partner not found during {operation}",
            details={"operation": operation},
        )

    @staticmethod
    def withdrawal_recorded(
        partner_id: int,
        transaction_id: UUID,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_RECORDED,
            entity_type="partner",
            entity_id=str(partner_id),
            description=f"Withdrawal recorded: {amount}",
            details={
                "transaction_id": str(transaction_id),
                "amount": amount,
            },
        )

    @staticmethod
    def financial_config_updated(changes: dict[str, float]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FINANCIAL_CONFIG_UPDATED,
            entity_type="config",
            description="Financial configuration updated",
            details=dict(changes),
        )

    @staticmethod
    def ledger_restored(transaction_count: int, source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RESTORED,
            entity_type="ledger",
            description=f"Ledger restored from {source}",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def ledger_reset(discarded_transactions: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            description="Ledger reset to defaults",
            details={"discarded_transactions": discarded_transactions},
        )

    @staticmethod
    def snapshot_save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description="Snapshot could not be persisted",
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Rejected invalid input for {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def invariant_violation(mismatches: dict[str, Any]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVARIANT_VIOLATION,
            severity=AuditSeverity.CRITICAL,
            entity_type="ledger",
            description="Cached aggregates diverge from transaction log replay",
            details=mismatches,
        )
