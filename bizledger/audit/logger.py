"""
Audit Logger

DESIGN DECISION: Every mutation of the ledger is logged.
This provides:
1. Complete traceability
2. Debugging capability when a stale reference degrades an operation
3. A durable record of destructive actions

The audit logger:
- Is synchronous, like the ledger core it serves
- Gracefully handles failures (a broken audit sink never fails a mutation)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from bizledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from bizledger.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through a stdlib handler at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))
    logging.getLogger("bizledger").setLevel(level.upper())


def get_logger(name: Optional[str] = None) -> Any:
    return structlog.get_logger(name)


_LEVELS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
    AuditSeverity.CRITICAL: "critical",
}


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional audit storage (for persistence)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("bizledger.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()
        getattr(self._logger, _LEVELS[event.severity])("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except (StorageError, OSError) as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_transaction_applied(
        self,
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.transaction_applied(
            transaction_id, transaction_type, amount, details
        )
        event.correlation_id = correlation_id
        self.log(event)

    def log_transaction_reversed(
        self,
        transaction_id: UUID,
        transaction_type: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_reversed(transaction_id, transaction_type, amount))

    def log_transaction_not_found(self, transaction_id: UUID) -> None:
        self.log(AuditEventBuilder.transaction_not_found(transaction_id))

    def log_catalog_updated(self, catalog: str, value: str) -> None:
        self.log(AuditEventBuilder.catalog_updated(catalog, value))

    def log_project_created(self, project_id: int, custom_id: str, project_type: str) -> None:
        self.log(AuditEventBuilder.project_created(project_id, custom_id, project_type))

    def log_project_status_changed(self, project_id: int, old_status: str, new_status: str) -> None:
        self.log(AuditEventBuilder.project_status_changed(project_id, old_status, new_status))

    def log_project_deleted(
        self,
        project_id: int,
        custom_id: str,
        reversed_income: str,
        purged_transactions: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a destructive project deletion."""
        event = AuditEventBuilder.project_deleted(
            project_id, custom_id, reversed_income, purged_transactions
        )
        event.correlation_id = correlation_id
        self.log(event)

    def log_project_not_found(self, project_id: Optional[int], operation: str) -> None:
        self.log(AuditEventBuilder.project_not_found(project_id, operation))

    def log_partner_added(self, partner_id: int, name: str) -> None:
        self.log(AuditEventBuilder.partner_added(partner_id, name))

    def log_partner_removed(self, partner_id: int, name: str, dropped_withdrawals: int) -> None:
        self.log(AuditEventBuilder.partner_removed(partner_id, name, dropped_withdrawals))

    def log_partner_percentage_updated(
        self,
        partner_id: int,
        old_percentage: float,
        new_percentage: float,
    ) -> None:
        self.log(AuditEventBuilder.partner_percentage_updated(
            partner_id, old_percentage, new_percentage
        ))

    def log_partner_not_found(self, partner_id: int, operation: str) -> None:
        self.log(AuditEventBuilder.partner_not_found(partner_id, operation))

    def log_withdrawal_recorded(self, partner_id: int, transaction_id: UUID, amount: str) -> None:
        self.log(AuditEventBuilder.withdrawal_recorded(partner_id, transaction_id, amount))

    def log_financial_config_updated(self, changes: dict[str, float]) -> None:
        self.log(AuditEventBuilder.financial_config_updated(changes))

    def log_ledger_restored(self, transaction_count: int, source: str) -> None:
        self.log(AuditEventBuilder.ledger_restored(transaction_count, source))

    def log_ledger_reset(self, discarded_transactions: int) -> None:
        self.log(AuditEventBuilder.ledger_reset(discarded_transactions))

    def log_snapshot_save_failed(self, error_message: str) -> None:
        """Log a persistence failure (the in-memory state stays committed)."""
        self.log(AuditEventBuilder.snapshot_save_failed(error_message))

    def log_validation_failed(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.validation_failed(operation, error_message))

    def log_invariant_violation(self, mismatches: dict[str, Any]) -> None:
        self.log(AuditEventBuilder.invariant_violation(mismatches))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a compound action (e.g., a project deletion
    that purges several transactions).
    """
    return uuid4()
