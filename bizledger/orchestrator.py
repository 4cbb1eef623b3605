"""
Main Orchestrator for bizledger

This module ties together all the components and is the ONLY public
way to change the ledger. Every mutation follows the same flow:

    validate input -> copy-on-write mutation -> (verify invariants)
    -> publish -> change listeners (persistence) -> audit

DESIGN DECISION: The orchestrator enforces the boundaries:
- Invalid input is rejected before any state is touched
- A mutation either commits completely or not at all
- Missing projects, partners or transactions degrade gracefully and are
  audited instead of raising
- Every mutation is audited

Reads (reports, lifetime stats, allocations) work on the currently
published snapshot and never take the write lock.
"""

import datetime as dt
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional, Union
from uuid import UUID

from bizledger.audit import AuditLogger, configure_logging, create_correlation_id, get_logger
from bizledger.config import Settings, get_settings
from bizledger.ledger import (
    InvalidInputError,
    InvariantViolationError,
    LedgerStore,
    NoChange,
    PartnerLedger,
    ProjectLedger,
    TransactionApplier,
    default_snapshot,
    verify_invariants,
)
from bizledger.models.ledger import (
    ApplyResult,
    ClientInfo,
    FinancialConfig,
    LedgerSnapshot,
    Partner,
    Project,
    Transaction,
    TransactionType,
)
from bizledger.models.reports import (
    CostBreakdown,
    DueFixedCost,
    LifetimeStats,
    MonthlyStats,
    PartnerAllocationReport,
    ProjectSummary,
    ReportStats,
)
from bizledger.projections import upcoming_fixed_costs
from bizledger.reports import (
    cost_breakdown,
    financial_stats,
    monthly_breakdown,
    partner_allocations,
    project_summaries,
    report_stats,
)
from bizledger.services.storage import (
    JsonFileSnapshotStorage,
    JsonLinesAuditStorage,
    NotFoundError,
    SnapshotStorageInterface,
    StorageError,
)
from bizledger.validation import (
    parse_model,
    parse_transaction,
    validate_amount,
    validate_date,
    validate_percentage,
    validate_period,
    validate_text,
)


logger = get_logger(__name__)


class FinanceLedger:
    """
    Coordinator over the ledger store.

    Holds one LedgerStore and exposes every ledger operation. Persistence
    is wired in as a change listener: after each commit the full snapshot
    is handed to the storage. A failing save is audited and the in-memory
    state stays committed; the next successful save catches up.
    """

    def __init__(
        self,
        initial: Optional[LedgerSnapshot] = None,
        storage: Optional[SnapshotStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        verify_invariants: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._store = LedgerStore(initial or default_snapshot(self._settings.defaults))
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._verify = (
            self._settings.app.verify_invariants
            if verify_invariants is None else verify_invariants
        )

        self._applier = TransactionApplier()
        self._projects = ProjectLedger(self._applier)
        self._partners = PartnerLedger(self._applier)

        if self._storage is not None:
            self._store.subscribe(self._persist)

    # =========================================================================
    # Plumbing
    # =========================================================================

    @property
    def current(self) -> LedgerSnapshot:
        """The published snapshot. Treat as read-only."""
        return self._store.current()

    @property
    def version(self) -> int:
        return self._store.version

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    @contextmanager
    def _validating(self, operation: str) -> Iterator[None]:
        try:
            yield
        except InvalidInputError as e:
            self._audit.log_validation_failed(operation, str(e))
            raise

    @contextmanager
    def _mutation(self) -> Iterator[LedgerSnapshot]:
        with self._store.transaction() as state:
            yield state
            if self._verify:
                self._check(state)

    def _check(self, state: LedgerSnapshot) -> None:
        try:
            verify_invariants(state)
        except InvariantViolationError as e:
            logger.critical("invariant_violation", mismatches=e.mismatches)
            self._audit.log_invariant_violation(e.mismatches)
            raise

    def _persist(self, snapshot: LedgerSnapshot) -> None:
        try:
            self._storage.save_snapshot(snapshot)
        except (StorageError, OSError) as e:
            logger.error("snapshot_save_failed", error=str(e))
            self._audit.log_snapshot_save_failed(str(e))

    def subscribe(self, callback: Callable[[LedgerSnapshot], None]) -> Callable[[], None]:
        """
        Register a change listener; it receives every committed snapshot.

        Returns a callable that unsubscribes the listener.
        """
        return self._store.subscribe(callback)

    # =========================================================================
    # Transactions
    # =========================================================================

    def apply(self, payload: Union[Transaction, dict]) -> ApplyResult:
        """
        Record a transaction and apply its effect.

        Raises:
            InvalidAmountError: bad amount
            InvalidInputError: any other malformed field, a duplicate id,
                or a withdrawal (use add_withdrawal)
        """
        with self._validating("apply"):
            transaction = parse_transaction(payload)
            if transaction.type == TransactionType.WITHDRAWAL:
                raise InvalidInputError(
                    "Withdrawals must be recorded with add_withdrawal"
                )
            with self._mutation() as state:
                result = self._applier.apply(state, transaction)

        details = {}
        if transaction.project_id is not None:
            details["project_id"] = transaction.project_id
        self._audit.log_transaction_applied(
            transaction.id,
            transaction.type.value,
            str(transaction.amount),
            details,
        )
        if result.catalog_updated:
            self._audit.log_catalog_updated("services", transaction.category)
        if result.project_found is False:
            self._audit.log_project_not_found(transaction.project_id, "apply")
        return result

    def reverse(self, transaction_id: Union[UUID, str]) -> bool:
        """
        Delete a transaction and undo its effect.

        Returns False (and changes nothing) when the id is unknown.
        """
        with self._validating("reverse"):
            tid = _parse_uuid(transaction_id)

        removed = None
        with self._mutation() as state:
            removed = self._applier.reverse(state, tid)
            if removed is None:
                raise NoChange

        if removed is None:
            self._audit.log_transaction_not_found(tid)
            return False

        self._audit.log_transaction_reversed(removed.id, removed.type.value, str(removed.amount))
        return True

    # =========================================================================
    # Projects
    # =========================================================================

    def create_project(
        self,
        name: str,
        project_type: str,
        status: str = "Lead",
        client: Optional[Union[ClientInfo, dict]] = None,
        agreed_amount: Any = Decimal("0"),
    ) -> Project:
        with self._validating("create_project"):
            name = validate_text(name, "name")
            project_type = validate_text(project_type, "project_type", 100)
            status = validate_text(status, "status", 100)
            amount = validate_amount(agreed_amount, "agreed_amount")
            client_info = parse_model(ClientInfo, client) if client is not None else None

        with self._mutation() as state:
            project = self._projects.create(
                state,
                name=name,
                project_type=project_type,
                status=status,
                client=client_info,
                agreed_amount=amount,
            )

        self._audit.log_project_created(project.id, project.custom_id, project.type)
        return project.model_copy(deep=True)

    def change_status(self, project_id: int, new_status: str) -> bool:
        """Update a project's status. Returns False when the project is gone."""
        with self._validating("change_status"):
            new_status = validate_text(new_status, "status", 100)

        old_status = None
        with self._mutation() as state:
            old_status = self._projects.change_status(state, project_id, new_status)
            if old_status is None:
                raise NoChange

        if old_status is None:
            self._audit.log_project_not_found(project_id, "change_status")
            return False
        self._audit.log_project_status_changed(project_id, old_status, new_status)
        return True

    def delete_project(self, project_id: int) -> bool:
        """
        Permanently delete a project and all transactions that reference it.

        Income and balance drop by the project's paid total. Not undoable;
        asking the user for confirmation is the caller's job.
        """
        deletion = None
        with self._mutation() as state:
            deletion = self._projects.delete(state, project_id)
            if deletion is None:
                raise NoChange

        if deletion is None:
            self._audit.log_project_not_found(project_id, "delete_project")
            return False

        self._audit.log_project_deleted(
            project_id,
            deletion.project.custom_id,
            str(deletion.reversed_income),
            deletion.purged_transactions,
            correlation_id=create_correlation_id(),
        )
        return True

    # =========================================================================
    # Partners and configuration
    # =========================================================================

    def add_withdrawal(
        self,
        partner_id: int,
        amount: Any,
        date: Union[dt.date, str],
        description: Optional[str] = None,
    ) -> Transaction:
        """
        Record money taken out by a partner.

        Not capped at the partner's available share. A missing partner
        still reduces the balance; the event is audited.
        """
        with self._validating("add_withdrawal"):
            amount = validate_amount(amount)
            date = validate_date(date)
            if description is not None:
                description = validate_text(description, "description", 500)

        with self._mutation() as state:
            transaction, found = self._partners.add_withdrawal(
                state, partner_id, amount, date, description
            )

        if not found:
            self._audit.log_partner_not_found(partner_id, "add_withdrawal")
        self._audit.log_withdrawal_recorded(partner_id, transaction.id, str(amount))
        return transaction

    def set_partner_percentage(self, partner_id: int, value: Any) -> bool:
        """Overwrite a partner's profit share. No normalization across partners."""
        with self._validating("set_partner_percentage"):
            value = validate_percentage(value)

        old = None
        with self._mutation() as state:
            old = self._partners.set_percentage(state, partner_id, value)
            if old is None:
                raise NoChange

        if old is None:
            self._audit.log_partner_not_found(partner_id, "set_partner_percentage")
            return False
        self._audit.log_partner_percentage_updated(partner_id, old, value)
        return True

    def add_partner(self, name: str, percentage: Any = 0.0) -> Partner:
        with self._validating("add_partner"):
            name = validate_text(name, "name")
            percentage = validate_percentage(percentage)

        with self._mutation() as state:
            partner = self._partners.add(state, name, percentage)

        self._audit.log_partner_added(partner.id, partner.name)
        return partner.model_copy(deep=True)

    def remove_partner(self, partner_id: int) -> bool:
        removed = None
        with self._mutation() as state:
            removed = self._partners.remove(state, partner_id)
            if removed is None:
                raise NoChange

        if removed is None:
            self._audit.log_partner_not_found(partner_id, "remove_partner")
            return False
        self._audit.log_partner_removed(removed.id, removed.name, len(removed.withdrawals))
        return True

    def update_financial_config(
        self,
        emergency_fund_percentage: Any = None,
        reinvestment_percentage: Any = None,
    ) -> FinancialConfig:
        """Change the automatic deduction percentages; returns the new config."""
        with self._validating("update_financial_config"):
            if emergency_fund_percentage is not None:
                emergency_fund_percentage = validate_percentage(
                    emergency_fund_percentage, "emergency_fund_percentage"
                )
            if reinvestment_percentage is not None:
                reinvestment_percentage = validate_percentage(
                    reinvestment_percentage, "reinvestment_percentage"
                )

        changes = {}
        with self._mutation() as state:
            changes = self._partners.update_config(
                state, emergency_fund_percentage, reinvestment_percentage
            )
            config = state.config.model_copy()
            if not changes:
                raise NoChange

        if changes:
            self._audit.log_financial_config_updated(changes)
        return config

    # =========================================================================
    # Reads
    # =========================================================================

    def report_stats(self, month: Optional[int] = None, year: Optional[int] = None) -> ReportStats:
        """Period statement; month is 0-indexed, either axis may be omitted."""
        period = validate_period(month, year)
        return report_stats(self.current, period)

    def financial_stats(self) -> LifetimeStats:
        return financial_stats(self.current)

    def monthly_breakdown(self, year: int) -> list[MonthlyStats]:
        validate_period(None, year)
        return monthly_breakdown(self.current, year)

    def cost_breakdown(self, month: Optional[int] = None, year: Optional[int] = None) -> CostBreakdown:
        return cost_breakdown(self.current, validate_period(month, year))

    def partner_allocations(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> PartnerAllocationReport:
        period = validate_period(month, year)
        # One snapshot for both reads so stats and withdrawals agree
        snapshot = self.current
        net_profit = report_stats(snapshot, period).net_profit
        return partner_allocations(snapshot, period, net_profit)

    def project_summaries(self) -> list[ProjectSummary]:
        return project_summaries(self.current)

    def upcoming_fixed_costs(
        self,
        reference: Optional[Union[dt.date, str]] = None,
        within_days: int = 30,
    ) -> list[DueFixedCost]:
        """Fixed costs falling due within `within_days` of `reference` (default today)."""
        reference = validate_date(reference) if reference is not None else dt.date.today()
        if isinstance(within_days, bool) or not isinstance(within_days, int) or within_days < 0:
            raise InvalidInputError(f"within_days must be a non-negative integer, got {within_days!r}")
        return upcoming_fixed_costs(self.current.fixed_costs, reference, within_days)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def snapshot(self) -> LedgerSnapshot:
        """A private deep copy of the current state."""
        return self._store.snapshot()

    def restore(self, snapshot: Union[LedgerSnapshot, dict], source: str = "caller") -> None:
        """Replace the whole state, e.g. from a backup."""
        with self._validating("restore"):
            snapshot = parse_model(LedgerSnapshot, snapshot)
        if self._verify:
            self._check(snapshot)
        self._store.replace(snapshot)
        self._audit.log_ledger_restored(len(snapshot.transactions), source)

    def reload(self) -> None:
        """
        Re-read the state from storage.

        Raises:
            NotFoundError: no storage configured, or nothing saved yet
            StorageError: the saved snapshot cannot be read
        """
        if self._storage is None:
            raise NotFoundError("No snapshot storage configured")
        snapshot = self._storage.load_snapshot()
        if snapshot is None:
            raise NotFoundError("No saved snapshot to reload")
        self.restore(snapshot, source="storage")

    def reset_all(self) -> None:
        """
        Discard everything and start over from defaults. Clears storage too.

        Destructive; confirmation is the caller's job.
        """
        discarded = len(self.current.transactions)
        self._store.replace(default_snapshot(self._settings.defaults))
        if self._storage is not None:
            self._storage.clear()
        self._audit.log_ledger_reset(discarded)

    def verify_integrity(self) -> None:
        """Check the cached totals against a replay of the log."""
        self._check(self.current)


def _parse_uuid(value: Union[UUID, str]) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidInputError(f"Not a transaction id: {value!r}") from None


def create_ledger(
    settings: Optional[Settings] = None,
    storage: Optional[SnapshotStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> FinanceLedger:
    """
    Factory function to create a ready-to-use ledger.

    Args:
        settings: Defaults to get_settings().
        storage: Snapshot storage. Defaults to the JSON file under
            the configured data directory.
        audit_logger: Defaults to an AuditLogger writing JSON lines next
            to the snapshot.

    The initial state is loaded from storage, or seeded from defaults when
    nothing has been saved yet. A snapshot that exists but cannot be read
    raises StorageError rather than being silently replaced.
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)

    storage_settings = settings.storage
    if storage is None:
        storage = JsonFileSnapshotStorage(
            storage_settings.snapshot_path,
            retry_attempts=storage_settings.retry_attempts,
        )
    if audit_logger is None:
        audit_logger = AuditLogger(JsonLinesAuditStorage(storage_settings.audit_path))

    initial = storage.load_snapshot()
    ledger = FinanceLedger(
        initial=initial,
        storage=storage,
        audit_logger=audit_logger,
        settings=settings,
    )
    if initial is not None:
        if settings.app.verify_invariants:
            ledger.verify_integrity()
        audit_logger.log_ledger_restored(len(initial.transactions), "storage")
    logger.info(
        "ledger_ready",
        environment=settings.app.environment,
        restored=initial is not None,
        transactions=len(ledger.current.transactions),
    )
    return ledger
