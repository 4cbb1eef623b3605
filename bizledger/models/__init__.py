"""
Data Models Package

This package contains all Pydantic models used by bizledger.
All data flowing through the ledger must conform to these schemas.
"""

from bizledger.models.ledger import (
    DEFAULT_PROJECT_STATUSES,
    DEFAULT_PROJECT_TYPES,
    DEFAULT_SERVICES,
    DEFAULT_VARIABLE_COST_TYPES,
    ZERO,
    Aggregates,
    ApplyResult,
    Catalogs,
    ClientInfo,
    FinancialConfig,
    FixedCost,
    Frequency,
    Investment,
    LedgerRecord,
    LedgerSnapshot,
    Partner,
    PaymentEntry,
    Project,
    Transaction,
    TransactionType,
    VariableCost,
    Withdrawal,
)
from bizledger.models.reports import (
    CostBreakdown,
    Deductions,
    DueFixedCost,
    LifetimeStats,
    MonthlyStats,
    PartnerAllocation,
    PartnerAllocationReport,
    PeriodFilter,
    ProjectSummary,
    ReportStats,
)
from bizledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_PROJECT_STATUSES",
    "DEFAULT_PROJECT_TYPES",
    "DEFAULT_SERVICES",
    "DEFAULT_VARIABLE_COST_TYPES",
    "ZERO",
    "Aggregates",
    "ApplyResult",
    "Catalogs",
    "ClientInfo",
    "FinancialConfig",
    "FixedCost",
    "Frequency",
    "Investment",
    "LedgerRecord",
    "LedgerSnapshot",
    "Partner",
    "PaymentEntry",
    "Project",
    "Transaction",
    "TransactionType",
    "VariableCost",
    "Withdrawal",
    # Report models
    "CostBreakdown",
    "Deductions",
    "DueFixedCost",
    "LifetimeStats",
    "MonthlyStats",
    "PartnerAllocation",
    "PartnerAllocationReport",
    "PeriodFilter",
    "ProjectSummary",
    "ReportStats",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
