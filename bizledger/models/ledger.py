"""
Core Ledger Models for bizledger

These models define the canonical records held by the ledger store:
transactions, projects, costs, investments, partners, configuration
and the running aggregates derived from them.

They are designed to:
1. Reject invalid amounts and dates at construction time
2. Keep currency as Decimal end to end (never float)
3. Serialize the whole store to JSON and back without loss

DESIGN DECISION: Transactions are frozen. Once recorded they are never
edited in place; the only way to change their effect is to reverse them.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


ZERO = Decimal("0")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Kinds of ledger movements.

    Each type has exactly one effect on the running aggregates and
    exactly one inverse (see bizledger.ledger.applier).
    """
    PROJECT_INCOME = "project_income"
    FIXED_COST = "fixed_cost"
    VARIABLE_COST = "variable_cost"
    INVESTMENT = "investment"
    WITHDRAWAL = "withdrawal"
    INCOME = "income"       # Income not tied to a project
    EXPENSE = "expense"     # Generic outflow not tied to a cost collection


class Frequency(str, Enum):
    """Recurrence of a fixed cost."""
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUAL = "Annual"

    @property
    def step_months(self) -> int:
        return {"Monthly": 1, "Quarterly": 3, "Annual": 12}[self.value]


# =============================================================================
# DEFAULT CATALOGS
# =============================================================================

DEFAULT_SERVICES = [
    "Hosting",
    "Domains",
    "Software",
    "Office",
    "Utilities",
    "Internet",
    "Marketing",
]

DEFAULT_PROJECT_TYPES = [
    "Web",
    "E-commerce",
    "SaaS",
    "Landing Page",
    "Real Estate",
    "Marketing",
]

DEFAULT_PROJECT_STATUSES = [
    "Lead",
    "Quoted",
    "Accepted",
    "In development",
    "Delivered",
    "Cancelled",
]

DEFAULT_VARIABLE_COST_TYPES = [
    "Freelancer",
    "Plugin",
    "Commission",
    "Marketing / Ads",
    "One-off Service",
]


# =============================================================================
# TRANSACTION LOG
# =============================================================================

class Transaction(BaseModel):
    """
    A single entry in the transaction log.

    The log is the audit trail of the ledger: every running total must be
    reproducible by folding it from an empty state.

    Fixed costs may arrive with `payment_date` instead of `date`; the
    applier normalizes this when the cost record is created. Every other
    type requires `date`.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    type: TransactionType = Field(
        ...,
        description="Transaction type, selects the balance effect"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount of the movement (never negative)"
    )
    date: Optional[dt.date] = Field(
        default=None,
        description="Calendar date of the movement"
    )
    payment_date: Optional[dt.date] = Field(
        default=None,
        description="Alternate date field accepted for fixed costs"
    )
    description: str = Field(
        default="",
        max_length=500,
    )

    # References
    project_id: Optional[int] = None
    partner_id: Optional[int] = None

    # Cost / investment classification
    category: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Service, cost type or investment kind"
    )

    # Recurrence (fixed costs only)
    frequency: Optional[Frequency] = None
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @model_validator(mode='after')
    def validate_dates(self) -> 'Transaction':
        """A transaction must be placeable on the calendar."""
        if self.date is None:
            if self.type != TransactionType.FIXED_COST or self.payment_date is None:
                raise ValueError("Transaction date is required")

        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")

        return self

    @property
    def effective_date(self) -> Optional[dt.date]:
        return self.date or self.payment_date


# =============================================================================
# PROJECTS
# =============================================================================

class ClientInfo(BaseModel):
    """Client contact details attached to a project."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=200)
    tax_id: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=200)
    profession: Optional[str] = Field(default=None, max_length=100)


class PaymentEntry(BaseModel):
    """
    One payment received for a project.

    Linked to the transaction that created it so that reversal removes
    exactly this entry, even when two payments share amount and date.
    """
    model_config = ConfigDict(frozen=True)

    date: dt.date
    amount: Decimal = Field(..., ge=0)
    note: str = ""
    transaction_id: UUID


class Project(BaseModel):
    """
    A client project and its payment sub-ledger.

    `id` is the internal numeric key; `custom_id` is the human-readable
    code (e.g. NCW0003) generated at creation time.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = Field(..., ge=1)
    custom_id: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=200)
    type: str = Field(..., min_length=1, max_length=100)
    status: str = Field(default="Lead", max_length=100)
    client: ClientInfo = Field(default_factory=ClientInfo)
    agreed_amount: Decimal = Field(default=ZERO, ge=0)
    history: list[PaymentEntry] = Field(default_factory=list)

    @property
    def paid_total(self) -> Decimal:
        return sum((entry.amount for entry in self.history), ZERO)


# =============================================================================
# COSTS AND INVESTMENTS
# =============================================================================

class LedgerRecord(BaseModel):
    """
    Common shape of cost and investment records.

    The record id is the id of the transaction that created it, which is
    how reversal finds it again.
    """
    id: UUID
    amount: Decimal = Field(..., ge=0)
    date: Optional[dt.date] = None
    category: Optional[str] = None
    description: str = ""

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> 'LedgerRecord':
        return cls(
            id=transaction.id,
            amount=transaction.amount,
            date=transaction.date,
            category=transaction.category,
            description=transaction.description,
        )


class FixedCost(LedgerRecord):
    """
    A recurring cost (hosting, office rent, subscriptions).

    The recurrence fields are only read by the due-date projector;
    the ledger itself books the amount once, on `date`.
    """
    payment_date: Optional[dt.date] = None
    frequency: Frequency = Frequency.MONTHLY
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @property
    def effective_date(self) -> Optional[dt.date]:
        return self.date or self.payment_date

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> 'FixedCost':
        return cls(
            id=transaction.id,
            amount=transaction.amount,
            # Normalize the alternate date field onto the canonical one
            date=transaction.date or transaction.payment_date,
            payment_date=transaction.payment_date,
            category=transaction.category,
            description=transaction.description,
            frequency=transaction.frequency or Frequency.MONTHLY,
            payment_day=transaction.payment_day,
            start_date=transaction.start_date,
            end_date=transaction.end_date,
        )


class VariableCost(LedgerRecord):
    """A one-off cost (freelancer, plugin licence, commission)."""


class Investment(LedgerRecord):
    """Capital spent on equipment or funds; deducted from profit in full."""


# =============================================================================
# PARTNERS
# =============================================================================

class Withdrawal(BaseModel):
    """Money taken out of the business by a partner."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(..., ge=0)
    date: dt.date
    transaction_id: UUID


class Partner(BaseModel):
    """
    A business partner with a profit share.

    DESIGN DECISION: percentages across partners are NOT forced to sum
    to 100. The allocator reports the raw sum instead.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=200)
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    withdrawals: list[Withdrawal] = Field(default_factory=list)


# =============================================================================
# CONFIGURATION AND CATALOGS
# =============================================================================

class FinancialConfig(BaseModel):
    """Automatic deduction percentages applied to a positive operating result."""

    emergency_fund_percentage: float = Field(default=15.0, ge=0.0, le=100.0)
    reinvestment_percentage: float = Field(default=0.0, ge=0.0, le=100.0)


class Catalogs(BaseModel):
    """Dropdown catalogs. Only `services` is touched by the ledger (auto-growth)."""

    services: list[str] = Field(default_factory=lambda: list(DEFAULT_SERVICES))
    project_types: list[str] = Field(default_factory=lambda: list(DEFAULT_PROJECT_TYPES))
    project_statuses: list[str] = Field(default_factory=lambda: list(DEFAULT_PROJECT_STATUSES))
    variable_cost_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VARIABLE_COST_TYPES)
    )


# =============================================================================
# STORE SNAPSHOT
# =============================================================================

class Aggregates(BaseModel):
    """
    Running totals maintained incrementally by the applier.

    These are a cache. They must always equal a replay of the
    transaction log from an empty store.

    `investment_outflow` is the cumulative amount sent to investments.
    It is NOT the percentage-based emergency fund deduction of the
    reports; the two are reported side by side.
    """

    balance: Decimal = ZERO
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    investment_outflow: Decimal = ZERO


class LedgerSnapshot(BaseModel):
    """The whole ledger store, as persisted and as handed to readers."""

    schema_version: int = 1
    totals: Aggregates = Field(default_factory=Aggregates)

    projects: list[Project] = Field(default_factory=list)
    fixed_costs: list[FixedCost] = Field(default_factory=list)
    variable_costs: list[VariableCost] = Field(default_factory=list)
    investments: list[Investment] = Field(default_factory=list)
    partners: list[Partner] = Field(default_factory=list)

    # Newest first
    transactions: list[Transaction] = Field(default_factory=list)

    catalogs: Catalogs = Field(default_factory=Catalogs)
    config: FinancialConfig = Field(default_factory=FinancialConfig)

    next_project_id: int = Field(default=1, ge=1)
    next_partner_id: int = Field(default=1, ge=1)

    def find_project(self, project_id: int) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def find_partner(self, partner_id: int) -> Optional[Partner]:
        return next((p for p in self.partners if p.id == partner_id), None)

    def find_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class ApplyResult(BaseModel):
    """
    Outcome of applying a transaction.

    `catalog_updated` tells callers that the services catalog grew so a
    dropdown can be refreshed without re-querying. `project_found` is
    False when project income referenced a project that no longer exists
    (income is still recognized).
    """

    transaction: Transaction
    catalog_updated: bool = False
    project_found: Optional[bool] = None
