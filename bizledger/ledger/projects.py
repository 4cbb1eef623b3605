"""
Project Ledger

Client projects and their payment sub-ledger: creation with a
type-prefixed custom id, status changes and destructive deletion.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from bizledger.audit.logger import get_logger
from bizledger.ledger.applier import TransactionApplier
from bizledger.models.ledger import ClientInfo, LedgerSnapshot, Project


logger = get_logger(__name__)


CUSTOM_ID_PREFIXES = {
    "Web": "NCW",
    "E-commerce": "NCE",
    "SaaS": "NCS",
    "Landing Page": "NCL",
    "Real Estate": "NCI",
    "Marketing": "NCM",
}
FALLBACK_PREFIX = "NCG"


def custom_id_prefix(project_type: str) -> str:
    return CUSTOM_ID_PREFIXES.get(project_type, FALLBACK_PREFIX)


def generate_custom_id(projects: list[Project], project_type: str) -> str:
    """
    Next custom id for a project type, e.g. NCW0003.

    The sequence is the number of live projects carrying the prefix plus
    one. After a deletion the highest number can be handed out again;
    existing ids are never renumbered.
    """
    prefix = custom_id_prefix(project_type)
    count = sum(1 for p in projects if p.custom_id.startswith(prefix))
    return f"{prefix}{count + 1:04d}"


class ProjectDeletion(BaseModel):
    """What a project deletion took out of the ledger."""
    model_config = ConfigDict(frozen=True)

    project: Project
    reversed_income: Decimal
    purged_transactions: int


class ProjectLedger:
    """Project operations on a working snapshot."""

    def __init__(self, applier: TransactionApplier):
        self._applier = applier

    def create(
        self,
        state: LedgerSnapshot,
        name: str,
        project_type: str,
        status: str = "Lead",
        client: Optional[ClientInfo] = None,
        agreed_amount: Decimal = Decimal("0"),
    ) -> Project:
        project = Project(
            id=state.next_project_id,
            custom_id=generate_custom_id(state.projects, project_type),
            name=name,
            type=project_type,
            status=status,
            client=client or ClientInfo(),
            agreed_amount=agreed_amount,
        )
        state.next_project_id += 1
        # Most recent first
        state.projects.insert(0, project)
        return project

    def change_status(
        self,
        state: LedgerSnapshot,
        project_id: int,
        new_status: str,
    ) -> Optional[str]:
        """Set the status; returns the previous one, or None if the project is gone."""
        project = state.find_project(project_id)
        if project is None:
            logger.warning("change_status_project_missing", project_id=project_id)
            return None
        old_status = project.status
        project.status = new_status
        return old_status

    def delete(self, state: LedgerSnapshot, project_id: int) -> Optional[ProjectDeletion]:
        """
        Remove a project, its payments and every transaction that references it.

        Income and balance drop by the sum of the payment history. Any other
        transaction tagged with the project (income applied while the
        project was missing, costs booked against it) is reversed through
        the applier so the running totals keep matching the log.
        """
        project = state.find_project(project_id)
        if project is None:
            logger.warning("delete_project_missing", project_id=project_id)
            return None

        reversed_income = project.paid_total
        state.totals.income -= reversed_income
        state.totals.balance -= reversed_income

        paid_ids = {entry.transaction_id for entry in project.history}
        linked = [t for t in state.transactions if t.project_id == project_id]
        for transaction in linked:
            if transaction.id not in paid_ids:
                self._applier.reverse(state, transaction.id)
        state.transactions = [t for t in state.transactions if t.project_id != project_id]
        state.projects = [p for p in state.projects if p.id != project_id]

        logger.info(
            "project_deleted",
            project_id=project_id,
            custom_id=project.custom_id,
            reversed_income=str(reversed_income),
            purged_transactions=len(linked),
        )
        return ProjectDeletion(
            project=project,
            reversed_income=reversed_income,
            purged_transactions=len(linked),
        )
