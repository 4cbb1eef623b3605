"""Shared fixtures: a fresh in-memory ledger for every test."""

import os
from datetime import date
from decimal import Decimal

import pytest

from bizledger.audit import AuditLogger
from bizledger.config import LedgerDefaults
from bizledger.ledger import default_snapshot
from bizledger.models.ledger import Transaction, TransactionType
from bizledger.orchestrator import FinanceLedger
from bizledger.services.storage import InMemoryAuditStorage, InMemorySnapshotStorage


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep a developer's LEDGER_* environment out of the tests."""
    for key in list(os.environ):
        if key.startswith("LEDGER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def state():
    """A default snapshot to run applier-level code against."""
    return default_snapshot(LedgerDefaults())


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def snapshot_storage():
    return InMemorySnapshotStorage()


@pytest.fixture
def ledger(snapshot_storage, audit_storage):
    return FinanceLedger(
        storage=snapshot_storage,
        audit_logger=AuditLogger(audit_storage),
        verify_invariants=True,
    )


def make_tx(kind, amount, on=date(2026, 1, 15), **fields):
    """Build a Transaction with a string amount and a default date."""
    return Transaction(
        type=TransactionType(kind),
        amount=Decimal(str(amount)),
        date=on,
        **fields,
    )


@pytest.fixture
def tx():
    """Transaction factory: tx("income", 100, date(2026, 3, 1))."""
    return make_tx
