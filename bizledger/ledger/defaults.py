"""Initial ledger state used when no snapshot exists, or after a reset."""

from typing import Optional

from bizledger.config import LedgerDefaults, get_settings
from bizledger.models.ledger import (
    Catalogs,
    FinancialConfig,
    LedgerSnapshot,
    Partner,
)


def default_snapshot(defaults: Optional[LedgerDefaults] = None) -> LedgerSnapshot:
    """
    Empty collections, default catalogs, seed partners sharing 100 % equally.

    With the stock settings this is two partners at 50 % each, an
    emergency fund of 15 % and no reinvestment.
    """
    defaults = defaults or get_settings().defaults
    names = defaults.partner_names_list

    partners = []
    if names:
        share = round(100.0 / len(names), 2)
        partners = [
            Partner(id=index, name=name, percentage=share)
            for index, name in enumerate(names, start=1)
        ]

    return LedgerSnapshot(
        partners=partners,
        catalogs=Catalogs(),
        config=FinancialConfig(
            emergency_fund_percentage=defaults.emergency_fund_percentage,
            reinvestment_percentage=defaults.reinvestment_percentage,
        ),
        next_partner_id=len(partners) + 1,
    )
