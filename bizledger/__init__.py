"""
bizledger - Source Package

A small-business financial ledger: records income, fixed and variable
costs, investments and partner withdrawals, and derives period and
lifetime financial statements from them.

DESIGN PRINCIPLES:
1. The transaction log is the source of truth; running totals are a cache
2. Every mutation is all-or-nothing
3. No silent corrections (bad amounts are rejected, never zeroed)
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "bizledger Team"
