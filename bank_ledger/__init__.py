"""
Bank Ledger

An in-memory demonstration banking ledger: customers hold accounts, accounts
hold balances, and every balance change is recorded as an immutable
transaction. All monetary values use Decimal.
"""

__version__ = "1.0.0"
