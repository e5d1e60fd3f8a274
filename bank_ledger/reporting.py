"""
Reporting Module

Read-only summaries over account snapshots for the demo driver and the API.
"""

from decimal import Decimal, ROUND_HALF_UP
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .accounts import Account


@dataclass
class LedgerSummary:
    """System-wide statistics"""
    total_customers: int
    total_accounts: int
    active_accounts: int
    total_balance: Decimal
    average_balance: Decimal
    accounts_by_type: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_customers": self.total_customers,
            "total_accounts": self.total_accounts,
            "active_accounts": self.active_accounts,
            "total_balance": str(self.total_balance),
            "average_balance": str(self.average_balance),
            "accounts_by_type": dict(self.accounts_by_type)
        }


def summarize(accounts: Iterable[Account], customer_count: int) -> LedgerSummary:
    """
    Build statistics from a snapshot of accounts

    The average is rounded to cents, half-up; it is zero when there are no
    accounts.
    """
    accounts = list(accounts)
    total_balance = sum((a.balance for a in accounts), Decimal('0'))

    if accounts:
        average = (total_balance / len(accounts)).quantize(
            Decimal('0.01'), rounding=ROUND_HALF_UP
        )
    else:
        average = Decimal('0.00')

    by_type: Dict[str, int] = {}
    for account in accounts:
        name = account.account_type.display_name
        by_type[name] = by_type.get(name, 0) + 1

    return LedgerSummary(
        total_customers=customer_count,
        total_accounts=len(accounts),
        active_accounts=sum(1 for a in accounts if a.is_active),
        total_balance=total_balance,
        average_balance=average,
        accounts_by_type=by_type
    )


def high_value_accounts(accounts: Iterable[Account], threshold: Decimal) -> List[Account]:
    """Accounts whose balance is strictly greater than the threshold"""
    return [a for a in accounts if a.balance > threshold]
