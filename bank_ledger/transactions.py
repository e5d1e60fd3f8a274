"""
Transaction Recording Module

Transactions are the ledger's append-only audit log: one immutable record per
balance change, carrying the account balance right after the change. Records
are created once and never mutated or deleted.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum
import uuid

from .storage import Repository, StorageInterface
from .errors import InvalidTransactionError, TransactionNotFoundError
from .dates import ensure_utc, is_within_range, utc_now
from .logging_config import get_logger, log_action


class TransactionType(Enum):
    """Types of balance-affecting operations"""
    DEPOSIT = ("deposit", "Deposit")
    WITHDRAWAL = ("withdrawal", "Withdrawal")
    TRANSFER = ("transfer", "Transfer")
    INTEREST = ("interest", "Interest Credit")
    FEE = ("fee", "Fee Deduction")

    def __init__(self, code: str, display_name: str):
        self.code = code
        self.display_name = display_name


@dataclass(frozen=True)
class Transaction:
    """Immutable record of one balance change on one account"""
    id: str
    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    balance_after: Decimal
    description: str
    timestamp: datetime
    reference: str

    @classmethod
    def record(
        cls,
        account_id: str,
        transaction_type: TransactionType,
        amount: Any,
        balance_after: Any,
        description: str,
        reference: Optional[str] = None
    ) -> 'Transaction':
        """
        Build a validated transaction with a fresh id, timestamp and reference

        Raises:
            InvalidTransactionError: If the account id is blank, the type is
                unset, the amount is not positive or balance_after is missing
        """
        if account_id is None or not str(account_id).strip():
            raise InvalidTransactionError("Account ID is required")
        if not isinstance(transaction_type, TransactionType):
            raise InvalidTransactionError("Transaction type is required")

        amount = _as_decimal(amount, "Amount")
        if amount <= 0:
            raise InvalidTransactionError("Amount must be positive")
        balance_after = _as_decimal(balance_after, "Balance after")

        transaction_id = str(uuid.uuid4())
        if not reference:
            reference = f"{transaction_type.code.upper()}-{transaction_id[:8]}"

        return cls(
            id=transaction_id,
            account_id=account_id,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=balance_after,
            description=description or transaction_type.display_name,
            timestamp=utc_now(),
            reference=reference
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert Transaction to dictionary for storage"""
        return {
            'id': self.id,
            'account_id': self.account_id,
            'transaction_type': self.transaction_type.name,
            'amount': str(self.amount),
            'balance_after': str(self.balance_after),
            'description': self.description,
            'timestamp': self.timestamp.isoformat(),
            'reference': self.reference
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """Convert dictionary to Transaction"""
        return cls(
            id=data['id'],
            account_id=data['account_id'],
            transaction_type=TransactionType[data['transaction_type']],
            amount=Decimal(data['amount']),
            balance_after=Decimal(data['balance_after']),
            description=data['description'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            reference=data['reference']
        )


def _as_decimal(value: Any, label: str) -> Decimal:
    if value is None or isinstance(value, (bool, float)):
        raise InvalidTransactionError(f"{label} must be an exact decimal")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidTransactionError(f"{label} is not a number: {value!r}") from None
    if not result.is_finite():
        raise InvalidTransactionError(f"{label} must be finite")
    return result


def _most_recent_first(transactions: List[Transaction]) -> List[Transaction]:
    # Store order is insertion order; reversing a stable ascending sort puts
    # the later of two equal timestamps first
    return list(reversed(sorted(transactions, key=lambda t: t.timestamp)))


class TransactionRepository(Repository[Transaction]):
    """Keyed store of transaction records"""

    table_name = "transactions"

    def _to_dict(self, entity: Transaction) -> Dict[str, Any]:
        return entity.to_dict()

    def _from_dict(self, data: Dict[str, Any]) -> Transaction:
        return Transaction.from_dict(data)

    def find_by_account_id(self, account_id: str) -> List[Transaction]:
        """Transactions for an account, most recent first"""
        return _most_recent_first(self.find_by(account_id=account_id))

    def find_by_type(self, transaction_type: TransactionType) -> List[Transaction]:
        return self.find_by(transaction_type=transaction_type.name)

    def find_by_reference(self, reference: str) -> List[Transaction]:
        return self.find_by(reference=reference)

    def find_by_date_range(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
        account_id: Optional[str] = None
    ) -> List[Transaction]:
        """Transactions with start <= timestamp <= end, most recent first"""
        if account_id is not None:
            candidates = self.find_by(account_id=account_id)
        else:
            candidates = self.find_all()
        return _most_recent_first(
            [t for t in candidates if is_within_range(t.timestamp, start, end)]
        )


class TransactionService:
    """
    Records transactions and answers queries over the transaction log
    """

    def __init__(self, repository: Optional[TransactionRepository] = None,
                 storage: Optional[StorageInterface] = None):
        self.repository = repository or TransactionRepository(storage)
        self.logger = get_logger("bank_ledger.transactions")

    def record_transaction(
        self,
        account_id: str,
        transaction_type: TransactionType,
        amount: Decimal,
        balance_after: Decimal,
        description: str,
        reference: Optional[str] = None
    ) -> Transaction:
        """
        Create and persist an immutable transaction record

        Args:
            account_id: Account the balance change applies to
            transaction_type: Kind of change
            amount: Positive amount moved
            balance_after: Account balance immediately after the change
            description: Free-text description
            reference: Correlation token (generated if not provided)

        Returns:
            The stored Transaction

        Raises:
            InvalidTransactionError: If any required field is missing or the
                amount is not positive
        """
        transaction = Transaction.record(
            account_id=account_id,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=balance_after,
            description=description,
            reference=reference
        )
        saved = self.repository.save(transaction)

        log_action(
            self.logger, "info", f"Transaction recorded: {saved.id}",
            action="record_transaction", resource=f"transaction:{saved.id}",
            extra={
                "account_id": account_id,
                "transaction_type": transaction_type.code,
                "amount": str(saved.amount),
                "balance_after": str(saved.balance_after),
                "reference": saved.reference
            }
        )
        return saved

    def get_transaction(self, transaction_id: str) -> Transaction:
        transaction = self.repository.find_by_id(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def get_account_transactions(self, account_id: str) -> List[Transaction]:
        """Transactions for an account, most recent first"""
        return self.repository.find_by_account_id(account_id)

    def get_transactions_by_date_range(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
        account_id: Optional[str] = None
    ) -> List[Transaction]:
        """
        Transactions within an inclusive time range, optionally for one account.
        Naive datetimes are read as UTC.
        """
        start = ensure_utc(start) if start is not None else None
        end = ensure_utc(end) if end is not None else None
        return self.repository.find_by_date_range(start, end, account_id)

    def get_transactions_by_type(self, transaction_type: TransactionType) -> List[Transaction]:
        return self.repository.find_by_type(transaction_type)

    def get_transactions_by_reference(self, reference: str) -> List[Transaction]:
        """Both legs of a transfer share one reference"""
        return self.repository.find_by_reference(reference)

    def get_total_deposits(self, account_id: str) -> Decimal:
        return self._total(account_id, TransactionType.DEPOSIT)

    def get_total_withdrawals(self, account_id: str) -> Decimal:
        return self._total(account_id, TransactionType.WITHDRAWAL)

    def get_transaction_count(self, account_id: str) -> int:
        return len(self.repository.find_by(account_id=account_id))

    def _total(self, account_id: str, transaction_type: TransactionType) -> Decimal:
        return sum(
            (t.amount for t in self.repository.find_by(account_id=account_id)
             if t.transaction_type == transaction_type),
            Decimal('0')
        )
