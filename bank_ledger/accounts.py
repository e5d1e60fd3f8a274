"""
Account Ledger Module

Accounts hold balances; the AccountService is the only path that changes a
balance, and every change is paired with a transaction record carrying the
resulting balance. Multi-account operations hold per-account locks for the
whole read-validate-mutate-record sequence, and all validation happens before
the first mutation, so a failed operation never leaves partial state behind.
"""

from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum
import uuid

from .storage import Repository, StorageInterface, StorageRecord
from .transactions import Transaction, TransactionService, TransactionType
from .locking import AccountLocks
from .validation import validate_amount, validate_id
from .config import LedgerConfig, get_config
from .dates import utc_now
from .errors import (
    AccountNotFoundError, InsufficientFundsError, InvalidAmountError,
    InvalidTransactionError
)
from .logging_config import get_logger, log_action


CENT = Decimal('0.01')


class AccountType(Enum):
    """Account products with their fixed interest rates"""
    SAVINGS = ("Savings Account", Decimal('0.03'))
    CHECKING = ("Checking Account", Decimal('0.01'))
    FIXED_DEPOSIT = ("Fixed Deposit", Decimal('0.06'))
    MONEY_MARKET = ("Money Market Account", Decimal('0.04'))

    def __init__(self, display_name: str, interest_rate: Decimal):
        self.display_name = display_name
        self.interest_rate = interest_rate


@dataclass
class Account(StorageRecord):
    """
    Bank account. The balance is never negative and only changes through
    deposit() and withdraw(), which also refresh updated_at.
    """
    customer_id: str
    account_type: AccountType
    balance: Decimal = Decimal('0')
    is_active: bool = True

    @classmethod
    def open(
        cls,
        customer_id: str,
        account_type: AccountType,
        balance: Decimal = Decimal('0')
    ) -> 'Account':
        """
        Build a new account with a generated id and timestamps

        Raises:
            InvalidTransactionError: If the customer id is blank, the type is
                unset or the opening balance is negative
        """
        if customer_id is None or not str(customer_id).strip():
            raise InvalidTransactionError("Customer ID is required")
        if not isinstance(account_type, AccountType):
            raise InvalidTransactionError("Account type is required")
        if balance is None or balance < 0:
            raise InvalidTransactionError("Opening balance cannot be negative")

        now = utc_now()
        return cls(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            customer_id=customer_id,
            account_type=account_type,
            balance=balance
        )

    @property
    def interest_rate(self) -> Decimal:
        return self.account_type.interest_rate

    def deposit(self, amount: Decimal) -> None:
        if amount <= 0:
            raise InvalidAmountError("Deposit amount must be positive", amount, "Deposit")
        self.balance = self.balance + amount
        self.updated_at = utc_now()

    def withdraw(self, amount: Decimal) -> None:
        if amount <= 0:
            raise InvalidAmountError("Withdrawal amount must be positive", amount, "Withdrawal")
        if self.balance < amount:
            raise InsufficientFundsError(self.id, amount, self.balance)
        self.balance = self.balance - amount
        self.updated_at = utc_now()

    def activate(self) -> None:
        self.is_active = True
        self.updated_at = utc_now()

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = utc_now()


class AccountRepository(Repository[Account]):
    """Keyed store of accounts"""

    table_name = "accounts"

    def _to_dict(self, entity: Account) -> Dict[str, Any]:
        return entity.to_dict()

    def _from_dict(self, data: Dict[str, Any]) -> Account:
        return Account(
            id=data['id'],
            created_at=datetime.fromisoformat(data['created_at']),
            updated_at=datetime.fromisoformat(data['updated_at']),
            customer_id=data['customer_id'],
            account_type=AccountType[data['account_type']],
            balance=Decimal(data['balance']),
            is_active=data['is_active']
        )

    def find_by_customer_id(self, customer_id: str) -> List[Account]:
        return self.find_by(customer_id=customer_id)

    def find_all_active(self) -> List[Account]:
        return self.find_by(is_active=True)


class AccountService:
    """
    Enforces balance invariants and records a transaction for every change
    """

    def __init__(
        self,
        account_repository: Optional[AccountRepository] = None,
        transaction_service: Optional[TransactionService] = None,
        config: Optional[LedgerConfig] = None,
        storage: Optional[StorageInterface] = None,
        locks: Optional[AccountLocks] = None
    ):
        self.accounts = account_repository or AccountRepository(storage)
        self.transaction_service = transaction_service or TransactionService(storage=storage)
        self.config = config or get_config()
        self.locks = locks if locks is not None else AccountLocks()
        self.logger = get_logger("bank_ledger.accounts")

    def _validate_amount(self, amount: Any, label: str) -> Decimal:
        return validate_amount(
            amount, label,
            minimum=self.config.min_amount,
            maximum=self.config.max_amount
        )

    def create_account(
        self,
        customer_id: str,
        account_type: AccountType,
        initial_deposit: Decimal
    ) -> Account:
        """
        Open an account funded with an initial deposit

        Args:
            customer_id: Owner of the account
            account_type: Product type, which fixes the interest rate
            initial_deposit: Opening balance

        Returns:
            The persisted Account

        Raises:
            InvalidIdentifierError: If the customer id is blank
            InvalidAmountError: If the initial deposit is out of bounds
        """
        validate_id(customer_id, "Customer ID")
        amount = self._validate_amount(initial_deposit, "Initial deposit")

        account = Account.open(customer_id, account_type, amount)

        with self.locks.hold(account.id):
            self.accounts.save(account)
            if amount > 0:
                self.transaction_service.record_transaction(
                    account.id,
                    TransactionType.DEPOSIT,
                    amount,
                    account.balance,
                    "Initial deposit"
                )

        log_action(
            self.logger, "info", f"Account created: {account.id}",
            action="create_account", resource=f"account:{account.id}",
            extra={
                "customer_id": customer_id,
                "account_type": account_type.name,
                "initial_deposit": str(amount)
            }
        )
        return account

    def get_account(self, account_id: str) -> Account:
        """Get account by ID or raise AccountNotFoundError"""
        account = self.accounts.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def get_balance(self, account_id: str) -> Decimal:
        return self.get_account(account_id).balance

    def get_customer_accounts(self, customer_id: str) -> List[Account]:
        return self.accounts.find_by_customer_id(customer_id)

    def get_all_accounts(self) -> List[Account]:
        return self.accounts.find_all()

    def get_active_accounts(self) -> List[Account]:
        return self.accounts.find_all_active()

    def deposit(self, account_id: str, amount: Decimal,
                description: Optional[str] = None) -> Transaction:
        """
        Credit an active account

        Returns:
            The DEPOSIT transaction carrying the new balance

        Raises:
            InvalidAmountError: If the amount is out of bounds
            AccountNotFoundError: If the account does not exist
            InvalidTransactionError: If the account is inactive
        """
        value = self._validate_amount(amount, "Deposit")

        with self.locks.hold(account_id):
            account = self.get_account(account_id)
            if not account.is_active:
                self._reject("deposit", account_id, "Cannot deposit to inactive account")

            account.deposit(value)
            self.accounts.save(account)
            transaction = self.transaction_service.record_transaction(
                account_id,
                TransactionType.DEPOSIT,
                value,
                account.balance,
                description or "Deposit"
            )

        self._log_completed("deposit", account_id, value, account.balance)
        return transaction

    def withdraw(self, account_id: str, amount: Decimal,
                 description: Optional[str] = None) -> Transaction:
        """
        Debit an active account that holds at least the amount

        Raises:
            InvalidAmountError: If the amount is out of bounds
            AccountNotFoundError: If the account does not exist
            InvalidTransactionError: If the account is inactive
            InsufficientFundsError: If the balance is below the amount
        """
        value = self._validate_amount(amount, "Withdrawal")
        return self._debit(account_id, value, TransactionType.WITHDRAWAL,
                           description or "Withdrawal", "withdraw")

    def charge_fee(self, account_id: str, amount: Decimal,
                   description: Optional[str] = None) -> Transaction:
        """Debit a service fee; same rules as withdraw, recorded as FEE"""
        value = self._validate_amount(amount, "Fee")
        return self._debit(account_id, value, TransactionType.FEE,
                           description or "Service fee", "charge_fee")

    def _debit(self, account_id: str, value: Decimal,
               transaction_type: TransactionType, description: str,
               action: str) -> Transaction:
        with self.locks.hold(account_id):
            account = self.get_account(account_id)
            if not account.is_active:
                self._reject(action, account_id, "Cannot withdraw from inactive account")
            if account.balance < value:
                self._reject_funds(action, account, value)

            account.withdraw(value)
            self.accounts.save(account)
            transaction = self.transaction_service.record_transaction(
                account_id,
                transaction_type,
                value,
                account.balance,
                description
            )

        self._log_completed(action, account_id, value, account.balance)
        return transaction

    def transfer(self, from_account_id: str, to_account_id: str,
                 amount: Decimal) -> Tuple[Transaction, Transaction]:
        """
        Move funds between two active accounts as a single unit

        Both balances change and both legs are recorded while the locks for
        both accounts are held; any failure is detected before the first
        balance changes.

        Returns:
            (debit leg on the source, credit leg on the destination), sharing
            one reference

        Raises:
            InvalidAmountError: If the amount is out of bounds
            InvalidTransactionError: Same-account transfer or inactive account
            AccountNotFoundError: If either account does not exist
            InsufficientFundsError: If the source balance is below the amount
        """
        value = self._validate_amount(amount, "Transfer")

        if from_account_id == to_account_id:
            self._reject("transfer", from_account_id, "Cannot transfer to the same account")

        with self.locks.hold(from_account_id, to_account_id):
            source = self.get_account(from_account_id)
            destination = self.get_account(to_account_id)

            if not source.is_active or not destination.is_active:
                self._reject("transfer", from_account_id,
                             "Both accounts must be active for transfer")
            if source.balance < value:
                self._reject_funds("transfer", source, value)

            source.withdraw(value)
            destination.deposit(value)
            self.accounts.save(source)
            self.accounts.save(destination)

            reference = f"TRF-{uuid.uuid4().hex[:12].upper()}"
            debit = self.transaction_service.record_transaction(
                from_account_id,
                TransactionType.TRANSFER,
                value,
                source.balance,
                f"Transfer to {to_account_id} - Ref: {reference}",
                reference=reference
            )
            credit = self.transaction_service.record_transaction(
                to_account_id,
                TransactionType.TRANSFER,
                value,
                destination.balance,
                f"Transfer from {from_account_id} - Ref: {reference}",
                reference=reference
            )

        log_action(
            self.logger, "info", "Transfer completed",
            action="transfer", resource=f"account:{from_account_id}",
            extra={
                "from_account": from_account_id,
                "to_account": to_account_id,
                "amount": str(value),
                "reference": reference
            }
        )
        return debit, credit

    def apply_interest(self, account_id: str) -> Optional[Transaction]:
        """
        Credit balance * rate for the account's type, rounded to cents

        Returns:
            The INTEREST transaction, or None when no interest accrues
        """
        with self.locks.hold(account_id):
            account = self.get_account(account_id)
            if not account.is_active:
                self._reject("apply_interest", account_id,
                             "Cannot apply interest to inactive account")

            rate = account.interest_rate
            interest = (account.balance * rate).quantize(CENT, rounding=ROUND_HALF_UP)
            if interest <= 0:
                return None

            account.deposit(interest)
            self.accounts.save(account)
            transaction = self.transaction_service.record_transaction(
                account_id,
                TransactionType.INTEREST,
                interest,
                account.balance,
                f"Interest credit at {rate * 100:.2f}%"
            )

        self._log_completed("apply_interest", account_id, interest, account.balance)
        return transaction

    def activate_account(self, account_id: str) -> Account:
        return self._set_active(account_id, True)

    def deactivate_account(self, account_id: str) -> Account:
        return self._set_active(account_id, False)

    def _set_active(self, account_id: str, active: bool) -> Account:
        with self.locks.hold(account_id):
            account = self.get_account(account_id)
            if active:
                account.activate()
            else:
                account.deactivate()
            self.accounts.save(account)

        state = "activated" if active else "deactivated"
        log_action(
            self.logger, "info", f"Account {account_id} {state}",
            action=f"account_{state}", resource=f"account:{account_id}"
        )
        return account

    def _reject(self, action: str, account_id: str, reason: str) -> None:
        log_action(
            self.logger, "warning", reason,
            action=action, resource=f"account:{account_id}"
        )
        raise InvalidTransactionError(reason)

    def _reject_funds(self, action: str, account: Account, requested: Decimal) -> None:
        error = InsufficientFundsError(account.id, requested, account.balance)
        log_action(
            self.logger, "warning", error.message,
            action=action, resource=f"account:{account.id}"
        )
        raise error

    def _log_completed(self, action: str, account_id: str,
                       amount: Decimal, balance: Decimal) -> None:
        log_action(
            self.logger, "info", f"{action} completed",
            action=action, resource=f"account:{account_id}",
            extra={"amount": str(amount), "balance_after": str(balance)}
        )
