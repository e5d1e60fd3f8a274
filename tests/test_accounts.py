"""
Test suite for accounts module

Tests the account entity, balance mutations with their transaction records,
transfers, interest and account activation.
"""

import pytest
from decimal import Decimal

from bank_ledger.storage import InMemoryStorage
from bank_ledger.config import LedgerConfig
from bank_ledger.accounts import Account, AccountRepository, AccountService, AccountType
from bank_ledger.transactions import TransactionService, TransactionType
from bank_ledger.errors import (
    AccountNotFoundError, InsufficientFundsError, InvalidAmountError,
    InvalidIdentifierError, InvalidTransactionError
)


class TestAccountType:
    """Test account type rates"""

    def test_rates(self):
        assert AccountType.SAVINGS.interest_rate == Decimal('0.03')
        assert AccountType.CHECKING.interest_rate == Decimal('0.01')
        assert AccountType.FIXED_DEPOSIT.interest_rate == Decimal('0.06')
        assert AccountType.MONEY_MARKET.interest_rate == Decimal('0.04')

    def test_display_names(self):
        assert AccountType.SAVINGS.display_name == "Savings Account"
        assert AccountType.MONEY_MARKET.display_name == "Money Market Account"


class TestAccount:
    """Test Account entity"""

    def test_open(self):
        account = Account.open("CUST001", AccountType.CHECKING, Decimal('250.00'))
        assert account.id
        assert account.customer_id == "CUST001"
        assert account.balance == Decimal('250.00')
        assert account.is_active
        assert account.interest_rate == Decimal('0.01')

    def test_open_requires_fields(self):
        with pytest.raises(InvalidTransactionError):
            Account.open("", AccountType.CHECKING)
        with pytest.raises(InvalidTransactionError):
            Account.open("CUST001", None)
        with pytest.raises(InvalidTransactionError):
            Account.open("CUST001", AccountType.CHECKING, Decimal('-1'))

    def test_deposit_and_withdraw(self):
        account = Account.open("CUST001", AccountType.SAVINGS, Decimal('100'))
        before = account.updated_at

        account.deposit(Decimal('50'))
        assert account.balance == Decimal('150')
        assert account.updated_at >= before

        account.withdraw(Decimal('150'))
        assert account.balance == Decimal('0')

    def test_withdraw_refuses_negative_balance(self):
        account = Account.open("CUST001", AccountType.SAVINGS, Decimal('100'))
        with pytest.raises(InsufficientFundsError):
            account.withdraw(Decimal('100.01'))
        assert account.balance == Decimal('100')

    def test_primitives_reject_non_positive(self):
        account = Account.open("CUST001", AccountType.SAVINGS, Decimal('100'))
        with pytest.raises(InvalidAmountError):
            account.deposit(Decimal('0'))
        with pytest.raises(InvalidAmountError):
            account.withdraw(Decimal('-1'))


class TestAccountService:
    """Test AccountService operations"""

    def setup_method(self):
        self.storage = InMemoryStorage()
        self.transactions = TransactionService(storage=self.storage)
        self.service = AccountService(
            AccountRepository(self.storage), self.transactions, config=LedgerConfig()
        )

    def _open(self, amount="1000.00", account_type=AccountType.SAVINGS, customer_id="CUST001"):
        return self.service.create_account(customer_id, account_type, Decimal(amount))

    def test_create_account_records_initial_deposit(self):
        account = self._open("500.00")

        assert self.service.get_balance(account.id) == Decimal('500.00')
        history = self.transactions.get_account_transactions(account.id)
        assert len(history) == 1
        assert history[0].transaction_type == TransactionType.DEPOSIT
        assert history[0].description == "Initial deposit"
        assert history[0].balance_after == Decimal('500.00')

    def test_create_account_validation(self):
        with pytest.raises(InvalidIdentifierError):
            self.service.create_account("  ", AccountType.SAVINGS, Decimal('10'))
        with pytest.raises(InvalidAmountError):
            self.service.create_account("CUST001", AccountType.SAVINGS, Decimal('0'))
        with pytest.raises(InvalidAmountError):
            self.service.create_account("CUST001", AccountType.SAVINGS, None)
        assert self.service.get_all_accounts() == []

    def test_deposit(self):
        account = self._open("500.00")
        txn = self.service.deposit(account.id, Decimal('100.00'), "Salary")

        assert self.service.get_balance(account.id) == Decimal('600.00')
        assert txn.transaction_type == TransactionType.DEPOSIT
        assert txn.amount == Decimal('100.00')
        assert txn.balance_after == Decimal('600.00')
        assert txn.description == "Salary"

    def test_deposit_default_description(self):
        account = self._open()
        assert self.service.deposit(account.id, Decimal('1')).description == "Deposit"

    def test_deposit_minimum_boundary(self):
        account = self._open("0.01")
        self.service.deposit(account.id, Decimal('0.01'))
        assert self.service.get_balance(account.id) == Decimal('0.02')

    def test_deposit_rejects_bad_amount_without_change(self):
        account = self._open("500.00")
        for amount in (Decimal('0'), Decimal('-5'), Decimal('1000000.01'), None):
            with pytest.raises(InvalidAmountError):
                self.service.deposit(account.id, amount)

        assert self.service.get_balance(account.id) == Decimal('500.00')
        assert self.transactions.get_transaction_count(account.id) == 1

    def test_deposit_unknown_account(self):
        with pytest.raises(AccountNotFoundError):
            self.service.deposit("nonexistent", Decimal('10'))

    def test_withdraw(self):
        account = self._open("500.00")
        txn = self.service.withdraw(account.id, Decimal('200.00'), "ATM withdrawal")

        assert self.service.get_balance(account.id) == Decimal('300.00')
        assert txn.transaction_type == TransactionType.WITHDRAWAL
        assert txn.balance_after == Decimal('300.00')

    def test_withdraw_exact_balance(self):
        account = self._open("500.00")
        self.service.withdraw(account.id, Decimal('500.00'))
        assert self.service.get_balance(account.id) == Decimal('0')

    def test_withdraw_insufficient_funds(self):
        account = self._open("500.00")
        with pytest.raises(InsufficientFundsError) as exc:
            self.service.withdraw(account.id, Decimal('600.00'))

        assert exc.value.requested == Decimal('600.00')
        assert exc.value.available == Decimal('500.00')
        assert self.service.get_balance(account.id) == Decimal('500.00')
        assert self.transactions.get_transaction_count(account.id) == 1

    def test_charge_fee(self):
        account = self._open("100.00")
        txn = self.service.charge_fee(account.id, Decimal('2.50'))

        assert txn.transaction_type == TransactionType.FEE
        assert txn.description == "Service fee"
        assert self.service.get_balance(account.id) == Decimal('97.50')
        # Fees are not counted as withdrawals
        assert self.transactions.get_total_withdrawals(account.id) == Decimal('0')

    def test_transfer(self):
        source = self._open("1000.00")
        destination = self._open("500.00", AccountType.CHECKING)

        debit, credit = self.service.transfer(source.id, destination.id, Decimal('300.00'))

        assert self.service.get_balance(source.id) == Decimal('700.00')
        assert self.service.get_balance(destination.id) == Decimal('800.00')

        assert debit.account_id == source.id
        assert debit.balance_after == Decimal('700.00')
        assert credit.account_id == destination.id
        assert credit.balance_after == Decimal('800.00')
        assert debit.transaction_type == credit.transaction_type == TransactionType.TRANSFER
        assert debit.amount == credit.amount == Decimal('300.00')

        assert debit.reference == credit.reference
        assert debit.reference.startswith("TRF-")
        assert debit.description == f"Transfer to {destination.id} - Ref: {debit.reference}"
        assert credit.description == f"Transfer from {source.id} - Ref: {debit.reference}"

        legs = self.transactions.get_transactions_by_reference(debit.reference)
        assert len(legs) == 2

    def test_transfer_conserves_total(self):
        a = self._open("1000.00")
        b = self._open("250.00")
        total = self.service.get_balance(a.id) + self.service.get_balance(b.id)

        self.service.transfer(a.id, b.id, Decimal('333.33'))
        self.service.transfer(b.id, a.id, Decimal('0.01'))

        assert self.service.get_balance(a.id) + self.service.get_balance(b.id) == total

    def test_transfer_to_same_account(self):
        account = self._open("1000.00")
        with pytest.raises(InvalidTransactionError, match="same account"):
            self.service.transfer(account.id, account.id, Decimal('100'))

        assert self.service.get_balance(account.id) == Decimal('1000.00')
        assert self.transactions.get_transaction_count(account.id) == 1

    def test_transfer_insufficient_funds_leaves_both_unchanged(self):
        source = self._open("100.00")
        destination = self._open("100.00")

        with pytest.raises(InsufficientFundsError):
            self.service.transfer(source.id, destination.id, Decimal('100.01'))

        assert self.service.get_balance(source.id) == Decimal('100.00')
        assert self.service.get_balance(destination.id) == Decimal('100.00')
        assert self.transactions.get_transactions_by_type(TransactionType.TRANSFER) == []

    def test_transfer_missing_account(self):
        source = self._open("100.00")
        with pytest.raises(AccountNotFoundError):
            self.service.transfer(source.id, "missing", Decimal('10'))
        with pytest.raises(AccountNotFoundError):
            self.service.transfer("missing", source.id, Decimal('10'))
        assert self.service.get_balance(source.id) == Decimal('100.00')

    def test_apply_interest(self):
        account = self._open("1000.00")
        txn = self.service.apply_interest(account.id)

        assert self.service.get_balance(account.id) == Decimal('1030.00')
        assert txn.transaction_type == TransactionType.INTEREST
        assert txn.amount == Decimal('30.00')
        assert txn.balance_after == Decimal('1030.00')
        assert txn.description == "Interest credit at 3.00%"

    def test_apply_interest_rounds_half_up(self):
        account = self._open("0.50", AccountType.CHECKING)
        # 0.50 * 0.01 = 0.005 -> 0.01
        txn = self.service.apply_interest(account.id)
        assert txn.amount == Decimal('0.01')
        assert self.service.get_balance(account.id) == Decimal('0.51')

    def test_apply_interest_nothing_accrued(self):
        account = self._open("0.10", AccountType.CHECKING)
        self.service.withdraw(account.id, Decimal('0.10'))

        assert self.service.apply_interest(account.id) is None
        assert self.service.get_balance(account.id) == Decimal('0')
        assert self.transactions.get_transactions_by_type(TransactionType.INTEREST) == []

    def test_balance_after_matches_history(self):
        account = self._open("1000.00")
        self.service.deposit(account.id, Decimal('250.00'))
        self.service.withdraw(account.id, Decimal('75.25'))
        self.service.apply_interest(account.id)

        latest = self.transactions.get_account_transactions(account.id)[0]
        assert latest.balance_after == self.service.get_balance(account.id)

    def test_inactive_account_rejects_mutations(self):
        account = self._open("1000.00")
        other = self._open("1000.00")
        self.service.deactivate_account(account.id)

        with pytest.raises(InvalidTransactionError):
            self.service.deposit(account.id, Decimal('10'))
        with pytest.raises(InvalidTransactionError):
            self.service.withdraw(account.id, Decimal('10'))
        with pytest.raises(InvalidTransactionError):
            self.service.charge_fee(account.id, Decimal('10'))
        with pytest.raises(InvalidTransactionError, match="active"):
            self.service.transfer(other.id, account.id, Decimal('10'))
        with pytest.raises(InvalidTransactionError):
            self.service.apply_interest(account.id)

        assert self.service.get_balance(account.id) == Decimal('1000.00')
        assert self.service.get_balance(other.id) == Decimal('1000.00')

    def test_activate_deactivate_idempotent(self):
        account = self._open()
        self.service.deactivate_account(account.id)
        self.service.deactivate_account(account.id)
        assert not self.service.get_account(account.id).is_active
        assert self.service.get_active_accounts() == []

        self.service.activate_account(account.id)
        self.service.activate_account(account.id)
        assert self.service.get_account(account.id).is_active
        self.service.deposit(account.id, Decimal('1'))

    def test_customer_accounts(self):
        a1 = self._open(customer_id="C1")
        a2 = self._open(customer_id="C1", account_type=AccountType.CHECKING)
        self._open(customer_id="C2")

        assert {a.id for a in self.service.get_customer_accounts("C1")} == {a1.id, a2.id}
        assert self.service.get_customer_accounts("nobody") == []
        assert len(self.service.get_all_accounts()) == 3

    def test_get_account_unknown(self):
        with pytest.raises(AccountNotFoundError, match="Account not found: nope"):
            self.service.get_account("nope")
        with pytest.raises(AccountNotFoundError):
            self.service.get_balance("nope")

    def test_config_bounds_apply(self):
        service = AccountService(
            AccountRepository(self.storage), self.transactions,
            config=LedgerConfig(max_transaction_amount="100.00")
        )
        account = service.create_account("C1", AccountType.SAVINGS, Decimal('100.00'))
        with pytest.raises(InvalidAmountError):
            service.deposit(account.id, Decimal('100.01'))
