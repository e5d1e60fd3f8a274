"""
Demo Driver

Runs a fixed scenario against a fresh in-memory ledger and prints balances,
history and statistics. `--interactive` then opens a text menu over the same
ledger; `--serve` starts the HTTP API instead.
"""

import argparse
import sys
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from .system import LedgerSystem
from .accounts import Account, AccountType
from .customers import Customer
from .currency import decimal_from_string, format_usd
from .dates import format_datetime
from .reporting import high_value_accounts
from .config import get_config
from .errors import LedgerError
from .logging_config import get_logger, setup_logging


HIGH_VALUE_THRESHOLD = Decimal('4000')

logger = get_logger("bank_ledger.demo")


class LedgerDemo:
    """Scenario and interactive menu over one ledger"""

    def __init__(self, system: Optional[LedgerSystem] = None,
                 out: Callable[[str], None] = print):
        self.system = system or LedgerSystem()
        self.out = out

    @property
    def accounts(self):
        return self.system.account_service

    @property
    def customers(self):
        return self.system.customer_service

    @property
    def transactions(self):
        return self.system.transaction_service

    def run(self) -> Dict[str, str]:
        """
        Run the scripted scenario

        Returns:
            Ids of the accounts created, keyed "savings", "checking" and
            "second_savings"
        """
        out = self.out
        out("===========================================")
        out("  BANK LEDGER DEMO")
        out("===========================================")
        out("")

        out("1. Creating Customers...")
        john = self._sample_customer("John", "Doe", "john.doe@email.com")
        jane = self._sample_customer("Jane", "Smith", "jane.smith@email.com")
        out(f"   Created: {john.full_name}")
        out(f"   Created: {jane.full_name}")
        out("")

        out("2. Creating Accounts...")
        savings = self.accounts.create_account(john.id, AccountType.SAVINGS, Decimal('5000.00'))
        checking = self.accounts.create_account(john.id, AccountType.CHECKING, Decimal('2000.00'))
        second = self.accounts.create_account(jane.id, AccountType.SAVINGS, Decimal('3000.00'))
        for account in (savings, checking, second):
            self._show_account(account)
        out("")

        out("3. Performing Transactions...")
        out("   Depositing $500 to savings account...")
        self.accounts.deposit(savings.id, Decimal('500.00'), "Salary deposit")
        self._show_balance(savings.id)

        out("   Withdrawing $200 from savings account...")
        self.accounts.withdraw(savings.id, Decimal('200.00'), "ATM withdrawal")
        self._show_balance(savings.id)

        out("   Transferring $1000 from savings to checking...")
        self.accounts.transfer(savings.id, checking.id, Decimal('1000.00'))
        self._show_balance(savings.id)
        self._show_balance(checking.id)
        out("")

        out("4. Applying Interest...")
        self.accounts.apply_interest(savings.id)
        self._show_balance(savings.id)
        out("")

        out("5. Transaction History for Savings Account:")
        self._show_history(savings.id)
        out("")

        out("6. System Statistics:")
        self._show_statistics()
        out("")

        out("7. Account Analysis:")
        self._show_analysis()
        out("")

        return {"savings": savings.id, "checking": checking.id, "second_savings": second.id}

    def _sample_customer(self, first_name: str, last_name: str, email: str) -> Customer:
        return self.customers.create_customer(
            first_name,
            last_name,
            email,
            "+1234567890",
            date(1990, 1, 15),
            "123 Main St, City, State 12345"
        )

    def _show_account(self, account: Account) -> None:
        self.out(f"   Account ID: {account.id}")
        self.out(f"   Type: {account.account_type.display_name}")
        self.out(f"   Balance: {format_usd(account.balance)}")

    def _show_balance(self, account_id: str) -> None:
        self.out(f"   Current Balance: {format_usd(self.accounts.get_balance(account_id))}")

    def _show_history(self, account_id: str) -> None:
        for t in self.transactions.get_account_transactions(account_id):
            self.out(
                f"   {format_datetime(t.timestamp)} | {t.transaction_type.display_name} | "
                f"{format_usd(t.amount)} | Balance: {format_usd(t.balance_after)}"
            )

    def _show_statistics(self) -> None:
        summary = self.system.summary()
        self.out(f"   Total Customers: {summary.total_customers}")
        self.out(f"   Total Accounts: {summary.total_accounts}")
        self.out(f"   Active Accounts: {summary.active_accounts}")
        self.out(f"   Total Balance: {format_usd(summary.total_balance)}")

    def _show_analysis(self) -> None:
        accounts = self.accounts.get_all_accounts()
        summary = self.system.summary()

        self.out(f"   High-value accounts (balance > {format_usd(HIGH_VALUE_THRESHOLD)}):")
        for account in high_value_accounts(accounts, HIGH_VALUE_THRESHOLD):
            self.out(f"     - {account.id}: {format_usd(account.balance)}")

        self.out("")
        self.out("   Account types distribution:")
        for name, count in summary.accounts_by_type.items():
            self.out(f"     - {name}: {count}")

        self.out("")
        self.out(f"   Average balance: {summary.average_balance}")

    def run_interactive(self, read: Callable[[str], str] = input) -> None:
        """Menu loop until the user chooses 0 or input ends"""
        actions = {
            "1": self._menu_create_customer,
            "2": self._menu_create_account,
            "3": self._menu_deposit,
            "4": self._menu_withdraw,
            "5": self._menu_transfer,
            "6": self._menu_view_account,
            "7": self._menu_view_transactions,
        }

        while True:
            self.out("")
            self.out("--- Interactive Menu ---")
            self.out("1. Create Customer")
            self.out("2. Create Account")
            self.out("3. Deposit")
            self.out("4. Withdraw")
            self.out("5. Transfer")
            self.out("6. View Account")
            self.out("7. View Transactions")
            self.out("0. Exit")

            try:
                choice = read("Choose an option: ").strip()
            except EOFError:
                choice = "0"

            if choice == "0":
                self.out("Exiting...")
                return

            action = actions.get(choice)
            if action is None:
                self.out("Invalid option. Try again.")
                continue

            try:
                action(read)
            except EOFError:
                self.out("Exiting...")
                return
            except (LedgerError, ValueError) as e:
                self.out(f"Error: {e}")

    def _menu_create_customer(self, read: Callable[[str], str]) -> None:
        customer = self.customers.create_customer(
            read("First name: ").strip(),
            read("Last name: ").strip(),
            read("Email: ").strip(),
            read("Phone number: ").strip(),
            date.fromisoformat(read("Date of birth (YYYY-MM-DD): ").strip()),
            read("Address: ").strip() or None
        )
        self.out(f"Created customer {customer.full_name} ({customer.id})")

    def _menu_create_account(self, read: Callable[[str], str]) -> None:
        customer_id = read("Customer ID: ").strip()
        self.customers.get_customer(customer_id)
        names = ", ".join(t.name for t in AccountType)
        type_name = read(f"Account type ({names}): ").strip().upper()
        try:
            account_type = AccountType[type_name]
        except KeyError:
            raise ValueError(f"Unknown account type: {type_name}") from None
        amount = decimal_from_string(read("Initial deposit: "))
        account = self.accounts.create_account(customer_id, account_type, amount)
        self._show_account(account)

    def _menu_deposit(self, read: Callable[[str], str]) -> None:
        account_id = read("Account ID: ").strip()
        amount = decimal_from_string(read("Amount: "))
        transaction = self.accounts.deposit(account_id, amount, read("Description: ").strip() or None)
        self.out(f"Deposited {format_usd(transaction.amount)}. "
                 f"Balance: {format_usd(transaction.balance_after)}")

    def _menu_withdraw(self, read: Callable[[str], str]) -> None:
        account_id = read("Account ID: ").strip()
        amount = decimal_from_string(read("Amount: "))
        transaction = self.accounts.withdraw(account_id, amount, read("Description: ").strip() or None)
        self.out(f"Withdrew {format_usd(transaction.amount)}. "
                 f"Balance: {format_usd(transaction.balance_after)}")

    def _menu_transfer(self, read: Callable[[str], str]) -> None:
        source = read("From account ID: ").strip()
        destination = read("To account ID: ").strip()
        amount = decimal_from_string(read("Amount: "))
        debit, _ = self.accounts.transfer(source, destination, amount)
        self.out(f"Transferred {format_usd(debit.amount)} (reference {debit.reference})")

    def _menu_view_account(self, read: Callable[[str], str]) -> None:
        account = self.accounts.get_account(read("Account ID: ").strip())
        self._show_account(account)
        self.out(f"   Active: {'yes' if account.is_active else 'no'}")

    def _menu_view_transactions(self, read: Callable[[str], str]) -> None:
        account_id = read("Account ID: ").strip()
        self.accounts.get_account(account_id)
        if self.transactions.get_transaction_count(account_id) == 0:
            self.out("   No transactions")
            return
        self._show_history(account_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bank_ledger",
        description="In-memory bank ledger demo"
    )
    parser.add_argument("--interactive", action="store_true",
                        help="open the interactive menu after the scenario")
    parser.add_argument("--serve", action="store_true",
                        help="start the HTTP API instead of running the scenario")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit status"""
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(config.log_level, config.log_format)

    if args.serve:
        from .api import run_server
        logger.info("Starting API on %s:%s", config.api_host, config.api_port)
        run_server(host=config.api_host, port=config.api_port)
        return 0

    logger.info("Starting bank ledger demo")
    try:
        demo = LedgerDemo()
        demo.run()
        if args.interactive:
            demo.run_interactive()
    except KeyboardInterrupt:
        logger.info("Demo interrupted")
        return 130
    except Exception:
        logger.exception("Error during demo")
        return 1

    print("===========================================")
    print("  Demo completed successfully!")
    print("===========================================")
    logger.info("Bank ledger demo stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
