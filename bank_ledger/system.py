"""
Ledger system wiring: one storage backend shared by every repository and the
services built on top of it.
"""

from typing import Optional

from .storage import InMemoryStorage, StorageInterface
from .config import LedgerConfig, get_config
from .locking import AccountLocks
from .accounts import AccountRepository, AccountService
from .customers import CustomerRepository, CustomerService
from .transactions import TransactionRepository, TransactionService
from .reporting import LedgerSummary, summarize


class LedgerSystem:
    """Ledger with all components initialized"""

    def __init__(self, storage: Optional[StorageInterface] = None,
                 config: Optional[LedgerConfig] = None):
        self.config = config or get_config()
        self.storage = storage if storage is not None else InMemoryStorage()

        self.account_repository = AccountRepository(self.storage)
        self.customer_repository = CustomerRepository(self.storage)
        self.transaction_repository = TransactionRepository(self.storage)

        self.transaction_service = TransactionService(self.transaction_repository)
        self.account_service = AccountService(
            self.account_repository, self.transaction_service,
            config=self.config, locks=AccountLocks()
        )
        self.customer_service = CustomerService(self.customer_repository, config=self.config)

    def summary(self) -> LedgerSummary:
        return summarize(
            self.account_service.get_all_accounts(),
            self.customer_service.get_total_customer_count()
        )

    def reset(self) -> None:
        """Discard every stored record"""
        self.account_repository.clear()
        self.customer_repository.clear()
        self.transaction_repository.clear()

    def close(self) -> None:
        self.storage.close()
