"""
Ledger Error Taxonomy

Every business-rule violation raised by the ledger is a LedgerError tagged
with an ErrorCode. Errors are raised where they are detected and are never
retried by the ledger itself.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Tags for ledger failures"""
    INVALID_AMOUNT = "invalid_amount"
    INVALID_IDENTIFIER = "invalid_identifier"
    INVALID_TRANSACTION = "invalid_transaction"
    ACCOUNT_NOT_FOUND = "account_not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_EMAIL = "duplicate_email"
    CUSTOMER_NOT_FOUND = "customer_not_found"
    TRANSACTION_NOT_FOUND = "transaction_not_found"


class LedgerError(Exception):
    """Base exception for all ledger errors"""
    code: ErrorCode = ErrorCode.INVALID_TRANSACTION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Render the error for API responses"""
        return {"code": self.code.value, "message": self.message}


class InvalidAmountError(LedgerError, ValueError):
    """Raised when an amount is missing, non-positive or out of bounds"""
    code = ErrorCode.INVALID_AMOUNT

    def __init__(self, message: str, amount: Any = None, label: str = "Amount"):
        super().__init__(message)
        self.amount = amount
        self.label = label


class InvalidIdentifierError(LedgerError, ValueError):
    """Raised when an identifier is missing or blank"""
    code = ErrorCode.INVALID_IDENTIFIER

    def __init__(self, message: str, label: str = "Identifier"):
        super().__init__(message)
        self.label = label


class InvalidTransactionError(LedgerError):
    """
    Raised when an operation breaks a business rule: same-account transfer,
    inactive account, or malformed entity input.
    """
    code = ErrorCode.INVALID_TRANSACTION

    def __init__(self, message: str):
        super().__init__(message)
        self.reason = message


class AccountNotFoundError(LedgerError):
    """Raised when an account id is missing from the store"""
    code = ErrorCode.ACCOUNT_NOT_FOUND

    def __init__(self, account_id: str):
        super().__init__(f"Account not found: {account_id}")
        self.account_id = account_id


class InsufficientFundsError(LedgerError):
    """Raised when a debit would take the balance below zero"""
    code = ErrorCode.INSUFFICIENT_FUNDS

    def __init__(self, account_id: str, requested: Decimal, available: Decimal):
        super().__init__(
            f"Insufficient funds in account {account_id}. "
            f"Requested: {requested}, Available: {available}"
        )
        self.account_id = account_id
        self.requested = requested
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["requested"] = str(self.requested)
        result["available"] = str(self.available)
        return result


class DuplicateEmailError(LedgerError):
    """Raised when a customer email is already registered"""
    code = ErrorCode.DUPLICATE_EMAIL

    def __init__(self, email: str):
        super().__init__(f"Customer with email {email} already exists")
        self.email = email


class CustomerNotFoundError(LedgerError):
    """Raised when a customer id or email is unknown"""
    code = ErrorCode.CUSTOMER_NOT_FOUND

    def __init__(self, customer_id: Optional[str] = None, email: Optional[str] = None):
        if email is not None:
            message = f"Customer not found with email: {email}"
        else:
            message = f"Customer not found: {customer_id}"
        super().__init__(message)
        self.customer_id = customer_id
        self.email = email


class TransactionNotFoundError(LedgerError):
    """Raised when a transaction id is unknown"""
    code = ErrorCode.TRANSACTION_NOT_FOUND

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id
