"""
Shared API dependencies and error translation
"""

from fastapi import HTTPException

from ..system import LedgerSystem
from ..errors import ErrorCode, LedgerError


NOT_FOUND_CODES = {
    ErrorCode.ACCOUNT_NOT_FOUND,
    ErrorCode.CUSTOMER_NOT_FOUND,
    ErrorCode.TRANSACTION_NOT_FOUND,
}


ledger_system = LedgerSystem()


# Dependency to get the ledger system
def get_ledger_system() -> LedgerSystem:
    return ledger_system


def status_for(error: LedgerError) -> int:
    """HTTP status for a ledger error"""
    if error.code in NOT_FOUND_CODES:
        return 404
    if error.code == ErrorCode.DUPLICATE_EMAIL:
        return 409
    return 400


def http_error(error: LedgerError) -> HTTPException:
    return HTTPException(status_code=status_for(error), detail=error.to_dict())
