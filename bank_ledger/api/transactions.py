"""
Transaction endpoints
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from .deps import LedgerSystem, get_ledger_system, http_error
from .schemas import TransferRequest, transaction_to_dict
from ..transactions import TransactionType
from ..errors import LedgerError


router = APIRouter()


@router.post("/transfer")
async def transfer(
    request: TransferRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Transfer funds between two accounts"""
    try:
        debit, credit = system.account_service.transfer(
            request.from_account_id,
            request.to_account_id,
            request.amount
        )
    except LedgerError as e:
        raise http_error(e)

    return {
        "reference": debit.reference,
        "debit": transaction_to_dict(debit),
        "credit": transaction_to_dict(credit)
    }


@router.get("")
async def search_transactions(
    account_id: Optional[str] = None,
    transaction_type: Optional[str] = None,
    reference: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """
    Search the transaction log. A reference returns the legs sharing it; a
    type returns all transactions of that type; otherwise the optional account
    and time bounds apply.
    """
    service = system.transaction_service

    if reference:
        transactions = service.get_transactions_by_reference(reference)
    elif transaction_type:
        try:
            kind = TransactionType[transaction_type.upper()]
        except KeyError:
            raise HTTPException(
                status_code=400,
                detail={"code": "invalid_transaction_type",
                        "message": f"Unknown transaction type: {transaction_type}"}
            ) from None
        transactions = service.get_transactions_by_type(kind)
        if account_id:
            transactions = [t for t in transactions if t.account_id == account_id]
    else:
        transactions = service.get_transactions_by_date_range(start, end, account_id)

    return {"transactions": [transaction_to_dict(t) for t in transactions]}


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        transaction = system.transaction_service.get_transaction(transaction_id)
    except LedgerError as e:
        raise http_error(e)
    return transaction_to_dict(transaction)
