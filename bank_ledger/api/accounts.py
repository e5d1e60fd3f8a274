"""
Account management endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, status

from .deps import LedgerSystem, get_ledger_system, http_error
from .schemas import (
    AmountRequest, CreateAccountRequest, account_to_dict, transaction_to_dict
)
from ..accounts import AccountType
from ..errors import LedgerError


router = APIRouter()


def _account_type(name: str) -> AccountType:
    try:
        return AccountType[name.upper()]
    except KeyError:
        raise HTTPException(
            status_code=400,
            detail={"code": "invalid_account_type", "message": f"Unknown account type: {name}"}
        ) from None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(
    request: CreateAccountRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Open a new account with an initial deposit"""
    account_type = _account_type(request.account_type)
    try:
        account = system.account_service.create_account(
            customer_id=request.customer_id,
            account_type=account_type,
            initial_deposit=request.initial_deposit
        )
    except LedgerError as e:
        raise http_error(e)

    return account_to_dict(account)


@router.get("")
async def list_accounts(
    active_only: bool = False,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """List accounts"""
    if active_only:
        accounts = system.account_service.get_active_accounts()
    else:
        accounts = system.account_service.get_all_accounts()
    return {"accounts": [account_to_dict(a) for a in accounts]}


@router.get("/{account_id}")
async def get_account(
    account_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get account details"""
    try:
        account = system.account_service.get_account(account_id)
    except LedgerError as e:
        raise http_error(e)
    return account_to_dict(account)


@router.get("/{account_id}/balance")
async def get_balance(
    account_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        balance = system.account_service.get_balance(account_id)
    except LedgerError as e:
        raise http_error(e)
    return {"account_id": account_id, "balance": str(balance)}


@router.get("/{account_id}/transactions")
async def get_account_transactions(
    account_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Transaction history for an account, most recent first"""
    try:
        system.account_service.get_account(account_id)
    except LedgerError as e:
        raise http_error(e)

    transactions = system.transaction_service.get_account_transactions(account_id)
    return {
        "transactions": [transaction_to_dict(t) for t in transactions],
        "total_deposits": str(system.transaction_service.get_total_deposits(account_id)),
        "total_withdrawals": str(system.transaction_service.get_total_withdrawals(account_id))
    }


@router.post("/{account_id}/deposit")
async def deposit(
    account_id: str,
    request: AmountRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Deposit funds"""
    try:
        transaction = system.account_service.deposit(
            account_id, request.amount, request.description
        )
    except LedgerError as e:
        raise http_error(e)
    return transaction_to_dict(transaction)


@router.post("/{account_id}/withdraw")
async def withdraw(
    account_id: str,
    request: AmountRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Withdraw funds"""
    try:
        transaction = system.account_service.withdraw(
            account_id, request.amount, request.description
        )
    except LedgerError as e:
        raise http_error(e)
    return transaction_to_dict(transaction)


@router.post("/{account_id}/fees")
async def charge_fee(
    account_id: str,
    request: AmountRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Charge a service fee"""
    try:
        transaction = system.account_service.charge_fee(
            account_id, request.amount, request.description
        )
    except LedgerError as e:
        raise http_error(e)
    return transaction_to_dict(transaction)


@router.post("/{account_id}/interest")
async def apply_interest(
    account_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Credit interest at the account type's rate"""
    try:
        transaction = system.account_service.apply_interest(account_id)
    except LedgerError as e:
        raise http_error(e)

    if transaction is None:
        return {"account_id": account_id, "interest": "0.00", "transaction": None}
    return {
        "account_id": account_id,
        "interest": str(transaction.amount),
        "transaction": transaction_to_dict(transaction)
    }


@router.post("/{account_id}/activate")
async def activate_account(
    account_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        account = system.account_service.activate_account(account_id)
    except LedgerError as e:
        raise http_error(e)
    return account_to_dict(account)


@router.post("/{account_id}/deactivate")
async def deactivate_account(
    account_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        account = system.account_service.deactivate_account(account_id)
    except LedgerError as e:
        raise http_error(e)
    return account_to_dict(account)
