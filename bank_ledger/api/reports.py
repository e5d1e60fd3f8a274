"""
Reporting endpoints
"""

from decimal import Decimal, InvalidOperation
from fastapi import APIRouter, Depends, HTTPException

from .deps import LedgerSystem, get_ledger_system
from .schemas import account_to_dict
from ..reporting import high_value_accounts


router = APIRouter()


@router.get("/summary")
async def get_summary(system: LedgerSystem = Depends(get_ledger_system)):
    """System-wide statistics"""
    return system.summary().to_dict()


@router.get("/high-value")
async def get_high_value_accounts(
    threshold: str = "4000",
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Accounts with a balance above the threshold"""
    try:
        limit = Decimal(threshold)
        if not limit.is_finite():
            raise InvalidOperation(threshold)
    except InvalidOperation:
        raise HTTPException(
            status_code=400,
            detail={"code": "invalid_amount", "message": f"Invalid threshold: {threshold}"}
        ) from None

    accounts = high_value_accounts(system.account_service.get_all_accounts(), limit)
    return {"threshold": str(limit), "accounts": [account_to_dict(a) for a in accounts]}
