"""
Customer management endpoints
"""

from fastapi import APIRouter, Depends, status

from .deps import LedgerSystem, get_ledger_system, http_error
from .schemas import CreateCustomerRequest, account_to_dict, customer_to_dict
from ..errors import LedgerError


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(
    request: CreateCustomerRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Register a new customer"""
    try:
        customer = system.customer_service.create_customer(
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            phone_number=request.phone_number,
            date_of_birth=request.date_of_birth,
            address=request.address
        )
    except LedgerError as e:
        raise http_error(e)

    return customer_to_dict(customer)


@router.get("")
async def list_customers(
    active_only: bool = False,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """List customers"""
    if active_only:
        customers = system.customer_service.get_all_active_customers()
    else:
        customers = system.customer_service.get_all_customers()
    return {"customers": [customer_to_dict(c) for c in customers]}


@router.get("/lookup")
async def find_customer_by_email(
    email: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Find a customer by email, ignoring case"""
    try:
        customer = system.customer_service.get_customer_by_email(email)
    except LedgerError as e:
        raise http_error(e)
    return customer_to_dict(customer)


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get customer details"""
    try:
        customer = system.customer_service.get_customer(customer_id)
    except LedgerError as e:
        raise http_error(e)
    return customer_to_dict(customer)


@router.get("/{customer_id}/accounts")
async def get_customer_accounts(
    customer_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Accounts owned by a customer"""
    accounts = system.account_service.get_customer_accounts(customer_id)
    return {"accounts": [account_to_dict(a) for a in accounts]}


@router.post("/{customer_id}/activate")
async def activate_customer(
    customer_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        customer = system.customer_service.activate_customer(customer_id)
    except LedgerError as e:
        raise http_error(e)
    return customer_to_dict(customer)


@router.post("/{customer_id}/deactivate")
async def deactivate_customer(
    customer_id: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    try:
        customer = system.customer_service.deactivate_customer(customer_id)
    except LedgerError as e:
        raise http_error(e)
    return customer_to_dict(customer)
