"""
Pydantic schemas for API requests and responses
"""

from datetime import date
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from ..accounts import Account
from ..customers import Customer
from ..transactions import Transaction


# Customer schemas
class CreateCustomerRequest(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone_number: str
    date_of_birth: date
    address: Optional[str] = None


# Account schemas
class CreateAccountRequest(BaseModel):
    customer_id: str
    account_type: str = Field(..., description="SAVINGS, CHECKING, FIXED_DEPOSIT or MONEY_MARKET")
    initial_deposit: str = Field(..., description="Decimal amount as string")


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")
    description: Optional[str] = None


# Transaction schemas
class TransferRequest(BaseModel):
    from_account_id: str
    to_account_id: str
    amount: str = Field(..., description="Decimal amount as string")


def customer_to_dict(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "full_name": customer.full_name,
        "email": customer.email,
        "phone_number": customer.phone_number,
        "date_of_birth": customer.date_of_birth.isoformat(),
        "age": customer.age,
        "address": customer.address,
        "is_active": customer.is_active,
        "created_at": customer.created_at.isoformat()
    }


def account_to_dict(account: Account) -> Dict[str, Any]:
    return {
        "id": account.id,
        "customer_id": account.customer_id,
        "account_type": account.account_type.name,
        "account_type_name": account.account_type.display_name,
        "interest_rate": str(account.interest_rate),
        "balance": str(account.balance),
        "is_active": account.is_active,
        "created_at": account.created_at.isoformat(),
        "updated_at": account.updated_at.isoformat()
    }


def transaction_to_dict(transaction: Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "account_id": transaction.account_id,
        "transaction_type": transaction.transaction_type.name,
        "amount": str(transaction.amount),
        "balance_after": str(transaction.balance_after),
        "description": transaction.description,
        "reference": transaction.reference,
        "timestamp": transaction.timestamp.isoformat()
    }
