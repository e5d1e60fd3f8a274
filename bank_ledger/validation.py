"""
Validation Module

Pure checks for amounts and identifiers. Nothing here touches storage.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import InvalidAmountError, InvalidIdentifierError


MIN_TRANSACTION_AMOUNT = Decimal('0.01')
MAX_TRANSACTION_AMOUNT = Decimal('1000000.00')


def to_decimal(value: Any, label: str = "Amount") -> Decimal:
    """
    Convert a value to Decimal without going through binary floats

    Raises:
        InvalidAmountError: If the value is None, a float, or not numeric
    """
    if value is None:
        raise InvalidAmountError(f"{label} amount cannot be null", value, label)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(f"{label} amount must be an exact decimal", value, label)
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmountError(f"{label} amount is not a number: {value!r}", value, label) from None


def validate_amount(
    amount: Any,
    label: str = "Transaction",
    minimum: Decimal = MIN_TRANSACTION_AMOUNT,
    maximum: Decimal = MAX_TRANSACTION_AMOUNT
) -> Decimal:
    """
    Validate a monetary amount against the transaction bounds

    Args:
        amount: Amount to check (Decimal, int or numeric string)
        label: Operation name used in error messages
        minimum: Smallest accepted amount (inclusive)
        maximum: Largest accepted amount (inclusive)

    Returns:
        The amount as a Decimal

    Raises:
        InvalidAmountError: If the amount is null, non-positive or out of bounds
    """
    value = to_decimal(amount, label)

    if not value.is_finite():
        raise InvalidAmountError(f"{label} amount must be finite", amount, label)
    if value <= 0:
        raise InvalidAmountError(f"{label} amount must be positive", amount, label)
    if value < minimum:
        raise InvalidAmountError(f"{label} amount must be at least {minimum}", amount, label)
    if value > maximum:
        raise InvalidAmountError(f"{label} amount cannot exceed {maximum}", amount, label)

    return value


def validate_id(value: Any, label: str = "Identifier") -> str:
    """Reject None, empty and whitespace-only identifiers"""
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidIdentifierError(f"{label} cannot be null or empty", label)
    return value
