"""
Currency Formatting Module

Display formatting for Decimal amounts. Presentation only; the ledger stores
plain Decimals and never formats.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any

from .errors import InvalidAmountError


class Currency(Enum):
    """ISO 4217 currencies with display conventions"""
    USD = ("USD", "$", 2, ".", ",", False)
    EUR = ("EUR", "€", 2, ",", " ", True)  # French grouping with a plain space
    GBP = ("GBP", "£", 2, ".", ",", False)

    def __init__(self, code: str, symbol: str, precision: int,
                 decimal_separator: str, group_separator: str, symbol_after: bool):
        self.code = code
        self.symbol = symbol
        self.precision = precision
        self.decimal_separator = decimal_separator
        self.group_separator = group_separator
        self.symbol_after = symbol_after


def _quantize(amount: Decimal, precision: int) -> Decimal:
    return amount.quantize(Decimal('0.1') ** precision, rounding=ROUND_HALF_UP)


def _grouped(amount: Decimal, precision: int, decimal_sep: str, group_sep: str) -> str:
    text = f"{abs(_quantize(amount, precision)):,.{precision}f}"
    return text.replace(",", "\x00").replace(".", decimal_sep).replace("\x00", group_sep)


def format_amount(amount: Decimal, currency: Currency = Currency.USD) -> str:
    """
    Format an amount with the currency's symbol and separators

    >>> format_amount(Decimal('1234.5'))
    '$1,234.50'
    """
    body = _grouped(amount, currency.precision,
                    currency.decimal_separator, currency.group_separator)
    sign = "-" if amount < 0 and _quantize(amount, currency.precision) != 0 else ""
    if currency.symbol_after:
        return f"{sign}{body} {currency.symbol}"
    return f"{sign}{currency.symbol}{body}"


def format_usd(amount: Decimal) -> str:
    return format_amount(amount, Currency.USD)


def format_eur(amount: Decimal) -> str:
    return format_amount(amount, Currency.EUR)


def format_gbp(amount: Decimal) -> str:
    return format_amount(amount, Currency.GBP)


def format_with_symbol(amount: Decimal, symbol: str) -> str:
    """Symbol, a space, then the amount with comma grouping and two decimals"""
    return f"{symbol} {_quantize(amount, 2):,.2f}"


def decimal_from_string(text: Any) -> Decimal:
    """
    Parse user input such as "1,234.56" or "$ 99" into a Decimal

    Raises:
        InvalidAmountError: If the text is empty or not a number
    """
    if text is None or not str(text).strip():
        raise InvalidAmountError("Amount cannot be empty", text)
    cleaned = str(text).strip().replace(",", "").lstrip("$€£").strip()
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise InvalidAmountError(f"Amount is not a number: {text!r}", text) from None
    if not value.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {text!r}", text)
    return value
