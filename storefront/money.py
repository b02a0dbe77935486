"""
Money Utilities - Safe Decimal operations for prices and cart totals.

Avoids float precision issues by using Decimal throughout.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

# Symbol goes before the amount for these
_PREFIX_SYMBOL_CURRENCIES = ("INR", "USD", "EUR", "GBP")


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Go through str so 0.1 stays 0.1
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number) -> Decimal:
    """Round a monetary value to two decimal places (half up)."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def format_money(value: Number, currency: str = "INR") -> str:
    """
    Format monetary value with currency symbol.

    Whole amounts are shown without decimals (₹2,997), others with two (₹19.99).

    Args:
        value: Value to format
        currency: Currency code (INR, USD, EUR, GBP or any other code)

    Returns:
        Formatted string with currency symbol
    """
    amount = round_money(value)
    symbol = CURRENCY_SYMBOLS.get(currency, currency)

    if amount == amount.to_integral_value():
        formatted = f"{int(amount):,}"
    else:
        formatted = f"{amount:,.2f}"

    if currency in _PREFIX_SYMBOL_CURRENCIES:
        return f"{symbol}{formatted}"
    return f"{formatted} {symbol}"
