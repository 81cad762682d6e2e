"""
Amount Handling Module

Single-currency amount parsing, rounding and display. The ATM operates in
Indian Rupees only; every balance and transaction amount is a Decimal
rounded to the currency precision. NEVER uses float for monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from enum import Enum
from typing import Union
import re

# Set global decimal context for financial precision
getcontext().prec = 28  # High precision for financial calculations


class Currency(Enum):
    """Supported currency with precision and display symbol"""
    INR = ("INR", 2, "Rs.")  # Indian Rupee, 2 decimal places

    def __init__(self, code: str, precision: int, symbol: str):
        self.code = code
        self.precision = precision
        self.symbol = symbol


DEFAULT_CURRENCY = Currency.INR

AmountLike = Union[Decimal, int, float, str]


def to_amount(value: AmountLike, currency: Currency = DEFAULT_CURRENCY) -> Decimal:
    """
    Convert a raw value into a Decimal rounded to currency precision

    Floats go through ``str`` first so 0.1 stays 0.1.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to an amount")
    if isinstance(value, str):
        value = decimal_from_string(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Cannot convert {value!r} to an amount")
    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number, got {value!r}")
    try:
        return quantize(amount, currency)
    except InvalidOperation:
        raise ValueError(f"Amount {value!r} is out of range")


def quantize(value: Decimal, currency: Currency = DEFAULT_CURRENCY) -> Decimal:
    """Round decimal to currency precision"""
    return value.quantize(
        Decimal('0.1') ** currency.precision,
        rounding=ROUND_HALF_UP
    )


def format_amount(value: Decimal, currency: Currency = DEFAULT_CURRENCY) -> str:
    """Format for display, e.g. ``Rs.7500.00``"""
    return f"{currency.symbol}{quantize(value, currency):.{currency.precision}f}"


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Args:
        value: String representation of number, may carry a currency symbol

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    # Strip currency symbol prefix and whitespace
    clean_value = value.strip()
    for currency in Currency:
        if clean_value.startswith(currency.symbol):
            clean_value = clean_value[len(currency.symbol):]
    clean_value = re.sub(r'[^\d.,\-+eE]', '', clean_value)

    # Comma is a thousands separator (e.g. 1,00,000.00)
    clean_value = clean_value.replace(',', '')

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")
