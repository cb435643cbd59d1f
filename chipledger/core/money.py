"""Currency-style amount parsing and formatting."""
from __future__ import annotations
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from chipledger.config import settings

Number = Union[int, float, str, Decimal]

# Optional sign, optional currency symbol, digits with optional thousands commas.
_AMOUNT_RE = re.compile(
    r"^(?P<sign>[-+]?)\s*(?P<symbol>[^\d\s.,+-]{1,3})?\s*"
    r"(?P<number>\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?|\.\d+)$"
)


class InvalidAmountError(ValueError):
    """Raised when text cannot be read as a monetary amount."""


def to_decimal(value: Number) -> Decimal:
    """Coerce a number to Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a valid amount")
    return Decimal(str(value))


def parse_amount(text: Number, allow_negative: bool = False) -> Decimal:
    """
    Read user-entered amounts such as "1000", "1,000.50" or "¥ 1,000".

    Numbers pass straight through to_decimal(). Raises InvalidAmountError for
    empty, malformed or (unless allow_negative) negative input.
    """
    if isinstance(text, (int, float, Decimal)) and not isinstance(text, bool):
        amount = to_decimal(text)
        if not amount.is_finite():
            raise InvalidAmountError(f"Amount must be finite: {text!r}")
    elif isinstance(text, str):
        match = _AMOUNT_RE.match(text.strip())
        if not match:
            raise InvalidAmountError(f"Not a valid amount: {text!r}")
        try:
            amount = Decimal(match.group("number").replace(",", ""))
        except InvalidOperation as e:
            raise InvalidAmountError(f"Not a valid amount: {text!r}") from e
        if match.group("sign") == "-":
            amount = -amount
    else:
        raise InvalidAmountError(f"Unsupported amount type: {type(text).__name__}")

    if amount < 0 and not allow_negative:
        raise InvalidAmountError(f"Amount cannot be negative: {text!r}")
    return amount


def format_amount(value: Number, symbol: Optional[str] = None) -> str:
    """Format like the input widgets: '¥ 1,000', '-¥ 200', '¥ 0.5'."""
    if symbol is None:
        symbol = settings.currency_symbol
    amount = to_decimal(value)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if amount == amount.to_integral_value():
        body = f"{int(amount):,}"
    else:
        body = f"{amount.normalize():,f}"
    return f"{sign}{symbol} {body}"
