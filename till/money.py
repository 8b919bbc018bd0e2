from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def to_decimal(v) -> Decimal:
    """
    Parse a user/stored value into a finite Decimal.

    Floats go through `str` so 0.1 becomes Decimal("0.1"), not its binary expansion.
    Raises ValueError for booleans, blanks, garbage and NaN/Infinity.
    """
    if isinstance(v, bool) or v is None:
        raise ValueError("a number is required")
    if isinstance(v, Decimal):
        d = v
    else:
        raw = str(v).strip()
        if not raw:
            raise ValueError("a number is required")
        try:
            d = Decimal(raw)
        except InvalidOperation:
            raise ValueError(f"not a number: {raw!r}")
    if not d.is_finite():
        raise ValueError("number must be finite")
    return d


def q2(v: Decimal) -> Decimal:
    # Presentation only. Intermediate sums stay unrounded.
    return (v or ZERO).quantize(CENTS, rounding=ROUND_HALF_UP)


def unit_total(unit_price: Decimal, fee_percent: Decimal) -> Decimal:
    return unit_price + (unit_price * fee_percent) / HUNDRED


def line_item_total(line) -> Decimal:
    """(unit_price + unit_price * fee_percent / 100) * quantity, unrounded."""
    return unit_total(line.unit_price, line.fee_percent) * line.quantity


def transaction_subtotal(lines: Iterable) -> Decimal:
    return sum((line_item_total(it) for it in (lines or ())), ZERO)
