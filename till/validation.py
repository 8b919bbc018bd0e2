from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BeforeValidator, StringConstraints

from .money import to_decimal


def _to_lower_str(v):
    if v is None:
        return v
    return str(v).strip().lower()


def _to_clean_str(v):
    if v is None:
        return v
    return str(v).strip()


def _non_negative(v) -> Decimal:
    d = to_decimal(v)
    if d < 0:
        raise ValueError("must be >= 0")
    return d


def _positive(v) -> Decimal:
    d = to_decimal(v)
    if d <= 0:
        raise ValueError("must be > 0")
    return d


def _positive_int(v) -> int:
    # Accept 2, "2" and Decimal("2"); reject 1.5, True and anything < 1.
    d = to_decimal(v)
    if d != d.to_integral_value():
        raise ValueError("must be a whole number")
    n = int(d)
    if n < 1:
        raise ValueError("must be >= 1")
    return n


TenderType = Annotated[Literal["cash", "credit", "debit"], BeforeValidator(_to_lower_str)]
Money = Annotated[Decimal, BeforeValidator(_non_negative)]
PositiveMoney = Annotated[Decimal, BeforeValidator(_positive)]
Percent = Annotated[Decimal, BeforeValidator(_non_negative)]
Quantity = Annotated[int, BeforeValidator(_positive_int)]
ItemName = Annotated[str, BeforeValidator(_to_clean_str), StringConstraints(min_length=1, max_length=200)]


def describe(exc) -> str:
    """Flatten a pydantic ValidationError into `field: message; field: message`."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in (err.get("loc") or ()))
        msg = str(err.get("msg") or "invalid")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid value"
