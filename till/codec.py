"""
Record encoding for the persistence collaborator.

Records are plain dicts with camelCase keys, numbers as JSON numbers (exact
decimal strings past float precision), ids as strings and timestamps as
integer milliseconds. Loading never raises: a malformed or partial collection
is replaced by its empty default and a warning is logged, so a corrupt store
cannot keep the till from starting.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Tuple

from pydantic import ValidationError

from .logs import json_log
from .models import Catalog, Item, Transaction

_LOAD_ERRORS = (ValidationError, TypeError, ValueError, AttributeError)


def _json_default(v):
    if isinstance(v, Decimal):
        if v == v.to_integral_value():
            return int(v)
        f = float(v)
        # Beyond float precision the exact digits go out as a string; loading accepts both.
        return f if Decimal(repr(f)) == v else str(v)
    raise TypeError(f"not JSON serializable: {type(v).__name__}")


def to_json(obj: Any) -> str:
    return json.dumps(obj, default=_json_default, separators=(",", ":"))


def from_json(text: str) -> Any:
    # Decimals straight from the text; no binary float ever reaches the core.
    return json.loads(text, parse_float=Decimal)


def _record(model) -> dict:
    return model.model_dump(mode="python", by_alias=True)


def dump_catalog(catalog: Catalog) -> list:
    return [_record(it) for it in catalog.items]


def dump_history(history: Tuple[Transaction, ...]) -> list:
    return [_record(t) for t in history]


def dump_cart(cart: Transaction) -> dict:
    return _record(cart)


def _rejected(kind: str, ex: Exception) -> None:
    json_log("warn", "till.codec.rejected", kind=kind, error=str(ex))


def load_catalog(raw) -> Catalog:
    if raw is None:
        return Catalog()
    try:
        if not isinstance(raw, list):
            raise TypeError("catalog must be a list of records")
        items = tuple(Item.model_validate(r) for r in raw)
        ids = [it.id for it in items]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate item id")
        return Catalog(items=items)
    except _LOAD_ERRORS as ex:
        _rejected("catalog", ex)
        return Catalog()


def load_history(raw) -> Tuple[Transaction, ...]:
    if raw is None:
        return ()
    try:
        if not isinstance(raw, list):
            raise TypeError("history must be a list of records")
        out = tuple(Transaction.model_validate(r) for r in raw)
        if any(t.is_open for t in out):
            raise ValueError("history record without createdAt")
        return out
    except _LOAD_ERRORS as ex:
        _rejected("history", ex)
        return ()


def load_cart(raw) -> Transaction:
    if raw is None:
        return Transaction()
    try:
        if not isinstance(raw, dict):
            raise TypeError("cart must be a record")
        cart = Transaction.model_validate(raw)
        if not cart.is_open:
            raise ValueError("cart record has createdAt")
        return cart
    except _LOAD_ERRORS as ex:
        _rejected("cart", ex)
        return Transaction()
