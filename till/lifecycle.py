"""
Cart and transaction state transitions.

A transaction is Open while `created_at` is None. `complete()` stamps it, fixes
`completed` from the balance at that moment and freezes it. Every function here
takes values and returns new ones; the caller owns and persists the Register.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from pydantic import ValidationError

from .catalog import get_item
from .errors import InvalidLineItem, InvalidPayment, NotFound, TransactionFrozen
from .ledger import new_payment, remaining
from .logs import json_log
from .models import Catalog, Item, LineItem, Payment, Register, Transaction, now_ms
from .validation import describe

EDITABLE_LINE_FIELDS = {"name", "unit_price", "fee_percent", "quantity"}


def _require_open(txn: Transaction) -> None:
    if not txn.is_open:
        raise TransactionFrozen(f"transaction {txn.id} is completed and cannot be changed")


def _line(fields: dict) -> LineItem:
    try:
        return LineItem(**fields)
    except ValidationError as ex:
        raise InvalidLineItem(describe(ex))


def _require_line(txn: Transaction, line_id: str) -> LineItem:
    line = txn.find_line(line_id)
    if line is None:
        raise NotFound(f"line item {line_id} not found")
    return line


def new_transaction() -> Transaction:
    return Transaction()


def add_line_item(txn: Transaction, item: Item, quantity=1) -> Transaction:
    """Copy `item` into the cart, or bump the quantity of the line with the same id."""
    _require_open(txn)
    incoming = _line({**item.model_dump(), "quantity": quantity})
    existing = txn.find_line(item.id)
    if existing is None:
        lines = txn.line_items + (incoming,)
    else:
        merged = existing.model_copy(update={"quantity": existing.quantity + incoming.quantity})
        lines = tuple(merged if it.id == item.id else it for it in txn.line_items)
    return txn.model_copy(update={"line_items": lines})


def remove_line_item(txn: Transaction, line_id: str) -> Transaction:
    _require_open(txn)
    _require_line(txn, line_id)
    return txn.model_copy(update={"line_items": tuple(it for it in txn.line_items if it.id != line_id)})


def edit_line_item(txn: Transaction, line_id: str, **fields) -> Transaction:
    _require_open(txn)
    current = _require_line(txn, line_id)
    unknown = sorted(set(fields) - EDITABLE_LINE_FIELDS)
    if unknown:
        raise InvalidLineItem(f"unknown line item field(s): {', '.join(unknown)}")
    updated = _line({**current.model_dump(), **fields})
    lines = tuple(updated if it.id == line_id else it for it in txn.line_items)
    return txn.model_copy(update={"line_items": lines})


def clear(txn: Transaction) -> Transaction:
    _require_open(txn)
    return new_transaction()


def _coerce_payments(payments: Iterable) -> Tuple[Payment, ...]:
    out = []
    for p in payments or ():
        if isinstance(p, Payment):
            out.append(p)
            continue
        try:
            out.append(Payment.model_validate(p))
        except ValidationError as ex:
            raise InvalidPayment(describe(ex))
    return tuple(out)


def add_payment(txn: Transaction, tender, amount, now: Optional[int] = None) -> Transaction:
    _require_open(txn)
    payment = new_payment(tender, amount, now=now)
    return txn.model_copy(update={"payments": txn.payments + (payment,)})


def replace_payments(txn: Transaction, payments: Iterable) -> Transaction:
    _require_open(txn)
    return txn.model_copy(update={"payments": _coerce_payments(payments)})


def complete(txn: Transaction, payments: Optional[Iterable] = None, now: Optional[int] = None) -> Transaction:
    """
    Open -> Completed.

    `payments` is the final tender list; when omitted the payments already
    attached to the cart are used. A short payment still completes the sale
    (force-close) but leaves `completed` False.
    """
    _require_open(txn)
    if not txn.line_items:
        raise InvalidLineItem("cannot complete a transaction without line items")
    final = txn.payments if payments is None else _coerce_payments(payments)
    if not final:
        raise InvalidPayment("at least one payment is required")
    return txn.model_copy(
        update={
            "payments": final,
            "completed": remaining(txn, final) <= 0,
            "created_at": now_ms() if now is None else now,
        }
    )


def open_register(catalog: Optional[Catalog] = None) -> Register:
    return Register(catalog=catalog or Catalog(), cart=new_transaction())


def with_cart(register: Register, cart: Transaction) -> Register:
    _require_open(cart)
    return register.model_copy(update={"cart": cart})


def with_catalog(register: Register, catalog: Catalog) -> Register:
    return register.model_copy(update={"catalog": catalog})


def add_to_cart(register: Register, item_id: str, quantity=1) -> Register:
    item = get_item(register.catalog, item_id)
    return with_cart(register, add_line_item(register.cart, item, quantity))


def checkout(
    register: Register, payments: Optional[Iterable] = None, now: Optional[int] = None
) -> Tuple[Register, Transaction]:
    done = complete(register.cart, payments, now=now)
    json_log(
        "info",
        "till.checkout",
        transaction_id=done.id,
        lines=len(done.line_items),
        payments=len(done.payments),
        completed=done.completed,
    )
    nxt = register.model_copy(update={"history": (done,) + register.history, "cart": new_transaction()})
    return nxt, done


def find_transaction(register: Register, txn_id: str) -> Transaction:
    for t in register.history:
        if t.id == txn_id:
            return t
    raise NotFound(f"transaction {txn_id} not found")


def delete_transaction(register: Register, txn_id: str) -> Register:
    find_transaction(register, txn_id)
    json_log("info", "till.history.delete", transaction_id=txn_id)
    return register.model_copy(update={"history": tuple(t for t in register.history if t.id != txn_id)})
