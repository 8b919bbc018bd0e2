from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..ledger import new_payment, remaining
from ..lifecycle import (
    add_payment,
    add_to_cart,
    checkout,
    clear,
    edit_line_item,
    remove_line_item,
    replace_payments,
    with_cart,
)
from ..money import q2
from ..receipt import build_receipt
from ..storage.local import LocalStore, get_store

router = APIRouter(prefix="/cart", tags=["cart"])


class CartLineIn(BaseModel):
    item_id: str
    quantity: int = 1


class CartLineUpdate(BaseModel):
    name: Optional[str] = None
    unit_price: Optional[Decimal] = None
    fee_percent: Optional[Decimal] = None
    quantity: Optional[int] = None


class PaymentIn(BaseModel):
    type: str
    amount: Decimal


class PaymentsIn(BaseModel):
    payments: List[PaymentIn]


class CheckoutIn(BaseModel):
    # None means "use the payments already attached to the cart".
    payments: Optional[List[PaymentIn]] = None


def _view(store: LocalStore, reg) -> dict:
    store.save_register(reg)
    return {"cart": build_receipt(reg.cart)}


@router.get("")
def get_cart(store: LocalStore = Depends(get_store)):
    reg = store.load_register()
    return {"cart": build_receipt(reg.cart)}


@router.post("/lines")
def add_cart_line(data: CartLineIn, store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        return _view(store, add_to_cart(reg, data.item_id, data.quantity))


@router.patch("/lines/{line_id}")
def edit_cart_line(line_id: str, data: CartLineUpdate, store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        cart = edit_line_item(reg.cart, line_id, **data.model_dump(exclude_unset=True))
        return _view(store, with_cart(reg, cart))


@router.delete("/lines/{line_id}")
def remove_cart_line(line_id: str, store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        return _view(store, with_cart(reg, remove_line_item(reg.cart, line_id)))


@router.post("/clear")
def clear_cart(store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        return _view(store, with_cart(reg, clear(reg.cart)))


@router.post("/payments")
def add_cart_payment(data: PaymentIn, store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        cart = add_payment(reg.cart, data.type, data.amount)
        return _view(store, with_cart(reg, cart))


@router.put("/payments")
def replace_cart_payments(data: PaymentsIn, store: LocalStore = Depends(get_store)):
    payments = [new_payment(p.type, p.amount) for p in data.payments]
    with store.transaction():
        reg = store.load_register()
        return _view(store, with_cart(reg, replace_payments(reg.cart, payments)))


@router.post("/payments/preview")
def preview_payments(data: PaymentsIn, store: LocalStore = Depends(get_store)):
    # Live balance for a payment session that has not been attached yet.
    reg = store.load_register()
    payments = [new_payment(p.type, p.amount) for p in data.payments]
    can_complete = bool(payments) and bool(reg.cart.line_items)
    return {"remaining": q2(remaining(reg.cart, payments)), "can_complete": can_complete}


@router.post("/checkout")
def checkout_cart(data: CheckoutIn, store: LocalStore = Depends(get_store)):
    payments = None
    if data.payments is not None:
        payments = [new_payment(p.type, p.amount) for p in data.payments]
    with store.transaction():
        reg, done = checkout(store.load_register(), payments)
        store.save_register(reg)
    return {"transaction": build_receipt(done)}
