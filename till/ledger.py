from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from pydantic import ValidationError

from .errors import InvalidPayment
from .models import Payment, Transaction, now_ms
from .money import ZERO, transaction_subtotal
from .validation import describe

# Multiplier applied to a tender's amount when it pays down the balance.
# Card tenders carry a flat 2% processing surcharge credited toward the total.
TENDER_RATES = {
    "cash": Decimal("1"),
    "credit": Decimal("1.02"),
    "debit": Decimal("1.02"),
}


def is_surcharged(tender: str) -> bool:
    return TENDER_RATES.get(tender, Decimal("1")) != Decimal("1")


def new_payment(tender, amount, now: Optional[int] = None) -> Payment:
    try:
        return Payment(type=tender, amount=amount, timestamp=now_ms() if now is None else now)
    except ValidationError as ex:
        raise InvalidPayment(describe(ex))


def effective_amount(payment: Payment) -> Decimal:
    return payment.amount * TENDER_RATES[payment.type]


def total_paid(payments: Iterable[Payment]) -> Decimal:
    return sum((effective_amount(p) for p in (payments or ())), ZERO)


def _balance(txn: Transaction, payments=None) -> Decimal:
    paid = total_paid(txn.payments if payments is None else payments)
    return transaction_subtotal(txn.line_items) - paid


def remaining(txn: Transaction, payments=None) -> Decimal:
    """
    Unpaid balance, clamped at zero.

    `payments` overrides the transaction's own list, which lets a caller price a
    payment session before attaching it.
    """
    return max(_balance(txn, payments), ZERO)


def change(txn: Transaction, payments=None) -> Decimal:
    return max(-_balance(txn, payments), ZERO)


def surcharge_percent(tender: str) -> Decimal:
    rate = TENDER_RATES.get(tender, Decimal("1"))
    return ((rate - 1) * 100).normalize()
