from decimal import Decimal

import pytest

from till.errors import InvalidPayment
from till.ledger import (
    change,
    effective_amount,
    is_surcharged,
    new_payment,
    remaining,
    surcharge_percent,
    total_paid,
)
from till.lifecycle import add_line_item, new_transaction
from till.models import Item


def _cart_of_44():
    # Two lines of (10 + 10%) x 2.
    txn = new_transaction()
    txn = add_line_item(txn, Item(name="Widget", unit_price="10", fee_percent="10"), 2)
    txn = add_line_item(txn, Item(name="Gadget", unit_price="10", fee_percent="10"), 2)
    return txn


def test_cash_counts_at_face_value():
    p = new_payment("cash", "20")
    assert effective_amount(p) == Decimal("20")


@pytest.mark.parametrize("tender", ["credit", "debit"])
def test_card_tenders_count_two_percent_more(tender):
    p = new_payment(tender, "20")
    assert effective_amount(p) == Decimal("20.40")
    assert is_surcharged(tender)


def test_total_paid_sums_effective_amounts():
    payments = [new_payment("cash", 20), new_payment("credit", 20)]
    assert total_paid(payments) == Decimal("40.4")
    assert total_paid([]) == Decimal("0")


def test_partial_mixed_payment_leaves_balance():
    txn = _cart_of_44()
    payments = [new_payment("cash", 20), new_payment("credit", 20)]
    assert remaining(txn, payments) == Decimal("3.6")
    assert change(txn, payments) == Decimal("0")


def test_overpayment_gives_change():
    txn = _cart_of_44()
    payments = [new_payment("cash", 50)]
    assert remaining(txn, payments) == Decimal("0")
    assert change(txn, payments) == Decimal("6")


def test_remaining_and_change_never_both_nonzero():
    txn = _cart_of_44()
    for amount in ["0.01", "1", "20", "43.99", "44", "44.01", "100"]:
        for tender in ["cash", "credit", "debit"]:
            payments = [new_payment(tender, amount)]
            r = remaining(txn, payments)
            c = change(txn, payments)
            assert r >= 0
            assert c >= 0
            assert r == 0 or c == 0


def test_remaining_uses_attached_payments_by_default():
    txn = _cart_of_44().model_copy(update={"payments": (new_payment("cash", 44),)})
    assert remaining(txn) == Decimal("0")
    assert change(txn) == Decimal("0")


def test_new_payment_normalizes_tender_and_stamps_time():
    p = new_payment(" Credit ", Decimal("5"), now=1700000000000)
    assert p.type == "credit"
    assert p.timestamp == 1700000000000
    assert p.id


@pytest.mark.parametrize(
    "tender,amount",
    [
        ("cash", 0),
        ("cash", "-5"),
        ("cash", "nan"),
        ("cash", "inf"),
        ("cash", "abc"),
        ("cash", None),
        ("bitcoin", 10),
        ("", 10),
    ],
)
def test_new_payment_rejects_bad_entries(tender, amount):
    with pytest.raises(InvalidPayment):
        new_payment(tender, amount)


def test_surcharge_percent_reads_the_rate_table():
    assert surcharge_percent("credit") == Decimal("2")
    assert surcharge_percent("cash") == Decimal("0")
    assert not is_surcharged("cash")
