from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List

from .ledger import change, effective_amount, is_surcharged, remaining, surcharge_percent, total_paid
from .models import LineItem, Transaction
from .money import line_item_total, q2, transaction_subtotal


def item_count(lines: Iterable[LineItem]) -> int:
    return sum(int(it.quantity) for it in (lines or ()))


def summarize(txn: Transaction) -> dict:
    return {
        "id": txn.id,
        "status": txn.status,
        "completed": txn.completed,
        "created_at": txn.created_at,
        "item_count": item_count(txn.line_items),
        "subtotal": q2(transaction_subtotal(txn.line_items)),
        "total_paid": q2(total_paid(txn.payments)),
        "remaining": q2(remaining(txn)),
        "change": q2(change(txn)),
    }


def build_receipt(txn: Transaction) -> dict:
    lines = [
        {
            "id": it.id,
            "name": it.name,
            "quantity": it.quantity,
            "unit_price": q2(it.unit_price),
            "fee_percent": it.fee_percent,
            "total": q2(line_item_total(it)),
        }
        for it in txn.line_items
    ]
    payments = [
        {
            "id": p.id,
            "type": p.type,
            "amount": q2(p.amount),
            "effective_amount": q2(effective_amount(p)),
            "surcharged": is_surcharged(p.type),
            "timestamp": p.timestamp,
        }
        for p in txn.payments
    ]
    return {**summarize(txn), "lines": lines, "payments": payments}


def _fmt_ts(ms) -> str:
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _row(left: str, right: str, width: int) -> str:
    gap = max(width - len(left) - len(right), 1)
    return f"{left}{' ' * gap}{right}"


def render_text(txn: Transaction, width: int = 40) -> str:
    r = build_receipt(txn)
    out: List[str] = [
        "RECEIPT".center(width),
        _fmt_ts(r["created_at"]).center(width),
        f"Transaction ID: {r['id']}",
        "-" * width,
        _row(f"Items ({r['item_count']})", f"Total: ${r['subtotal']}", width),
    ]
    for ln in r["lines"]:
        out.append(_row(f"{ln['name']} x {ln['quantity']}", f"${ln['total']}", width))
        out.append(f"  ${ln['unit_price']} · Fee {ln['fee_percent']}%")
    out.append("-" * width)
    out.append(_row("Subtotal", f"${r['subtotal']}", width))
    out.append("Payments")
    if not r["payments"]:
        out.append("  No payments recorded")
    for p in r["payments"]:
        note = f" ({surcharge_percent(p['type']):f}% fee applied)" if p["surcharged"] else ""
        out.append(_row(f"  {p['type'].upper()}", f"${p['amount']}{note}", width))
    out.append(_row("Total Paid", f"${r['total_paid']}", width))
    out.append(_row("Remaining", f"${r['remaining']}", width))
    out.append(_row("Change", f"${r['change']}", width))
    return "\n".join(out) + "\n"
