from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..lifecycle import delete_transaction, find_transaction
from ..receipt import build_receipt, render_text, summarize
from ..storage.local import LocalStore, get_store

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("")
def list_transactions(store: LocalStore = Depends(get_store)):
    reg = store.load_register()
    return {"transactions": [summarize(t) for t in reg.history]}


@router.get("/{transaction_id}")
def get_transaction(transaction_id: str, store: LocalStore = Depends(get_store)):
    reg = store.load_register()
    return {"transaction": build_receipt(find_transaction(reg, transaction_id))}


@router.get("/{transaction_id}/receipt.txt", response_class=PlainTextResponse)
def get_transaction_receipt_text(transaction_id: str, store: LocalStore = Depends(get_store)):
    reg = store.load_register()
    return PlainTextResponse(render_text(find_transaction(reg, transaction_id)))


@router.delete("/{transaction_id}")
def remove_transaction(transaction_id: str, store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        store.save_register(delete_transaction(reg, transaction_id))
    return {"ok": True}
