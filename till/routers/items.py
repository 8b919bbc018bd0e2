from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..catalog import delete_item, get_item, insert_item, list_items, update_item
from ..errors import NotFound
from ..lifecycle import with_catalog
from ..storage.local import LocalStore, get_store

router = APIRouter(prefix="/items", tags=["items"])


class ItemIn(BaseModel):
    name: str
    unit_price: Decimal
    fee_percent: Decimal = Decimal("0")


class ItemUpdate(BaseModel):
    name: Optional[str] = None
    unit_price: Optional[Decimal] = None
    fee_percent: Optional[Decimal] = None


@router.get("")
def list_catalog(store: LocalStore = Depends(get_store)):
    reg = store.load_register()
    return {"items": [it.model_dump() for it in list_items(reg.catalog)]}


@router.get("/{item_id}")
def get_catalog_item(item_id: str, store: LocalStore = Depends(get_store)):
    reg = store.load_register()
    return {"item": get_item(reg.catalog, item_id).model_dump()}


@router.post("")
def create_item(data: ItemIn, store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        catalog, item = insert_item(reg.catalog, **data.model_dump())
        store.save_register(with_catalog(reg, catalog))
    return {"item": item.model_dump()}


@router.patch("/{item_id}")
def patch_item(item_id: str, data: ItemUpdate, store: LocalStore = Depends(get_store)):
    # Only fields the client sent; explicit nulls are rejected by the model validators.
    fields = data.model_dump(exclude_unset=True)
    with store.transaction():
        reg = store.load_register()
        catalog, item = update_item(reg.catalog, item_id, **fields)
        store.save_register(with_catalog(reg, catalog))
    return {"item": item.model_dump()}


@router.delete("/{item_id}")
def remove_item(item_id: str, store: LocalStore = Depends(get_store)):
    with store.transaction():
        reg = store.load_register()
        catalog, deleted = delete_item(reg.catalog, item_id)
        if not deleted:
            raise NotFound(f"item {item_id} not found")
        store.save_register(with_catalog(reg, catalog))
    return {"ok": True}
