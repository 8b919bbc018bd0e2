from __future__ import annotations

from typing import List, Tuple

from pydantic import ValidationError

from .errors import InvalidLineItem, NotFound
from .models import Catalog, Item
from .validation import describe

EDITABLE_ITEM_FIELDS = {"name", "unit_price", "fee_percent"}


def _build_item(fields: dict) -> Item:
    try:
        return Item(**fields)
    except ValidationError as ex:
        raise InvalidLineItem(describe(ex))


def _check_fields(fields: dict) -> None:
    unknown = sorted(set(fields) - EDITABLE_ITEM_FIELDS)
    if unknown:
        raise InvalidLineItem(f"unknown item field(s): {', '.join(unknown)}")


def list_items(catalog: Catalog) -> List[Item]:
    return list(catalog.items)


def get_item(catalog: Catalog, item_id: str) -> Item:
    for it in catalog.items:
        if it.id == item_id:
            return it
    raise NotFound(f"item {item_id} not found")


def insert_item(catalog: Catalog, **fields) -> Tuple[Catalog, Item]:
    _check_fields(fields)
    item = _build_item(fields)
    return catalog.model_copy(update={"items": catalog.items + (item,)}), item


def update_item(catalog: Catalog, item_id: str, **fields) -> Tuple[Catalog, Item]:
    """
    Replace an item with an edited copy under the same id.

    Line items already in a cart or in history were copied at add time and do not
    see the change.
    """
    _check_fields(fields)
    current = get_item(catalog, item_id)
    updated = _build_item({**current.model_dump(), **fields})
    items = tuple(updated if it.id == item_id else it for it in catalog.items)
    return catalog.model_copy(update={"items": items}), updated


def delete_item(catalog: Catalog, item_id: str) -> Tuple[Catalog, bool]:
    items = tuple(it for it in catalog.items if it.id != item_id)
    if len(items) == len(catalog.items):
        return catalog, False
    return catalog.model_copy(update={"items": items}), True
