from decimal import Decimal

import pytest

from till.catalog import delete_item, get_item, insert_item, list_items, update_item
from till.errors import InvalidLineItem, NotFound
from till.models import Catalog


def _seeded():
    catalog, tea = insert_item(Catalog(), name="Tea", unit_price="2.50", fee_percent="5")
    catalog, cake = insert_item(catalog, name="Cake", unit_price="4")
    return catalog, tea, cake


def test_insert_generates_id_and_leaves_input_untouched():
    empty = Catalog()
    catalog, item = insert_item(empty, name=" Tea ", unit_price="2.50", fee_percent="5")
    assert item.id
    assert item.name == "Tea"
    assert item.unit_price == Decimal("2.50")
    assert list_items(catalog) == [item]
    assert list_items(empty) == []


def test_insert_defaults_fee_to_zero():
    _, _, cake = _seeded()
    assert cake.fee_percent == Decimal("0")


@pytest.mark.parametrize(
    "fields",
    [
        {"name": "Tea", "unit_price": "-1"},
        {"name": "Tea", "unit_price": "2", "fee_percent": "-3"},
        {"name": "Tea", "unit_price": "abc"},
        {"name": "", "unit_price": "2"},
        {"name": "Tea"},
        {"name": "Tea", "unit_price": "2", "id": "chosen"},
    ],
)
def test_insert_rejects_invalid_fields(fields):
    with pytest.raises(InvalidLineItem):
        insert_item(Catalog(), **fields)


def test_get_item():
    catalog, tea, _ = _seeded()
    assert get_item(catalog, tea.id) == tea
    with pytest.raises(NotFound):
        get_item(catalog, "missing")


def test_update_item_keeps_id_and_position():
    catalog, tea, cake = _seeded()
    catalog, updated = update_item(catalog, tea.id, unit_price="3")
    assert updated.id == tea.id
    assert updated.name == "Tea"
    assert updated.unit_price == Decimal("3")
    assert [it.id for it in list_items(catalog)] == [tea.id, cake.id]


def test_update_item_errors():
    catalog, tea, _ = _seeded()
    with pytest.raises(NotFound):
        update_item(catalog, "missing", unit_price="1")
    with pytest.raises(InvalidLineItem):
        update_item(catalog, tea.id, fee_percent="-1")
    assert get_item(catalog, tea.id) == tea


def test_delete_item_reports_whether_anything_was_removed():
    catalog, tea, cake = _seeded()
    catalog, deleted = delete_item(catalog, tea.id)
    assert deleted is True
    assert list_items(catalog) == [cake]
    catalog, deleted = delete_item(catalog, tea.id)
    assert deleted is False
    assert list_items(catalog) == [cake]
