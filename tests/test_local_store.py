import json

from till.catalog import insert_item
from till.ledger import new_payment
from till.lifecycle import add_to_cart, checkout, open_register
from till.models import Catalog, Register
from till.storage.local import CART_KEY, CATALOG_KEY, HISTORY_KEY, LocalStore, get_store


def _register():
    catalog, item = insert_item(Catalog(), name="Tea", unit_price="2.5", fee_percent="10")
    reg = add_to_cart(open_register(catalog), item.id, 2)
    reg, _ = checkout(reg, [new_payment("cash", 10, now=1)], now=2)
    return add_to_cart(reg, item.id, 1)


def test_missing_file_is_an_empty_register(tmp_path):
    reg = LocalStore(tmp_path / "store.json").load_register()
    assert reg.catalog == Catalog()
    assert reg.history == ()
    assert reg.cart.is_open


def test_save_then_load(tmp_path):
    store = LocalStore(tmp_path / "nested" / "store.json")
    reg = _register()
    store.save_register(reg)
    assert store.load_register() == reg


def test_file_uses_browser_storage_keys(tmp_path):
    path = tmp_path / "store.json"
    LocalStore(path).save_register(_register())
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {CATALOG_KEY, HISTORY_KEY, CART_KEY}
    assert doc[CATALOG_KEY][0]["unitPrice"] == 2.5


def test_save_leaves_no_temp_files(tmp_path):
    store = LocalStore(tmp_path / "store.json")
    store.save_register(_register())
    store.save_register(Register())
    assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


def test_corrupt_file_fails_closed(tmp_path, capsys):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    reg = LocalStore(path).load_register()
    assert reg.catalog == Catalog()
    assert reg.history == ()
    assert "till.store.unreadable" in capsys.readouterr().err

    path.write_text("[1, 2]", encoding="utf-8")
    assert LocalStore(path).load_register().history == ()


def test_one_bad_collection_does_not_wipe_the_others(tmp_path):
    path = tmp_path / "store.json"
    LocalStore(path).save_register(_register())
    doc = json.loads(path.read_text(encoding="utf-8"))
    doc[HISTORY_KEY][0]["payments"][0]["amount"] = "lots"
    path.write_text(json.dumps(doc), encoding="utf-8")

    reg = LocalStore(path).load_register()
    assert reg.history == ()
    assert len(reg.catalog.items) == 1
    assert reg.cart.line_items[0].quantity == 1


def test_get_store_follows_settings(monkeypatch, tmp_path):
    from till import config

    monkeypatch.setattr(config.settings, "store_path", str(tmp_path / "x.json"))
    assert get_store().path == tmp_path / "x.json"


def test_stores_on_one_file_share_a_lock(tmp_path):
    a = LocalStore(tmp_path / "store.json")
    b = LocalStore(tmp_path / "." / "store.json")
    other = LocalStore(tmp_path / "other.json")
    assert a._lock is b._lock
    assert a._lock is not other._lock
    with a.transaction():
        assert not b._lock.acquire(blocking=False)
    assert b._lock.acquire(blocking=False)
    b._lock.release()
