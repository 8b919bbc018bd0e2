import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict

from ..codec import dump_cart, dump_catalog, dump_history, from_json, load_cart, load_catalog, load_history, to_json
from ..config import settings
from ..logs import json_log
from ..models import Register

# Same keys the browser till used in localStorage, so an exported localStorage
# dump can be dropped in as a store file.
CATALOG_KEY = "itemsInventory"
HISTORY_KEY = "transactions"
CART_KEY = "currentCart"

# One lock per store file, shared by every LocalStore pointing at it (routes
# build a fresh store per request).
_LOCKS: Dict[str, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(str(path.resolve()), threading.Lock())


class LocalStore:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    @contextmanager
    def transaction(self):
        """
        Serialize a load-modify-save cycle against every other writer of this file.
        """
        with self._lock:
            yield

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            doc = from_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as ex:
            json_log("warn", "till.store.unreadable", path=str(self.path), error=str(ex))
            return {}
        if not isinstance(doc, dict):
            json_log("warn", "till.store.unreadable", path=str(self.path), error="top level is not an object")
            return {}
        return doc

    def load_register(self) -> Register:
        doc = self._read()
        return Register(
            catalog=load_catalog(doc.get(CATALOG_KEY)),
            history=load_history(doc.get(HISTORY_KEY)),
            cart=load_cart(doc.get(CART_KEY)),
        )

    def save_register(self, register: Register) -> None:
        doc = {
            CATALOG_KEY: dump_catalog(register.catalog),
            HISTORY_KEY: dump_history(register.history),
            CART_KEY: dump_cart(register.cart),
        }
        data = to_json(doc)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash mid-write leaves the previous file intact.
        fd, tmp = tempfile.mkstemp(prefix=".till-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp, self.path)
        except Exception:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
        json_log("info", "till.store.saved", path=str(self.path), bytes=len(data))


def get_store() -> LocalStore:
    return LocalStore(settings.store_path)
