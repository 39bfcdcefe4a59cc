"""In-memory stock storage."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from gorder.order.domain import Item
from gorder.stock.domain import StockNotFoundError, StockRepository

_STUB = (
    ("item_id", "foo_item", "stub item", "stub_item_price_id"),
    ("item1", "item1", "stub item 1", "stub_item1_price_id"),
    ("item2", "item2", "stub item 2", "stub_item2_price_id"),
    ("item3", "item3", "stub item 3", "stub_item3_price_id"),
)
_STUB_QUANTITY = 10000


class MemoryStockRepository(StockRepository):
    """Stock kept in a dictionary, seeded with stub items."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store = {
            key: Item(id=item_id, name=name, quantity=_STUB_QUANTITY, price_id=price_id)
            for key, item_id, name, price_id in _STUB
        }

    def get_items(self, ids: Iterable[str]) -> list[Item]:
        ids = list(ids)
        with self._lock:
            found = [self._store[i] for i in ids if i in self._store]
            missing = [i for i in ids if i not in self._store]
        if len(found) == len(ids):
            return found
        raise StockNotFoundError(missing, found)