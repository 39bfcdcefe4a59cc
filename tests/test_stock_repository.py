import pytest

from gorder.order.domain import Item
from gorder.stock.domain import StockNotFoundError
from gorder.stock.repository import MemoryStockRepository


def test_get_known_item():
    items = MemoryStockRepository().get_items(["item1"])
    assert items == [
        Item(id="item1", name="stub item 1", quantity=10000, price_id="stub_item1_price_id")
    ]


def test_stub_key_differs_from_item_id():
    (item,) = MemoryStockRepository().get_items(["item_id"])
    assert item.id == "foo_item"
    assert item.price_id == "stub_item_price_id"


def test_order_follows_request():
    items = MemoryStockRepository().get_items(["item3", "item1", "item2"])
    assert [item.id for item in items] == ["item3", "item1", "item2"]


def test_empty_request():
    assert MemoryStockRepository().get_items([]) == []


def test_missing_items_raise_with_details():
    with pytest.raises(StockNotFoundError) as info:
        MemoryStockRepository().get_items(["item2", "nope", "gone"])
    assert info.value.missing == ["nope", "gone"]
    assert [item.id for item in info.value.found] == ["item2"]
    assert str(info.value) == "these items not found in stock: nope,gone"


def test_repositories_do_not_share_items():
    first, second = MemoryStockRepository(), MemoryStockRepository()
    first.get_items(["item1"])[0].quantity = 0
    assert second.get_items(["item1"])[0].quantity == 10000