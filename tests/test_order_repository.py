import dataclasses

import pytest

from gorder.order.domain import Item, Order, OrderNotFoundError
from gorder.order.repository import MemoryOrderRepository


def test_seeded_order_is_found():
    order = MemoryOrderRepository().get("fake-ID", "fake-customer-id")
    assert order.status == "fake-status"
    assert order.payment_link == "fake-payment-link"
    assert order.items == []


def test_get_requires_matching_customer():
    repo = MemoryOrderRepository()
    with pytest.raises(OrderNotFoundError) as info:
        repo.get("fake-ID", "someone-else")
    assert info.value.order_id == "fake-ID"


def test_create_assigns_timestamp_id_and_stores():
    repo = MemoryOrderRepository()
    items = [Item(id="item1", quantity=2)]
    created = repo.create(Order(id="ignored", customer_id="c1", items=items))
    assert created.id.isdigit()
    assert created.id != "ignored"
    assert created.items == items
    assert repo.get(created.id, "c1") == created


def test_update_replaces_order():
    repo = MemoryOrderRepository()
    target = Order(id="fake-ID", customer_id="fake-customer-id")
    repo.update(target, lambda o: dataclasses.replace(o, status="paid"))
    assert repo.get("fake-ID", "fake-customer-id").status == "paid"


def test_update_missing_raises():
    repo = MemoryOrderRepository()
    with pytest.raises(OrderNotFoundError) as info:
        repo.update(Order(id="nope", customer_id="c1"), lambda o: o)
    assert str(info.value) == "order 'nope' not found"


def test_update_error_propagates_and_keeps_store():
    repo = MemoryOrderRepository()

    def fail(order):
        raise RuntimeError("cannot update")

    with pytest.raises(RuntimeError, match="cannot update"):
        repo.update(Order(id="fake-ID", customer_id="fake-customer-id"), fail)
    assert repo.get("fake-ID", "fake-customer-id").status == "fake-status"