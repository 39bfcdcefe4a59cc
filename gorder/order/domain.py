"""Orders, their items, and the repository contract for storing them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Item:
    """A priced stock item as held in an order."""

    id: str = ""
    name: str = ""
    quantity: int = 0
    price_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"ID": self.id, "Name": self.name, "Quantity": self.quantity, "PriceID": self.price_id}


@dataclass
class ItemWithQuantity:
    """An item identifier with the amount requested."""

    id: str = ""
    quantity: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"ID": self.id, "Quantity": self.quantity}


@dataclass
class Order:
    """A customer's order."""

    id: str = ""
    customer_id: str = ""
    status: str = ""
    payment_link: str = ""
    items: list[Item] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ID": self.id,
            "CustomerID": self.customer_id,
            "Status": self.status,
            "PaymentLink": self.payment_link,
            "Items": [item.to_dict() for item in self.items],
        }


def item_from_dict(data: Mapping[str, Any]) -> Item:
    return Item(
        id=data.get("ID", ""),
        name=data.get("Name", ""),
        quantity=int(data.get("Quantity", 0)),
        price_id=data.get("PriceID", ""),
    )


def item_with_quantity_from_dict(data: Mapping[str, Any]) -> ItemWithQuantity:
    return ItemWithQuantity(id=data.get("ID", ""), quantity=int(data.get("Quantity", 0)))


def order_from_dict(data: Mapping[str, Any]) -> Order:
    return Order(
        id=data.get("ID", ""),
        customer_id=data.get("CustomerID", ""),
        status=data.get("Status", ""),
        payment_link=data.get("PaymentLink", ""),
        items=[item_from_dict(item) for item in data.get("Items") or []],
    )


def new_order(
    order_id: str, customer_id: str, status: str, payment_link: str, items: Iterable[Item]
) -> Order:
    """Build an order, requiring every field to be present."""
    items = list(items or [])
    if not order_id:
        raise ValueError("empty id")
    if not customer_id:
        raise ValueError("empty customer id")
    if not status:
        raise ValueError("empty status")
    if not payment_link:
        raise ValueError("empty payment link")
    if not items:
        raise ValueError("empty order items")
    return Order(
        id=order_id,
        customer_id=customer_id,
        status=status,
        payment_link=payment_link,
        items=items,
    )


class OrderNotFoundError(LookupError):
    """No order with the requested identity exists."""

    def __init__(self, order_id: str) -> None:
        super().__init__(order_id)
        self.order_id = order_id

    def __str__(self) -> str:
        return f"order '{self.order_id}' not found"


class Repository(ABC):
    """Storage for orders."""

    @abstractmethod
    def create(self, order: Order) -> Order:
        """Store a new order and return it with its assigned id."""

    @abstractmethod
    def get(self, order_id: str, customer_id: str) -> Order:
        """Order with this id belonging to this customer."""

    @abstractmethod
    def update(self, order: Order, update_fn: Callable[[Order], Order]) -> None:
        """Replace the stored order with what ``update_fn`` makes of it."""