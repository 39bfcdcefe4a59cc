"""Order use cases: creating, updating and looking up orders."""

from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

import pika

from gorder.broker import EVENT_ORDER_CREATED
from gorder.decorator import MetricsClient, apply_command_decorators, apply_query_decorators
from gorder.order.domain import Item, ItemWithQuantity, Order, Repository
from gorder.rpc import StockCheckResponse

logger = logging.getLogger(__name__)

_PERSISTENT_DELIVERY = 2


class StockService(ABC):
    """What the order service needs from the stock service."""

    @abstractmethod
    def check_if_items_in_stock(self, items: list[ItemWithQuantity]) -> StockCheckResponse:
        """Check availability of the requested items."""

    @abstractmethod
    def get_items(self, item_ids: list[str]) -> list[Item]:
        """Stock items with the given identifiers."""


@dataclass
class CreateOrder:
    customer_id: str
    items: list[ItemWithQuantity] = field(default_factory=list)


@dataclass(frozen=True)
class CreateOrderResult:
    order_id: str


@dataclass
class UpdateOrder:
    order: Order
    update_fn: Callable[[Order], Order] | None = None


@dataclass
class GetCustomerOrder:
    customer_id: str
    order_id: str


def pack_items(items: Iterable[ItemWithQuantity]) -> list[ItemWithQuantity]:
    """Merge entries for the same item, summing their quantities."""
    merged: dict[str, int] = {}
    for item in items:
        merged[item.id] = merged.get(item.id, 0) + item.quantity
    return [ItemWithQuantity(id=item_id, quantity=quantity) for item_id, quantity in merged.items()]


class CreateOrderHandler:
    """Validates the items, stores the order and announces its creation."""

    def __init__(self, repo: Repository, stock_service: StockService, channel: Any) -> None:
        self._repo = repo
        self._stock = stock_service
        self._channel = channel

    def handle(self, cmd: CreateOrder) -> CreateOrderResult:
        items = self._validate(cmd.items)
        order = self._repo.create(Order(customer_id=cmd.customer_id, items=items))
        declared = self._channel.queue_declare(
            queue=EVENT_ORDER_CREATED,
            durable=True,
            exclusive=False,
            auto_delete=False,
            arguments=None,
        )
        self._channel.basic_publish(
            exchange="",
            routing_key=declared.method.queue,
            body=json.dumps(order.to_dict()).encode("utf-8"),
            properties=pika.BasicProperties(
                content_type="application/json", delivery_mode=_PERSISTENT_DELIVERY
            ),
            mandatory=False,
        )
        return CreateOrderResult(order_id=order.id)

    def _validate(self, items: list[ItemWithQuantity]) -> list[Item]:
        if not items:
            raise ValueError("must have at least one item")
        response = self._stock.check_if_items_in_stock(pack_items(items))
        return list(response.items)


class UpdateOrderHandler:
    """Applies an update function to a stored order."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def handle(self, cmd: UpdateOrder) -> None:
        update_fn = cmd.update_fn
        if update_fn is None:
            logger.warning("updateOrderHandler got nil UpdateFn, order=%r", cmd.order)
            # Without an update the stored order is kept as it is.
            update_fn = copy.copy
        self._repo.update(cmd.order, update_fn)


class GetCustomerOrderHandler:
    """Looks up one order of a customer."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def handle(self, query: GetCustomerOrder) -> Order:
        return self._repo.get(query.order_id, query.customer_id)


@dataclass
class Commands:
    create_order: Any
    update_order: Any


@dataclass
class Queries:
    get_customer_order: Any


@dataclass
class Application:
    commands: Commands
    queries: Queries


def _require(value: object, name: str) -> None:
    if value is None:
        raise ValueError(f"nil {name}")


def new_create_order_handler(
    order_repo: Repository,
    stock_service: StockService,
    logger: logging.Logger,
    metrics_client: MetricsClient,
    channel: Any,
):
    """Create-order handler wrapped with logging and metrics."""
    _require(order_repo, "orderRepo")
    _require(stock_service, "stockGRPC")
    _require(channel, "channel")
    return apply_command_decorators(
        CreateOrderHandler(order_repo, stock_service, channel), logger, metrics_client
    )


def new_update_order_handler(
    order_repo: Repository, logger: logging.Logger, metrics_client: MetricsClient
):
    """Update-order handler wrapped with logging and metrics."""
    _require(order_repo, "orderRepo")
    return apply_command_decorators(UpdateOrderHandler(order_repo), logger, metrics_client)


def new_get_customer_order_handler(
    order_repo: Repository, logger: logging.Logger, metrics_client: MetricsClient
):
    """Customer order lookup wrapped with logging and metrics."""
    _require(order_repo, "orderRepo")
    return apply_query_decorators(GetCustomerOrderHandler(order_repo), logger, metrics_client)