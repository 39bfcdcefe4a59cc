"""Stock use cases: checking availability and looking up items."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from gorder.decorator import MetricsClient, TodoMetrics, apply_query_decorators
from gorder.order.domain import Item, ItemWithQuantity
from gorder.stock.domain import StockRepository
from gorder.stock.repository import MemoryStockRepository


@dataclass
class CheckIfItemsInStock:
    items: list[ItemWithQuantity] = field(default_factory=list)


@dataclass
class GetItems:
    item_ids: list[str] = field(default_factory=list)


class CheckIfItemsInStockHandler:
    """Reports the requested items as available in the requested amounts."""

    def __init__(self, stock_repo: StockRepository) -> None:
        self._repo = stock_repo

    def handle(self, query: CheckIfItemsInStock) -> list[Item]:
        return [Item(id=item.id, quantity=item.quantity) for item in query.items]


class GetItemsHandler:
    """Looks up stock items by identifier."""

    def __init__(self, stock_repo: StockRepository) -> None:
        self._repo = stock_repo

    def handle(self, query: GetItems) -> list[Item]:
        return self._repo.get_items(query.item_ids)


@dataclass
class Queries:
    check_if_items_in_stock: Any
    get_items: Any


@dataclass
class Application:
    queries: Queries


def _require_repo(stock_repo: StockRepository | None) -> None:
    if stock_repo is None:
        raise ValueError("nil stockRepo")


def new_check_if_items_in_stock_handler(
    stock_repo: StockRepository, logger: logging.Logger, metrics_client: MetricsClient
):
    """Availability check wrapped with logging and metrics."""
    _require_repo(stock_repo)
    return apply_query_decorators(
        CheckIfItemsInStockHandler(stock_repo), logger, metrics_client
    )


def new_get_items_handler(
    stock_repo: StockRepository, logger: logging.Logger, metrics_client: MetricsClient
):
    """Item lookup wrapped with logging and metrics."""
    _require_repo(stock_repo)
    return apply_query_decorators(GetItemsHandler(stock_repo), logger, metrics_client)


def new_application() -> Application:
    """Stock application backed by in-memory storage."""
    repo = MemoryStockRepository()
    logger = logging.getLogger("gorder.stock")
    metrics = TodoMetrics()
    return Application(
        queries=Queries(
            check_if_items_in_stock=new_check_if_items_in_stock_handler(repo, logger, metrics),
            get_items=new_get_items_handler(repo, logger, metrics),
        )
    )