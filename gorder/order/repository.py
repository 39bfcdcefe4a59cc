"""In-memory order storage."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from gorder.order.domain import Order, OrderNotFoundError, Repository

logger = logging.getLogger(__name__)


class MemoryOrderRepository(Repository):
    """Orders kept in a list, seeded with one placeholder order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: list[Order] = [
            Order(
                id="fake-ID",
                customer_id="fake-customer-id",
                status="fake-status",
                payment_link="fake-payment-link",
            )
        ]

    def create(self, order: Order) -> Order:
        with self._lock:
            created = Order(
                id=str(int(time.time())),
                customer_id=order.customer_id,
                status=order.status,
                payment_link=order.payment_link,
                items=order.items,
            )
            self._store.append(created)
            return created

    def get(self, order_id: str, customer_id: str) -> Order:
        with self._lock:
            for position, stored in enumerate(self._store):
                logger.info("m.store[%d] = %r", position, stored)
            for stored in self._store:
                if stored.id == order_id and stored.customer_id == customer_id:
                    logger.info(
                        "memory_order_repo_get||found||id=%s||customerID=%s||res=%r",
                        order_id,
                        customer_id,
                        stored,
                    )
                    return stored
        raise OrderNotFoundError(order_id)

    def update(self, order: Order, update_fn: Callable[[Order], Order]) -> None:
        with self._lock:
            found = False
            for position, stored in enumerate(self._store):
                if stored.id == order.id and stored.customer_id == order.customer_id:
                    found = True
                    self._store[position] = update_fn(stored)
            if not found:
                raise OrderNotFoundError(order.id)