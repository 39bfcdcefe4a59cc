"""Payment use cases: creating a payment link and attaching it to the order."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gorder.config import Config
from gorder.decorator import MetricsClient, TodoMetrics, apply_command_decorators
from gorder.order.domain import Order
from gorder.rpc import new_order_client

logger = logging.getLogger(__name__)

INMEM_PAYMENT_LINK = "inmem-payment-link"
STATUS_WAITING_FOR_PAYMENT = "waiting_for_payment"


class OrderService(ABC):
    """What the payment service needs from the order service."""

    @abstractmethod
    def update_order(self, order: Order) -> None:
        """Replace the stored order with ``order``."""


class Processor(ABC):
    """Something that can produce a payment link for an order."""

    @abstractmethod
    def create_payment_link(self, order: Order) -> str:
        """Link the customer follows to pay for ``order``."""


@dataclass
class InmemProcessor(Processor):
    """Processor that hands out the same fixed link for every order."""

    link: str = INMEM_PAYMENT_LINK

    def create_payment_link(self, order: Order) -> str:
        logger.debug("inmem payment link for order %s", order.id)
        return self.link


class OrderGrpc(OrderService):
    """Order service reached through a gRPC client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def update_order(self, order: Order) -> None:
        try:
            self._client.update_order(order)
        except Exception as exc:
            logger.warning("payment_adapter||update_order,err=%s", exc)
            raise
        logger.info("payment_adapter||update_order successfully")


@dataclass
class CreatePayment:
    order: Order


class CreatePaymentHandler:
    """Creates a payment link and marks the order as waiting for payment."""

    def __init__(self, processor: Processor, order_service: OrderService) -> None:
        self._processor = processor
        self._orders = order_service

    def handle(self, cmd: CreatePayment) -> str:
        link = self._processor.create_payment_link(cmd.order)
        logger.info(
            "create payment link for order: %s success, payment link: %s", cmd.order.id, link
        )
        updated = Order(
            id=cmd.order.id,
            customer_id=cmd.order.customer_id,
            status=STATUS_WAITING_FOR_PAYMENT,
            payment_link=link,
            items=cmd.order.items,
        )
        self._orders.update_order(updated)
        return link


@dataclass
class Commands:
    create_payment: Any


@dataclass
class Application:
    commands: Commands


def new_create_payment_handler(
    processor: Processor,
    order_service: OrderService,
    logger: logging.Logger,
    metrics_client: MetricsClient,
):
    """Create-payment handler wrapped with logging and metrics."""
    return apply_command_decorators(
        CreatePaymentHandler(processor, order_service), logger, metrics_client
    )


def build_application(order_service: OrderService, processor: Processor) -> Application:
    """Payment application over the given collaborators."""
    app_logger = logging.getLogger("gorder.payment")
    metrics = TodoMetrics()
    return Application(
        commands=Commands(
            create_payment=new_create_payment_handler(processor, order_service, app_logger, metrics)
        )
    )


def new_application(config: Config) -> tuple[Application, Callable[[], None]]:
    """Application connected to the order service, with its cleanup."""
    client = new_order_client(config)
    return build_application(OrderGrpc(client), InmemProcessor()), client.close