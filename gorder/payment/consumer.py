"""Consumer of order-created events that starts the payment flow."""

from __future__ import annotations

import json
import logging
from typing import Any

from gorder.broker import EVENT_ORDER_CREATED
from gorder.order.domain import order_from_dict
from gorder.payment.app import Application, CreatePayment

logger = logging.getLogger(__name__)


class Consumer:
    """Creates a payment for every order announced on the broker."""

    def __init__(self, app: Application, channel: Any) -> None:
        self._app = app
        self._channel = channel
        self._queue = EVENT_ORDER_CREATED

    def listen(self) -> None:
        """Declare the order queue and consume from it until consumption stops."""
        declared = self._channel.queue_declare(
            queue=EVENT_ORDER_CREATED,
            durable=True,
            exclusive=False,
            auto_delete=False,
            arguments=None,
        )
        self._queue = declared.method.queue
        try:
            self._channel.basic_consume(
                queue=self._queue,
                on_message_callback=self.handle_message,
                auto_ack=False,
                exclusive=False,
            )
        except Exception as exc:
            logger.warning("fail to consume: queue=%s, err=%s", self._queue, exc)
            return
        self._channel.start_consuming()

    def handle_message(self, channel: Any, method: Any, properties: Any, body: bytes) -> None:
        """Process one delivery, acknowledging it on success and rejecting it otherwise."""
        del properties
        logger.info(
            "Payment receive a message from %s, msg=%s",
            self._queue,
            body.decode("utf-8", errors="replace"),
        )
        tag = method.delivery_tag
        try:
            data = json.loads(body)
            if not isinstance(data, dict):
                raise ValueError("message is not a JSON object")
            order = order_from_dict(data)
        except (ValueError, TypeError, AttributeError) as exc:
            logger.info("failed to unmarshall msg to order, err=%s", exc)
            channel.basic_nack(delivery_tag=tag, multiple=False, requeue=False)
            return

        try:
            self._app.commands.create_payment.handle(CreatePayment(order=order))
        except Exception as exc:
            logger.info("failed to create order, err=%s", exc)
            channel.basic_nack(delivery_tag=tag, multiple=False, requeue=False)
            return

        try:
            channel.basic_ack(delivery_tag=tag, multiple=False)
        except Exception as exc:
            logger.warning("Failed to ack message, err=%s", exc)

        logger.info("Payment consume successfully")