"""Message broker connection and the events exchanged through it."""

from __future__ import annotations

import logging
from collections.abc import Callable

import pika
from pika.adapters.blocking_connection import BlockingChannel

EVENT_ORDER_CREATED = "order.created"
EVENT_ORDER_PAID = "order.paid"

logger = logging.getLogger(__name__)


def amqp_url(user: str, password: str, host: str, port: str | int) -> str:
    """AMQP address for the given credentials and endpoint."""
    return f"amqp://{user}:{password}@{host}:{port}"


def connect(
    user: str, password: str, host: str, port: str | int
) -> tuple[BlockingChannel, Callable[[], None]]:
    """Open a channel and declare the order exchanges.

    Returns the channel and a function that closes the connection.
    """
    connection = pika.BlockingConnection(pika.URLParameters(amqp_url(user, password, host, port)))
    try:
        channel = connection.channel()
        channel.exchange_declare(
            exchange=EVENT_ORDER_CREATED,
            exchange_type="direct",
            durable=True,
            auto_delete=False,
            internal=False,
            arguments=None,
        )
        channel.exchange_declare(
            exchange=EVENT_ORDER_PAID,
            exchange_type="fanout",
            durable=True,
            auto_delete=False,
            internal=False,
            arguments=None,
        )
    except Exception:
        logger.exception("failed to set up broker channel")
        connection.close()
        raise
    return channel, connection.close