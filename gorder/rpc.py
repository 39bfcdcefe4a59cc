"""gRPC plumbing: JSON-encoded services, their clients and the server runner."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from concurrent import futures
from dataclasses import dataclass, field
from typing import Any

import grpc

from gorder.config import Config
from gorder.discovery import get_service_addr
from gorder.order.domain import (
    Item,
    ItemWithQuantity,
    Order,
    item_from_dict,
    order_from_dict,
)

logger = logging.getLogger(__name__)

STOCK_SERVICE_NAME = "stockpb.StockService"
ORDER_SERVICE_NAME = "orderpb.OrderService"
_MAX_WORKERS = 10

Message = dict[str, Any]


class RpcStatusError(Exception):
    """Raised by a service method to fail the call with a specific status code."""

    def __init__(self, code: grpc.StatusCode, details: str) -> None:
        super().__init__(details)
        self.code = code
        self.details = details


@dataclass
class StockCheckResponse:
    """Answer of the stock service to an availability check."""

    in_stock: int = 0
    items: list[Item] = field(default_factory=list)


def _encode(message: Message) -> bytes:
    return json.dumps(message, separators=(",", ":")).encode("utf-8")


def _decode(data: bytes) -> Message:
    return json.loads(data.decode("utf-8")) if data else {}


def _method_handler(fn: Callable[[Message], Message]) -> grpc.RpcMethodHandler:
    def behaviour(request: Message, context: grpc.ServicerContext) -> Message:
        try:
            return fn(request)
        except RpcStatusError as exc:
            context.abort(exc.code, exc.details)
        except Exception as exc:
            logger.warning("rpc handler failed: %s", exc)
            context.abort(grpc.StatusCode.UNKNOWN, str(exc))

    return grpc.unary_unary_rpc_method_handler(
        behaviour, request_deserializer=_decode, response_serializer=_encode
    )


def json_service_handler(
    service_name: str, methods: Mapping[str, Callable[[Message], Message]]
) -> grpc.GenericRpcHandler:
    """Expose plain functions taking and returning dicts as a gRPC service."""
    return grpc.method_handlers_generic_handler(
        service_name, {name: _method_handler(fn) for name, fn in methods.items()}
    )


def _unary(channel: grpc.Channel, service: str, method: str) -> grpc.UnaryUnaryMultiCallable:
    return channel.unary_unary(
        f"/{service}/{method}", request_serializer=_encode, response_deserializer=_decode
    )


class StockClient:
    """Client of the stock service."""

    def __init__(self, channel: grpc.Channel) -> None:
        self._channel = channel

    def check_if_items_in_stock(self, items: Iterable[ItemWithQuantity]) -> StockCheckResponse:
        call = _unary(self._channel, STOCK_SERVICE_NAME, "CheckIfItemsInStock")
        response = call({"Items": [item.to_dict() for item in items]})
        return StockCheckResponse(
            in_stock=int(response.get("InStock", 0)),
            items=[item_from_dict(item) for item in response.get("Items") or []],
        )

    def get_items(self, item_ids: Iterable[str]) -> list[Item]:
        call = _unary(self._channel, STOCK_SERVICE_NAME, "GetItems")
        response = call({"ItemIDs": list(item_ids)})
        return [item_from_dict(item) for item in response.get("Items") or []]

    def close(self) -> None:
        self._channel.close()

    def __enter__(self) -> "StockClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class OrderClient:
    """Client of the order service."""

    def __init__(self, channel: grpc.Channel) -> None:
        self._channel = channel

    def create_order(self, customer_id: str, items: Iterable[ItemWithQuantity]) -> None:
        call = _unary(self._channel, ORDER_SERVICE_NAME, "CreateOrder")
        call({"CustomerID": customer_id, "Items": [item.to_dict() for item in items]})

    def get_order(self, customer_id: str, order_id: str) -> Order:
        call = _unary(self._channel, ORDER_SERVICE_NAME, "GetOrder")
        return order_from_dict(call({"CustomerID": customer_id, "OrderID": order_id}))

    def update_order(self, order: Order) -> None:
        call = _unary(self._channel, ORDER_SERVICE_NAME, "UpdateOrder")
        call(order.to_dict())

    def close(self) -> None:
        self._channel.close()

    def __enter__(self) -> "OrderClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class _LoggingInterceptor(grpc.ServerInterceptor):
    def intercept_service(self, continuation, handler_call_details):
        logger.info("grpc request", extra={"grpc.method": handler_call_details.method})
        return continuation(handler_call_details)


def serve_grpc(addr: str, register_server: Callable[[grpc.Server], None]) -> None:
    """Serve on ``addr`` until the server terminates."""
    server = grpc.server(
        futures.ThreadPoolExecutor(max_workers=_MAX_WORKERS),
        interceptors=[_LoggingInterceptor()],
    )
    register_server(server)
    try:
        port = server.add_insecure_port(addr)
    except RuntimeError as exc:
        raise OSError(f"failed to listen on {addr}") from exc
    if not port:
        raise OSError(f"failed to listen on {addr}")
    logger.info("Starting GRPC server, listening on %s", addr)
    server.start()
    try:
        server.wait_for_termination()
    finally:
        server.stop(None)


def run_grpc_server(
    config: Config, service_name: str, register_server: Callable[[grpc.Server], None]
) -> None:
    """Serve on the service's configured gRPC address, or the fallback one."""
    addr = config.sub(service_name).get_str("grpc-addr") or config.get_str("fallback-grpc-addr")
    serve_grpc(addr, register_server)


def _discovered_channel(config: Config, name_key: str, label: str) -> grpc.Channel:
    addr = get_service_addr(config, config.get_str(name_key))
    if not addr:
        logger.warning("empty grpc addr for %s grpc", label)
    return grpc.insecure_channel(addr)


def new_stock_client(config: Config) -> StockClient:
    """Client of a stock service instance found through discovery."""
    return StockClient(_discovered_channel(config, "stock.service-name", "stock"))


def new_order_client(config: Config) -> OrderClient:
    """Client of an order service instance found through discovery."""
    return OrderClient(_discovered_channel(config, "order.service-name", "order"))