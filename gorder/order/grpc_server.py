"""Order service endpoints over the JSON-encoded gRPC service."""

from __future__ import annotations

import copy
from typing import Any

import grpc

from gorder.order.app import Application, CreateOrder, GetCustomerOrder, UpdateOrder
from gorder.order.domain import (
    item_from_dict,
    item_with_quantity_from_dict,
    new_order,
)
from gorder.rpc import ORDER_SERVICE_NAME, RpcStatusError, json_service_handler


class OrderServer:
    """Translates gRPC requests into order commands and queries."""

    def __init__(self, app: Application) -> None:
        self._app = app

    def create_order(self, request: dict[str, Any]) -> dict[str, Any]:
        try:
            self._app.commands.create_order.handle(
                CreateOrder(
                    customer_id=request.get("CustomerID", ""),
                    items=[item_with_quantity_from_dict(i) for i in request.get("Items") or []],
                )
            )
        except Exception as exc:
            raise RpcStatusError(grpc.StatusCode.INTERNAL, str(exc)) from exc
        return {}

    def get_order(self, request: dict[str, Any]) -> dict[str, Any]:
        try:
            order = self._app.queries.get_customer_order.handle(
                GetCustomerOrder(
                    customer_id=request.get("CustomerID", ""),
                    order_id=request.get("OrderID", ""),
                )
            )
        except Exception as exc:
            raise RpcStatusError(grpc.StatusCode.NOT_FOUND, str(exc)) from exc
        return order.to_dict()

    def update_order(self, request: dict[str, Any]) -> dict[str, Any]:
        try:
            order = new_order(
                request.get("ID", ""),
                request.get("CustomerID", ""),
                request.get("Status", ""),
                request.get("PaymentLink", ""),
                [item_from_dict(i) for i in request.get("Items") or []],
            )
            # The stored order is kept as it is.
            self._app.commands.update_order.handle(UpdateOrder(order=order, update_fn=copy.copy))
        except Exception as exc:
            raise RpcStatusError(grpc.StatusCode.INTERNAL, str(exc)) from exc
        return {}

    def register(self, server: grpc.Server) -> None:
        """Attach this service to a gRPC server."""
        handler = json_service_handler(
            ORDER_SERVICE_NAME,
            {
                "CreateOrder": self.create_order,
                "GetOrder": self.get_order,
                "UpdateOrder": self.update_order,
            },
        )
        server.add_generic_rpc_handlers((handler,))