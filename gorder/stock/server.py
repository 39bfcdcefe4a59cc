"""Stock service endpoints and its entry point."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from typing import Any

import grpc

from gorder.config import DEFAULT_CONFIG_NAME, DEFAULT_SEARCH_PATHS, load_config
from gorder.discovery import register_to_consul
from gorder.logsetup import init_logging
from gorder.order.domain import item_with_quantity_from_dict
from gorder.rpc import STOCK_SERVICE_NAME, json_service_handler, run_grpc_server
from gorder.stock.app import Application, CheckIfItemsInStock, GetItems, new_application

logger = logging.getLogger(__name__)


class StockServer:
    """Serves stock queries over the JSON-encoded gRPC service."""

    def __init__(self, app: Application) -> None:
        self._app = app

    def get_items(self, request: dict[str, Any]) -> dict[str, Any]:
        items = self._app.queries.get_items.handle(
            GetItems(item_ids=list(request.get("ItemIDs") or []))
        )
        return {"Items": [item.to_dict() for item in items]}

    def check_if_items_in_stock(self, request: dict[str, Any]) -> dict[str, Any]:
        query = CheckIfItemsInStock(
            items=[item_with_quantity_from_dict(i) for i in request.get("Items") or []]
        )
        items = self._app.queries.check_if_items_in_stock.handle(query)
        return {"InStock": 1, "Items": [item.to_dict() for item in items]}

    def register(self, server: grpc.Server) -> None:
        """Attach this service to a gRPC server."""
        handler = json_service_handler(
            STOCK_SERVICE_NAME,
            {"GetItems": self.get_items, "CheckIfItemsInStock": self.check_if_items_in_stock},
        )
        server.add_generic_rpc_handlers((handler,))


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gorder-stock", description="Run the stock service.")
    parser.add_argument("--config-name", default=DEFAULT_CONFIG_NAME)
    parser.add_argument("--config-dir", action="append", dest="config_dirs")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the stock service with the configured server type."""
    args = _parse_args(argv)
    init_logging()
    config = load_config(args.config_name, args.config_dirs or DEFAULT_SEARCH_PATHS)
    service_name = config.get_str("stock.service-name")
    server_type = config.get_str("stock.server-to-run")

    application = new_application()
    deregister = register_to_consul(config, service_name)
    try:
        if server_type == "grpc":
            run_grpc_server(config, service_name, StockServer(application).register)
        elif server_type != "http":
            raise ValueError("unsupported server type")
    finally:
        deregister()