# gorder

Building blocks for a small order-processing system made of three parts:

- **order** – domain model, in-memory storage, command and query handlers, and
  a gRPC endpoint (`gorder.order.grpc_server.OrderServer`). Creating an order
  checks the items with the stock service and publishes the order as JSON to
  the `order.created` queue on RabbitMQ.
- **stock** – an in-memory catalogue with item lookup and stock check queries,
  served over gRPC. This part ships a ready-to-run command, `gorder-stock`.
- **payment** – a consumer of `order.created` messages that creates a payment
  link (`InmemProcessor` always returns `inmem-payment-link`) and writes the
  order back to the order service with status `waiting_for_payment`.

Services find one another through Consul (`gorder.discovery`) and exchange
events through RabbitMQ (`gorder.broker`). The gRPC services carry JSON-encoded
messages under the service names `stockpb.StockService` and
`orderpb.OrderService` (`gorder.rpc`).

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration

`gorder.config.load_config(config_name, search_paths)` looks for
`<config_name>.yaml` (or `.yml`) in each search path, by default `global` in
`../common/config`. Keys are case-insensitive and addressed with dots, e.g.
`config.get_str("stock.service-name")`; `config.sub("stock")` gives the nested
section. An environment variable named after the upper-cased key overrides the
file, and `stripe-key` is also read from `STRIPE_KEY`.

A minimal configuration:

```yaml
fallback-grpc-addr: 127.0.0.1:3030

order:
  service-name: order
  grpc-addr: 127.0.0.1:5002

stock:
  service-name: stock
  server-to-run: grpc
  grpc-addr: 127.0.0.1:5003

consul:
  addr: 127.0.0.1:8500

rabbitmq:
  user: guest
  password: password
  host: 127.0.0.1
  port: 5672
```

Logs are written as one JSON object per line by default
(`gorder.logsetup.init_logging`). Set `LOCAL_ENV=true` for plain text output.

## Running the stock service

Start Consul first, then:

```
gorder-stock --config-dir path/to/config
```

Options: `--config-name` (default `global`) and `--config-dir`, which may be
given more than once. The service registers its `stock.grpc-addr` in Consul,
keeps its health check alive every second and serves gRPC on that address
(or `fallback-grpc-addr`) when `stock.server-to-run` is `grpc`. With `http` it
starts no server and exits; any other value raises `ValueError`. The instance
is deregistered on exit.

## Using the pieces as a library

Handlers are wrapped with logging and metrics by
`gorder.decorator.apply_command_decorators` and `apply_query_decorators`;
`TodoMetrics` keeps its counters in memory.

Looking up an order without any network services:

```python
import logging

from gorder.decorator import TodoMetrics
from gorder.order.app import GetCustomerOrder, new_get_customer_order_handler
from gorder.order.repository import MemoryOrderRepository

repo = MemoryOrderRepository()  # seeded with order "fake-ID"
handler = new_get_customer_order_handler(repo, logging.getLogger("orders"), TodoMetrics())
order = handler.handle(GetCustomerOrder(customer_id="fake-customer-id", order_id="fake-ID"))
```

Unknown orders raise `OrderNotFoundError`. `gorder.order.domain.new_order`
raises `ValueError` when any field is empty.

The stock application:

```python
from gorder.stock.app import GetItems, new_application

app = new_application()
items = app.queries.get_items.handle(GetItems(item_ids=["item1", "item2"]))
```

Missing identifiers raise `StockNotFoundError`, which lists them.

To serve the order endpoints, assemble `gorder.order.app.Application` from
`new_create_order_handler`, `new_update_order_handler` and
`new_get_customer_order_handler` (the create handler needs a stock service such
as a `gorder.rpc.StockClient` from `new_stock_client(config)`, and a channel
from `gorder.broker.connect`), then:

```python
from gorder.order.grpc_server import OrderServer
from gorder.rpc import serve_grpc

serve_grpc("127.0.0.1:5002", OrderServer(app).register)
```

For payments, build the application with
`gorder.payment.app.build_application(order_service, InmemProcessor())` or
`new_application(config)`, which connects to the order service through
discovery, and run `gorder.payment.consumer.Consumer(app, channel).listen()`.
Messages that are not valid orders, or whose payment fails, are rejected
without requeueing.

## What the package does not do

- There is no command that starts the order service or the payment service;
  only `gorder-stock` is installed. Both must be assembled in Python as above.
- There is no HTTP server: the order service has no REST routes and the
  payment service has no webhook endpoint. All service endpoints are gRPC.
- Storage is in memory only; orders and stock are lost when the process ends.