import re
from concurrent import futures

import grpc
import pytest
import responses

from gorder.order.domain import Item, ItemWithQuantity
from gorder.rpc import StockClient
from gorder.stock.app import new_application
from gorder.stock.domain import StockNotFoundError
from gorder.stock.server import StockServer, main


@pytest.fixture
def server():
    return StockServer(new_application())


@pytest.fixture
def stock_channel():
    grpc_server = grpc.server(futures.ThreadPoolExecutor(max_workers=2))
    StockServer(new_application()).register(grpc_server)
    port = grpc_server.add_insecure_port("127.0.0.1:0")
    grpc_server.start()
    channel = grpc.insecure_channel(f"127.0.0.1:{port}")
    yield channel
    channel.close()
    grpc_server.stop(None)


def test_get_items_returns_wire_items(server):
    response = server.get_items({"ItemIDs": ["item1"]})
    assert response == {
        "Items": [
            {"ID": "item1", "Name": "stub item 1", "Quantity": 10000, "PriceID": "stub_item1_price_id"}
        ]
    }


def test_get_items_missing_raises(server):
    with pytest.raises(StockNotFoundError):
        server.get_items({"ItemIDs": ["nope"]})


def test_check_if_items_in_stock_marks_in_stock(server):
    response = server.check_if_items_in_stock({"Items": [{"ID": "a", "Quantity": 4}]})
    assert response["InStock"] == 1
    assert response["Items"][0]["ID"] == "a"
    assert response["Items"][0]["Quantity"] == 4


def test_round_trip_get_items(stock_channel):
    client = StockClient(stock_channel)
    assert client.get_items(["item2"]) == [
        Item(id="item2", name="stub item 2", quantity=10000, price_id="stub_item2_price_id")
    ]


def test_round_trip_check(stock_channel):
    client = StockClient(stock_channel)
    response = client.check_if_items_in_stock([ItemWithQuantity(id="item3", quantity=2)])
    assert response.in_stock == 1
    assert [(i.id, i.quantity) for i in response.items] == [("item3", 2)]


def test_round_trip_missing_item_fails(stock_channel):
    client = StockClient(stock_channel)
    with pytest.raises(grpc.RpcError) as excinfo:
        client.get_items(["nope"])
    assert excinfo.value.code() == grpc.StatusCode.UNKNOWN
    assert "nope" in excinfo.value.details()


def _write_config(tmp_path, server_type):
    (tmp_path / "global.yaml").write_text(
        "consul:\n"
        "  addr: consul.test:8500\n"
        "stock:\n"
        "  service-name: stock\n"
        f"  server-to-run: {server_type}\n"
        "  grpc-addr: 127.0.0.1:5002\n",
        encoding="utf-8",
    )


def test_main_rejects_unknown_server_type_and_deregisters(tmp_path):
    _write_config(tmp_path, "carrier-pigeon")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.PUT, re.compile(r"http://consul\.test:8500/.*"), json={})
        with pytest.raises(ValueError, match="unsupported server type"):
            main(["--config-dir", str(tmp_path)])
        urls = [call.request.url for call in rsps.calls]
    assert any("/v1/agent/service/register" in url for url in urls)
    assert any("/v1/agent/check/deregister/stock-" in url for url in urls)


def test_main_http_type_returns_after_deregistering(tmp_path):
    _write_config(tmp_path, "http")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.PUT, re.compile(r"http://consul\.test:8500/.*"), json={})
        outcome = main(["--config-dir", str(tmp_path)])
        urls = [call.request.url for call in rsps.calls]
    assert not outcome
    assert urls[0] == "http://consul.test:8500/v1/agent/service/register"
    assert urls[-1].startswith("http://consul.test:8500/v1/agent/check/deregister/stock-")