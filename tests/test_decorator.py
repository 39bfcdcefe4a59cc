import logging
from dataclasses import dataclass

import pytest

from gorder.decorator import (
    LoggingDecorator,
    MetricsDecorator,
    TodoMetrics,
    apply_command_decorators,
    apply_query_decorators,
    generate_action_name,
)

LOGGER_NAME = "tests.decorator"


@dataclass
class CreateOrder:
    customer_id: str


class _Upper:
    def handle(self, cmd):
        return cmd.customer_id.upper()


class _Boom:
    def handle(self, cmd):
        raise RuntimeError("boom")


class RecordingMetrics:
    def __init__(self):
        self.calls = []

    def inc(self, key, value):
        self.calls.append((key, value))


def test_action_name_is_type_name():
    assert generate_action_name(CreateOrder("c1")) == "CreateOrder"


def test_metrics_decorator_on_success():
    metrics = RecordingMetrics()
    result = MetricsDecorator(base=_Upper(), client=metrics).handle(CreateOrder("c1"))
    assert result == "C1"
    assert [key for key, _ in metrics.calls] == [
        "querys.CreateOrder.duration",
        "querys.CreateOrder.failure",
    ]
    assert metrics.calls[0][1] == 0
    assert metrics.calls[1][1] == 1


def test_metrics_decorator_on_error():
    metrics = RecordingMetrics()
    with pytest.raises(RuntimeError, match="boom"):
        MetricsDecorator(base=_Boom(), client=metrics).handle(CreateOrder("c1"))
    assert [key for key, _ in metrics.calls] == [
        "querys.CreateOrder.duration",
        "querys.CreateOrder.success",
    ]


def test_logging_decorator_logs_success(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    cmd = CreateOrder("c1")
    decorator = LoggingDecorator(logger=logging.getLogger(LOGGER_NAME), base=_Upper())
    assert decorator.handle(cmd) == "C1"
    (record,) = caplog.records
    assert record.getMessage() == "Query execute successfully"
    assert record.query == "CreateOrder"
    assert record.query_body == repr(cmd)


def test_logging_decorator_logs_failure(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    decorator = LoggingDecorator(logger=logging.getLogger(LOGGER_NAME), base=_Boom())
    with pytest.raises(RuntimeError):
        decorator.handle(CreateOrder("c1"))
    (record,) = caplog.records
    assert record.levelno == logging.ERROR
    assert "boom" in record.getMessage()
    assert record.getMessage().startswith("Failed to execute query")


def test_apply_command_decorators_chains_both(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    metrics = RecordingMetrics()
    handler = apply_command_decorators(_Upper(), logging.getLogger(LOGGER_NAME), metrics)
    assert handler.handle(CreateOrder("abc")) == "ABC"
    assert len(metrics.calls) == 2
    assert [r.query for r in caplog.records] == ["CreateOrder"]


def test_apply_query_decorators_with_todo_metrics():
    handler = apply_query_decorators(_Upper(), logging.getLogger(LOGGER_NAME), TodoMetrics())
    assert handler.handle(CreateOrder("xyz")) == "XYZ"
    failing = apply_query_decorators(_Boom(), logging.getLogger(LOGGER_NAME), TodoMetrics())
    with pytest.raises(RuntimeError, match="boom"):
        failing.handle(CreateOrder("xyz"))