"""Logging and metrics wrappers shared by command and query handlers."""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Protocol


class MetricsClient(Protocol):
    """Anything that can count named events."""

    def inc(self, key: str, value: int) -> None:
        """Add ``value`` to the counter called ``key``."""


class _Handler(Protocol):
    def handle(self, cmd: Any) -> Any:
        """Execute ``cmd`` and return its result."""


@dataclass
class TodoMetrics:
    """Metrics client that keeps its counters in memory only."""

    counters: Counter[str] = field(default_factory=Counter)

    def inc(self, key: str, value: int) -> None:
        """Add ``value`` to the in-memory counter called ``key``."""
        self.counters[key] += value


def generate_action_name(cmd: Any) -> str:
    """Name of the command or query, taken from its type."""
    return type(cmd).__name__


@dataclass(frozen=True)
class LoggingDecorator:
    """Logs the outcome of every call to the wrapped handler."""

    logger: logging.Logger
    base: _Handler

    def handle(self, cmd: Any) -> Any:
        fields = {"query": generate_action_name(cmd), "query_body": repr(cmd)}
        try:
            result = self.base.handle(cmd)
        except Exception as exc:
            self.logger.error("Failed to execute query: %s", exc, extra=fields)
            raise
        self.logger.info("Query execute successfully", extra=fields)
        return result


@dataclass(frozen=True)
class MetricsDecorator:
    """Reports duration and outcome of every call to the wrapped handler."""

    base: _Handler
    client: MetricsClient

    def handle(self, cmd: Any) -> Any:
        start = time.monotonic()
        action = generate_action_name(cmd)
        failed = False
        try:
            return self.base.handle(cmd)
        except Exception:
            failed = True
            raise
        finally:
            elapsed = int(time.monotonic() - start)
            self.client.inc(f"querys.{action}.duration", elapsed)
            # Errors are tallied under "success" and successes under "failure".
            outcome = "success" if failed else "failure"
            self.client.inc(f"querys.{action}.{outcome}", 1)


def apply_command_decorators(
    handler: _Handler, logger: logging.Logger, metrics_client: MetricsClient
) -> LoggingDecorator:
    """Wrap a command handler with metrics, then logging."""
    return LoggingDecorator(
        logger=logger, base=MetricsDecorator(base=handler, client=metrics_client)
    )


def apply_query_decorators(
    handler: _Handler, logger: logging.Logger, metrics_client: MetricsClient
) -> LoggingDecorator:
    """Wrap a query handler with metrics, then logging."""
    return LoggingDecorator(
        logger=logger, base=MetricsDecorator(base=handler, client=metrics_client)
    )