"""Service registration and discovery through Consul."""

from __future__ import annotations

import _thread
import functools
import logging
import random
import re
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

import requests

from gorder.config import Config

logger = logging.getLogger(__name__)

DEFAULT_CONSUL_ADDR = "127.0.0.1:8500"
_TIMEOUT = 10.0
_INTEGER = re.compile(r"[+-]?\d+")


class Registry(ABC):
    """A place where service instances announce and find each other."""

    @abstractmethod
    def register(self, instance_id: str, service_name: str, host_port: str) -> None:
        """Announce an instance reachable at ``host:port``."""

    @abstractmethod
    def deregister(self, instance_id: str, service_name: str) -> None:
        """Withdraw an instance."""

    @abstractmethod
    def discover(self, service_name: str) -> list[str]:
        """Addresses of healthy instances of a service."""

    @abstractmethod
    def health_check(self, instance_id: str, service_name: str) -> None:
        """Report that an instance is still alive."""


def generate_instance_id(service_name: str) -> str:
    """Random identifier for one instance of a service."""
    return f"{service_name}-{random.randrange(2**63)}"


def _atoi(text: str) -> int:
    return int(text) if _INTEGER.fullmatch(text) else 0


class ConsulRegistry(Registry):
    """Registry backed by the Consul agent HTTP API."""

    def __init__(self, addr: str = DEFAULT_CONSUL_ADDR, session: requests.Session | None = None):
        addr = addr or DEFAULT_CONSUL_ADDR
        if "://" not in addr:
            addr = f"http://{addr}"
        self._base = addr.rstrip("/")
        self._session = session or requests.Session()

    def _put(self, path: str, payload: dict | None = None) -> None:
        response = self._session.put(f"{self._base}{path}", json=payload, timeout=_TIMEOUT)
        response.raise_for_status()

    def register(self, instance_id: str, service_name: str, host_port: str) -> None:
        parts = host_port.split(":")
        if len(parts) != 2:
            raise ValueError("invalid host:port format")
        host, port = parts[0], _atoi(parts[1])
        self._put(
            "/v1/agent/service/register",
            {
                "ID": instance_id,
                "Name": service_name,
                "Address": host,
                "Port": port,
                "Check": {
                    "CheckID": instance_id,
                    "TTL": "5s",
                    "Timeout": "5s",
                    "DeregisterCriticalServiceAfter": "10s",
                },
            },
        )

    def deregister(self, instance_id: str, service_name: str) -> None:
        logger.info(
            "deregister from consul",
            extra={"instanceID": instance_id, "serviceName": service_name},
        )
        self._put(f"/v1/agent/check/deregister/{instance_id}")

    def discover(self, service_name: str) -> list[str]:
        response = self._session.get(
            f"{self._base}/v1/health/service/{service_name}",
            params={"passing": "1"},
            timeout=_TIMEOUT,
        )
        response.raise_for_status()
        return [
            f"{entry['Service']['Address']}:{entry['Service']['Port']}"
            for entry in response.json() or []
        ]

    def health_check(self, instance_id: str, service_name: str) -> None:
        self._put(
            f"/v1/agent/check/update/{instance_id}",
            {"Status": "passing", "Output": "online"},
        )


@functools.lru_cache(maxsize=None)
def _consul_registry(addr: str) -> ConsulRegistry:
    return ConsulRegistry(addr)


def register_to_consul(config: Config, service_name: str) -> Callable[[], None]:
    """Register this service's gRPC address and keep its health check alive.

    Returns a function that stops the heartbeat and deregisters the instance.
    """
    registry = _consul_registry(config.get_str("consul.addr"))
    instance_id = generate_instance_id(service_name)
    grpc_addr = config.sub(service_name).get_str("grpc-addr")
    registry.register(instance_id, service_name, grpc_addr)

    stop = threading.Event()

    def heartbeat() -> None:
        while not stop.is_set():
            try:
                registry.health_check(instance_id, service_name)
            except Exception as exc:
                logger.critical("no heartbeat from %s to registry, err=%s", service_name, exc)
                _thread.interrupt_main()
                return
            if stop.wait(1.0):
                return

    thread = threading.Thread(target=heartbeat, name=f"{service_name}-heartbeat", daemon=True)
    thread.start()
    logger.info("registered to consul", extra={"serviceName": service_name, "addr": grpc_addr})

    def deregister() -> None:
        stop.set()
        thread.join(timeout=5.0)
        registry.deregister(instance_id, service_name)

    return deregister


def get_service_addr(config: Config, service_name: str) -> str:
    """Address of one randomly chosen healthy instance of ``service_name``."""
    registry = _consul_registry(config.get_str("consul.addr"))
    addrs = registry.discover(service_name)
    if not addrs:
        raise LookupError(f"got empty {service_name} addrs from consul")
    logger.info("Discovered %d instance of %s, addrs=%s", len(addrs), service_name, addrs)
    return random.choice(addrs)