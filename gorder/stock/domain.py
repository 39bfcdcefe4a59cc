"""The stock repository contract and its errors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from gorder.order.domain import Item


class StockNotFoundError(LookupError):
    """Some requested items are not in stock."""

    def __init__(self, missing: Iterable[str], found: Iterable[Item] = ()) -> None:
        self.missing = list(missing)
        self.found = list(found)
        super().__init__(self.missing)

    def __str__(self) -> str:
        return f"these items not found in stock: {','.join(self.missing)}"


class StockRepository(ABC):
    """Storage for stock items."""

    @abstractmethod
    def get_items(self, ids: list[str]) -> list[Item]:
        """Items with the given identifiers, raising if any is missing."""