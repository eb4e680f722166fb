"""
Port (interface) for price point stores.
Infrastructure adapters (e.g. SqlAlchemyPriceStore) must implement this interface.

Ordering contract: records of one symbol are totally ordered by
(timestamp, insertion sequence). earliest_price() returns the first record in
that order inside the window, latest_price() the last one.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from crypto_stats.domain.entities.price_point import PricePoint


class IPriceStore(ABC):
    @abstractmethod
    def add_all(self, points: Iterable[PricePoint]) -> int:
        """Persist *points* in iteration order. Returns the number written."""
        ...

    @abstractmethod
    def purge(self) -> None:
        """Delete every stored record."""
        ...

    @abstractmethod
    def max_price(
        self,
        symbol: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Optional[float]: ...

    @abstractmethod
    def min_price(
        self,
        symbol: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Optional[float]: ...

    @abstractmethod
    def earliest_price(self, symbol: str, start: datetime, end: datetime) -> Optional[float]: ...

    @abstractmethod
    def latest_price(self, symbol: str, start: datetime, end: datetime) -> Optional[float]: ...

    @abstractmethod
    def distinct_symbols(self, excluding: Iterable[str] = ()) -> list[str]:
        """Return stored symbols not in *excluding*, in descending order."""
        ...

    @abstractmethod
    def list_points(
        self,
        excluding: Iterable[str] = (),
        symbol: Optional[str] = None,
    ) -> list[PricePoint]:
        """Return stored points ordered by symbol desc, then newest first."""
        ...
