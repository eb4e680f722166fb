"""
Port (interface) for raw price sources consumed by the ingestion batch.
Infrastructure adapters (e.g. CsvPriceSource) must implement this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator

from crypto_stats.domain.entities.price_point import PricePoint


@dataclass
class PriceChunk:
    """One batch of valid points read from a source, plus the rows rejected on the way."""

    points: list[PricePoint] = field(default_factory=list)
    skipped: int = 0


class IPriceSource(ABC):
    @abstractmethod
    def discover(self) -> list[str]:
        """List the sources (e.g. file paths) available for ingestion."""
        ...

    @abstractmethod
    def read(self, source: str) -> Iterator[PriceChunk]:
        """Yield the points of *source* in chunks, preserving row order."""
        ...
