"""
Domain entities for stored crypto prices and the statistics derived from them.
Zero external dependencies, pure Python dataclasses only.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PricePoint:
    symbol: str
    timestamp: datetime
    price: float


@dataclass(frozen=True)
class StatisticSummary:
    symbol: str
    interval: str
    oldest_value: float
    newest_value: float
    min_value: float
    max_value: float


@dataclass(frozen=True)
class NormalizedOutput:
    symbol: str
    normalized_price: float
