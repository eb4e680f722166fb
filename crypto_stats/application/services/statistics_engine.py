"""
Application service: derives window statistics and normalized volatility
from the aggregate queries of an IPriceStore.

Business decisions owned here:
  - A window summary is all-or-nothing: oldest, newest, min and max must all
    be available, otherwise no summary is produced.
  - Normalized price = (max - min) / min, defined only for min > 0.
  - Batch operations iterate allowed symbols in SymbolPolicy order
    (descending), and the day's highest normalized price keeps the first
    symbol encountered on exact ties.

The store and the policy are injected; no persistence library is imported here.
"""

from datetime import date, datetime
from typing import Optional

from crypto_stats.domain.entities.price_point import NormalizedOutput, StatisticSummary
from crypto_stats.domain.policies.symbol_policy import SymbolPolicy
from crypto_stats.domain.ports.price_store_port import IPriceStore
from crypto_stats.domain.time_windows import day_window, month_label, month_window, range_label


def normalize_price(min_price: Optional[float], max_price: Optional[float]) -> Optional[float]:
    """Return (max - min) / min, or None when either bound is missing or min is 0."""
    if min_price is None or max_price is None or min_price == 0:
        return None
    return (max_price - min_price) / min_price


class StatisticsEngine:
    def __init__(self, store: IPriceStore, policy: SymbolPolicy) -> None:
        self._store = store
        self._policy = policy

    def allowed_symbols(self) -> list[str]:
        """Known symbols (at least one stored point) that the policy allows."""
        known = self._store.distinct_symbols(excluding=self._policy.forbidden_symbols)
        return self._policy.allowed_symbols(known)

    # ------------------------------------------------------------------
    # Window statistics
    # ------------------------------------------------------------------

    def window_aggregate(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
        interval: str,
    ) -> Optional[StatisticSummary]:
        max_value = self._store.max_price(symbol, start, end)
        min_value = self._store.min_price(symbol, start, end)
        oldest = self._store.earliest_price(symbol, start, end)
        newest = self._store.latest_price(symbol, start, end)
        if oldest is None or newest is None or min_value is None or max_value is None:
            return None
        return StatisticSummary(
            symbol=symbol,
            interval=interval,
            oldest_value=oldest,
            newest_value=newest,
            min_value=min_value,
            max_value=max_value,
        )

    def statistics_for_month(self, symbol: str, any_day: date) -> Optional[StatisticSummary]:
        start, end = month_window(any_day)
        return self.window_aggregate(symbol, start, end, month_label(any_day))

    def statistics_for_range(
        self, symbol: str, start: datetime, end: datetime
    ) -> Optional[StatisticSummary]:
        return self.window_aggregate(symbol, start, end, range_label(start, end))

    def all_symbols_statistics_for_month(self, any_day: date) -> list[StatisticSummary]:
        summaries = (self.statistics_for_month(symbol, any_day) for symbol in self.allowed_symbols())
        return [summary for summary in summaries if summary is not None]

    # ------------------------------------------------------------------
    # Normalized volatility
    # ------------------------------------------------------------------

    def normalized_for_symbol(self, symbol: str) -> Optional[NormalizedOutput]:
        value = normalize_price(self._store.min_price(symbol), self._store.max_price(symbol))
        if value is None:
            return None
        return NormalizedOutput(symbol=symbol, normalized_price=value)

    def normalized_for_symbol_on_day(self, symbol: str, day: date) -> Optional[NormalizedOutput]:
        start, end = day_window(day)
        value = normalize_price(
            self._store.min_price(symbol, start, end),
            self._store.max_price(symbol, start, end),
        )
        if value is None:
            return None
        return NormalizedOutput(symbol=symbol, normalized_price=value)

    def all_symbols_normalized(self) -> list[NormalizedOutput]:
        outputs = (self.normalized_for_symbol(symbol) for symbol in self.allowed_symbols())
        return [output for output in outputs if output is not None]

    def highest_normalized_on_day(self, day: date) -> Optional[NormalizedOutput]:
        best: Optional[NormalizedOutput] = None
        for symbol in self.allowed_symbols():
            candidate = self.normalized_for_symbol_on_day(symbol, day)
            if candidate is None:
                continue
            if best is None or candidate.normalized_price > best.normalized_price:
                best = candidate
        return best
