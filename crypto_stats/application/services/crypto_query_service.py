"""
Application service: the single query entry point used by the HTTP layer.

Symbol-scoped queries are gated in a fixed order:
  1. forbidden symbol  -> SymbolNotAllowedError (even when nothing is stored)
  2. unknown symbol    -> None
  3. otherwise         -> StatisticsEngine result (may still be None)

Listing queries only ever iterate allowed symbols and never raise.
"""

import logging
from datetime import date, datetime
from typing import Optional

from crypto_stats.application.services.statistics_engine import StatisticsEngine
from crypto_stats.domain.entities.price_point import NormalizedOutput, PricePoint, StatisticSummary
from crypto_stats.domain.exceptions import SymbolNotAllowedError
from crypto_stats.domain.policies.symbol_policy import SymbolPolicy
from crypto_stats.domain.ports.price_store_port import IPriceStore

logger = logging.getLogger(__name__)


class CryptoQueryService:
    def __init__(self, store: IPriceStore, policy: SymbolPolicy) -> None:
        self._store = store
        self._policy = policy
        self._engine = StatisticsEngine(store, policy)

    def _is_queryable(self, symbol: str) -> bool:
        """Apply the forbidden check first, then report whether *symbol* has data."""
        if self._policy.is_forbidden(symbol):
            logger.info("Rejected query for forbidden symbol %s", symbol)
            raise SymbolNotAllowedError(symbol)
        return symbol in self._engine.allowed_symbols()

    def statistics_for_symbol(self, symbol: str, any_day: date) -> Optional[StatisticSummary]:
        """Statistics of *symbol* for the month containing *any_day*.

        Raises:
            SymbolNotAllowedError: if *symbol* is forbidden.
        """
        if not self._is_queryable(symbol):
            return None
        return self._engine.statistics_for_month(symbol, any_day)

    def range_statistics_for_symbol(
        self, symbol: str, start: datetime, end: datetime
    ) -> Optional[StatisticSummary]:
        """Statistics of *symbol* over the inclusive window [start, end].

        Raises:
            SymbolNotAllowedError: if *symbol* is forbidden.
        """
        if not self._is_queryable(symbol):
            return None
        return self._engine.statistics_for_range(symbol, start, end)

    def all_statistics_for_month(self, any_day: date) -> list[StatisticSummary]:
        return self._engine.all_symbols_statistics_for_month(any_day)

    def all_normalized(self) -> list[NormalizedOutput]:
        return self._engine.all_symbols_normalized()

    def highest_normalized_on_day(self, day: date) -> Optional[NormalizedOutput]:
        return self._engine.highest_normalized_on_day(day)

    def list_prices(self, symbol: Optional[str] = None) -> list[PricePoint]:
        """Raw stored points of allowed symbols; a forbidden *symbol* yields nothing."""
        return self._store.list_points(excluding=self._policy.forbidden_symbols, symbol=symbol)
