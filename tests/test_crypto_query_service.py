"""
Tests for the policy-gated query service.
"""

from datetime import date, datetime

import pytest

from crypto_stats.application.services.crypto_query_service import CryptoQueryService
from crypto_stats.domain.entities.price_point import PricePoint
from crypto_stats.domain.exceptions import SymbolNotAllowedError

JAN = date(2022, 1, 5)


def _point(symbol, iso, price):
    return PricePoint(symbol=symbol, timestamp=datetime.fromisoformat(iso), price=price)


@pytest.fixture
def service(store, policy):
    store.add_all([
        _point("BTC", "2022-01-01T04:00:00", 46813.21),
        _point("BTC", "2022-01-31T19:00:00", 38415.79),
        _point("DOGE", "2022-01-05T00:00:00", 0.16),
        _point("SHIB", "2022-01-05T00:00:00", 0.00001),
        _point("SHIB", "2022-01-05T12:00:00", 0.0001),
    ])
    return CryptoQueryService(store, policy)


class TestSymbolScopedQueries:
    def test_forbidden_symbol_with_data_is_rejected(self, service):
        with pytest.raises(SymbolNotAllowedError) as exc_info:
            service.statistics_for_symbol("SHIB", JAN)
        assert "SHIB" in str(exc_info.value)
        assert str(exc_info.value) == "Given crypto symbol is not allowed:SHIB"

    def test_forbidden_symbol_without_data_is_rejected(self, service):
        """The forbidden check runs before the existence check."""
        with pytest.raises(SymbolNotAllowedError):
            service.range_statistics_for_symbol("SOL", datetime(2022, 1, 1), datetime(2022, 2, 1))

    def test_rejection_happens_before_touching_storage(self, mock_store, policy):
        service = CryptoQueryService(mock_store, policy)
        with pytest.raises(SymbolNotAllowedError):
            service.statistics_for_symbol("ETH", JAN)
        mock_store.distinct_symbols.assert_not_called()
        mock_store.max_price.assert_not_called()

    def test_allowed_unknown_symbol_is_absent(self, service):
        assert service.statistics_for_symbol("ADA", JAN) is None
        assert service.range_statistics_for_symbol("ADA", datetime(2022, 1, 1), datetime(2023, 1, 1)) is None

    def test_unknown_symbol_does_not_query_aggregates(self, mock_store, policy):
        mock_store.distinct_symbols.return_value = ["BTC"]
        service = CryptoQueryService(mock_store, policy)

        assert service.statistics_for_symbol("ADA", JAN) is None
        mock_store.max_price.assert_not_called()

    def test_known_symbol_outside_window_is_absent(self, service):
        assert service.statistics_for_symbol("BTC", date(2021, 5, 23)) is None

    def test_known_symbol_in_window(self, service):
        summary = service.statistics_for_symbol("BTC", JAN)
        assert summary.oldest_value == 46813.21
        assert summary.newest_value == 38415.79
        assert summary.interval == "2022-01"


class TestListingQueries:
    def test_listings_never_raise_and_omit_forbidden(self, service):
        assert [s.symbol for s in service.all_statistics_for_month(JAN)] == ["DOGE", "BTC"]
        assert [n.symbol for n in service.all_normalized()] == ["DOGE", "BTC"]

    def test_highest_ignores_forbidden_symbol_with_largest_spread(self, service, store):
        store.add_all([_point("DOGE", "2022-01-05T10:00:00", 0.17)])
        assert service.highest_normalized_on_day(JAN).symbol == "DOGE"

    def test_list_prices_all_allowed_newest_first(self, service):
        points = service.list_prices()
        assert [p.symbol for p in points] == ["DOGE", "BTC", "BTC"]
        assert points[1].timestamp > points[2].timestamp

    def test_list_prices_for_forbidden_symbol_is_empty(self, service):
        assert service.list_prices("SHIB") == []

    def test_list_prices_for_one_symbol(self, service):
        assert {p.symbol for p in service.list_prices("BTC")} == {"BTC"}
