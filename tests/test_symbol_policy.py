"""
Tests for the symbol allow/deny policy.
"""

from crypto_stats.domain.policies.symbol_policy import SymbolPolicy


class TestIsForbidden:
    def test_configured_symbol_is_forbidden(self, policy):
        assert policy.is_forbidden("SHIB")
        assert policy.is_forbidden("ETH")

    def test_unlisted_symbol_is_allowed(self, policy):
        assert not policy.is_forbidden("BTC")

    def test_match_is_case_sensitive(self, policy):
        """Lowercase tickers are different symbols and therefore not forbidden."""
        assert not policy.is_forbidden("shib")

    def test_empty_configuration_forbids_nothing(self):
        assert not SymbolPolicy().is_forbidden("SHIB")


class TestAllowedSymbols:
    def test_filters_forbidden_and_sorts_descending(self, policy):
        known = {"BTC", "SHIB", "XRP", "DOGE", "ETH", "LTC"}
        assert policy.allowed_symbols(known) == ["XRP", "LTC", "DOGE", "BTC"]

    def test_order_does_not_depend_on_input_order(self, policy):
        assert policy.allowed_symbols(["BTC", "XRP"]) == policy.allowed_symbols(["XRP", "BTC"])

    def test_nothing_known_gives_empty_list(self, policy):
        assert policy.allowed_symbols(set()) == []

    def test_forbidden_set_is_immutable_snapshot(self):
        source = ["SHIB"]
        policy = SymbolPolicy(source)
        source.append("BTC")
        assert policy.forbidden_symbols == frozenset({"SHIB"})
